# Pagination
#
# The list operation fetches page_size + 1 records: when the extra record is returned
# there is a next page, the extra record is dropped before the response is serialized.
#
# Pagination links are sent in the "link" header (RFC5988):
#   link: <http://host/notes?p=0>; rel="first", <http://host/notes?p=2>; rel="next", ...
#
import math
from typing import List, NamedTuple, Optional, Sequence, Tuple
from urllib.parse import parse_qsl, urlencode
from .config import get_int_config
from .settings import Settings


class PageWindow(NamedTuple):
    page: int
    page_size: int
    skip: int
    limit: int


def _parse_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def paginate(raw_page, raw_page_size, options) -> PageWindow:
    """
    :param raw_page: "p" request parameter, page index starting at 0
    :param raw_page_size: "pageSize" request parameter
    :param options: resolved Options (page_size and max_page_size are used)
    :return: PageWindow

    Invalid or negative page values reset to page 0,
    invalid, zero or negative page sizes fall back to options.page_size,
    the offset is clamped to the MAX_PAGE_OFFSET configuration
    """
    page = _parse_int(raw_page)
    if page is None or page < 0:
        page = 0

    page_size = _parse_int(raw_page_size)
    if page_size is None or page_size <= 0:
        page_size = options.page_size
    page_size = max(min(page_size, options.max_page_size), 0)

    skip = min(page_size * page, get_int_config("MAX_PAGE_OFFSET"))
    return PageWindow(page=page, page_size=page_size, skip=skip, limit=page_size + 1)


def trim(records: Sequence, window: PageWindow) -> Tuple[List, bool]:
    """
    :param records: records fetched with window.limit
    :return: records of the page, whether more records exist
    """
    records = list(records)
    has_more = len(records) > window.page_size
    if has_more:
        records = records[: window.page_size]
    return records, has_more


def last_page(total: int, page_size: int) -> int:
    """
    :return: index of the last page, 0 if there are no records
    """
    if page_size <= 0:
        return 0
    return max(math.ceil(total / page_size) - 1, 0)


def page_url(base_url: str, path: str, query_args: Sequence[Tuple[str, str]], page: int) -> str:
    """
    :param query_args: the original query string arguments, in order
    :return: url of `page`, only the page parameter is rewritten
    """
    page_param = Settings.PAGE_PARAM
    args = []
    replaced = False
    for key, value in query_args:
        if key == page_param:
            if replaced:
                continue
            value = str(page)
            replaced = True
        args.append((key, value))
    if not replaced:
        args.append((page_param, str(page)))
    return f"{base_url}{path}?{urlencode(args)}"


def link_set(window: PageWindow, total: int, has_more: bool, base_url: str, path: str, query_string: str) -> List[Tuple[str, str]]:
    """
    :param window: current page window
    :param total: total count of matching records
    :param has_more: whether a next page exists
    :param query_string: raw request query string
    :return: list of (url, rel) tuples: first, prev, next, last
    """
    query_args = parse_qsl(query_string, keep_blank_values=True)

    def link(page, rel):
        return page_url(base_url, path, query_args, page), rel

    links = [link(0, "first")]
    if window.page > 0:
        links.append(link(window.page - 1, "prev"))
    if has_more:
        links.append(link(window.page + 1, "next"))
    links.append(link(last_page(total, window.page_size), "last"))
    return links


def link_header(links: Sequence[Tuple[str, str]]) -> str:
    """
    :return: "link" header value
    """
    return ", ".join(f'<{url}>; rel="{rel}"' for url, rel in links)
