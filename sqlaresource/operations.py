# The steps of the five resource operations
#
# query : build queries -> fetch page & count -> link header -> total count header -> project -> emit -> send 200
# detail: build query -> fetch -> project or 404 -> emit -> send 200
# insert: build record -> before_save -> save -> Location header -> project -> emit -> send 201
# update: build query -> fetch -> 404 -> 400 without body -> merge body -> before_save -> save -> Location header -> project -> emit -> send 200
# remove: build query -> fetch -> 404 -> delete -> send 200 -> emit
#
from http import HTTPStatus
from .errors import InvalidContentError, NotFoundError
from .json_encoder import to_dict
from .pagination import link_header, link_set, paginate, trim
from .pipeline import Pipeline, RequestContext
from .projection import project, project_list
from .query import QueryBuilder
from .response import send
from .settings import Settings


def _builder(ctx: RequestContext) -> QueryBuilder:
    return QueryBuilder(ctx.store, ctx.options, ctx.request, ctx.response)


def _json_body(ctx: RequestContext):
    return ctx.request.get_json(silent=True)


def build_list_queries(ctx: RequestContext) -> None:
    args = ctx.request.args
    ctx.window = paginate(args.get(Settings.PAGE_PARAM), args.get(Settings.PAGE_SIZE_PARAM), ctx.options)
    ctx.query, ctx.count_query = _builder(ctx).list_queries()


def fetch_page_and_count(ctx: RequestContext) -> None:
    """
    Fetch one record more than the page size to find out whether there is a next page,
    the count query shares the filters of the primary query
    """
    # sequential: the flask_sqlalchemy session is bound to the request thread
    window = ctx.window
    rows = ctx.query.offset(window.skip).limit(window.limit).all()
    ctx.total = ctx.count_query.count()
    ctx.records, ctx.has_more = trim(rows, window)


def set_link_header(ctx: RequestContext) -> None:
    request = ctx.request
    query_string = request.query_string.decode("utf-8", "replace")
    links = link_set(ctx.window, ctx.total, ctx.has_more, ctx.options.base_url, request.path, query_string)
    ctx.response.headers["link"] = link_header(links)


def set_total_count(ctx: RequestContext) -> None:
    ctx.response.headers["X-Total-Count"] = str(ctx.total)


def project_records(ctx: RequestContext) -> None:
    ctx.payload = project_list(ctx.request, ctx.records, ctx.options.projection(ctx.operation))


def build_detail_query(ctx: RequestContext) -> None:
    ctx.query = _builder(ctx).detail_query(ctx.identifier)


def build_lookup_query(ctx: RequestContext) -> None:
    """
    Single record lookup without select and populate, used before modifying the record
    """
    ctx.query = _builder(ctx).detail_query(ctx.identifier, shape=False)


def fetch_one(ctx: RequestContext) -> None:
    ctx.record = ctx.query.first() if ctx.query is not None else None


def require_record(ctx: RequestContext) -> None:
    if ctx.record is None:
        raise NotFoundError(ctx.identifier)


def require_body(ctx: RequestContext) -> None:
    body = _json_body(ctx)
    if body is None:
        raise InvalidContentError("No update data sent")
    if not isinstance(body, dict):
        raise InvalidContentError("Update data is not a JSON object")


def build_record(ctx: RequestContext) -> None:
    body = _json_body(ctx)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise InvalidContentError("Request data is not a JSON object")
    ctx.record = ctx.store.new(body)


def merge_body(ctx: RequestContext) -> None:
    ctx.store.assign(ctx.record, _json_body(ctx))


def before_save(ctx: RequestContext) -> None:
    ctx.options.before_save(ctx.request, ctx.record)


def save(ctx: RequestContext) -> None:
    ctx.store.save(ctx.record)


def set_insert_location(ctx: RequestContext) -> None:
    identifier = getattr(ctx.record, ctx.options.query_string)
    ctx.response.headers["Location"] = f"{ctx.options.base_url}{ctx.request.path.rstrip('/')}/{identifier}"


def set_update_location(ctx: RequestContext) -> None:
    ctx.response.headers["Location"] = f"{ctx.options.base_url}{ctx.request.path}"


def project_record(ctx: RequestContext) -> None:
    ctx.payload = project(ctx.request, ctx.record, ctx.options.projection(ctx.operation), ctx.identifier)


def delete_record(ctx: RequestContext) -> None:
    # serialize before the delete, the record is detached afterwards
    ctx.payload = to_dict(ctx.record) if ctx.options.return_removed else None
    ctx.store.delete(ctx.record)


def send_ok(ctx: RequestContext) -> None:
    send(ctx.response, HTTPStatus.OK.value, ctx.payload, ctx.options)


def send_created(ctx: RequestContext) -> None:
    send(ctx.response, HTTPStatus.CREATED.value, ctx.payload, ctx.options)


def send_removed(ctx: RequestContext) -> None:
    if ctx.options.return_removed:
        send_ok(ctx)
    else:
        ctx.response.set_data("{}")
        ctx.response.status_code = HTTPStatus.OK.value


def emit(event: str):
    """
    :return: step notifying the resource subscribers of `event`
    """

    def step(ctx: RequestContext) -> None:
        if event == "query":
            ctx.resource.emit(event, ctx.request, records=ctx.records)
        else:
            ctx.resource.emit(event, ctx.request, record=ctx.record)

    step.__name__ = f"emit_{event}"
    return step


PIPELINES = {
    "query": Pipeline(
        "query",
        [build_list_queries, fetch_page_and_count, set_link_header, set_total_count, project_records, emit("query"), send_ok],
    ),
    "detail": Pipeline("detail", [build_detail_query, fetch_one, project_record, emit("detail"), send_ok]),
    "insert": Pipeline("insert", [build_record, before_save, save, set_insert_location, project_record, emit("insert"), send_created]),
    "update": Pipeline(
        "update",
        [
            build_lookup_query,
            fetch_one,
            require_record,
            require_body,
            merge_body,
            before_save,
            save,
            set_update_location,
            project_record,
            emit("update"),
            send_ok,
        ],
    ),
    "remove": Pipeline("remove", [build_lookup_query, fetch_one, require_record, delete_record, send_removed, emit("remove")]),
}
