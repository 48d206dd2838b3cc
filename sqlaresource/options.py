# Option resolution
#
# Three layers, applied field by field:
#   call-site options (resource.query(page_size=10)) > resource options (Resource(Model, page_size=20)) > built-in defaults
# Resolution never mutates its inputs, a new frozen Options instance is returned every time
#
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Mapping, Optional, Sequence
from .config import get_int_config
from .settings import log

REGULAR = "regular"
JSON_API = "json-api"
OUTPUT_FORMATS = (REGULAR, JSON_API)

# operation name -> projection option used by that operation
PROJECTIONS = {
    "query": "list_projection",
    "detail": "detail_projection",
    "insert": "insert_projection",
    "update": "update_projection",
}


def identity_projection(request, record):
    """
    Default projection: the record is returned unchanged
    """
    return record


def noop_before_save(request, record):
    """
    Default before_save hook
    """
    return None


@dataclass(frozen=True)
class Options:
    """
    Fully populated option set used by a single operation handler
    """

    page_size: int = 100
    max_page_size: int = 100
    base_url: str = ""
    output_format: str = REGULAR
    model_name: Optional[str] = None
    query_string: Optional[str] = None
    filter: Optional[Callable] = None
    select: Optional[str] = None
    sort: Optional[str] = None
    populate: Optional[str] = None
    list_projection: Callable = identity_projection
    detail_projection: Callable = identity_projection
    insert_projection: Callable = identity_projection
    update_projection: Callable = identity_projection
    global_projection: Optional[Callable] = None
    before_save: Callable = noop_before_save
    before: Sequence[Callable] = ()
    after: Sequence[Callable] = ()
    return_removed: bool = True

    @property
    def is_json_api(self) -> bool:
        return self.output_format == JSON_API

    def projection(self, operation: str) -> Callable:
        """
        :param operation: query, detail, insert or update
        :return: the projection function configured for the operation
        """
        return getattr(self, PROJECTIONS[operation])


OPTION_NAMES = frozenset(f.name for f in fields(Options))


def builtin_options(store) -> Options:
    """
    :param store: ModelStore of the resource
    :return: the built-in defaults for the model
    """
    return Options(
        page_size=get_int_config("DEFAULT_PAGE_SIZE"),
        max_page_size=get_int_config("MAX_PAGE_SIZE"),
        model_name=store.name,
        query_string=store.primary_key,
    )


def resolve(defaults: Options, call_options: Optional[Mapping[str, Any]] = None, operation: Optional[str] = None) -> Options:
    """
    Merge the call-site options over `defaults`

    :param defaults: resource level options (already merged with the built-in defaults)
    :param call_options: call-site options, None values are treated as absent
    :param operation: operation name, used to map the `projection` shortcut to the operation's projection option
    :return: new Options instance
    """
    changes = {}
    for name, value in (call_options or {}).items():
        if value is None:
            continue
        if name == "projection":
            if operation not in PROJECTIONS:
                log.debug(f"projection option ignored for {operation}")
                continue
            name = PROJECTIONS[operation]
        elif name not in OPTION_NAMES:
            log.debug(f"Unknown option {name}")
            continue
        changes[name] = value
    if changes.get("output_format", REGULAR) not in OUTPUT_FORMATS:
        log.warning(f"Unknown output format {changes.pop('output_format')}, keeping {defaults.output_format}")
    return replace(defaults, **changes)


def resource_options(store, options: Optional[Mapping[str, Any]] = None) -> Options:
    """
    Create the resource level options:
    the `global_projection` seeds every operation projection that isn't set explicitly

    :param store: ModelStore of the resource
    :param options: options passed to the Resource constructor
    :return: Options instance
    """
    options = dict(options or {})
    global_projection = options.get("global_projection")
    if global_projection is not None:
        for projection_name in PROJECTIONS.values():
            if options.get(projection_name) is None:
                options[projection_name] = global_projection
    return resolve(builtin_options(store), options)
