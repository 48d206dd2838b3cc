# Request pipeline
#
# Every operation is an ordered list of steps operating on a RequestContext.
# The steps run one after the other, the first exception stops the pipeline:
# nothing downstream runs (no event is emitted, no response body is written).
#
from typing import Any, Callable, Iterable, List, Optional, Sequence
from .errors import translate_error
from .settings import log


class RequestContext:
    """
    Per-request state shared by the pipeline steps
    """

    def __init__(self, resource, operation: str, options, request, response, identifier: Any = None) -> None:
        """
        :param resource: Resource executing the operation
        :param operation: query, detail, insert, update or remove
        :param options: resolved Options
        :param request: flask request
        :param response: flask response under construction, filled in by the last step
        :param identifier: the <id> url parameter for single record operations
        """
        self.resource = resource
        self.store = resource.store
        self.operation = operation
        self.options = options
        self.request = request
        self.response = response
        self.identifier = identifier
        self.query = None
        self.count_query = None
        self.window = None
        self.record = None
        self.records: List = []
        self.total: Optional[int] = None
        self.has_more = False
        self.payload: Any = None


Step = Callable[[RequestContext], None]


class Pipeline:
    """
    Ordered sequence of steps, evaluated until the first failure
    """

    def __init__(self, name: str, steps: Sequence[Step]) -> None:
        self.name = name
        self.steps = tuple(steps)

    def __iter__(self) -> Iterable[Step]:
        return iter(self.steps)

    def run(self, ctx: RequestContext):
        """
        :param ctx: request context
        :return: ctx.response
        :raises: the first exception raised by a step, store validation failures are translated
        """
        for step in self.steps:
            log.debug(f"{self.name}: {step.__name__}")
            try:
                step(ctx)
            except Exception as exc:
                translated = translate_error(exc)
                if translated is exc:
                    raise
                raise translated from exc
        return ctx.response
