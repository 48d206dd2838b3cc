# resource.py: exposes a sqla model as a REST resource on a flask app or blueprint
#
#   notes = Resource(Note, page_size=20)
#   notes.serve("/notes", app)
#
# or register the views yourself:
#
#   app.add_url_rule("/notes", view_func=notes.query(), methods=["GET"])
#   app.add_url_rule("/notes/<id>", view_func=notes.detail(select="title"), methods=["GET"])
#
from functools import wraps
from typing import Any, Callable, Iterable, List, Union
from blinker import NamedSignal
from flask import request
from .errors import handle_errors
from .operations import PIPELINES
from .options import resolve, resource_options
from .pipeline import RequestContext
from .response import new_response
from .settings import Settings, log
from .store import ModelStore

EVENTS = ("query", "detail", "insert", "update", "remove")

Middleware = Union[Callable, Iterable[Callable], None]


def as_list(middleware: Middleware) -> List[Callable]:
    """
    :param middleware: None, a single callable or a list of callables
    :return: list of callables
    """
    if middleware is None:
        return []
    if callable(middleware):
        return [middleware]
    return list(middleware)


def wrap_view(view: Callable, before: Middleware = None, after: Middleware = None) -> Callable:
    """
    Wrap a view with middleware, similar to flask's before_request and after_request handlers:
    - before: called without arguments, a return value other than None is used as the response
    - after: called with the response, returns the (modified) response
    """
    before, after = as_list(before), as_list(after)
    if not before and not after:
        return view

    @wraps(view)
    def wrapper(*args, **kwargs):
        for middleware in before:
            result = middleware()
            if result is not None:
                return result
        response = view(*args, **kwargs)
        for middleware in after:
            response = middleware(response)
        return response

    return wrapper


class Subscription:
    """
    Handle returned by Resource.subscribe
    """

    def __init__(self, signal: NamedSignal, receiver: Callable) -> None:
        self.signal = signal
        self.receiver = receiver

    @property
    def event(self) -> str:
        return self.signal.name

    def unsubscribe(self) -> None:
        self.signal.disconnect(self.receiver)


class Resource:
    """This class binds a sqla model to five REST operations

    :param model: sqla mapped class
    :param session: optional sqla session, the flask_sqlalchemy session of the model is used by default
    :param options: resource level options, cfr. sqlaresource.options.Options

    Every operation emits a signal when it succeeded, subscribers are called with the resource as sender:

        def on_insert(resource, request, record):
            ...

        notes.subscribe("insert", on_insert)
    """

    def __init__(self, model, session=None, **options) -> None:
        if model is None:
            raise ValueError("Model argument is required")
        self.model = model
        self.store = ModelStore(model, session=session)
        self.options = resource_options(self.store, options)
        self.signals = {event: NamedSignal(event) for event in EVENTS}

    def __repr__(self) -> str:
        return f"<Resource {self.options.model_name}>"

    # Events
    def subscribe(self, event: str, receiver: Callable) -> Subscription:
        """
        :param event: query, detail, insert, update or remove
        :param receiver: called as receiver(resource, request=..., record=...) (records=... for query)
        :return: Subscription, call its unsubscribe() method to disconnect the receiver
        """
        signal = self._signal(event)
        signal.connect(receiver, weak=False)
        return Subscription(signal, receiver)

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.unsubscribe()

    def emit(self, event: str, request, **kwargs: Any) -> None:
        self._signal(event).send(self, request=request, **kwargs)

    def _signal(self, event: str) -> NamedSignal:
        try:
            return self.signals[event]
        except KeyError:
            raise ValueError(f'Unknown event "{event}", expected one of {", ".join(EVENTS)}')

    # Handler factories
    def _handler(self, operation: str, call_options: dict) -> Callable:
        """
        :return: flask view function executing the `operation` pipeline
        """
        options = resolve(self.options, call_options, operation)
        pipeline = PIPELINES[operation]
        store = self.store

        @handle_errors(lambda: store.session)
        def view(**kwargs):
            identifier = kwargs.get(Settings.ID_PARAM)
            ctx = RequestContext(self, operation, options, request._get_current_object(), new_response(), identifier=identifier)
            return pipeline.run(ctx)

        view.__name__ = f"{options.model_name}_{operation}"
        return view

    def query(self, **options) -> Callable:
        """
        List view: GET /path?q=..&sort=..&select=..&populate=..&p=..&pageSize=..
        :param options: page_size, max_page_size, projection, select, sort, populate, base_url, output_format, ...
        """
        return self._handler("query", options)

    def detail(self, **options) -> Callable:
        """
        Single record view: GET /path/<id>?select=..&populate=..
        """
        return self._handler("detail", options)

    def insert(self, **options) -> Callable:
        """
        Create view: POST /path
        """
        return self._handler("insert", options)

    def update(self, **options) -> Callable:
        """
        Update view: PATCH /path/<id>
        """
        return self._handler("update", options)

    def remove(self, **options) -> Callable:
        """
        Delete view: DELETE /path/<id>
        """
        return self._handler("remove", options)

    def serve(self, path: str, server, before: Middleware = None, after: Middleware = None) -> None:
        """
        Register the five views on a flask app or blueprint

        :param path: collection url, e.g. "/notes"
        :param server: flask app or blueprint
        :param before: middleware called before each view, defaults to the resource `before` option
        :param after: middleware called with each response, defaults to the resource `after` option
        """
        if before is None:
            before = self.options.before
        if after is None:
            after = self.options.after

        debug = getattr(server, "debug", False)
        if debug:
            log.setLevel("DEBUG")

        path = path.rstrip("/")
        collection_url = Settings.RESOURCE_URL_FMT.format(path)
        instance_url = Settings.INSTANCE_URL_FMT.format(path, Settings.ID_PARAM)
        endpoint_prefix = path.strip("/").replace("/", "_") or self.options.model_name

        routes = [
            (collection_url, "query", "GET"),
            (instance_url, "detail", "GET"),
            (collection_url, "insert", "POST"),
            (instance_url, "update", "PATCH"),
            (instance_url, "remove", "DELETE"),
        ]
        for url, operation, method in routes:
            view = wrap_view(getattr(self, operation)(), before, after)
            endpoint = Settings.ENDPOINT_FMT.format(endpoint_prefix, operation)
            log.info(f"Exposing {self.options.model_name} {operation} on {method} {url}, endpoint: {endpoint}")
            server.add_url_rule(url or "/", endpoint=endpoint, view_func=view, methods=[method])
