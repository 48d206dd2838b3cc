# Exception Handlers
#
# The exceptions will be caught in handle_errors and formatted, for example:
# {
#      "code": "ResourceNotFound",
#      "message": "5f1c0e90"
# }
#
# Store errors that are not validation failures are not formatted here,
# they propagate to flask and result in the app's 500 handling
#
from functools import wraps
from http import HTTPStatus
from typing import Any, Callable, Dict, Optional
from flask import jsonify
from .settings import log


class ResourceError(Exception):
    """
    Base class for the errors that are rendered as a json response
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    code = "InternalError"
    message = ""

    def __init__(self, message: str = "", status_code: Optional[int] = None) -> None:
        Exception.__init__(self, message)
        if status_code is not None:
            self.status_code = status_code
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """
        :return: the json response body
        """
        return {"code": self.code, "message": self.message}


class QueryError(ResourceError):
    """
    This exception is raised when the `q` query parameter isn't a json object
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    code = "InvalidQuery"

    def __init__(self, errors: str) -> None:
        ResourceError.__init__(self, "Query is not a valid JSON object")
        self.errors = errors
        log.warning("QueryError: %s", errors)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class InvalidContentError(ResourceError):
    """
    This exception is raised when the request body is missing or malformed
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    code = "InvalidContent"

    def __init__(self, message: str = "", status_code: Optional[int] = None) -> None:
        ResourceError.__init__(self, message, status_code)
        log.warning("InvalidContentError: %s", message)


class NotFoundError(ResourceError):
    """
    This exception is raised when no record matches the requested identifier
    the identifier is sent back to the client in the message
    """

    status_code = HTTPStatus.NOT_FOUND.value
    code = "ResourceNotFound"

    def __init__(self, identifier: Any = "", status_code: Optional[int] = None) -> None:
        ResourceError.__init__(self, str(identifier), status_code)
        log.info("Not found: %s", identifier)


class ValidationError(ResourceError):
    """
    This exception is raised when the store rejected a record,
    `errors` maps the field names to the per-field error descriptors
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    code = "ValidationError"

    def __init__(self, errors: Dict[str, Dict[str, Any]], message: str = "Validation failed") -> None:
        ResourceError.__init__(self, message)
        self.errors = errors
        log.warning("ValidationError: %s", ", ".join(errors))

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class RecordValidationError(Exception):
    """
    Raised by the store adapter when a record fails validation before it is persisted
    """

    def __init__(self, errors: Dict[str, Dict[str, Any]]) -> None:
        Exception.__init__(self, f"Validation failed: {', '.join(errors)}")
        self.errors = errors


def field_error(path: str, kind: str, message: str, value: Any = None) -> Dict[str, Any]:
    """
    :return: error descriptor for a single field
    """
    return {"message": message, "kind": kind, "path": path, "value": value}


def translate_error(exc: BaseException) -> BaseException:
    """
    Normalize store validation failures into the externally visible ValidationError
    :param exc: exception raised while executing an operation
    :return: ValidationError or the unmodified exception
    """
    if isinstance(exc, RecordValidationError):
        return ValidationError(exc.errors)
    return exc


def handle_errors(session_getter: Callable[[], Any]) -> Callable:
    """Decorator for the generated views
    - convert ResourceErrors to a json response
    - roll back the session when something went wrong

    :param session_getter: returns the sqla session used by the view
    :return: decorator
    """

    def decorator(fun: Callable) -> Callable:
        @wraps(fun)
        def method_wrapper(*args, **kwargs):
            try:
                return fun(*args, **kwargs)
            except ResourceError as exc:
                session_getter().rollback()
                response = jsonify(exc.to_dict())
                response.status_code = exc.status_code
                return response
            except Exception as exc:
                session_getter().rollback()
                log.exception(exc)
                raise

        return method_wrapper

    return decorator
