# flake8: noqa: F401
#
# Expose sqla models as REST resources on flask:
#
#   notes = Resource(Note)
#   notes.serve("/notes", app)
#
from .settings import Settings, log
from .errors import ResourceError, QueryError, InvalidContentError, NotFoundError, ValidationError, RecordValidationError
from .options import Options, resolve, REGULAR, JSON_API
from .pagination import paginate
from .json_encoder import RecordJSONEncoder, to_dict
from .store import ModelStore
from .resource import Resource, Subscription
from .__about__ import __version__, __description__

__all__ = (
    "__version__",
    "__description__",
    #
    "Resource",
    "Subscription",
    "ModelStore",
    # options:
    "Options",
    "resolve",
    "REGULAR",
    "JSON_API",
    "paginate",
    # serialization:
    "RecordJSONEncoder",
    "to_dict",
    # Errors:
    "ResourceError",
    "QueryError",
    "InvalidContentError",
    "NotFoundError",
    "ValidationError",
    "RecordValidationError",
    #
    "Settings",
    "log",
)
