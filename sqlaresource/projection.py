"""
Projections transform records before they are serialized

A projection is called as `projection(request, record)` and returns the value that will be sent
to the client, e.g.

    def public_note(request, note):
        return {"title": note.title, "date": note.date}

    notes = Resource(Note, list_projection=public_note)
"""
from typing import Any, Callable, List, Sequence
from .errors import NotFoundError


def project(request, record: Any, projection: Callable, identifier: Any = None) -> Any:
    """
    :param record: fetched record, None if nothing was found
    :param identifier: requested identifier, returned in the not found error
    :raises NotFoundError: when there is no record
    """
    if record is None:
        raise NotFoundError(identifier)
    return projection(request, record)


def project_list(request, records: Sequence, projection: Callable) -> List:
    """
    Apply `projection` to every record, the order of the records is preserved.
    The first exception raised by the projection aborts the whole list.
    """
    return [projection(request, record) for record in records]
