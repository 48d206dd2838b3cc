# record to json encoding

import datetime
import decimal
import json
from typing import Any, Dict
from uuid import UUID
from sqlalchemy import inspect as sqla_inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm.state import InstanceState
from .settings import log


def is_record(obj: Any) -> bool:
    """
    :return: whether obj is an instance of a sqla mapped class
    """
    try:
        return isinstance(sqla_inspect(obj), InstanceState)
    except NoInspectionAvailable:
        return False


def to_dict(record, nested: bool = True) -> Dict[str, Any]:
    """
    Create a dictionary with the loaded attributes of a record:
    - columns that weren't excluded from the query (select)
    - relationships that have been loaded (populate), serialized one level deep

    :param record: sqla model instance
    :param nested: include loaded relationships
    :return: dictionary
    """
    state = sqla_inspect(record)
    unloaded = state.unloaded
    result = {}
    for attr in state.mapper.column_attrs:
        if attr.key in unloaded:
            continue
        result[attr.key] = getattr(record, attr.key)
    if not nested:
        return result
    for rel in state.mapper.relationships:
        if rel.key in unloaded:
            continue
        related = getattr(record, rel.key)
        if related is None:
            result[rel.key] = None
        elif rel.uselist:
            result[rel.key] = [to_dict(item, nested=False) for item in related]
        else:
            result[rel.key] = to_dict(related, nested=False)
    return result


class RecordJSONEncoder(json.JSONEncoder):
    """
    JSON encoding for sqla records and common types
    """

    # pylint: disable=too-many-return-statements,method-hidden
    def default(self, obj):
        """
        override the default json encoding
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        if is_record(obj):
            return to_dict(obj)
        if isinstance(obj, datetime.timedelta):
            return str(obj)
        if isinstance(obj, (datetime.datetime, datetime.date, datetime.time)):
            return obj.isoformat()
        if isinstance(obj, set):
            return list(obj)
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, decimal.Decimal):
            return float(obj)
        if isinstance(obj, bytes):
            if obj == b"":
                return ""
            log.debug("RecordJSONEncoder: serializing bytes obj")
            return obj.hex()
        return super().default(obj)


def dumps(obj: Any) -> str:
    """
    :return: json string
    """
    return json.dumps(obj, cls=RecordJSONEncoder)
