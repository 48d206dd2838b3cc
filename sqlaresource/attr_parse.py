import datetime
import sqlalchemy
from .settings import log


def _parse_datetime(attr_val):
    date_str = str(attr_val).strip()
    if date_str.endswith("Z"):
        # javascript Date.toJSON() format
        date_str = date_str[:-1] + "+00:00"
    try:
        return datetime.datetime.fromisoformat(date_str)
    except ValueError:
        pass
    # str(datetime.datetime.now()) => "%Y-%m-%d %H:%M:%S.%f"
    if "." in date_str:
        return datetime.datetime.strptime(date_str, "%Y-%m-%d %H:%M:%S.%f")
    return datetime.datetime.strptime(date_str, "%Y-%m-%d %H:%M:%S")


def _parse_date(attr_val):
    date_str = str(attr_val).strip()
    if "T" in date_str or " " in date_str:
        return _parse_datetime(date_str).date()
    return datetime.date.fromisoformat(date_str)


def _parse_time(attr_val):
    return datetime.time.fromisoformat(str(attr_val).strip())


def _parse_bool(attr_val):
    if isinstance(attr_val, str):
        lowered = attr_val.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
        raise ValueError(f'Invalid boolean "{attr_val}"')
    if isinstance(attr_val, (int, float)):
        return bool(attr_val)
    raise ValueError(f'Invalid boolean "{attr_val}"')


PARSERS = {
    datetime.datetime: _parse_datetime,
    datetime.date: _parse_date,
    datetime.time: _parse_time,
    bool: _parse_bool,
}


def parse_attr(column, attr_val):
    """
    Parse the supplied `attr_val` so it can be saved in the SQLAlchemy `column`

    :param column: SQLAlchemy column
    :param attr_val: json value from the request body or url
    :return: processed value
    :raises ValueError, TypeError: when the value can't be converted to the column type
    """
    if attr_val is None:
        return attr_val

    try:
        python_type = column.type.python_type
    except NotImplementedError as exc:
        """
        This happens when a custom type has been implemented, in which case the user/dev should know how to handle it
        => simply return the attr_val for user-defined types
        """
        log.debug(exc)
        return attr_val

    # skip type coercion on JSON columns, since they could be anything
    if isinstance(column.type, sqlalchemy.types.JSON):
        return attr_val

    if type(attr_val) is python_type:
        return attr_val

    if isinstance(attr_val, (list, dict)):
        raise TypeError(f"Cannot convert {type(attr_val).__name__} to {python_type.__name__}")

    parser = PARSERS.get(python_type, python_type)
    return parser(attr_val)
