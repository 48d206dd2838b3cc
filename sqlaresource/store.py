# store.py: the SQLAlchemy side of a Resource
#
# The resource pipeline only talks to the database through ModelStore:
# - query creation for the model
# - record creation and attribute assignment (with type coercion)
# - validation of required columns before a record is persisted
# - save / delete
#
from typing import Any, Dict, Optional
import sqlalchemy
from sqlalchemy import inspect as sqla_inspect
from sqlalchemy.orm import Query
from .attr_parse import parse_attr
from .errors import RecordValidationError, field_error
from .settings import log


class ModelStore:
    """
    Thin wrapper around a mapped class and the session used to query it
    """

    def __init__(self, model, session=None) -> None:
        """
        :param model: sqla mapped class (e.g. a flask_sqlalchemy db.Model subclass)
        :param session: sqla session or scoped session, the flask_sqlalchemy session of the model is used by default
        """
        self.model = model
        self.mapper = sqla_inspect(model)
        self._session = session

    @property
    def session(self):
        """
        :return: the session used to query and persist records
        """
        if self._session is not None:
            return self._session
        # flask_sqlalchemy query property, bound to the session of the current app context
        return self.model.query.session

    @property
    def name(self) -> str:
        """
        :return: the name of the model collection, i.e. the tablename if this is a db model, the classname otherwise
        """
        return getattr(self.model, "__tablename__", self.model.__name__)

    @property
    def primary_key(self) -> str:
        """
        :return: attribute name of the (first) primary key column
        """
        pk_column = self.mapper.primary_key[0]
        return self.mapper.get_property_by_column(pk_column).key

    @property
    def columns(self) -> Dict[str, Any]:
        """
        :return: attribute name -> sqla Column
        """
        return {prop.key: prop.columns[0] for prop in self.mapper.column_attrs if isinstance(prop.columns[0], sqlalchemy.Column)}

    @property
    def relationships(self) -> Dict[str, Any]:
        """
        :return: relationship name -> sqla RelationshipProperty
        """
        return {rel.key: rel for rel in self.mapper.relationships}

    def query(self) -> Query:
        """
        :return: sqla query object for the model
        """
        return self.session.query(self.model)

    def coerce(self, attr_name: str, value: Any) -> Any:
        """
        Convert a json value to the python type of the `attr_name` column
        :raises ValueError, TypeError: if the value can't be converted
        """
        column = self.columns.get(attr_name)
        if column is None:
            return value
        return parse_attr(column, value)

    def identity_predicate(self, field: str, identifier: Any) -> Optional[Dict[str, Any]]:
        """
        :param field: attribute used to look up a single record
        :param identifier: identifier from the url
        :return: filter_by predicate, None if the identifier can never match
        """
        try:
            return {field: self.coerce(field, identifier)}
        except (ValueError, TypeError) as exc:
            log.debug(f"Invalid identifier {identifier} for {self.name}.{field}: {exc}")
            return None

    def new(self, data: Dict[str, Any]):
        """
        Create an unsaved record from the request data
        Data keys that aren't columns of the model are ignored

        :param data: request body
        :return: transient model instance
        """
        record = self.model()
        self.assign(record, data, allow_primary_key=True)
        return record

    def assign(self, record, data: Dict[str, Any], allow_primary_key: bool = False):
        """
        Set the column attributes of `record` from `data`

        :param record: model instance
        :param data: attribute name -> json value
        :param allow_primary_key: primary key columns are skipped unless this is set
        :raises RecordValidationError: when values can't be converted or are rejected by sqla validators
        """
        errors = {}
        columns = self.columns
        for attr_name, value in data.items():
            column = columns.get(attr_name)
            if column is None:
                log.debug(f"{self.name} has no column {attr_name}")
                continue
            if column.primary_key and not allow_primary_key:
                log.debug(f"Not updating primary key {self.name}.{attr_name}")
                continue
            try:
                value = parse_attr(column, value)
            except (ValueError, TypeError) as exc:
                errors[attr_name] = field_error(attr_name, "cast", f"Cast to {column.type} failed for {attr_name}: {exc}", value)
                continue
            try:
                # sqla @validates methods run here
                setattr(record, attr_name, value)
            except ValueError as exc:
                errors[attr_name] = field_error(attr_name, "user defined", str(exc), value)
        if errors:
            raise RecordValidationError(errors)
        return record

    def validate(self, record) -> None:
        """
        Check that all required columns of `record` have a value:
        non-nullable columns without a default, server default or autoincrement

        :raises RecordValidationError: mapping the missing columns to an error descriptor
        """
        errors = {}
        for attr_name, column in self.columns.items():
            if column.nullable or column.default is not None or column.server_default is not None:
                continue
            if column.primary_key and column.autoincrement in (True, "auto") and isinstance(column.type, sqlalchemy.Integer):
                continue
            if getattr(record, attr_name, None) is None:
                errors[attr_name] = field_error(attr_name, "required", f"{attr_name} is required")
        if errors:
            raise RecordValidationError(errors)

    def save(self, record):
        """
        Validate and persist `record`, the record is refreshed from the database afterwards

        :return: record
        """
        self.validate(record)
        session = self.session
        if record not in session:
            session.add(record)
        session.commit()
        session.refresh(record)
        return record

    def delete(self, record) -> None:
        """
        Delete the record from the database
        """
        session = self.session
        session.delete(record)
        session.commit()
