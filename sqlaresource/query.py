# Query building: request parameters and options -> sqla query
#
# Applied in order:
# - base predicate (identifier lookup for single records)
# - q: json object forwarded to filter_by
# - the resource filter(request, response) predicate
# - select, populate, sort
#
import json
from typing import Any, Iterable, List, Optional
from sqlalchemy.orm import Query, defer, load_only, selectinload
from .errors import QueryError
from .settings import log


def split_csv(value: Optional[str]) -> List[str]:
    """
    :return: list of the non-empty comma-delimited items of value
    """
    if not value:
        return []
    return [item.strip() for item in str(value).split(",") if item.strip()]


def parse_q(raw_q: Optional[str]) -> Optional[dict]:
    """
    :param raw_q: value of the "q" query parameter
    :return: the parsed json object, None if no q was given
    :raises QueryError: if raw_q isn't a json object
    """
    if raw_q is None or raw_q == "":
        return None
    try:
        result = json.loads(raw_q)
    except ValueError as exc:
        raise QueryError(str(exc))
    if not isinstance(result, dict):
        raise QueryError(f"Expected an object, got {type(result).__name__}")
    return result


def apply_predicate(query: Query, predicate: Any) -> Query:
    """
    Merge a predicate into the query:
    - mappings are passed to filter_by
    - sqla expressions (or a list of them) are passed to filter
    """
    if predicate is None:
        return query
    if isinstance(predicate, dict):
        return query.filter_by(**predicate) if predicate else query
    if isinstance(predicate, (list, tuple)):
        return query.filter(*predicate) if predicate else query
    return query.filter(predicate)


def apply_select(query: Query, store, select: Optional[str]) -> Query:
    """
    :param select: csv of column names, a "-" prefix excludes the column
    """
    columns = store.columns
    included, excluded = [], []
    for name in split_csv(select):
        exclude = name.startswith("-")
        name = name.lstrip("-")
        if name not in columns:
            log.debug(f"{store.name} has no column {name} to select")
            continue
        (excluded if exclude else included).append(getattr(store.model, name))
    if not included and not excluded:
        return query
    options = []
    if included:
        options.append(load_only(*included))
    options += [defer(attr) for attr in excluded]
    # overwrite the state of records that are already present in the session
    return query.options(*options).populate_existing()


def apply_populate(query: Query, store, populate: Optional[str]) -> Query:
    """
    :param populate: csv of relationship names
    """
    relationships = store.relationships
    for name in split_csv(populate):
        if name not in relationships:
            log.debug(f"{store.name} has no relationship {name} to populate")
            continue
        query = query.options(selectinload(getattr(store.model, name)))
    return query


def apply_sort(query: Query, store, sort: Optional[str]) -> Query:
    """
    sort by csv sort= values, the primary key is used when no valid sort attribute is given

    :param sort: csv of column names, a "-" prefix sorts in descending order
    """
    columns = store.columns
    order_by = []
    for sort_attr in split_csv(sort):
        # if the sort column starts with - , then we want to do a reverse sort
        reverse = sort_attr.startswith("-")
        sort_attr = sort_attr.lstrip("-").lstrip("+")
        if sort_attr not in columns:
            log.debug(f"{store.name} has no attribute {sort_attr} to sort")
            continue
        attr = getattr(store.model, sort_attr)
        order_by.append(attr.desc() if reverse else attr.asc())
    if not order_by:
        order_by = [getattr(store.model, store.primary_key)]
    return query.order_by(*order_by)


class QueryBuilder:
    """
    Builds the primary (and count) queries for a request
    """

    def __init__(self, store, options, request, response) -> None:
        self.store = store
        self.options = options
        self.request = request
        self.response = response

    def arg(self, name: str) -> Optional[str]:
        return self.request.args.get(name)

    def base_query(self, predicates: Iterable[Any]) -> Query:
        """
        :param predicates: predicates to merge into the query (identifier lookup, q)
        :return: query including the resource filter
        """
        query = self.store.query()
        for predicate in predicates:
            query = apply_predicate(query, predicate)
        if self.options.filter is not None:
            query = apply_predicate(query, self.options.filter(self.request, self.response))
        return query

    def shape(self, query: Query, sort: bool = False) -> Query:
        """
        Apply select, populate and (for lists) sort
        select set in the options takes precedence over the request,
        populate and sort request parameters take precedence over the options
        """
        query = apply_select(query, self.store, self.options.select or self.arg("select"))
        query = apply_populate(query, self.store, self.arg("populate") or self.options.populate)
        if sort:
            query = apply_sort(query, self.store, self.arg("sort") or self.options.sort)
        return query

    def list_queries(self):
        """
        :return: primary query, count query
        :raises QueryError: when the q parameter is invalid, nothing is queried in that case
        """
        q = parse_q(self.arg("q"))
        query = self.base_query([q])
        count_query = query
        return self.shape(query, sort=True), count_query

    def detail_query(self, identifier: Any, shape: bool = True) -> Optional[Query]:
        """
        :param identifier: value of the query_string field
        :return: query for a single record, None if the identifier can't match a record
        """
        predicate = self.store.identity_predicate(self.options.query_string, identifier)
        if predicate is None:
            return None
        query = self.base_query([predicate])
        return self.shape(query) if shape else query
