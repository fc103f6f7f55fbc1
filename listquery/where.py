"""
SQLAlchemy rendition of the list query filter and sort steps.

Mirrors :mod:`listquery.evaluator` clause by clause: search is a
case-insensitive substring match OR-ed across the search fields, exact
filters are AND-ed, and a date range is ``[start, day after end)``.
"""
from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import DateTime, and_, func, or_
from sqlalchemy.sql.elements import ColumnElement

from .descriptor import DateRange, QueryDescriptor, SortSpec
from .errors import QueryValidationError
from .resources import ResourceSpec


def _column(model, name: str):
    col = getattr(model, name, None)
    if col is None:
        raise QueryValidationError(f"Unknown field '{name}' for {model.__tablename__}")
    return col


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_clause(model, fields, term: Optional[str]) -> Optional[ColumnElement[Any]]:
    if not term:
        return None
    pattern = f"%{_escape_like(term.lower())}%"
    ors = [func.lower(_column(model, f)).like(pattern, escape="\\") for f in fields]
    return or_(*ors) if ors else None


def date_clause(model, field: Optional[str], date_range: Optional[DateRange]) -> Optional[ColumnElement[Any]]:
    if date_range is None or field is None:
        return None
    col = _column(model, field)
    # bind bounds in the column's own type; SQLite compares dates as text
    if isinstance(col.type, DateTime):
        start, end = date_range.half_open()
    else:
        start, end = date_range.date_bounds()
    return and_(col >= start, col < end)


def build_where(model, resource: ResourceSpec, descriptor: QueryDescriptor) -> List[ColumnElement[Any]]:
    filters: List[ColumnElement[Any]] = []

    clause = search_clause(model, resource.search_fields, descriptor.search)
    if clause is not None:
        filters.append(clause)

    for name, value in descriptor.filters.items():
        filters.append(_column(model, resource.filter_field(name)) == value)

    clause = date_clause(model, resource.date_field, descriptor.date_range)
    if clause is not None:
        filters.append(clause)

    return filters


def order_by(model, sort: Optional[SortSpec]) -> List[Any]:
    """
    Single sort key, then primary key. Rows are otherwise returned in
    primary-key order, so the tie-break keeps equal keys in that order.
    """
    pk = list(model.__table__.primary_key.columns)
    if sort is None:
        return pk
    col = _column(model, sort.field)
    return [col.desc() if sort.descending else col.asc(), *pk]
