"""
In-memory filter -> sort -> paginate over record dictionaries.

This is the reference behaviour of a list query; the SQL store must agree
with it. The three steps always run in that order.
"""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .descriptor import DateRange, QueryDescriptor, SortSpec
from .envelope import ResultEnvelope
from .resources import Record, ResourceSpec, lookup


def _as_text(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def as_datetime(value: Any) -> Optional[datetime]:
    """Coerce a date, datetime or ISO string to a naive UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    else:
        try:
            dt = datetime.fromisoformat(str(value))
        except ValueError:
            return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def matches_search(record: Mapping[str, Any], term: Optional[str], fields: Sequence[str]) -> bool:
    if not term:
        return True
    needle = term.lower()
    for name in fields:
        value = lookup(record, name)
        if value is not None and needle in _as_text(value).lower():
            return True
    return False


def matches_filters(record: Mapping[str, Any], filters: Mapping[str, str], resource: ResourceSpec) -> bool:
    for name, expected in filters.items():
        value = lookup(record, resource.filter_field(name))
        if value is None or _as_text(value) != expected:
            return False
    return True


def in_date_range(record: Mapping[str, Any], date_range: Optional[DateRange], field: Optional[str]) -> bool:
    if date_range is None or field is None:
        return True
    value = as_datetime(lookup(record, field))
    if value is None:
        return False
    start, end = date_range.half_open()
    return start <= value < end


def filter_records(records: Iterable[Record], descriptor: QueryDescriptor, resource: ResourceSpec) -> List[Record]:
    # validate filter names up front so an empty dataset still rejects them
    for name in descriptor.filters:
        resource.filter_field(name)
    return [
        r
        for r in records
        if matches_search(r, descriptor.search, resource.search_fields)
        and matches_filters(r, descriptor.filters, resource)
        and in_date_range(r, descriptor.date_range, resource.date_field)
    ]


def _sort_key(value: Any):
    # missing values sort first ascending (and therefore last descending)
    if value is None:
        return (0, 0)
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, datetime) or isinstance(value, date):
        return (1, as_datetime(value))
    return (1, value)


def sort_records(records: Sequence[Record], sort: Optional[SortSpec]) -> List[Record]:
    """Stable single-key sort; equal keys keep their filtered order."""
    if sort is None:
        return list(records)
    return sorted(
        records,
        key=lambda r: _sort_key(lookup(r, sort.field)),
        reverse=sort.descending,
    )


def paginate(records: Sequence[Record], page: int, size: int) -> ResultEnvelope:
    size = max(1, size)
    start = page * size
    return ResultEnvelope.build(records[start:start + size], page, size, len(records))


def select(records: Iterable[Record], descriptor: QueryDescriptor, resource: ResourceSpec) -> List[Record]:
    """Filter and sort without paginating."""
    sort = resource.effective_sort(descriptor.sort)
    return sort_records(filter_records(records, descriptor, resource), sort)


def evaluate(records: Iterable[Record], descriptor: QueryDescriptor, resource: ResourceSpec) -> ResultEnvelope:
    return paginate(select(records, descriptor, resource), descriptor.page, descriptor.size)
