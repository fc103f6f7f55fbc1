from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Union

from .descriptor import ALL, DateRange, QueryDescriptor, SortSpec

logger = logging.getLogger(__name__)

DateLike = Union[date, str, None]


def _as_date(value: DateLike) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class QueryBuilder:
    """
    Holds the current query descriptor of one list screen.

    Every setter swaps in a new descriptor and returns it. Any change other
    than moving to another page goes back to the first page.
    """

    def __init__(self, descriptor: Optional[QueryDescriptor] = None):
        self._initial = descriptor or QueryDescriptor()
        self._descriptor = self._initial

    @property
    def descriptor(self) -> QueryDescriptor:
        return self._descriptor

    def _update(self, **changes: Any) -> QueryDescriptor:
        self._descriptor = self._descriptor.replace(**changes)
        return self._descriptor

    def set_search(self, text: Optional[str]) -> QueryDescriptor:
        return self._update(search=text, page=0)

    def set_filter(self, field: str, value: Any) -> QueryDescriptor:
        filters = dict(self._descriptor.filters)
        if value is None or str(value).strip() == "" or str(value).strip().upper() == ALL:
            filters.pop(field, None)
        else:
            filters[field] = str(value)
        return self._update(filters=filters, page=0)

    def set_date_range(self, start: DateLike, end: DateLike) -> QueryDescriptor:
        start_d, end_d = _as_date(start), _as_date(end)
        if (start_d is None) != (end_d is None):
            logger.debug("Ignoring one-sided date range (%s, %s)", start_d, end_d)
            return self._descriptor
        return self._update(date_range=DateRange.from_bounds(start_d, end_d), page=0)

    def set_sort(self, field: str) -> QueryDescriptor:
        current = self._descriptor.sort
        if current is not None and current.field == field:
            sort = current.toggled()
        else:
            sort = SortSpec(field=field)
        return self._update(sort=sort, page=0)

    def set_page(self, index: int) -> QueryDescriptor:
        return self._update(page=max(0, int(index)))

    def set_page_size(self, size: int) -> QueryDescriptor:
        return self._update(size=size, page=0)

    def clear_filters(self) -> QueryDescriptor:
        """Drop search, filters and date range; keep sort and page size."""
        return self._update(search=None, filters={}, date_range=None, page=0)

    def reset(self) -> QueryDescriptor:
        self._descriptor = self._initial
        return self._descriptor

    @property
    def has_constraints(self) -> bool:
        d = self._descriptor
        return bool(d.search or d.filters or d.date_range)
