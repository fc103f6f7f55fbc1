from __future__ import annotations

from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .errors import QueryValidationError

# Filter value meaning "no constraint on this field".
ALL = "ALL"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortSpec(BaseModel):
    """A single active sort key, encoded on the wire as ``"field,direction"``."""

    model_config = ConfigDict(frozen=True)

    field: str
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC

    def encode(self) -> str:
        return f"{self.field},{self.direction.value}"

    def toggled(self) -> "SortSpec":
        flipped = SortDirection.ASC if self.descending else SortDirection.DESC
        return SortSpec(field=self.field, direction=flipped)

    @classmethod
    def parse(cls, raw: str) -> "SortSpec":
        """
        Parse ``"field"`` or ``"field,asc|desc"``.
        A missing direction means ascending.
        """
        field, _, direction = (raw or "").partition(",")
        field = field.strip()
        direction = direction.strip().lower() or SortDirection.ASC.value
        if not field:
            raise QueryValidationError(f"Invalid sort: {raw!r}")
        try:
            return cls(field=field, direction=SortDirection(direction))
        except ValueError as exc:
            raise QueryValidationError(f"Invalid sort direction: {direction!r}") from exc


class DateRange(BaseModel):
    """Inclusive date range; the end date covers its whole day."""

    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @classmethod
    def from_bounds(cls, start: Optional[date], end: Optional[date]) -> Optional["DateRange"]:
        if start is None and end is None:
            return None
        if start is None or end is None:
            raise QueryValidationError("Date range needs both a start and an end date")
        return cls(start=start, end=end)

    def half_open(self) -> Tuple[datetime, datetime]:
        """Return ``[start 00:00, day after end 00:00)`` as datetimes."""
        return (
            datetime.combine(self.start, time.min),
            datetime.combine(self.end + timedelta(days=1), time.min),
        )

    def date_bounds(self) -> Tuple[date, date]:
        return self.start, self.end + timedelta(days=1)


class QueryDescriptor(BaseModel):
    """
    What subset of a list the user wants to see.

    Descriptors are immutable: use :meth:`replace` to derive a new one.
    Invariant violations raise :class:`QueryValidationError`.
    """

    model_config = ConfigDict(frozen=True)

    page: int = 0
    size: int = 10
    search: Optional[str] = None
    filters: Dict[str, str] = {}
    date_range: Optional[DateRange] = None
    sort: Optional[SortSpec] = None

    @field_validator("search", mode="before")
    @classmethod
    def _trim_search(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("filters", mode="before")
    @classmethod
    def _drop_sentinels(cls, v: Any) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for key, value in dict(v or {}).items():
            if value is None:
                continue
            text = str(value).strip()
            if text and text.upper() != ALL:
                out[key] = text
        return out

    @model_validator(mode="after")
    def _check_invariants(self) -> "QueryDescriptor":
        if self.page < 0:
            raise QueryValidationError(f"page must be >= 0, got {self.page}")
        if self.size < 1:
            raise QueryValidationError(f"size must be > 0, got {self.size}")
        return self

    @property
    def offset(self) -> int:
        return self.page * self.size

    def replace(self, **changes: Any) -> "QueryDescriptor":
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(changes)
        return QueryDescriptor(**data)
