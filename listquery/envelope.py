from __future__ import annotations

import math
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, Field


def total_pages_for(total_elements: int, size: int) -> int:
    return max(1, math.ceil(total_elements / size))


class ResultEnvelope(BaseModel):
    """
    Canonical paginated response for every list query.

    ``totalPages`` and ``last`` are derived from ``page``, ``size`` and
    ``totalElements``; values reported by a server are never trusted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: List[Dict[str, Any]] = []
    page: int = 0
    size: int = 1
    total_elements: int = Field(0, alias="totalElements")
    total_pages: int = Field(1, alias="totalPages")
    last: bool = True

    @classmethod
    def build(cls, content: Sequence[Dict[str, Any]], page: int, size: int, total_elements: int) -> "ResultEnvelope":
        total_pages = total_pages_for(total_elements, size)
        return cls(
            content=list(content),
            page=page,
            size=size,
            total_elements=total_elements,
            total_pages=total_pages,
            last=page >= total_pages - 1,
        )

    @property
    def is_empty(self) -> bool:
        return self.total_elements == 0

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
