from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from . import evaluator
from .descriptor import QueryDescriptor
from .envelope import ResultEnvelope
from .models import MODELS
from .resources import Record, ResourceSpec
from .seed import demo_datasets
from .where import build_where, order_by

logger = logging.getLogger("listquery.store")


class RecordStore:
    """Source of truth for list queries."""

    def page(self, resource: ResourceSpec, descriptor: QueryDescriptor) -> ResultEnvelope:
        raise NotImplementedError

    def select_all(self, resource: ResourceSpec, descriptor: QueryDescriptor) -> List[Record]:
        """Filtered and sorted records, without pagination."""
        raise NotImplementedError


class MemoryStore(RecordStore):
    def __init__(self, datasets: Optional[Mapping[str, Iterable[Record]]] = None):
        source = demo_datasets() if datasets is None else datasets
        self._data: Dict[str, List[Record]] = {name: list(rows) for name, rows in source.items()}

    def records(self, resource: ResourceSpec) -> List[Record]:
        return self._data.get(resource.name, [])

    def page(self, resource: ResourceSpec, descriptor: QueryDescriptor) -> ResultEnvelope:
        return evaluator.evaluate(self.records(resource), descriptor, resource)

    def select_all(self, resource: ResourceSpec, descriptor: QueryDescriptor) -> List[Record]:
        return evaluator.select(self.records(resource), descriptor, resource)


class SqlStore(RecordStore):
    def __init__(self, session: Session):
        self.session = session

    def _model(self, resource: ResourceSpec):
        return MODELS[resource.name]

    def page(self, resource: ResourceSpec, descriptor: QueryDescriptor) -> ResultEnvelope:
        model = self._model(resource)
        sort = resource.effective_sort(descriptor.sort)
        filters = build_where(model, resource, descriptor)

        stmt = select(model)
        if filters:
            stmt = stmt.where(and_(*filters))
        stmt = stmt.order_by(*order_by(model, sort)).offset(descriptor.offset).limit(descriptor.size)
        rows = self.session.execute(stmt).scalars().all()

        # same filters, no paging
        total_stmt = select(func.count()).select_from(model)
        if filters:
            total_stmt = total_stmt.where(and_(*filters))
        total = int(self.session.execute(total_stmt).scalar() or 0)

        logger.debug("%s page=%d size=%d total=%d", resource.name, descriptor.page, descriptor.size, total)
        return ResultEnvelope.build([r.to_record() for r in rows], descriptor.page, descriptor.size, total)

    def select_all(self, resource: ResourceSpec, descriptor: QueryDescriptor) -> List[Record]:
        model = self._model(resource)
        sort = resource.effective_sort(descriptor.sort)
        filters = build_where(model, resource, descriptor)
        stmt = select(model)
        if filters:
            stmt = stmt.where(and_(*filters))
        stmt = stmt.order_by(*order_by(model, sort))
        return [r.to_record() for r in self.session.execute(stmt).scalars().all()]
