"""
Headless list-page controller.

Binds a :class:`QueryBuilder` to a transport and keeps the view state of
one list screen: loading, the current page, the empty state and errors.

Only the newest request may update the view. Each request gets a token
from a counter; a response whose token is no longer the latest is dropped
on arrival. Requests are never cancelled, only ignored.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Protocol, Set

from .builder import DateLike, QueryBuilder
from .descriptor import QueryDescriptor, SortSpec
from .envelope import ResultEnvelope
from .errors import ListQueryError, QueryValidationError
from .resources import Actor, ResourceSpec
from .settings import settings

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    def fetch(self, resource: ResourceSpec, descriptor: QueryDescriptor, actor: Actor) -> Awaitable[ResultEnvelope]:
        ...


class ViewStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class Pagination:
    page: int
    size: int
    total_pages: int
    total_elements: int

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages - 1


class ListController:
    def __init__(
        self,
        resource: ResourceSpec,
        transport: Fetcher,
        actor: Actor,
        descriptor: Optional[QueryDescriptor] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self.resource = resource
        self.transport = transport
        self.actor = actor
        self.builder = QueryBuilder(descriptor or QueryDescriptor(size=settings.default_page_size))
        self.debounce_seconds = (
            settings.search_debounce_ms / 1000.0 if debounce_seconds is None else debounce_seconds
        )

        self.status = ViewStatus.IDLE
        self.envelope: Optional[ResultEnvelope] = None
        self.error: Optional[ListQueryError] = None
        self.validation_error: Optional[QueryValidationError] = None
        self.requests_issued = 0

        self._latest = 0
        self._tasks: Set[asyncio.Task] = set()
        self._debounce: Optional[asyncio.Task] = None

    # -----------------------------
    # View
    # -----------------------------
    @property
    def descriptor(self) -> QueryDescriptor:
        return self.builder.descriptor

    @property
    def content(self) -> list:
        return list(self.envelope.content) if self.envelope is not None else []

    @property
    def pagination(self) -> Optional[Pagination]:
        if self.envelope is None:
            return None
        env = self.envelope
        return Pagination(env.page, env.size, env.total_pages, env.total_elements)

    @property
    def can_clear_filters(self) -> bool:
        return self.builder.has_constraints

    # -----------------------------
    # Query changes
    # -----------------------------
    def set_search(self, text: Optional[str]) -> None:
        """Typing waits for a quiet period before a request goes out."""
        if not self._change(lambda: self.builder.set_search(text), issue=False):
            return
        self._cancel_debounce()
        self._debounce = self._spawn(self._debounced_request())

    def set_filter(self, field: str, value: Any) -> None:
        def apply() -> QueryDescriptor:
            self.resource.filter_field(field)
            return self.builder.set_filter(field, value)

        self._change(apply)

    def set_date_range(self, start: DateLike, end: DateLike) -> None:
        self._change(lambda: self.builder.set_date_range(start, end))

    def set_sort(self, field: str) -> None:
        def apply() -> QueryDescriptor:
            self.resource.check_sort(SortSpec(field=field))
            return self.builder.set_sort(field)

        self._change(apply)

    def set_page(self, index: int) -> None:
        self._change(lambda: self.builder.set_page(index))

    def set_page_size(self, size: int) -> None:
        self._change(lambda: self.builder.set_page_size(size))

    def clear_filters(self) -> None:
        self._change(self.builder.clear_filters)

    def _change(self, apply: Callable[[], QueryDescriptor], issue: bool = True) -> bool:
        try:
            apply()
        except QueryValidationError as exc:
            # rejected before reaching the transport
            self.validation_error = exc
            logger.debug("%s: rejected query change: %s", self.resource.name, exc.message)
            return False
        self.validation_error = None
        if issue:
            self._cancel_debounce()
            self._issue()
        return True

    # -----------------------------
    # Requests
    # -----------------------------
    async def refresh(self) -> None:
        """Issue a request for the current descriptor and wait for it."""
        self._cancel_debounce()
        await self._issue()

    async def retry(self) -> None:
        await self.refresh()

    async def settle(self) -> None:
        """Wait until no debounce or request is pending."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def dispose(self) -> None:
        """Stop updating the view; in-flight responses are dropped."""
        self._cancel_debounce()
        self._latest += 1

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _cancel_debounce(self) -> None:
        if self._debounce is not None and not self._debounce.done():
            self._debounce.cancel()
        self._debounce = None

    async def _debounced_request(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._debounce = None
        self._issue()

    def _issue(self) -> asyncio.Task:
        self._latest += 1
        self.requests_issued += 1
        token = self._latest
        self.status = ViewStatus.LOADING
        return self._spawn(self._run(token, self.builder.descriptor))

    async def _run(self, token: int, descriptor: QueryDescriptor) -> None:
        try:
            envelope = await self.transport.fetch(self.resource, descriptor, self.actor)
        except ListQueryError as exc:
            if token != self._latest:
                logger.debug("%s: dropping stale failure of request %d", self.resource.name, token)
                return
            logger.info("%s: request failed: %s", self.resource.name, exc.message)
            self.envelope = None
            self.error = exc
            self.status = ViewStatus.ERROR
            return

        if token != self._latest:
            logger.debug("%s: dropping stale response of request %d", self.resource.name, token)
            return
        self.envelope = envelope
        self.error = None
        self.status = ViewStatus.EMPTY if envelope.is_empty else ViewStatus.READY
