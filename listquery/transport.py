"""
HTTP transport for list queries.

Serializes a :class:`QueryDescriptor` into request parameters, issues the
request with httpx and normalizes the endpoint's response into the
canonical :class:`ResultEnvelope`. A failed request never produces an
envelope: it raises :class:`NetworkError` or :class:`ServerError`, and it
is not retried.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .descriptor import QueryDescriptor
from .envelope import ResultEnvelope
from .errors import NetworkError, ServerError
from .resources import Actor, ResourceSpec
from .settings import settings
from .wire import encode_params, unwrap

__all__ = ["ListTransport", "server_reason"]

logger = logging.getLogger(__name__)

GENERIC_SERVER_MESSAGE = "The server could not complete the request."


def server_reason(response: httpx.Response) -> tuple[str, Optional[str]]:
    """Extract ``(message, error code)`` from a failure response body."""
    try:
        body: Any = response.json()
    except ValueError:
        return GENERIC_SERVER_MESSAGE, None
    if not isinstance(body, dict):
        return GENERIC_SERVER_MESSAGE, None
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"]), error.get("code")
    if body.get("detail"):
        return str(body["detail"]), None
    if body.get("message"):
        return str(body["message"]), None
    return GENERIC_SERVER_MESSAGE, None


class ListTransport:
    """Issues list requests against the REST backend."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.http_timeout,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ListTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, resource: ResourceSpec, descriptor: QueryDescriptor, actor: Actor) -> ResultEnvelope:
        params = encode_params(resource, descriptor)
        headers = {"X-Actor-Role": actor.role.value}
        if actor.id:
            headers["X-Actor-Id"] = actor.id

        try:
            response = await self._client.get(resource.path, params=params, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning("GET %s timed out: %r", resource.path, exc)
            raise NetworkError(f"Request for {resource.name} timed out") from exc
        except httpx.TransportError as exc:
            logger.warning("GET %s failed: %r", resource.path, exc)
            raise NetworkError(f"Could not reach the server for {resource.name}") from exc

        if response.status_code >= 400:
            message, code = server_reason(response)
            logger.warning("GET %s returned %s: %s", resource.path, response.status_code, message)
            raise ServerError(message, status_code=response.status_code, error_code=code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ServerError(f"Invalid JSON in {resource.name} response", status_code=response.status_code) from exc

        envelope = unwrap(resource, payload, descriptor)
        logger.debug(
            "%s page=%d size=%d total=%d",
            resource.name,
            envelope.page,
            envelope.size,
            envelope.total_elements,
        )
        return envelope
