"""Error taxonomy for list queries.

Validation problems are raised before any request is made. Transport
failures are split into ``NetworkError`` (nothing came back) and
``ServerError`` (a failure response came back). An empty result is not an
error and has no exception type.
"""
from __future__ import annotations

__all__ = [
    "ListQueryError",
    "QueryValidationError",
    "PermissionDeniedError",
    "UnknownResourceError",
    "TransportError",
    "NetworkError",
    "ServerError",
]


class ListQueryError(Exception):
    """Base exception for list query failures."""

    code = "LIST_QUERY_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class QueryValidationError(ListQueryError):
    """Raised when a query descriptor would violate one of its invariants."""

    code = "INVALID_QUERY"


class PermissionDeniedError(ListQueryError):
    """Raised when the actor's role may not list a resource."""

    code = "FORBIDDEN"


class UnknownResourceError(ListQueryError):
    """Raised when no list resource is registered under a name."""

    code = "UNKNOWN_RESOURCE"


class TransportError(ListQueryError):
    """Base for failures of a single list request."""


class NetworkError(TransportError):
    """The request could not be sent or no response was received."""

    code = "NETWORK_ERROR"


class ServerError(TransportError):
    """A response arrived with a failure status or an unusable body."""

    code = "SERVER_ERROR"

    def __init__(self, message: str, status_code: int | None = None, error_code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
