from __future__ import annotations

import logging
import sys
import uuid
from contextlib import asynccontextmanager
from typing import Callable, Iterator

from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.middleware.base import BaseHTTPMiddleware

from .db import SessionLocal, init_db
from .errors import ListQueryError, PermissionDeniedError, QueryValidationError, UnknownResourceError
from .resources import RESOURCES, Actor, ResourceSpec, Role, Wrapping, get_resource
from .settings import settings
from .store import MemoryStore, RecordStore, SqlStore
from .wire import decode_params, wrap

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s:%(filename)s:%(lineno)d %(message)s", stream=sys.stdout)
logger = logging.getLogger("listquery.api")
logger.setLevel(settings.log_level.upper())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each list request with an id; a caller-supplied X-Request-ID is kept."""

    async def dispatch(self, request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            logger.info(
                "req_id=%s role=%s %s %s?%s -> %s",
                request_id,
                request.headers.get("X-Actor-Role", "-"),
                request.method,
                request.url.path,
                request.url.query,
                response.status_code if response is not None else 500,
            )
            if response is not None:
                response.headers["X-Request-ID"] = request_id


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema and seed demo data when running on SQLite."""
    if settings.store == "memory":
        logger.info("Using the in-memory record store")
        yield
        return
    try:
        with SessionLocal() as s:
            bind = s.get_bind()
            dialect = getattr(bind.dialect, "name", "")
            logger.info("Effective SQLAlchemy dialect: %s (url=%s)", dialect, getattr(bind, "url", None))
        if dialect == "sqlite":
            init_db(seed=True)
    except OperationalError as exc:
        logger.warning("Could not initialise the database on startup: %r", exc)
    yield


app = FastAPI(title="Hospital List Query Service", version="0.1.0", lifespan=lifespan)
app.add_middleware(RequestIdMiddleware)


def error_body(code: str, message: str) -> dict:
    return {"status": "error", "error": {"code": code, "message": message}}


_STATUS_BY_ERROR = {
    QueryValidationError: 400,
    PermissionDeniedError: 403,
    UnknownResourceError: 404,
}


@app.exception_handler(ListQueryError)
async def list_query_error_handler(request: Request, exc: ListQueryError):
    status_code = next((s for t, s in _STATUS_BY_ERROR.items() if isinstance(exc, t)), 500)
    logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=status_code, content=error_body(exc.code, exc.message))


@app.exception_handler(OperationalError)
async def db_operational_error_handler(request: Request, exc: OperationalError):
    detail = str(getattr(exc, "orig", exc))
    logger.error("Database operation failed: %s", detail)
    return JSONResponse(
        status_code=500,
        content=error_body("DATABASE_UNAVAILABLE", "The database could not be reached."),
    )


# -----------------------------
# Dependencies
# -----------------------------
_memory_store: MemoryStore | None = None


def get_store() -> Iterator[RecordStore]:
    """Provide the record store; a SQLAlchemy session per request for SQL."""
    global _memory_store
    if settings.store == "memory":
        if _memory_store is None:
            _memory_store = MemoryStore()
        yield _memory_store
        return
    with SessionLocal() as s:
        yield SqlStore(s)


def get_actor(
    x_actor_role: str | None = Header(default=None),
    x_actor_id: str | None = Header(default=None),
) -> Actor:
    """The caller's role travels with every request; there is no session state."""
    try:
        role = Role((x_actor_role or "").strip().lower())
    except ValueError:
        raise PermissionDeniedError("Missing or unknown X-Actor-Role header") from None
    return Actor(role=role, id=x_actor_id)


# -----------------------------
# Endpoints
# -----------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


def list_records(resource: ResourceSpec, request: Request, store: RecordStore, actor: Actor):
    """Filter, sort and paginate one resource, wrapped the way its endpoint does."""
    resource.check_access(actor)
    descriptor = decode_params(
        resource,
        request.query_params,
        default_size=settings.default_page_size,
        max_size=settings.max_page_size,
    )
    if resource.wrapping is Wrapping.DATA_LIST:
        return wrap(resource, store.select_all(resource, descriptor))
    return wrap(resource, store.page(resource, descriptor))


def _list_endpoint(resource: ResourceSpec) -> Callable:
    def endpoint(request: Request, store: RecordStore = Depends(get_store), actor: Actor = Depends(get_actor)):
        return list_records(resource, request, store, actor)

    endpoint.__name__ = f"list_{resource.name.replace('-', '_')}"
    endpoint.__doc__ = f"List {resource.name} with page/size/search/filters/date range/sort."
    return endpoint


for _resource in RESOURCES.values():
    app.add_api_route(_resource.path, _list_endpoint(_resource), methods=["GET"], name=f"list_{_resource.name}")


@app.get("/api/lists/{resource_name}")
def list_canonical(
    resource_name: str,
    request: Request,
    store: RecordStore = Depends(get_store),
    actor: Actor = Depends(get_actor),
):
    """Any resource by name, always as the bare canonical envelope."""
    resource = get_resource(resource_name)
    resource.check_access(actor)
    descriptor = decode_params(
        resource,
        request.query_params,
        default_size=settings.default_page_size,
        max_size=settings.max_page_size,
    )
    return store.page(resource, descriptor).to_json()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("listquery.main:app", host="0.0.0.0", port=8000)
