from __future__ import annotations

import logging

from sqlalchemy import create_engine, event, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base, MODELS
from .seed import demo_records
from .settings import settings

logger = logging.getLogger("listquery.db")

DB_URL = settings.db_url


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    # an in-memory database only lives as long as its single connection
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(DB_URL, future=True, echo=False, **_engine_kwargs(DB_URL))


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_conn, _record) -> None:
    # built-in lower() only folds ASCII; searches must match Python str.lower()
    dbapi_conn.create_function("lower", 1, _unicode_lower, deterministic=True)


if engine.dialect.name == "sqlite":
    event.listen(engine, "connect", _register_sqlite_functions)


SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


def init_db(seed: bool = True) -> None:
    """
    Create the schema and optionally seed the demo rows.
    Tables that already hold rows are left untouched.
    """
    Base.metadata.create_all(engine)
    if not seed:
        return
    with SessionLocal() as s:
        for name, model in MODELS.items():
            exists = s.scalar(select(func.count()).select_from(model)) or 0
            if exists:
                continue
            rows = demo_records(name)
            s.add_all(model(**row) for row in rows)
            logger.info("Seeded %d %s rows", len(rows), name)
        s.commit()


def clear_db() -> None:
    with SessionLocal() as s:
        for model in MODELS.values():
            s.query(model).delete()
        s.commit()
