"""
db/session.py

Engine and request-scoped sessions for the measurement store.

Nothing connects at import time; the engine is built on first use so the
pipeline and its tests run without a database.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from functools import lru_cache
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import resolve_database_url

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _engine_options() -> dict[str, Any]:
    """
    Pool and echo options, overridable through DB_POOL_* and SQL_ECHO.
    """

    def _int(name: str, default: int) -> int:
        try:
            return int(os.getenv(name, default))
        except ValueError:
            return default

    return {
        "echo": os.getenv("SQL_ECHO", "").strip().lower() in _TRUTHY,
        "pool_pre_ping": True,
        "pool_recycle": _int("DB_POOL_RECYCLE", 1800),
        "pool_size": _int("DB_POOL_SIZE", 5),
        "max_overflow": _int("DB_MAX_OVERFLOW", 10),
    }


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    database_url = resolve_database_url()
    if not database_url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")
    return create_engine(database_url, **_engine_options())


@lru_cache(maxsize=1)
def _session_factory() -> sessionmaker:
    return sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)


def SessionLocal() -> Session:
    return _session_factory()()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency: one session per request, always closed.
    """

    with SessionLocal() as db:
        yield db
