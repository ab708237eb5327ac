"""
app/main.py

FastAPI entrypoint for the scale import service.

Startup order: environment problems are collected and reported together,
logging is configured, then the lifespan hook confirms the database is
reachable and migrated before requests are served.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

logger = logging.getLogger(__name__)


def _startup_problems() -> list[str]:
    """
    Every missing or invalid environment setting, so one restart fixes all.
    """

    from app.config import parse_missing_value_policy
    from db.config import load_env_files

    load_env_files()
    problems: list[str] = []

    url_names = ("DATABASE_URL", "LOCAL_DATABASE_URL", "CLOUD_DATABASE_URL")
    if not any(os.getenv(name, "").strip() for name in url_names):
        problems.append(f"No database URL configured. Set one of {', '.join(url_names)}.")

    raw_policy = os.getenv("SCALE_IMPORT_MISSING_OPTIONAL_POLICY")
    if raw_policy is not None and raw_policy.strip() and parse_missing_value_policy(raw_policy) is None:
        problems.append(
            f"SCALE_IMPORT_MISSING_OPTIONAL_POLICY={raw_policy.strip()!r} is not valid; "
            "use 'zero' or 'missing'."
        )

    return problems


def _configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _verify_database() -> None:
    """
    Connect once and confirm every mapped table exists.

    Migrations are never applied here; run ``alembic upgrade head``.
    """

    from sqlalchemy import inspect, text

    import db.models  # noqa: F401 registers ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            present = set(inspect(connection).get_table_names())
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc

    missing = sorted(set(Base.metadata.tables) - present)
    if missing:
        logger.critical("Tables missing from the database: %s. Run migrations.", ", ".join(missing))
        raise RuntimeError(f"Schema mismatch, missing tables: {', '.join(missing)}.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    _verify_database()
    logger.info("Database reachable and schema present")
    yield


def create_app() -> FastAPI:
    problems = _startup_problems()
    if problems:
        raise RuntimeError(
            "Startup validation failed:\n" + "\n".join(f"  - {problem}" for problem in problems)
        )
    _configure_logging()

    application = FastAPI(title="Scale Import API", version="1.0.0", lifespan=_lifespan)

    from app.api.routers import scale_import_router

    application.include_router(scale_import_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
