from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request

from app.schemas.health import HealthResponse


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - A database URL is required; SQLite fallbacks are not permitted.
    - Numeric learning thresholds, when set, must parse.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Database URL ---------------------------------------------------
    database_url = os.getenv("DATABASE_URL", "").strip()
    cloud_database_url = os.getenv("CLOUD_DATABASE_URL", "").strip()
    if not database_url and not cloud_database_url:
        errors.append(
            "No database URL configured. Set DATABASE_URL or CLOUD_DATABASE_URL. "
            "SQLite and local database fallbacks are not permitted."
        )

    # --- Learning thresholds --------------------------------------------
    for name, parse in (
        ("SELECTOR_MIN_SAMPLES", int),
        ("SELECTOR_MIN_CONFIDENCE", float),
        ("DISCOVERED_MIN_SAMPLES", int),
        ("DISCOVERED_MIN_CONFIDENCE", float),
        ("CATEGORY_MIN_SAMPLES", int),
        ("CATEGORY_MIN_CONFIDENCE", float),
        ("PRICE_MATCH_TOLERANCE", float),
        ("ANALYSIS_MAX_WORKERS", int),
    ):
        raw_value = os.getenv(name)
        if raw_value is None:
            continue
        try:
            parse(raw_value)
        except ValueError:
            errors.append(f"{name}={raw_value!r} is not a valid {parse.__name__}.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every learning table must exist in the database. If any are missing,
    log a critical error and abort startup so that the operator runs
    migrations before serving traffic.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401 registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema, start the analysis workers on boot; drain them on exit."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")

    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    application.state.scheduler = scheduler
    logging.getLogger(__name__).info("Analysis scheduler started")
    try:
        yield
    finally:
        application.state.scheduler = None
        scheduler.shutdown(wait=True)
        logging.getLogger(__name__).info("Analysis scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Selector Learning API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import (
        admin_router,
        capture_samples_router,
        categories_router,
        selectors_router,
    )

    application.include_router(selectors_router)
    application.include_router(categories_router)
    application.include_router(capture_samples_router)
    application.include_router(admin_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck(request: Request) -> HealthResponse:
        scheduler = getattr(request.app.state, "scheduler", None)
        return HealthResponse(
            status="ok",
            scheduler_running=bool(scheduler is not None and scheduler.running),
        )

    return application


app = create_app()
