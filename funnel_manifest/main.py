from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError

from funnel_manifest.config import AppConfig, load_config
from funnel_manifest.db.base import get_engine
from funnel_manifest.db.migrations_runner import apply_migrations
from funnel_manifest.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_resolution_error,
    handle_unexpected_error,
)
from funnel_manifest.http.request_id import RequestIdMiddleware
from funnel_manifest.logging_setup import configure_logging
from funnel_manifest.logic.repository_funnels import FunnelRepository, SqlFunnelRepository
from funnel_manifest.logic.version_resolver import FunnelResolutionError
from funnel_manifest.routes import api_router

logger = logging.getLogger(__name__)


def _auto_migrate(dsn: str) -> bool:
    flag = os.getenv("AUTO_APPLY_MIGRATIONS", "").strip().lower() in {"1", "true", "yes", "on"}
    # An in-memory database is empty on every start
    return flag or (dsn.startswith("sqlite") and ":memory:" in dsn)


def create_app(
    repository: Optional[FunnelRepository] = None,
    config: Optional[AppConfig] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Passing ``repository`` bypasses the database entirely (tests and local
    previews). Without it the app reads through ``SqlFunnelRepository``.
    """
    config = config or load_config()
    configure_logging(config.logging.level)

    app = FastAPI(title="Funnel Manifest Service")
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(FunnelResolutionError, handle_resolution_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)

    app.state.viewer_header = config.resolver.viewer_header
    engine = None
    if repository is None:
        engine = get_engine(config.database.dsn)
        repository = SqlFunnelRepository(engine)

        # Apply migrations on startup to avoid import-time side effects
        @app.on_event("startup")
        def _apply_migrations() -> None:
            if not _auto_migrate(config.database.dsn):
                logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
                return
            try:
                apply_migrations(engine)
            except SQLAlchemyError:
                logger.error("Failed to apply migrations at startup", exc_info=True)
                raise

    app.state.funnel_repository = repository

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    def health() -> dict:
        if engine is None:
            return {"status": "ok", "db": False}
        try:
            with engine.connect() as conn:
                conn.execute(sql_text("SELECT 1")).fetchone()
        except SQLAlchemyError as e:
            logger.error("Health DB check failed", exc_info=True)
            return {"status": "degraded", "db": False, "reason": str(e)}
        return {"status": "ok", "db": True}

    logger.info(
        "app_created",
        extra={"repository": type(repository).__name__, "viewer_header": config.resolver.viewer_header},
    )
    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
