"""SQLAlchemy engine management.

PostgreSQL is the production target; SQLite backs local development and
the test suites. No declarative models are defined here. Repositories
issue plain SQL against the engine returned by ``get_engine``.
"""

from __future__ import annotations

import logging
import os
import threading

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _db_url() -> str:
    return (
        os.getenv("TEST_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or "sqlite+pysqlite:///:memory:"
    )


# Module-level cached Engine so every repository shares one pool
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None
_ENGINE_LOCK = threading.Lock()


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    SQLite in-memory URLs get a StaticPool so the single connection (and
    therefore the database) survives across requests and threads. Creation
    is serialised so concurrent first calls share one engine.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or _db_url()

    with _ENGINE_LOCK:
        if _ENGINE is None or _ENGINE_URL != resolved_url:
            kwargs: dict = {"future": True, "pool_pre_ping": True}
            if resolved_url.startswith("sqlite") and ":memory:" in resolved_url:
                kwargs.update({
                    "poolclass": StaticPool,
                    "connect_args": {"check_same_thread": False},
                })
            _ENGINE = create_engine(resolved_url, **kwargs)
            _ENGINE_URL = resolved_url
            logger.info("db.engine_created dialect=%s", _ENGINE.dialect.name)
        return _ENGINE


def reset_engine() -> None:
    """Dispose the cached engine; the next ``get_engine`` call builds a new one."""
    global _ENGINE, _ENGINE_URL
    with _ENGINE_LOCK:
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = None
        _ENGINE_URL = None
