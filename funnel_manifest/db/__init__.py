"""Database bootstrap utilities for the funnel manifest service.

Exposes engine construction and a small migrations runner that applies the
SQL files shipped in ``funnel_manifest/db/migrations``.
"""

from funnel_manifest.db.base import get_engine, reset_engine
from funnel_manifest.db.migrations_runner import DEFAULT_MIGRATIONS_DIR, apply_migrations

__all__ = [
    "get_engine",
    "reset_engine",
    "apply_migrations",
    "DEFAULT_MIGRATIONS_DIR",
]
