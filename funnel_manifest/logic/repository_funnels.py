"""Funnel catalog, version and override data access.

``FunnelRepository`` is the collaborator contract the resolver depends
on. ``SqlFunnelRepository`` implements it with plain parameterised SQL
so route handlers and the resolver stay free of persistence details.
All methods are read-only.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional, Protocol

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Engine

from funnel_manifest.db.base import get_engine
from funnel_manifest.models.funnel_version import (
    FunnelCatalogEntry,
    FunnelVersionRow,
    PatientVersionOverride,
)

logger = logging.getLogger(__name__)


class FunnelRepository(Protocol):
    def get_funnel_by_slug(self, slug: str) -> Optional[FunnelCatalogEntry]:
        ...

    def get_patient_profile_id(self, user_id: str) -> Optional[str]:
        ...

    def get_active_version_override(self, patient_id: str, funnel_id: str) -> Optional[PatientVersionOverride]:
        ...

    def get_funnel_version_by_id(self, version_id: str) -> Optional[FunnelVersionRow]:
        ...


def _decode_json(value: Any, *, column: str, version_id: str) -> Any:
    """Decode a JSON column stored as text; pass native JSON through.

    Undecodable text is returned unchanged so the structural parser
    rejects it and resolution fails closed.
    """
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        logger.warning(
            "repository_funnels.json_decode_failed column=%s version_id=%s",
            column,
            version_id,
        )
        return value


def _iso(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class SqlFunnelRepository:
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine or get_engine()

    def get_funnel_by_slug(self, slug: str) -> Optional[FunnelCatalogEntry]:
        with self.engine.connect() as conn:
            row = conn.execute(
                sql_text(
                    "SELECT id, slug, title, is_active, default_version_id "
                    "FROM funnels_catalog WHERE slug = :slug"
                ),
                {"slug": slug},
            ).mappings().fetchone()
        if not row:
            return None
        return FunnelCatalogEntry(
            id=str(row["id"]),
            slug=str(row["slug"]),
            title=str(row["title"] or ""),
            is_active=bool(row["is_active"]),
            default_version_id=str(row["default_version_id"]) if row["default_version_id"] is not None else None,
        )

    def get_patient_profile_id(self, user_id: str) -> Optional[str]:
        with self.engine.connect() as conn:
            row = conn.execute(
                sql_text("SELECT id FROM patient_profiles WHERE user_id = :uid"),
                {"uid": user_id},
            ).fetchone()
        return str(row[0]) if row else None

    def get_active_version_override(self, patient_id: str, funnel_id: str) -> Optional[PatientVersionOverride]:
        with self.engine.connect() as conn:
            row = conn.execute(
                sql_text(
                    "SELECT patient_id, funnel_id, active_version_id "
                    "FROM patient_funnel_overrides "
                    "WHERE patient_id = :pid AND funnel_id = :fid"
                ),
                {"pid": patient_id, "fid": funnel_id},
            ).mappings().fetchone()
        if not row:
            return None
        active = row["active_version_id"]
        return PatientVersionOverride(
            patient_id=str(row["patient_id"]),
            funnel_id=str(row["funnel_id"]),
            active_version_id=str(active) if active is not None else None,
        )

    def get_funnel_version_by_id(self, version_id: str) -> Optional[FunnelVersionRow]:
        with self.engine.connect() as conn:
            row = conn.execute(
                sql_text(
                    """
                    SELECT id, funnel_id, version, questionnaire_config, content_manifest,
                           algorithm_bundle_version, prompt_version, is_default,
                           rollout_percent, created_at, updated_at
                    FROM funnel_versions
                    WHERE id = :vid
                    """
                ),
                {"vid": version_id},
            ).mappings().fetchone()
        if not row:
            return None
        vid = str(row["id"])
        return FunnelVersionRow(
            id=vid,
            funnel_id=str(row["funnel_id"]),
            version=str(row["version"]),
            questionnaire_config=_decode_json(row["questionnaire_config"], column="questionnaire_config", version_id=vid),
            content_manifest=_decode_json(row["content_manifest"], column="content_manifest", version_id=vid),
            algorithm_bundle_version=str(row["algorithm_bundle_version"] or ""),
            prompt_version=str(row["prompt_version"] or ""),
            is_default=bool(row["is_default"]),
            rollout_percent=int(row["rollout_percent"] if row["rollout_percent"] is not None else 100),
            created_at=_iso(row["created_at"]),
            updated_at=_iso(row["updated_at"]),
        )


__all__ = ["FunnelRepository", "SqlFunnelRepository"]
