"""Catalog, version and override records plus the resolved manifest.

Rows are read-only snapshots handed over by the persistence layer. The
engine never writes them back.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict

from funnel_manifest.models.content_manifest import ContentManifest
from funnel_manifest.models.questionnaire import QuestionnaireConfig


VersionSource = Literal["patient_override", "catalog_default"]


class FunnelCatalogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    slug: str
    title: str = ""
    is_active: bool = True
    default_version_id: Optional[str] = None


class FunnelVersionRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    funnel_id: str
    version: str
    questionnaire_config: Any = None
    content_manifest: Any = None
    algorithm_bundle_version: str = ""
    prompt_version: str = ""
    is_default: bool = False
    rollout_percent: int = 100
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class PatientVersionOverride(BaseModel):
    model_config = ConfigDict(frozen=True)

    patient_id: str
    funnel_id: str
    active_version_id: Optional[str] = None


class Viewer(BaseModel):
    """Identity of the caller as established upstream.

    ``user_id`` is None for anonymous callers. Authentication happens
    outside this package; a non-empty ``user_id`` is taken as given.
    """

    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id and str(self.user_id).strip())

    @classmethod
    def anonymous(cls) -> "Viewer":
        return cls(user_id=None)


class FunnelVersionManifest(BaseModel):
    """A fully validated funnel version ready for rendering."""

    model_config = ConfigDict(frozen=True)

    id: str
    funnel_id: str
    slug: Optional[str] = None
    version: str
    questionnaire_config: QuestionnaireConfig
    content_manifest: ContentManifest
    algorithm_bundle_version: str
    prompt_version: str
    is_default: bool
    rollout_percent: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    source: Optional[VersionSource] = None


__all__ = [
    "VersionSource",
    "FunnelCatalogEntry",
    "FunnelVersionRow",
    "PatientVersionOverride",
    "Viewer",
    "FunnelVersionManifest",
]
