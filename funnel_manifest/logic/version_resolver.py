"""Effective funnel version resolution for request-serving paths.

Precedence is a single ordered chain with exactly two sources:

1. the viewer's patient override (authenticated viewer, known patient
   profile, override with a non-null ``active_version_id``);
2. the catalog entry's ``default_version_id``.

Nothing else selects a version here. In particular the retired
per-funnel pin table is never read; tests assert on the repository call
log to keep it that way.

Stored artifacts are parsed in lenient mode (rows written before schema
versioning existed have no marker) and then checked for referential
integrity. Any defect fails closed with ``ManifestValidationError``.
Every call re-reads current state; there is no caching.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple, Union

from funnel_manifest.logic.error_report import format_validation_errors
from funnel_manifest.logic.integrity import (
    check_content_manifest_integrity,
    check_questionnaire_integrity,
)
from funnel_manifest.logic.repository_funnels import FunnelRepository
from funnel_manifest.logic.schema_parser import parse_content_manifest, parse_questionnaire_config
from funnel_manifest.models.funnel_version import (
    FunnelCatalogEntry,
    FunnelVersionManifest,
    FunnelVersionRow,
    VersionSource,
    Viewer,
)
from funnel_manifest.models.registry import canonical_funnel_slug
from funnel_manifest.models.validation_result import ValidationError

logger = logging.getLogger(__name__)


class FunnelResolutionError(Exception):
    """Base class for failures to produce an effective funnel version."""


class FunnelNotFoundError(FunnelResolutionError):
    def __init__(self, slug: str) -> None:
        super().__init__(f"Funnel not found: {slug}")
        self.slug = slug


class FunnelVersionNotFoundError(FunnelResolutionError):
    def __init__(self, funnel_id: str, version_id: Optional[str] = None) -> None:
        if version_id:
            message = f"Funnel version not found: {funnel_id}@{version_id}"
        else:
            message = f"No default version found for funnel: {funnel_id}"
        super().__init__(message)
        self.funnel_id = funnel_id
        self.version_id = version_id


class ManifestValidationError(FunnelResolutionError):
    def __init__(self, version_id: str, errors: List[ValidationError]) -> None:
        super().__init__(
            f"Manifest validation failed for funnel version {version_id}: "
            f"{len(errors)} error(s)"
        )
        self.version_id = version_id
        self.errors = list(errors)

    @property
    def report(self) -> str:
        return format_validation_errors(self.errors)


def _as_viewer(viewer: Union[Viewer, str, None]) -> Viewer:
    if viewer is None:
        return Viewer.anonymous()
    if isinstance(viewer, Viewer):
        return viewer
    return Viewer(user_id=str(viewer))


def select_version_id(
    funnel: FunnelCatalogEntry,
    viewer: Viewer,
    *,
    repository: FunnelRepository,
) -> Tuple[Optional[str], VersionSource]:
    """Return the candidate version id and which source supplied it."""
    if viewer.is_authenticated:
        patient_id = repository.get_patient_profile_id(str(viewer.user_id))
        if patient_id is not None:
            override = repository.get_active_version_override(patient_id, funnel.id)
            if override is not None and override.active_version_id:
                return override.active_version_id, "patient_override"
    return funnel.default_version_id, "catalog_default"


def build_manifest(
    row: FunnelVersionRow,
    *,
    slug: Optional[str] = None,
    source: Optional[VersionSource] = None,
) -> FunnelVersionManifest:
    """Parse and check a stored version row, failing closed on any defect."""
    questionnaire = parse_questionnaire_config(row.questionnaire_config, require_schema_version=False)
    content = parse_content_manifest(row.content_manifest, require_schema_version=False)

    errors: List[ValidationError] = [e.with_prefix("questionnaire_config") for e in questionnaire.errors]
    errors.extend(e.with_prefix("content_manifest") for e in content.errors)
    if questionnaire.value is not None:
        errors.extend(
            e.with_prefix("questionnaire_config") for e in check_questionnaire_integrity(questionnaire.value)
        )
    if content.value is not None:
        errors.extend(
            e.with_prefix("content_manifest") for e in check_content_manifest_integrity(content.value)
        )

    if errors or questionnaire.value is None or content.value is None:
        logger.error(
            "version_resolver.manifest_invalid version_id=%s\n%s",
            row.id,
            format_validation_errors(errors),
        )
        raise ManifestValidationError(row.id, errors)

    return FunnelVersionManifest(
        id=row.id,
        funnel_id=row.funnel_id,
        slug=slug,
        version=row.version,
        questionnaire_config=questionnaire.value,
        content_manifest=content.value,
        algorithm_bundle_version=row.algorithm_bundle_version,
        prompt_version=row.prompt_version,
        is_default=row.is_default,
        rollout_percent=row.rollout_percent,
        created_at=row.created_at,
        updated_at=row.updated_at,
        source=source,
    )


def load_funnel_version(
    version_id: str,
    *,
    repository: FunnelRepository,
    funnel_id: Optional[str] = None,
    slug: Optional[str] = None,
    source: Optional[VersionSource] = None,
) -> FunnelVersionManifest:
    """Load one version row by id and return its validated manifest.

    When ``funnel_id`` is given the row must belong to that funnel; a row
    of another funnel is treated as not found.
    """
    row = repository.get_funnel_version_by_id(version_id)
    if row is None:
        raise FunnelVersionNotFoundError(funnel_id or "unknown", version_id)
    if funnel_id is not None and row.funnel_id != funnel_id:
        logger.warning(
            "version_resolver.version_funnel_mismatch",
            extra={"funnel_id": funnel_id, "version_id": version_id, "row_funnel_id": row.funnel_id},
        )
        raise FunnelVersionNotFoundError(funnel_id, version_id)
    return build_manifest(row, slug=slug, source=source)


def resolve_effective_version(
    slug: str,
    viewer: Union[Viewer, str, None] = None,
    *,
    repository: FunnelRepository,
) -> FunnelVersionManifest:
    """Resolve and validate the version of ``slug`` served to ``viewer``.

    Raises FunnelNotFoundError, FunnelVersionNotFoundError or
    ManifestValidationError.
    """
    canonical = canonical_funnel_slug(slug)
    funnel = repository.get_funnel_by_slug(canonical)
    if funnel is None:
        logger.info("version_resolver.funnel_not_found", extra={"slug": canonical})
        raise FunnelNotFoundError(canonical)

    version_id, source = select_version_id(funnel, _as_viewer(viewer), repository=repository)
    if not version_id:
        logger.warning("version_resolver.no_default_version", extra={"funnel_id": funnel.id})
        raise FunnelVersionNotFoundError(funnel.id)

    manifest = load_funnel_version(
        version_id,
        repository=repository,
        funnel_id=funnel.id,
        slug=funnel.slug,
        source=source,
    )
    logger.info(
        "version_resolver.resolved",
        extra={"slug": funnel.slug, "version_id": manifest.id, "source": source},
    )
    return manifest


__all__ = [
    "FunnelResolutionError",
    "FunnelNotFoundError",
    "FunnelVersionNotFoundError",
    "ManifestValidationError",
    "select_version_id",
    "build_manifest",
    "load_funnel_version",
    "resolve_effective_version",
]
