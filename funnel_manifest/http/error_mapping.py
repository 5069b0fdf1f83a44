"""Central error mapping for funnel resolution failures.

Single source of truth for mapping resolver exceptions to problem+json
codes and HTTP statuses. Route handlers and exception handlers import
from here instead of hardcoding strings or numbers.
"""

from __future__ import annotations

from typing import Dict, Type

from funnel_manifest.logic.version_resolver import (
    FunnelNotFoundError,
    FunnelResolutionError,
    FunnelVersionNotFoundError,
    ManifestValidationError,
)

FUNNEL_NOT_FOUND = {
    "code": "FUNNEL_NOT_FOUND",
    "status": 404,
    "title": "Funnel not found",
}

FUNNEL_VERSION_NOT_FOUND = {
    "code": "FUNNEL_VERSION_NOT_FOUND",
    "status": 404,
    "title": "Funnel version not found",
}

# A stored version that fails validation is a server-side data defect
FUNNEL_MANIFEST_INVALID = {
    "code": "FUNNEL_MANIFEST_INVALID",
    "status": 500,
    "title": "Funnel manifest invalid",
}

RESOLUTION_ERROR_MAP: Dict[Type[FunnelResolutionError], dict] = {
    FunnelNotFoundError: FUNNEL_NOT_FOUND,
    FunnelVersionNotFoundError: FUNNEL_VERSION_NOT_FOUND,
    ManifestValidationError: FUNNEL_MANIFEST_INVALID,
}

_FALLBACK = {"code": "FUNNEL_RESOLUTION_FAILED", "status": 500, "title": "Funnel resolution failed"}


def mapping_for(exc: FunnelResolutionError) -> dict:
    for exc_type in type(exc).__mro__:
        if exc_type in RESOLUTION_ERROR_MAP:
            return RESOLUTION_ERROR_MAP[exc_type]
    return _FALLBACK


__all__ = [
    "FUNNEL_NOT_FOUND",
    "FUNNEL_VERSION_NOT_FOUND",
    "FUNNEL_MANIFEST_INVALID",
    "RESOLUTION_ERROR_MAP",
    "mapping_for",
]
