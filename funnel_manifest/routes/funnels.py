"""Effective funnel manifest endpoint.

The viewer identity arrives in a configurable header set by the
upstream gateway; this service performs no authentication of its own.
Resolution failures propagate to the problem+json handler registered
for ``FunnelResolutionError``.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request

from funnel_manifest.logic.version_resolver import resolve_effective_version
from funnel_manifest.models.funnel_version import Viewer

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_VIEWER_HEADER = "X-Viewer-Id"


def _viewer_from_request(request: Request) -> Viewer:
    header = getattr(request.app.state, "viewer_header", None) or DEFAULT_VIEWER_HEADER
    raw: Optional[str] = request.headers.get(header)
    user_id = raw.strip() if raw else None
    return Viewer(user_id=user_id or None)


@router.get(
    "/funnels/{slug}/manifest",
    summary="Resolve the funnel version served to the caller",
    operation_id="getEffectiveFunnelManifest",
)
def get_effective_manifest(slug: str, request: Request) -> dict:
    viewer = _viewer_from_request(request)
    manifest = resolve_effective_version(
        slug,
        viewer,
        repository=request.app.state.funnel_repository,
    )
    logger.info(
        "funnels.manifest_served",
        extra={"slug": manifest.slug, "version_id": manifest.id, "source": manifest.source},
    )
    return manifest.model_dump(mode="json", by_alias=True)


__all__ = ["router"]
