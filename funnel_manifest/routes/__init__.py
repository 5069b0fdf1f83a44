"""APIRouter registration for the funnel manifest service."""

from __future__ import annotations

from fastapi import APIRouter

from funnel_manifest.routes.definitions import router as definitions_router
from funnel_manifest.routes.funnels import router as funnels_router

api_router = APIRouter()
api_router.include_router(definitions_router, tags=["FunnelDefinitions"])
api_router.include_router(funnels_router, tags=["Funnels"])

__all__ = ["api_router"]
