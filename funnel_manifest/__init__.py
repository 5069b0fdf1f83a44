"""Funnel manifest resolution and validation service.

Validates authored funnel definitions (questionnaire configuration and
content manifest) and resolves the effective, validated funnel version
served to a viewer. Business logic lives in `funnel_manifest/logic/`,
typed artifacts in `funnel_manifest/models/` and route handlers in
`funnel_manifest/routes/`.
"""

from __future__ import annotations

from funnel_manifest.main import create_app

__all__ = ["create_app"]
