"""Authoring-side validation endpoints for funnel definitions.

Validation outcomes are data: a structurally broken artifact still
returns 200 with ``valid: false`` and the full error list. Only a
request body that is not JSON at all is rejected as a 422 problem.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body

from funnel_manifest.logic.definition_validator import (
    validate_content_manifest,
    validate_funnel_version,
    validate_questionnaire_config,
)
from funnel_manifest.models.validation_result import ValidationResult

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/funnel-definitions/questionnaire-config/validate",
    summary="Validate a questionnaire configuration (strict)",
    operation_id="validateQuestionnaireConfig",
    response_model=ValidationResult,
)
def post_validate_questionnaire_config(payload: Any = Body(...)) -> ValidationResult:
    return validate_questionnaire_config(payload)


@router.post(
    "/funnel-definitions/content-manifest/validate",
    summary="Validate a content manifest (strict)",
    operation_id="validateContentManifest",
    response_model=ValidationResult,
)
def post_validate_content_manifest(payload: Any = Body(...)) -> ValidationResult:
    return validate_content_manifest(payload)


@router.post(
    "/funnel-definitions/validate",
    summary="Validate both artifacts of a candidate funnel version",
    operation_id="validateFunnelVersion",
    response_model=ValidationResult,
)
def post_validate_funnel_version(
    questionnaire_config: Any = Body(None),
    content_manifest: Any = Body(None),
) -> ValidationResult:
    result = validate_funnel_version(questionnaire_config, content_manifest)
    logger.info(
        "funnel_definitions.validate",
        extra={"valid": result.valid, "error_count": len(result.errors)},
    )
    return result


__all__ = ["router"]
