"""Authoring-side validation of funnel definitions.

These are the strict entry points used before a candidate version is
persisted. Each returns a ``ValidationResult`` carrying every defect
found; nothing here raises for bad input.
"""

from __future__ import annotations

import logging
from typing import Any, List

from funnel_manifest.logic.integrity import (
    check_content_manifest_integrity,
    check_questionnaire_integrity,
)
from funnel_manifest.logic.schema_parser import parse_content_manifest, parse_questionnaire_config
from funnel_manifest.models.validation_result import ValidationError, ValidationResult

logger = logging.getLogger(__name__)


def validate_questionnaire_config(raw: Any) -> ValidationResult:
    """Validate a questionnaire configuration in strict mode.

    Structural errors are always reported. The referential pass runs
    whenever the shape parsed, including when only the schema version
    marker was rejected.
    """
    parsed = parse_questionnaire_config(raw, require_schema_version=True)
    errors: List[ValidationError] = list(parsed.errors)
    if parsed.value is not None:
        errors.extend(check_questionnaire_integrity(parsed.value))
    result = ValidationResult.from_errors(errors)
    logger.info(
        "definition_validator.questionnaire_config",
        extra={"valid": result.valid, "error_count": len(result.errors)},
    )
    return result


def validate_content_manifest(raw: Any) -> ValidationResult:
    """Validate a content manifest in strict mode."""
    parsed = parse_content_manifest(raw, require_schema_version=True)
    errors: List[ValidationError] = list(parsed.errors)
    if parsed.value is not None:
        errors.extend(check_content_manifest_integrity(parsed.value))
    result = ValidationResult.from_errors(errors)
    logger.info(
        "definition_validator.content_manifest",
        extra={"valid": result.valid, "error_count": len(result.errors)},
    )
    return result


def validate_funnel_version(questionnaire_config: Any, content_manifest: Any) -> ValidationResult:
    """Validate both artifacts of a candidate funnel version.

    Paths are prefixed with the artifact they belong to so a single
    report can be shown for the whole version.
    """
    questionnaire_result = validate_questionnaire_config(questionnaire_config)
    manifest_result = validate_content_manifest(content_manifest)
    errors = [e.with_prefix("questionnaire_config") for e in questionnaire_result.errors]
    errors.extend(e.with_prefix("content_manifest") for e in manifest_result.errors)
    warnings = [w.with_prefix("questionnaire_config") for w in questionnaire_result.warnings]
    warnings.extend(w.with_prefix("content_manifest") for w in manifest_result.warnings)
    return ValidationResult.from_errors(errors, warnings)


__all__ = [
    "validate_questionnaire_config",
    "validate_content_manifest",
    "validate_funnel_version",
]
