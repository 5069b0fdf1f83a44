"""Human-readable rendering of validation errors for logs and authoring feedback."""

from __future__ import annotations

from typing import Iterable

from funnel_manifest.models.validation_result import ValidationError

ROOT_PATH_LABEL = "root"


def format_validation_error(error: ValidationError) -> str:
    path = ".".join(error.path) if error.path else ROOT_PATH_LABEL
    return f"[{error.code.value}] {path}: {error.message}"


def format_validation_errors(errors: Iterable[ValidationError]) -> str:
    """Render one ``[CODE] path: message`` line per error.

    Order is preserved exactly as given and duplicates are kept; the
    validators already emit errors in declaration order.
    """
    return "\n".join(format_validation_error(e) for e in errors)


__all__ = ["format_validation_error", "format_validation_errors"]
