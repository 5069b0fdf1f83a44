"""Pydantic models for validation outcomes."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from funnel_manifest.models.error_codes import DefinitionErrorCode


class ValidationError(BaseModel):
    code: DefinitionErrorCode
    message: str
    # Field-access tokens locating the violation, e.g. ["steps", "0", "id"]
    path: List[str] = Field(default_factory=list)
    details: Optional[Dict[str, Any]] = None

    def with_prefix(self, *tokens: str) -> "ValidationError":
        """Return a copy whose path is prefixed with ``tokens``."""
        return self.model_copy(update={"path": [*tokens, *self.path]})


class ValidationResult(BaseModel):
    valid: bool
    errors: List[ValidationError] = Field(default_factory=list)
    warnings: List[ValidationError] = Field(default_factory=list)

    @classmethod
    def from_errors(
        cls,
        errors: List[ValidationError],
        warnings: Optional[List[ValidationError]] = None,
    ) -> "ValidationResult":
        return cls(valid=not errors, errors=list(errors), warnings=list(warnings or []))

    @property
    def codes(self) -> List[str]:
        return [e.code.value for e in self.errors]


__all__ = ["ValidationError", "ValidationResult"]
