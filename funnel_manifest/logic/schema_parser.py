"""Structural parsing of raw funnel artifacts.

Turns untyped JSON (already decoded into Python objects) into typed
``QuestionnaireConfig`` / ``ContentManifest`` instances. Only local,
per-field shape is checked here: primitive types, required keys and
membership of the closed type registries. Cross references are left to
``funnel_manifest.logic.integrity``.

One parser serves both entry points. ``require_schema_version`` is the
only difference between them:

- strict (authoring): an absent schema version marker is an error.
- lenient (runtime resolution of already persisted rows): an absent
  marker is read as ``"v1"``.

A marker that is present but not ``"v1"`` is rejected in both modes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Sequence, Set, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from funnel_manifest.models.content_manifest import ContentManifest
from funnel_manifest.models.error_codes import DefinitionErrorCode as Code
from funnel_manifest.models.questionnaire import QuestionnaireConfig
from funnel_manifest.models.registry import SCHEMA_VERSION_V1, QuestionType, SectionType
from funnel_manifest.models.validation_result import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

SCHEMA_VERSION_PATH = ["schema_version"]
# Stored rows use either spelling; the snake_case key wins when both exist
SCHEMA_VERSION_KEYS = ("schema_version", "schemaVersion")

WILDCARD = "*"

# Required-field locations that have a dedicated code. Locations use the
# stored (camelCase) key names; "*" matches any list index.
_MISSING_FIELD_CODES: Dict[str, List[Tuple[Tuple[str, ...], Code]]] = {
    "questionnaire": [
        (("steps",), Code.DEF_MISSING_STEPS),
        (("steps", WILDCARD, "id"), Code.DEF_MISSING_STEP_ID),
        (("steps", WILDCARD, "title"), Code.DEF_MISSING_STEP_TITLE),
        (("steps", WILDCARD, "questions"), Code.DEF_MISSING_QUESTIONS),
        (("steps", WILDCARD, "questions", WILDCARD, "id"), Code.DEF_MISSING_QUESTION_ID),
        (("steps", WILDCARD, "questions", WILDCARD, "key"), Code.DEF_MISSING_QUESTION_KEY),
        (("steps", WILDCARD, "questions", WILDCARD, "type"), Code.DEF_MISSING_QUESTION_TYPE),
        (("steps", WILDCARD, "questions", WILDCARD, "label"), Code.DEF_MISSING_QUESTION_LABEL),
    ],
    "content_manifest": [
        (("pages",), Code.DEF_MISSING_PAGES),
        (("pages", WILDCARD, "slug"), Code.DEF_MISSING_PAGE_SLUG),
        (("pages", WILDCARD, "title"), Code.DEF_MISSING_PAGE_TITLE),
        (("pages", WILDCARD, "sections"), Code.DEF_MISSING_SECTIONS),
    ],
}

# Registry-typed fields: (location, invalid code, blank code, registry)
_REGISTRY_FIELDS: Dict[str, List[Tuple[Tuple[str, ...], Code, Optional[Code], Type]]] = {
    "questionnaire": [
        (
            ("steps", WILDCARD, "questions", WILDCARD, "type"),
            Code.DEF_INVALID_QUESTION_TYPE,
            Code.DEF_MISSING_QUESTION_TYPE,
            QuestionType,
        ),
    ],
    "content_manifest": [
        (
            ("pages", WILDCARD, "sections", WILDCARD, "type"),
            Code.DEF_INVALID_SECTION_TYPE,
            None,
            SectionType,
        ),
    ],
}


# Union-typed fields. pydantic reports one error per union member with the
# member tag appended to the location; these collapse to a single error at
# the field itself.
_UNION_FIELDS: Dict[str, List[Tuple[str, ...]]] = {
    "questionnaire": [
        ("steps", WILDCARD, "conditionalLogic", "conditions", WILDCARD, "value"),
        ("conditionalLogic", WILDCARD, "conditions", WILDCARD, "value"),
    ],
    "content_manifest": [],
}

UNION_VALUE_MESSAGE = "value must be a boolean, number, string or list of strings"


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Outcome of a structural parse.

    ``value`` holds the typed artifact whenever the shape parsed, even if
    the schema version marker was rejected, so callers can still run the
    referential pass and report everything in one round-trip. ``ok`` is
    only true when there are no structural errors at all.
    """

    value: Optional[T]
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors


def _matches(loc: Sequence[str], pattern: Tuple[str, ...]) -> bool:
    if len(loc) != len(pattern):
        return False
    for token, expected in zip(loc, pattern):
        if expected == WILDCARD:
            if not token.isdigit():
                return False
        elif token != expected:
            return False
    return True


def _union_field(artifact: str, loc: Sequence[str]) -> Optional[List[str]]:
    for pattern in _UNION_FIELDS[artifact]:
        if len(loc) > len(pattern) and _matches(loc[: len(pattern)], pattern):
            return list(loc[: len(pattern)])
    return None


def _is_blank(value: Any) -> bool:
    return isinstance(value, str) and value.strip() == ""


def check_schema_version(raw: Dict[str, Any], *, require_schema_version: bool) -> Tuple[Optional[str], List[ValidationError]]:
    """Return the effective schema version and any version errors.

    The returned version is the declared string even when it is rejected,
    so the parsed artifact reflects what was stored. It is None only when
    the marker is absent in strict mode or is not a string.
    """
    present = [k for k in SCHEMA_VERSION_KEYS if k in raw]
    if not present:
        if require_schema_version:
            return None, [
                ValidationError(
                    code=Code.DEF_MISSING_SCHEMA_VERSION,
                    message="schema_version field is required",
                    path=list(SCHEMA_VERSION_PATH),
                )
            ]
        return SCHEMA_VERSION_V1, []

    actual = raw[present[0]]
    if actual != SCHEMA_VERSION_V1:
        return actual if isinstance(actual, str) else None, [
            ValidationError(
                code=Code.DEF_INVALID_SCHEMA_VERSION,
                message=f'Invalid schema_version: expected "{SCHEMA_VERSION_V1}", got "{actual}"',
                path=list(SCHEMA_VERSION_PATH),
                details={"expected": SCHEMA_VERSION_V1, "actual": actual},
            )
        ]
    return actual, []


def _convert_error(artifact: str, err: Dict[str, Any]) -> ValidationError:
    """Map one pydantic error to a definition error with a stable code."""
    loc = [str(token) for token in err.get("loc", ())]
    err_type = str(err.get("type", ""))
    raw_input = err.get("input")

    union_loc = _union_field(artifact, loc)
    if union_loc is not None:
        return ValidationError(
            code=Code.DEF_INVALID_SCHEMA,
            message=UNION_VALUE_MESSAGE,
            path=union_loc,
            details={"error_type": "union_type"},
        )

    if err_type == "missing":
        for pattern, code in _MISSING_FIELD_CODES[artifact]:
            if _matches(loc, pattern):
                return ValidationError(
                    code=code,
                    message=f"{loc[-1]} is required",
                    path=loc,
                )

    if err_type == "enum":
        for pattern, invalid_code, blank_code, registry in _REGISTRY_FIELDS[artifact]:
            if not _matches(loc, pattern):
                continue
            if blank_code is not None and (raw_input is None or _is_blank(raw_input)):
                return ValidationError(code=blank_code, message=f"{loc[-1]} is required", path=loc)
            allowed = ", ".join(member.value for member in registry)
            return ValidationError(
                code=invalid_code,
                message=f'Unknown {loc[-1]} "{raw_input}"; expected one of: {allowed}',
                path=loc,
                details={"actual": raw_input, "allowed": [m.value for m in registry]},
            )

    return ValidationError(
        code=Code.DEF_INVALID_SCHEMA,
        message=str(err.get("msg", "invalid value")),
        path=loc,
        details={"error_type": err_type},
    )


def _parse(
    model: Type[T],
    artifact: str,
    raw: Any,
    *,
    require_schema_version: bool,
) -> ParseResult[T]:
    if not isinstance(raw, dict):
        return ParseResult(
            value=None,
            errors=[
                ValidationError(
                    code=Code.DEF_INVALID_SCHEMA,
                    message=f"{artifact} must be a JSON object",
                    path=[],
                    details={"error_type": "model_type", "actual_type": type(raw).__name__},
                )
            ],
        )

    version, errors = check_schema_version(raw, require_schema_version=require_schema_version)
    payload = {k: v for k, v in raw.items() if k not in SCHEMA_VERSION_KEYS}

    try:
        parsed = model.model_validate(payload)
    except PydanticValidationError as exc:
        seen: Set[Tuple[str, ...]] = set()
        for e in exc.errors():
            converted = _convert_error(artifact, e)
            key = (converted.code.value, *converted.path)
            if key in seen:
                continue
            seen.add(key)
            errors.append(converted)
        logger.debug(
            "schema_parser.rejected",
            extra={"artifact": artifact, "error_count": len(errors)},
        )
        return ParseResult(value=None, errors=errors)

    if version is not None:
        parsed = parsed.model_copy(update={"schema_version": version})
    return ParseResult(value=parsed, errors=errors)


def parse_questionnaire_config(raw: Any, *, require_schema_version: bool = True) -> ParseResult[QuestionnaireConfig]:
    return _parse(
        QuestionnaireConfig,
        "questionnaire",
        raw,
        require_schema_version=require_schema_version,
    )


def parse_content_manifest(raw: Any, *, require_schema_version: bool = True) -> ParseResult[ContentManifest]:
    return _parse(
        ContentManifest,
        "content_manifest",
        raw,
        require_schema_version=require_schema_version,
    )


__all__ = [
    "ParseResult",
    "SCHEMA_VERSION_KEYS",
    "check_schema_version",
    "parse_questionnaire_config",
    "parse_content_manifest",
]
