"""Closed type registries for funnel definitions.

Question, section and asset types are stored as plain strings inside the
JSON artifacts. These enumerations are the single source of truth the
structural parser checks membership against; nothing outside them is
accepted.
"""

from __future__ import annotations

from enum import Enum


class QuestionType(str, Enum):
    RADIO = "radio"
    CHECKBOX = "checkbox"
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    SCALE = "scale"
    SLIDER = "slider"


# Question types that must carry at least one option
CHOICE_QUESTION_TYPES = frozenset({QuestionType.RADIO, QuestionType.CHECKBOX})


class SectionType(str, Enum):
    HERO = "hero"
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    MARKDOWN = "markdown"
    CTA = "cta"
    DIVIDER = "divider"


class AssetType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"


class ConditionalLogicType(str, Enum):
    SHOW = "show"
    HIDE = "hide"
    SKIP = "skip"


class ConditionOperator(str, Enum):
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    NOT_IN = "notIn"


class LogicJoin(str, Enum):
    AND = "and"
    OR = "or"


SCHEMA_VERSION_V1 = "v1"


# Canonical funnel slugs. Legacy aliases stay resolvable for old links.
STRESS_ASSESSMENT_SLUG = "stress-assessment"

FUNNEL_SLUG_ALIASES: dict[str, str] = {
    "stress": STRESS_ASSESSMENT_SLUG,
    "stress-check": STRESS_ASSESSMENT_SLUG,
    "stress-check-v2": STRESS_ASSESSMENT_SLUG,
}


def canonical_funnel_slug(slug: str) -> str:
    """Return the canonical slug for ``slug``.

    Input is trimmed and lowercased; known legacy aliases map to their
    canonical slug, anything else is returned normalised.
    """
    normalized = (slug or "").strip().lower()
    return FUNNEL_SLUG_ALIASES.get(normalized, normalized)


def is_choice_type(question_type: object) -> bool:
    try:
        return QuestionType(question_type) in CHOICE_QUESTION_TYPES
    except ValueError:
        return False


__all__ = [
    "QuestionType",
    "CHOICE_QUESTION_TYPES",
    "SectionType",
    "AssetType",
    "ConditionalLogicType",
    "ConditionOperator",
    "LogicJoin",
    "SCHEMA_VERSION_V1",
    "STRESS_ASSESSMENT_SLUG",
    "FUNNEL_SLUG_ALIASES",
    "canonical_funnel_slug",
    "is_choice_type",
]
