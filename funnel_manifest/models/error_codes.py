"""Stable error-code taxonomy for funnel definition validation.

Every code follows ``DEF_<CATEGORY>_<REASON>``. Codes are consumed by
authoring UIs and automated checks, so the set is additive-only: never
rename or repurpose a shipped member.
"""

from __future__ import annotations

from enum import Enum


class DefinitionErrorCode(str, Enum):
    # Schema structure
    DEF_INVALID_SCHEMA = "DEF_INVALID_SCHEMA"
    DEF_INVALID_SCHEMA_VERSION = "DEF_INVALID_SCHEMA_VERSION"
    DEF_MISSING_SCHEMA_VERSION = "DEF_MISSING_SCHEMA_VERSION"

    # Questionnaire config
    DEF_MISSING_STEPS = "DEF_MISSING_STEPS"
    DEF_EMPTY_STEPS = "DEF_EMPTY_STEPS"
    DEF_MISSING_STEP_TITLE = "DEF_MISSING_STEP_TITLE"
    DEF_MISSING_STEP_ID = "DEF_MISSING_STEP_ID"
    DEF_DUPLICATE_STEP_ID = "DEF_DUPLICATE_STEP_ID"
    DEF_MISSING_QUESTIONS = "DEF_MISSING_QUESTIONS"
    DEF_EMPTY_QUESTIONS = "DEF_EMPTY_QUESTIONS"
    DEF_MISSING_QUESTION_ID = "DEF_MISSING_QUESTION_ID"
    DEF_MISSING_QUESTION_KEY = "DEF_MISSING_QUESTION_KEY"
    DEF_MISSING_QUESTION_TYPE = "DEF_MISSING_QUESTION_TYPE"
    DEF_MISSING_QUESTION_LABEL = "DEF_MISSING_QUESTION_LABEL"
    DEF_DUPLICATE_QUESTION_ID = "DEF_DUPLICATE_QUESTION_ID"
    DEF_DUPLICATE_QUESTION_KEY = "DEF_DUPLICATE_QUESTION_KEY"
    DEF_INVALID_QUESTION_TYPE = "DEF_INVALID_QUESTION_TYPE"
    DEF_MISSING_OPTIONS_FOR_CHOICE = "DEF_MISSING_OPTIONS_FOR_CHOICE"
    DEF_EMPTY_OPTIONS_FOR_CHOICE = "DEF_EMPTY_OPTIONS_FOR_CHOICE"

    # Conditional logic
    DEF_INVALID_CONDITIONAL_REFERENCE = "DEF_INVALID_CONDITIONAL_REFERENCE"
    DEF_CONDITIONAL_SELF_REFERENCE = "DEF_CONDITIONAL_SELF_REFERENCE"  # reserved
    DEF_CONDITIONAL_FORWARD_REFERENCE = "DEF_CONDITIONAL_FORWARD_REFERENCE"

    # Content manifest
    DEF_MISSING_PAGES = "DEF_MISSING_PAGES"
    DEF_EMPTY_PAGES = "DEF_EMPTY_PAGES"
    DEF_MISSING_PAGE_SLUG = "DEF_MISSING_PAGE_SLUG"
    DEF_MISSING_PAGE_TITLE = "DEF_MISSING_PAGE_TITLE"
    DEF_DUPLICATE_PAGE_SLUG = "DEF_DUPLICATE_PAGE_SLUG"
    DEF_INVALID_PAGE_SLUG = "DEF_INVALID_PAGE_SLUG"  # reserved
    DEF_MISSING_SECTIONS = "DEF_MISSING_SECTIONS"
    DEF_EMPTY_SECTIONS = "DEF_EMPTY_SECTIONS"
    DEF_INVALID_SECTION_TYPE = "DEF_INVALID_SECTION_TYPE"

    # Assets
    DEF_DUPLICATE_ASSET_KEY = "DEF_DUPLICATE_ASSET_KEY"
    DEF_INVALID_ASSET_URL = "DEF_INVALID_ASSET_URL"

    def __str__(self) -> str:
        return self.value


__all__ = ["DefinitionErrorCode"]
