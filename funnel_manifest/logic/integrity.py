"""Referential integrity checks for structurally valid funnel artifacts.

Runs after ``schema_parser`` has produced typed artifacts. Every check
appends to a list instead of raising, and the traversal always completes,
so authors receive the full defect list in a single round-trip. Errors
appear in declaration order (steps, questions, conditions, pages,
assets), which keeps the report deterministic.

The one exception to exhaustiveness is an empty ``steps`` / ``pages``
collection: that is reported once and nothing else is checked.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Set
from urllib.parse import urlparse

from funnel_manifest.models.content_manifest import ContentManifest
from funnel_manifest.models.error_codes import DefinitionErrorCode as Code
from funnel_manifest.models.questionnaire import ConditionalLogic, QuestionnaireConfig
from funnel_manifest.models.registry import is_choice_type
from funnel_manifest.models.validation_result import ValidationError

logger = logging.getLogger(__name__)


def _blank(value: object) -> bool:
    return not isinstance(value, str) or value.strip() == ""


def _declaring_steps(config: QuestionnaireConfig) -> Dict[str, int]:
    """Map each question id to the index of the first step declaring it."""
    declared: Dict[str, int] = {}
    for step_index, _step, question in config.iter_questions():
        if not _blank(question.id) and question.id not in declared:
            declared[question.id] = step_index
    return declared


def _check_step_conditions(
    logic: ConditionalLogic,
    *,
    step_id: str,
    step_index: int,
    step_path: List[str],
    declared: Dict[str, int],
) -> List[ValidationError]:
    """A step may only depend on questions from itself or earlier steps."""
    errors: List[ValidationError] = []
    for cond_index, condition in enumerate(logic.conditions):
        cond_path = [*step_path, "conditionalLogic", "conditions", str(cond_index), "questionId"]
        ref_step = declared.get(condition.question_id)
        if ref_step is None:
            errors.append(
                ValidationError(
                    code=Code.DEF_INVALID_CONDITIONAL_REFERENCE,
                    message=f'Conditional logic references non-existent question: "{condition.question_id}"',
                    path=cond_path,
                    details={"step_id": step_id, "question_id": condition.question_id},
                )
            )
        elif ref_step > step_index:
            errors.append(
                ValidationError(
                    code=Code.DEF_CONDITIONAL_FORWARD_REFERENCE,
                    message=(
                        f'Conditional logic in step "{step_id}" references future question: '
                        f'"{condition.question_id}"'
                    ),
                    path=cond_path,
                    details={
                        "step_id": step_id,
                        "question_id": condition.question_id,
                        "current_step_index": step_index,
                        "referenced_step_index": ref_step,
                    },
                )
            )
    return errors


def check_questionnaire_integrity(config: QuestionnaireConfig) -> List[ValidationError]:
    errors: List[ValidationError] = []

    if not config.steps:
        errors.append(
            ValidationError(
                code=Code.DEF_EMPTY_STEPS,
                message="steps array must contain at least one step",
                path=["steps"],
            )
        )
        return errors

    declared = _declaring_steps(config)
    step_ids: Set[str] = set()
    question_ids: Set[str] = set()
    question_keys: Set[str] = set()

    for step_index, step in enumerate(config.steps):
        step_path = ["steps", str(step_index)]

        if _blank(step.id):
            errors.append(
                ValidationError(
                    code=Code.DEF_MISSING_STEP_ID,
                    message=f"Step at index {step_index} is missing id",
                    path=[*step_path, "id"],
                )
            )
        elif step.id in step_ids:
            errors.append(
                ValidationError(
                    code=Code.DEF_DUPLICATE_STEP_ID,
                    message=f'Duplicate step id: "{step.id}"',
                    path=[*step_path, "id"],
                    details={"step_id": step.id},
                )
            )
        else:
            step_ids.add(step.id)

        if _blank(step.title):
            errors.append(
                ValidationError(
                    code=Code.DEF_MISSING_STEP_TITLE,
                    message=f'Step "{step.id}" is missing title',
                    path=[*step_path, "title"],
                    details={"step_id": step.id},
                )
            )

        if not step.questions:
            errors.append(
                ValidationError(
                    code=Code.DEF_EMPTY_QUESTIONS,
                    message=f'Step "{step.id}" has empty questions array',
                    path=[*step_path, "questions"],
                    details={"step_id": step.id},
                )
            )

        for q_index, question in enumerate(step.questions):
            q_path = [*step_path, "questions", str(q_index)]

            if _blank(question.id):
                errors.append(
                    ValidationError(
                        code=Code.DEF_MISSING_QUESTION_ID,
                        message=f'Question at step "{step.id}", index {q_index} is missing id',
                        path=[*q_path, "id"],
                        details={"step_id": step.id, "question_index": q_index},
                    )
                )
            elif question.id in question_ids:
                errors.append(
                    ValidationError(
                        code=Code.DEF_DUPLICATE_QUESTION_ID,
                        message=f'Duplicate question id: "{question.id}"',
                        path=[*q_path, "id"],
                        details={"question_id": question.id},
                    )
                )
            else:
                question_ids.add(question.id)

            if _blank(question.key):
                errors.append(
                    ValidationError(
                        code=Code.DEF_MISSING_QUESTION_KEY,
                        message=f'Question "{question.id}" is missing key',
                        path=[*q_path, "key"],
                        details={"question_id": question.id},
                    )
                )
            elif question.key in question_keys:
                errors.append(
                    ValidationError(
                        code=Code.DEF_DUPLICATE_QUESTION_KEY,
                        message=f'Duplicate question key: "{question.key}"',
                        path=[*q_path, "key"],
                        details={"question_key": question.key},
                    )
                )
            else:
                question_keys.add(question.key)

            if _blank(question.label):
                errors.append(
                    ValidationError(
                        code=Code.DEF_MISSING_QUESTION_LABEL,
                        message=f'Question "{question.id}" is missing label',
                        path=[*q_path, "label"],
                        details={"question_id": question.id},
                    )
                )

            if is_choice_type(question.type):
                qtype = question.type.value
                if question.options is None:
                    errors.append(
                        ValidationError(
                            code=Code.DEF_MISSING_OPTIONS_FOR_CHOICE,
                            message=f'Question "{question.id}" of type "{qtype}" requires options',
                            path=[*q_path, "options"],
                            details={"question_id": question.id, "question_type": qtype},
                        )
                    )
                elif len(question.options) == 0:
                    errors.append(
                        ValidationError(
                            code=Code.DEF_EMPTY_OPTIONS_FOR_CHOICE,
                            message=f'Question "{question.id}" of type "{qtype}" has empty options array',
                            path=[*q_path, "options"],
                            details={"question_id": question.id, "question_type": qtype},
                        )
                    )

        if step.conditional_logic is not None:
            errors.extend(
                _check_step_conditions(
                    step.conditional_logic,
                    step_id=step.id,
                    step_index=step_index,
                    step_path=step_path,
                    declared=declared,
                )
            )

    # Funnel-wide rules may reference any question in the funnel
    for logic_index, logic in enumerate(config.conditional_logic or []):
        for cond_index, condition in enumerate(logic.conditions):
            if condition.question_id not in declared:
                errors.append(
                    ValidationError(
                        code=Code.DEF_INVALID_CONDITIONAL_REFERENCE,
                        message=(
                            "Global conditional logic references non-existent question: "
                            f'"{condition.question_id}"'
                        ),
                        path=["conditionalLogic", str(logic_index), "conditions", str(cond_index), "questionId"],
                        details={"question_id": condition.question_id},
                    )
                )

    if errors:
        logger.debug("integrity.questionnaire_errors", extra={"error_count": len(errors)})
    return errors


def _is_valid_asset_url(url: str) -> bool:
    candidate = (url or "").strip()
    if not candidate:
        return False
    parsed = urlparse(candidate)
    if parsed.scheme in ("http", "https"):
        return bool(parsed.netloc)
    return not parsed.scheme and candidate.startswith("/")


def check_content_manifest_integrity(manifest: ContentManifest) -> List[ValidationError]:
    errors: List[ValidationError] = []

    if not manifest.pages:
        errors.append(
            ValidationError(
                code=Code.DEF_EMPTY_PAGES,
                message="pages array must contain at least one page",
                path=["pages"],
            )
        )
        return errors

    page_slugs: Set[str] = set()
    for page_index, page in enumerate(manifest.pages):
        page_path = ["pages", str(page_index)]

        if _blank(page.slug):
            errors.append(
                ValidationError(
                    code=Code.DEF_MISSING_PAGE_SLUG,
                    message=f"Page at index {page_index} is missing slug",
                    path=[*page_path, "slug"],
                )
            )
        elif page.slug in page_slugs:
            errors.append(
                ValidationError(
                    code=Code.DEF_DUPLICATE_PAGE_SLUG,
                    message=f'Duplicate page slug: "{page.slug}"',
                    path=[*page_path, "slug"],
                    details={"slug": page.slug},
                )
            )
        else:
            page_slugs.add(page.slug)

        if _blank(page.title):
            errors.append(
                ValidationError(
                    code=Code.DEF_MISSING_PAGE_TITLE,
                    message=f'Page "{page.slug}" is missing title',
                    path=[*page_path, "title"],
                    details={"slug": page.slug},
                )
            )

        if not page.sections:
            errors.append(
                ValidationError(
                    code=Code.DEF_EMPTY_SECTIONS,
                    message=f'Page "{page.slug}" has empty sections array',
                    path=[*page_path, "sections"],
                    details={"slug": page.slug},
                )
            )

    asset_keys: Set[str] = set()
    for asset_index, asset in enumerate(manifest.assets or []):
        asset_path = ["assets", str(asset_index)]
        if asset.key in asset_keys:
            errors.append(
                ValidationError(
                    code=Code.DEF_DUPLICATE_ASSET_KEY,
                    message=f'Duplicate asset key: "{asset.key}"',
                    path=[*asset_path, "key"],
                    details={"key": asset.key},
                )
            )
        else:
            asset_keys.add(asset.key)

        if not _is_valid_asset_url(asset.url):
            errors.append(
                ValidationError(
                    code=Code.DEF_INVALID_ASSET_URL,
                    message=f'Asset "{asset.key}" has invalid url: "{asset.url}"',
                    path=[*asset_path, "url"],
                    details={"key": asset.key, "url": asset.url},
                )
            )

    if errors:
        logger.debug("integrity.content_manifest_errors", extra={"error_count": len(errors)})
    return errors


__all__ = ["check_questionnaire_integrity", "check_content_manifest_integrity"]
