"""Functional tests for referential integrity checks.

Every test builds a structurally valid artifact, introduces reference or
uniqueness defects, and asserts the exact codes, paths and order reported.
"""

from __future__ import annotations

from funnel_manifest.logic.integrity import (
    check_content_manifest_integrity,
    check_questionnaire_integrity,
)
from funnel_manifest.models.content_manifest import ContentManifest
from funnel_manifest.models.error_codes import DefinitionErrorCode as Code
from funnel_manifest.models.questionnaire import QuestionnaireConfig


def _questionnaire(raw) -> QuestionnaireConfig:
    return QuestionnaireConfig.model_validate(raw)


def _manifest(raw) -> ContentManifest:
    return ContentManifest.model_validate(raw)


def _codes(errors):
    return [e.code for e in errors]


def _show_if(question_id, value="poor"):
    return {"type": "show", "conditions": [{"questionId": question_id, "operator": "eq", "value": value}]}


def test_valid_questionnaire_has_no_integrity_errors(questionnaire_config):
    assert check_questionnaire_integrity(_questionnaire(questionnaire_config)) == []


def test_empty_steps_reported_once_and_nothing_else(questionnaire_config):
    questionnaire_config["steps"] = []
    questionnaire_config["conditional_logic"] = [_show_if("q-missing")]

    errors = check_questionnaire_integrity(_questionnaire(questionnaire_config))

    assert _codes(errors) == [Code.DEF_EMPTY_STEPS]
    assert errors[0].path == ["steps"]


def test_duplicate_identifiers_are_reported(questionnaire_config):
    steps = questionnaire_config["steps"]
    steps[1]["id"] = "step-1"
    steps[1]["questions"][0]["id"] = "q-sleep"
    steps[1]["questions"][0]["key"] = "stress_level"
    steps[1]["title"] = ""

    errors = check_questionnaire_integrity(_questionnaire(questionnaire_config))

    assert _codes(errors) == [
        Code.DEF_DUPLICATE_STEP_ID,
        Code.DEF_MISSING_STEP_TITLE,
        Code.DEF_DUPLICATE_QUESTION_ID,
        Code.DEF_DUPLICATE_QUESTION_KEY,
    ]
    assert errors[0].path == ["steps", "1", "id"]
    assert errors[1].path == ["steps", "1", "title"]
    assert errors[2].path == ["steps", "1", "questions", "0", "id"]
    assert errors[3].path == ["steps", "1", "questions", "0", "key"]
    assert errors[3].details == {"question_key": "stress_level"}


def test_blank_values_are_reported_as_missing(questionnaire_config):
    step = questionnaire_config["steps"][0]
    step["title"] = "  "
    step["questions"][0]["id"] = ""
    step["questions"][0]["label"] = ""

    errors = check_questionnaire_integrity(_questionnaire(questionnaire_config))

    assert _codes(errors) == [
        Code.DEF_MISSING_STEP_TITLE,
        Code.DEF_MISSING_QUESTION_ID,
        Code.DEF_MISSING_QUESTION_LABEL,
    ]


def test_step_without_questions(questionnaire_config):
    questionnaire_config["steps"][1]["questions"] = []
    questionnaire_config["steps"][1]["conditionalLogic"] = None

    errors = check_questionnaire_integrity(_questionnaire(questionnaire_config))

    assert _codes(errors) == [Code.DEF_EMPTY_QUESTIONS]
    assert errors[0].path == ["steps", "1", "questions"]


def test_choice_questions_require_options(questionnaire_config):
    questions = questionnaire_config["steps"][0]["questions"]
    del questions[1]["options"]
    questions.append({"id": "q-symptoms", "key": "symptoms", "type": "checkbox", "label": "Symptoms", "options": []})
    # Non-choice types never need options
    questions.append({"id": "q-free", "key": "free", "type": "text", "label": "Free text"})

    errors = check_questionnaire_integrity(_questionnaire(questionnaire_config))

    assert _codes(errors) == [Code.DEF_MISSING_OPTIONS_FOR_CHOICE, Code.DEF_EMPTY_OPTIONS_FOR_CHOICE]
    assert errors[0].path == ["steps", "0", "questions", "1", "options"]
    assert errors[1].details == {"question_id": "q-symptoms", "question_type": "checkbox"}


def test_condition_referencing_later_step_is_forward_reference(questionnaire_config):
    questionnaire_config["steps"][0]["conditionalLogic"] = _show_if("q-notes", "x")

    errors = check_questionnaire_integrity(_questionnaire(questionnaire_config))

    assert _codes(errors) == [Code.DEF_CONDITIONAL_FORWARD_REFERENCE]
    err = errors[0]
    assert err.path == ["steps", "0", "conditionalLogic", "conditions", "0", "questionId"]
    assert err.details["current_step_index"] == 0
    assert err.details["referenced_step_index"] == 1


def test_condition_may_reference_same_or_earlier_step(questionnaire_config):
    questionnaire_config["steps"][0]["conditionalLogic"] = _show_if("q-sleep")

    assert check_questionnaire_integrity(_questionnaire(questionnaire_config)) == []


def test_condition_referencing_unknown_question(questionnaire_config):
    questionnaire_config["steps"][1]["conditionalLogic"] = _show_if("q-does-not-exist")

    errors = check_questionnaire_integrity(_questionnaire(questionnaire_config))

    assert _codes(errors) == [Code.DEF_INVALID_CONDITIONAL_REFERENCE]
    assert "q-does-not-exist" in errors[0].message


def test_global_conditions_check_existence_only(questionnaire_config):
    questionnaire_config["conditional_logic"] = [
        _show_if("q-notes", "x"),
        _show_if("q-ghost"),
    ]

    errors = check_questionnaire_integrity(_questionnaire(questionnaire_config))

    assert _codes(errors) == [Code.DEF_INVALID_CONDITIONAL_REFERENCE]
    assert errors[0].path == ["conditionalLogic", "1", "conditions", "0", "questionId"]


def test_all_defects_reported_in_declaration_order(questionnaire_config):
    steps = questionnaire_config["steps"]
    steps[0]["conditionalLogic"] = _show_if("q-notes", "x")
    del steps[0]["questions"][1]["options"]
    steps[1]["id"] = "step-1"
    steps[1]["questions"][0]["key"] = "sleep_quality"
    questionnaire_config["conditional_logic"] = [_show_if("q-ghost")]

    errors = check_questionnaire_integrity(_questionnaire(questionnaire_config))

    assert _codes(errors) == [
        Code.DEF_MISSING_OPTIONS_FOR_CHOICE,
        Code.DEF_CONDITIONAL_FORWARD_REFERENCE,
        Code.DEF_DUPLICATE_STEP_ID,
        Code.DEF_DUPLICATE_QUESTION_KEY,
        Code.DEF_INVALID_CONDITIONAL_REFERENCE,
    ]


def test_integrity_is_deterministic(questionnaire_config):
    questionnaire_config["steps"][1]["id"] = "step-1"
    config = _questionnaire(questionnaire_config)

    assert check_questionnaire_integrity(config) == check_questionnaire_integrity(config)


def test_valid_manifest_has_no_integrity_errors(content_manifest):
    assert check_content_manifest_integrity(_manifest(content_manifest)) == []


def test_empty_pages_reported_once(content_manifest):
    content_manifest["pages"] = []
    content_manifest["assets"].append(dict(content_manifest["assets"][0]))

    errors = check_content_manifest_integrity(_manifest(content_manifest))

    assert _codes(errors) == [Code.DEF_EMPTY_PAGES]


def test_page_defects(content_manifest):
    pages = content_manifest["pages"]
    pages[1]["slug"] = "intro"
    pages[1]["title"] = ""
    pages[1]["sections"] = []

    errors = check_content_manifest_integrity(_manifest(content_manifest))

    assert _codes(errors) == [
        Code.DEF_DUPLICATE_PAGE_SLUG,
        Code.DEF_MISSING_PAGE_TITLE,
        Code.DEF_EMPTY_SECTIONS,
    ]
    assert errors[0].path == ["pages", "1", "slug"]


def test_asset_defects(content_manifest):
    content_manifest["assets"] = [
        {"key": "hero-image", "type": "image", "url": "https://cdn.example.com/a.png"},
        {"key": "hero-image", "type": "image", "url": "https://cdn.example.com/b.png"},
        {"key": "clip", "type": "video", "url": "ftp://media.example.com/clip.mp4"},
        {"key": "relative", "type": "audio", "url": "audio/intro.mp3"},
        {"key": "blank", "type": "document", "url": ""},
    ]

    errors = check_content_manifest_integrity(_manifest(content_manifest))

    assert _codes(errors) == [
        Code.DEF_DUPLICATE_ASSET_KEY,
        Code.DEF_INVALID_ASSET_URL,
        Code.DEF_INVALID_ASSET_URL,
        Code.DEF_INVALID_ASSET_URL,
    ]
    assert [e.path for e in errors[1:]] == [
        ["assets", "2", "url"],
        ["assets", "3", "url"],
        ["assets", "4", "url"],
    ]


def test_ordered_sections_sorts_by_order_index(content_manifest):
    content_manifest["pages"][0]["sections"] = [
        {"key": "unordered", "type": "divider"},
        {"key": "second", "type": "text", "orderIndex": 2},
        {"key": "first", "type": "hero", "orderIndex": 1},
    ]

    page = _manifest(content_manifest).get_page("intro")

    assert [s.key for s in page.ordered_sections()] == ["first", "second", "unordered"]
