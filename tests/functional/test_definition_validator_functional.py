"""Functional tests for the strict authoring validators."""

from __future__ import annotations

import logging

from funnel_manifest.logic.definition_validator import (
    validate_content_manifest,
    validate_funnel_version,
    validate_questionnaire_config,
)
from funnel_manifest.logic.integrity import check_questionnaire_integrity
from funnel_manifest.models.error_codes import DefinitionErrorCode as Code


def test_valid_questionnaire_config(questionnaire_config):
    result = validate_questionnaire_config(questionnaire_config)

    assert result.valid is True
    assert result.errors == []
    assert result.warnings == []


def test_valid_content_manifest(content_manifest):
    result = validate_content_manifest(content_manifest)

    assert result.valid is True
    assert result.codes == []


def test_missing_marker_and_integrity_defects_reported_together(questionnaire_config):
    del questionnaire_config["schema_version"]
    questionnaire_config["steps"][1]["questions"][0]["key"] = "stress_level"

    result = validate_questionnaire_config(questionnaire_config)

    assert result.valid is False
    assert result.codes == ["DEF_MISSING_SCHEMA_VERSION", "DEF_DUPLICATE_QUESTION_KEY"]


def test_structural_failure_skips_referential_pass(questionnaire_config, mocker):
    spy = mocker.patch(
        "funnel_manifest.logic.definition_validator.check_questionnaire_integrity",
        return_value=[],
    )
    questionnaire_config["steps"][0]["questions"][0]["type"] = "dial"
    questionnaire_config["steps"][1]["id"] = "step-1"

    result = validate_questionnaire_config(questionnaire_config)

    assert result.codes == ["DEF_INVALID_QUESTION_TYPE"]
    spy.assert_not_called()


def test_referential_pass_receives_parsed_config(questionnaire_config, mocker):
    spy = mocker.patch(
        "funnel_manifest.logic.definition_validator.check_questionnaire_integrity",
        wraps=check_questionnaire_integrity,
    )

    validate_questionnaire_config(questionnaire_config)

    assert spy.call_count == 1
    (config,), _ = spy.call_args
    assert [s.id for s in config.steps] == ["step-1", "step-2"]


def test_content_manifest_strict_mode(content_manifest):
    del content_manifest["schema_version"]
    content_manifest["assets"][1]["url"] = "static/guide.pdf"

    result = validate_content_manifest(content_manifest)

    assert result.codes == ["DEF_MISSING_SCHEMA_VERSION", "DEF_INVALID_ASSET_URL"]


def test_funnel_version_validation_prefixes_paths(questionnaire_config, content_manifest):
    questionnaire_config["steps"][0]["title"] = ""
    content_manifest["pages"][1]["slug"] = "intro"

    result = validate_funnel_version(questionnaire_config, content_manifest)

    assert result.valid is False
    assert [(e.code, e.path) for e in result.errors] == [
        (Code.DEF_MISSING_STEP_TITLE, ["questionnaire_config", "steps", "0", "title"]),
        (Code.DEF_DUPLICATE_PAGE_SLUG, ["content_manifest", "pages", "1", "slug"]),
    ]


def test_funnel_version_with_missing_artifact(questionnaire_config):
    result = validate_funnel_version(questionnaire_config, None)

    assert result.codes == ["DEF_INVALID_SCHEMA"]
    assert result.errors[0].path == ["content_manifest"]


def test_validation_outcome_is_logged(questionnaire_config, caplog):
    caplog.set_level(logging.INFO, logger="funnel_manifest.logic.definition_validator")

    validate_questionnaire_config(questionnaire_config)

    records = [r for r in caplog.records if r.getMessage() == "definition_validator.questionnaire_config"]
    assert len(records) == 1
    assert records[0].valid is True
    assert records[0].error_count == 0
