"""Functional tests for configuration loading precedence."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from funnel_manifest.config import load_config


@pytest.fixture
def project_dir(tmp_path, monkeypatch):
    for key in ("DATABASE_URL", "VIEWER_ID_HEADER", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults_without_any_source(project_dir):
    cfg = load_config()

    assert cfg.database.dsn == "sqlite+pysqlite:///:memory:"
    assert cfg.resolver.viewer_header == "X-Viewer-Id"
    assert cfg.logging.level == "INFO"


def test_root_json_then_config_files_then_env(project_dir, monkeypatch):
    (project_dir / "funnel_config.json").write_text(
        json.dumps(
            {
                "database": {"dsn": "postgresql://db/funnels"},
                "resolver": {"viewer_header": "X-From-Json"},
                "logging": {"level": "debug"},
            }
        ),
        encoding="utf-8",
    )
    cfg = load_config()
    assert cfg.database.dsn == "postgresql://db/funnels"
    assert cfg.resolver.viewer_header == "X-From-Json"
    assert cfg.logging.level == "DEBUG"

    (project_dir / "config").mkdir()
    (project_dir / "config" / "resolver.viewer_header").write_text("X-From-File\n", encoding="utf-8")
    assert load_config().resolver.viewer_header == "X-From-File"

    monkeypatch.setenv("VIEWER_ID_HEADER", "X-From-Env")
    assert load_config().resolver.viewer_header == "X-From-Env"


def test_invalid_log_level_is_rejected(project_dir, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    with pytest.raises(PydanticValidationError):
        load_config()
