from __future__ import annotations

"""Functional test bootstrap for the funnel manifest service.

Points the app at an in-memory SQLite database before anything imports
``funnel_manifest.main`` and provides shared artifact and repository
fixtures. Artifact fixtures return fresh dicts so tests can mutate them.
"""

import copy
import os
from typing import Any, Callable, Dict

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

os.environ["TEST_DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]

from funnel_manifest.db.migrations_runner import apply_migrations  # noqa: E402
from funnel_manifest.logic.inmemory_state import InMemoryFunnelRepository  # noqa: E402
from funnel_manifest.models.funnel_version import FunnelVersionRow  # noqa: E402


STRESS_FUNNEL_ID = "f-stress"
DEFAULT_VERSION_ID = "v-stress-1-0"
OVERRIDE_VERSION_ID = "v-stress-1-1"
PATIENT_USER_ID = "user-1"
PATIENT_ID = "patient-1"


_QUESTIONNAIRE: Dict[str, Any] = {
    "schema_version": "v1",
    "version": "1.0",
    "steps": [
        {
            "id": "step-1",
            "title": "How are you feeling?",
            "questions": [
                {
                    "id": "q-stress-level",
                    "key": "stress_level",
                    "type": "scale",
                    "label": "How stressed do you feel right now?",
                    "minValue": 1,
                    "maxValue": 10,
                    "required": True,
                },
                {
                    "id": "q-sleep",
                    "key": "sleep_quality",
                    "type": "radio",
                    "label": "How did you sleep last night?",
                    "options": [
                        {"value": "good", "label": "Good"},
                        {"value": "poor", "label": "Poor"},
                    ],
                },
            ],
        },
        {
            "id": "step-2",
            "title": "Tell us more",
            "questions": [
                {
                    "id": "q-notes",
                    "key": "notes",
                    "type": "textarea",
                    "label": "Anything else we should know?",
                },
            ],
            "conditionalLogic": {
                "type": "show",
                "conditions": [{"questionId": "q-sleep", "operator": "eq", "value": "poor"}],
            },
        },
    ],
}

_CONTENT_MANIFEST: Dict[str, Any] = {
    "schema_version": "v1",
    "version": "1.0",
    "pages": [
        {
            "slug": "intro",
            "title": "Welcome",
            "sections": [
                {"key": "hero", "type": "hero", "orderIndex": 0},
                {"key": "body", "type": "markdown", "contentRef": "intro.md", "orderIndex": 1},
            ],
        },
        {
            "slug": "result",
            "title": "Your result",
            "sections": [{"key": "summary", "type": "text"}],
        },
    ],
    "assets": [
        {"key": "hero-image", "type": "image", "url": "https://cdn.example.com/hero.png"},
        {"key": "guide", "type": "document", "url": "/static/guide.pdf"},
    ],
}


@pytest.fixture
def questionnaire_config() -> Dict[str, Any]:
    return copy.deepcopy(_QUESTIONNAIRE)


@pytest.fixture
def content_manifest() -> Dict[str, Any]:
    return copy.deepcopy(_CONTENT_MANIFEST)


@pytest.fixture
def make_version_row() -> Callable[..., FunnelVersionRow]:
    def _make(
        version_id: str,
        version: str,
        *,
        funnel_id: str = STRESS_FUNNEL_ID,
        questionnaire: Any = None,
        manifest: Any = None,
        is_default: bool = False,
    ) -> FunnelVersionRow:
        return FunnelVersionRow(
            id=version_id,
            funnel_id=funnel_id,
            version=version,
            questionnaire_config=copy.deepcopy(_QUESTIONNAIRE) if questionnaire is None else questionnaire,
            content_manifest=copy.deepcopy(_CONTENT_MANIFEST) if manifest is None else manifest,
            algorithm_bundle_version="stress-algo-2",
            prompt_version="stress-prompt-3",
            is_default=is_default,
            rollout_percent=100,
            created_at="2026-01-05T09:00:00Z",
            updated_at="2026-01-05T09:00:00Z",
        )

    return _make


@pytest.fixture
def repository(make_version_row) -> InMemoryFunnelRepository:
    """Stress assessment funnel with a default version, a newer version
    assigned to one patient, and a known patient profile."""
    repo = InMemoryFunnelRepository()
    repo.add_funnel(
        STRESS_FUNNEL_ID,
        "stress-assessment",
        default_version_id=DEFAULT_VERSION_ID,
        title="Stress assessment",
    )
    repo.add_version(make_version_row(DEFAULT_VERSION_ID, "1.0.0", is_default=True))
    repo.add_version(make_version_row(OVERRIDE_VERSION_ID, "1.1.0"))
    repo.add_patient(PATIENT_USER_ID, PATIENT_ID)
    return repo


@pytest.fixture
def sqlite_engine() -> Engine:
    """Private in-memory database with the bundled migrations applied."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    apply_migrations(engine)
    yield engine
    engine.dispose()
