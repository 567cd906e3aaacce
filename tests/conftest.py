"""Shared fixtures for skinscores tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from skinscores.models import Caller, ScoreTemplate
from skinscores.persistence.memory_backend import MemoryDocumentStore
from skinscores.services.template_store import TemplateRepository
from tests.fakes.fake_clock import FakeClock

BRADEN_SUBSCALES = [
    ("sensory", "Sensory perception"),
    ("moisture", "Moisture"),
    ("activity", "Activity"),
    ("mobility", "Mobility"),
    ("nutrition", "Nutrition"),
    ("friction", "Friction and shear"),
]


def braden_template_data() -> dict[str, Any]:
    """Braden scale as authored (camelCase keys): six required selects scored 1-4."""
    return {
        "name": "Braden Scale",
        "slug": "braden",
        "category": "wound-care",
        "version": "1",
        "description": "Pressure injury risk.",
        "citation": "Bergstrom N, et al. Nurs Res. 1987.",
        "inputs": [
            {
                "id": input_id,
                "label": label,
                "type": "select",
                "required": True,
                "options": [
                    {"value": str(points), "label": f"Level {points}", "score": points}
                    for points in range(1, 5)
                ],
            }
            for input_id, label in BRADEN_SUBSCALES
        ],
        "interpretation": {
            "summaryTemplate": "Braden {{score}}",
            "ranges": [
                {"min": 6, "max": 9, "label": "Very high risk", "guidance": "Reposition every 2 hours."},
                {"min": 10, "max": 12, "label": "High risk", "guidance": "Pressure-redistributing surface."},
                {"min": 13, "max": 14, "label": "Moderate risk", "guidance": "Turning schedule."},
                {"min": 15, "max": 18, "label": "Mild risk", "guidance": "Protect heels."},
                {"min": 19, "max": 23, "label": "No risk", "guidance": "Reassess routinely."},
            ],
        },
        "copyBlocks": [
            {"label": "Note", "bodyTemplate": "Braden score {{score}} ({{ interpretationLabel }})."},
            {"label": "Plan", "bodyTemplate": "{{interpretationSummary}}"},
        ],
    }


def age_template_data() -> dict[str, Any]:
    return {
        "name": "Age band",
        "slug": "age-band",
        "category": "demo",
        "version": "1",
        "description": "Adult or minor.",
        "inputs": [
            {"id": "age", "label": "Age", "type": "number", "required": True, "min": 0, "max": 120, "weight": 1},
        ],
        "interpretation": {
            "summaryTemplate": "",
            "ranges": [
                {"min": 0, "max": 17, "label": "minor", "guidance": "Paediatric dosing."},
                {"min": 18, "max": 120, "label": "adult", "guidance": "Adult dosing."},
            ],
        },
        "copyBlocks": [{"label": "Age", "bodyTemplate": "Age {{score}}: {{interpretationLabel}}"}],
    }


@pytest.fixture
def braden_template() -> ScoreTemplate:
    return ScoreTemplate.model_validate(braden_template_data())


@pytest.fixture
def age_template() -> ScoreTemplate:
    return ScoreTemplate.model_validate(age_template_data())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 14, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def seeded_store(
    store: MemoryDocumentStore,
    braden_template: ScoreTemplate,
    age_template: ScoreTemplate,
    clock: FakeClock,
) -> MemoryDocumentStore:
    """Memory store holding the Braden and age-band templates."""
    repository = TemplateRepository(store, clock=clock)
    repository.save(braden_template)
    repository.save(age_template)
    return store


@pytest.fixture
def alice() -> Caller:
    return Caller(uid="alice")


@pytest.fixture
def bob() -> Caller:
    return Caller(uid="bob")


@pytest.fixture
def admin() -> Caller:
    return Caller(uid="root", role="admin")
