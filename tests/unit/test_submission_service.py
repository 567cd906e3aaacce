"""Tests for score submission and the session/result transaction."""

from __future__ import annotations

import pytest

from skinscores.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
)
from skinscores.models import RESULTS, SESSIONS, Caller, ScoreTemplate
from skinscores.persistence.memory_backend import MemoryDocumentStore
from skinscores.services.submission_service import ScoreSubmissionService, format_detail_value
from tests.fakes.fake_clock import FakeClock
from tests.fakes.fake_store import CountingDocumentStore


@pytest.fixture
def service(seeded_store: MemoryDocumentStore, clock: FakeClock) -> ScoreSubmissionService:
    return ScoreSubmissionService(seeded_store, clock=clock)


def _braden_inputs(template: ScoreTemplate, value: str = "3") -> dict[str, str]:
    return {definition.id: value for definition in template.inputs}


def _snapshot(store: MemoryDocumentStore) -> tuple[list, list]:
    sessions = [(d.id, d.data) for d in store.query(SESSIONS)]
    results = [(d.id, d.data) for d in store.query(RESULTS)]
    return sessions, results


class TestCalculateScore:
    def test_age_band_example(self, service: ScoreSubmissionService, alice: Caller) -> None:
        submission = service.calculate_score(alice, "age-band", {"age": 25})
        assert submission.score == 25
        assert submission.interpretation_label == "adult"
        assert submission.interpretation_summary == "Adult dosing."
        assert submission.copy_blocks == ["Age 25: adult"]

    def test_braden_mid_tier_sums_option_scores(
        self, service: ScoreSubmissionService, alice: Caller, braden_template: ScoreTemplate
    ) -> None:
        submission = service.calculate_score(alice, "braden", _braden_inputs(braden_template))
        assert submission.score == 18
        assert submission.interpretation_label == "Mild risk"

    def test_persists_session_and_result(
        self,
        service: ScoreSubmissionService,
        seeded_store: MemoryDocumentStore,
        alice: Caller,
        clock: FakeClock,
    ) -> None:
        submission = service.calculate_score(alice, "age-band", {"age": "30"}, patient_ref="MRN-1")

        session = seeded_store.get(SESSIONS, submission.session_id)
        assert session["user_id"] == "alice"
        assert session["status"] == "submitted"
        assert session["template_id"] == "age-band-v1"
        assert session["patient_ref"] == "MRN-1"
        assert session["inputs"] == {"age": 30.0}
        assert session["created_at"] == session["updated_at"] == clock()

        result = seeded_store.get(RESULTS, submission.result_id)
        assert result["session_id"] == submission.session_id
        assert result["user_id"] == "alice"
        assert result["score"] == 30
        assert result["copy_blocks"] == ["Age 30: adult"]
        assert result["created_at"] == clock()

    def test_missing_required_select_commits_nothing(
        self, seeded_store: MemoryDocumentStore, alice: Caller, braden_template: ScoreTemplate
    ) -> None:
        counting = CountingDocumentStore(seeded_store)
        service = ScoreSubmissionService(counting)
        inputs = _braden_inputs(braden_template)
        del inputs["moisture"]

        with pytest.raises(InvalidArgumentError, match="Missing required input"):
            service.calculate_score(alice, "braden", inputs)
        assert counting.transactions == 0
        assert _snapshot(seeded_store) == ([], [])

    def test_unknown_template(self, service: ScoreSubmissionService, alice: Caller) -> None:
        with pytest.raises(NotFoundError, match='Score template "pasi" not found.'):
            service.calculate_score(alice, "pasi", {})

    def test_requires_caller(self, service: ScoreSubmissionService) -> None:
        with pytest.raises(UnauthenticatedError, match="Authentication is required."):
            service.calculate_score(None, "age-band", {"age": 1})
        with pytest.raises(UnauthenticatedError):
            service.calculate_score(Caller(uid=""), "age-band", {"age": 1})


class TestExistingSession:
    def test_resubmission_updates_session_and_appends_result(
        self,
        service: ScoreSubmissionService,
        seeded_store: MemoryDocumentStore,
        alice: Caller,
        clock: FakeClock,
    ) -> None:
        first = service.calculate_score(alice, "age-band", {"age": 10}, patient_ref="MRN-1")
        created = clock()
        clock.advance(minutes=5)

        second = service.calculate_score(alice, "age-band", {"age": 40}, session_id=first.session_id)

        assert second.session_id == first.session_id
        assert second.result_id != first.result_id
        session = seeded_store.get(SESSIONS, first.session_id)
        assert session["score"] == 40
        assert session["interpretation_label"] == "adult"
        assert session["created_at"] == created
        assert session["updated_at"] == clock()
        assert len(seeded_store.query(RESULTS)) == 2

    def test_unknown_session(self, service: ScoreSubmissionService, alice: Caller) -> None:
        with pytest.raises(NotFoundError, match='Session "ghost" not found.'):
            service.calculate_score(alice, "age-band", {"age": 1}, session_id="ghost")

    def test_other_users_session_is_left_untouched(
        self,
        service: ScoreSubmissionService,
        seeded_store: MemoryDocumentStore,
        alice: Caller,
        bob: Caller,
    ) -> None:
        owned = service.calculate_score(alice, "age-band", {"age": 10})
        before = _snapshot(seeded_store)

        with pytest.raises(PermissionDeniedError, match=f'Cannot modify session "{owned.session_id}".'):
            service.calculate_score(bob, "age-band", {"age": 99}, session_id=owned.session_id)
        assert _snapshot(seeded_store) == before

    def test_tool_result_cannot_hijack_session(
        self,
        service: ScoreSubmissionService,
        seeded_store: MemoryDocumentStore,
        alice: Caller,
        bob: Caller,
    ) -> None:
        owned = service.calculate_score(alice, "age-band", {"age": 10})
        before = _snapshot(seeded_store)
        with pytest.raises(PermissionDeniedError):
            service.submit_tool_result(
                bob,
                tool_id="scorad",
                tool_slug="scorad",
                tool_name="SCORAD",
                inputs={},
                score=1,
                interpretation="Mild",
                session_id=owned.session_id,
            )
        assert _snapshot(seeded_store) == before


class TestSubmitToolResult:
    def test_numeric_score(
        self, service: ScoreSubmissionService, seeded_store: MemoryDocumentStore, alice: Caller
    ) -> None:
        receipt = service.submit_tool_result(
            alice,
            tool_id="scorad-tool",
            tool_slug="scorad",
            tool_name="SCORAD",
            inputs={"extent": 30},
            score=42.0,
            interpretation="Moderate eczema",
            details={"extent": 30, "intensity": None, "flags": ["a", "b"]},
        )

        result = seeded_store.get(RESULTS, receipt.result_id)
        assert result["template_id"] == "scorad-tool"
        assert result["template_slug"] == "scorad"
        assert result["score"] == 42.0
        assert result["score_text"] == "42"
        assert result["interpretation_label"] == "Result"
        assert result["interpretation_summary"] == "Moderate eczema"
        assert result["copy_blocks"] == ["extent: 30", "intensity: —", 'flags: ["a","b"]']

        session = seeded_store.get(SESSIONS, receipt.session_id)
        assert session["inputs"] == {"extent": 30}
        assert session["result_details"]["extent"] == 30

    def test_text_score(
        self, service: ScoreSubmissionService, seeded_store: MemoryDocumentStore, alice: Caller
    ) -> None:
        receipt = service.submit_tool_result(
            alice,
            tool_id="regiscar",
            tool_slug="",
            tool_name="RegiSCAR",
            inputs={},
            score="Probable",
            interpretation="Probable DRESS",
        )
        result = seeded_store.get(RESULTS, receipt.result_id)
        assert result["score"] is None
        assert result["score_text"] == "Probable"
        assert result["template_slug"] == "regiscar"
        assert result["copy_blocks"] == []

    def test_null_score(
        self, service: ScoreSubmissionService, seeded_store: MemoryDocumentStore, alice: Caller
    ) -> None:
        receipt = service.submit_tool_result(
            alice, tool_id="t", tool_slug="t", tool_name="T", inputs={}, score=None, interpretation="n/a"
        )
        result = seeded_store.get(RESULTS, receipt.result_id)
        assert result["score"] is None
        assert result["score_text"] is None


class TestFormatDetailValue:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, "—"), (True, "true"), (3.0, "3"), (2.5, "2.5"), ("x", "x"), ({"a": 1}, '{"a":1}')],
    )
    def test_rendering(self, value: object, expected: str) -> None:
        assert format_detail_value(value) == expected
