"""Score submission: compute, then commit session + result atomically.

Two entry points share one transactional commit:

* ``calculate_score`` runs the template engine server-side.
* ``submit_tool_result`` records a score computed by the client.

A submission to an existing session overwrites the session's mutable fields
and always appends a new result; results are never deduplicated.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union

from skinscores.exceptions import NotFoundError, PermissionDeniedError, UnauthenticatedError
from skinscores.models import RESULTS, SESSIONS, Caller, SessionStatus
from skinscores.persistence.protocols import IDocumentStore
from skinscores.scoring.engine import compute_outcome
from skinscores.scoring.values import format_number
from skinscores.services.template_store import TemplateRepository

log = logging.getLogger(__name__)

TOOL_RESULT_LABEL = "Result"


@dataclass(frozen=True)
class SubmissionReceipt:
    """Identifiers of the committed session/result pair."""

    session_id: str
    result_id: str


@dataclass(frozen=True)
class ScoreSubmission(SubmissionReceipt):
    """Receipt plus the server-computed values."""

    score: float = 0
    interpretation_label: str = ""
    interpretation_summary: str = ""
    copy_blocks: list[str] = field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_caller(caller: Optional[Caller]) -> Caller:
    if caller is None or not caller.uid:
        raise UnauthenticatedError("Authentication is required.")
    return caller


def format_detail_value(value: Any) -> str:
    """Render one ``details`` value for a copy-block line."""
    if value is None:
        return "—"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    if isinstance(value, float):
        return format_number(value)
    return str(value)


class ScoreSubmissionService:
    """Runs submissions against a document store handle."""

    def __init__(
        self,
        store: IDocumentStore,
        templates: Optional[TemplateRepository] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._templates = templates or TemplateRepository(store)
        self._clock = clock or _utcnow

    def calculate_score(
        self,
        caller: Optional[Caller],
        template_slug: str,
        inputs: Mapping[str, Any],
        *,
        patient_ref: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> ScoreSubmission:
        """Score ``inputs`` with the latest template for ``template_slug`` and persist it.

        Validation happens before the transaction opens, so an invalid
        submission never writes anything.
        """
        caller = _require_caller(caller)
        template_id, template = self._templates.get_latest(template_slug)
        outcome = compute_outcome(template, inputs)

        descriptor = {
            "template_id": template_id,
            "template_slug": template.slug,
            "template_name": template.name,
            "score": outcome.score,
            "interpretation_label": outcome.interpretation.label,
            "interpretation_summary": outcome.interpretation.guidance,
        }
        receipt = self._commit(
            caller,
            session_id,
            session_fields={
                **descriptor,
                "patient_ref": patient_ref,
                "inputs": outcome.sanitized_inputs,
            },
            result_fields={**descriptor, "copy_blocks": outcome.copy_blocks},
        )
        return ScoreSubmission(
            session_id=receipt.session_id,
            result_id=receipt.result_id,
            score=outcome.score,
            interpretation_label=outcome.interpretation.label,
            interpretation_summary=outcome.interpretation.guidance,
            copy_blocks=outcome.copy_blocks,
        )

    def submit_tool_result(
        self,
        caller: Optional[Caller],
        *,
        tool_id: str,
        tool_slug: str,
        tool_name: str,
        inputs: Mapping[str, Any],
        score: Union[float, str, None],
        interpretation: str,
        details: Optional[dict[str, Any]] = None,
        patient_ref: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> SubmissionReceipt:
        """Persist a score computed by a client-side calculator."""
        caller = _require_caller(caller)

        numeric_score: Optional[float] = None
        score_text: Optional[str] = None
        if isinstance(score, str):
            score_text = score
        elif isinstance(score, (int, float)) and not isinstance(score, bool):
            numeric_score = score
            score_text = format_number(score)

        detail_lines = [
            f"{key}: {format_detail_value(value)}" for key, value in (details or {}).items()
        ]
        descriptor = {
            "template_id": tool_id,
            "template_slug": tool_slug or tool_id,
            "template_name": tool_name,
            "score": numeric_score,
            "score_text": score_text,
            "interpretation_label": TOOL_RESULT_LABEL,
            "interpretation_summary": interpretation,
        }
        return self._commit(
            caller,
            session_id,
            session_fields={
                **descriptor,
                "patient_ref": patient_ref,
                "inputs": dict(inputs),
                "result_details": details,
            },
            result_fields={**descriptor, "copy_blocks": detail_lines, "details": details},
        )

    def _commit(
        self,
        caller: Caller,
        session_id: Optional[str],
        *,
        session_fields: dict[str, Any],
        result_fields: dict[str, Any],
    ) -> SubmissionReceipt:
        """Upsert the session and append a result in one transaction.

        Ownership is checked on the transactional read so no other write can
        slip in between the check and the upsert.
        """
        target_session_id = session_id or self._store.new_id()
        result_id = self._store.new_id()

        with self._store.transaction() as txn:
            if session_id:
                existing = txn.get(SESSIONS, session_id)
                if existing is None:
                    raise NotFoundError(f'Session "{session_id}" not found.')
                if existing.get("user_id") != caller.uid:
                    raise PermissionDeniedError(f'Cannot modify session "{session_id}".')

            now = self._clock()
            session_data = {
                **session_fields,
                "user_id": caller.uid,
                "status": SessionStatus.SUBMITTED.value,
                "updated_at": now,
            }
            if not session_id:
                session_data["created_at"] = now
            txn.set(SESSIONS, target_session_id, session_data, merge=True)

            txn.set(
                RESULTS,
                result_id,
                {
                    **result_fields,
                    "session_id": target_session_id,
                    "user_id": caller.uid,
                    "created_at": now,
                },
            )

        log.info(
            "Committed submission",
            extra={
                "session_id": target_session_id,
                "result_id": result_id,
                "template_slug": session_fields.get("template_slug"),
                "new_session": not session_id,
            },
        )
        return SubmissionReceipt(session_id=target_session_id, result_id=result_id)
