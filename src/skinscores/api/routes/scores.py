"""Server-side score calculation endpoint."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request

from skinscores.api.auth import require_caller
from skinscores.models import Caller, CamelModel

router = APIRouter(tags=["scores"])


class CalculateScoreRequest(CamelModel):
    """Raw inputs for one template, optionally attached to an existing session."""

    template_slug: str
    inputs: dict[str, Any]
    patient_ref: Optional[str] = None
    session_id: Optional[str] = None


class CalculateScoreResponse(CamelModel):
    """Computed score, interpretation and rendered copy blocks."""

    session_id: str
    result_id: str
    score: float
    interpretation_label: str
    interpretation_summary: str
    copy_blocks: list[str]


@router.post("/scores", response_model=CalculateScoreResponse)
def calculate_score(
    payload: CalculateScoreRequest,
    req: Request,
    caller: Caller = Depends(require_caller),
) -> CalculateScoreResponse:
    """Validate inputs against the template, score them and record the submission."""
    submission = req.app.state.submission_service.calculate_score(
        caller,
        payload.template_slug,
        payload.inputs,
        patient_ref=payload.patient_ref,
        session_id=payload.session_id,
    )
    return CalculateScoreResponse(
        session_id=submission.session_id,
        result_id=submission.result_id,
        score=submission.score,
        interpretation_label=submission.interpretation_label,
        interpretation_summary=submission.interpretation_summary,
        copy_blocks=submission.copy_blocks,
    )
