"""Endpoint for recording scores computed by client-side calculators."""

from __future__ import annotations

from typing import Any, Optional, Union

from fastapi import APIRouter, Depends, Request

from skinscores.api.auth import require_caller
from skinscores.models import Caller, CamelModel

router = APIRouter(tags=["scores"])


class ToolResultPayload(CamelModel):
    score: Union[float, str, None] = None
    interpretation: str
    details: Optional[dict[str, Any]] = None


class ToolResultRequest(CamelModel):
    """A pre-computed result; the server stores it without re-scoring."""

    tool_id: str
    tool_slug: str
    tool_name: str
    inputs: dict[str, Any]
    result: ToolResultPayload
    patient_ref: Optional[str] = None
    session_id: Optional[str] = None


class ToolResultResponse(CamelModel):
    session_id: str
    result_id: str


@router.post("/tool-results", response_model=ToolResultResponse, status_code=201)
def submit_tool_result(
    payload: ToolResultRequest,
    req: Request,
    caller: Caller = Depends(require_caller),
) -> ToolResultResponse:
    """Record a client-computed result against a new or existing session."""
    receipt = req.app.state.submission_service.submit_tool_result(
        caller,
        tool_id=payload.tool_id,
        tool_slug=payload.tool_slug,
        tool_name=payload.tool_name,
        inputs=payload.inputs,
        score=payload.result.score,
        interpretation=payload.result.interpretation,
        details=payload.result.details,
        patient_ref=payload.patient_ref,
        session_id=payload.session_id,
    )
    return ToolResultResponse(session_id=receipt.session_id, result_id=receipt.result_id)
