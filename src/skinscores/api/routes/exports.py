"""Result export endpoint (text + CSV)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import Field

from skinscores.api.auth import require_caller
from skinscores.models import Caller, CamelModel

router = APIRouter(tags=["exports"])


class ExportRequest(CamelModel):
    session_ids: list[str] = Field(..., min_length=1)


class ExportResponse(CamelModel):
    text: str
    csv: str


@router.post("/exports", response_model=ExportResponse)
async def generate_result_export(
    payload: ExportRequest,
    req: Request,
    caller: Caller = Depends(require_caller),
) -> ExportResponse:
    """Export results of up to the configured number of sessions.

    Admins see every matching result; other callers only their own.
    """
    export = await req.app.state.export_service.export(payload.session_ids, caller)
    return ExportResponse(text=export.text, csv=export.csv)
