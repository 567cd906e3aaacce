"""Read endpoints: session history, per-session results, daily aggregates."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from skinscores.api.auth import require_caller
from skinscores.exceptions import NotFoundError, PermissionDeniedError
from skinscores.models import AggregateSnapshot, Caller, ScoreResult, ScoreSession

router = APIRouter(tags=["history"])


@router.get("/sessions", response_model=list[ScoreSession])
def list_my_sessions(req: Request, caller: Caller = Depends(require_caller)) -> list[ScoreSession]:
    """The caller's sessions, newest first."""
    return req.app.state.history_service.list_sessions_for_user(caller.uid)


@router.get("/sessions/{session_id}/results", response_model=list[ScoreResult])
def list_session_results(
    session_id: str,
    req: Request,
    caller: Caller = Depends(require_caller),
    limit: int = Query(50, ge=1, le=500),
) -> list[ScoreResult]:
    """Every result recorded against one session, newest first."""
    history = req.app.state.history_service
    session = history.get_session(session_id)
    if session is None:
        raise NotFoundError(f'Session "{session_id}" not found.')
    if session.user_id != caller.uid and not caller.is_admin:
        raise PermissionDeniedError(f'Cannot read session "{session_id}".')
    return history.list_results_for_sessions([session_id], limit=limit)


@router.get("/patients/{patient_ref}/sessions", response_model=list[ScoreSession])
def list_patient_sessions(
    patient_ref: str,
    req: Request,
    caller: Caller = Depends(require_caller),
    limit: int = Query(100, ge=1, le=500),
) -> list[ScoreSession]:
    """Sessions for one patient; non-admins only see their own."""
    return req.app.state.history_service.list_sessions_for_patient(
        patient_ref,
        user_id=None if caller.is_admin else caller.uid,
        limit=limit,
    )


@router.get("/aggregates", response_model=list[AggregateSnapshot])
def list_aggregates(
    req: Request,
    caller: Caller = Depends(require_caller),
    template_id: Optional[str] = Query(None, alias="templateId"),
    days: int = Query(30, ge=1, le=366),
) -> list[AggregateSnapshot]:
    """Daily snapshots from the last ``days`` days, newest first."""
    return req.app.state.aggregation_service.list_recent(template_id=template_id, days=days)
