"""Patient registry endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import Field

from skinscores.api.auth import require_caller
from skinscores.models import Caller, CamelModel, PatientRecord

router = APIRouter(tags=["patients"])


class CreatePatientRequest(CamelModel):
    display_id: str = Field(..., min_length=1)
    notes: Optional[str] = None
    organization_id: Optional[str] = None


class UpdatePatientRequest(CamelModel):
    display_id: Optional[str] = None
    notes: Optional[str] = None


@router.get("/patients", response_model=list[PatientRecord])
def list_patients(req: Request, caller: Caller = Depends(require_caller)) -> list[PatientRecord]:
    """Patients owned by the caller, newest first."""
    return req.app.state.patient_service.list_for_owner(caller.uid)


@router.post("/patients", response_model=PatientRecord, status_code=201)
def create_patient(
    payload: CreatePatientRequest,
    req: Request,
    caller: Caller = Depends(require_caller),
) -> PatientRecord:
    return req.app.state.patient_service.create(
        caller,
        payload.display_id,
        notes=payload.notes,
        organization_id=payload.organization_id,
    )


@router.get("/patients/{patient_id}", response_model=PatientRecord)
def get_patient(
    patient_id: str,
    req: Request,
    caller: Caller = Depends(require_caller),
) -> PatientRecord:
    return req.app.state.patient_service.get(caller, patient_id)


@router.patch("/patients/{patient_id}", response_model=PatientRecord)
def update_patient(
    patient_id: str,
    payload: UpdatePatientRequest,
    req: Request,
    caller: Caller = Depends(require_caller),
) -> PatientRecord:
    return req.app.state.patient_service.update(
        caller,
        patient_id,
        display_id=payload.display_id,
        notes=payload.notes,
    )
