"""Patient registry, scoped to the clinician who created each record."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from skinscores.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
)
from skinscores.models import PATIENTS, Caller, PatientRecord
from skinscores.persistence.protocols import IDocumentStore
from skinscores.persistence.query import Filter

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_patient(patient_id: str, data: dict[str, Any]) -> PatientRecord:
    return PatientRecord.model_validate({**data, "id": patient_id})


def _require_caller(caller: Optional[Caller]) -> Caller:
    if caller is None or not caller.uid:
        raise UnauthenticatedError("Authentication is required.")
    return caller


def _check_access(caller: Caller, patient_id: str, data: Optional[dict[str, Any]]) -> dict[str, Any]:
    if data is None:
        raise NotFoundError(f'Patient "{patient_id}" not found.')
    if data.get("owner_user_id") != caller.uid and not caller.is_admin:
        raise PermissionDeniedError(f'Cannot access patient "{patient_id}".')
    return data


def _require_display_id(display_id: str) -> str:
    display_id = display_id.strip()
    if not display_id:
        raise InvalidArgumentError("displayId must not be empty")
    return display_id


class PatientService:
    """Create, read and update patient records.

    Each record belongs to ``owner_user_id``. Owners see and edit their own
    patients; admins can read and edit any record but listing stays per owner.
    """

    def __init__(
        self,
        store: IDocumentStore,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._clock = clock or _utcnow

    def list_for_owner(self, owner_user_id: str) -> list[PatientRecord]:
        documents = self._store.query(
            PATIENTS,
            where=[Filter("owner_user_id", "==", owner_user_id)],
            order_by="created_at",
            descending=True,
        )
        return [_to_patient(doc.id, doc.data) for doc in documents]

    def get(self, caller: Optional[Caller], patient_id: str) -> PatientRecord:
        caller = _require_caller(caller)
        data = _check_access(caller, patient_id, self._store.get(PATIENTS, patient_id))
        return _to_patient(patient_id, data)

    def create(
        self,
        caller: Optional[Caller],
        display_id: str,
        *,
        notes: Optional[str] = None,
        organization_id: Optional[str] = None,
    ) -> PatientRecord:
        caller = _require_caller(caller)
        now = self._clock()
        patient_id = self._store.new_id()
        data = {
            "display_id": _require_display_id(display_id),
            "notes": notes,
            "owner_user_id": caller.uid,
            "organization_id": organization_id,
            "created_at": now,
            "updated_at": now,
        }
        self._store.set(PATIENTS, patient_id, data)
        log.info("Created patient", extra={"patient_id": patient_id, "owner_user_id": caller.uid})
        return _to_patient(patient_id, data)

    def update(
        self,
        caller: Optional[Caller],
        patient_id: str,
        *,
        display_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> PatientRecord:
        """Change ``display_id`` and/or ``notes``; fields left as None are untouched."""
        caller = _require_caller(caller)
        updates: dict[str, Any] = {"updated_at": self._clock()}
        if display_id is not None:
            updates["display_id"] = _require_display_id(display_id)
        if notes is not None:
            updates["notes"] = notes

        with self._store.transaction() as txn:
            current = _check_access(caller, patient_id, txn.get(PATIENTS, patient_id))
            txn.set(PATIENTS, patient_id, updates, merge=True)

        return _to_patient(patient_id, {**current, **updates})
