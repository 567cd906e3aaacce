"""Read-side queries over sessions and results."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from skinscores.models import RESULTS, SESSIONS, ScoreResult, ScoreSession
from skinscores.persistence.protocols import IDocumentStore
from skinscores.persistence.query import Document, Filter
from skinscores.services.export_service import chunked

log = logging.getLogger(__name__)


def _to_session(document: Document) -> ScoreSession:
    data = {**document.data, "id": document.id}
    data.setdefault("template_slug", data.get("template_id"))
    data.setdefault("template_name", data.get("template_id"))
    return ScoreSession.model_validate(data)


def _to_result(document: Document) -> ScoreResult:
    return ScoreResult.model_validate({**document.data, "id": document.id})


class HistoryService:
    """Lists a user's or patient's sessions and the results attached to them."""

    def __init__(self, store: IDocumentStore, *, chunk_size: int = 10) -> None:
        self._store = store
        self._chunk_size = chunk_size

    def get_session(self, session_id: str) -> Optional[ScoreSession]:
        data = self._store.get(SESSIONS, session_id)
        return _to_session(Document(session_id, data)) if data is not None else None

    def list_sessions_for_user(self, user_id: str) -> list[ScoreSession]:
        documents = self._store.query(
            SESSIONS,
            where=[Filter("user_id", "==", user_id)],
            order_by="created_at",
            descending=True,
        )
        return [_to_session(doc) for doc in documents]

    def list_sessions_for_patient(
        self,
        patient_ref: str,
        user_id: Optional[str] = None,
        limit: int = 100,
    ) -> list[ScoreSession]:
        where = [Filter("patient_ref", "==", patient_ref)]
        if user_id:
            where.append(Filter("user_id", "==", user_id))
        documents = self._store.query(
            SESSIONS, where=where, order_by="updated_at", descending=True, limit=limit
        )
        return [_to_session(doc) for doc in documents]

    def list_results_for_sessions(
        self,
        session_ids: Sequence[str],
        limit: int = 50,
    ) -> list[ScoreResult]:
        """Newest first; ``limit`` applies per chunk of session ids."""
        if not session_ids:
            return []
        results: list[ScoreResult] = []
        for chunk in chunked(session_ids, self._chunk_size):
            documents = self._store.query(
                RESULTS,
                where=[Filter("session_id", "in", chunk)],
                order_by="created_at",
                descending=True,
                limit=limit,
            )
            results.extend(_to_result(doc) for doc in documents)
        results.sort(key=lambda result: result.created_at, reverse=True)
        return results

    def list_results_for_user(self, user_id: str, limit: int = 100) -> list[ScoreResult]:
        documents = self._store.query(
            RESULTS,
            where=[Filter("user_id", "==", user_id)],
            order_by="created_at",
            descending=True,
            limit=limit,
        )
        return [_to_result(doc) for doc in documents]
