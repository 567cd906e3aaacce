"""Dict-backed document store for tests and single-process local runs."""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Any, Optional, Sequence

from skinscores.persistence.locked import LockedTransactions
from skinscores.persistence.query import Document, Filter, apply_query

log = logging.getLogger(__name__)


class MemoryDocumentStore(LockedTransactions):
    """Keeps ``{collection: {doc_id: data}}`` in process memory; contents vanish on exit."""

    def __init__(self) -> None:
        super().__init__()
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def _read(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        data = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)
        log.debug("Saved %s/%s to memory store", collection, doc_id)

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            return self._read(collection, doc_id)

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._collections.get(collection, {}).pop(doc_id, None)

    def query(
        self,
        collection: str,
        *,
        where: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        with self._lock:
            documents = [
                Document(doc_id, copy.deepcopy(data))
                for doc_id, data in self._collections.get(collection, {}).items()
            ]
        return apply_query(
            documents, where=where, order_by=order_by, descending=descending, limit=limit
        )
