"""Document store wrapper that records every query for assertions."""

from __future__ import annotations

from typing import Any, ContextManager, Optional, Sequence

from skinscores.persistence.memory_backend import MemoryDocumentStore
from skinscores.persistence.protocols import ITransaction
from skinscores.persistence.query import Document, Filter


class CountingDocumentStore:
    """Delegates to a ``MemoryDocumentStore`` and logs queries and commits."""

    def __init__(self, inner: Optional[MemoryDocumentStore] = None) -> None:
        self.inner = inner or MemoryDocumentStore()
        self.queries: list[tuple[str, list[Filter]]] = []
        self.transactions = 0

    def new_id(self) -> str:
        return self.inner.new_id()

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        return self.inner.get(collection, doc_id)

    def set(self, collection: str, doc_id: str, data: dict[str, Any], *, merge: bool = False) -> None:
        self.inner.set(collection, doc_id, data, merge=merge)

    def delete(self, collection: str, doc_id: str) -> None:
        self.inner.delete(collection, doc_id)

    def query(
        self,
        collection: str,
        *,
        where: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        self.queries.append((collection, list(where)))
        return self.inner.query(
            collection, where=where, order_by=order_by, descending=descending, limit=limit
        )

    def transaction(self) -> ContextManager[ITransaction]:
        self.transactions += 1
        return self.inner.transaction()

    def queries_on(self, collection: str) -> list[list[Filter]]:
        return [where for name, where in self.queries if name == collection]
