"""Contract shared by the memory, file and DynamoDB document stores.

Documents are flat JSON-like dicts (datetimes allowed) keyed by
``(collection, doc_id)``. Transactions give all-or-nothing writes: on a clean
exit from the ``transaction()`` block every buffered write is committed,
on an exception none is.
"""

from __future__ import annotations

from typing import Any, ContextManager, Optional, Protocol, Sequence, runtime_checkable

from skinscores.persistence.query import Document, Filter


@runtime_checkable
class ITransaction(Protocol):
    """Reads see committed state; writes are buffered until commit."""

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Read a document, or None if it does not exist."""
        ...

    def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        """Buffer a write. With ``merge`` top-level fields are merged over the existing document."""
        ...


@runtime_checkable
class IDocumentStore(Protocol):
    """Protocol for document stores (memory, file, DynamoDB)."""

    def new_id(self) -> str:
        """Generate a fresh document id."""
        ...

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Read a document, or None if it does not exist."""
        ...

    def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        """Write a document, optionally merging over the existing one."""
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document (no-op if not found)."""
        ...

    def query(
        self,
        collection: str,
        *,
        where: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        """Return documents matching every filter."""
        ...

    def transaction(self) -> ContextManager[ITransaction]:
        """Open a transaction; commit on clean exit, discard on exception."""
        ...
