"""Lock-serialized transactions for single-process stores (memory, file)."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from skinscores.persistence.query import merge_fields

log = logging.getLogger(__name__)

_Key = tuple[str, str]


class BufferedTransaction:
    """Buffers writes; reads go straight to the committed state."""

    def __init__(self, read: Callable[[str, str], Optional[dict[str, Any]]]) -> None:
        self._read = read
        self.writes: dict[_Key, dict[str, Any]] = {}

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        return self._read(collection, doc_id)

    def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        key = (collection, doc_id)
        if merge:
            base = self.writes.get(key)
            if base is None:
                base = self._read(collection, doc_id)
            data = merge_fields(base, data)
        self.writes[key] = dict(data)


class LockedTransactions:
    """Mixin serializing transactions behind one re-entrant lock.

    Subclasses provide ``_read`` and ``_write``.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

    def _read(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        raise NotImplementedError

    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        raise NotImplementedError

    @contextmanager
    def transaction(self) -> Iterator[BufferedTransaction]:
        with self._lock:
            txn = BufferedTransaction(self._read)
            yield txn
            for (collection, doc_id), data in txn.writes.items():
                self._write(collection, doc_id, data)
            log.debug("Committed transaction with %d write(s)", len(txn.writes))

    def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        with self.transaction() as txn:
            txn.set(collection, doc_id, data, merge=merge)
