"""Document store that keeps one JSON file per document under a base directory."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Any, Optional, Sequence

from skinscores.persistence.codec import decode_document, encode_document
from skinscores.persistence.locked import LockedTransactions
from skinscores.persistence.query import Document, Filter, apply_query

log = logging.getLogger(__name__)


def _safe_name(name: str) -> str:
    return name.replace("/", "_").replace("\\", "_")


class FileDocumentStore(LockedTransactions):
    """Stores ``<base>/<collection>/<doc_id>.json``.

    Transactions are serialized within this process only; do not point two
    processes at the same directory.
    """

    def __init__(self, base_path: Path) -> None:
        super().__init__()
        self._base = base_path
        self._base.mkdir(parents=True, exist_ok=True)

    def _doc_path(self, collection: str, doc_id: str) -> Path:
        return self._base / _safe_name(collection) / f"{_safe_name(doc_id)}.json"

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def _read(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        path = self._doc_path(collection, doc_id)
        if not path.is_file():
            return None
        return decode_document(path.read_text(encoding="utf-8"))

    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        path = self._doc_path(collection, doc_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(encode_document(data), encoding="utf-8")
        tmp.replace(path)
        log.debug("Saved %s/%s to %s", collection, doc_id, path)

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            return self._read(collection, doc_id)

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            path = self._doc_path(collection, doc_id)
            if path.is_file():
                path.unlink()

    def query(
        self,
        collection: str,
        *,
        where: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        folder = self._base / _safe_name(collection)
        with self._lock:
            documents = [
                Document(path.stem, decode_document(path.read_text(encoding="utf-8")))
                for path in sorted(folder.glob("*.json"))
            ] if folder.is_dir() else []
        return apply_query(
            documents, where=where, order_by=order_by, descending=descending, limit=limit
        )
