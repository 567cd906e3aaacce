"""Query primitives shared by every document store backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Literal, Optional, Sequence

Operator = Literal["==", "in", "<", "<=", ">", ">="]


@dataclass(frozen=True)
class Filter:
    """A single ``field <op> value`` condition."""

    field: str
    op: Operator
    value: Any

    def matches(self, data: dict[str, Any]) -> bool:
        if self.field not in data:
            return False
        actual = data[self.field]
        if self.op == "==":
            return actual == self.value
        if self.op == "in":
            return actual in self.value
        if actual is None:
            return False
        try:
            if self.op == "<":
                return actual < self.value
            if self.op == "<=":
                return actual <= self.value
            if self.op == ">":
                return actual > self.value
            if self.op == ">=":
                return actual >= self.value
        except TypeError:
            return False
        raise ValueError(f"Unsupported filter operator: {self.op!r}")


@dataclass
class Document:
    """A stored document and its id."""

    id: str
    data: dict[str, Any]


def apply_query(
    documents: Iterable[Document],
    *,
    where: Sequence[Filter] = (),
    order_by: Optional[str] = None,
    descending: bool = False,
    limit: Optional[int] = None,
) -> list[Document]:
    """Filter, order and truncate ``documents``.

    Ordering on a field excludes documents that lack it (or hold None).
    """
    matched = [doc for doc in documents if all(f.matches(doc.data) for f in where)]
    if order_by is not None:
        matched = [doc for doc in matched if doc.data.get(order_by) is not None]
        matched.sort(key=lambda doc: doc.data[order_by], reverse=descending)
    if limit is not None:
        matched = matched[:limit]
    return matched


def merge_fields(existing: Optional[dict[str, Any]], update: dict[str, Any]) -> dict[str, Any]:
    """Shallow merge: fields in ``update`` replace those in ``existing``."""
    merged = dict(existing or {})
    merged.update(update)
    return merged
