"""Nightly per-template rollup of the previous UTC day's results."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from skinscores.models import AGGREGATES, RESULTS, AggregateSnapshot
from skinscores.persistence.protocols import IDocumentStore
from skinscores.persistence.query import Filter

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def previous_day_window(now: datetime) -> tuple[datetime, datetime]:
    """Return ``[start of yesterday, start of today)`` in UTC."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    end = now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    return end - timedelta(days=1), end


def numeric_score(data: dict[str, Any]) -> Optional[float]:
    """A finite ``score``, else a ``score_text`` that parses as a finite number."""
    score = data.get("score")
    if isinstance(score, (int, float)) and not isinstance(score, bool) and math.isfinite(score):
        return score
    score_text = data.get("score_text")
    if isinstance(score_text, str) and score_text.strip() and "_" not in score_text:
        try:
            parsed = float(score_text.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


@dataclass
class _Accumulator:
    template_slug: Optional[str]
    template_name: Optional[str]
    total_count: int = 0
    numeric_count: int = 0
    numeric_sum: float = 0
    min_score: float = math.inf
    max_score: float = -math.inf

    def add(self, score: Optional[float]) -> None:
        self.total_count += 1
        if score is None:
            return
        self.numeric_count += 1
        self.numeric_sum += score
        self.min_score = min(self.min_score, score)
        self.max_score = max(self.max_score, score)


class NightlyAggregationService:
    """Builds one ``AggregateSnapshot`` per template for the previous UTC day.

    Snapshot ids are ``<template_id>-<YYYY-MM-DD>`` and writes merge over any
    earlier snapshot for the same key, so re-running a day overwrites it.
    """

    def __init__(
        self,
        store: IDocumentStore,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._clock = clock or _utcnow

    def run(self, now: Optional[datetime] = None) -> list[AggregateSnapshot]:
        start, end = previous_day_window(now or self._clock())
        documents = self._store.query(
            RESULTS,
            where=[Filter("created_at", ">=", start), Filter("created_at", "<", end)],
        )

        groups: dict[str, _Accumulator] = {}
        for document in documents:
            data = document.data
            template_id = data.get("template_id")
            if not template_id:
                log.warning("Result %s has no template_id; skipped", document.id)
                continue
            entry = groups.get(template_id)
            if entry is None:
                entry = _Accumulator(data.get("template_slug"), data.get("template_name"))
                groups[template_id] = entry
            entry.add(numeric_score(data))

        updated_at = self._clock()
        snapshots: list[AggregateSnapshot] = []
        for template_id, entry in groups.items():
            has_numeric = entry.numeric_count > 0
            snapshot = AggregateSnapshot(
                id=f"{template_id}-{start.date().isoformat()}",
                template_id=template_id,
                template_slug=entry.template_slug,
                template_name=entry.template_name,
                period_start=start,
                period_end=end,
                count=entry.total_count,
                numeric_count=entry.numeric_count,
                average_score=entry.numeric_sum / entry.numeric_count if has_numeric else None,
                min_score=entry.min_score if has_numeric else None,
                max_score=entry.max_score if has_numeric else None,
                updated_at=updated_at,
            )
            self._store.set(
                AGGREGATES,
                snapshot.id,
                snapshot.model_dump(exclude={"id"}),
                merge=True,
            )
            snapshots.append(snapshot)

        log.info(
            "Aggregated %d result(s) into %d snapshot(s) for %s",
            len(documents),
            len(snapshots),
            start.date().isoformat(),
        )
        return snapshots

    def list_recent(
        self,
        template_id: Optional[str] = None,
        days: int = 30,
        limit: int = 200,
    ) -> list[AggregateSnapshot]:
        """Snapshots whose period started within the last ``days`` days, newest first."""
        since = self._clock() - timedelta(days=days)
        where = [Filter("period_start", ">=", since)]
        if template_id:
            where.append(Filter("template_id", "==", template_id))
        documents = self._store.query(
            AGGREGATES,
            where=where,
            order_by="period_start",
            descending=True,
            limit=limit,
        )
        return [AggregateSnapshot.model_validate({**doc.data, "id": doc.id}) for doc in documents]

    def clear(self) -> int:
        """Delete every snapshot. Returns the number deleted."""
        documents = self._store.query(AGGREGATES)
        for document in documents:
            self._store.delete(AGGREGATES, document.id)
        log.info("Deleted %d aggregate snapshot(s)", len(documents))
        return len(documents)
