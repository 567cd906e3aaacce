"""Batch export of results for a set of sessions, as plain text and CSV."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from skinscores.exceptions import InvalidArgumentError, UnauthenticatedError
from skinscores.models import RESULTS, Caller
from skinscores.persistence.protocols import IDocumentStore
from skinscores.persistence.query import Document, Filter
from skinscores.scoring.values import format_number

log = logging.getLogger(__name__)

CSV_HEADER = "sessionId,templateName,score,interpretationLabel,interpretationSummary,details"
MISSING_SCORE = "—"
DEFAULT_LABEL = "Result"


@dataclass(frozen=True)
class ResultExport:
    text: str
    csv: str


def chunked(items: Sequence[str], size: int) -> list[list[str]]:
    """Split ``items`` into consecutive lists of at most ``size`` elements."""
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def _score_display(data: dict[str, Any]) -> Optional[str]:
    score = data.get("score")
    if isinstance(score, (int, float)) and not isinstance(score, bool):
        return format_number(score)
    score_text = data.get("score_text")
    if score_text is not None:
        return str(score_text)
    return None


def _template_name(data: dict[str, Any]) -> str:
    return data.get("template_name") or data.get("template_id") or ""


def format_text_block(data: dict[str, Any]) -> str:
    """Human-readable block for one result; empty parts are dropped."""
    score = _score_display(data)
    label = data.get("interpretation_label") or DEFAULT_LABEL
    header = f"{_template_name(data)} — {score if score is not None else MISSING_SCORE} ({label})"
    copy_blocks = data.get("copy_blocks")
    details = data.get("details")
    parts = [
        header,
        data.get("interpretation_summary") or "",
        *(copy_blocks if isinstance(copy_blocks, list) else []),
        json.dumps(details, indent=2, ensure_ascii=False, default=str) if details is not None else "",
    ]
    return "\n".join(str(part) for part in parts if part)


def format_csv_row(data: dict[str, Any]) -> str:
    """One CSV line; every field is a JSON string literal."""
    details = data.get("details")
    details_value = (
        json.dumps(details, separators=(",", ":"), ensure_ascii=False, default=str).replace("\n", " ")
        if details is not None
        else ""
    )
    fields = [
        data.get("session_id") or "",
        _template_name(data),
        _score_display(data) or "",
        data.get("interpretation_label") or "",
        data.get("interpretation_summary") or "",
        details_value,
    ]
    return ",".join(json.dumps(str(value), ensure_ascii=False) for value in fields)


class ResultExportService:
    """Fetches results in chunked ``in`` queries and renders them."""

    def __init__(
        self,
        store: IDocumentStore,
        *,
        chunk_size: int = 10,
        max_session_ids: int = 25,
    ) -> None:
        self._store = store
        self._chunk_size = chunk_size
        self._max_session_ids = max_session_ids

    async def export(self, session_ids: Sequence[str], caller: Optional[Caller]) -> ResultExport:
        """Export every visible result of ``session_ids``, oldest first.

        Non-admin callers only see their own results. Results without a
        ``created_at`` sort as if created now, i.e. after everything else.
        """
        if caller is None or not caller.uid:
            raise UnauthenticatedError("Authentication is required.")
        if not 1 <= len(session_ids) <= self._max_session_ids:
            raise InvalidArgumentError(
                f"sessionIds must contain between 1 and {self._max_session_ids} ids"
            )

        unique_ids = list(dict.fromkeys(session_ids))
        chunks = chunked(unique_ids, self._chunk_size)
        fetched = await asyncio.gather(
            *(asyncio.to_thread(self._fetch_chunk, chunk) for chunk in chunks)
        )

        results: list[Document] = []
        for documents in fetched:
            for document in documents:
                if caller.is_admin or document.data.get("user_id") == caller.uid:
                    results.append(document)

        now = datetime.now(timezone.utc)
        results.sort(key=lambda doc: _sort_time(doc.data.get("created_at"), now))

        log.info(
            "Exported %d result(s) for %d session id(s) in %d chunk(s)",
            len(results),
            len(session_ids),
            len(chunks),
        )
        text = "\n\n".join(format_text_block(doc.data) for doc in results)
        csv_lines = [CSV_HEADER, *(format_csv_row(doc.data) for doc in results)]
        return ResultExport(text=text, csv="\n".join(csv_lines))

    def _fetch_chunk(self, chunk: list[str]) -> list[Document]:
        return self._store.query(RESULTS, where=[Filter("session_id", "in", chunk)])


def _sort_time(value: Any, now: datetime) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return now
