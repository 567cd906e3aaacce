"""Score template lookup and seeding."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from skinscores.exceptions import NotFoundError, TemplateSchemaError
from skinscores.models import TEMPLATES, ScoreTemplate
from skinscores.persistence.protocols import IDocumentStore
from skinscores.persistence.query import Filter

log = logging.getLogger(__name__)

# Bookkeeping fields stored alongside the template body
_META_FIELDS = ("created_at", "updated_at")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TemplateRepository:
    """Read path for templates, plus the seeding write path used by the CLI."""

    def __init__(
        self,
        store: IDocumentStore,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._clock = clock or _utcnow

    def get_latest(self, slug: str) -> tuple[str, ScoreTemplate]:
        """Return ``(template_id, template)`` for the most recently updated version of ``slug``."""
        documents = self._store.query(
            TEMPLATES,
            where=[Filter("slug", "==", slug)],
            order_by="updated_at",
            descending=True,
            limit=1,
        )
        if not documents:
            raise NotFoundError(f'Score template "{slug}" not found.')

        document = documents[0]
        body = {k: v for k, v in document.data.items() if k not in _META_FIELDS}
        try:
            template = ScoreTemplate.model_validate(body)
        except ValidationError as exc:
            log.error("Stored template %s failed schema validation", document.id)
            raise TemplateSchemaError(
                f"Score template document {document.id!r} is malformed: {exc.error_count()} error(s)"
            ) from exc
        return document.id, template

    def save(self, template: ScoreTemplate) -> str:
        """Store ``template`` under ``<slug>-v<version>`` and return the document id."""
        doc_id = template.document_id
        now = self._clock()
        existing = self._store.get(TEMPLATES, doc_id)
        data = template.model_dump(mode="json")
        data["created_at"] = (existing or {}).get("created_at", now)
        data["updated_at"] = now
        self._store.set(TEMPLATES, doc_id, data)
        log.info("Saved template %s", doc_id)
        return doc_id


def load_templates_file(path: Path) -> list[ScoreTemplate]:
    """Parse a JSON array of templates (camelCase keys, as authored)."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"Expected a JSON array of templates in {path}")
    return [ScoreTemplate.model_validate(item) for item in raw]
