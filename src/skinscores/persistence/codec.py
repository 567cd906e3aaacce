"""JSON encoding for documents that may hold datetimes."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

_DATETIME_TAG = "$datetime"


def _default(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_DATETIME_TAG: value.isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _object_hook(obj: dict[str, Any]) -> Any:
    if len(obj) == 1 and _DATETIME_TAG in obj:
        return datetime.fromisoformat(obj[_DATETIME_TAG])
    return obj


def encode_document(data: dict[str, Any]) -> str:
    return json.dumps(data, default=_default, ensure_ascii=False)


def decode_document(raw: str) -> dict[str, Any]:
    return json.loads(raw, object_hook=_object_hook)
