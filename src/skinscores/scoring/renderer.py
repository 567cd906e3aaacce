"""Placeholder substitution for copy-block templates."""

from __future__ import annotations

import re
from typing import Mapping, Sequence, Union

from skinscores.models import CopyBlock
from skinscores.scoring.values import format_number

RenderValue = Union[str, int, float]

_PLACEHOLDER = re.compile(r"{{(.*?)}}")


def _to_text(value: RenderValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


def render_template(body: str, values: Mapping[str, RenderValue]) -> str:
    """Replace every ``{{ key }}`` token with ``values[key]``; unknown keys render empty.

    Single pass: substituted text is never rescanned for tokens.
    """

    def _substitute(match: re.Match[str]) -> str:
        key = match.group(1).strip()
        if key not in values:
            return ""
        return _to_text(values[key])

    return _PLACEHOLDER.sub(_substitute, body)


def render_copy_blocks(
    blocks: Sequence[CopyBlock],
    values: Mapping[str, RenderValue],
) -> list[str]:
    """Render each block body, preserving block order."""
    return [render_template(block.body_template, values) for block in blocks]
