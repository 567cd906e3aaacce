"""Sanitized input values and score contributions.

Each declared ``InputType`` has its own value variant; the validator emits
exactly one variant per accepted input. ``ScoreComputation`` keeps the
per-input contributions in declaration order so a total can always be traced
back to the inputs that produced it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Union


def format_number(value: float) -> str:
    """Render a number the way a JSON client shows it (``25`` not ``25.0``)."""
    if isinstance(value, float) and value.is_integer() and math.isfinite(value):
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class NumberValue:
    value: float

    def to_json(self) -> float:
        return self.value


@dataclass(frozen=True)
class BooleanValue:
    value: bool

    def to_json(self) -> bool:
        return self.value


@dataclass(frozen=True)
class SelectValue:
    value: str

    def to_json(self) -> str:
        return self.value


@dataclass(frozen=True)
class MultiSelectValue:
    values: tuple[str, ...]

    def to_json(self) -> list[str]:
        return list(self.values)


@dataclass(frozen=True)
class TextValue:
    # Free text is stored as given; non-string payloads pass through untouched.
    value: Any

    def to_json(self) -> Any:
        return self.value


SanitizedValue = Union[NumberValue, BooleanValue, SelectValue, MultiSelectValue, TextValue]


@dataclass(frozen=True)
class Contribution:
    """Points added to the total by one input (or one selected option)."""

    input_id: str
    label: str
    points: float


@dataclass
class ScoreComputation:
    """Validated inputs plus the ordered contributions that make up the score."""

    values: dict[str, SanitizedValue] = field(default_factory=dict)
    contributions: list[Contribution] = field(default_factory=list)

    @property
    def total_score(self) -> float:
        total: float = 0
        for contribution in self.contributions:
            total += contribution.points
        return total

    @property
    def sanitized_inputs(self) -> dict[str, Any]:
        return {input_id: value.to_json() for input_id, value in self.values.items()}
