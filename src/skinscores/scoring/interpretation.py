"""Map a computed score to an interpretation range."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from skinscores.models import InterpretationRange

UNCLASSIFIED_LABEL = "Unclassified"
NO_GUIDANCE = "No guidance available."


@dataclass(frozen=True)
class Interpretation:
    label: str
    guidance: str
    range: Optional[InterpretationRange] = None

    @property
    def matched(self) -> bool:
        return self.range is not None


def resolve_interpretation(
    ranges: Sequence[InterpretationRange],
    score: float,
) -> Interpretation:
    """Return the first range, in declaration order, with ``min <= score <= max``.

    Ranges may overlap; template authors rely on their order to break ties,
    so the scan never sorts or prefers a narrower match.
    """
    for candidate in ranges:
        if candidate.min <= score <= candidate.max:
            return Interpretation(candidate.label, candidate.guidance, candidate)
    return Interpretation(UNCLASSIFIED_LABEL, NO_GUIDANCE)
