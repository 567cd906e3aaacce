"""Validate → score → interpret → render, as one pure step."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from skinscores.models import ScoreTemplate
from skinscores.scoring.interpretation import Interpretation, resolve_interpretation
from skinscores.scoring.renderer import render_copy_blocks
from skinscores.scoring.validator import validate
from skinscores.scoring.values import ScoreComputation


@dataclass(frozen=True)
class ScoreOutcome:
    """Everything derived from one template + raw input bag."""

    computation: ScoreComputation
    interpretation: Interpretation
    copy_blocks: list[str]

    @property
    def score(self) -> float:
        return self.computation.total_score

    @property
    def sanitized_inputs(self) -> dict[str, Any]:
        return self.computation.sanitized_inputs


def compute_outcome(template: ScoreTemplate, raw_inputs: Mapping[str, Any]) -> ScoreOutcome:
    """Run the full scoring pipeline. Raises ``InvalidArgumentError`` on bad input."""
    computation = validate(template, raw_inputs)
    score = computation.total_score
    interpretation = resolve_interpretation(template.interpretation.ranges, score)
    copy_blocks = render_copy_blocks(
        template.copy_blocks,
        {
            "score": score,
            "interpretationLabel": interpretation.label,
            "interpretationSummary": interpretation.guidance,
        },
    )
    return ScoreOutcome(computation, interpretation, copy_blocks)
