"""Template-driven scoring: validation, interpretation and copy rendering."""

from __future__ import annotations

from skinscores.scoring.engine import ScoreOutcome, compute_outcome
from skinscores.scoring.interpretation import Interpretation, resolve_interpretation
from skinscores.scoring.renderer import render_copy_blocks, render_template
from skinscores.scoring.validator import validate
from skinscores.scoring.values import Contribution, ScoreComputation

__all__ = [
    "Contribution",
    "Interpretation",
    "ScoreComputation",
    "ScoreOutcome",
    "compute_outcome",
    "render_copy_blocks",
    "render_template",
    "resolve_interpretation",
    "validate",
]
