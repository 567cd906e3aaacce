"""Input validation and sanitization against a score template.

Inputs are checked in the order the template declares them and the first
violation aborts with ``InvalidArgumentError``; nothing is clamped or
silently dropped. Validation does no I/O.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Mapping

from skinscores.exceptions import InvalidArgumentError
from skinscores.models import InputDefinition, InputType, ScoreTemplate
from skinscores.scoring.values import (
    BooleanValue,
    Contribution,
    MultiSelectValue,
    NumberValue,
    SanitizedValue,
    ScoreComputation,
    SelectValue,
    TextValue,
    format_number,
)

_Validated = tuple[SanitizedValue, list[Contribution]]


def validate(template: ScoreTemplate, raw_inputs: Mapping[str, Any]) -> ScoreComputation:
    """Validate ``raw_inputs`` against ``template`` and compute the weighted score.

    Keys in ``raw_inputs`` that the template does not declare are ignored.
    """
    computation = ScoreComputation()

    for definition in template.inputs:
        raw = raw_inputs.get(definition.id)
        if definition.required and _is_absent(raw):
            raise InvalidArgumentError(f'Missing required input "{definition.label}"')

        validator = _VALIDATORS.get(definition.type, _validate_text)
        value, contributions = validator(definition, raw)
        computation.values[definition.id] = value
        computation.contributions.extend(contributions)

    return computation


def _is_absent(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and raw == "")


# ── Per-type validators ─────────────────────────────────────────────


def _validate_number(definition: InputDefinition, raw: Any) -> _Validated:
    number = _parse_number(raw)
    if number is None:
        raise InvalidArgumentError(f"{definition.label} must be a number")
    if definition.min is not None and number < definition.min:
        raise InvalidArgumentError(
            f"{definition.label} must be >= {format_number(definition.min)}"
        )
    if definition.max is not None and number > definition.max:
        raise InvalidArgumentError(
            f"{definition.label} must be <= {format_number(definition.max)}"
        )

    weight = definition.weight if definition.weight is not None else 1
    return NumberValue(number), [Contribution(definition.id, definition.label, number * weight)]


def _validate_boolean(definition: InputDefinition, raw: Any) -> _Validated:
    checked = _is_truthy(raw)
    weight = definition.weight if definition.weight is not None else 0
    points = weight if checked else 0
    return BooleanValue(checked), [Contribution(definition.id, definition.label, points)]


def _validate_select(definition: InputDefinition, raw: Any) -> _Validated:
    if not isinstance(raw, str):
        raise InvalidArgumentError(f"{definition.label} must be a string")

    option = definition.find_option(raw)
    if option is None:
        raise InvalidArgumentError(f'Invalid option for "{definition.label}"')

    points = _option_points(definition, option.score)
    return SelectValue(raw), [Contribution(definition.id, definition.label, points)]


def _validate_multiselect(definition: InputDefinition, raw: Any) -> _Validated:
    if not isinstance(raw, (list, tuple)):
        raise InvalidArgumentError(f"{definition.label} must be an array")

    selected = tuple(_option_value(item) for item in raw)
    contributions: list[Contribution] = []
    for value in selected:
        option = definition.find_option(value)
        if option is None:
            raise InvalidArgumentError(f'Invalid option for "{definition.label}"')
        contributions.append(
            Contribution(
                definition.id,
                f"{definition.label}: {option.label}",
                _option_points(definition, option.score),
            )
        )
    return MultiSelectValue(selected), contributions


def _validate_text(definition: InputDefinition, raw: Any) -> _Validated:
    return TextValue("" if raw is None else raw), []


_VALIDATORS: dict[InputType, Callable[[InputDefinition, Any], _Validated]] = {
    InputType.NUMBER: _validate_number,
    InputType.BOOLEAN: _validate_boolean,
    InputType.SELECT: _validate_select,
    InputType.MULTISELECT: _validate_multiselect,
    InputType.TEXT: _validate_text,
}


# ── Helpers ─────────────────────────────────────────────────────────


def _parse_number(raw: Any) -> float | None:
    """Return a finite number parsed from ``raw``, or None."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        number = raw
    elif isinstance(raw, str):
        if "_" in raw:
            return None
        try:
            number = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _is_truthy(raw: Any) -> bool:
    """Only None, False, zero, NaN and the empty string are false; containers are true."""
    if raw is None or raw is False or raw == "":
        return False
    if isinstance(raw, (int, float)):
        return raw != 0 and not math.isnan(raw)
    return True


def _option_points(definition: InputDefinition, option_score: float | None) -> float:
    if option_score is not None:
        return option_score
    if definition.weight is not None:
        return definition.weight
    return 0


def _option_value(item: Any) -> str:
    """String form of a multiselect element as a JSON client would send it."""
    if isinstance(item, bool):
        return "true" if item else "false"
    if isinstance(item, float):
        return format_number(item)
    return str(item)
