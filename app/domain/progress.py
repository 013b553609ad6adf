"""Deterministic progress computation functions.

Pure functions with no external dependencies. Every place that shows a key
result or objective percentage goes through here.
"""

import math
from collections.abc import Iterable, Mapping
from typing import Any, assert_never

from app.domain.key_results import KeyResultType

_FIELDS = ("key_result_type", "initial_value", "current_value", "target_value")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 going up (33.5 -> 34)."""
    floor = math.floor(value)
    return floor + 1 if value - floor >= 0.5 else floor


def _as_number(value: Any) -> float:
    """Coerce a stored value to a finite float; anything unusable reads as 0."""
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def _read(key_result: Any) -> tuple[Any, float, float, float]:
    if isinstance(key_result, Mapping):
        raw = [key_result.get(field) for field in _FIELDS]
    else:
        raw = [getattr(key_result, field, None) for field in _FIELDS]
    kind, initial, current, target = raw
    return kind, _as_number(initial), _as_number(current), _as_number(target)


def _clamp(percentage: float) -> float:
    return min(100.0, max(0.0, percentage))


def compute_key_result_progress(key_result: Any) -> float:
    """Compute a key result's completion percentage (0-100).

    Args:
        key_result: KeyResultValues, an ORM row, or a mapping with
            key_result_type / initial_value / current_value / target_value

    Returns:
        Float percentage in [0, 100]. Never NaN or infinite.

    Pure function -- never raises. Linear variants are clamped so overshoot
    stays at 100 and regression stays at 0. A linear key result whose
    target equals its initial value has no defined progress and reports 0.
    Unknown types report 0.
    """
    raw_kind, initial, current, target = _read(key_result)
    kind = KeyResultType.parse(raw_kind)
    if kind is None:
        return 0.0

    if kind is KeyResultType.INCREASE_TO:
        if target == initial:
            return 0.0
        return _clamp((current - initial) / (target - initial) * 100)
    elif kind is KeyResultType.DECREASE_TO:
        if initial == target:
            return 0.0
        return _clamp((initial - current) / (initial - target) * 100)
    elif kind is KeyResultType.STAY_ABOVE:
        return 100.0 if current >= target else 0.0
    elif kind is KeyResultType.STAY_BELOW:
        return 100.0 if current <= target else 0.0
    elif kind is KeyResultType.ACHIEVED_OR_NOT:
        return 100.0 if current >= target else 0.0
    else:
        assert_never(kind)


def compute_objective_progress(key_results: Iterable[Any]) -> int:
    """Compute an objective's progress from its key results.

    Arithmetic mean of every key result's progress, rounded half-up.
    All five key result types count equally.

    Returns:
        Integer percentage 0-100. An objective without key results is 0.
    """
    percentages = [compute_key_result_progress(kr) for kr in key_results]
    if not percentages:
        return 0

    return round_half_up(sum(percentages) / len(percentages))
