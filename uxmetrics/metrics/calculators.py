"""Per-observation UX metric calculators.

Calculators never raise on bad data. A missing or out-of-range field
degrades to 0 and the reason is logged as a warning; ``measure`` also
returns the reason as ``MetricResult.diagnostic`` for callers that want to
surface it.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import TypeAlias

from uxmetrics.core.logging import observation_scope
from uxmetrics.models.observations import (
    AssessmentKind,
    ErrorDetail,
    ErrorRateObservation,
    ErrorType,
    Observation,
    SEQObservation,
    TaskEfficiencyObservation,
    TaskSuccessObservation,
    TimeBasedEfficiencyObservation,
    TimeOnTaskObservation,
)
from uxmetrics.models.summaries import MetricResult

logger = logging.getLogger(__name__)

Calculation: TypeAlias = tuple[float, str | None]

SEQ_MIN_RATING = 1
SEQ_MAX_RATING = 7

_SEQ_LABELS = {
    1: "Very Difficult",
    2: "Difficult",
    3: "Somewhat Difficult",
    4: "Neutral",
    5: "Somewhat Easy",
    6: "Easy",
    7: "Very Easy",
}


def _warn(diagnostic: str | None, observation: Observation) -> None:
    if diagnostic is None:
        return
    with observation_scope(observation):
        logger.warning("%s", diagnostic)


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and math.isfinite(value)


def _parse_timestamp(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None or parsed.tzinfo.utcoffset(parsed) is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


# -- task success -----------------------------------------------------------


def calculate_success_rate(observations: Iterable[TaskSuccessObservation | bool]) -> float:
    """Percentage of successful attempts; 0 for an empty collection."""
    outcomes = [o if isinstance(o, bool) else o.successful for o in observations]
    if not outcomes:
        return 0.0
    return sum(1 for o in outcomes if o) / len(outcomes) * 100


def calculate_single_success_rate(successful: bool) -> float:
    return 100.0 if successful else 0.0


# -- time on task -----------------------------------------------------------


def _duration(observation: TimeOnTaskObservation, now: datetime | None) -> Calculation:
    manual = observation.manual_duration_seconds
    if manual is not None and _is_number(manual) and manual >= 0:
        return float(manual), None

    if observation.start_time is None:
        return 0.0, "calculate_duration: start time is missing"
    end_value = observation.end_time if observation.end_time is not None else now
    if end_value is None:
        return 0.0, "calculate_duration: end time is missing"

    start = _parse_timestamp(observation.start_time)
    end = _parse_timestamp(end_value)
    if start is None or end is None:
        return 0.0, "calculate_duration: invalid date format"
    if end < start:
        return 0.0, "calculate_duration: end time is before start time"
    return (end - start).total_seconds(), None


def calculate_duration(observation: TimeOnTaskObservation, *, now: datetime | None = None) -> float:
    """Seconds spent on a task.

    A non-negative ``manual_duration_seconds`` wins over timestamps. When
    the end time is missing, ``now`` (if given) stands in for it; pass it
    explicitly to keep the result deterministic.
    """
    value, diagnostic = _duration(observation, now)
    _warn(diagnostic, observation)
    return value


# -- efficiency -------------------------------------------------------------


def _ratio_percent(name: str, optimal: float, actual: float, actual_field: str, optimal_field: str) -> Calculation:
    if not _is_number(actual) or actual <= 0:
        return 0.0, f"{name}: {actual_field} must be greater than 0"
    if not _is_number(optimal) or optimal < 0:
        return 0.0, f"{name}: {optimal_field} cannot be negative"
    return optimal / actual * 100, None


def _efficiency(observation: TaskEfficiencyObservation) -> Calculation:
    return _ratio_percent(
        "calculate_efficiency",
        observation.optimal_steps,
        observation.actual_steps,
        "actual_steps",
        "optimal_steps",
    )


def _time_based_efficiency(observation: TimeBasedEfficiencyObservation) -> Calculation:
    return _ratio_percent(
        "calculate_time_based_efficiency",
        observation.optimal_time_seconds,
        observation.actual_time_seconds,
        "actual_time_seconds",
        "optimal_time_seconds",
    )


def calculate_efficiency(observation: TaskEfficiencyObservation) -> float:
    """``optimal_steps / actual_steps * 100``; may exceed 100."""
    value, diagnostic = _efficiency(observation)
    _warn(diagnostic, observation)
    return value


def calculate_time_based_efficiency(observation: TimeBasedEfficiencyObservation) -> float:
    value, diagnostic = _time_based_efficiency(observation)
    _warn(diagnostic, observation)
    return value


# -- errors -----------------------------------------------------------------


def _error_rate(observation: ErrorRateObservation) -> Calculation:
    if not _is_number(observation.opportunities) or observation.opportunities <= 0:
        return 0.0, "calculate_error_rate: opportunities must be greater than 0"
    return len(observation.errors) / observation.opportunities * 100, None


def calculate_error_rate(observation: ErrorRateObservation) -> float:
    """Errors per opportunity as a percentage. Not clamped at 100."""
    value, diagnostic = _error_rate(observation)
    _warn(diagnostic, observation)
    return value


def calculate_error_rate_from_counts(error_count: int, opportunities: int) -> float:
    if not _is_number(opportunities) or opportunities <= 0:
        return 0.0
    if not _is_number(error_count) or error_count < 0:
        return 0.0
    return error_count / opportunities * 100


def get_error_breakdown(errors: Iterable[ErrorDetail] | None) -> dict[str, int]:
    """Count errors per known category. Unknown categories are ignored."""
    breakdown = {error_type.value: 0 for error_type in ErrorType}
    for error in errors or ():
        if error.type in breakdown:
            breakdown[error.type] += 1
    return breakdown


# -- single ease question ---------------------------------------------------


def validate_seq_rating(rating: object) -> bool:
    if isinstance(rating, bool):
        return False
    if isinstance(rating, float):
        if not rating.is_integer():
            return False
    elif not isinstance(rating, int):
        return False
    return SEQ_MIN_RATING <= rating <= SEQ_MAX_RATING


def get_seq_rating_label(rating: object) -> str:
    if not validate_seq_rating(rating):
        return "Unknown"
    return _SEQ_LABELS[int(rating)]  # type: ignore[call-overload]


def _seq(observation: SEQObservation) -> tuple[float | None, str | None]:
    if not validate_seq_rating(observation.rating):
        return None, f"seq: rating {observation.rating!r} is outside 1-7 or not an integer"
    return float(observation.rating), None


# -- dispatch ---------------------------------------------------------------


def measure(observation: Observation, *, now: datetime | None = None) -> MetricResult:
    """Compute the metric for one observation of any kind.

    Invalid SEQ ratings yield ``value=None`` so they drop out of averages;
    every other degraded input yields 0.
    """
    value: float | None
    match observation:
        case TaskSuccessObservation():
            value, diagnostic = calculate_single_success_rate(observation.successful), None
        case TimeOnTaskObservation():
            value, diagnostic = _duration(observation, now)
        case TaskEfficiencyObservation():
            value, diagnostic = _efficiency(observation)
        case TimeBasedEfficiencyObservation():
            value, diagnostic = _time_based_efficiency(observation)
        case ErrorRateObservation():
            value, diagnostic = _error_rate(observation)
        case SEQObservation():
            value, diagnostic = _seq(observation)
        case _:
            raise TypeError(f"unsupported observation type: {type(observation).__name__}")

    _warn(diagnostic, observation)
    return MetricResult(kind=observation.assessment_kind, value=value, diagnostic=diagnostic)


def calculated_metrics(observation: Observation, *, now: datetime | None = None) -> dict[str, float]:
    """Display cache stored alongside an observation.

    Keys follow the metric names the dashboards read: ``success_rate``,
    ``duration_seconds``, ``efficiency``, ``error_rate`` (plus one
    ``errors_<type>`` count per category) and ``seq_rating``.
    """
    result = measure(observation, now=now)
    keys = {
        AssessmentKind.task_success_rate: "success_rate",
        AssessmentKind.time_on_task: "duration_seconds",
        AssessmentKind.task_efficiency: "efficiency",
        AssessmentKind.error_rate: "error_rate",
        AssessmentKind.seq: "seq_rating",
    }
    metrics: dict[str, float] = {}
    if result.value is not None:
        metrics[keys[result.kind]] = result.value
    if isinstance(observation, ErrorRateObservation):
        for error_type, count in get_error_breakdown(observation.errors).items():
            metrics[f"errors_{error_type}"] = float(count)
    return metrics


__all__ = [
    "SEQ_MAX_RATING",
    "SEQ_MIN_RATING",
    "calculate_duration",
    "calculate_efficiency",
    "calculate_error_rate",
    "calculate_error_rate_from_counts",
    "calculate_single_success_rate",
    "calculate_success_rate",
    "calculate_time_based_efficiency",
    "calculated_metrics",
    "get_error_breakdown",
    "get_seq_rating_label",
    "measure",
    "validate_seq_rating",
]
