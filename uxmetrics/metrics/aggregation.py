"""Study-level aggregation of observation metrics.

Aggregates are recomputed from the full filtered input on every call;
nothing is cached, so adding an observation and re-aggregating always
reflects it. An empty input is the identity summary: ``count=0`` with
every statistic ``None``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime, time
from statistics import mean, median
from typing import Literal

from pydantic import BaseModel, field_validator

from uxmetrics.core.logging import analysis_scope, observation_scope
from uxmetrics.metrics.calculators import measure
from uxmetrics.models.observations import AssessmentKind, Observation
from uxmetrics.models.summaries import AggregateSummary, DateRange, MetricsSummary, StudyMetrics

logger = logging.getLogger(__name__)

TaskMatch = Literal["exact", "substring"]

# Time-on-task reports the median to damp outliers; everything else the mean.
_HEADLINE_STATISTIC: dict[AssessmentKind, Literal["mean", "median"]] = {
    AssessmentKind.task_success_rate: "mean",
    AssessmentKind.time_on_task: "median",
    AssessmentKind.task_efficiency: "mean",
    AssessmentKind.error_rate: "mean",
    AssessmentKind.seq: "mean",
}


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=UTC)
    return value


def _coerce_bound(value: object, bound: time) -> object:
    if isinstance(value, str) and len(value.strip()) == 10:
        value = date.fromisoformat(value.strip())
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, bound, tzinfo=UTC)
    return value


class ObservationFilter(BaseModel):
    """Predicate over observations; every set criterion must match.

    Date bounds are inclusive. A date-only ``end`` covers the whole day.
    ``task`` is compared against the stable task key by default; with
    ``task_match="substring"`` it is a case-insensitive substring of the
    task description instead.
    """

    start: datetime | None = None
    end: datetime | None = None
    participant_id: str | None = None
    task: str | None = None
    task_match: TaskMatch = "exact"

    @field_validator("start", mode="before")
    @classmethod
    def _start_of_day(cls, value: object) -> object:
        return _coerce_bound(value, time.min)

    @field_validator("end", mode="before")
    @classmethod
    def _end_of_day(cls, value: object) -> object:
        return _coerce_bound(value, time.max)

    @field_validator("start", "end")
    @classmethod
    def _normalize_timezone(cls, value: datetime | None) -> datetime | None:
        return None if value is None else _as_utc(value)

    @property
    def has_date_range(self) -> bool:
        return self.start is not None or self.end is not None

    def matches(self, observation: Observation) -> bool:
        if self.has_date_range:
            if observation.recorded_at is None:
                return False
            recorded_at = _as_utc(observation.recorded_at)
            if self.start is not None and recorded_at < self.start:
                return False
            if self.end is not None and recorded_at > self.end:
                return False

        if self.participant_id and observation.participant_id != self.participant_id:
            return False

        if self.task:
            if self.task_match == "substring":
                if self.task.lower() not in observation.task_description.lower():
                    return False
            elif observation.task_key != self.task:
                return False

        return True


def filter_observations(
    observations: Iterable[Observation],
    filters: ObservationFilter | None = None,
) -> list[Observation]:
    """Return the matching observations as a new list."""
    if filters is None:
        return list(observations)
    return [observation for observation in observations if filters.matches(observation)]


def _finite(values: Iterable[float]) -> list[float]:
    return [float(v) for v in values if v is not None and math.isfinite(v)]


def calculate_mean(values: Iterable[float]) -> float | None:
    finite = _finite(values)
    if not finite:
        return None
    return float(mean(finite))


def calculate_median(values: Iterable[float]) -> float | None:
    finite = _finite(values)
    if not finite:
        return None
    return float(median(finite))


def metric_values(
    observations: Iterable[Observation],
    kind: AssessmentKind | str,
    *,
    now: datetime | None = None,
) -> list[float]:
    """Per-observation metric values for one assessment kind.

    Observations whose calculator yields no value (invalid SEQ ratings)
    are left out, as are values that overflow to infinity; the latter are
    logged because they shrink ``count``.
    """
    kind = AssessmentKind(kind)
    values: list[float] = []
    for observation in observations:
        if observation.assessment_kind != kind:
            continue
        result = measure(observation, now=now)
        if result.value is None:
            continue
        if not math.isfinite(result.value):
            with observation_scope(observation):
                logger.warning("dropping non-finite %s value %r", kind.value, result.value)
            continue
        values.append(result.value)
    return values


def summarize_values(
    values: Sequence[float],
    statistic: Literal["mean", "median"] = "mean",
) -> AggregateSummary:
    finite = _finite(values)
    if not finite:
        return AggregateSummary(statistic=statistic)
    return AggregateSummary(
        statistic=statistic,
        mean=calculate_mean(finite),
        median=calculate_median(finite) if statistic == "median" else None,
        count=len(finite),
    )


def aggregate(
    observations: Iterable[Observation],
    kind: AssessmentKind | str,
    filters: ObservationFilter | None = None,
    *,
    now: datetime | None = None,
) -> AggregateSummary:
    """Collapse the filtered observations of one kind into a summary."""
    kind = AssessmentKind(kind)
    selected = filter_observations(observations, filters)
    values = metric_values(selected, kind, now=now)
    return summarize_values(values, _HEADLINE_STATISTIC[kind])


def _date_range(observations: Sequence[Observation]) -> DateRange:
    timestamps = [_as_utc(o.recorded_at) for o in observations if o.recorded_at is not None]
    if not timestamps:
        return DateRange()
    return DateRange(start=min(timestamps), end=max(timestamps))


def summarize_study(
    study_id: str,
    observations: Iterable[Observation],
    filters: ObservationFilter | None = None,
    *,
    now: datetime | None = None,
) -> StudyMetrics:
    """Aggregate every assessment kind for one study's observations."""
    with analysis_scope(study_id=study_id):
        selected = filter_observations(observations, filters)
        summaries = {
            kind.value: summarize_values(
                metric_values(selected, kind, now=now),
                _HEADLINE_STATISTIC[kind],
            )
            for kind in AssessmentKind
        }
        sessions = {o.session_id for o in selected if o.session_id is not None}
        participants = {o.participant_id for o in selected if o.participant_id is not None}
        logger.debug(
            "summarized %d observations across %d sessions",
            len(selected),
            len(sessions),
        )
        return StudyMetrics(
            study_id=study_id,
            session_count=len(sessions),
            participant_count=len(participants),
            date_range=_date_range(selected),
            metrics=MetricsSummary(**summaries),
        )


def unique_task_descriptions(observations: Iterable[Observation]) -> list[str]:
    return sorted({observation.task_description for observation in observations})


__all__ = [
    "ObservationFilter",
    "TaskMatch",
    "aggregate",
    "calculate_mean",
    "calculate_median",
    "filter_observations",
    "metric_values",
    "summarize_study",
    "summarize_values",
    "unique_task_descriptions",
]
