"""Derived metric values, study-level aggregates, comparisons and reports.

None of these carry state of their own: every instance is recomputed
from observations on demand. Missing statistics serialise as explicit
``null`` so exported JSON re-imports to identical models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from uxmetrics.models.observations import AssessmentKind


class MetricResult(BaseModel):
    """One calculator output plus an optional non-fatal diagnostic."""

    kind: AssessmentKind
    value: float | None
    diagnostic: str | None = None

    @property
    def degraded(self) -> bool:
        return self.diagnostic is not None


class AggregateSummary(BaseModel):
    """Mean/median and count over one metric.

    An empty summary (``count == 0``) has every statistic set to ``None``.
    """

    statistic: Literal["mean", "median"] = "mean"
    mean: float | None = None
    median: float | None = None
    count: int = Field(default=0, ge=0)

    @property
    def value(self) -> float | None:
        return self.median if self.statistic == "median" else self.mean

    @property
    def is_empty(self) -> bool:
        return self.count == 0


class MetricsSummary(BaseModel):
    task_success_rate: AggregateSummary = Field(default_factory=AggregateSummary)
    time_on_task: AggregateSummary = Field(
        default_factory=lambda: AggregateSummary(statistic="median")
    )
    task_efficiency: AggregateSummary = Field(default_factory=AggregateSummary)
    error_rate: AggregateSummary = Field(default_factory=AggregateSummary)
    seq: AggregateSummary = Field(default_factory=AggregateSummary)

    def for_kind(self, kind: AssessmentKind) -> AggregateSummary:
        return getattr(self, kind.value)


class DateRange(BaseModel):
    start: datetime | None = None
    end: datetime | None = None


class StudyMetrics(BaseModel):
    study_id: str
    session_count: int = 0
    participant_count: int = 0
    date_range: DateRange = Field(default_factory=DateRange)
    metrics: MetricsSummary = Field(default_factory=MetricsSummary)


class ComparisonResult(BaseModel):
    """Delta between two aggregates of the same metric.

    ``comparable`` is False when either side has no data; every numeric
    field is then ``None`` and ``reason`` says why.
    """

    comparable: bool
    difference: float | None = None
    ratio: float | None = None
    percentage_change: float | None = None
    reason: str | None = None


class MetricsComparison(BaseModel):
    baseline: StudyMetrics
    comparison: StudyMetrics
    results: dict[AssessmentKind, ComparisonResult] = Field(default_factory=dict)


class Report(BaseModel):
    report_id: str
    study_id: str
    study_name: str | None = None
    generated_at: datetime
    metrics: MetricsSummary
    session_count: int = 0
    participant_count: int = 0
    date_range: DateRange = Field(default_factory=DateRange)
    commentary: str | None = None


__all__ = [
    "AggregateSummary",
    "ComparisonResult",
    "DateRange",
    "MetricResult",
    "MetricsComparison",
    "MetricsSummary",
    "Report",
    "StudyMetrics",
]
