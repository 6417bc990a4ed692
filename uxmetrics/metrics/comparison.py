"""Differences and ratios between two aggregates of the same metric."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from uxmetrics.metrics.aggregation import ObservationFilter, summarize_study
from uxmetrics.models.observations import AssessmentKind, Observation
from uxmetrics.models.summaries import (
    AggregateSummary,
    ComparisonResult,
    MetricsComparison,
    StudyMetrics,
)

INSUFFICIENT_DATA = "insufficient_data"


def compare_summaries(current: AggregateSummary, baseline: AggregateSummary) -> ComparisonResult:
    """Compare ``current`` against ``baseline``.

    difference = current - baseline, ratio = current / baseline and
    percentage_change = difference / baseline * 100. If either side has
    no observations the result is marked not comparable instead of
    carrying a misleading number.
    """
    a, b = current.value, baseline.value
    if current.count == 0 or baseline.count == 0 or a is None or b is None:
        return ComparisonResult(comparable=False, reason=INSUFFICIENT_DATA)

    difference = a - b
    if b == 0:
        ratio = None
        percentage_change = 0.0 if a == 0 else None
    else:
        ratio = a / b
        percentage_change = difference / b * 100
    return ComparisonResult(
        comparable=True,
        difference=difference,
        ratio=ratio,
        percentage_change=percentage_change,
    )


def compare_study_metrics(baseline: StudyMetrics, comparison: StudyMetrics) -> MetricsComparison:
    """Per-kind comparison of ``comparison`` relative to ``baseline``."""
    results = {
        kind: compare_summaries(
            comparison.metrics.for_kind(kind),
            baseline.metrics.for_kind(kind),
        )
        for kind in AssessmentKind
    }
    return MetricsComparison(baseline=baseline, comparison=comparison, results=results)


def compare_time_periods(
    study_id: str,
    observations: Iterable[Observation],
    baseline_period: ObservationFilter,
    comparison_period: ObservationFilter,
    *,
    now: datetime | None = None,
) -> MetricsComparison:
    """Compare two windows of the same study's observations."""
    selected = list(observations)
    baseline = summarize_study(study_id, selected, baseline_period, now=now)
    comparison = summarize_study(study_id, selected, comparison_period, now=now)
    return compare_study_metrics(baseline, comparison)


__all__ = [
    "INSUFFICIENT_DATA",
    "compare_study_metrics",
    "compare_summaries",
    "compare_time_periods",
]
