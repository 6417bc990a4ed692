from __future__ import annotations

from uxmetrics.models.observations import (
    AssessmentKind,
    ErrorDetail,
    ErrorRateObservation,
    ErrorType,
    Observation,
    ObservationBase,
    SEQObservation,
    TaskEfficiencyObservation,
    TaskSuccessObservation,
    TimeBasedEfficiencyObservation,
    TimeOnTaskObservation,
    dump_observations,
    parse_observations,
)
from uxmetrics.models.summaries import (
    AggregateSummary,
    ComparisonResult,
    DateRange,
    MetricResult,
    MetricsComparison,
    MetricsSummary,
    Report,
    StudyMetrics,
)

__all__ = [
    "AggregateSummary",
    "AssessmentKind",
    "ComparisonResult",
    "DateRange",
    "ErrorDetail",
    "ErrorRateObservation",
    "ErrorType",
    "MetricResult",
    "MetricsComparison",
    "MetricsSummary",
    "Observation",
    "ObservationBase",
    "Report",
    "SEQObservation",
    "StudyMetrics",
    "TaskEfficiencyObservation",
    "TaskSuccessObservation",
    "TimeBasedEfficiencyObservation",
    "TimeOnTaskObservation",
    "dump_observations",
    "parse_observations",
]
