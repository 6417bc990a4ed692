"""UX metric calculation, aggregation and comparison."""

from uxmetrics.metrics.aggregation import (
    ObservationFilter,
    aggregate,
    calculate_mean,
    calculate_median,
    filter_observations,
    summarize_study,
)
from uxmetrics.metrics.calculators import (
    calculate_duration,
    calculate_efficiency,
    calculate_error_rate,
    calculate_single_success_rate,
    calculate_success_rate,
    calculate_time_based_efficiency,
    get_error_breakdown,
    measure,
    validate_seq_rating,
)
from uxmetrics.metrics.comparison import compare_study_metrics, compare_summaries, compare_time_periods
from uxmetrics.metrics.formatting import (
    format_duration,
    format_duration_detailed,
    format_percentage,
    round_to_decimals,
)

__all__ = [
    "ObservationFilter",
    "aggregate",
    "calculate_duration",
    "calculate_efficiency",
    "calculate_error_rate",
    "calculate_mean",
    "calculate_median",
    "calculate_single_success_rate",
    "calculate_success_rate",
    "calculate_time_based_efficiency",
    "compare_study_metrics",
    "compare_summaries",
    "compare_time_periods",
    "filter_observations",
    "format_duration",
    "format_duration_detailed",
    "format_percentage",
    "get_error_breakdown",
    "measure",
    "round_to_decimals",
    "summarize_study",
    "validate_seq_rating",
]
