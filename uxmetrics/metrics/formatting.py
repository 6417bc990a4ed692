"""Human-readable rendering of durations, percentages and summaries."""

from __future__ import annotations

import math

from uxmetrics.models.summaries import MetricsSummary

NOT_AVAILABLE = "N/A"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _whole_seconds(seconds: float) -> int | None:
    if not isinstance(seconds, int | float) or not math.isfinite(seconds) or seconds < 0:
        return None
    return _round_half_up(seconds)


def format_duration(seconds: float) -> str:
    """Render as ``"Xm Ys"``; negative or non-finite input gives ``"0m 0s"``."""
    total = _whole_seconds(seconds)
    if total is None:
        return "0m 0s"
    minutes, remaining = divmod(total, 60)
    return f"{minutes}m {remaining}s"


def format_duration_detailed(seconds: float) -> str:
    """Render as ``"1h 2m 3s"``, dropping leading units that are zero."""
    total = _whole_seconds(seconds)
    if total is None:
        return "0s"
    hours, rest = divmod(total, 3600)
    minutes, remaining = divmod(rest, 60)

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or hours > 0:
        parts.append(f"{minutes}m")
    parts.append(f"{remaining}s")
    return " ".join(parts)


def round_to_decimals(value: float, decimals: int = 2) -> float:
    """Round half up rather than to even.

    Non-finite input, or input too large to scale, is returned unchanged.
    """
    decimals = max(0, int(decimals))
    factor = 10**decimals
    scaled = value * factor
    if not math.isfinite(scaled):
        return value
    return _round_half_up(scaled) / factor


def format_percentage(value: float, decimals: int = 1) -> str:
    if not isinstance(value, int | float) or not math.isfinite(value):
        return "0.0%"
    decimals = max(0, int(decimals))
    return f"{round_to_decimals(value, decimals):.{decimals}f}%"


def _format_value(value: float | None, suffix: str = "") -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{value:.1f}{suffix}"


def _format_time(seconds: float | None) -> str:
    if seconds is None:
        return NOT_AVAILABLE
    return format_duration(seconds)


def format_metrics_for_display(metrics: MetricsSummary) -> dict[str, str]:
    return {
        "task_success_rate": _format_value(metrics.task_success_rate.mean, "%"),
        "time_on_task": _format_time(metrics.time_on_task.median),
        "task_efficiency": _format_value(metrics.task_efficiency.mean, "%"),
        "error_rate": _format_value(metrics.error_rate.mean, "%"),
        "seq": _format_value(metrics.seq.mean, "/7"),
    }


__all__ = [
    "NOT_AVAILABLE",
    "format_duration",
    "format_duration_detailed",
    "format_metrics_for_display",
    "format_percentage",
    "round_to_decimals",
]
