"""Study reports: assembly, JSON export/import and text summaries."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime

from pydantic import ValidationError

from uxmetrics.metrics.aggregation import ObservationFilter, summarize_study
from uxmetrics.metrics.formatting import format_duration
from uxmetrics.models.observations import Observation
from uxmetrics.models.summaries import Report

logger = logging.getLogger(__name__)


def _report_id() -> str:
    return f"report-{uuid.uuid4().hex}"


def generate_report(
    study_id: str,
    observations: Iterable[Observation],
    *,
    study_name: str | None = None,
    commentary: str | None = None,
    filters: ObservationFilter | None = None,
    now: datetime | None = None,
) -> Report:
    generated_at = now if now is not None else datetime.now(UTC)
    metrics = summarize_study(study_id, observations, filters, now=now)
    return Report(
        report_id=_report_id(),
        study_id=study_id,
        study_name=study_name,
        generated_at=generated_at,
        metrics=metrics.metrics,
        session_count=metrics.session_count,
        participant_count=metrics.participant_count,
        date_range=metrics.date_range,
        commentary=commentary or None,
    )


def export_report_json(report: Report) -> str:
    """Serialise with explicit nulls and full float precision."""
    return report.model_dump_json(indent=2)


def import_report_json(raw: str | bytes) -> Report:
    """Inverse of :func:`export_report_json`.

    Raises ``pydantic.ValidationError`` when the payload is not a report.
    """
    return Report.model_validate_json(raw)


def is_valid_report(payload: object) -> bool:
    if isinstance(payload, Report):
        return True
    if not isinstance(payload, dict):
        return False
    try:
        Report.model_validate(payload)
    except ValidationError as exc:
        logger.debug("report payload rejected: %s", exc.error_count())
        return False
    return True


def update_report_commentary(report: Report, commentary: str | None) -> Report:
    """Return a copy of *report* with new commentary; empty text clears it."""
    return report.model_copy(update={"commentary": commentary or None})


def report_summary(report: Report) -> str:
    lines = [
        f"Study: {report.study_name or report.study_id}",
        f"Generated: {report.generated_at.isoformat()}",
        f"Sessions: {report.session_count}",
        f"Participants: {report.participant_count}",
    ]

    metrics = report.metrics
    if metrics.task_success_rate.mean is not None:
        lines.append(f"Task Success Rate: {metrics.task_success_rate.mean:.1f}%")
    if metrics.time_on_task.median is not None:
        lines.append(f"Time on Task (Median): {format_duration(metrics.time_on_task.median)}")
    if metrics.task_efficiency.mean is not None:
        lines.append(f"Task Efficiency: {metrics.task_efficiency.mean:.1f}%")
    if metrics.error_rate.mean is not None:
        lines.append(f"Error Rate: {metrics.error_rate.mean:.1f}%")
    if metrics.seq.mean is not None:
        lines.append(f"SEQ Score: {metrics.seq.mean:.1f}/7")

    if report.commentary:
        lines.append(f"\nCommentary: {report.commentary}")

    return "\n".join(lines)


__all__ = [
    "export_report_json",
    "generate_report",
    "import_report_json",
    "is_valid_report",
    "report_summary",
    "update_report_commentary",
]
