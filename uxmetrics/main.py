"""uxmetrics CLI entry point."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from pydantic import ValidationError

from uxmetrics.config import UXMetricsSettings, load_config
from uxmetrics.core.logging import setup_logging
from uxmetrics.metrics.aggregation import ObservationFilter, summarize_study
from uxmetrics.metrics.comparison import compare_time_periods
from uxmetrics.metrics.formatting import NOT_AVAILABLE, format_duration, format_percentage, round_to_decimals
from uxmetrics.models.observations import AssessmentKind, Observation, parse_observations
from uxmetrics.models.summaries import StudyMetrics
from uxmetrics.reports import export_report_json, generate_report, report_summary

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = "config/uxmetrics.yaml"

_config_option = click.option("--config", "config_path", default=_DEFAULT_CONFIG_PATH, show_default=True)
_observations_argument = click.argument(
    "observations_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)


@click.group()
def cli() -> None:
    """UX metrics calculation and reporting."""


def _load_settings(config_path: str) -> UXMetricsSettings:
    if config_path == _DEFAULT_CONFIG_PATH and not Path(config_path).exists():
        settings = UXMetricsSettings()
    else:
        try:
            settings = load_config(config_path)
        except (FileNotFoundError, ValueError) as exc:
            raise click.ClickException(str(exc)) from exc
    setup_logging(settings.logging.level, json_output=settings.logging.json_output)
    return settings


def _load_observations(path: Path) -> list[Observation]:
    try:
        observations = parse_observations(path.read_bytes())
    except ValidationError as exc:
        raise click.ClickException(f"invalid observations file {path}: {exc.error_count()} error(s)") from exc
    logger.debug("loaded %d observations from %s", len(observations), path)
    return observations


def _build_filter(
    settings: UXMetricsSettings,
    *,
    start: str | None = None,
    end: str | None = None,
    participant: str | None = None,
    task: str | None = None,
    task_match: str | None = None,
) -> ObservationFilter:
    try:
        return ObservationFilter(
            start=start,
            end=end,
            participant_id=participant,
            task=task,
            task_match=task_match or settings.aggregation.task_match,
        )
    except ValidationError as exc:
        raise click.ClickException(f"invalid filter: {exc.errors()[0]['msg']}") from exc


def _render_text(metrics: StudyMetrics, settings: UXMetricsSettings) -> str:
    decimals = settings.formatting.percentage_decimals
    lines = [
        f"Study: {metrics.study_id}",
        f"Sessions: {metrics.session_count}",
        f"Participants: {metrics.participant_count}",
    ]
    for kind in AssessmentKind:
        summary = metrics.metrics.for_kind(kind)
        value = summary.value
        if value is None:
            rendered = NOT_AVAILABLE
        elif kind is AssessmentKind.time_on_task:
            rendered = format_duration(value)
        elif kind is AssessmentKind.seq:
            rendered = f"{round_to_decimals(value, settings.formatting.rounding_decimals)}/7"
        else:
            rendered = format_percentage(value, decimals)
        lines.append(f"{kind.value}: {rendered} (n={summary.count})")
    return "\n".join(lines)


@cli.command("summarize")
@_observations_argument
@click.option("--study-id", default="study", show_default=True)
@click.option("--participant", default=None, help="Only include this participant id.")
@click.option("--task", default=None, help="Only include this task.")
@click.option("--task-match", type=click.Choice(["exact", "substring"]), default=None)
@click.option("--start", default=None, help="Inclusive start date or timestamp.")
@click.option("--end", default=None, help="Inclusive end date or timestamp.")
@click.option("--format", "output_format", type=click.Choice(["json", "text"]), default="json", show_default=True)
@_config_option
def summarize_command(
    observations_path: Path,
    study_id: str,
    participant: str | None,
    task: str | None,
    task_match: str | None,
    start: str | None,
    end: str | None,
    output_format: str,
    config_path: str,
) -> None:
    """Aggregate every metric for a study's observations."""
    settings = _load_settings(config_path)
    observations = _load_observations(observations_path)
    filters = _build_filter(
        settings,
        start=start,
        end=end,
        participant=participant,
        task=task,
        task_match=task_match,
    )
    metrics = summarize_study(study_id, observations, filters)
    if output_format == "text":
        click.echo(_render_text(metrics, settings))
    else:
        click.echo(metrics.model_dump_json(indent=2))


@cli.command("compare")
@_observations_argument
@click.option("--study-id", default="study", show_default=True)
@click.option("--baseline-start", required=True)
@click.option("--baseline-end", required=True)
@click.option("--comparison-start", required=True)
@click.option("--comparison-end", required=True)
@_config_option
def compare_command(
    observations_path: Path,
    study_id: str,
    baseline_start: str,
    baseline_end: str,
    comparison_start: str,
    comparison_end: str,
    config_path: str,
) -> None:
    """Compare two time windows of the same study."""
    settings = _load_settings(config_path)
    observations = _load_observations(observations_path)
    comparison = compare_time_periods(
        study_id,
        observations,
        _build_filter(settings, start=baseline_start, end=baseline_end),
        _build_filter(settings, start=comparison_start, end=comparison_end),
    )
    click.echo(comparison.model_dump_json(indent=2))


@cli.command("report")
@_observations_argument
@click.option("--study-id", required=True)
@click.option("--study-name", default=None)
@click.option("--commentary", default=None)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the report JSON here instead of stdout.",
)
@_config_option
def report_command(
    observations_path: Path,
    study_id: str,
    study_name: str | None,
    commentary: str | None,
    output: Path | None,
    config_path: str,
) -> None:
    """Generate a study report as JSON."""
    _load_settings(config_path)
    observations = _load_observations(observations_path)
    report = generate_report(
        study_id,
        observations,
        study_name=study_name,
        commentary=commentary,
    )
    payload = export_report_json(report)
    if output is None:
        click.echo(payload)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload, encoding="utf-8")
    click.echo(report_summary(report))


__all__ = ["cli"]


if __name__ == "__main__":
    cli()
