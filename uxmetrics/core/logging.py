"""Logging setup that names the observation behind each warning.

Calculators log a warning for every degraded input. ``analysis_scope``
and ``observation_scope`` put the study, session, participant and task
ids on the current context, and ``AnalysisContextFilter`` copies them onto
each record so the warning says where the bad data came from.
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uxmetrics.models.observations import ObservationBase

CONTEXT_FIELDS = ("study_id", "session_id", "participant_id", "task")


@dataclass(frozen=True, slots=True)
class AnalysisContext:
    study_id: str | None = None
    session_id: str | None = None
    participant_id: str | None = None
    task: str | None = None

    def populated(self) -> dict[str, str]:
        """The ids that are set, in ``CONTEXT_FIELDS`` order."""
        ids: dict[str, str] = {}
        for name in CONTEXT_FIELDS:
            value = getattr(self, name)
            if value is not None:
                ids[name] = value
        return ids

    def merged(self, **ids: str | None) -> AnalysisContext:
        return replace(self, **{name: value for name, value in ids.items() if value is not None})


_ANALYSIS_CONTEXT: contextvars.ContextVar[AnalysisContext] = contextvars.ContextVar(
    "uxmetrics_analysis_context",
    default=AnalysisContext(),
)


def get_analysis_context() -> AnalysisContext:
    return _ANALYSIS_CONTEXT.get()


def _record_ids(record: logging.LogRecord) -> dict[str, str]:
    ids: dict[str, str] = {}
    for name in CONTEXT_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            ids[name] = value
    return ids


class AnalysisContextFilter(logging.Filter):
    """Copy the active analysis ids onto the record as attributes."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_analysis_context()
        for name in CONTEXT_FIELDS:
            setattr(record, name, getattr(context, name))
        return True


class _TextFormatter(logging.Formatter):
    """Append ``[study_id=... task=...]`` when any id is set."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        ids = _record_ids(record)
        if not ids:
            return line
        rendered = " ".join(f"{name}={value}" for name, value in ids.items())
        return f"{line} [{rendered}]"


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        ids = _record_ids(record)
        if ids:
            payload["context"] = ids
        if record.exc_info is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def setup_logging(level: int | str = logging.INFO, json_output: bool = False) -> None:
    """Route all logging to one stderr handler; stdout carries CLI output."""

    handler = logging.StreamHandler(stream=sys.stderr)
    if json_output:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(_TextFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    handler.addFilter(AnalysisContextFilter())

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


@contextmanager
def analysis_scope(
    *,
    study_id: str | None = None,
    session_id: str | None = None,
    participant_id: str | None = None,
    task: str | None = None,
) -> Iterator[AnalysisContext]:
    """Layer ids over the enclosing scope; ``None`` keeps the outer value."""

    context = get_analysis_context().merged(
        study_id=study_id,
        session_id=session_id,
        participant_id=participant_id,
        task=task,
    )
    token = _ANALYSIS_CONTEXT.set(context)
    try:
        yield context
    finally:
        _ANALYSIS_CONTEXT.reset(token)


def observation_scope(observation: ObservationBase) -> AbstractContextManager[AnalysisContext]:
    return analysis_scope(
        session_id=observation.session_id,
        participant_id=observation.participant_id,
        task=observation.task_key,
    )


__all__ = [
    "CONTEXT_FIELDS",
    "AnalysisContext",
    "AnalysisContextFilter",
    "analysis_scope",
    "get_analysis_context",
    "observation_scope",
    "setup_logging",
]
