"""Observation records for the five assessment kinds.

Each kind carries only the fields its calculator needs. Range checks
(positive step counts, 1-7 ratings) are left to the calculators so that a
bad value degrades to a safe default instead of failing at load time.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter


class AssessmentKind(StrEnum):
    task_success_rate = "task_success_rate"
    time_on_task = "time_on_task"
    task_efficiency = "task_efficiency"
    error_rate = "error_rate"
    seq = "seq"


class ErrorType(StrEnum):
    wrong_click = "wrong_click"
    invalid_submission = "invalid_submission"
    navigation_error = "navigation_error"


class ErrorDetail(BaseModel):
    # Plain str so unknown categories load and are skipped by the breakdown.
    type: str
    description: str = ""


class ObservationBase(BaseModel):
    task_description: str
    task_id: str | None = None
    session_id: str | None = None
    participant_id: str | None = None
    recorded_at: datetime | None = None

    @property
    def task_key(self) -> str:
        """Stable task identifier, falling back to the description."""
        return self.task_id if self.task_id is not None else self.task_description

    @property
    def assessment_kind(self) -> AssessmentKind:
        raise NotImplementedError


class TaskSuccessObservation(ObservationBase):
    kind: Literal["task_success_rate"] = "task_success_rate"
    successful: bool

    @property
    def assessment_kind(self) -> AssessmentKind:
        return AssessmentKind.task_success_rate


class TimeOnTaskObservation(ObservationBase):
    kind: Literal["time_on_task"] = "time_on_task"
    start_time: str | datetime | None = None
    end_time: str | datetime | None = None
    manual_duration_seconds: float | None = None

    @property
    def assessment_kind(self) -> AssessmentKind:
        return AssessmentKind.time_on_task


class TaskEfficiencyObservation(ObservationBase):
    kind: Literal["task_efficiency"] = "task_efficiency"
    optimal_steps: int
    actual_steps: int

    @property
    def assessment_kind(self) -> AssessmentKind:
        return AssessmentKind.task_efficiency


class TimeBasedEfficiencyObservation(ObservationBase):
    kind: Literal["task_efficiency_time"] = "task_efficiency_time"
    optimal_time_seconds: float
    actual_time_seconds: float

    @property
    def assessment_kind(self) -> AssessmentKind:
        return AssessmentKind.task_efficiency


class ErrorRateObservation(ObservationBase):
    kind: Literal["error_rate"] = "error_rate"
    errors: list[ErrorDetail] = Field(default_factory=list)
    opportunities: int

    @property
    def assessment_kind(self) -> AssessmentKind:
        return AssessmentKind.error_rate


class SEQObservation(ObservationBase):
    kind: Literal["seq"] = "seq"
    rating: float

    @property
    def assessment_kind(self) -> AssessmentKind:
        return AssessmentKind.seq


Observation = Annotated[
    TaskSuccessObservation
    | TimeOnTaskObservation
    | TaskEfficiencyObservation
    | TimeBasedEfficiencyObservation
    | ErrorRateObservation
    | SEQObservation,
    Field(discriminator="kind"),
]

_OBSERVATION_LIST = TypeAdapter(list[Observation])


def parse_observations(raw: str | bytes) -> list[Observation]:
    """Parse a JSON array of tagged observations.

    Raises ``pydantic.ValidationError`` for structurally invalid records.
    """
    return _OBSERVATION_LIST.validate_json(raw)


def dump_observations(observations: list[Observation]) -> str:
    return _OBSERVATION_LIST.dump_json(observations, indent=2).decode("utf-8")


__all__ = [
    "AssessmentKind",
    "ErrorDetail",
    "ErrorRateObservation",
    "ErrorType",
    "Observation",
    "ObservationBase",
    "SEQObservation",
    "TaskEfficiencyObservation",
    "TaskSuccessObservation",
    "TimeBasedEfficiencyObservation",
    "TimeOnTaskObservation",
    "dump_observations",
    "parse_observations",
]
