from __future__ import annotations

import pytest
from uxmetrics.models.observations import (
    ErrorDetail,
    ErrorRateObservation,
    Observation,
    SEQObservation,
    TaskEfficiencyObservation,
    TaskSuccessObservation,
    TimeBasedEfficiencyObservation,
    TimeOnTaskObservation,
)

from tests.helpers import at


@pytest.fixture
def study_observations() -> list[Observation]:
    """Two sessions, two participants, two tasks, every assessment kind."""
    common_a = {"session_id": "s1", "participant_id": "p1", "recorded_at": at(2)}
    common_b = {"session_id": "s2", "participant_id": "p2", "recorded_at": at(9)}
    return [
        TaskSuccessObservation(task_id="checkout", task_description="Complete checkout", successful=True, **common_a),
        TaskSuccessObservation(task_id="search", task_description="Search for a product", successful=False, **common_a),
        TaskSuccessObservation(task_id="checkout", task_description="Complete checkout", successful=True, **common_b),
        TimeOnTaskObservation(task_id="checkout", task_description="Complete checkout", manual_duration_seconds=60, **common_a),
        TimeOnTaskObservation(
            task_id="search",
            task_description="Search for a product",
            start_time="2026-03-09T12:00:00+00:00",
            end_time="2026-03-09T12:02:00+00:00",
            **common_b,
        ),
        TimeOnTaskObservation(task_id="checkout", task_description="Complete checkout", manual_duration_seconds=600, **common_b),
        TaskEfficiencyObservation(
            task_id="checkout", task_description="Complete checkout", optimal_steps=5, actual_steps=10, **common_a
        ),
        TimeBasedEfficiencyObservation(
            task_id="search",
            task_description="Search for a product",
            optimal_time_seconds=30,
            actual_time_seconds=40,
            **common_b,
        ),
        ErrorRateObservation(
            task_id="checkout",
            task_description="Complete checkout",
            errors=[ErrorDetail(type="wrong_click", description="Clicked the banner")],
            opportunities=4,
            **common_a,
        ),
        SEQObservation(task_id="checkout", task_description="Complete checkout", rating=6, **common_a),
        SEQObservation(task_id="search", task_description="Search for a product", rating=3, **common_b),
    ]
