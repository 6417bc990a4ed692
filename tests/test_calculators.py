"""Tests for per-observation metric calculators."""

from __future__ import annotations

import logging
import math
from datetime import UTC, datetime

import pytest
from uxmetrics.metrics.calculators import (
    calculate_duration,
    calculate_efficiency,
    calculate_error_rate,
    calculate_error_rate_from_counts,
    calculate_single_success_rate,
    calculate_success_rate,
    calculate_time_based_efficiency,
    calculated_metrics,
    get_error_breakdown,
    get_seq_rating_label,
    measure,
    validate_seq_rating,
)
from uxmetrics.models.observations import (
    AssessmentKind,
    ErrorDetail,
    ErrorRateObservation,
    SEQObservation,
    TaskEfficiencyObservation,
    TaskSuccessObservation,
    TimeBasedEfficiencyObservation,
    TimeOnTaskObservation,
)


def _success(flag: bool) -> TaskSuccessObservation:
    return TaskSuccessObservation(task_description="Task", successful=flag)


def _timed(**kwargs: object) -> TimeOnTaskObservation:
    return TimeOnTaskObservation(task_description="Task", **kwargs)


# -- task success -----------------------------------------------------------


class TestSuccessRate:
    @pytest.mark.parametrize(
        ("flags", "expected"),
        [
            ([True], 100.0),
            ([False], 0.0),
            ([True, False], 50.0),
            ([True, True, True, False], 75.0),
        ],
    )
    def test_rate_is_share_of_successes(self, flags: list[bool], expected: float) -> None:
        assert calculate_success_rate([_success(f) for f in flags]) == pytest.approx(expected)

    def test_rate_stays_within_bounds(self) -> None:
        for n in range(1, 8):
            for successes in range(n + 1):
                flags = [True] * successes + [False] * (n - successes)
                rate = calculate_success_rate([_success(f) for f in flags])
                assert 0.0 <= rate <= 100.0
                assert rate == pytest.approx(100 * successes / n)

    def test_empty_collection_is_zero(self) -> None:
        assert calculate_success_rate([]) == 0.0

    def test_accepts_plain_booleans(self) -> None:
        assert calculate_success_rate([True, False, False, False]) == pytest.approx(25.0)

    def test_single_success(self) -> None:
        assert calculate_single_success_rate(True) == 100.0
        assert calculate_single_success_rate(False) == 0.0


# -- time on task -----------------------------------------------------------


class TestDuration:
    def test_from_timestamps(self) -> None:
        obs = _timed(start_time="2026-03-01T10:00:00Z", end_time="2026-03-01T10:02:30Z")
        assert calculate_duration(obs) == 150.0

    def test_manual_duration_takes_precedence(self) -> None:
        obs = _timed(
            start_time="2026-03-01T10:00:00Z",
            end_time="2026-03-01T11:00:00Z",
            manual_duration_seconds=42.5,
        )
        assert calculate_duration(obs) == 42.5

    def test_zero_manual_duration_is_used(self) -> None:
        obs = _timed(start_time="2026-03-01T10:00:00Z", end_time="2026-03-01T10:01:00Z", manual_duration_seconds=0)
        assert calculate_duration(obs) == 0.0

    def test_negative_manual_duration_falls_back_to_timestamps(self) -> None:
        obs = _timed(start_time="2026-03-01T10:00:00Z", end_time="2026-03-01T10:01:00Z", manual_duration_seconds=-5)
        assert calculate_duration(obs) == 60.0

    def test_datetime_values_are_accepted(self) -> None:
        obs = _timed(
            start_time=datetime(2026, 3, 1, 10, 0, tzinfo=UTC),
            end_time=datetime(2026, 3, 1, 10, 0, 30, tzinfo=UTC),
        )
        assert calculate_duration(obs) == 30.0

    def test_missing_timestamps_are_zero_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="uxmetrics.metrics.calculators"):
            assert calculate_duration(_timed()) == 0.0
        assert "start time is missing" in caplog.text

    def test_unparsable_dates_are_zero_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        obs = _timed(start_time="not a date", end_time="2026-03-01T10:00:00Z")
        with caplog.at_level(logging.WARNING, logger="uxmetrics.metrics.calculators"):
            assert calculate_duration(obs) == 0.0
        assert "invalid date format" in caplog.text

    def test_end_before_start_is_zero_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        obs = _timed(start_time="2026-03-01T10:05:00Z", end_time="2026-03-01T10:00:00Z")
        with caplog.at_level(logging.WARNING, logger="uxmetrics.metrics.calculators"):
            assert calculate_duration(obs) == 0.0
        assert "before start time" in caplog.text

    def test_open_task_uses_supplied_now(self) -> None:
        obs = _timed(start_time="2026-03-01T10:00:00Z")
        now = datetime(2026, 3, 1, 10, 10, tzinfo=UTC)
        assert calculate_duration(obs, now=now) == 600.0
        assert calculate_duration(obs) == 0.0

    def test_naive_timestamps_are_treated_as_utc(self) -> None:
        obs = _timed(start_time="2026-03-01T10:00:00", end_time="2026-03-01T10:00:05+00:00")
        assert calculate_duration(obs) == 5.0


# -- efficiency -------------------------------------------------------------


class TestEfficiency:
    def test_optimal_over_actual(self) -> None:
        obs = TaskEfficiencyObservation(task_description="Task", optimal_steps=5, actual_steps=10)
        assert calculate_efficiency(obs) == 50.0

    def test_can_exceed_one_hundred(self) -> None:
        obs = TaskEfficiencyObservation(task_description="Task", optimal_steps=10, actual_steps=5)
        assert calculate_efficiency(obs) == 200.0

    @pytest.mark.parametrize("actual", [0, -3])
    def test_non_positive_actual_steps_is_zero(self, actual: int, caplog: pytest.LogCaptureFixture) -> None:
        obs = TaskEfficiencyObservation(task_description="Task", optimal_steps=4, actual_steps=actual)
        with caplog.at_level(logging.WARNING, logger="uxmetrics.metrics.calculators"):
            assert calculate_efficiency(obs) == 0.0
        assert "actual_steps must be greater than 0" in caplog.text

    def test_negative_optimal_steps_is_zero(self) -> None:
        obs = TaskEfficiencyObservation(task_description="Task", optimal_steps=-1, actual_steps=4)
        assert calculate_efficiency(obs) == 0.0

    def test_time_based(self) -> None:
        obs = TimeBasedEfficiencyObservation(task_description="Task", optimal_time_seconds=30, actual_time_seconds=60)
        assert calculate_time_based_efficiency(obs) == 50.0

    def test_time_based_zero_actual_is_zero(self) -> None:
        obs = TimeBasedEfficiencyObservation(task_description="Task", optimal_time_seconds=30, actual_time_seconds=0)
        assert calculate_time_based_efficiency(obs) == 0.0


# -- errors -----------------------------------------------------------------


def _errors(*types: str) -> list[ErrorDetail]:
    return [ErrorDetail(type=t, description=f"{t} happened") for t in types]


class TestErrorRate:
    def test_errors_over_opportunities(self) -> None:
        obs = ErrorRateObservation(task_description="Task", errors=_errors("wrong_click"), opportunities=4)
        assert calculate_error_rate(obs) == 25.0

    def test_can_exceed_one_hundred(self) -> None:
        obs = ErrorRateObservation(
            task_description="Task",
            errors=_errors("wrong_click", "wrong_click", "navigation_error"),
            opportunities=2,
        )
        assert calculate_error_rate(obs) == 150.0

    def test_zero_opportunities_is_zero(self, caplog: pytest.LogCaptureFixture) -> None:
        obs = ErrorRateObservation(task_description="Task", errors=_errors("wrong_click"), opportunities=0)
        with caplog.at_level(logging.WARNING, logger="uxmetrics.metrics.calculators"):
            assert calculate_error_rate(obs) == 0.0
        assert "opportunities must be greater than 0" in caplog.text

    def test_from_counts(self) -> None:
        assert calculate_error_rate_from_counts(3, 12) == 25.0
        assert calculate_error_rate_from_counts(3, 0) == 0.0
        assert calculate_error_rate_from_counts(-1, 5) == 0.0


class TestErrorBreakdown:
    def test_empty_has_every_category(self) -> None:
        assert get_error_breakdown([]) == {
            "wrong_click": 0,
            "invalid_submission": 0,
            "navigation_error": 0,
        }

    def test_none_has_every_category(self) -> None:
        assert set(get_error_breakdown(None)) == {"wrong_click", "invalid_submission", "navigation_error"}

    def test_counts_duplicates_and_ignores_unknown(self) -> None:
        breakdown = get_error_breakdown(
            _errors("wrong_click", "wrong_click", "invalid_submission", "typo", "navigation_error")
        )
        assert breakdown == {"wrong_click": 2, "invalid_submission": 1, "navigation_error": 1}


# -- SEQ --------------------------------------------------------------------


class TestSEQ:
    @pytest.mark.parametrize("rating", [1, 4, 7, 7.0])
    def test_valid_ratings(self, rating: float) -> None:
        assert validate_seq_rating(rating) is True

    @pytest.mark.parametrize("rating", [0, 8, 3.5, -1, math.nan, math.inf, "5", None, True])
    def test_invalid_ratings(self, rating: object) -> None:
        assert validate_seq_rating(rating) is False

    def test_labels(self) -> None:
        assert get_seq_rating_label(1) == "Very Difficult"
        assert get_seq_rating_label(4) == "Neutral"
        assert get_seq_rating_label(7) == "Very Easy"
        assert get_seq_rating_label(9) == "Unknown"


# -- dispatch ---------------------------------------------------------------


class TestMeasure:
    def test_clean_result_has_no_diagnostic(self) -> None:
        result = measure(TaskEfficiencyObservation(task_description="Task", optimal_steps=10, actual_steps=5))
        assert result.kind is AssessmentKind.task_efficiency
        assert result.value == 200.0
        assert result.diagnostic is None
        assert result.degraded is False

    def test_degraded_result_carries_diagnostic(self) -> None:
        result = measure(_timed(start_time="2026-03-01T10:05:00Z", end_time="2026-03-01T10:00:00Z"))
        assert result.value == 0.0
        assert result.degraded is True
        assert "before start time" in (result.diagnostic or "")

    def test_time_based_efficiency_reports_efficiency_kind(self) -> None:
        result = measure(
            TimeBasedEfficiencyObservation(task_description="Task", optimal_time_seconds=20, actual_time_seconds=40)
        )
        assert result.kind is AssessmentKind.task_efficiency
        assert result.value == 50.0

    def test_invalid_seq_has_no_value(self) -> None:
        result = measure(SEQObservation(task_description="Task", rating=3.5))
        assert result.kind is AssessmentKind.seq
        assert result.value is None
        assert result.degraded is True

    def test_success_observation(self) -> None:
        assert measure(_success(True)).value == 100.0


class TestCalculatedMetrics:
    def test_error_observation_includes_breakdown(self) -> None:
        obs = ErrorRateObservation(
            task_description="Task",
            errors=_errors("wrong_click", "navigation_error"),
            opportunities=4,
        )
        assert calculated_metrics(obs) == {
            "error_rate": 50.0,
            "errors_wrong_click": 1.0,
            "errors_invalid_submission": 0.0,
            "errors_navigation_error": 1.0,
        }

    def test_duration_key(self) -> None:
        assert calculated_metrics(_timed(manual_duration_seconds=12)) == {"duration_seconds": 12.0}

    def test_invalid_seq_is_omitted(self) -> None:
        assert calculated_metrics(SEQObservation(task_description="Task", rating=9)) == {}
