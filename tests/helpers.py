"""Shared test helpers."""

from __future__ import annotations

from datetime import UTC, datetime


def at(day: int, hour: int = 12) -> datetime:
    """A fixed March 2026 timestamp."""
    return datetime(2026, 3, day, hour, 0, tzinfo=UTC)
