"""Shared fixtures and helpers for the strainscore test suite."""

from __future__ import annotations

import json
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

from strainscore.analytics.stress import StressSample
from strainscore.models import ActivityType, DailyRecord, HeartRateProfile, WorkoutRecord

TARGET = date(2024, 3, 15)


# ---------------------------------------------------------------------------
# Record-building helpers
# ---------------------------------------------------------------------------


def make_workout(
    activity: ActivityType | str = ActivityType.RUNNING,
    minutes: float = 45.0,
    start: datetime = datetime(2024, 3, 15, 7, 0),
    **kwargs,
) -> WorkoutRecord:
    """Build a workout of *minutes* starting at *start*."""
    return WorkoutRecord(
        activity=activity,
        start=start,
        end=start + timedelta(minutes=minutes),
        **kwargs,
    )


def make_record(day: date = TARGET, **kwargs) -> DailyRecord:
    """Build a daily record with typical physiology unless overridden."""
    values = {
        "strain": 10.0,
        "hrv": 50.0,
        "resting_hr": 58.0,
        "sleep_duration": 7.5,
        "sleep_efficiency": 88.0,
    }
    values.update(kwargs)
    return DailyRecord(date=day, **values)


def make_history(
    days: int,
    end: date = TARGET,
    **kwargs,
) -> list[DailyRecord]:
    """*days* consecutive records ending the day before *end*, ascending.

    Keyword values that are lists are applied per day (oldest first).
    """
    records = []
    for i in range(days):
        day = end - timedelta(days=days - i)
        per_day = {k: (v[i] if isinstance(v, list) else v) for k, v in kwargs.items()}
        records.append(make_record(day, **per_day))
    return records


def make_stress_stream(
    levels: list[float],
    start: datetime = datetime(2024, 3, 15, 9, 0),
    spacing_min: float = 5.0,
    exercise: list[bool] | None = None,
) -> list[StressSample]:
    """Stress samples at fixed spacing with the given levels."""
    return [
        StressSample(
            timestamp=start + timedelta(minutes=i * spacing_min),
            level=level,
            heart_rate=60.0 + level * 10.0,
            baseline_hr=60.0,
            is_exercise=bool(exercise[i]) if exercise else False,
        )
        for i, level in enumerate(levels)
    ]


def write_history(path: Path, records: list[DailyRecord]) -> Path:
    """Write records as the JSON list the CLI reads."""
    path.write_text(json.dumps([r.to_dict() for r in records]))
    return path


@pytest.fixture
def profile() -> HeartRateProfile:
    return HeartRateProfile(max_hr=190.0, resting_hr=55.0)
