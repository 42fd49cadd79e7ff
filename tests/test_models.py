"""Tests for strainscore.models -- profiles, workouts and daily records."""

import json
from datetime import datetime, timedelta

import pytest

from strainscore.analytics.baseline import ACWRStatus
from strainscore.analytics.stress import StressZone
from strainscore.models import ActivityType, HeartRateProfile, StressSummary, WorkoutRecord
from tests.conftest import TARGET, make_record, make_workout


class TestHeartRateProfile:
    def test_from_age(self):
        p = HeartRateProfile.from_age(30, resting_hr=50.0)
        assert p.max_hr == 190.0
        assert p.heart_rate_reserve == 140.0
        assert p.age == 30

    def test_intensity_clamped(self, profile):
        assert profile.intensity_from_reserve(40.0) == 0.0
        assert profile.intensity_from_reserve(250.0) == 1.0
        assert HeartRateProfile(max_hr=60.0, resting_hr=60.0).intensity_from_reserve(80.0) == 0.0

    @pytest.mark.parametrize("hr,zone,name", [
        (100.0, 1, "Recovery"),
        (125.0, 2, "Aerobic"),
        (145.0, 3, "Tempo"),
        (160.0, 4, "Threshold"),
        (180.0, 5, "VO2 Max"),
    ])
    def test_zones(self, profile, hr, zone, name):
        assert profile.heart_rate_zone(hr) == zone
        assert profile.heart_rate_zone_name(hr) == name


class TestWorkoutRecord:
    def test_duration_derived(self):
        assert make_workout(minutes=50).duration_min == pytest.approx(50.0)

    def test_string_activity(self):
        w = make_workout("traditional_strength", stroke=None)
        assert w.activity is ActivityType.TRADITIONAL_STRENGTH
        assert w.activity.is_strength

    def test_end_before_start_is_kept(self):
        start = datetime(2024, 3, 15, 7, 0)
        w = WorkoutRecord(activity="running", start=start, end=start - timedelta(minutes=1))
        assert w.duration_min == pytest.approx(-1.0)
        assert not w.is_valid
        assert "running" in repr(w)

    def test_negative_values_invalid(self):
        assert make_workout().is_valid
        assert not make_workout(active_calories=-5.0).is_valid
        assert not make_workout(duration_min=-10.0).is_valid

    def test_repr_without_duration(self):
        w = make_workout()
        w.duration_min = None
        assert "0min" in repr(w)
        assert not w.is_valid

    def test_pace(self):
        assert make_workout(ActivityType.SWIMMING, minutes=40, distance_m=2000.0).pace_min_per_100m == pytest.approx(2.0)
        assert make_workout(ActivityType.SWIMMING, minutes=40).pace_min_per_100m is None


class TestDailyRecord:
    def test_to_dict_is_json(self):
        record = make_record(
            TARGET,
            workouts=[make_workout(stroke="butterfly", activity=ActivityType.SWIMMING)],
            stress=StressSummary(average=1.2),
        )
        out = json.loads(json.dumps(record.to_dict()))
        assert out["date"] == "2024-03-15"
        assert out["workouts"][0]["activity"] == "swimming"
        assert out["workouts"][0]["stroke"] == "butterfly"
        assert out["stress"]["average"] == 1.2

    def test_repr(self):
        assert "recovery=-" in repr(make_record())


class TestDescriptions:
    def test_acwr(self):
        assert "optimal" in ACWRStatus.OPTIMAL.description

    def test_stress_zone(self):
        assert StressZone.HIGH.description.startswith("High stress")
