"""Tests for strainscore.analytics.strain -- 0-21 strain and routing."""

import logging
import math

import pytest

from strainscore.analytics.strain import (
    score_strain,
    score_workout,
    score_cardio,
    daily_strain,
    hr_intensity,
    calorie_intensity,
    strain_level,
    strain_description,
    StrainLevel,
    StrainResult,
    STRAIN_MAX,
)
from strainscore.analytics.strength import score_strength
from strainscore.analytics.swimming import score_swim
from strainscore.models import ActivityType, HeartRateProfile
from tests.conftest import make_workout


class TestHRIntensity:
    def test_karvonen_with_boost(self, profile):
        # (140 - 55) / 135 * 1.2
        assert hr_intensity(140.0, profile) == pytest.approx(85 / 135 * 1.2)

    def test_below_resting_is_zero(self, profile):
        assert hr_intensity(50.0, profile) == 0.0

    def test_degenerate_profile(self):
        assert hr_intensity(120.0, HeartRateProfile(max_hr=60.0, resting_hr=60.0)) is None


class TestCalorieIntensity:
    def test_running_multiplier(self):
        # 10 kcal/min -> 10/12, x1.1 for running
        assert calorie_intensity(300.0, 30.0, ActivityType.RUNNING) == pytest.approx(10 / 12 * 1.1)

    def test_capped_rate(self):
        assert calorie_intensity(1000.0, 10.0, ActivityType.CYCLING) == pytest.approx(1.0)

    def test_zero_duration_default(self):
        assert calorie_intensity(100.0, 0.0, ActivityType.RUNNING) == 0.5


class TestCardio:
    def test_hr_formula(self, profile):
        w = make_workout(ActivityType.RUNNING, minutes=45, avg_hr=140.0)
        expected = math.log2(85 / 135 * 1.2 * 45 + 1) * 3
        assert score_cardio(w, profile) == pytest.approx(expected)

    def test_calorie_fallback(self, profile):
        w = make_workout(ActivityType.RUNNING, minutes=30, active_calories=300.0)
        intensity = 10 / 12 * 1.1
        expected = math.log2(intensity * 30 + 300 * 0.3 + 1) * 3
        assert score_cardio(w, profile) == pytest.approx(expected)

    def test_zero_duration(self, profile):
        w = make_workout(ActivityType.WALKING, minutes=0)
        assert score_cardio(w, profile) == 0.0

    def test_capped(self, profile):
        w = make_workout(ActivityType.HIIT, minutes=600, avg_hr=185.0, active_calories=5000.0)
        assert score_cardio(w, profile) == STRAIN_MAX


class TestRouting:
    def test_swimming(self, profile):
        w = make_workout(ActivityType.SWIMMING, minutes=60, avg_hr=130.0)
        assert score_workout(w, profile) == score_swim(w, profile)

    @pytest.mark.parametrize("activity", [
        ActivityType.FUNCTIONAL_STRENGTH,
        ActivityType.TRADITIONAL_STRENGTH,
        ActivityType.CORE_TRAINING,
    ])
    def test_strength(self, profile, activity):
        w = make_workout(activity, minutes=50, avg_hr=120.0, active_calories=300.0)
        assert score_workout(w, profile) == score_strength(w, profile)

    def test_yoga_uses_cardio(self, profile):
        w = make_workout(ActivityType.YOGA, minutes=60, active_calories=150.0)
        assert score_workout(w, profile) == score_cardio(w, profile)


class TestDailyStrain:
    def test_empty(self, profile):
        result = score_strain([], profile)
        assert result.score == 0.0
        assert result.workout_strains == []
        assert result.level is StrainLevel.LIGHT

    def test_capped_at_21(self, profile):
        workouts = [
            make_workout(ActivityType.RUNNING, minutes=120, avg_hr=175.0, active_calories=1400.0)
            for _ in range(3)
        ]
        assert daily_strain(workouts, profile) == STRAIN_MAX
        assert score_strain(workouts, profile).score == STRAIN_MAX

    def test_fills_workout_fields(self, profile):
        w = make_workout(ActivityType.CYCLING, minutes=60, avg_hr=150.0)
        result = score_strain([w], profile)
        assert w.strain == result.workout_strains[0]
        assert w.hr_intensity == pytest.approx(95 / 135 * 1.2)

    def test_bounds(self, profile):
        for minutes in (0, 10, 45, 90, 240):
            for hr in (None, 70.0, 130.0, 185.0):
                w = make_workout(ActivityType.RUNNING, minutes=minutes, avg_hr=hr, active_calories=minutes * 8.0)
                assert 0.0 <= score_workout(w, profile) <= STRAIN_MAX

    def test_implausible_workout_scores_zero(self, profile, caplog):
        good = make_workout(ActivityType.RUNNING, minutes=45, avg_hr=150.0)
        reversed_times = make_workout(ActivityType.RUNNING, minutes=-30, avg_hr=150.0)
        negative_calories = make_workout(ActivityType.CYCLING, minutes=30, active_calories=-50.0)
        with caplog.at_level(logging.WARNING, logger="strainscore.analytics.strain"):
            result = score_strain([good, reversed_times, negative_calories], profile)
        assert result.workout_strains[1:] == [0.0, 0.0]
        assert result.score == good.strain
        assert daily_strain([reversed_times], profile) == 0.0
        assert "implausible workout" in caplog.text

    def test_repr(self):
        s = repr(StrainResult(score=12.3, workout_strains=[12.3], level=StrainLevel.MODERATE))
        assert "12.3" in s
        assert "moderate" in s


class TestStrainLevel:
    def test_breakpoints(self):
        assert strain_level(9.99) is StrainLevel.LIGHT
        assert strain_level(10.0) is StrainLevel.MODERATE
        assert strain_level(14.0) is StrainLevel.HIGH
        assert strain_level(18.0) is StrainLevel.ALL_OUT
        assert strain_level(21.0) is StrainLevel.ALL_OUT

    def test_description(self):
        assert "recovery" in strain_description(StrainLevel.LIGHT).lower()
