"""Strain / training load scoring on the 0-21 scale.

Each workout is routed by activity type: swimming and strength training
have their own models; everything else uses a logarithmic cardio formula
on HR-reserve intensity (or a calorie-rate estimate when HR is missing).
Daily strain is the per-workout sum, capped at 21.  Workouts with reversed
times or negative duration or calories contribute nothing.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from strainscore.analytics.stats import band_score
from strainscore.analytics.strength import score_strength
from strainscore.analytics.swimming import score_swim
from strainscore.models import ActivityType, HeartRateProfile, WorkoutRecord

logger = logging.getLogger(__name__)

# Whoop-style strain ceiling
STRAIN_MAX = 21.0

HR_INTENSITY_BOOST = 1.2  # calibrates Karvonen intensity to typical day totals
CALORIE_WEIGHT = 0.3
LOG_MULTIPLIER = 3.0

CALORIES_PER_MIN_MAX = 12.0  # "all out" calorie burn rate
DEFAULT_INTENSITY = 0.5  # no HR and no usable duration

ACTIVITY_MULTIPLIERS = {
    ActivityType.HIIT: 1.4,
    ActivityType.RUNNING: 1.1,
    ActivityType.CYCLING: 1.0,
    ActivityType.ROWING: 1.2,
    ActivityType.YOGA: 0.6,
    ActivityType.FLEXIBILITY: 0.6,
    ActivityType.WALKING: 0.7,
    ActivityType.HIKING: 0.95,
    ActivityType.ELLIPTICAL: 0.95,
    ActivityType.STAIR_CLIMBING: 1.15,
}


class StrainLevel(str, Enum):
    """Coarse strain category."""

    LIGHT = "light"  # 0-10
    MODERATE = "moderate"  # 10-14
    HIGH = "high"  # 14-18
    ALL_OUT = "all_out"  # 18-21


STRAIN_LEVEL_BANDS = [
    (10.0, StrainLevel.MODERATE),
    (14.0, StrainLevel.HIGH),
    (18.0, StrainLevel.ALL_OUT),
]

STRAIN_DESCRIPTIONS = {
    StrainLevel.LIGHT: "Light activity or recovery day",
    StrainLevel.MODERATE: "Moderate training day - maintain fitness",
    StrainLevel.HIGH: "High intensity - build fitness",
    StrainLevel.ALL_OUT: "All-out effort - significant stress, monitor recovery",
}


@dataclass
class StrainResult:
    """Daily strain and the per-workout contributions."""

    score: float  # 0-21
    workout_strains: list[float]
    level: StrainLevel

    def __repr__(self) -> str:
        return (
            f"StrainResult(score={self.score:.1f}/21, "
            f"level={self.level.value}, "
            f"workouts={len(self.workout_strains)})"
        )


def hr_intensity(avg_hr: float, profile: HeartRateProfile) -> float | None:
    """Karvonen intensity ``(avg - rest) / (max - rest)`` with a 1.2 boost.

    Returns None for a profile with no heart rate reserve.
    """
    reserve = profile.heart_rate_reserve
    if reserve <= 0:
        return None
    return max(0.0, (avg_hr - profile.resting_hr) / reserve) * HR_INTENSITY_BOOST


def calorie_intensity(calories: float, minutes: float, activity: ActivityType) -> float:
    """Estimate intensity from burn rate when HR is unavailable."""
    if minutes <= 0:
        return DEFAULT_INTENSITY
    base = min(calories / minutes / CALORIES_PER_MIN_MAX, 1.0)
    return base * ACTIVITY_MULTIPLIERS.get(activity, 1.0)


def score_cardio(workout: WorkoutRecord, profile: HeartRateProfile) -> float:
    """``log2(intensity * minutes + calories * 0.3 + 1) * 3``, capped at 21."""
    minutes = workout.duration_min or 0.0
    calories = workout.active_calories

    intensity = None
    if workout.avg_hr is not None:
        intensity = hr_intensity(workout.avg_hr, profile)
    if intensity is None:
        intensity = calorie_intensity(calories, minutes, workout.activity)

    raw = math.log2(intensity * minutes + calories * CALORIE_WEIGHT + 1.0) * LOG_MULTIPLIER
    return max(0.0, min(STRAIN_MAX, raw))


def score_workout(workout: WorkoutRecord, profile: HeartRateProfile) -> float:
    """Strain for a single workout, routed by activity type.

    An implausible workout (see :attr:`WorkoutRecord.is_valid`) scores 0.
    """
    if not workout.is_valid:
        logger.warning(
            "Skipping implausible workout %s-%s (%s min, %s kcal)",
            workout.start, workout.end, workout.duration_min, workout.active_calories,
        )
        return 0.0
    if workout.activity is ActivityType.SWIMMING:
        return score_swim(workout, profile)
    if workout.activity.is_strength:
        return score_strength(workout, profile)
    return score_cardio(workout, profile)


def daily_strain(workouts: Sequence[WorkoutRecord], profile: HeartRateProfile) -> float:
    """Sum of workout strain, capped at 21."""
    total = sum(score_workout(w, profile) for w in workouts)
    return min(total, STRAIN_MAX)


def score_strain(workouts: Sequence[WorkoutRecord], profile: HeartRateProfile) -> StrainResult:
    """Score every workout (filling in ``strain`` / ``hr_intensity``) and the day.

    Args:
        workouts: The day's workouts; each record is updated in place with its
            computed strain and HR intensity.
        profile: User heart rate profile.

    Returns:
        StrainResult with the capped daily total.
    """
    strains: list[float] = []
    for w in workouts:
        w.strain = round(score_workout(w, profile), 2)
        w.hr_intensity = hr_intensity(w.avg_hr, profile) if w.avg_hr is not None else None
        strains.append(w.strain)

    total = min(sum(strains), STRAIN_MAX)
    return StrainResult(
        score=round(total, 2),
        workout_strains=strains,
        level=strain_level(total),
    )


def strain_level(strain: float) -> StrainLevel:
    """Light < 10 <= moderate < 14 <= high < 18 <= all-out."""
    return band_score(strain, STRAIN_LEVEL_BANDS, StrainLevel.LIGHT)


def strain_description(level: StrainLevel) -> str:
    return STRAIN_DESCRIPTIONS[level]
