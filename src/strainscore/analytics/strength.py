"""Strength-training strain.

Lifting is intermittent: sets and rests pull the average HR down even on a
hard session, so HR reserve is read through generous bands, calorie burn
fills in when HR is missing, and duration is bucketed rather than
continuous.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from strainscore.analytics.stats import band_score
from strainscore.models import ActivityType, HeartRateProfile, WorkoutRecord

STRAIN_MAX = 21.0

W_HR = 0.65
W_CALORIES = 0.35

EXPONENT = 1.3
SCALE = 16.0

# % of HR reserve -> intensity
HR_RESERVE_BANDS = [
    (0.35, 0.65),
    (0.50, 0.85),
    (0.65, 1.05),
    (0.75, 1.25),
]
HR_RESERVE_FLOOR = 0.4

# kcal/min -> intensity
CALORIE_BANDS = [
    (3.0, 0.6),
    (5.0, 0.8),
    (7.0, 1.0),
    (9.0, 1.2),
]
CALORIE_FLOOR = 0.4

# session minutes -> duration factor
DURATION_BANDS = [
    (30.0, 0.8),
    (45.0, 1.0),
    (60.0, 1.15),
    (75.0, 1.25),
    (90.0, 1.35),
]
DURATION_FLOOR = 0.6

TYPE_MULTIPLIERS = {
    ActivityType.FUNCTIONAL_STRENGTH: 1.15,  # circuit-style
    ActivityType.TRADITIONAL_STRENGTH: 1.0,
    ActivityType.HIIT: 1.25,
    ActivityType.CORE_TRAINING: 0.9,
    ActivityType.FLEXIBILITY: 0.6,
}


def hr_intensity(
    profile: HeartRateProfile,
    hr_samples: Sequence[float] | None = None,
    avg_hr: float | None = None,
) -> float | None:
    """Banded HR-reserve intensity, or None without HR data."""
    if hr_samples is not None and len(hr_samples) > 0:
        avg = float(np.mean(np.asarray(hr_samples, dtype=np.float64)))
    elif avg_hr is not None:
        avg = avg_hr
    else:
        return None
    if profile.heart_rate_reserve <= 0:
        return None
    reserve_pct = (avg - profile.resting_hr) / profile.heart_rate_reserve
    return band_score(reserve_pct, HR_RESERVE_BANDS, HR_RESERVE_FLOOR)


def calorie_intensity(calories: float, minutes: float) -> float:
    if minutes <= 0:
        return CALORIE_FLOOR
    return band_score(calories / minutes, CALORIE_BANDS, CALORIE_FLOOR)


def duration_factor(minutes: float) -> float:
    return band_score(minutes, DURATION_BANDS, DURATION_FLOOR)


def score_strength(workout: WorkoutRecord, profile: HeartRateProfile) -> float:
    """Strain (0-21) for a strength session.

    Rough targets: 30 min moderate ~6-8, 60 min solid ~10-13,
    75 min hard ~14-17, 90 min very hard ~18-21.
    """
    minutes = workout.duration_min or 0.0
    if minutes <= 0:
        return 0.0

    hr = hr_intensity(profile, workout.hr_samples, workout.avg_hr)
    cal = calorie_intensity(workout.active_calories, minutes)
    if hr is not None:
        intensity = hr * W_HR + cal * W_CALORIES
    else:
        intensity = cal

    raw = (
        intensity ** EXPONENT
        * duration_factor(minutes)
        * SCALE
        * TYPE_MULTIPLIERS.get(workout.activity, 1.0)
    )
    return max(0.0, min(STRAIN_MAX, raw))
