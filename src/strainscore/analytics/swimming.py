"""Swimming strain.

Wrist HR in the pool is often degraded, so the intensity estimate blends
heart rate reserve with pace (minutes per 100 m) and calorie burn.  Unlike
the cardio path, duration scales linearly: a swim is sustained effort and a
logarithmic curve under-credits long sessions.
"""

from __future__ import annotations

from strainscore.analytics.stats import WeightedBlend, band_score
from strainscore.models import HeartRateProfile, SwimStroke, WorkoutRecord

STRAIN_MAX = 21.0

# Blend weights.  Pace carries most of the signal when HR is missing.
W_HR = 0.75
W_PACE_WITH_HR = 0.10
W_PACE_NO_HR = 0.85
W_CALORIES = 0.15

CALORIES_PER_MIN_MAX = 12.0

# Pace tiers (min/100 m, freestyle-equivalent): slower pace -> lower intensity
PACE_BANDS = [
    (1.3, 1.1),  # 1.3-1.8 hard
    (1.8, 0.8),  # 1.8-2.5 moderate
    (2.5, 0.5),  # 2.5+ easy
]
PACE_VERY_HARD = 1.4  # under 1.3 min/100 m
PACE_UNKNOWN = 0.65

INTENSITY_EXPONENT = 1.2
SCALE = 18.0
DURATION_FACTOR_MAX = 2.0  # reached at 120 minutes

STROKE_MULTIPLIERS = {
    SwimStroke.FREESTYLE: 1.0,
    SwimStroke.BACKSTROKE: 1.1,
    SwimStroke.BREASTSTROKE: 1.2,
    SwimStroke.MIXED: 1.2,  # individual medley
    SwimStroke.BUTTERFLY: 1.4,
}

# Fraction of HR reserve a swimmer typically reaches at a given pace intensity
SWIM_HR_FACTOR = 0.7


def pace_intensity(pace_min_per_100m: float | None) -> float:
    """Map pace to an intensity tier; unknown pace gets a moderate default."""
    if pace_min_per_100m is None or pace_min_per_100m <= 0:
        return PACE_UNKNOWN
    return band_score(pace_min_per_100m, PACE_BANDS, PACE_VERY_HARD)


def duration_factor(minutes: float) -> float:
    """Linear in duration: 1.0 at one hour, capped at 2.0."""
    return max(0.0, min(minutes / 60.0, DURATION_FACTOR_MAX))


def stroke_multiplier(stroke: SwimStroke | None) -> float:
    return STROKE_MULTIPLIERS.get(stroke, 1.0) if stroke is not None else 1.0


def blended_intensity(workout: WorkoutRecord, profile: HeartRateProfile) -> float:
    """HR / pace / calorie blend for one swim."""
    minutes = workout.duration_min or 0.0
    blend = WeightedBlend()

    has_hr = workout.avg_hr is not None and profile.heart_rate_reserve > 0
    if has_hr:
        blend.add("hr", profile.intensity_from_reserve(workout.avg_hr), W_HR)
        blend.add("pace", pace_intensity(workout.pace_min_per_100m), W_PACE_WITH_HR)
    else:
        blend.add("pace", pace_intensity(workout.pace_min_per_100m), W_PACE_NO_HR)

    if workout.active_calories > 0 and minutes > 0:
        cal_intensity = workout.active_calories / minutes / CALORIES_PER_MIN_MAX
        blend.add("calories", cal_intensity, W_CALORIES)

    return blend.value() or 0.0


def score_swim(workout: WorkoutRecord, profile: HeartRateProfile) -> float:
    """Strain (0-21) for a swimming workout.

    ``intensity ** 1.2 * 18 * duration_factor * stroke_multiplier``; a
    90-minute swim at ~64% of HR reserve lands in the high band (14-18).
    """
    minutes = workout.duration_min or 0.0
    if minutes <= 0:
        return 0.0
    intensity = blended_intensity(workout, profile)
    raw = (
        intensity ** INTENSITY_EXPONENT
        * SCALE
        * duration_factor(minutes)
        * stroke_multiplier(workout.stroke)
    )
    return max(0.0, min(STRAIN_MAX, raw))


def estimate_swim_heart_rate(pace_min_per_100m: float | None, profile: HeartRateProfile) -> float:
    """Rough average HR for a swim without HR data (display only)."""
    intensity = pace_intensity(pace_min_per_100m)
    return profile.resting_hr + profile.heart_rate_reserve * intensity * SWIM_HR_FACTOR
