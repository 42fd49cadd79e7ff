"""Engine tunables in one place.

Formula constants (band tables, weights, multipliers) live next to the
calculator that uses them.  The values here are the ones a deployment is
expected to tune: history windows, gating thresholds and stress-stream
parameters.
"""

from __future__ import annotations

from dataclasses import dataclass


# ============================================================
# BASELINE
# ============================================================
MINIMUM_DAYS_FOR_BASELINE = 5   # days with both HRV and RHR in the window
BASELINE_WINDOW_DAYS = 7        # HRV / RHR / acute strain window
CHRONIC_WINDOW_DAYS = 28        # chronic strain window

# ============================================================
# STRESS
# ============================================================
ELEVATED_STRESS_THRESHOLD = 2.0
ELEVATED_MIN_DURATION_MIN = 5.0
WORKOUT_BUFFER_MIN = 60.0       # readings this close to a workout are exercise
HRV_MATCH_WINDOW_MIN = 30.0     # max gap when pairing an HR reading with HRV
STRESS_SAMPLE_INTERVAL_MIN = 5.0
DOWNSAMPLE_TARGET = 288         # 5-minute slots in 24 h

# ============================================================
# FEATURES / SLEEP
# ============================================================
REST_DAY_STRAIN = 5.0
SLEEP_TARGET_HOURS = 8.0


@dataclass(frozen=True)
class EngineConfig:
    """Immutable bundle of tunables handed to the scoring engine."""

    minimum_days_for_baseline: int = MINIMUM_DAYS_FOR_BASELINE
    baseline_window_days: int = BASELINE_WINDOW_DAYS
    chronic_window_days: int = CHRONIC_WINDOW_DAYS

    elevated_stress_threshold: float = ELEVATED_STRESS_THRESHOLD
    elevated_min_duration_min: float = ELEVATED_MIN_DURATION_MIN
    workout_buffer_min: float = WORKOUT_BUFFER_MIN
    hrv_match_window_min: float = HRV_MATCH_WINDOW_MIN
    stress_sample_interval_min: float = STRESS_SAMPLE_INTERVAL_MIN
    downsample_target: int = DOWNSAMPLE_TARGET

    rest_day_strain: float = REST_DAY_STRAIN
    sleep_target_hours: float = SLEEP_TARGET_HOURS

    def __post_init__(self) -> None:
        if self.minimum_days_for_baseline < 1:
            raise ValueError("minimum_days_for_baseline must be >= 1")
        if self.baseline_window_days < 1 or self.chronic_window_days < 1:
            raise ValueError("baseline windows must be at least one day")
        if self.downsample_target < 1:
            raise ValueError("downsample_target must be >= 1")


DEFAULT_CONFIG = EngineConfig()
