"""Continuous 0-3 stress level from heart rate and HRV.

Stress is read as heart rate elevation above the resting baseline and HRV
depression below the HRV baseline, each mapped through three linear
sub-ranges:

    HR elevation (bpm):      0-10 -> 0-1   10-20 -> 1-2   20-30 -> 2-3   30+ -> 3
    HRV depression (%):      0-10 -> 0-1   10-25 -> 1-2   25-40 -> 2-3   40+ -> 3

The two components are blended 60/40.  Readings close to a workout are
flagged as exercise and kept in the raw stream, but excluded from the
display aggregates (average, distribution, elevated periods).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Sequence

import numpy as np

from strainscore.analytics.stats import WeightedBlend
from strainscore.config import DEFAULT_CONFIG, EngineConfig
from strainscore.models import StressSummary

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

STRESS_MAX = 3.0

W_HR = 0.6
W_HRV = 0.4

HR_BREAKPOINTS = (10.0, 20.0, 30.0)  # bpm above resting
HRV_BREAKPOINTS = (10.0, 25.0, 40.0)  # % below baseline

NO_HRV_CONFIDENCE = 0.7
WORKOUT_CONFIDENCE = 0.5
VALID_CONFIDENCE_MIN = 0.5  # readings at or below this are ignored by averages


class StressZone(str, Enum):
    LOW = "low"  # 0-1
    MEDIUM = "medium"  # 1-2
    HIGH = "high"  # 2-3

    @property
    def description(self) -> str:
        return ZONE_DESCRIPTIONS[self]


ZONE_DESCRIPTIONS = {
    StressZone.LOW: "Low stress - your body is in a relaxed state",
    StressZone.MEDIUM: "Medium stress - elevated heart rate and activity",
    StressZone.HIGH: "High stress - significant physiological stress response",
}


def stress_zone(level: float) -> StressZone:
    if level < 1.0:
        return StressZone.LOW
    if level < 2.0:
        return StressZone.MEDIUM
    return StressZone.HIGH


# ---------------------------------------------------------------------------
# Samples
# ---------------------------------------------------------------------------


@dataclass
class StressSample:
    """One point-in-time stress reading."""

    timestamp: datetime
    level: float  # 0-3
    heart_rate: float
    baseline_hr: float
    hrv: float | None = None
    baseline_hrv: float | None = None
    is_exercise: bool = False
    confidence: float = 1.0  # 0-1

    def __post_init__(self) -> None:
        self.level = max(0.0, min(STRESS_MAX, self.level))
        self.confidence = max(0.0, min(1.0, self.confidence))

    @property
    def zone(self) -> StressZone:
        return stress_zone(self.level)

    @property
    def hr_elevation(self) -> float:
        return self.heart_rate - self.baseline_hr

    @property
    def hrv_depression_pct(self) -> float | None:
        if self.hrv is None or self.baseline_hrv is None or self.baseline_hrv <= 0:
            return None
        return (self.baseline_hrv - self.hrv) / self.baseline_hrv * 100.0

    def __repr__(self) -> str:
        flag = ", exercise" if self.is_exercise else ""
        return (
            f"StressSample({self.timestamp.isoformat()}, "
            f"level={self.level:.2f}{flag})"
        )


@dataclass
class ElevatedPeriod:
    """A run of consecutive high-stress, non-exercise samples."""

    start: datetime
    end: datetime
    average_stress: float

    @property
    def duration_min(self) -> float:
        return (self.end - self.start).total_seconds() / 60.0


# ---------------------------------------------------------------------------
# Component mapping
# ---------------------------------------------------------------------------


def _piecewise(value: float, breakpoints: tuple[float, float, float]) -> float:
    """Map *value* through three linear sub-ranges onto 0-3."""
    lo, mid, hi = breakpoints
    if value < lo:
        return max(0.0, value / lo)
    if value < mid:
        return 1.0 + (value - lo) / (mid - lo)
    if value < hi:
        return 2.0 + (value - mid) / (hi - mid)
    return STRESS_MAX


def hr_component(heart_rate: float, baseline_hr: float) -> float:
    return _piecewise(heart_rate - baseline_hr, HR_BREAKPOINTS)


def hrv_component(hrv: float | None, baseline_hrv: float | None) -> float | None:
    """Stress from HRV depression, or None when it cannot be computed."""
    if hrv is None or baseline_hrv is None or baseline_hrv <= 0:
        return None
    depression = (baseline_hrv - hrv) / baseline_hrv * 100.0
    return _piecewise(depression, HRV_BREAKPOINTS)


def stress_level(
    heart_rate: float,
    baseline_hr: float,
    hrv: float | None = None,
    baseline_hrv: float | None = None,
) -> float:
    """Stress on the 0-3 scale.

    HR elevation carries 60% and HRV depression 40%; without a usable HRV
    pair the HR component takes the full weight.
    """
    blend = WeightedBlend()
    blend.add("hr", hr_component(heart_rate, baseline_hr), W_HR)
    blend.add("hrv", hrv_component(hrv, baseline_hrv), W_HRV)
    level = blend.value() or 0.0
    if not math.isfinite(level):
        return 0.0
    return max(0.0, min(STRESS_MAX, level))


def stress_sample(
    timestamp: datetime,
    heart_rate: float,
    baseline_hr: float,
    hrv: float | None = None,
    baseline_hrv: float | None = None,
    is_exercise: bool = False,
) -> StressSample:
    """Build a sample, lowering confidence for missing HRV or nearby exercise."""
    confidence = 1.0
    if hrv is None or baseline_hrv is None:
        confidence *= NO_HRV_CONFIDENCE
    if is_exercise:
        confidence *= WORKOUT_CONFIDENCE
    return StressSample(
        timestamp=timestamp,
        level=stress_level(heart_rate, baseline_hr, hrv, baseline_hrv),
        heart_rate=heart_rate,
        baseline_hr=baseline_hr,
        hrv=hrv,
        baseline_hrv=baseline_hrv,
        is_exercise=is_exercise,
        confidence=confidence,
    )


# ---------------------------------------------------------------------------
# Day context
# ---------------------------------------------------------------------------


@dataclass
class StressContext:
    """Raw inputs for one day's stress stream."""

    hr_readings: list[tuple[datetime, float]] = field(default_factory=list)
    hrv_readings: list[tuple[datetime, float]] = field(default_factory=list)
    workout_windows: list[tuple[datetime, datetime]] = field(default_factory=list)
    baseline_resting_hr: float | None = None
    baseline_hrv: float | None = None

    def is_workout_related(self, ts: datetime, buffer_min: float = DEFAULT_CONFIG.workout_buffer_min) -> bool:
        """True when *ts* falls inside any workout widened by *buffer_min*."""
        buffer = timedelta(minutes=buffer_min)
        return any(start - buffer <= ts <= end + buffer for start, end in self.workout_windows)

    def nearest_hrv(self, ts: datetime, within_min: float = DEFAULT_CONFIG.hrv_match_window_min) -> float | None:
        """HRV reading closest to *ts*, or None if none is within *within_min*."""
        if not self.hrv_readings:
            return None
        reading_ts, value = min(self.hrv_readings, key=lambda r: abs((r[0] - ts).total_seconds()))
        if abs((reading_ts - ts).total_seconds()) > within_min * 60.0:
            return None
        return value


def daily_stress(context: StressContext, config: EngineConfig = DEFAULT_CONFIG) -> list[StressSample]:
    """Score every HR reading of the day, ascending by timestamp.

    Returns an empty list (and logs a warning) without a resting HR
    baseline.
    """
    if context.baseline_resting_hr is None:
        logger.warning("No baseline resting HR; skipping stress calculation")
        return []

    samples = [
        stress_sample(
            timestamp=ts,
            heart_rate=hr,
            baseline_hr=context.baseline_resting_hr,
            hrv=context.nearest_hrv(ts, config.hrv_match_window_min),
            baseline_hrv=context.baseline_hrv,
            is_exercise=context.is_workout_related(ts, config.workout_buffer_min),
        )
        for ts, hr in context.hr_readings
    ]
    samples.sort(key=lambda s: s.timestamp)
    logger.debug(
        "Computed %d stress samples (%d exercise-related)",
        len(samples), sum(1 for s in samples if s.is_exercise),
    )
    return samples


def current_stress(
    latest_hr: tuple[datetime, float] | None,
    baseline_hr: float,
    latest_hrv: tuple[datetime, float] | None = None,
    baseline_hrv: float | None = None,
    workout_active: bool = False,
    hrv_within_min: float = DEFAULT_CONFIG.hrv_match_window_min,
) -> StressSample | None:
    """Stress from the most recent reading; HRV is used only if fresh."""
    if latest_hr is None:
        return None
    ts, hr = latest_hr
    hrv = None
    if latest_hrv is not None:
        hrv_ts, value = latest_hrv
        if abs((hrv_ts - ts).total_seconds()) <= hrv_within_min * 60.0:
            hrv = value
    return stress_sample(ts, hr, baseline_hr, hrv, baseline_hrv, workout_active)


# ---------------------------------------------------------------------------
# Aggregates (exercise excluded)
# ---------------------------------------------------------------------------


def _non_exercise(samples: Sequence[StressSample]) -> list[StressSample]:
    return [s for s in samples if not s.is_exercise]


def average_stress(samples: Sequence[StressSample]) -> float | None:
    """Mean level over confident, non-exercise samples; None if there are none."""
    valid = [s.level for s in samples if not s.is_exercise and s.confidence > VALID_CONFIDENCE_MIN]
    if not valid:
        return None
    return float(np.mean(valid))


def stress_distribution(
    samples: Sequence[StressSample],
    interval_min: float = DEFAULT_CONFIG.stress_sample_interval_min,
) -> dict[StressZone, float]:
    """Minutes spent in each zone, assuming one reading per *interval_min*."""
    minutes = {zone: 0.0 for zone in StressZone}
    for s in _non_exercise(samples):
        minutes[s.zone] += interval_min
    return minutes


def elevated_periods(
    samples: Sequence[StressSample],
    threshold: float = DEFAULT_CONFIG.elevated_stress_threshold,
    min_duration_min: float = DEFAULT_CONFIG.elevated_min_duration_min,
    interval_min: float = DEFAULT_CONFIG.stress_sample_interval_min,
) -> list[ElevatedPeriod]:
    """Single-pass scan for runs of stress at or above *threshold*.

    A run opens on the first qualifying non-exercise sample and closes on
    the first sample that does not qualify or at the end of the stream.
    Each reading covers *interval_min*, so a run ends one interval after its
    last qualifying reading; a gap in sampling never extends it.  A run is
    kept only if its readings themselves span *min_duration_min* (first to
    last qualifying timestamp), which drops isolated single readings.
    Samples must be sorted by timestamp.
    """
    periods: list[ElevatedPeriod] = []
    start: datetime | None = None
    last: datetime | None = None
    levels: list[float] = []
    coverage = timedelta(minutes=interval_min)

    def close() -> None:
        if start is None or last is None:
            return
        if (last - start).total_seconds() / 60.0 >= min_duration_min:
            periods.append(ElevatedPeriod(start=start, end=last + coverage, average_stress=float(np.mean(levels))))

    for s in samples:
        if s.level >= threshold and not s.is_exercise:
            if start is None:
                start = s.timestamp
                levels = []
            last = s.timestamp
            levels.append(s.level)
        elif start is not None:
            close()
            start = None
            last = None

    close()
    return periods


def downsample(
    samples: Sequence[StressSample],
    target: int = DEFAULT_CONFIG.downsample_target,
) -> list[StressSample]:
    """Reduce *samples* to at most *target* points for charting.

    Contiguous buckets of ``ceil(n / target)`` samples are averaged:
    mean level / HR / confidence, mean HRV over the readings that have one,
    exercise flag OR-ed, timestamp of the middle sample.  Input that already
    fits is returned unchanged.
    """
    if target < 1:
        raise ValueError("target must be >= 1")
    if len(samples) <= target:
        return list(samples)

    size = math.ceil(len(samples) / target)
    out: list[StressSample] = []
    for i in range(0, len(samples), size):
        bucket = samples[i:i + size]
        hrvs = [s.hrv for s in bucket if s.hrv is not None]
        out.append(StressSample(
            timestamp=bucket[len(bucket) // 2].timestamp,
            level=float(np.mean([s.level for s in bucket])),
            heart_rate=float(np.mean([s.heart_rate for s in bucket])),
            baseline_hr=bucket[0].baseline_hr,
            hrv=float(np.mean(hrvs)) if hrvs else None,
            baseline_hrv=bucket[0].baseline_hrv,
            is_exercise=any(s.is_exercise for s in bucket),
            confidence=float(np.mean([s.confidence for s in bucket])),
        ))
    return out


def summarize_stress(
    samples: Sequence[StressSample],
    config: EngineConfig = DEFAULT_CONFIG,
) -> StressSummary:
    """Collapse a day's stream into the summary stored on the daily record."""
    valid = _non_exercise(samples)
    minutes = stress_distribution(samples, config.stress_sample_interval_min)
    periods = elevated_periods(
        samples,
        config.elevated_stress_threshold,
        config.elevated_min_duration_min,
        config.stress_sample_interval_min,
    )
    return StressSummary(
        average=average_stress(samples),
        maximum=max((s.level for s in valid), default=None),
        hours_low=minutes[StressZone.LOW] / 60.0,
        hours_medium=minutes[StressZone.MEDIUM] / 60.0,
        hours_high=minutes[StressZone.HIGH] / 60.0,
        reading_count=len(samples),
        elevated_periods=len(periods),
    )
