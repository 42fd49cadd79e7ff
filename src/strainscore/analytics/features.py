"""Derived per-day feature vector for downstream prediction models.

Features are computed from the target day's record and the trailing
history: rolling 7- and 3-day averages, 3-day OLS trend slopes,
deviations and z-scores against the 7-day window, rest-day streaks,
circadian consistency and a few composite ratios.

Every feature is either a concrete value or ``None``.  ``None`` always
means "not enough data", never zero.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import date, timedelta
from itertools import takewhile
from typing import Any, Callable, Sequence

from strainscore.analytics.baseline import window
from strainscore.analytics.sleep import bedtime_hour
from strainscore.analytics.stats import linear_slope, mean, z_score
from strainscore.config import DEFAULT_CONFIG, EngineConfig
from strainscore.models import DailyRecord

WEEK_DAYS = 7
TREND_DAYS = 3
MIN_STRAIN_DIVISOR = 1.0
STRESS_PEAK_WEIGHT = 0.25
STRESS_READINGS_PER_EXPOSURE = 4.0


@dataclass
class FeatureVector:
    """Flat, named features for one day."""

    date: date

    # Today
    recovery: float | None = None
    strain: float | None = None
    hrv: float | None = None
    resting_hr: float | None = None
    sleep_duration: float | None = None
    sleep_efficiency: float | None = None
    respiratory_rate: float | None = None
    vo2_max: float | None = None
    steps: int | None = None
    active_calories: float | None = None
    average_stress: float | None = None
    max_stress: float | None = None

    # Rolling averages (prior days)
    avg_recovery_7d: float | None = None
    avg_hrv_7d: float | None = None
    avg_rhr_7d: float | None = None
    avg_sleep_efficiency_7d: float | None = None
    avg_sleep_7d: float | None = None
    avg_stress_7d: float | None = None
    avg_strain_7d: float | None = None
    avg_recovery_3d: float | None = None
    avg_hrv_3d: float | None = None
    avg_rhr_3d: float | None = None
    avg_sleep_efficiency_3d: float | None = None
    avg_sleep_3d: float | None = None
    avg_stress_3d: float | None = None
    avg_strain_3d: float | None = None
    sleep_debt_7d: float | None = None
    cumulative_strain_7d: float | None = None

    # Trends
    recovery_trend_3d: float | None = None
    sleep_trend_3d: float | None = None
    hrv_trend_3d: float | None = None

    # Deviations
    hrv_deviation_pct: float | None = None
    rhr_deviation: float | None = None

    # Training load
    days_since_rest_day: int | None = None
    is_rest_day: bool | None = None

    # Normalised / composite
    sleep_duration_z: float | None = None
    hrv_z: float | None = None
    rhr_z: float | None = None  # sign inverted: higher is better
    recovery_baseline_delta: float | None = None
    strain_balance: float | None = None
    sleep_to_strain: float | None = None
    hrv_to_strain: float | None = None
    stress_load: float | None = None

    # Circadian (hours from the 7-day average clock time)
    bedtime_consistency: float | None = None
    wake_time_consistency: float | None = None

    # Training target, when the next day is already known
    tomorrow_recovery: float | None = None

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["date"] = self.date.isoformat()
        return out

    def absent_features(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is None]

    def __repr__(self) -> str:
        present = len(fields(self)) - len(self.absent_features())
        return f"FeatureVector({self.date.isoformat()}, {present}/{len(fields(self))} present)"


def _avg(records: Sequence[DailyRecord], get: Callable[[DailyRecord], float | None]) -> float | None:
    return mean([v for v in map(get, records) if v is not None])


def _stress_avg(r: DailyRecord) -> float | None:
    return r.stress.average if r.stress is not None else None


def _slope(records: Sequence[DailyRecord], get: Callable[[DailyRecord], float | None]) -> float | None:
    return linear_slope([v for v in map(get, records) if v is not None])


def _clock_hour(ts) -> float:
    return ts.hour + ts.minute / 60.0 + ts.second / 3600.0


def _clock_deviation(current: float | None, history: Sequence[float]) -> float | None:
    if current is None or not history:
        return None
    return abs(current - mean(history))


def stress_load(record: DailyRecord) -> float | None:
    """Average stress scaled by high-stress hours, plus peak and exposure terms."""
    s = record.stress
    if s is None or s.average is None:
        return None
    peak = s.maximum if s.maximum is not None else s.average
    exposure = max(1.0, s.reading_count / STRESS_READINGS_PER_EXPOSURE)
    return s.average * (1.0 + s.hours_high) + peak * STRESS_PEAK_WEIGHT + exposure


def days_since_rest_day(
    history: Sequence[DailyRecord],
    target: date,
    rest_strain: float = DEFAULT_CONFIG.rest_day_strain,
) -> int | None:
    """Days (counting *target*) since strain last fell below *rest_strain*."""
    newest_first = sorted((r for r in history if r.date <= target), key=lambda r: r.date, reverse=True)
    if not newest_first:
        return None
    return sum(1 for _ in takewhile(lambda r: r.strain >= rest_strain, newest_first))


def derive_features(
    target: date,
    history: Sequence[DailyRecord],
    config: EngineConfig = DEFAULT_CONFIG,
) -> FeatureVector:
    """Build the feature vector for *target*.

    Args:
        target: The day to describe.
        history: Daily records including the target day; prior days feed the
            rolling windows and the day after, if present, the target label.
        config: Rest-day threshold.

    Returns:
        FeatureVector with absent features set to None.

    Raises:
        ValueError: If *history* has no record for *target*.
    """
    today = next((r for r in history if r.date == target), None)
    if today is None:
        raise ValueError(f"no daily record for {target.isoformat()}")

    week = window(history, target, WEEK_DAYS)
    recent = window(history, target, TREND_DAYS)
    tomorrow = next((r for r in history if r.date == target + timedelta(days=1)), None)

    fv = FeatureVector(
        date=target,
        recovery=today.recovery,
        strain=today.strain,
        hrv=today.hrv,
        resting_hr=today.resting_hr,
        sleep_duration=today.sleep_duration,
        sleep_efficiency=today.sleep_efficiency,
        respiratory_rate=today.respiratory_rate,
        vo2_max=today.vo2_max,
        steps=today.steps,
        active_calories=today.active_calories,
        average_stress=_stress_avg(today),
        max_stress=today.stress.maximum if today.stress is not None else None,
        tomorrow_recovery=tomorrow.recovery if tomorrow is not None else None,
    )

    for suffix, records in (("7d", week), ("3d", recent)):
        setattr(fv, f"avg_recovery_{suffix}", _avg(records, lambda r: r.recovery))
        setattr(fv, f"avg_hrv_{suffix}", _avg(records, lambda r: r.hrv))
        setattr(fv, f"avg_rhr_{suffix}", _avg(records, lambda r: r.resting_hr))
        setattr(fv, f"avg_sleep_efficiency_{suffix}", _avg(records, lambda r: r.sleep_efficiency))
        setattr(fv, f"avg_sleep_{suffix}", _avg(records, lambda r: r.sleep_duration))
        setattr(fv, f"avg_stress_{suffix}", _avg(records, _stress_avg))
        setattr(fv, f"avg_strain_{suffix}", _avg(records, lambda r: r.strain))

    debts = [r.sleep_debt for r in week if r.sleep_debt is not None]
    fv.sleep_debt_7d = sum(debts) if debts else None
    fv.cumulative_strain_7d = sum(r.strain for r in week) if week else None

    fv.recovery_trend_3d = _slope(recent, lambda r: r.recovery)
    fv.sleep_trend_3d = _slope(recent, lambda r: r.sleep_duration)
    fv.hrv_trend_3d = _slope(recent, lambda r: r.hrv)

    if today.hrv is not None and fv.avg_hrv_7d:
        fv.hrv_deviation_pct = (today.hrv - fv.avg_hrv_7d) / fv.avg_hrv_7d * 100.0
    if today.resting_hr is not None and fv.avg_rhr_7d is not None:
        fv.rhr_deviation = today.resting_hr - fv.avg_rhr_7d

    fv.days_since_rest_day = days_since_rest_day(history, target, config.rest_day_strain)
    fv.is_rest_day = today.strain < config.rest_day_strain

    if today.sleep_duration is not None:
        fv.sleep_duration_z = z_score(today.sleep_duration, [r.sleep_duration for r in week if r.sleep_duration is not None])
    if today.hrv is not None:
        fv.hrv_z = z_score(today.hrv, [r.hrv for r in week if r.hrv is not None])
    if today.resting_hr is not None:
        z = z_score(today.resting_hr, [r.resting_hr for r in week if r.resting_hr is not None])
        fv.rhr_z = -z if z is not None else None

    if today.recovery is not None and fv.avg_recovery_7d is not None:
        fv.recovery_baseline_delta = today.recovery - fv.avg_recovery_7d
    if fv.avg_strain_7d is not None:
        fv.strain_balance = today.strain - fv.avg_strain_7d

    divisor = max(today.strain, MIN_STRAIN_DIVISOR)
    if today.sleep_duration is not None:
        fv.sleep_to_strain = today.sleep_duration / divisor
    if today.hrv is not None:
        fv.hrv_to_strain = today.hrv / divisor
    fv.stress_load = stress_load(today)

    fv.bedtime_consistency = _clock_deviation(
        bedtime_hour(today.sleep_start) if today.sleep_start is not None else None,
        [bedtime_hour(r.sleep_start) for r in week if r.sleep_start is not None],
    )
    fv.wake_time_consistency = _clock_deviation(
        _clock_hour(today.sleep_end) if today.sleep_end is not None else None,
        [_clock_hour(r.sleep_end) for r in week if r.sleep_end is not None],
    )

    return fv
