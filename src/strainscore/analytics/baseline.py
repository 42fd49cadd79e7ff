"""Personal baselines from a trailing window of daily records.

The baseline is the reference point every personalised score compares
against: HRV and resting HR mean/std-dev over the last week, plus acute
(7-day) and chronic (28-day) strain for the training-load ratio.  It is
recomputed for every scoring run and is unavailable (None) until enough
days of HRV + RHR have accumulated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Sequence

from strainscore.analytics.stats import (
    RHR_MAX,
    RHR_MIN,
    filter_outliers,
    filter_range,
    mean,
    standard_deviation,
)
from strainscore.config import DEFAULT_CONFIG, EngineConfig
from strainscore.models import DailyRecord

logger = logging.getLogger(__name__)


class ACWRStatus(str, Enum):
    """Training-load risk from the acute:chronic workload ratio."""

    UNDERTRAINING = "undertraining"
    OPTIMAL = "optimal"
    CAUTION = "caution"
    HIGH_RISK = "high_risk"
    UNKNOWN = "unknown"

    @property
    def description(self) -> str:
        return ACWR_DESCRIPTIONS[self]


ACWR_DESCRIPTIONS = {
    ACWRStatus.UNDERTRAINING: "Training load is lower than usual",
    ACWRStatus.OPTIMAL: "Training load is in the optimal range",
    ACWRStatus.CAUTION: "Training load is elevated - monitor recovery",
    ACWRStatus.HIGH_RISK: "Training load is very high - increased injury risk",
    ACWRStatus.UNKNOWN: "Not enough data to calculate",
}

ACWR_UNDERTRAINING_MAX = 0.8
ACWR_OPTIMAL_MAX = 1.3
ACWR_CAUTION_MAX = 1.5


def acwr_status(ratio: float | None) -> ACWRStatus:
    """Classify an acute:chronic ratio into a risk status."""
    if ratio is None:
        return ACWRStatus.UNKNOWN
    if ratio < ACWR_UNDERTRAINING_MAX:
        return ACWRStatus.UNDERTRAINING
    if ratio < ACWR_OPTIMAL_MAX:
        return ACWRStatus.OPTIMAL
    if ratio < ACWR_CAUTION_MAX:
        return ACWRStatus.CAUTION
    return ACWRStatus.HIGH_RISK


# Finer bands used by the recovery training-load component
ACWR_RISK_BANDS = [
    (0.0, "undertraining"),
    (0.8, "optimal_low"),
    (1.0, "optimal_high"),
    (1.3, "caution"),
    (1.5, "high_risk"),
    (2.0, "very_high_risk"),
]


def acwr_risk_band(ratio: float) -> str:
    """Name of the recovery-side ACWR band containing *ratio*."""
    name = ACWR_RISK_BANDS[0][1]
    for lower, band in ACWR_RISK_BANDS:
        if ratio >= lower:
            name = band
    return name


@dataclass
class BaselineSnapshot:
    """Personal reference values derived from recent history."""

    hrv_mean: float | None
    hrv_std: float | None
    rhr_mean: float | None
    rhr_std: float | None
    acute_strain: float | None  # 7-day mean
    chronic_strain: float | None  # 28-day mean
    respiratory_rate: float | None
    days_of_data: int
    calculated_for: date | None = None
    minimum_days: int = DEFAULT_CONFIG.minimum_days_for_baseline

    @property
    def acwr(self) -> float | None:
        """Acute:chronic workload ratio, None if chronic load is zero."""
        if self.acute_strain is None or not self.chronic_strain or self.chronic_strain <= 0:
            return None
        return self.acute_strain / self.chronic_strain

    def acwr_status(self) -> ACWRStatus:
        return acwr_status(self.acwr)

    @property
    def is_established(self) -> bool:
        return self.days_of_data >= self.minimum_days

    @property
    def hrv_variability(self) -> float | None:
        """Coefficient of variation of HRV."""
        if self.hrv_mean is None or self.hrv_std is None or self.hrv_mean <= 0:
            return None
        return self.hrv_std / self.hrv_mean

    @property
    def rhr_variability(self) -> float | None:
        if self.rhr_mean is None or self.rhr_std is None or self.rhr_mean <= 0:
            return None
        return self.rhr_std / self.rhr_mean

    def is_hrv_abnormal(self, hrv: float) -> bool:
        """True when *hrv* sits more than 2 std-devs from the mean."""
        if self.hrv_mean is None or self.hrv_std is None:
            return False
        return abs(hrv - self.hrv_mean) > 2.0 * self.hrv_std

    def is_rhr_abnormal(self, rhr: float) -> bool:
        if self.rhr_mean is None or self.rhr_std is None:
            return False
        return abs(rhr - self.rhr_mean) > 2.0 * self.rhr_std

    def __repr__(self) -> str:
        hrv = f"{self.hrv_mean:.1f}" if self.hrv_mean is not None else "-"
        rhr = f"{self.rhr_mean:.1f}" if self.rhr_mean is not None else "-"
        return (
            f"BaselineSnapshot(hrv={hrv}ms, rhr={rhr}bpm, "
            f"days={self.days_of_data})"
        )


def window(
    history: Sequence[DailyRecord],
    target: date,
    days: int,
) -> list[DailyRecord]:
    """Records dated in ``[target - days, target)``, ascending by date."""
    start = target - timedelta(days=days)
    return sorted(
        (r for r in history if start <= r.date < target),
        key=lambda r: r.date,
    )


def compute_baseline(
    history: Sequence[DailyRecord],
    target: date,
    config: EngineConfig = DEFAULT_CONFIG,
) -> BaselineSnapshot | None:
    """Compute the baseline used to score *target*.

    Args:
        history: Prior daily records (any order; the target day itself and
            later days are ignored).
        target: The day being scored.
        config: Window sizes and the minimum-days gate.

    Returns:
        A BaselineSnapshot, or None while fewer than
        ``config.minimum_days_for_baseline`` days carry both HRV and RHR.
    """
    recent = window(history, target, config.baseline_window_days)
    chronic = window(history, target, config.chronic_window_days)

    valid = [r for r in recent if r.hrv is not None and r.resting_hr is not None]
    if len(valid) < config.minimum_days_for_baseline:
        logger.debug(
            "Baseline unavailable for %s: %d/%d valid days",
            target, len(valid), config.minimum_days_for_baseline,
        )
        return None

    hrv = filter_outliers([r.hrv for r in valid if r.hrv > 0]).kept

    raw_rhr = [r.resting_hr for r in valid if r.resting_hr > 0]
    rhr = filter_range(raw_rhr, RHR_MIN, RHR_MAX)
    if len(rhr) != len(raw_rhr):
        logger.info("RHR baseline: filtered %d extreme values", len(raw_rhr) - len(rhr))

    chronic_strain = mean([r.strain for r in chronic])
    acute_strain = mean([r.strain for r in recent])
    if acute_strain is None:
        acute_strain = chronic_strain

    return BaselineSnapshot(
        hrv_mean=mean(hrv),
        hrv_std=standard_deviation(hrv) if hrv else None,
        rhr_mean=mean(rhr),
        rhr_std=standard_deviation(rhr) if rhr else None,
        acute_strain=acute_strain,
        chronic_strain=chronic_strain,
        respiratory_rate=mean([r.respiratory_rate for r in recent if r.respiratory_rate is not None]),
        days_of_data=len(valid),
        calculated_for=target,
        minimum_days=config.minimum_days_for_baseline,
    )
