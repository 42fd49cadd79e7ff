"""Recovery score computation (baseline-personalised).

Recovery blends five independently scored components, each compared to the
user's own baseline and mapped through a step table rather than a linear
curve so day-to-day noise does not swing the score:

    HRV 35%  |  resting HR 30%  |  sleep 20%  |  training load 10%  |  respiration 5%

Absent components drop out and the remaining weights are renormalised.
With nothing to score the result is a neutral 50.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from strainscore.analytics.baseline import acwr_risk_band
from strainscore.analytics.stats import WeightedBlend, band_score, mean

# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------

W_HRV = 0.35
W_RHR = 0.30
W_SLEEP = 0.20
W_LOAD = 0.10
W_RESP = 0.05

NEUTRAL_SCORE = 50.0

# Default std-dev as a fraction of baseline when no personal spread exists
HRV_DEFAULT_STD_PCT = 0.15
RHR_DEFAULT_STD_PCT = 0.08

DEFAULT_RESPIRATORY_BASELINE = 14.0  # breaths/min, adult average

# ---------------------------------------------------------------------------
# Band tables: (lower_bound, score), ascending
# ---------------------------------------------------------------------------

# z-score of HRV vs baseline (higher is better)
Z_BANDS = [
    (-1.5, 0.40),
    (-0.75, 0.60),
    (-0.25, 0.75),
    (0.25, 0.85),
    (0.75, 0.95),
    (1.5, 1.0),
]
Z_FLOOR = 0.20

# z-score of resting HR vs baseline (lower is better).  At or below
# RHR_Z_CEILING scores 1.0; between it and the first band scores RHR_Z_LOW.
RHR_Z_BANDS = [
    (-0.75, 0.85),
    (-0.25, 0.75),
    (0.25, 0.60),
    (0.75, 0.40),
    (1.5, 0.20),
]
RHR_Z_CEILING = -1.5
RHR_Z_LOW = 0.95

# Sleep hours
SLEEP_DURATION_BANDS = [
    (4.0, 0.30),
    (5.0, 0.50),
    (6.0, 0.70),
    (7.0, 0.85),
    (7.5, 0.95),
    (8.5, 1.0),
]
SLEEP_DURATION_FLOOR = 0.15

# Sleep efficiency %
SLEEP_EFFICIENCY_BANDS = [
    (70.0, 0.50),
    (75.0, 0.70),
    (80.0, 0.85),
    (85.0, 0.95),
    (90.0, 1.0),
]
SLEEP_EFFICIENCY_FLOOR = 0.30

W_SLEEP_DURATION = 0.50
W_SLEEP_EFFICIENCY = 0.30
W_SLEEP_CONSISTENCY = 0.20

LAST_NIGHT_WEIGHT = 0.60  # vs. 0.40 for the recent-nights average

# Yesterday's strain (higher strain -> lower score)
STRAIN_IMPACT_BANDS = [
    (0.0, 1.0),
    (5.0, 0.95),
    (10.0, 0.85),
    (14.0, 0.65),
    (18.0, 0.40),
]
STRAIN_IMPACT_DEFAULT = 0.85

# Score per acute:chronic band (see baseline.acwr_risk_band)
ACWR_BAND_SCORES = {
    "undertraining": 0.90,
    "optimal_low": 1.0,
    "optimal_high": 0.95,
    "caution": 0.75,
    "high_risk": 0.50,
    "very_high_risk": 0.30,
}

W_YESTERDAY_STRAIN = 0.60
W_ACWR = 0.40

# |rate - baseline| in breaths/min (smaller deviation is better)
RESP_DEVIATION_CEILINGS = [
    (0.5, 1.0),
    (1.0, 0.90),
    (1.5, 0.75),
    (2.0, 0.60),
    (3.0, 0.40),
]
RESP_FLOOR = 0.20


class RecoveryLevel(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


RECOVERY_LEVEL_BANDS = [
    (17.0, RecoveryLevel.FAIR),
    (34.0, RecoveryLevel.GOOD),
    (67.0, RecoveryLevel.EXCELLENT),
]

RECOMMENDATIONS = {
    RecoveryLevel.EXCELLENT: "You're well recovered! Great day for a hard workout.",
    RecoveryLevel.GOOD: "Good recovery. You can train normally today.",
    RecoveryLevel.FAIR: "Moderate recovery. Consider a lighter workout or active recovery.",
    RecoveryLevel.POOR: "Low recovery. Rest or very light activity recommended.",
}


@dataclass
class RecoveryResult:
    """Recovery score and its components."""

    score: float  # 0-100 composite recovery score
    components: dict[str, float] = field(default_factory=dict)  # present components, 0-100
    hrv_z: float | None = None
    rhr_z: float | None = None

    @property
    def level(self) -> RecoveryLevel:
        return recovery_level(self.score)

    def __repr__(self) -> str:
        return (
            f"RecoveryResult(score={self.score:.0f}, "
            f"level={self.level.value}, "
            f"components={sorted(self.components)})"
        )


# ---------------------------------------------------------------------------
# Component scores
# ---------------------------------------------------------------------------


def _personal_z(current: float, baseline: float, std: float | None, default_pct: float) -> float:
    spread = std if std is not None and std > 0 else baseline * default_pct
    return (current - baseline) / spread


def hrv_component(
    current: float | None,
    baseline: float | None,
    std: float | None = None,
) -> tuple[float | None, float | None]:
    """Return ``(score 0-1, z)`` for HRV, or ``(None, None)`` if not scorable."""
    if current is None or baseline is None or baseline <= 0:
        return None, None
    z = _personal_z(current, baseline, std, HRV_DEFAULT_STD_PCT)
    return band_score(z, Z_BANDS, Z_FLOOR), z


def rhr_z_score(z: float) -> float:
    if z <= RHR_Z_CEILING:
        return 1.0
    return band_score(z, RHR_Z_BANDS, RHR_Z_LOW)


def rhr_component(
    current: float | None,
    baseline: float | None,
    std: float | None = None,
) -> tuple[float | None, float | None]:
    """Counterpart of :func:`hrv_component`: a lower resting HR scores higher."""
    if current is None or baseline is None or baseline <= 0:
        return None, None
    z = _personal_z(current, baseline, std, RHR_DEFAULT_STD_PCT)
    return rhr_z_score(z), z


def sleep_duration_score(hours: float) -> float:
    return band_score(hours, SLEEP_DURATION_BANDS, SLEEP_DURATION_FLOOR)


def sleep_efficiency_score(efficiency_pct: float) -> float:
    return band_score(efficiency_pct, SLEEP_EFFICIENCY_BANDS, SLEEP_EFFICIENCY_FLOOR)


def smoothed_sleep_hours(last_night: float, recent_nights: Sequence[float] = ()) -> float:
    """Weight last night 60% against the recent-nights average."""
    recent_avg = mean(recent_nights)
    if recent_avg is None:
        return last_night
    return last_night * LAST_NIGHT_WEIGHT + recent_avg * (1.0 - LAST_NIGHT_WEIGHT)


def sleep_component(
    hours: float | None,
    recent_nights: Sequence[float] = (),
    efficiency: float | None = None,
    consistency: float | None = None,
) -> float | None:
    """Duration / efficiency / consistency sub-blend (0-1)."""
    if hours is None:
        return None
    blend = WeightedBlend()
    blend.add("duration", sleep_duration_score(smoothed_sleep_hours(hours, recent_nights)), W_SLEEP_DURATION)
    if efficiency is not None:
        blend.add("efficiency", sleep_efficiency_score(efficiency), W_SLEEP_EFFICIENCY)
    if consistency is not None:
        blend.add("consistency", max(0.0, min(100.0, consistency)) / 100.0, W_SLEEP_CONSISTENCY)
    return blend.value()


def strain_impact_score(strain: float) -> float:
    return band_score(strain, STRAIN_IMPACT_BANDS, STRAIN_IMPACT_DEFAULT)


def acwr_score(ratio: float) -> float:
    return ACWR_BAND_SCORES[acwr_risk_band(ratio)]


def load_component(
    yesterday_strain: float | None,
    acute: float | None = None,
    chronic: float | None = None,
) -> float | None:
    """Training-load impact: yesterday's strain (60%) and ACWR (40%)."""
    if yesterday_strain is None:
        return None
    blend = WeightedBlend()
    blend.add("yesterday", strain_impact_score(yesterday_strain), W_YESTERDAY_STRAIN)
    if acute is not None and chronic is not None and chronic > 0:
        blend.add("acwr", acwr_score(acute / chronic), W_ACWR)
    return blend.value()


def respiratory_component(rate: float | None, baseline: float | None = None) -> float | None:
    if rate is None:
        return None
    ref = baseline if baseline is not None and baseline > 0 else DEFAULT_RESPIRATORY_BASELINE
    deviation = abs(rate - ref)
    for ceiling, score in RESP_DEVIATION_CEILINGS:
        if deviation < ceiling:
            return score
    return RESP_FLOOR


# ---------------------------------------------------------------------------
# Composite scoring
# ---------------------------------------------------------------------------


def score_recovery(
    hrv: float | None = None,
    hrv_baseline: float | None = None,
    hrv_std: float | None = None,
    rhr: float | None = None,
    rhr_baseline: float | None = None,
    rhr_std: float | None = None,
    sleep_hours: float | None = None,
    recent_sleep_hours: Sequence[float] = (),
    sleep_efficiency: float | None = None,
    sleep_consistency: float | None = None,
    yesterday_strain: float | None = None,
    acute_strain: float | None = None,
    chronic_strain: float | None = None,
    respiratory_rate: float | None = None,
    respiratory_baseline: float | None = None,
) -> RecoveryResult:
    """Compute the composite 0-100 recovery score.

    Args:
        hrv: Today's HRV (ms).
        hrv_baseline: Personal HRV mean.
        hrv_std: Personal HRV std-dev (falls back to 15% of baseline).
        rhr: Today's resting heart rate.
        rhr_baseline: Personal RHR mean.
        rhr_std: Personal RHR std-dev (falls back to 8% of baseline).
        sleep_hours: Last night's sleep.
        recent_sleep_hours: The few nights before, for smoothing.
        sleep_efficiency: Sleep efficiency, 0-100.
        sleep_consistency: Bedtime consistency score, 0-100.
        yesterday_strain: Yesterday's 0-21 strain.
        acute_strain: 7-day average strain.
        chronic_strain: 28-day average strain.
        respiratory_rate: Breaths per minute.
        respiratory_baseline: Personal respiratory baseline (default 14).

    Returns:
        RecoveryResult; the score is exactly 50.0 when no component is
        available.
    """
    hrv_s, hrv_z = hrv_component(hrv, hrv_baseline, hrv_std)
    rhr_s, rhr_z = rhr_component(rhr, rhr_baseline, rhr_std)

    blend = WeightedBlend()
    blend.add("hrv", hrv_s, W_HRV)
    blend.add("rhr", rhr_s, W_RHR)
    blend.add("sleep", sleep_component(sleep_hours, recent_sleep_hours, sleep_efficiency, sleep_consistency), W_SLEEP)
    blend.add("load", load_component(yesterday_strain, acute_strain, chronic_strain), W_LOAD)
    blend.add("respiratory", respiratory_component(respiratory_rate, respiratory_baseline), W_RESP)

    combined = blend.value()
    if combined is None:
        score = NEUTRAL_SCORE
    else:
        score = max(0.0, min(100.0, combined * 100.0))

    return RecoveryResult(
        score=round(score, 2),
        components={name: round(s * 100.0, 1) for name, (s, _) in blend.parts.items()},
        hrv_z=hrv_z,
        rhr_z=rhr_z,
    )


def score_recovery_basic(
    hrv: float | None,
    hrv_baseline: float | None,
    rhr: float | None,
    rhr_baseline: float | None,
    sleep_hours: float | None,
    respiratory_rate: float | None = None,
) -> RecoveryResult:
    """Reduced-input overload: default std-devs, no sleep pattern or load."""
    return score_recovery(
        hrv=hrv,
        hrv_baseline=hrv_baseline,
        rhr=rhr,
        rhr_baseline=rhr_baseline,
        sleep_hours=sleep_hours,
        respiratory_rate=respiratory_rate,
    )


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------


def recovery_level(score: float) -> RecoveryLevel:
    return band_score(score, RECOVERY_LEVEL_BANDS, RecoveryLevel.POOR)


def recovery_recommendation(
    result: RecoveryResult,
    sleep_hours: float | None = None,
    yesterday_strain: float | None = None,
) -> str:
    """Recommendation text plus the factors that are holding recovery back."""
    text = RECOMMENDATIONS[result.level]

    factors: list[str] = []
    if result.hrv_z is not None and result.hrv_z < -1.0:
        factors.append("HRV is significantly below your baseline")
    if result.rhr_z is not None and result.rhr_z > 1.0:
        factors.append("Resting heart rate is elevated")
    if sleep_hours is not None and sleep_hours < 6.5:
        factors.append("Sleep duration was insufficient")
    if yesterday_strain is not None and yesterday_strain > 14:
        factors.append("Yesterday's training was intense")

    if factors:
        text += "\n\nKey factors: " + ", ".join(factors) + "."
    return text
