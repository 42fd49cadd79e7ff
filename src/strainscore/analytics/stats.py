"""Statistics helpers shared by every calculator.

This is the foundation the other analytics modules build on.  It provides:
  - Descriptive statistics (mean, sample standard deviation, z-score)
  - Outlier filters (absolute + modified z-score, IQR, fixed bounds)
  - Ordinary least squares slope over a day index
  - Band lookup tables and a weighted blend accumulator for composite scores
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
from scipy import stats as sps

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Descriptive statistics
# ---------------------------------------------------------------------------


def mean(values: Sequence[float]) -> float | None:
    """Arithmetic mean, or None for an empty sequence."""
    if len(values) == 0:
        return None
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def standard_deviation(values: Sequence[float]) -> float:
    """Sample standard deviation (n - 1).  Returns 0.0 for fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=np.float64), ddof=1))


def z_score(current: float, history: Sequence[float]) -> float | None:
    """Standard score of *current* against *history*.

    Returns None when the history has fewer than 2 points or zero spread;
    callers should read that as "insufficient data", not as 0.
    """
    if len(history) < 2:
        return None
    sd = standard_deviation(history)
    if sd <= 0 or not math.isfinite(sd):
        return None
    return (current - mean(history)) / sd


def linear_slope(values: Sequence[float]) -> float | None:
    """OLS slope of *values* against the day index 0..n-1.

    Returns None if fewer than 2 points are provided.
    """
    if len(values) < 2:
        return None
    y = np.asarray(values, dtype=np.float64)
    x = np.arange(len(y), dtype=np.float64)
    return float(sps.linregress(x, y).slope)


# ---------------------------------------------------------------------------
# Outlier filtering
# ---------------------------------------------------------------------------

HRV_ABSOLUTE_MIN = 10.0  # ms; below this is a sensor error
HRV_ABSOLUTE_MAX = 200.0  # ms
MODIFIED_Z_FACTOR = 0.6745
MODIFIED_Z_THRESHOLD = 3.0
MIN_SAMPLES_FOR_STATS = 5

RHR_MIN = 35.0
RHR_MAX = 120.0


@dataclass
class OutlierReport:
    """Result of an outlier pass, with counts for logging."""

    kept: list[float]
    absolute_removed: int = 0
    statistical_removed: int = 0
    original_mean: float | None = None
    filtered_mean: float | None = None

    @property
    def removed(self) -> int:
        return self.absolute_removed + self.statistical_removed

    def __repr__(self) -> str:
        return (
            f"OutlierReport(kept={len(self.kept)}, "
            f"removed={self.removed})"
        )


def filter_range(values: Sequence[float], low: float, high: float) -> list[float]:
    """Keep values inside the closed interval [low, high]."""
    return [float(v) for v in values if low <= v <= high]


def filter_modified_z(
    values: Sequence[float],
    threshold: float = MODIFIED_Z_THRESHOLD,
) -> list[float]:
    """Drop values whose median/MAD modified z-score exceeds *threshold*.

    Left unchanged with fewer than ``MIN_SAMPLES_FOR_STATS`` values or a
    zero MAD.
    """
    if len(values) < MIN_SAMPLES_FOR_STATS:
        return [float(v) for v in values]
    arr = np.asarray(values, dtype=np.float64)
    median = float(np.median(arr))
    mad = float(sps.median_abs_deviation(arr, scale=1.0))
    if mad <= 0:
        return arr.tolist()
    scores = MODIFIED_Z_FACTOR * np.abs(arr - median) / mad
    return arr[scores <= threshold].tolist()


def filter_iqr(values: Sequence[float], k: float = 1.5) -> list[float]:
    """Drop values outside ``[q1 - k*IQR, q3 + k*IQR]``."""
    if len(values) < MIN_SAMPLES_FOR_STATS:
        return [float(v) for v in values]
    arr = np.asarray(values, dtype=np.float64)
    q1, q3 = np.percentile(arr, [25, 75])
    iqr = q3 - q1
    mask = (arr >= q1 - k * iqr) & (arr <= q3 + k * iqr)
    removed = int(len(arr) - np.count_nonzero(mask))
    if removed:
        logger.debug("IQR filter removed %d of %d values", removed, len(arr))
    return arr[mask].tolist()


def filter_outliers(
    values: Sequence[float],
    low: float = HRV_ABSOLUTE_MIN,
    high: float = HRV_ABSOLUTE_MAX,
) -> OutlierReport:
    """Two-stage HRV filter: absolute bounds, then modified z-score.

    Args:
        values: Raw daily HRV values (ms).
        low: Smallest physiologically plausible value.
        high: Largest physiologically plausible value.

    Returns:
        OutlierReport with the kept values and how many each stage removed.
    """
    bounded = filter_range(values, low, high)
    kept = filter_modified_z(bounded)

    report = OutlierReport(
        kept=kept,
        absolute_removed=len(values) - len(bounded),
        statistical_removed=len(bounded) - len(kept),
        original_mean=mean(values),
        filtered_mean=mean(kept),
    )
    if report.removed:
        logger.info(
            "Filtered %d outliers from %d readings (%d absolute, %d statistical); "
            "mean %.1f -> %s",
            report.removed,
            len(values),
            report.absolute_removed,
            report.statistical_removed,
            report.original_mean,
            f"{report.filtered_mean:.1f}" if report.filtered_mean is not None else "n/a",
        )
    return report


# ---------------------------------------------------------------------------
# Score banding
# ---------------------------------------------------------------------------

# A band table is a list of (lower_bound, score) pairs sorted by ascending
# lower bound.  A value maps to the score of the last band whose lower bound
# it reaches; values below the first bound get the caller's default.
BandTable = Sequence[tuple[float, float]]


def band_score(value: float, table: BandTable, default: float) -> float:
    """Look up the score for *value* in an ascending band table."""
    score = default
    for lower, band in table:
        if value >= lower:
            score = band
        else:
            break
    return score


@dataclass
class WeightedBlend:
    """Accumulate (score, weight) pairs, skipping missing scores.

    ``value()`` renormalizes by the weight that was actually supplied, so an
    absent component drops out instead of counting as zero.
    """

    parts: dict[str, tuple[float, float]] = field(default_factory=dict)

    def add(self, name: str, score: float | None, weight: float) -> "WeightedBlend":
        if score is not None and weight > 0:
            self.parts[name] = (float(score), float(weight))
        return self

    @property
    def total_weight(self) -> float:
        return sum(w for _, w in self.parts.values())

    def value(self) -> float | None:
        total = self.total_weight
        if total <= 0:
            return None
        return sum(s * w for s, w in self.parts.values()) / total

    def __contains__(self, name: str) -> bool:
        return name in self.parts

    def __len__(self) -> int:
        return len(self.parts)
