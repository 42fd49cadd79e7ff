"""Shared data types passed between the calculators.

Everything here is a plain dataclass.  Optional measurements are ``None``
when the wearable did not deliver them; calculators treat ``None`` as a
missing signal and drop it from their blends rather than substituting a
default.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Sequence


class ActivityType(str, Enum):
    """Workout activity tags used to route strain scoring."""

    RUNNING = "running"
    CYCLING = "cycling"
    SWIMMING = "swimming"
    WALKING = "walking"
    HIKING = "hiking"
    ROWING = "rowing"
    ELLIPTICAL = "elliptical"
    STAIR_CLIMBING = "stair_climbing"
    HIIT = "hiit"
    YOGA = "yoga"
    FLEXIBILITY = "flexibility"
    FUNCTIONAL_STRENGTH = "functional_strength"
    TRADITIONAL_STRENGTH = "traditional_strength"
    CORE_TRAINING = "core_training"
    OTHER = "other"

    @property
    def is_strength(self) -> bool:
        return self in STRENGTH_ACTIVITIES


STRENGTH_ACTIVITIES = frozenset({
    ActivityType.FUNCTIONAL_STRENGTH,
    ActivityType.TRADITIONAL_STRENGTH,
    ActivityType.CORE_TRAINING,
})


class SwimStroke(str, Enum):
    """Dominant stroke of a swim session."""

    FREESTYLE = "freestyle"
    BACKSTROKE = "backstroke"
    BREASTSTROKE = "breaststroke"
    BUTTERFLY = "butterfly"
    MIXED = "mixed"


# ---------------------------------------------------------------------------
# Heart rate profile
# ---------------------------------------------------------------------------

DEFAULT_MAX_HR = 190.0
DEFAULT_RESTING_HR = 60.0

# Upper bound (fraction of max HR) of zones 1-4; above zone 4 is zone 5
HR_ZONE_UPPER = [0.60, 0.70, 0.80, 0.90]
HR_ZONE_NAMES = ["Recovery", "Aerobic", "Tempo", "Threshold", "VO2 Max"]


@dataclass(frozen=True)
class HeartRateProfile:
    """Per-user heart rate constants consumed by the strain calculators."""

    max_hr: float = DEFAULT_MAX_HR
    resting_hr: float = DEFAULT_RESTING_HR
    age: int | None = None

    @classmethod
    def from_age(cls, age: int, resting_hr: float = DEFAULT_RESTING_HR) -> "HeartRateProfile":
        """Build a profile using the 220 - age estimate of max HR."""
        return cls(max_hr=220.0 - age, resting_hr=resting_hr, age=age)

    @property
    def heart_rate_reserve(self) -> float:
        return self.max_hr - self.resting_hr

    def intensity_from_reserve(self, hr: float) -> float:
        """Karvonen intensity clamped to [0, 1]; 0 for a degenerate profile."""
        reserve = self.heart_rate_reserve
        if reserve <= 0:
            return 0.0
        return max(0.0, min(1.0, (hr - self.resting_hr) / reserve))

    def heart_rate_zone(self, hr: float) -> int:
        """Return the 1-5 zone for *hr* as a fraction of max HR."""
        pct = hr / self.max_hr if self.max_hr > 0 else 0.0
        for zone, upper in enumerate(HR_ZONE_UPPER, start=1):
            if pct < upper:
                return zone
        return 5

    def heart_rate_zone_name(self, hr: float) -> str:
        return HR_ZONE_NAMES[self.heart_rate_zone(hr) - 1]


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------


@dataclass
class WorkoutRecord:
    """One completed exercise session.

    Implausible values are kept as recorded; scoring checks :attr:`is_valid`.
    """

    activity: ActivityType
    start: datetime
    end: datetime
    duration_min: float | None = None  # derived from start/end when omitted
    distance_m: float | None = None
    active_calories: float = 0.0
    avg_hr: float | None = None
    max_hr: float | None = None
    hr_samples: Sequence[float] | None = None
    stroke: SwimStroke | None = None
    strain: float = 0.0
    hr_intensity: float | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.activity, ActivityType):
            self.activity = ActivityType(self.activity)
        if self.stroke is not None and not isinstance(self.stroke, SwimStroke):
            self.stroke = SwimStroke(self.stroke)
        if self.duration_min is None:
            self.duration_min = (self.end - self.start).total_seconds() / 60.0

    @property
    def is_valid(self) -> bool:
        """False for implausible sessions (reversed times, negative duration or calories)."""
        return (
            self.end >= self.start
            and self.duration_min is not None
            and self.duration_min >= 0
            and self.active_calories >= 0
        )

    @property
    def pace_min_per_100m(self) -> float | None:
        """Minutes per 100 m, or None without a usable distance."""
        if not self.is_valid or not self.distance_m or self.distance_m <= 0 or not self.duration_min:
            return None
        return self.duration_min / (self.distance_m / 100.0)

    def __repr__(self) -> str:
        return (
            f"WorkoutRecord({self.activity.value}, "
            f"{self.duration_min or 0.0:.0f}min, "
            f"strain={self.strain:.1f})"
        )


# ---------------------------------------------------------------------------
# Daily records
# ---------------------------------------------------------------------------


@dataclass
class StressSummary:
    """Display aggregates over one day's stress stream (exercise excluded)."""

    average: float | None = None
    maximum: float | None = None
    hours_low: float = 0.0
    hours_medium: float = 0.0
    hours_high: float = 0.0
    reading_count: int = 0
    elevated_periods: int = 0


@dataclass
class DailyRecord:
    """One calendar day of aggregated signals and computed scores."""

    date: date
    strain: float = 0.0
    recovery: float | None = None

    # Sleep (hours, percent, 0-100 score, hours)
    sleep_duration: float | None = None
    sleep_efficiency: float | None = None
    sleep_consistency: float | None = None
    sleep_debt: float | None = None
    sleep_start: datetime | None = None
    sleep_end: datetime | None = None

    # Physiology
    hrv: float | None = None
    resting_hr: float | None = None
    respiratory_rate: float | None = None
    vo2_max: float | None = None
    steps: int | None = None
    active_calories: float | None = None

    workouts: list[WorkoutRecord] = field(default_factory=list)
    stress: StressSummary | None = None
    baseline: Any = None  # BaselineSnapshot used for this day's scoring

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly)."""
        return _jsonable(asdict(self))

    def __repr__(self) -> str:
        rec = f"{self.recovery:.0f}" if self.recovery is not None else "-"
        return (
            f"DailyRecord({self.date.isoformat()}: "
            f"strain={self.strain:.1f}/21, "
            f"recovery={rec}, "
            f"workouts={len(self.workouts)})"
        )


def _jsonable(value: Any) -> Any:
    """Recursively convert dates and enums for ``json.dumps``."""
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value
