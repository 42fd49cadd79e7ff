"""Hunter stats: a gamified skill rating on top of the daily records.

Seven categories are scored 0-100 from min-max normalised readiness,
body-composition and swim inputs, adjusted by threshold-triggered daily
modifiers and mapped onto an E..S+ rank ladder.  Earned XP feeds a
level-up state machine whose state the caller persists between snapshots.

Swim events are scored against the world record with an exponential
transform, so shaving seconds near elite pace is worth far more than at
recreational pace:

    index = clamp(exp(-5 * ln(pr / wr)) * 100, 1, 100)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from enum import Enum
from typing import Sequence

import numpy as np

from strainscore.analytics.stats import WeightedBlend
from strainscore.models import DailyRecord


# ---------------------------------------------------------------------------
# Ranks and categories
# ---------------------------------------------------------------------------


class HunterRank(str, Enum):
    E = "E"
    D = "D"
    C = "C"
    B = "B"
    A = "A"
    S = "S"
    S_PLUS = "S+"

    @property
    def minimum_score(self) -> float:
        return RANK_MINIMUMS[self]

    @property
    def next_rank(self) -> "HunterRank | None":
        order = list(HunterRank)
        idx = order.index(self)
        return order[idx + 1] if idx + 1 < len(order) else None


RANK_MINIMUMS = {
    HunterRank.E: 0.0,
    HunterRank.D: 10.0,
    HunterRank.C: 25.0,
    HunterRank.B: 40.0,
    HunterRank.A: 55.0,
    HunterRank.S: 70.0,
    HunterRank.S_PLUS: 90.0,
}


def rank_for(score: float) -> HunterRank:
    """Highest rank whose minimum *score* reaches."""
    rank = HunterRank.E
    for candidate in HunterRank:
        if score >= candidate.minimum_score:
            rank = candidate
    return rank


def progress_to_next_rank(score: float) -> float:
    """Fraction (0-1) of the way from the current rank to the next."""
    rank = rank_for(score)
    nxt = rank.next_rank
    if nxt is None:
        return 1.0
    gap = nxt.minimum_score - rank.minimum_score
    if gap <= 0:
        return 0.0
    return max(0.0, min(1.0, (score - rank.minimum_score) / gap))


def next_rank_hint(score: float) -> str | None:
    nxt = rank_for(score).next_rank
    if nxt is None:
        return None
    return f"{max(0.0, nxt.minimum_score - score):.1f} pts to reach {nxt.value}"


class StatCategory(str, Enum):
    VITALITY = "vitality"
    STRENGTH = "strength"
    ENDURANCE = "endurance"
    AGILITY = "agility"
    PHYSIQUE = "physique"
    METABOLIC_POWER = "metabolic_power"
    SWIM_MASTERY = "swim_mastery"


CATEGORY_EXPLANATIONS = {
    StatCategory.VITALITY: "Sleep efficiency and HRV drive today's Vitality score.",
    StatCategory.STRENGTH: "Training load and muscle mass fuel Strength.",
    StatCategory.ENDURANCE: "VO2 and long swim performance guide Endurance.",
    StatCategory.AGILITY: "High readiness and sprint swim speed shape Agility.",
    StatCategory.PHYSIQUE: "Body fat, BMI and lean mass define Physique.",
    StatCategory.METABOLIC_POWER: "BMR, protein intake and resting HR set Metabolic Power.",
    StatCategory.SWIM_MASTERY: "Average of top swim event performance indices.",
}


# ---------------------------------------------------------------------------
# Normalisation ranges (min, max) and readiness defaults
# ---------------------------------------------------------------------------

SLEEP_HOURS_RANGE = (4.0, 9.0)
SLEEP_EFFICIENCY_RANGE = (60.0, 100.0)
HRV_RANGE = (20.0, 120.0)
BODY_WATER_RANGE = (45.0, 70.0)
MUSCLE_RATIO_RANGE = (0.30, 0.55)
STRAIN_RANGE = (4.0, 20.0)
PROTEIN_RANGE = (12.0, 25.0)
VO2_RANGE = (30.0, 65.0)
ENDURANCE_STEPS_RANGE = (3000.0, 15000.0)
AGILITY_STEPS_RANGE = (3000.0, 12000.0)
RECOVERY_RANGE = (30.0, 100.0)
BODY_FAT_RANGE = (8.0, 30.0)
BMI_RANGE = (18.0, 28.0)
BMR_RANGE = (1200.0, 2500.0)
METABOLIC_AGE_RANGE = (18.0, 60.0)
RESTING_HR_RANGE = (45.0, 80.0)

SPRINT_WEIGHT = 0.35  # sprint PI is scaled down inside Strength

# Used only when there is no daily record at all
READINESS_DEFAULTS = {
    "recovery": 55.0,
    "strain": 10.0,
    "sleep_hours": 6.5,
    "sleep_efficiency": 85.0,
    "hrv": 45.0,
    "resting_hr": 58.0,
    "vo2_max": 44.0,
    "steps": 7500.0,
}

SLEEP_STREAK_HOURS = 7.5
ACTIVE_DAY_STEPS = 6000
TREND_SHORT_DAYS = 7
TREND_LONG_DAYS = 30
TREND_FLAT_BAND = 1.0


def normalized(value: float | None, bounds: tuple[float, float]) -> float | None:
    """Linear min-max scale onto 0-100, clamped.  None passes through."""
    if value is None:
        return None
    lo, hi = bounds
    if hi <= lo:
        return 0.0
    clamped = max(lo, min(hi, value))
    return (clamped - lo) / (hi - lo) * 100.0


def inverse_normalized(value: float | None, bounds: tuple[float, float]) -> float | None:
    scaled = normalized(value, bounds)
    return None if scaled is None else 100.0 - scaled


def _equal_blend(*scores: float | None) -> float:
    """Average of the present scores, 0 when none are present."""
    blend = WeightedBlend()
    for i, s in enumerate(scores):
        blend.add(str(i), s, 1.0)
    return blend.value() or 0.0


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass
class BodyComposition:
    """Smart-scale readings; any field may be missing."""

    weight: float | None = None
    body_fat_pct: float | None = None
    muscle_mass: float | None = None
    body_water_pct: float | None = None
    bmi: float | None = None
    bmr: float | None = None
    metabolic_age: float | None = None
    protein_pct: float | None = None

    @property
    def muscle_ratio(self) -> float | None:
        if self.muscle_mass is None or self.weight is None:
            return None
        return self.muscle_mass / max(self.weight, 1.0)


@dataclass
class Readiness:
    """Today's readiness metrics plus the streaks and trends of the history."""

    recovery: float | None
    strain: float | None
    sleep_hours: float | None
    sleep_efficiency: float | None
    hrv: float | None
    resting_hr: float | None
    vo2_max: float | None
    steps: float | None
    sleep_streak: int = 0
    trends: dict[StatCategory, float] = field(default_factory=dict)

    @property
    def daily_score(self) -> float:
        hrv_scaled = self.hrv / 1.2 if self.hrv is not None else None
        return _equal_blend(self.recovery, hrv_scaled, self.sleep_efficiency)


def _leading_streak(history: Sequence[DailyRecord], predicate) -> int:
    streak = 0
    for r in history:
        if not predicate(r):
            break
        streak += 1
    return streak


def _trend_delta(values: Sequence[float | None]) -> float:
    """7-day minus 30-day average of a newest-first series; 0 if under 7 days."""
    present = [v for v in values if v is not None]
    if len(present) < TREND_SHORT_DAYS:
        return 0.0
    return float(np.mean(present[:TREND_SHORT_DAYS]) - np.mean(present[:TREND_LONG_DAYS]))


def build_readiness(history_newest_first: Sequence[DailyRecord]) -> Readiness:
    """Readiness from the latest record, with trends over the whole history."""
    latest = history_newest_first[0] if history_newest_first else None
    if latest is None:
        values = dict(READINESS_DEFAULTS)
    else:
        values = {
            "recovery": latest.recovery,
            "strain": latest.strain,
            "sleep_hours": latest.sleep_duration,
            "sleep_efficiency": latest.sleep_efficiency,
            "hrv": latest.hrv,
            "resting_hr": latest.resting_hr,
            "vo2_max": latest.vo2_max,
            "steps": float(latest.steps) if latest.steps is not None else None,
        }

    h = history_newest_first
    steps_delta = _trend_delta([r.steps for r in h])
    trends = {
        StatCategory.VITALITY: _trend_delta([r.sleep_duration for r in h]),
        StatCategory.STRENGTH: _trend_delta([r.strain for r in h]),
        StatCategory.ENDURANCE: steps_delta,
        StatCategory.AGILITY: steps_delta,
        StatCategory.PHYSIQUE: 0.0,
        StatCategory.METABOLIC_POWER: -_trend_delta([r.resting_hr for r in h]),
        StatCategory.SWIM_MASTERY: 0.0,
    }

    return Readiness(
        **values,
        sleep_streak=_leading_streak(
            h, lambda r: r.sleep_duration is not None and r.sleep_duration >= SLEEP_STREAK_HOURS
        ),
        trends=trends,
    )


# ---------------------------------------------------------------------------
# Swim events
# ---------------------------------------------------------------------------

YARD_M = 0.9144


@dataclass(frozen=True)
class SwimEvent:
    """A pool event with its long-course (or yards) world record."""

    code: str
    name: str
    distance: float
    unit: str  # "m" or "y"
    world_record_s: float

    @property
    def distance_m(self) -> float:
        return self.distance * YARD_M if self.unit == "y" else self.distance


def _ev(code: str, name: str, distance: float, unit: str, wr: float) -> SwimEvent:
    return SwimEvent(code=code, name=name, distance=distance, unit=unit, world_record_s=wr)


SWIM_CATALOG = [
    _ev("50m_free", "50m Freestyle", 50, "m", 20.91),
    _ev("100m_free", "100m Freestyle", 100, "m", 46.40),
    _ev("200m_free", "200m Freestyle", 200, "m", 102.00),
    _ev("400m_free", "400m Freestyle", 400, "m", 219.96),
    _ev("800m_free", "800m Freestyle", 800, "m", 452.12),
    _ev("1500m_free", "1500m Freestyle", 1500, "m", 870.67),
    _ev("50m_back", "50m Backstroke", 50, "m", 23.55),
    _ev("100m_back", "100m Backstroke", 100, "m", 51.60),
    _ev("200m_back", "200m Backstroke", 200, "m", 111.92),
    _ev("50m_breast", "50m Breaststroke", 50, "m", 25.95),
    _ev("100m_breast", "100m Breaststroke", 100, "m", 56.88),
    _ev("200m_breast", "200m Breaststroke", 200, "m", 125.48),
    _ev("50m_fly", "50m Butterfly", 50, "m", 22.27),
    _ev("100m_fly", "100m Butterfly", 100, "m", 49.45),
    _ev("200m_fly", "200m Butterfly", 200, "m", 110.34),
    _ev("200m_im", "200m IM", 200, "m", 112.69),
    _ev("400m_im", "400m IM", 400, "m", 242.50),
    _ev("50y_free", "50y Freestyle", 50, "y", 17.63),
    _ev("100y_free", "100y Freestyle", 100, "y", 39.90),
    _ev("200y_free", "200y Freestyle", 200, "y", 88.33),
    _ev("500y_free", "500y Freestyle", 500, "y", 244.45),
    _ev("1000y_free", "1000y Freestyle", 1000, "y", 513.93),
    _ev("1650y_free", "1650y Freestyle", 1650, "y", 852.08),
    _ev("50y_back", "50y Backstroke", 50, "y", 20.07),
    _ev("100y_back", "100y Backstroke", 100, "y", 43.35),
    _ev("200y_back", "200y Backstroke", 200, "y", 95.37),
    _ev("100y_breast", "100y Breaststroke", 100, "y", 49.51),
    _ev("200y_breast", "200y Breaststroke", 200, "y", 107.91),
    _ev("100y_fly", "100y Butterfly", 100, "y", 42.80),
    _ev("200y_fly", "200y Butterfly", 200, "y", 96.43),
    _ev("200y_im", "200y IM", 200, "y", 97.91),
    _ev("400y_im", "400y IM", 400, "y", 213.42),
]

SWIM_EVENTS = {e.code: e for e in SWIM_CATALOG}

TOP_EVENTS = 3
SWIM_INDEX_EXPONENT = 5.0
SEED_INDEX = 35.0
SEED_PR_FACTOR = 1.6
SEED_AGE_DAYS = 30


@dataclass
class SwimRecord:
    """One logged swim time."""

    event: str  # SwimEvent code
    time_s: float
    recorded_on: date


@dataclass
class SwimPerformance:
    event: SwimEvent
    personal_record_s: float
    index: float  # 1-100
    rank: HunterRank
    recorded_on: date
    progress_to_next_rank: float


def swim_index(personal_record_s: float, world_record_s: float) -> float:
    """Exponential performance index, clamped to [1, 100]."""
    if personal_record_s <= 0 or world_record_s <= 0:
        return 1.0
    ratio = personal_record_s / world_record_s
    return max(1.0, min(100.0, math.exp(-SWIM_INDEX_EXPONENT * math.log(ratio)) * 100.0))


def best_swim_inputs(records: Sequence[SwimRecord]) -> list[SwimRecord]:
    """Fastest time per known event; unknown event codes are ignored."""
    best: dict[str, SwimRecord] = {}
    for r in records:
        if r.event not in SWIM_EVENTS or r.time_s <= 0:
            continue
        current = best.get(r.event)
        if current is None or r.time_s < current.time_s:
            best[r.event] = r
    return list(best.values())


def swim_performances(records: Sequence[SwimRecord], as_of: date) -> list[SwimPerformance]:
    """Top three events by index, or three seed events with no records."""
    best = best_swim_inputs(records)
    if not best:
        return [
            SwimPerformance(
                event=ev,
                personal_record_s=ev.world_record_s * SEED_PR_FACTOR,
                index=SEED_INDEX,
                rank=rank_for(SEED_INDEX),
                recorded_on=as_of - timedelta(days=SEED_AGE_DAYS),
                progress_to_next_rank=progress_to_next_rank(SEED_INDEX),
            )
            for ev in SWIM_CATALOG[:TOP_EVENTS]
        ]

    scored = []
    for r in best:
        ev = SWIM_EVENTS[r.event]
        idx = swim_index(r.time_s, ev.world_record_s)
        scored.append(SwimPerformance(
            event=ev,
            personal_record_s=r.time_s,
            index=idx,
            rank=rank_for(idx),
            recorded_on=r.recorded_on,
            progress_to_next_rank=progress_to_next_rank(idx),
        ))
    scored.sort(key=lambda p: p.index, reverse=True)
    return scored[:TOP_EVENTS]


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------


class ModifierKind(str, Enum):
    RECOVERY_BUFF = "recovery_buff"
    STRAIN_BUFF = "strain_buff"
    SLEEP_BUFF = "sleep_buff"
    PENALTY = "penalty"


@dataclass
class DailyModifier:
    title: str
    kind: ModifierKind
    target: StatCategory
    impact: float


def daily_modifiers(readiness: Readiness) -> list[DailyModifier]:
    """Threshold-triggered buffs and penalties; absent metrics trigger nothing."""
    mods: list[DailyModifier] = []
    rec = readiness.recovery
    if rec is not None and rec >= 80:
        mods.append(DailyModifier("Recovery Surge", ModifierKind.RECOVERY_BUFF, StatCategory.AGILITY, 8.0))
    if readiness.strain is not None and readiness.strain >= 16:
        mods.append(DailyModifier("Power Through", ModifierKind.STRAIN_BUFF, StatCategory.STRENGTH, 6.0))
    if rec is not None and rec <= 40:
        mods.append(DailyModifier("Fatigue", ModifierKind.PENALTY, StatCategory.ENDURANCE, -10.0))
    if readiness.sleep_streak >= 3:
        mods.append(DailyModifier("Deep Sleep Streak", ModifierKind.SLEEP_BUFF, StatCategory.VITALITY, 7.0))
        mods.append(DailyModifier("Metabolic Reset", ModifierKind.SLEEP_BUFF, StatCategory.METABOLIC_POWER, 5.0))
    return mods


def is_awakened(readiness: Readiness) -> bool:
    return (
        readiness.recovery is not None and readiness.recovery >= 90
        and readiness.hrv is not None and readiness.hrv >= 70
        and readiness.sleep_hours is not None and readiness.sleep_hours >= 7.5
    )


# ---------------------------------------------------------------------------
# Category scores
# ---------------------------------------------------------------------------


def category_scores(
    readiness: Readiness,
    body: BodyComposition,
    swims: Sequence[SwimPerformance],
) -> dict[StatCategory, float]:
    """Raw (pre-modifier) 0-100 score per category."""
    by_distance = sorted(swims, key=lambda p: p.event.distance_m)
    sprint_pi = by_distance[0].index if by_distance else None
    endurance_pi = by_distance[-1].index if by_distance else None
    swim_mastery = float(np.mean([p.index for p in swims])) if swims else 0.0
    muscle = normalized(body.muscle_ratio, MUSCLE_RATIO_RANGE)
    protein = normalized(body.protein_pct, PROTEIN_RANGE)
    recovery = normalized(readiness.recovery, RECOVERY_RANGE)
    hrv = normalized(readiness.hrv, HRV_RANGE)

    return {
        StatCategory.VITALITY: _equal_blend(
            normalized(readiness.sleep_hours, SLEEP_HOURS_RANGE),
            normalized(readiness.sleep_efficiency, SLEEP_EFFICIENCY_RANGE),
            hrv,
            normalized(body.body_water_pct, BODY_WATER_RANGE),
        ),
        StatCategory.STRENGTH: _equal_blend(
            muscle,
            normalized(readiness.strain, STRAIN_RANGE),
            protein,
            sprint_pi * SPRINT_WEIGHT if sprint_pi is not None else None,
        ),
        StatCategory.ENDURANCE: _equal_blend(
            normalized(readiness.vo2_max, VO2_RANGE),
            endurance_pi,
            normalized(readiness.steps, ENDURANCE_STEPS_RANGE),
            recovery,
        ),
        StatCategory.AGILITY: _equal_blend(
            recovery,
            normalized(readiness.steps, AGILITY_STEPS_RANGE),
            sprint_pi,
            hrv,
        ),
        StatCategory.PHYSIQUE: _equal_blend(
            inverse_normalized(body.body_fat_pct, BODY_FAT_RANGE),
            inverse_normalized(body.bmi, BMI_RANGE),
            muscle,
        ),
        StatCategory.METABOLIC_POWER: _equal_blend(
            normalized(body.bmr, BMR_RANGE),
            inverse_normalized(body.metabolic_age, METABOLIC_AGE_RANGE),
            inverse_normalized(readiness.resting_hr, RESTING_HR_RANGE),
            protein,
        ),
        StatCategory.SWIM_MASTERY: swim_mastery,
    }


def apply_modifiers(
    scores: dict[StatCategory, float],
    modifiers: Sequence[DailyModifier],
) -> dict[StatCategory, float]:
    """Sum modifier impacts per category, then re-clamp to [0, 100]."""
    adjusted = {}
    for cat, score in scores.items():
        impact = sum(m.impact for m in modifiers if m.target is cat)
        adjusted[cat] = max(0.0, min(100.0, score + impact))
    return adjusted


# ---------------------------------------------------------------------------
# XP / level state machine
# ---------------------------------------------------------------------------

LEVEL_BASE_XP = 100
LEVEL_STEP_XP = 25
STREAK_XP_CAP = 15
PR_BONUS_XP = 25


def level_requirement(level: int) -> int:
    """XP needed to clear *level*."""
    return LEVEL_BASE_XP + level * LEVEL_STEP_XP


@dataclass(frozen=True)
class XPState:
    level: int = 1
    current_xp: int = 0
    xp_to_next_level: int = level_requirement(1)
    earned_today: int = 0

    def __post_init__(self) -> None:
        if self.level < 1 or self.current_xp < 0 or self.xp_to_next_level <= 0:
            raise ValueError("invalid XP state")

    @property
    def progress(self) -> float:
        return min(self.current_xp / self.xp_to_next_level, 1.0)


def earned_xp(
    overall: float,
    swim_mastery: float,
    streak: int,
    new_pr_today: bool,
) -> int:
    return (
        int(overall / 5)
        + int(swim_mastery / 4)
        + min(streak, STREAK_XP_CAP)
        + (PR_BONUS_XP if new_pr_today else 0)
    )


def award_xp(state: XPState, earned: int) -> XPState:
    """Add *earned* XP, rolling over as many levels as it pays for."""
    current = state.current_xp + earned
    level = state.level
    needed = state.xp_to_next_level
    while current >= needed:
        current -= needed
        level += 1
        needed = level_requirement(level)
    return replace(state, level=level, current_xp=current, xp_to_next_level=needed, earned_today=earned)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


@dataclass
class HunterStat:
    category: StatCategory
    score: float
    rank: HunterRank
    trend: float
    next_rank_hint: str | None

    @property
    def trend_direction(self) -> str:
        if self.trend > TREND_FLAT_BAND:
            return "up"
        if self.trend < -TREND_FLAT_BAND:
            return "down"
        return "flat"

    @property
    def explanation(self) -> str:
        return CATEGORY_EXPLANATIONS[self.category]


@dataclass
class HunterSnapshot:
    stats: list[HunterStat]
    rank: HunterRank
    xp: XPState
    modifiers: list[DailyModifier]
    swims: list[SwimPerformance]
    swim_mastery: float
    swim_mastery_rank: HunterRank
    overall_index: float
    consistency_streak: int
    daily_score: float
    awakened: bool

    def stat(self, category: StatCategory) -> HunterStat:
        return next(s for s in self.stats if s.category is category)

    def __repr__(self) -> str:
        return (
            f"HunterSnapshot(rank={self.rank.value}, "
            f"overall={self.overall_index:.1f}, "
            f"level={self.xp.level})"
        )


def consistency_streak(history_newest_first: Sequence[DailyRecord]) -> int:
    """Consecutive recent days with 6000+ steps or a workout."""
    return _leading_streak(
        history_newest_first,
        lambda r: (r.steps or 0) >= ACTIVE_DAY_STEPS or any(w.is_valid for w in r.workouts),
    )


def hunter_snapshot(
    history: Sequence[DailyRecord],
    body: BodyComposition | None = None,
    swim_records: Sequence[SwimRecord] = (),
    prior_xp: XPState | None = None,
    as_of: date | None = None,
) -> HunterSnapshot:
    """Compute today's hunter stats and the updated XP state.

    Args:
        history: Daily records, any order; days after *as_of* are ignored.
        body: Latest body-composition readings.
        swim_records: Every logged swim time.
        prior_xp: XP state from the previous snapshot (fresh level 1 if None).
        as_of: Snapshot day (latest record date, else today).

    Returns:
        HunterSnapshot; ``snapshot.xp`` is the state to persist.
    """
    if as_of is None:
        as_of = max((r.date for r in history), default=date.today())
    recent = sorted((r for r in history if r.date <= as_of), key=lambda r: r.date, reverse=True)
    body = body or BodyComposition()

    readiness = build_readiness(recent)
    swims = swim_performances(swim_records, as_of)
    modifiers = daily_modifiers(readiness)
    scores = apply_modifiers(category_scores(readiness, body, swims), modifiers)

    stats = [
        HunterStat(
            category=cat,
            score=score,
            rank=rank_for(score),
            trend=readiness.trends.get(cat, 0.0),
            next_rank_hint=next_rank_hint(score),
        )
        for cat, score in scores.items()
    ]
    overall = float(np.mean(list(scores.values())))
    swim_mastery = scores[StatCategory.SWIM_MASTERY]
    streak = consistency_streak(recent)

    earned = earned_xp(
        overall,
        swim_mastery,
        streak,
        new_pr_today=any(p.recorded_on == as_of for p in swims),
    )
    xp = award_xp(prior_xp or XPState(), earned)

    return HunterSnapshot(
        stats=stats,
        rank=rank_for(overall),
        xp=xp,
        modifiers=modifiers,
        swims=swims,
        swim_mastery=swim_mastery,
        swim_mastery_rank=rank_for(swim_mastery),
        overall_index=overall,
        consistency_streak=streak,
        daily_score=(readiness.daily_score + overall) / 2.0,
        awakened=is_awakened(readiness),
    )
