"""Daily scoring pipeline: wire one day's signals into the calculators.

:class:`ScoringEngine` takes the day's aggregated signals, its workouts,
the prior daily records and (optionally) the raw stress inputs, and
returns a populated :class:`~strainscore.models.DailyRecord`.  It holds no
state besides its configuration, so one engine can score any number of
users or days.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Sequence

from strainscore.analytics.baseline import compute_baseline, window
from strainscore.analytics.features import FeatureVector, derive_features
from strainscore.analytics.recovery import score_recovery
from strainscore.analytics.sleep import sleep_consistency, sleep_debt
from strainscore.analytics.strain import score_strain
from strainscore.analytics.stress import StressContext, daily_stress, summarize_stress
from strainscore.config import DEFAULT_CONFIG, EngineConfig
from strainscore.models import DailyRecord, HeartRateProfile, WorkoutRecord

logger = logging.getLogger(__name__)

RECENT_SLEEP_NIGHTS = 3  # nights blended with last night for smoothing


@dataclass
class DaySignals:
    """Aggregated wearable signals for one day (all optional)."""

    hrv: float | None = None
    resting_hr: float | None = None
    respiratory_rate: float | None = None
    vo2_max: float | None = None
    steps: int | None = None
    active_calories: float | None = None
    sleep_duration: float | None = None  # hours
    sleep_efficiency: float | None = None  # percent
    sleep_start: datetime | None = None
    sleep_end: datetime | None = None


class ScoringEngine:
    """Score days against a user's history.

    Args:
        config: Windows and thresholds; defaults to :data:`DEFAULT_CONFIG`.
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def score_day(
        self,
        day: date,
        signals: DaySignals,
        workouts: Sequence[WorkoutRecord] = (),
        history: Sequence[DailyRecord] = (),
        profile: HeartRateProfile | None = None,
        stress_context: StressContext | None = None,
    ) -> DailyRecord:
        """Compute strain, baseline, recovery, sleep and stress for *day*.

        Recovery stays None until a baseline can be established.  Workouts
        are updated in place with their strain and HR intensity.
        """
        cfg = self.config
        profile = profile or HeartRateProfile()
        workouts = list(workouts)

        strain = score_strain(workouts, profile)
        baseline = compute_baseline(history, day, cfg)

        week = window(history, day, cfg.baseline_window_days)
        debt = sleep_debt(
            [r.sleep_duration for r in week],
            signals.sleep_duration,
            cfg.sleep_target_hours,
        )
        bedtimes = [r.sleep_start for r in week if r.sleep_start is not None]
        if signals.sleep_start is not None:
            bedtimes.append(signals.sleep_start)
        consistency = sleep_consistency(bedtimes)

        recovery = None
        if baseline is not None:
            yesterday = next((r for r in history if r.date == day - timedelta(days=1)), None)
            recent_nights = [r.sleep_duration for r in week[-RECENT_SLEEP_NIGHTS:] if r.sleep_duration is not None]
            result = score_recovery(
                hrv=signals.hrv,
                hrv_baseline=baseline.hrv_mean,
                hrv_std=baseline.hrv_std,
                rhr=signals.resting_hr,
                rhr_baseline=baseline.rhr_mean,
                rhr_std=baseline.rhr_std,
                sleep_hours=signals.sleep_duration,
                recent_sleep_hours=recent_nights,
                sleep_efficiency=signals.sleep_efficiency,
                sleep_consistency=consistency,
                yesterday_strain=yesterday.strain if yesterday is not None else None,
                acute_strain=baseline.acute_strain,
                chronic_strain=baseline.chronic_strain,
                respiratory_rate=signals.respiratory_rate,
                respiratory_baseline=baseline.respiratory_rate,
            )
            recovery = result.score
            logger.debug("Recovery for %s: %r", day, result)
        else:
            logger.info("No baseline for %s yet; recovery left empty", day)

        stress = None
        if stress_context is not None:
            if baseline is not None:
                stress_context = replace(
                    stress_context,
                    baseline_resting_hr=stress_context.baseline_resting_hr or baseline.rhr_mean,
                    baseline_hrv=stress_context.baseline_hrv or baseline.hrv_mean,
                )
            stress = summarize_stress(daily_stress(stress_context, cfg), cfg)

        return DailyRecord(
            date=day,
            strain=strain.score,
            recovery=recovery,
            sleep_duration=signals.sleep_duration,
            sleep_efficiency=signals.sleep_efficiency,
            sleep_consistency=consistency,
            sleep_debt=debt,
            sleep_start=signals.sleep_start,
            sleep_end=signals.sleep_end,
            hrv=signals.hrv,
            resting_hr=signals.resting_hr,
            respiratory_rate=signals.respiratory_rate,
            vo2_max=signals.vo2_max,
            steps=signals.steps,
            active_calories=signals.active_calories,
            workouts=workouts,
            stress=stress,
            baseline=baseline,
        )

    def features(self, day: date, history: Sequence[DailyRecord]) -> FeatureVector:
        """Feature vector for *day*; *history* must contain that day."""
        return derive_features(day, history, self.config)
