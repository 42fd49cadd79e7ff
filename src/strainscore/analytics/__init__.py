"""Scoring engine for computing training and readiness metrics from wearable data.

Modules:
    stats      -- Descriptive stats, outlier filters, band tables, weighted blends
    baseline   -- Personal HRV / RHR / strain baselines and ACWR
    strain     -- 0-21 strain (cardio path + routing)
    swimming   -- Swim strain from HR, pace and stroke
    strength   -- Strength-training strain
    recovery   -- Baseline-personalised 0-100 recovery
    sleep      -- Sleep debt and bedtime consistency
    stress     -- 0-3 stress stream, elevated periods, down-sampling
    hunter     -- Gamified hunter stats, ranks and XP
    features   -- Per-day feature vector for prediction models
    pipeline   -- ScoringEngine: one day's signals -> DailyRecord
"""

from strainscore.analytics.stats import (
    mean,
    standard_deviation,
    z_score,
    linear_slope,
    filter_outliers,
    filter_iqr,
    filter_range,
    band_score,
    WeightedBlend,
    OutlierReport,
)
from strainscore.analytics.baseline import (
    compute_baseline,
    acwr_status,
    acwr_risk_band,
    BaselineSnapshot,
    ACWRStatus,
)
from strainscore.analytics.strain import (
    score_strain,
    score_workout,
    daily_strain,
    strain_level,
    StrainResult,
    StrainLevel,
)
from strainscore.analytics.swimming import score_swim, estimate_swim_heart_rate
from strainscore.analytics.strength import score_strength
from strainscore.analytics.recovery import (
    score_recovery,
    score_recovery_basic,
    recovery_level,
    recovery_recommendation,
    RecoveryResult,
    RecoveryLevel,
)
from strainscore.analytics.sleep import sleep_debt, sleep_consistency
from strainscore.analytics.stress import (
    stress_level,
    stress_sample,
    daily_stress,
    current_stress,
    average_stress,
    stress_distribution,
    elevated_periods,
    downsample,
    summarize_stress,
    StressSample,
    StressContext,
    ElevatedPeriod,
)
from strainscore.analytics.hunter import (
    hunter_snapshot,
    swim_index,
    best_swim_inputs,
    HunterSnapshot,
    XPState,
)
from strainscore.analytics.features import derive_features, FeatureVector
from strainscore.analytics.pipeline import ScoringEngine, DaySignals

__all__ = [
    # stats
    "mean",
    "standard_deviation",
    "z_score",
    "linear_slope",
    "filter_outliers",
    "filter_iqr",
    "filter_range",
    "band_score",
    "WeightedBlend",
    "OutlierReport",
    # baseline
    "compute_baseline",
    "acwr_status",
    "acwr_risk_band",
    "BaselineSnapshot",
    "ACWRStatus",
    # strain
    "score_strain",
    "score_workout",
    "daily_strain",
    "strain_level",
    "StrainResult",
    "StrainLevel",
    "score_swim",
    "estimate_swim_heart_rate",
    "score_strength",
    # recovery
    "score_recovery",
    "score_recovery_basic",
    "recovery_level",
    "recovery_recommendation",
    "RecoveryResult",
    "RecoveryLevel",
    # sleep
    "sleep_debt",
    "sleep_consistency",
    # stress
    "stress_level",
    "stress_sample",
    "daily_stress",
    "current_stress",
    "average_stress",
    "stress_distribution",
    "elevated_periods",
    "downsample",
    "summarize_stress",
    "StressSample",
    "StressContext",
    "ElevatedPeriod",
    # hunter
    "hunter_snapshot",
    "swim_index",
    "best_swim_inputs",
    "HunterSnapshot",
    "XPState",
    # features
    "derive_features",
    "FeatureVector",
    # pipeline
    "ScoringEngine",
    "DaySignals",
]
