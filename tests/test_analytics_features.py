"""Tests for strainscore.analytics.features -- per-day feature vector."""

from datetime import datetime, timedelta

import pytest

from strainscore.analytics.features import (
    derive_features,
    days_since_rest_day,
    stress_load,
    FeatureVector,
)
from strainscore.config import EngineConfig
from strainscore.models import StressSummary
from tests.conftest import TARGET, make_history, make_record


class TestTargetDay:
    def test_missing_target_raises(self):
        with pytest.raises(ValueError):
            derive_features(TARGET, make_history(7))

    def test_today_values(self):
        fv = derive_features(TARGET, [make_record(TARGET, steps=9000, vo2_max=48.0)])
        assert fv.steps == 9000
        assert fv.vo2_max == 48.0
        assert fv.hrv == 50.0

    def test_absent_is_none_not_zero(self):
        fv = derive_features(TARGET, [make_record(TARGET, strain=0.0, hrv=None)])
        assert fv.strain == 0.0
        assert fv.hrv is None
        assert fv.hrv_to_strain is None
        assert "hrv" in fv.absent_features()
        assert "strain" not in fv.absent_features()

    def test_no_history(self):
        fv = derive_features(TARGET, [make_record(TARGET)])
        assert fv.avg_hrv_7d is None
        assert fv.hrv_z is None
        assert fv.sleep_debt_7d is None
        assert fv.cumulative_strain_7d is None
        assert fv.days_since_rest_day == 1


class TestRolling:
    HISTORY = make_history(7, hrv=[40.0, 45.0, 50.0, 55.0, 60.0, 65.0, 70.0]) + [make_record(TARGET, hrv=60.0)]

    def test_averages(self):
        fv = derive_features(TARGET, self.HISTORY)
        assert fv.avg_hrv_7d == pytest.approx(55.0)
        assert fv.avg_hrv_3d == pytest.approx(65.0)
        assert fv.avg_strain_7d == pytest.approx(10.0)
        assert fv.cumulative_strain_7d == pytest.approx(70.0)

    def test_trend(self):
        assert derive_features(TARGET, self.HISTORY).hrv_trend_3d == pytest.approx(5.0)

    def test_deviation(self):
        fv = derive_features(TARGET, self.HISTORY)
        assert fv.hrv_deviation_pct == pytest.approx(5 / 55 * 100)

    def test_excludes_older_days(self):
        history = make_history(10, hrv=[200.0] * 3 + [50.0] * 7) + [make_record(TARGET)]
        assert derive_features(TARGET, history).avg_hrv_7d == pytest.approx(50.0)

    def test_sleep_debt_sums_stored_values(self):
        history = make_history(3, sleep_debt=[1.0, None, 2.5]) + [make_record(TARGET)]
        assert derive_features(TARGET, history).sleep_debt_7d == pytest.approx(3.5)

    def test_average_stress(self):
        stress = [StressSummary(average=a) for a in (1.0, 2.0, 1.5)]
        history = make_history(3, stress=stress) + [make_record(TARGET)]
        fv = derive_features(TARGET, history)
        assert fv.avg_stress_3d == pytest.approx(1.5)
        assert fv.average_stress is None


class TestNormalised:
    def test_rhr_z_is_inverted(self):
        history = make_history(7, resting_hr=[56.0, 57.0, 58.0, 59.0, 60.0, 61.0, 62.0]) + [
            make_record(TARGET, resting_hr=62.0)
        ]
        fv = derive_features(TARGET, history)
        sd = (28 / 6) ** 0.5
        assert fv.rhr_z == pytest.approx(-(62.0 - 59.0) / sd)
        assert fv.rhr_deviation == pytest.approx(3.0)

    def test_constant_history_has_no_z(self):
        fv = derive_features(TARGET, make_history(7) + [make_record(TARGET, hrv=60.0)])
        assert fv.hrv_z is None

    def test_ratios(self):
        fv = derive_features(TARGET, [make_record(TARGET, strain=0.5, sleep_duration=7.5, hrv=60.0)])
        assert fv.sleep_to_strain == pytest.approx(7.5)
        assert fv.hrv_to_strain == pytest.approx(60.0)

    def test_recovery_delta_and_balance(self):
        history = make_history(7, recovery=60.0, strain=8.0) + [make_record(TARGET, recovery=70.0, strain=12.0)]
        fv = derive_features(TARGET, history)
        assert fv.recovery_baseline_delta == pytest.approx(10.0)
        assert fv.strain_balance == pytest.approx(4.0)


class TestRestDays:
    def test_counts_back_to_rest_day(self):
        history = make_history(5, strain=[10.0, 3.0, 12.0, 14.0, 15.0]) + [make_record(TARGET, strain=11.0)]
        assert days_since_rest_day(history, TARGET) == 4
        fv = derive_features(TARGET, history)
        assert fv.days_since_rest_day == 4
        assert fv.is_rest_day is False

    def test_today_is_rest_day(self):
        history = make_history(3) + [make_record(TARGET, strain=2.0)]
        fv = derive_features(TARGET, history)
        assert fv.days_since_rest_day == 0
        assert fv.is_rest_day is True

    def test_custom_threshold(self):
        history = make_history(3, strain=8.0) + [make_record(TARGET, strain=8.0)]
        assert derive_features(TARGET, history, EngineConfig(rest_day_strain=9.0)).is_rest_day is True

    def test_no_records(self):
        assert days_since_rest_day([], TARGET) is None


class TestStressLoad:
    def test_formula(self):
        record = make_record(stress=StressSummary(average=1.0, maximum=2.0, hours_high=0.5, reading_count=200))
        assert stress_load(record) == pytest.approx(1.0 * 1.5 + 2.0 * 0.25 + 50.0)

    def test_missing(self):
        assert stress_load(make_record()) is None
        assert stress_load(make_record(stress=StressSummary())) is None


class TestCircadianAndTarget:
    def test_bedtime_consistency(self):
        starts = [datetime(2024, 3, 8 + i, 23, 0) for i in range(7)]
        history = make_history(7, sleep_start=starts) + [
            make_record(TARGET, sleep_start=datetime(2024, 3, 15, 0, 0))
        ]
        assert derive_features(TARGET, history).bedtime_consistency == pytest.approx(1.0)

    def test_wake_time_consistency(self):
        ends = [datetime(2024, 3, 8 + i, 7, 0) for i in range(7)]
        history = make_history(7, sleep_end=ends) + [
            make_record(TARGET, sleep_end=datetime(2024, 3, 15, 6, 30))
        ]
        assert derive_features(TARGET, history).wake_time_consistency == pytest.approx(0.5)

    def test_tomorrow_recovery(self):
        history = [make_record(TARGET), make_record(TARGET + timedelta(days=1), recovery=72.0)]
        assert derive_features(TARGET, history).tomorrow_recovery == 72.0

    def test_future_days_do_not_leak(self):
        history = [make_record(TARGET), make_record(TARGET + timedelta(days=1), hrv=500.0)]
        assert derive_features(TARGET, history).avg_hrv_7d is None


class TestFeatureVector:
    def test_to_dict(self):
        d = FeatureVector(date=TARGET, hrv=50.0).to_dict()
        assert d["date"] == "2024-03-15"
        assert d["hrv"] == 50.0
        assert d["recovery"] is None

    def test_repr(self):
        assert "2024-03-15" in repr(FeatureVector(date=TARGET))
