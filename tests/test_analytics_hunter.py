"""Tests for strainscore.analytics.hunter -- ranks, swim indices, modifiers and XP."""

from datetime import date, timedelta

import pytest

from strainscore.analytics.hunter import (
    hunter_snapshot,
    build_readiness,
    category_scores,
    apply_modifiers,
    daily_modifiers,
    is_awakened,
    rank_for,
    progress_to_next_rank,
    next_rank_hint,
    normalized,
    inverse_normalized,
    swim_index,
    best_swim_inputs,
    swim_performances,
    consistency_streak,
    level_requirement,
    earned_xp,
    award_xp,
    BodyComposition,
    DailyModifier,
    HunterRank,
    HunterStat,
    ModifierKind,
    Readiness,
    StatCategory,
    SwimRecord,
    XPState,
    SWIM_EVENTS,
)
from tests.conftest import TARGET, make_history, make_record, make_workout


def readiness(**kwargs):
    values = dict(
        recovery=None, strain=None, sleep_hours=None, sleep_efficiency=None,
        hrv=None, resting_hr=None, vo2_max=None, steps=None,
    )
    values.update(kwargs)
    return Readiness(**values)


class TestRanks:
    @pytest.mark.parametrize("score,rank", [
        (0.0, HunterRank.E),
        (9.9, HunterRank.E),
        (10.0, HunterRank.D),
        (39.9, HunterRank.C),
        (55.0, HunterRank.A),
        (70.0, HunterRank.S),
        (90.0, HunterRank.S_PLUS),
        (100.0, HunterRank.S_PLUS),
    ])
    def test_rank_for(self, score, rank):
        assert rank_for(score) is rank

    def test_progress(self):
        assert progress_to_next_rank(17.5) == pytest.approx(0.5)
        assert progress_to_next_rank(95.0) == 1.0

    def test_hint(self):
        assert next_rank_hint(20.0) == "5.0 pts to reach C"
        assert next_rank_hint(92.0) is None

    def test_next_rank(self):
        assert HunterRank.S.next_rank is HunterRank.S_PLUS
        assert HunterRank.S_PLUS.next_rank is None


class TestNormalisation:
    def test_normalized(self):
        assert normalized(6.5, (4.0, 9.0)) == pytest.approx(50.0)
        assert normalized(12.0, (4.0, 9.0)) == 100.0
        assert normalized(None, (4.0, 9.0)) is None

    def test_inverse(self):
        assert inverse_normalized(8.0, (8.0, 30.0)) == pytest.approx(100.0)
        assert inverse_normalized(None, (8.0, 30.0)) is None


class TestSwimIndex:
    def test_world_record_is_100(self):
        assert swim_index(20.91, 20.91) == pytest.approx(100.0)

    def test_double_the_record(self):
        assert swim_index(41.82, 20.91) == pytest.approx(100.0 / 32)

    def test_clamped(self):
        assert swim_index(15.0, 20.91) == 100.0
        assert swim_index(500.0, 20.91) == 1.0
        assert swim_index(0.0, 20.91) == 1.0

    def test_best_per_event(self):
        records = [
            SwimRecord("100m_free", 70.0, date(2024, 1, 1)),
            SwimRecord("100m_free", 65.0, date(2024, 2, 1)),
            SwimRecord("999m_free", 10.0, date(2024, 2, 1)),
        ]
        best = best_swim_inputs(records)
        assert len(best) == 1
        assert best[0].time_s == 65.0

    def test_yards_distance(self):
        assert SWIM_EVENTS["100y_free"].distance_m == pytest.approx(91.44)


class TestSwimPerformances:
    def test_seeds_without_records(self):
        perfs = swim_performances([], TARGET)
        assert len(perfs) == 3
        for p in perfs:
            assert p.index == 35.0
            assert p.rank is HunterRank.C
            assert p.personal_record_s == pytest.approx(p.event.world_record_s * 1.6)
            assert p.recorded_on == TARGET - timedelta(days=30)

    def test_top_three_sorted(self):
        records = [
            SwimRecord("50m_free", 30.0, TARGET),
            SwimRecord("100m_free", 60.0, TARGET),
            SwimRecord("200m_free", 180.0, TARGET),
            SwimRecord("400m_free", 600.0, TARGET),
        ]
        perfs = swim_performances(records, TARGET)
        assert len(perfs) == 3
        indices = [p.index for p in perfs]
        assert indices == sorted(indices, reverse=True)
        assert "400m_free" not in [p.event.code for p in perfs]


class TestReadiness:
    def test_defaults_without_history(self):
        r = build_readiness([])
        assert r.recovery == 55.0
        assert r.steps == 7500.0
        assert all(v == 0.0 for v in r.trends.values())

    def test_missing_metrics_stay_missing(self):
        r = build_readiness([make_record(hrv=None, recovery=None)])
        assert r.hrv is None
        assert r.recovery is None

    def test_sleep_trend(self):
        sleep = [6.0] * 23 + [8.0] * 7
        newest_first = list(reversed(make_history(30, sleep_duration=sleep)))
        r = build_readiness(newest_first)
        assert r.trends[StatCategory.VITALITY] == pytest.approx(8.0 - (56 + 138) / 30)
        assert r.sleep_streak == 7

    def test_short_history_has_flat_trends(self):
        r = build_readiness(list(reversed(make_history(5))))
        assert r.trends[StatCategory.STRENGTH] == 0.0

    def test_daily_score(self):
        r = readiness(recovery=60.0, hrv=60.0, sleep_efficiency=90.0)
        assert r.daily_score == pytest.approx((60 + 50 + 90) / 3)


class TestModifiers:
    def test_buffs(self):
        mods = daily_modifiers(readiness(recovery=85.0, strain=17.0, sleep_streak=3))
        titles = [m.title for m in mods]
        assert titles == ["Recovery Surge", "Power Through", "Deep Sleep Streak", "Metabolic Reset"]

    def test_fatigue(self):
        mods = daily_modifiers(readiness(recovery=35.0))
        assert len(mods) == 1
        assert mods[0].kind is ModifierKind.PENALTY
        assert mods[0].target is StatCategory.ENDURANCE

    def test_absent_metrics_trigger_nothing(self):
        assert daily_modifiers(readiness()) == []

    def test_apply_clamps(self):
        scores = {StatCategory.ENDURANCE: 5.0, StatCategory.AGILITY: 97.0}
        mods = [
            DailyModifier("Fatigue", ModifierKind.PENALTY, StatCategory.ENDURANCE, -10.0),
            DailyModifier("Recovery Surge", ModifierKind.RECOVERY_BUFF, StatCategory.AGILITY, 8.0),
        ]
        adjusted = apply_modifiers(scores, mods)
        assert adjusted[StatCategory.ENDURANCE] == 0.0
        assert adjusted[StatCategory.AGILITY] == 100.0

    def test_awakened(self):
        assert is_awakened(readiness(recovery=92.0, hrv=75.0, sleep_hours=8.0))
        assert not is_awakened(readiness(recovery=92.0, hrv=None, sleep_hours=8.0))


class TestCategoryScores:
    def test_empty_inputs(self):
        scores = category_scores(readiness(), BodyComposition(), [])
        assert set(scores) == set(StatCategory)
        assert all(v == 0.0 for v in scores.values())

    def test_physique(self):
        body = BodyComposition(weight=80.0, body_fat_pct=19.0, bmi=23.0, muscle_mass=34.0)
        scores = category_scores(readiness(), body, [])
        # fat 50, bmi 50, muscle ratio 0.425 -> 50
        assert scores[StatCategory.PHYSIQUE] == pytest.approx(50.0)

    def test_swim_mastery_is_mean_index(self):
        swims = swim_performances([], TARGET)
        scores = category_scores(readiness(), BodyComposition(), swims)
        assert scores[StatCategory.SWIM_MASTERY] == pytest.approx(35.0)

    def test_bounds(self):
        r = readiness(recovery=100.0, strain=21.0, sleep_hours=12.0, sleep_efficiency=100.0,
                      hrv=200.0, resting_hr=30.0, vo2_max=80.0, steps=40000.0)
        body = BodyComposition(weight=70.0, body_fat_pct=2.0, muscle_mass=60.0, body_water_pct=80.0,
                               bmi=15.0, bmr=3000.0, metabolic_age=10.0, protein_pct=30.0)
        for score in category_scores(r, body, swim_performances([], TARGET)).values():
            assert 0.0 <= score <= 100.0


class TestXP:
    def test_level_curve(self):
        assert level_requirement(1) == 125
        assert level_requirement(4) == 200

    def test_fresh_state(self):
        state = XPState()
        assert state.level == 1
        assert state.xp_to_next_level == 125
        assert state.progress == 0.0

    def test_invalid_state(self):
        with pytest.raises(ValueError):
            XPState(level=0)

    def test_earned(self):
        assert earned_xp(50.0, 40.0, 20, True) == 10 + 10 + 15 + 25
        assert earned_xp(4.0, 3.0, 0, False) == 0

    def test_single_level_up(self):
        state = award_xp(XPState(), 130)
        assert (state.level, state.current_xp, state.xp_to_next_level) == (2, 5, 150)
        assert state.earned_today == 130

    def test_multi_level_rollover(self):
        state = award_xp(XPState(), 125 + 150 + 10)
        assert (state.level, state.current_xp, state.xp_to_next_level) == (3, 10, 175)

    def test_no_level_up(self):
        state = award_xp(XPState(level=3, current_xp=20, xp_to_next_level=175), 40)
        assert (state.level, state.current_xp) == (3, 60)


class TestSnapshot:
    def test_full_snapshot(self):
        history = make_history(10, steps=8000, sleep_duration=8.0, recovery=85.0)
        snap = hunter_snapshot(history)
        assert len(snap.stats) == 7
        assert snap.consistency_streak == 10
        assert snap.swim_mastery == pytest.approx(35.0)
        assert snap.swim_mastery_rank is HunterRank.C
        assert {m.title for m in snap.modifiers} >= {"Recovery Surge", "Deep Sleep Streak"}
        assert snap.xp.level >= 1
        assert snap.xp.earned_today > 0
        for stat in snap.stats:
            assert 0.0 <= stat.score <= 100.0
            assert stat.rank is rank_for(stat.score)

    def test_as_of_ignores_later_days(self):
        history = make_history(5, recovery=30.0, sleep_duration=6.0) + [make_record(TARGET, recovery=95.0)]
        snap = hunter_snapshot(history, as_of=TARGET - timedelta(days=1))
        assert [m.title for m in snap.modifiers] == ["Fatigue"]

    def test_xp_carries_over(self):
        prior = XPState(level=5, current_xp=170, xp_to_next_level=225)
        snap = hunter_snapshot(make_history(3), prior_xp=prior)
        assert snap.xp.level >= 5

    def test_pr_today_bonus(self):
        history = make_history(3)
        as_of = history[-1].date
        with_pr = hunter_snapshot(history, swim_records=[SwimRecord("100m_free", 60.0, as_of)])
        old_pr = hunter_snapshot(history, swim_records=[SwimRecord("100m_free", 60.0, as_of - timedelta(days=3))])
        assert with_pr.xp.earned_today == old_pr.xp.earned_today + 25

    def test_stat_lookup(self):
        snap = hunter_snapshot(make_history(3))
        assert snap.stat(StatCategory.VITALITY).category is StatCategory.VITALITY


class TestHelpers:
    def test_consistency_streak(self):
        newest_first = [
            make_record(TARGET, steps=7000),
            make_record(TARGET - timedelta(days=1), steps=2000, workouts=[make_workout()]),
            make_record(TARGET - timedelta(days=2), steps=1000),
            make_record(TARGET - timedelta(days=3), steps=9000),
        ]
        assert consistency_streak(newest_first) == 2

    def test_trend_direction(self):
        stat = HunterStat(StatCategory.VITALITY, 50.0, HunterRank.B, 1.5, None)
        assert stat.trend_direction == "up"
        assert HunterStat(StatCategory.VITALITY, 50.0, HunterRank.B, -0.5, None).trend_direction == "flat"
        assert "Vitality" in stat.explanation
