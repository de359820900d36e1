"""
Tests for trend insights (patterns, influences, experiment, supportive line).
"""
import random
from datetime import timedelta

import pytest

from services.daily_rollup import empty_rollup
from services.insight_generator import (
    DEFAULT_INFLUENCE,
    DEFAULT_POLICY,
    MAINTENANCE_EXPERIMENT,
    SUPPORTIVE_LINES,
    InsightPolicy,
    InsightResult,
    experiment_rules,
    generate_insights,
    generate_insights_for_rollups,
    influence_rules,
    not_enough_data_result,
    pattern_rules,
)
from services.insight_rules import evaluate_all, fired_rule_ids
from services.rolling_stats import RollingStats, compute_rolling_stats
from tests.wellness_factories import DAY, rollup


def _week(**fields):
    return [rollup(DAY - timedelta(days=i), **fields) for i in range(7)]


def _stats(**avgs):
    return RollingStats(days=7, days_with_data=7, **avgs)


class TestScenarios:

    def test_low_water_week_mentions_low_hydration(self, rng):
        stats = compute_rolling_stats(_week(water_total=45), 7)
        result = generate_insights(stats, 7, rng=rng)

        assert any("water intake tends to be on the lower side" in p for p in result.patterns)
        assert "HYDRATION_LOW" in fired_rule_ids(pattern_rules(DEFAULT_POLICY), stats)

    def test_poor_sleep_high_stress_links_sleep_to_stress(self, rng):
        stats = compute_rolling_stats(_week(sleep_quality_avg=2.0, stress_level_avg=4.0), 7)
        result = generate_insights(stats, 7, rng=rng)

        assert "Lower sleep quality might be contributing to higher stress levels." in result.influences
        assert "SLEEP_STRESS" in fired_rule_ids(influence_rules(DEFAULT_POLICY), stats)

    def test_zero_data_returns_fixed_result(self, rng):
        rollups = [empty_rollup(DAY - timedelta(days=i)) for i in range(30)]
        result = generate_insights_for_rollups(rollups, 30, rng=rng)

        assert result == not_enough_data_result()

    def test_no_rollups_at_all(self):
        assert generate_insights_for_rollups([], 30) == not_enough_data_result()


class TestPatterns:

    @pytest.mark.parametrize("avgs,rule_id", [
        ({"avg_water": 85.0}, "HYDRATION_STRONG"),
        ({"avg_movement": 35.0}, "MOVEMENT_CONSISTENT"),
        ({"avg_movement": 10.0}, "MOVEMENT_MINIMAL"),
        ({"avg_sleep": 4.0}, "SLEEP_SOLID"),
        ({"avg_sleep": 2.0}, "SLEEP_LOW"),
        ({"avg_stress": 3.5}, "STRESS_ELEVATED"),
        ({"avg_cravings": 2.5}, "CRAVINGS_FREQUENT"),
    ])
    def test_single_threshold(self, avgs, rule_id):
        assert fired_rule_ids(pattern_rules(DEFAULT_POLICY), _stats(**avgs)) == [rule_id]

    def test_cravings_average_keeps_one_decimal(self):
        patterns = evaluate_all(pattern_rules(DEFAULT_POLICY), _stats(avg_cravings=2.4))
        assert patterns == ["You've been noticing cravings more frequently, about 2.4 a day."]

    def test_boundaries_do_not_fire(self):
        stats = _stats(avg_water=50.0, avg_movement=15.0, avg_sleep=2.5, avg_stress=3.0, avg_cravings=2.0)
        assert fired_rule_ids(pattern_rules(DEFAULT_POLICY), stats) == []

    def test_unlogged_metrics_are_skipped(self):
        # Only water logged: sleep/stress/movement averages are None, not 0
        stats = compute_rolling_stats(_week(water_total=70), 7)
        assert fired_rule_ids(pattern_rules(DEFAULT_POLICY), stats) == []

    def test_patterns_are_capped(self, rng):
        stats = _stats(avg_water=30.0, avg_movement=5.0, avg_sleep=2.0, avg_stress=4.5, avg_cravings=4.0)
        result = generate_insights(stats, 7, rng=rng)

        assert len(result.patterns) == DEFAULT_POLICY.max_patterns

    def test_window_length_is_named(self, rng):
        result = generate_insights(_stats(avg_water=40.0), 7, rng=rng)
        assert "past 7 days" in result.patterns[0]


class TestInfluences:

    def test_default_when_nothing_fires(self, rng):
        result = generate_insights(_stats(avg_water=70.0, avg_sleep=4.0), 7, rng=rng)
        assert result.influences == [DEFAULT_INFLUENCE]

    @pytest.mark.parametrize("avgs,rule_id", [
        ({"avg_sleep": 2.0, "avg_cravings": 3.0}, "SLEEP_CRAVINGS"),
        ({"avg_water": 40.0, "avg_stress": 4.0}, "WATER_STRESS"),
        ({"avg_movement": 5.0, "avg_stress": 4.0}, "MOVEMENT_STRESS"),
        ({"avg_stress": 4.0, "avg_cravings": 3.0}, "STRESS_CRAVINGS"),
        ({"avg_sleep": 2.0, "avg_movement": 5.0}, "SLEEP_MOVEMENT"),
    ])
    def test_pairs(self, avgs, rule_id):
        assert rule_id in fired_rule_ids(influence_rules(DEFAULT_POLICY), _stats(**avgs))

    def test_influences_never_empty(self, rng):
        for avgs in ({}, {"avg_water": 100.0}, {"avg_sleep": 5.0, "avg_stress": 1.0}):
            assert generate_insights(_stats(**avgs), 7, rng=rng).influences


class TestExperiment:

    def test_water_comes_first(self, rng):
        result = generate_insights(_stats(avg_water=40.0, avg_movement=5.0, avg_sleep=2.0), 7, rng=rng)
        assert "glass of water" in result.experiment

    def test_walk_when_water_is_fine(self, rng):
        result = generate_insights(_stats(avg_water=70.0, avg_movement=5.0, avg_sleep=2.0), 7, rng=rng)
        assert "10-minute walk" in result.experiment

    def test_wind_down_when_only_sleep_is_low(self, rng):
        result = generate_insights(_stats(avg_water=70.0, avg_movement=40.0, avg_sleep=2.0), 7, rng=rng)
        assert "winding down" in result.experiment

    def test_maintenance_otherwise(self, rng):
        result = generate_insights(_stats(avg_water=70.0, avg_movement=40.0, avg_sleep=4.0), 7, rng=rng)
        assert result.experiment == MAINTENANCE_EXPERIMENT

    def test_exactly_one_suggestion(self):
        stats = _stats(avg_water=40.0, avg_movement=5.0, avg_sleep=2.0)
        assert len(fired_rule_ids(experiment_rules(DEFAULT_POLICY), stats)) == 3
        assert isinstance(generate_insights(stats, 7).experiment, str)


class TestSupportiveLine:

    def test_drawn_from_pool(self):
        for seed in range(20):
            line = generate_insights(_stats(avg_water=70.0), 7, rng=random.Random(seed)).supportive_line
            assert line in SUPPORTIVE_LINES

    def test_seeded_rng_is_repeatable(self):
        stats = _stats(avg_water=70.0)
        a = generate_insights(stats, 7, rng=random.Random(3))
        b = generate_insights(stats, 7, rng=random.Random(3))
        assert a == b


class TestPolicy:

    def test_thresholds_are_configurable(self, rng):
        strict = InsightPolicy(water_low_oz=80.0)
        stats = _stats(avg_water=70.0)

        assert "HYDRATION_LOW" not in fired_rule_ids(pattern_rules(DEFAULT_POLICY), stats)
        assert "HYDRATION_LOW" in fired_rule_ids(pattern_rules(strict), stats)

    def test_result_round_trips_through_dict(self, rng):
        result = generate_insights(_stats(avg_water=40.0), 7, rng=rng)
        assert InsightResult.from_dict(result.to_dict()) == result
