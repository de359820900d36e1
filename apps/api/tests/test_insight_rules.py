"""
Tests for ordered rule tables (traversal only, no thresholds).
"""
from services.insight_rules import Rule, above, below, evaluate_all, fired_rule_ids, first_match


RULES = [
    Rule("BIG", lambda n: n > 100, "big"),
    Rule("EVEN", lambda n: n % 2 == 0, lambda n: f"{n} is even"),
    Rule("POSITIVE", lambda n: n > 0, "positive"),
]


class TestEvaluateAll:

    def test_collects_every_firing_rule_in_order(self):
        assert evaluate_all(RULES, 102) == ["big", "102 is even", "positive"]

    def test_nothing_fires(self):
        assert evaluate_all(RULES, -3) == []

    def test_limit(self):
        assert evaluate_all(RULES, 102, limit=2) == ["big", "102 is even"]

    def test_fired_ids(self):
        assert fired_rule_ids(RULES, 7) == ["POSITIVE"]


class TestFirstMatch:

    def test_first_firing_rule_wins(self):
        assert first_match(RULES, 102, "default") == "big"
        assert first_match(RULES, 4, "default") == "4 is even"

    def test_default_when_nothing_fires(self):
        assert first_match(RULES, -3, "default") == "default"

    def test_callable_default(self):
        assert first_match(RULES, -3, lambda n: f"nothing for {n}") == "nothing for -3"


class TestThresholdHelpers:

    def test_none_never_matches(self):
        assert not below(None, 50)
        assert not above(None, 50)

    def test_strict_comparisons(self):
        assert below(49.9, 50)
        assert not below(50, 50)
        assert above(50.1, 50)
        assert not above(50, 50)
