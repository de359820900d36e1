"""
Trend Insight Generator

Turns RollingStats for an N-day window into a short, supportive narrative:

    patterns         what the numbers show (ordered, capped)
    influences       pairs of metrics that co-occur (never empty)
    experiment       exactly one suggestion, first matching rule wins
    supportive_line  one closing line drawn from a fixed pool

These are fixed-threshold co-occurrence statements, not learned
correlations, and they make no causal claim.

Zero-data windows skip every threshold and return the fixed
not_enough_data_result().
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import logging
import random

from services.daily_rollup import DailyRollup
from services.insight_rules import Rule, above, below, evaluate_all, first_match
from services.rolling_stats import RollingStats, compute_rolling_stats

logger = logging.getLogger(__name__)


# --- Thresholds (policy defaults; override via InsightPolicy) ---
WATER_LOW_OZ = 50.0              # Daily average below this = hydration tends low
WATER_HIGH_OZ = 80.0             # Daily average above this = hydration strong
WATER_EXPERIMENT_OZ = 60.0       # Water experiment suggested below this
MOVEMENT_CONSISTENT_MIN = 30.0   # Minutes/day above this = consistent movement
MOVEMENT_MINIMAL_MIN = 15.0      # Minutes/day below this = minimal movement
MOVEMENT_EXPERIMENT_MIN = 20.0   # Walk experiment suggested below this
SLEEP_SOLID = 3.5                # Quality (1-5) above this = solid
SLEEP_LOW = 2.5                  # Quality (1-5) below this = lower than usual
SLEEP_INFLUENCE = 3.0            # Quality below this counts as low for influences
STRESS_ELEVATED = 3.0            # Level (1-5) above this = elevated
CRAVINGS_FREQUENT_PER_DAY = 2.0  # Cravings/day above this = more frequent
MAX_PATTERNS = 4


@dataclass(frozen=True)
class InsightPolicy:
    """Threshold policy for trend insights."""
    water_low_oz: float = WATER_LOW_OZ
    water_high_oz: float = WATER_HIGH_OZ
    water_experiment_oz: float = WATER_EXPERIMENT_OZ
    movement_consistent_min: float = MOVEMENT_CONSISTENT_MIN
    movement_minimal_min: float = MOVEMENT_MINIMAL_MIN
    movement_experiment_min: float = MOVEMENT_EXPERIMENT_MIN
    sleep_solid: float = SLEEP_SOLID
    sleep_low: float = SLEEP_LOW
    sleep_influence: float = SLEEP_INFLUENCE
    stress_elevated: float = STRESS_ELEVATED
    cravings_frequent_per_day: float = CRAVINGS_FREQUENT_PER_DAY
    max_patterns: int = MAX_PATTERNS


DEFAULT_POLICY = InsightPolicy()


@dataclass
class InsightResult:
    """Narrative produced for a rolling window."""
    patterns: List[str] = field(default_factory=list)
    influences: List[str] = field(default_factory=list)
    experiment: str = ""
    supportive_line: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InsightResult":
        return cls(
            patterns=list(data.get("patterns") or []),
            influences=list(data.get("influences") or []),
            experiment=data.get("experiment") or "",
            supportive_line=data.get("supportive_line") or "",
        )


DEFAULT_INFLUENCE = (
    "Your habits seem fairly balanced across different areas. "
    "Keep noticing what helps you feel your best."
)

MAINTENANCE_EXPERIMENT = (
    "Keep doing what you're doing, and notice which days feel best and what contributes to that."
)

SUPPORTIVE_LINES = (
    "Remember, wellness is about progress, not perfection.",
    "You're showing up for yourself, and that's what matters most.",
    "Every day is a new opportunity to learn about what works for you.",
    "Small, consistent changes add up to big shifts over time.",
    "Your body is always communicating with you. You're learning to listen.",
)


def not_enough_data_result() -> InsightResult:
    """The fixed result for a window with no logged days."""
    return InsightResult(
        patterns=["Not enough data yet to identify patterns."],
        influences=["Keep logging to see insights."],
        experiment="Try logging consistently for a week to start seeing patterns.",
        supportive_line="Every small step counts. You're doing great.",
    )


def pattern_rules(p: InsightPolicy) -> List[Rule[RollingStats]]:
    return [
        Rule(
            "HYDRATION_LOW",
            lambda s: below(s.avg_water, p.water_low_oz),
            lambda s: (
                f"Over the past {s.days} days, your water intake tends to be on the lower side "
                f"(about {s.avg_water:.0f}oz a day)."
            ),
        ),
        Rule(
            "HYDRATION_STRONG",
            lambda s: above(s.avg_water, p.water_high_oz),
            lambda s: f"Hydration has been strong, around {s.avg_water:.0f}oz a day.",
        ),
        Rule(
            "MOVEMENT_CONSISTENT",
            lambda s: above(s.avg_movement, p.movement_consistent_min),
            lambda s: (
                f"You're consistently making time for movement, about {s.avg_movement:.0f} minutes "
                f"on the days you moved."
            ),
        ),
        Rule(
            "MOVEMENT_MINIMAL",
            lambda s: below(s.avg_movement, p.movement_minimal_min),
            "Movement has been minimal lately. That's okay, rest matters too.",
        ),
        Rule(
            "SLEEP_SOLID",
            lambda s: above(s.avg_sleep, p.sleep_solid),
            "Your sleep quality seems pretty solid overall.",
        ),
        Rule(
            "SLEEP_LOW",
            lambda s: below(s.avg_sleep, p.sleep_low),
            "Sleep quality has been lower than usual.",
        ),
        Rule(
            "STRESS_ELEVATED",
            lambda s: above(s.avg_stress, p.stress_elevated),
            "Stress levels have been elevated recently.",
        ),
        Rule(
            "CRAVINGS_FREQUENT",
            lambda s: above(s.avg_cravings, p.cravings_frequent_per_day),
            lambda s: (
                f"You've been noticing cravings more frequently, about {s.avg_cravings:.1f} a day."
            ),
        ),
    ]


def influence_rules(p: InsightPolicy) -> List[Rule[RollingStats]]:
    low_sleep = lambda s: below(s.avg_sleep, p.sleep_influence)  # noqa: E731
    high_stress = lambda s: above(s.avg_stress, p.stress_elevated)  # noqa: E731
    frequent_cravings = lambda s: above(s.avg_cravings, p.cravings_frequent_per_day)  # noqa: E731
    low_water = lambda s: below(s.avg_water, p.water_low_oz)  # noqa: E731
    low_movement = lambda s: below(s.avg_movement, p.movement_minimal_min)  # noqa: E731

    return [
        Rule(
            "SLEEP_STRESS",
            lambda s: low_sleep(s) and high_stress(s),
            "Lower sleep quality might be contributing to higher stress levels.",
        ),
        Rule(
            "SLEEP_CRAVINGS",
            lambda s: low_sleep(s) and frequent_cravings(s),
            "Less restful sleep could be influencing more frequent cravings.",
        ),
        Rule(
            "WATER_STRESS",
            lambda s: low_water(s) and high_stress(s),
            "Lower hydration and higher stress have been showing up together.",
        ),
        Rule(
            "MOVEMENT_STRESS",
            lambda s: low_movement(s) and high_stress(s),
            "Lighter movement has coincided with higher stress. Regular movement can help manage stress.",
        ),
        Rule(
            "STRESS_CRAVINGS",
            lambda s: high_stress(s) and frequent_cravings(s),
            "Higher stress days often align with more cravings. That's a common pattern.",
        ),
        Rule(
            "SLEEP_MOVEMENT",
            lambda s: low_sleep(s) and low_movement(s),
            "Sleep challenges may be affecting your energy for movement.",
        ),
    ]


def experiment_rules(p: InsightPolicy) -> List[Rule[RollingStats]]:
    return [
        Rule(
            "EXPERIMENT_WATER",
            lambda s: below(s.avg_water, p.water_experiment_oz),
            "Try adding one extra glass of water in the morning and notice how you feel.",
        ),
        Rule(
            "EXPERIMENT_WALK",
            lambda s: below(s.avg_movement, p.movement_experiment_min),
            "Try a 10-minute walk after one meal and see how it affects your energy.",
        ),
        Rule(
            "EXPERIMENT_WIND_DOWN",
            lambda s: below(s.avg_sleep, p.sleep_influence),
            "Consider winding down 15 minutes earlier before bed and track your sleep quality.",
        ),
    ]


def pick_supportive_line(rng: Optional[random.Random] = None, pool: Sequence[str] = SUPPORTIVE_LINES) -> str:
    """One line from the pool. Pass a seeded random.Random for repeatable picks."""
    return (rng or random).choice(pool)


def generate_insights(
    rolling_stats: RollingStats,
    days: int,
    policy: InsightPolicy = DEFAULT_POLICY,
    rng: Optional[random.Random] = None,
) -> InsightResult:
    """
    Apply the pattern, influence and experiment tables to rolling stats.

    Args:
        rolling_stats: Output of compute_rolling_stats for the window
        days: Window length
        policy: Threshold policy
        rng: Source of randomness for the supportive line

    Returns:
        InsightResult. Influences always has at least one entry.
    """
    if rolling_stats.insufficient_data:
        logger.info(f"Insights ({days}d): no logged days, returning not-enough-data result")
        return not_enough_data_result()

    patterns = evaluate_all(pattern_rules(policy), rolling_stats, limit=policy.max_patterns)
    influences = evaluate_all(influence_rules(policy), rolling_stats) or [DEFAULT_INFLUENCE]
    experiment = first_match(experiment_rules(policy), rolling_stats, MAINTENANCE_EXPERIMENT)

    result = InsightResult(
        patterns=patterns,
        influences=influences,
        experiment=experiment,
        supportive_line=pick_supportive_line(rng),
    )

    logger.info(
        f"Insights ({days}d): {rolling_stats.days_with_data} logged days, "
        f"{len(patterns)} patterns, {len(influences)} influences"
    )
    return result


def generate_insights_for_rollups(
    daily_rollups: Sequence[DailyRollup],
    days: int,
    policy: InsightPolicy = DEFAULT_POLICY,
    rng: Optional[random.Random] = None,
) -> InsightResult:
    """Convenience: rolling stats + insights in one call."""
    if not daily_rollups:
        return not_enough_data_result()
    return generate_insights(compute_rolling_stats(daily_rollups, days), days, policy, rng)
