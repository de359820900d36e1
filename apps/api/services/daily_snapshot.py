"""
Daily Snapshot Composer

Narrates a single day's rollup in 3-6 sentences: a summary of what was
logged, a few observations, one gentle suggestion and a supportive closing
line. Same rule-table style as the trend insights, scoped to today's totals.

A day with nothing logged gets the neutral welcome snapshot instead of
zero-based observations.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import logging
import random

from services.daily_rollup import DailyRollup
from services.insight_rules import Rule, evaluate_all, first_match

logger = logging.getLogger(__name__)


# --- Single-day thresholds ---
WATER_LOW_TODAY_OZ = 40.0
WATER_HIGH_TODAY_OZ = 80.0
PROTEIN_SOLID_G = 60.0
FIBER_SOLID_G = 25.0
MOVEMENT_TODAY_MIN = 30.0
SLEEP_CHALLENGING_TODAY = 3.0
STRESS_HIGH_TODAY = 3.0
CRAVINGS_MANY_TODAY = 3
CRAVINGS_HYDRATION_TODAY = 2
WATER_CRAVINGS_TODAY_OZ = 50.0
MAX_SNAPSHOT_INSIGHTS = 3        # summary + 3 + suggestion + closing = 6 sentences


@dataclass
class DailySnapshot:
    summary_text: str
    insights: List[str] = field(default_factory=list)
    suggestion: str = ""
    supportive_line: str = ""

    def sentences(self) -> List[str]:
        return [s for s in [self.summary_text, *self.insights, self.suggestion, self.supportive_line] if s]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def welcome_snapshot() -> DailySnapshot:
    """Neutral snapshot for a day with nothing logged yet."""
    return DailySnapshot(
        summary_text="Welcome to today. Nothing is logged yet, and that's perfectly okay.",
        insights=[],
        suggestion="When you're ready, log a meal, a glass of water, or how you slept.",
        supportive_line="You're here, and that's a good place to start.",
    )


SUPPORTIVE_LINES = (
    "You're showing up for yourself. That's what matters.",
    "This is progress. You're noticing patterns.",
    "Keep going. You're learning what works for you.",
    "Every day of data helps you understand your body better.",
)


def _drank(r: DailyRollup) -> bool:
    return r.water_count > 0


def _low_water(r: DailyRollup, limit: float = WATER_LOW_TODAY_OZ) -> bool:
    return _drank(r) and r.water_total < limit


def _slept(r: DailyRollup) -> bool:
    return r.sleep_count > 0


def _stressed(r: DailyRollup) -> bool:
    return r.stress_count > 0 and r.stress_level_avg > STRESS_HIGH_TODAY


def _poor_sleep(r: DailyRollup) -> bool:
    return _slept(r) and r.sleep_quality_avg < SLEEP_CHALLENGING_TODAY


INSIGHT_RULES: List[Rule[DailyRollup]] = [
    Rule(
        "WATER_LOW_TODAY",
        _low_water,
        "You might be noticing you're drinking less water than usual today.",
    ),
    Rule(
        "WATER_HIGH_TODAY",
        lambda r: r.water_total > WATER_HIGH_TODAY_OZ,
        "You're staying well-hydrated today.",
    ),
    Rule(
        "SLEEP_CHALLENGING",
        _poor_sleep,
        "It looks like sleep was challenging. That can affect everything.",
    ),
    Rule(
        "STRESS_HIGH_TODAY",
        _stressed,
        "You logged higher stress today. Be gentle with yourself.",
    ),
    Rule(
        "MOVEMENT_TODAY",
        lambda r: r.movement_min_total > MOVEMENT_TODAY_MIN,
        lambda r: f"You moved for {r.movement_min_total:.0f} minutes today.",
    ),
    Rule(
        "PROTEIN_SOLID",
        lambda r: r.protein_total > PROTEIN_SOLID_G,
        "You're getting solid protein today.",
    ),
    Rule(
        "FIBER_SOLID",
        lambda r: r.fiber_total > FIBER_SOLID_G,
        "You're including plenty of fiber-rich foods.",
    ),
    Rule(
        "CRAVINGS_MANY",
        lambda r: r.cravings_count > CRAVINGS_MANY_TODAY,
        lambda r: f"You logged {r.cravings_count} cravings today. That's valuable data.",
    ),
]

SUGGESTION_RULES: List[Rule[DailyRollup]] = [
    Rule(
        "BREATHING",
        lambda r: _poor_sleep(r) and _stressed(r),
        "If you'd like, try a 5-minute breathing exercise before bed tonight.",
    ),
    Rule(
        "WATER_NEARBY",
        _low_water,
        "If it feels right, try keeping water nearby tomorrow. It might help.",
    ),
    Rule(
        "SHORT_WALK",
        lambda r: r.movement_count == 0,
        "If you're up for it, a short walk tomorrow might feel good.",
    ),
    Rule(
        "HYDRATION_CRAVINGS",
        lambda r: r.cravings_count > CRAVINGS_HYDRATION_TODAY and _low_water(r, WATER_CRAVINGS_TODAY_OZ),
        "Sometimes staying hydrated can help with cravings. Worth noticing.",
    ),
]

DEFAULT_SUGGESTION = "You're building awareness. That's the most important part."


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def summarize_day(rollup: DailyRollup) -> str:
    """One sentence listing what was logged today."""
    parts: List[str] = []
    if rollup.food_count:
        meals = _plural(rollup.food_count, "meal")
        if rollup.calories_max_total > 0:
            meals += f" (roughly {rollup.calories_min_total:,}-{rollup.calories_max_total:,} calories)"
        parts.append(meals)
    if rollup.water_count:
        parts.append(f"{rollup.water_total:.0f}oz of water")
    if rollup.movement_count:
        parts.append(f"{rollup.movement_min_total:.0f} minutes of movement")
    if rollup.cravings_count:
        parts.append(_plural(rollup.cravings_count, "craving"))
    if rollup.sleep_count:
        parts.append("how you slept")
    if rollup.stress_count:
        parts.append("your stress level")

    if len(parts) == 1:
        listed = parts[0]
    else:
        listed = ", ".join(parts[:-1]) + f" and {parts[-1]}"
    return f"Today you checked in with {listed}."


def compose_daily_snapshot(
    today_rollup: DailyRollup,
    rng: Optional[random.Random] = None,
) -> DailySnapshot:
    """
    Compose the same-day narrative for a rollup.

    Args:
        today_rollup: The day's DailyRollup
        rng: Source of randomness for the supportive line

    Returns:
        DailySnapshot; welcome_snapshot() when nothing was logged.
    """
    if not today_rollup.has_data:
        logger.info(f"Snapshot {today_rollup.user_id} {today_rollup.date}: no data, welcome message")
        return welcome_snapshot()

    snapshot = DailySnapshot(
        summary_text=summarize_day(today_rollup),
        insights=evaluate_all(INSIGHT_RULES, today_rollup, limit=MAX_SNAPSHOT_INSIGHTS),
        suggestion=first_match(SUGGESTION_RULES, today_rollup, DEFAULT_SUGGESTION),
        supportive_line=(rng or random).choice(SUPPORTIVE_LINES),
    )

    logger.info(
        f"Snapshot {today_rollup.user_id} {today_rollup.date}: "
        f"{len(snapshot.insights)} insights"
    )
    return snapshot
