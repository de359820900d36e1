"""
Rolling Window Analyzer

Computes N-day (7/30/90) statistics over a sequence of DailyRollup records.

Each metric is averaged only over the days that logged it: a day with no
sleep entries does not pull the sleep average toward 0. Craving frequency is
the exception: it is a per-day count, so every day with any logging counts
toward its denominator (a logged day without cravings is a real zero).

A window with no logged days at all is flagged insufficient_data; callers
branch on that instead of reading all-zero stats as a signal.
"""

from dataclasses import asdict, dataclass, field
from math import fsum
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

import logging

from services.daily_rollup import DailyRollup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RollingStats:
    """Per-metric means across the days in a window that have data."""
    days: int
    days_with_data: int = 0

    avg_calories_min: Optional[float] = None
    avg_calories_max: Optional[float] = None
    avg_calories: Optional[float] = None       # midpoint of the daily range
    avg_protein: Optional[float] = None
    avg_carbs: Optional[float] = None
    avg_fat: Optional[float] = None
    avg_fiber: Optional[float] = None
    avg_sugar: Optional[float] = None
    avg_water: Optional[float] = None
    avg_movement: Optional[float] = None
    avg_burn_min: Optional[float] = None
    avg_burn_max: Optional[float] = None
    avg_cravings: Optional[float] = None       # cravings per logged day
    avg_craving_intensity: Optional[float] = None
    avg_sleep: Optional[float] = None
    avg_hours_slept: Optional[float] = None
    avg_stress: Optional[float] = None

    total_water: float = 0.0
    total_movement: float = 0.0
    total_cravings: int = 0

    # Number of days that contributed to each average
    metric_days: Dict[str, int] = field(default_factory=dict)

    @property
    def insufficient_data(self) -> bool:
        return self.days_with_data == 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["insufficient_data"] = self.insufficient_data
        return data


# metric -> (value getter, "day has data for this metric" predicate)
_METRICS: Dict[str, Tuple[Callable[[DailyRollup], float], Callable[[DailyRollup], bool]]] = {
    "avg_calories_min": (lambda r: r.calories_min_total, lambda r: r.food_count > 0),
    "avg_calories_max": (lambda r: r.calories_max_total, lambda r: r.food_count > 0),
    "avg_calories": (lambda r: r.calories_mid_total, lambda r: r.food_count > 0),
    "avg_protein": (lambda r: r.protein_total, lambda r: r.food_count > 0),
    "avg_carbs": (lambda r: r.carbs_total, lambda r: r.food_count > 0),
    "avg_fat": (lambda r: r.fat_total, lambda r: r.food_count > 0),
    "avg_fiber": (lambda r: r.fiber_total, lambda r: r.food_count > 0),
    "avg_sugar": (lambda r: r.sugar_total, lambda r: r.food_count > 0),
    "avg_water": (lambda r: r.water_total, lambda r: r.water_count > 0),
    "avg_movement": (lambda r: r.movement_min_total, lambda r: r.movement_count > 0),
    "avg_burn_min": (lambda r: r.burn_min_total, lambda r: r.movement_count > 0),
    "avg_burn_max": (lambda r: r.burn_max_total, lambda r: r.movement_count > 0),
    "avg_cravings": (lambda r: r.cravings_count, lambda r: r.has_data),
    "avg_craving_intensity": (lambda r: r.cravings_avg_intensity, lambda r: r.craving_intensity_count > 0),
    "avg_sleep": (lambda r: r.sleep_quality_avg, lambda r: r.sleep_count > 0),
    "avg_hours_slept": (lambda r: r.hours_slept_avg, lambda r: r.hours_slept_count > 0),
    "avg_stress": (lambda r: r.stress_level_avg, lambda r: r.stress_count > 0),
}


def _mean_over(
    rollups: Sequence[DailyRollup],
    value: Callable[[DailyRollup], float],
    has_data: Callable[[DailyRollup], bool],
) -> tuple:
    values = [value(r) for r in rollups if has_data(r)]
    if not values:
        return None, 0
    return fsum(values) / len(values), len(values)


def compute_rolling_stats(daily_rollups: Sequence[DailyRollup], days: int) -> RollingStats:
    """
    Compute RollingStats over the rollups of an N-day window.

    Args:
        daily_rollups: One rollup per day of [today - days + 1, today]
        days: Window length (used for labelling; averages use days with data)

    Returns:
        RollingStats; insufficient_data is True when no day has any data.
    """
    logged = [r for r in daily_rollups if r.has_data]
    if not logged:
        logger.debug(f"Rolling stats ({days}d): no logged days")
        return RollingStats(days=days)

    averages: Dict[str, Optional[float]] = {}
    metric_days: Dict[str, int] = {}
    for name, (value, has_data) in _METRICS.items():
        averages[name], metric_days[name] = _mean_over(logged, value, has_data)

    stats = RollingStats(
        days=days,
        days_with_data=len(logged),
        total_water=fsum(r.water_total for r in logged),
        total_movement=fsum(r.movement_min_total for r in logged),
        total_cravings=sum(r.cravings_count for r in logged),
        metric_days=metric_days,
        **averages,
    )

    logger.debug(
        f"Rolling stats ({days}d): {stats.days_with_data} logged days, "
        f"water={stats.avg_water}, sleep={stats.avg_sleep}, stress={stats.avg_stress}"
    )
    return stats
