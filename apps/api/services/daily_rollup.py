"""
Daily Rollup Calculator

Reduces one day's events into a single DailyRollup: sums, counts, averages.

Rules:
    - Totals sum the matching field across the day's events; None counts as 0.
    - Averages are taken over events that carry a value for the field only.
      With no such events the average is 0 and the matching count is 0;
      callers check the count (or has_data) before displaying a 0 average.
    - Output is identical for any ordering of the input. Float sums use
      math.fsum, which is exactly rounded and therefore order-independent.

Pure function: no I/O, no collaborators.
"""

from dataclasses import asdict, dataclass
from datetime import date
from math import fsum
from typing import Any, Dict, Iterable, List, Optional

import logging

from models import EventSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyRollup:
    """Aggregate of one user's events for one local calendar day."""
    user_id: Optional[str]
    date: date

    calories_min_total: int = 0
    calories_max_total: int = 0
    protein_total: float = 0.0
    carbs_total: float = 0.0
    fat_total: float = 0.0
    fiber_total: float = 0.0
    sugar_total: float = 0.0
    water_total: float = 0.0
    movement_min_total: float = 0.0
    burn_min_total: float = 0.0
    burn_max_total: float = 0.0

    cravings_count: int = 0
    cravings_avg_intensity: float = 0.0
    sleep_quality_avg: float = 0.0
    hours_slept_avg: float = 0.0
    stress_level_avg: float = 0.0

    # Counts backing the "has data" checks
    food_count: int = 0
    water_count: int = 0
    movement_count: int = 0
    sleep_count: int = 0
    stress_count: int = 0
    craving_intensity_count: int = 0
    hours_slept_count: int = 0

    @property
    def has_data(self) -> bool:
        """True if at least one event of any kind contributed to this day."""
        return (
            self.food_count + self.water_count + self.movement_count
            + self.sleep_count + self.stress_count + self.cravings_count
        ) > 0

    @property
    def calories_mid_total(self) -> float:
        return (self.calories_min_total + self.calories_max_total) / 2

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        data["has_data"] = self.has_data
        return data


def _total(values: Iterable[Optional[float]]) -> float:
    return fsum(v for v in values if v is not None)


def _int_total(values: Iterable[Optional[int]]) -> int:
    return int(sum(v for v in values if v is not None))


def _mean(values: Iterable[Optional[float]]) -> tuple:
    """(mean, count) over non-None values; (0.0, 0) when there are none."""
    present = [v for v in values if v is not None]
    if not present:
        return 0.0, 0
    return fsum(present) / len(present), len(present)


def compute_daily_rollup(events: EventSet, day: date, user_id: Optional[str] = None) -> DailyRollup:
    """
    Compute the DailyRollup for one day's already-filtered events.

    Args:
        events: The day's events (see day_window.filter_events_for_day)
        day: The local calendar date the events belong to
        user_id: Owner of the events (carried through for keying)

    Returns:
        A fully populated DailyRollup. An empty EventSet yields the zero rollup.
    """
    food = events.food
    movement = events.movement

    craving_avg, craving_n = _mean(c.intensity for c in events.cravings)
    sleep_avg, sleep_n = _mean(s.sleep_quality for s in events.sleep)
    hours_avg, hours_n = _mean(s.hours_slept for s in events.sleep)
    stress_avg, stress_n = _mean(s.stress_level for s in events.stress)

    rollup = DailyRollup(
        user_id=user_id,
        date=day,
        calories_min_total=_int_total(f.calories_min for f in food),
        calories_max_total=_int_total(f.calories_max for f in food),
        protein_total=_total(f.protein_g for f in food),
        carbs_total=_total(f.carbs_g for f in food),
        fat_total=_total(f.fat_g for f in food),
        fiber_total=_total(f.fiber_g for f in food),
        sugar_total=_total(f.sugar_g for f in food),
        water_total=_total(w.ounces for w in events.water),
        movement_min_total=_total(m.duration_min for m in movement),
        burn_min_total=_total(m.estimated_burn_min for m in movement),
        burn_max_total=_total(m.estimated_burn_max for m in movement),
        cravings_count=len(events.cravings),
        cravings_avg_intensity=craving_avg,
        sleep_quality_avg=sleep_avg,
        hours_slept_avg=hours_avg,
        stress_level_avg=stress_avg,
        food_count=len(food),
        water_count=len(events.water),
        movement_count=len(movement),
        sleep_count=sleep_n,
        stress_count=stress_n,
        craving_intensity_count=craving_n,
        hours_slept_count=hours_n,
    )

    logger.debug(f"Rollup {user_id} {day}: {events.total_count()} events")
    return rollup


def empty_rollup(day: date, user_id: Optional[str] = None) -> DailyRollup:
    """The zero / no-data rollup for a day."""
    return DailyRollup(user_id=user_id, date=day)


def compute_daily_rollups(
    events_by_day: Dict[date, EventSet], user_id: Optional[str] = None,
) -> List[DailyRollup]:
    """One rollup per day, in date order."""
    return [
        compute_daily_rollup(day_events, day, user_id)
        for day, day_events in sorted(events_by_day.items())
    ]
