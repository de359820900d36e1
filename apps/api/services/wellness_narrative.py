"""
Wellness Narrative

Glue between the event store and the pure rollup/insight code:

    build_daily_rollup   one day        -> DailyRollup
    build_rollups        date range     -> [DailyRollup] (one per day)
    get_trend_insights   N-day window   -> (RollingStats, InsightResult)
    get_home_insight     home screen    -> InsightResult, cached per day
    get_today_snapshot   today          -> (DailyRollup, DailySnapshot)

Events are loaded from the store once per call for the whole range and
bucketed per local day in a single pass. Everything after the load is pure.
"""

import logging
import random
from datetime import date, datetime, timedelta, tzinfo
from typing import List, Optional, Tuple

from core.config import settings
from models import EventSet
from services.daily_rollup import DailyRollup, compute_daily_rollup, compute_daily_rollups
from services.daily_snapshot import DailySnapshot, compose_daily_snapshot
from services.day_window import (
    filter_events_for_range,
    get_local_tz,
    local_today,
    range_bounds,
    split_events_by_day,
    window_for_days,
)
from services.event_store import EventStore, load_event_set
from services.insight_cache import InsightCache
from services.insight_generator import DEFAULT_POLICY, InsightPolicy, InsightResult, generate_insights
from services.rolling_stats import RollingStats, compute_rolling_stats

logger = logging.getLogger(__name__)


def _query_bounds(start: date, end: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    # Through 23:59:59.999999; the day filter makes the millisecond cut.
    lo, hi = range_bounds(start, end, tz)
    return lo, hi + timedelta(microseconds=999)


def load_window(
    store: EventStore, user_id: str, start: date, end: date, tz: Optional[tzinfo] = None,
) -> EventSet:
    """Events whose local timestamp falls on a day in [start, end]."""
    tz = tz or get_local_tz()
    events = load_event_set(store, user_id, *_query_bounds(start, end, tz))
    return filter_events_for_range(events, start, end, tz)


def build_daily_rollup(
    store: EventStore, user_id: str, day: date, tz: Optional[tzinfo] = None,
) -> DailyRollup:
    return compute_daily_rollup(load_window(store, user_id, day, day, tz), day, user_id)


def build_rollups(
    store: EventStore, user_id: str, start: date, end: date, tz: Optional[tzinfo] = None,
) -> List[DailyRollup]:
    """One rollup per day in [start, end]; empty when end < start."""
    if end < start:
        return []
    tz = tz or get_local_tz()
    events = load_event_set(store, user_id, *_query_bounds(start, end, tz))
    return compute_daily_rollups(split_events_by_day(events, start, end, tz), user_id)


def get_trend_insights(
    store: EventStore,
    user_id: str,
    days: int,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
    policy: InsightPolicy = DEFAULT_POLICY,
    tz: Optional[tzinfo] = None,
) -> Tuple[RollingStats, InsightResult]:
    """Rolling stats and insights for [today - days + 1, today]."""
    tz = tz or get_local_tz()
    today = today or local_today(tz)
    start, end = window_for_days(days, today)

    rollups = build_rollups(store, user_id, start, end, tz)
    stats = compute_rolling_stats(rollups, days)
    insights = generate_insights(stats, days, policy, rng)

    logger.info(
        f"Trend insights for {user_id} ({days}d ending {today}): "
        f"{stats.days_with_data} logged days"
    )
    return stats, insights


def get_home_insight(
    store: EventStore,
    cache: InsightCache,
    user_id: str,
    days: Optional[int] = None,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
    policy: InsightPolicy = DEFAULT_POLICY,
    tz: Optional[tzinfo] = None,
) -> Tuple[InsightResult, bool]:
    """
    The once-a-day home screen insight.

    Returns (result, cached). A cache hit is returned as stored; a miss is
    computed over the last HOME_INSIGHT_DAYS days and written back with an
    end-of-day TTL, pruning the user's earlier days.
    """
    tz = tz or get_local_tz()
    today = today or local_today(tz)
    days = days or settings.HOME_INSIGHT_DAYS
    key = cache.key_for(user_id, today)

    cached = cache.get(key)
    if cached is not None:
        logger.debug(f"Home insight cache hit {key}")
        return InsightResult.from_dict(cached), True

    _, result = get_trend_insights(store, user_id, days, today, rng, policy, tz)
    cache.put(key, result.to_dict(), tz=tz)
    return result, False


def get_today_snapshot(
    store: EventStore,
    user_id: str,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
    tz: Optional[tzinfo] = None,
) -> Tuple[DailyRollup, DailySnapshot]:
    tz = tz or get_local_tz()
    today = today or local_today(tz)
    rollup = build_daily_rollup(store, user_id, today, tz)
    return rollup, compose_daily_snapshot(rollup, rng)
