"""
Summary API Endpoints

Read-only views computed from the user's events:

    /v1/rollups/today       today's DailyRollup
    /v1/rollups/{day}       one day's DailyRollup
    /v1/rollups             one rollup per day in [start, end]
    /v1/trends              rolling stats + insights for the last N days
    /v1/insights/home       the cached once-a-day home insight
    /v1/snapshot/today      today's narrative snapshot
"""
import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query

from core.auth import get_current_user_id
from core.config import settings
from core.dependencies import check_date_range, get_cache, get_event_store, get_today
from schemas import (
    DailyRollupResponse,
    HomeInsightResponse,
    SnapshotResponse,
    TrendResponse,
)
from services.day_window import window_for_days
from services.event_store import EventStore
from services.insight_cache import InsightCache
from services.wellness_narrative import (
    build_daily_rollup,
    build_rollups,
    get_home_insight,
    get_today_snapshot,
    get_trend_insights,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["summaries"])

MIN_TREND_DAYS = 1
MAX_TREND_DAYS = 90
DEFAULT_TREND_DAYS = 7


@router.get("/rollups/today", response_model=DailyRollupResponse)
def get_today_rollup(
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
    today: date = Depends(get_today),
):
    return build_daily_rollup(store, user_id, today).to_dict()


@router.get("/rollups/{day}", response_model=DailyRollupResponse)
def get_day_rollup(
    day: date,
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
):
    return build_daily_rollup(store, user_id, day).to_dict()


@router.get("/rollups", response_model=List[DailyRollupResponse])
def get_rollups(
    start: date = Query(...),
    end: date = Query(...),
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
):
    """One rollup per day in [start, end], days without events included."""
    check_date_range(start, end)
    return [r.to_dict() for r in build_rollups(store, user_id, start, end)]


@router.get("/trends", response_model=TrendResponse)
def get_trends(
    days: int = Query(default=DEFAULT_TREND_DAYS, ge=MIN_TREND_DAYS, le=MAX_TREND_DAYS),
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
    today: date = Depends(get_today),
):
    stats, insights = get_trend_insights(store, user_id, days, today=today)
    start, end = window_for_days(days, today)
    return {
        "days": days,
        "start": start,
        "end": end,
        "stats": stats.to_dict(),
        "insights": insights.to_dict(),
    }


@router.get("/insights/home", response_model=HomeInsightResponse)
def get_home(
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
    cache: InsightCache = Depends(get_cache),
    today: date = Depends(get_today),
):
    """Insight over the last HOME_INSIGHT_DAYS days, computed at most once per day."""
    result, cached = get_home_insight(store, cache, user_id, today=today)
    return {
        **result.to_dict(),
        "date": today,
        "days": settings.HOME_INSIGHT_DAYS,
        "cached": cached,
    }


@router.get("/snapshot/today", response_model=SnapshotResponse)
def get_snapshot(
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
    today: date = Depends(get_today),
):
    rollup, snapshot = get_today_snapshot(store, user_id, today=today)
    return {
        "date": today,
        **snapshot.to_dict(),
        "rollup": rollup.to_dict(),
    }
