"""
FastAPI dependency providers.

Routers take their collaborators through these so tests can swap them with
app.dependency_overrides (store, cache, estimator, clock).
"""
from datetime import date
from typing import Optional

from core.config import settings
from core.exceptions import DateRangeError
from services.day_window import local_today
from services.event_store import EventStore, InMemoryEventStore
from services.insight_cache import InsightCache, get_insight_cache
from services.text_estimator import TextEstimator, get_estimator

# Process-wide store (singleton); replace with a persistent EventStore in deployment
_event_store: Optional[InMemoryEventStore] = None
_estimator: Optional[TextEstimator] = None


def get_event_store() -> EventStore:
    global _event_store
    if _event_store is None:
        _event_store = InMemoryEventStore()
    return _event_store


def get_cache() -> InsightCache:
    return get_insight_cache()


def get_text_estimator() -> TextEstimator:
    global _estimator
    if _estimator is None:
        _estimator = get_estimator()
    return _estimator


def get_today() -> date:
    """The caller's local calendar date."""
    return local_today()


def check_date_range(start: date, end: date) -> None:
    """Reject end-before-start and ranges longer than MAX_RANGE_DAYS (422)."""
    if end < start:
        raise DateRangeError(start, end)
    if (end - start).days + 1 > settings.MAX_RANGE_DAYS:
        raise DateRangeError(start, end, max_days=settings.MAX_RANGE_DAYS)
