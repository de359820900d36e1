"""
Event API Endpoints

Create, list and delete the six kinds of wellness events. Requests are
validated against the schema ranges here; the rollup/insight code downstream
trusts what the store hands it.
"""
import logging
from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from core.auth import get_current_user_id
from core.dependencies import check_date_range, get_event_store, get_today
from core.exceptions import EventNotFoundError
from models import (
    CravingEvent,
    EventKind,
    EventSet,
    FoodEvent,
    MovementEvent,
    SleepEvent,
    StressEvent,
    WaterEvent,
    kind_of,
)
from schemas import (
    CravingEventCreate,
    EventListResponse,
    EventResponse,
    FoodEventCreate,
    MovementEventCreate,
    SleepEventCreate,
    StressEventCreate,
    WaterEventCreate,
)
from services.day_window import get_local_tz
from services.event_store import EventStore
from services.wellness_narrative import load_window

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/events", tags=["events"])


def _localize(ts: Optional[datetime]) -> datetime:
    """Attach the local zone to naive timestamps; default to now."""
    tz = get_local_tz()
    if ts is None:
        return datetime.now(tz)
    if ts.tzinfo is None:
        return ts.replace(tzinfo=tz)
    return ts


def event_to_dict(event: Any) -> Dict[str, Any]:
    data = asdict(event)
    data["kind"] = kind_of(event).value
    if data.get("alternatives") is not None:
        data["alternatives"] = list(data["alternatives"])
    return data


def _store(store: EventStore, user_id: str, event: Any) -> Dict[str, Any]:
    stored = store.add(user_id, event)
    logger.info(f"Logged {kind_of(stored).value} event {stored.id} for {user_id}")
    return event_to_dict(stored)


@router.post("/food", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_food_event(
    payload: FoodEventCreate,
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
):
    fields = payload.model_dump(exclude={"timestamp"})
    return _store(store, user_id, FoodEvent(timestamp=_localize(payload.timestamp), **fields))


@router.post("/water", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_water_event(
    payload: WaterEventCreate,
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
):
    return _store(store, user_id, WaterEvent(timestamp=_localize(payload.timestamp), ounces=payload.ounces))


@router.post("/craving", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_craving_event(
    payload: CravingEventCreate,
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
):
    fields = payload.model_dump(exclude={"timestamp", "alternatives"})
    alternatives = tuple(payload.alternatives) if payload.alternatives is not None else None
    event = CravingEvent(timestamp=_localize(payload.timestamp), alternatives=alternatives, **fields)
    return _store(store, user_id, event)


@router.post("/movement", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_movement_event(
    payload: MovementEventCreate,
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
):
    fields = payload.model_dump(exclude={"timestamp"})
    return _store(store, user_id, MovementEvent(timestamp=_localize(payload.timestamp), **fields))


@router.post("/sleep", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_sleep_event(
    payload: SleepEventCreate,
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
):
    fields = payload.model_dump(exclude={"timestamp"})
    return _store(store, user_id, SleepEvent(timestamp=_localize(payload.timestamp), **fields))


@router.post("/stress", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_stress_event(
    payload: StressEventCreate,
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
):
    fields = payload.model_dump(exclude={"timestamp"})
    return _store(store, user_id, StressEvent(timestamp=_localize(payload.timestamp), **fields))


@router.get("", response_model=EventListResponse)
def list_events(
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
    today: date = Depends(get_today),
):
    """
    Events for [start, end] grouped by kind, oldest first.

    Both default to today.
    """
    end = end or today
    start = start or end
    check_date_range(start, end)

    events = load_window(store, user_id, start, end)
    return EventListResponse(
        start=start,
        end=end,
        **{kind.value: [event_to_dict(e) for e in events.for_kind(kind)] for kind in EventSet.kinds()},
    )


@router.delete("/{kind}/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    kind: EventKind,
    event_id: str,
    user_id: str = Depends(get_current_user_id),
    store: EventStore = Depends(get_event_store),
):
    if not store.delete(user_id, kind, event_id):
        raise EventNotFoundError(kind.value, event_id)
    logger.info(f"Deleted {kind.value} event {event_id} for {user_id}")
