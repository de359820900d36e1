"""
Event store seam.

Persistence of individual event records lives outside the insight engine;
the engine only needs per-user, per-kind listing over a datetime range and
delete by id. EventStore is that interface. InMemoryEventStore is the
reference implementation the API process uses by default.
"""

import logging
import threading
from collections import defaultdict
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol
from uuid import uuid4

from models import EventKind, EventSet, kind_of

logger = logging.getLogger(__name__)


class EventStore(Protocol):
    def add(self, user_id: str, event: Any) -> Any:
        ...

    def list(
        self,
        user_id: str,
        kind: EventKind,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Any]:
        ...

    def delete(self, user_id: str, kind: EventKind, event_id: str) -> bool:
        ...


def _in_range(ts: datetime, start: Optional[datetime], end: Optional[datetime]) -> bool:
    if start is not None and ts < start:
        return False
    if end is not None and ts > end:
        return False
    return True


class InMemoryEventStore:
    """
    Thread-safe in-process store.

    Timestamps are expected to be timezone-aware so range comparisons are
    unambiguous; the HTTP schemas attach the local zone to naive input.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._events: Dict[str, Dict[EventKind, List[Any]]] = defaultdict(lambda: defaultdict(list))

    def add(self, user_id: str, event: Any) -> Any:
        kind = kind_of(event)
        stored = replace(event, id=event.id or str(uuid4()), user_id=user_id)
        with self._lock:
            bucket = self._events[user_id][kind]
            bucket.append(stored)
            bucket.sort(key=lambda e: e.timestamp)
        logger.debug(f"Stored {kind.value} event {stored.id} for {user_id}")
        return stored

    def list(
        self,
        user_id: str,
        kind: EventKind,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Any]:
        kind = EventKind(kind)
        with self._lock:
            events = list(self._events.get(user_id, {}).get(kind, ()))
        return [e for e in events if _in_range(e.timestamp, start, end)]

    def delete(self, user_id: str, kind: EventKind, event_id: str) -> bool:
        kind = EventKind(kind)
        with self._lock:
            bucket = self._events.get(user_id, {}).get(kind)
            if not bucket:
                return False
            for i, e in enumerate(bucket):
                if e.id == event_id:
                    del bucket[i]
                    logger.debug(f"Deleted {kind.value} event {event_id} for {user_id}")
                    return True
        return False


def load_event_set(
    store: EventStore,
    user_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> EventSet:
    """All six kinds for a user within [start, end] as one EventSet."""
    events = EventSet()
    for kind in EventSet.kinds():
        events.for_kind(kind).extend(store.list(user_id, kind, start, end))
    return events
