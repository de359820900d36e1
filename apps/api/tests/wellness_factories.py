"""
Event and rollup factories plus an in-memory Redis double for the tests.
"""
from datetime import date, datetime, time
from typing import Optional
from zoneinfo import ZoneInfo

from models import (
    CravingEvent,
    EventSet,
    FoodEvent,
    MovementEvent,
    SleepEvent,
    StressEvent,
    WaterEvent,
)
from services.daily_rollup import DailyRollup

TZ = ZoneInfo("America/Denver")
DAY = date(2026, 6, 15)


def at(day: date = DAY, hour: int = 12, minute: int = 0, second: int = 0,
       microsecond: int = 0, tz: Optional[ZoneInfo] = None) -> datetime:
    """Timestamp on `day`; naive (local wall clock) unless tz is given."""
    return datetime.combine(day, time(hour, minute, second, microsecond), tzinfo=tz)


def food(ts=None, text="burrito bowl", **kw) -> FoodEvent:
    return FoodEvent(timestamp=ts or at(), text=text, **kw)


def water(ounces: float, ts=None) -> WaterEvent:
    return WaterEvent(timestamp=ts or at(), ounces=ounces)


def craving(ts=None, text="something sweet", intensity: Optional[int] = 3, **kw) -> CravingEvent:
    return CravingEvent(timestamp=ts or at(), text=text, intensity=intensity, **kw)


def movement(duration_min: Optional[float], ts=None, activity_type="walk", **kw) -> MovementEvent:
    return MovementEvent(timestamp=ts or at(), activity_type=activity_type, duration_min=duration_min, **kw)


def sleep(quality: int, ts=None, hours: Optional[float] = None) -> SleepEvent:
    return SleepEvent(timestamp=ts or at(hour=7), sleep_quality=quality, hours_slept=hours)


def stress(level: int, ts=None) -> StressEvent:
    return StressEvent(timestamp=ts or at(hour=18), stress_level=level)


def event_set(*events) -> EventSet:
    es = EventSet()
    for e in events:
        es.add(e)
    return es


def rollup(day: date = DAY, **kw) -> DailyRollup:
    """A DailyRollup with only the given fields set; counts implied by the values."""
    counts = {}
    if any(k in kw for k in ("calories_min_total", "calories_max_total", "protein_total", "fiber_total")):
        counts["food_count"] = 1
    if "water_total" in kw:
        counts["water_count"] = 1
    if "movement_min_total" in kw:
        counts["movement_count"] = 1
    if "sleep_quality_avg" in kw:
        counts["sleep_count"] = 1
    if "stress_level_avg" in kw:
        counts["stress_count"] = 1
    counts.update({k: v for k, v in kw.items() if k.endswith("_count")})
    values = {k: v for k, v in kw.items() if not k.endswith("_count")}
    return DailyRollup(user_id="u1", date=day, **values, **counts)


class FakeRedis:
    """Minimal in-memory Redis mock for unit tests."""

    def __init__(self):
        self._store: dict = {}
        self._ttls: dict = {}

    def get(self, key):
        value = self._store.get(key)
        return value if isinstance(value, str) else None

    def setex(self, key, ttl, value):
        self._store[key] = value
        self._ttls[key] = ttl

    def delete(self, *keys):
        for k in keys:
            self._store.pop(k, None)
            self._ttls.pop(k, None)

    def exists(self, key):
        return key in self._store

    def expire(self, key, ttl):
        self._ttls[key] = ttl

    def sadd(self, key, *members):
        s = self._store.setdefault(key, set())
        before = len(s)
        s.update(members)
        return len(s) - before

    def smembers(self, key):
        return set(self._store.get(key, set()))

    def srem(self, key, *members):
        s = self._store.get(key, set())
        removed = len(s & set(members))
        s.difference_update(members)
        return removed

    def ping(self):
        return True


class BrokenRedis(FakeRedis):
    """Every command fails like a dropped connection."""

    def _fail(self, *args, **kwargs):
        from redis.exceptions import ConnectionError
        raise ConnectionError("connection refused")

    get = setex = delete = sadd = smembers = srem = expire = _fail
