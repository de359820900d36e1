"""
Day Window Filter

Selects, from an EventSet, the events whose timestamp falls on a given local
calendar day (or inclusive range of days).

A day spans [00:00:00.000, 23:59:59.999] local time, inclusive at both ends.
Timestamps are compared at millisecond precision, so an event logged at
23:59:59.999 belongs to that day and never to the next one.

"Today" is always derived from the local clock, not UTC, so entries logged
near midnight are bucketed on the day the user experienced them.
"""

from collections import OrderedDict
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterator, Optional, Tuple
from zoneinfo import ZoneInfo

import logging

from core.config import settings
from models import EventSet

logger = logging.getLogger(__name__)

START_OF_DAY = time(0, 0, 0, 0)
END_OF_DAY = time(23, 59, 59, 999000)


def get_local_tz() -> tzinfo:
    """Configured local zone, or the host's local zone when unset."""
    if settings.LOCAL_TIMEZONE:
        return ZoneInfo(settings.LOCAL_TIMEZONE)
    return datetime.now().astimezone().tzinfo


def local_now(tz: Optional[tzinfo] = None) -> datetime:
    return datetime.now(tz or get_local_tz())


def local_today(tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> date:
    """
    The caller's current local calendar date.

    `now` may be supplied (tests, replay); aware values are converted to the
    local zone first, naive values are taken as local wall-clock time.
    """
    tz = tz or get_local_tz()
    if now is None:
        return datetime.now(tz).date()
    return to_local(now, tz).date()


def to_local(ts: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Naive local wall-clock time for a timestamp."""
    if ts.tzinfo is not None:
        ts = ts.astimezone(tz or get_local_tz())
    return ts.replace(tzinfo=None)


def _truncate_ms(ts: datetime) -> datetime:
    return ts.replace(microsecond=(ts.microsecond // 1000) * 1000)


def day_bounds(day: date, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    """
    Aware (start, end) datetimes of a local day, both inclusive.

    Used to query the event store for a day or range.
    """
    tz = tz or get_local_tz()
    return (
        datetime.combine(day, START_OF_DAY, tzinfo=tz),
        datetime.combine(day, END_OF_DAY, tzinfo=tz),
    )


def range_bounds(start: date, end: date, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    """Aware inclusive bounds from the start of `start` to the end of `end`."""
    return day_bounds(start, tz)[0], day_bounds(end, tz)[1]


def in_window(ts: datetime, start: date, end: date, tz: Optional[tzinfo] = None) -> bool:
    """True if ts, in local time, falls within [start 00:00:00.000, end 23:59:59.999]."""
    local = _truncate_ms(to_local(ts, tz))
    return (
        datetime.combine(start, START_OF_DAY) <= local <= datetime.combine(end, END_OF_DAY)
    )


def iter_days(start: date, end: date) -> Iterator[date]:
    """Each calendar date from start to end inclusive. Empty if end < start."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def window_for_days(days: int, today: date) -> Tuple[date, date]:
    """The N-day window ending today: [today - days + 1, today]."""
    return today - timedelta(days=max(days, 1) - 1), today


def filter_events_for_day(events: EventSet, day: date, tz: Optional[tzinfo] = None) -> EventSet:
    """Events whose local timestamp falls on `day`."""
    return filter_events_for_range(events, day, day, tz)


def filter_events_for_range(
    events: EventSet, start: date, end: date, tz: Optional[tzinfo] = None,
) -> EventSet:
    """Events whose local timestamp falls on any day in [start, end]."""
    tz = tz or get_local_tz()
    return events.filter(lambda e: in_window(e.timestamp, start, end, tz))


def split_events_by_day(
    events: EventSet, start: date, end: date, tz: Optional[tzinfo] = None,
) -> "OrderedDict[date, EventSet]":
    """
    Bucket events into one EventSet per day in [start, end].

    Every day in the range gets an entry, including days without events.
    Single pass over the input; events outside the range are dropped.
    """
    tz = tz or get_local_tz()
    buckets: "OrderedDict[date, EventSet]" = OrderedDict(
        (day, EventSet()) for day in iter_days(start, end)
    )
    if not buckets:
        return buckets

    dropped = 0
    for event in events.all_events():
        local_day = _truncate_ms(to_local(event.timestamp, tz)).date()
        bucket: Optional[EventSet] = buckets.get(local_day)
        if bucket is None:
            dropped += 1
            continue
        bucket.add(event)

    if dropped:
        logger.debug(f"split_events_by_day: {dropped} events outside {start}..{end}")
    return buckets
