"""
Tests for the day window filter.

A local day is [00:00:00.000, 23:59:59.999], inclusive at both ends, and
"today" comes from the local clock rather than UTC.
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from services.day_window import (
    END_OF_DAY,
    day_bounds,
    filter_events_for_day,
    filter_events_for_range,
    in_window,
    iter_days,
    local_today,
    split_events_by_day,
    window_for_days,
)
from tests.wellness_factories import DAY, TZ, at, event_set, sleep, stress, water


NEXT_DAY = DAY + timedelta(days=1)


class TestDayBoundary:
    """Events right at midnight"""

    def test_last_millisecond_belongs_to_the_day(self):
        ts = at(DAY, 23, 59, 59, 999000)
        events = event_set(water(8, ts=ts))

        assert len(filter_events_for_day(events, DAY).water) == 1
        assert filter_events_for_day(events, NEXT_DAY).water == []

    def test_sub_millisecond_tail_stays_on_the_day(self):
        ts = at(DAY, 23, 59, 59, 999999)
        events = event_set(water(8, ts=ts))

        assert len(filter_events_for_day(events, DAY).water) == 1
        assert filter_events_for_day(events, NEXT_DAY).water == []

    def test_midnight_belongs_to_the_new_day(self):
        events = event_set(water(8, ts=at(NEXT_DAY, 0, 0, 0)))

        assert filter_events_for_day(events, DAY).water == []
        assert len(filter_events_for_day(events, NEXT_DAY).water) == 1

    def test_start_of_day_is_inclusive(self):
        events = event_set(water(8, ts=at(DAY, 0, 0, 0)))
        assert len(filter_events_for_day(events, DAY).water) == 1

    def test_aware_timestamp_is_bucketed_in_local_time(self):
        # 03:30 UTC on the 16th is 21:30 on the 15th in Denver (UTC-6 in June)
        ts = datetime(2026, 6, 16, 3, 30, tzinfo=timezone.utc)
        events = event_set(water(12, ts=ts))

        assert len(filter_events_for_day(events, DAY, TZ).water) == 1
        assert filter_events_for_day(events, NEXT_DAY, TZ).water == []

    def test_end_of_day_constant(self):
        assert END_OF_DAY.hour == 23
        assert END_OF_DAY.minute == 59
        assert END_OF_DAY.second == 59
        assert END_OF_DAY.microsecond == 999000


class TestRangeFilter:
    """Inclusive [start, end] ranges"""

    def test_range_includes_both_end_days(self):
        start, end = date(2026, 6, 10), date(2026, 6, 12)
        events = event_set(
            water(1, ts=at(date(2026, 6, 9), 23, 59, 59, 999000)),
            water(2, ts=at(start, 0, 0)),
            water(3, ts=at(date(2026, 6, 11))),
            water(4, ts=at(end, 23, 59, 59, 999000)),
            water(5, ts=at(date(2026, 6, 13), 0, 0)),
        )

        kept = filter_events_for_range(events, start, end)
        assert sorted(w.ounces for w in kept.water) == [2, 3, 4]

    def test_filter_applies_to_every_kind(self):
        events = event_set(
            water(8, ts=at(DAY)),
            sleep(4, ts=at(DAY, 7)),
            stress(2, ts=at(NEXT_DAY, 9)),
        )
        kept = filter_events_for_day(events, DAY)

        assert len(kept.water) == 1
        assert len(kept.sleep) == 1
        assert kept.stress == []

    def test_empty_range_is_empty(self):
        events = event_set(water(8, ts=at(DAY)))
        assert filter_events_for_range(events, NEXT_DAY, DAY).is_empty()

    def test_in_window(self):
        assert in_window(at(DAY, 12), DAY, DAY)
        assert not in_window(at(NEXT_DAY, 0), DAY, DAY)


class TestSplitByDay:
    """Single-pass bucketing for rolling windows"""

    def test_every_day_gets_a_bucket(self):
        start, end = date(2026, 6, 10), date(2026, 6, 16)
        buckets = split_events_by_day(event_set(water(8, ts=at(date(2026, 6, 12)))), start, end)

        assert list(buckets) == list(iter_days(start, end))
        assert len(buckets[date(2026, 6, 12)].water) == 1
        assert all(b.is_empty() for d, b in buckets.items() if d != date(2026, 6, 12))

    def test_boundary_event_lands_in_one_bucket(self):
        buckets = split_events_by_day(
            event_set(water(8, ts=at(DAY, 23, 59, 59, 999000))), DAY, NEXT_DAY,
        )
        assert len(buckets[DAY].water) == 1
        assert buckets[NEXT_DAY].water == []

    def test_out_of_range_events_are_dropped(self):
        buckets = split_events_by_day(
            event_set(water(8, ts=at(date(2026, 1, 1)))), DAY, DAY,
        )
        assert buckets[DAY].is_empty()

    def test_reversed_range_is_empty(self):
        assert len(split_events_by_day(event_set(), NEXT_DAY, DAY)) == 0


class TestLocalToday:
    """Today comes from local time, not UTC"""

    def test_late_evening_utc_next_day(self):
        # 22:00 in Denver is already 04:00 UTC the next day
        now = datetime(2026, 6, 16, 4, 0, tzinfo=timezone.utc)
        assert local_today(TZ, now=now) == DAY

    def test_naive_now_is_local_wall_clock(self):
        assert local_today(TZ, now=datetime(2026, 6, 15, 23, 30)) == DAY

    def test_window_for_days(self):
        assert window_for_days(7, DAY) == (date(2026, 6, 9), DAY)
        assert window_for_days(1, DAY) == (DAY, DAY)

    def test_day_bounds_are_aware(self):
        start, end = day_bounds(DAY, TZ)
        assert start.tzinfo is TZ and end.tzinfo is TZ
        assert end - start == timedelta(hours=23, minutes=59, seconds=59, milliseconds=999)


@pytest.mark.parametrize("start,end,expected", [
    (date(2026, 6, 1), date(2026, 6, 1), 1),
    (date(2026, 6, 1), date(2026, 6, 30), 30),
    (date(2026, 6, 2), date(2026, 6, 1), 0),
])
def test_iter_days_count(start, end, expected):
    assert len(list(iter_days(start, end))) == expected
