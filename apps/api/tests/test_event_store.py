"""
Tests for the in-memory event store and EventSet loading.
"""
import threading
from dataclasses import replace
from datetime import timedelta

from models import EventKind, EventSet, kind_of
from services.event_store import load_event_set
from tests.wellness_factories import DAY, TZ, at, food, sleep, water


class TestInMemoryEventStore:

    def test_add_assigns_id_and_user(self, store):
        stored = store.add("u1", water(8, ts=at(tz=TZ)))

        assert stored.id
        assert stored.user_id == "u1"
        assert stored.ounces == 8

    def test_existing_id_is_kept(self, store):
        event = water(8, ts=at(tz=TZ))
        assert store.add("u1", replace(event, id="w-1")).id == "w-1"

    def test_list_is_ordered_by_timestamp(self, store):
        store.add("u1", water(3, ts=at(hour=15, tz=TZ)))
        store.add("u1", water(1, ts=at(hour=7, tz=TZ)))
        store.add("u1", water(2, ts=at(hour=11, tz=TZ)))

        assert [w.ounces for w in store.list("u1", EventKind.WATER)] == [1, 2, 3]

    def test_list_range_is_inclusive(self, store):
        store.add("u1", water(1, ts=at(hour=7, tz=TZ)))
        store.add("u1", water(2, ts=at(hour=11, tz=TZ)))
        store.add("u1", water(3, ts=at(hour=15, tz=TZ)))

        listed = store.list("u1", EventKind.WATER, start=at(hour=7, tz=TZ), end=at(hour=11, tz=TZ))
        assert [w.ounces for w in listed] == [1, 2]

    def test_users_are_isolated(self, store):
        store.add("u1", water(8, ts=at(tz=TZ)))

        assert store.list("u2", EventKind.WATER) == []
        assert store.list("u1", "water")

    def test_delete(self, store):
        stored = store.add("u1", sleep(4, ts=at(tz=TZ)))

        assert not store.delete("u2", EventKind.SLEEP, stored.id)
        assert not store.delete("u1", EventKind.WATER, stored.id)
        assert store.delete("u1", EventKind.SLEEP, stored.id)
        assert store.list("u1", EventKind.SLEEP) == []
        assert not store.delete("u1", EventKind.SLEEP, stored.id)

    def test_concurrent_adds(self, store):
        def worker(n):
            for i in range(50):
                store.add("u1", water(1, ts=at(tz=TZ) + timedelta(seconds=n * 100 + i)))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store.list("u1", EventKind.WATER)) == 200


class TestLoadEventSet:

    def test_loads_every_kind(self, store):
        store.add("u1", water(8, ts=at(tz=TZ)))
        store.add("u1", food(ts=at(tz=TZ), calories_min=100, calories_max=200))
        store.add("u1", sleep(3, ts=at(hour=6, tz=TZ)))

        events = load_event_set(store, "u1")

        assert isinstance(events, EventSet)
        assert events.total_count() == 3
        assert {kind_of(e) for e in events.all_events()} == {
            EventKind.WATER, EventKind.FOOD, EventKind.SLEEP,
        }

    def test_range(self, store):
        store.add("u1", water(8, ts=at(DAY - timedelta(days=1), tz=TZ)))
        store.add("u1", water(9, ts=at(DAY, tz=TZ)))

        events = load_event_set(store, "u1", start=at(DAY, 0, tz=TZ), end=at(DAY, 23, 59, tz=TZ))
        assert [w.ounces for w in events.water] == [9]
