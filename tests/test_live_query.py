"""
Tests for the observable, sorted view (ecopulse.live_query).
"""
from datetime import datetime, timedelta, timezone

import pytest

from ecopulse.live_query import LiveActivityQuery, sort_newest_first
from ecopulse.models import Activity, Category
from ecopulse.repositories import ActivityRepository

from tests.conftest import FakeClock


class Recorder:
    def __init__(self):
        self.deliveries = []

    def __call__(self, records):
        self.deliveries.append([a.name for a in records])

    @property
    def last(self):
        return self.deliveries[-1]


def test_subscribe_delivers_current_view_immediately(repo, live):
    repo.insert("Flight", Category.TRANSPORT, 12.5)
    rec = Recorder()

    live.subscribe(rec)

    assert rec.deliveries == [["Flight"]]


def test_subscribe_on_empty_store_delivers_empty_list(live):
    rec = Recorder()
    live.subscribe(rec)
    assert rec.deliveries == [[]]


def test_every_mutation_redelivers_full_view(repo, live):
    rec = Recorder()
    live.subscribe(rec)

    flight = repo.insert("Flight", Category.TRANSPORT, 12.5)
    repo.insert("Lunch", Category.FOOD, 3.2)
    repo.delete_one(flight.activity_id)
    repo.delete_all()

    assert rec.deliveries == [
        [],
        ["Flight"],
        ["Lunch", "Flight"],
        ["Lunch"],
        [],
    ]


def test_view_is_sorted_newest_first(repo, live):
    names = [f"a{i}" for i in range(10)]
    for n in names:
        repo.insert(n, Category.HOME, 1.0)

    view = live.snapshot()

    assert [a.name for a in view] == list(reversed(names))
    stamps = [a.created_at for a in view]
    assert stamps == sorted(stamps, reverse=True)


def test_equal_timestamps_break_ties_by_insertion(db, fixed_datetime):
    frozen = FakeClock(fixed_datetime, step=timedelta(0))
    repo = ActivityRepository(db, clock=frozen)
    live = LiveActivityQuery(repo)

    for n in ("first", "second", "third"):
        repo.insert(n, Category.FOOD, 1.0)

    assert [a.name for a in live.snapshot()] == ["third", "second", "first"]
    live.close()


def test_unsubscribe_stops_notifications(repo, live):
    rec = Recorder()
    sub = live.subscribe(rec)

    live.unsubscribe(sub)
    repo.insert("Flight", Category.TRANSPORT, 12.5)

    assert rec.deliveries == [[]]
    assert live.subscriber_count == 0


def test_unsubscribe_twice_is_safe(live):
    sub = live.subscribe(Recorder())
    live.unsubscribe(sub)
    live.unsubscribe(sub)


def test_failing_subscriber_does_not_block_others(repo, live):
    def boom(_records):
        raise RuntimeError("render failed")

    rec = Recorder()
    live.subscribe(boom)
    live.subscribe(rec)

    repo.insert("Flight", Category.TRANSPORT, 12.5)

    assert rec.last == ["Flight"]
    assert repo.count() == 1


def test_delivered_list_is_a_copy(repo, live):
    repo.insert("Flight", Category.TRANSPORT, 12.5)
    received = []
    live.subscribe(received.append)

    received[0].clear()

    assert [a.name for a in live.snapshot()] == ["Flight"]


def test_close_detaches_from_store(repo):
    live = LiveActivityQuery(repo)
    rec = Recorder()
    live.subscribe(rec)

    live.close()
    repo.insert("Flight", Category.TRANSPORT, 12.5)

    assert rec.deliveries == [[]]
    with pytest.raises(RuntimeError):
        live.subscribe(rec)


def test_sort_newest_first_handles_unsaved_records():
    t = datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)
    older = Activity("a", "older", Category.FOOD, 1.0, t, seq=1)
    newer = Activity("b", "newer", Category.FOOD, 1.0, t + timedelta(seconds=1))

    assert [a.name for a in sort_newest_first([older, newer])] == ["newer", "older"]
