"""
Shared pytest fixtures for the ecopulse tests.
"""
from datetime import datetime, timedelta, timezone

import pytest

from ecopulse.db import connect, create_schema
from ecopulse.live_query import LiveActivityQuery
from ecopulse.repositories import ActivityRepository
from ecopulse.services import EcoPulseService


class FakeClock:
    """
    Controllable time source: every call returns the current value and then
    advances by `step`.
    """

    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)):
        self.now = start
        self.step = step
        self.calls = 0

    def __call__(self) -> datetime:
        value = self.now
        self.now = self.now + self.step
        self.calls += 1
        return value


@pytest.fixture
def fixed_datetime():
    """
    Return a fixed, timezone-aware datetime (mid-day UTC, far from any day boundary).
    """
    return datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_datetime):
    return FakeClock(fixed_datetime)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "ecopulse_test.db"


@pytest.fixture
def db(db_path):
    """
    Open a fresh SQLite database with the schema applied.
    Automatically closed after the test.
    """
    database = connect(db_path)
    create_schema(database)
    yield database
    database.close()


@pytest.fixture
def repo(db, clock):
    return ActivityRepository(db, clock=clock)


@pytest.fixture
def live(repo):
    query = LiveActivityQuery(repo)
    yield query
    query.close()


@pytest.fixture
def service(db, clock):
    svc = EcoPulseService.from_db(db, clock=clock, tz=timezone.utc)
    yield svc
    svc.close()
