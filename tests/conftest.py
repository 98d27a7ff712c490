from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from habit_scheduler.api import create_app
from habit_scheduler.config import Settings
from habit_scheduler.db import create_db_and_tables, make_engine
from habit_scheduler.scheduler import HabitScheduler
from habit_scheduler.stores import DayStore, HabitStore

# 2024-01-03 is a Wednesday (weekday 3)
WEDNESDAY = datetime(2024, 1, 3, 15, 30)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def clock():
    return FakeClock(WEDNESDAY)


@pytest.fixture
def habit_store(engine):
    return HabitStore(engine)


@pytest.fixture
def day_store(engine):
    return DayStore(engine)


@pytest.fixture
def scheduler(engine, clock):
    return HabitScheduler(engine, clock=clock)


@pytest.fixture
def client(scheduler):
    app = create_app(scheduler=scheduler, settings=Settings(log_level="DEBUG"))
    with TestClient(app) as test_client:
        yield test_client
