import uuid
from datetime import datetime, timedelta

import pytest
from sqlmodel import Session, select

from habit_scheduler.db import make_engine
from habit_scheduler.errors import NotFound, StorageError
from habit_scheduler.models import Day, Habit, HabitWeekDay
from habit_scheduler.stores import DayStore, HabitStore

WEDNESDAY = datetime(2024, 1, 3)


def titles(habits):
    return {h.title for h in habits}


# ----- HabitStore -----
def test_create_persists_habit_and_week_days(habit_store):
    habit_id = habit_store.create("Drink water", [1, 3, 5], datetime(2024, 1, 3, 9, 45))

    habit = habit_store.get(habit_id)
    assert habit.title == "Drink water"
    assert habit.created_at == WEDNESDAY
    assert sorted(w.week_day for w in habit.week_days) == [1, 3, 5]


def test_create_tolerates_duplicate_week_days(habit_store, engine):
    habit_id = habit_store.create("Read", [2, 2, 4, 2], WEDNESDAY)

    with Session(engine) as session:
        rows = session.exec(select(HabitWeekDay).where(HabitWeekDay.habit_id == habit_id)).all()
    assert sorted(r.week_day for r in rows) == [2, 4]


def test_dates_are_stored_naive(habit_store, day_store):
    assert Habit.__table__.c.created_at.type.timezone is False
    assert Day.__table__.c.date.type.timezone is False
    assert Day.__table__.c.date.unique

    habit_id = habit_store.create("Drink water", [3], WEDNESDAY)
    day_store.get_or_create(WEDNESDAY)
    assert habit_store.get(habit_id).created_at.tzinfo is None
    assert day_store.get_by_date(WEDNESDAY).date == WEDNESDAY


def test_habit_without_week_days_is_never_eligible(habit_store):
    habit_store.create("Someday", [], WEDNESDAY)
    for offset in range(7):
        assert habit_store.find_eligible(WEDNESDAY + timedelta(days=offset)) == []


def test_find_eligible_matches_weekday_and_creation_date(habit_store):
    habit_store.create("Drink water", [1, 3, 5], WEDNESDAY)
    habit_store.create("Weekend walk", [0, 6], WEDNESDAY)
    habit_store.create("Later", [3], WEDNESDAY + timedelta(days=7))

    assert titles(habit_store.find_eligible(WEDNESDAY)) == {"Drink water"}
    assert titles(habit_store.find_eligible(WEDNESDAY + timedelta(days=1))) == set()
    assert titles(habit_store.find_eligible(WEDNESDAY + timedelta(days=3))) == {"Weekend walk"}
    assert titles(habit_store.find_eligible(WEDNESDAY + timedelta(days=7))) == {"Drink water", "Later"}


def test_find_eligible_excludes_days_before_creation(habit_store):
    habit_store.create("Drink water", [1, 3, 5], WEDNESDAY)
    # the previous Monday matches the weekday but predates the habit
    assert habit_store.find_eligible(WEDNESDAY - timedelta(days=2)) == []


def test_find_eligible_ignores_time_of_day(habit_store):
    habit_store.create("Stretch", [3], datetime(2024, 1, 3, 22, 0))
    assert titles(habit_store.find_eligible(datetime(2024, 1, 3, 0, 0, 1))) == {"Stretch"}


def test_eligibility_over_a_range_of_dates(habit_store):
    created = WEDNESDAY + timedelta(days=2)
    habit_store.create("Gym", [1, 5], created)

    for offset in range(-7, 21):
        day = WEDNESDAY + timedelta(days=offset)
        expected = day >= created and int(day.strftime("%w")) in (1, 5)
        assert (titles(habit_store.find_eligible(day)) == {"Gym"}) is expected
        assert habit_store.count_eligible(day) == int(expected)


def test_find_eligible_order_is_stable(habit_store):
    for title in ("b", "a", "c"):
        habit_store.create(title, [3], WEDNESDAY)
    first = [h.id for h in habit_store.find_eligible(WEDNESDAY)]
    second = [h.id for h in habit_store.find_eligible(WEDNESDAY)]
    assert first == second


# ----- DayStore -----
def test_get_by_date_does_not_create(day_store, engine):
    assert day_store.get_by_date(WEDNESDAY) is None
    assert day_store.get_by_date(WEDNESDAY) is None
    with Session(engine) as session:
        assert session.exec(select(Day)).all() == []


def test_get_or_create_is_idempotent(day_store, engine):
    first = day_store.get_or_create(datetime(2024, 1, 3, 8, 0))
    for hour in range(1, 10):
        again = day_store.get_or_create(datetime(2024, 1, 3, hour, 30))
        assert again.id == first.id

    with Session(engine) as session:
        days = session.exec(select(Day)).all()
    assert len(days) == 1
    assert days[0].date == WEDNESDAY


def test_get_or_create_separates_calendar_days(day_store):
    today = day_store.get_or_create(WEDNESDAY)
    tomorrow = day_store.get_or_create(WEDNESDAY + timedelta(days=1))
    assert today.id != tomorrow.id


def test_toggle_completion_flips_state(habit_store, day_store):
    habit_id = habit_store.create("Drink water", [3], WEDNESDAY)
    day = day_store.get_or_create(WEDNESDAY)

    assert day_store.toggle_completion(day.id, habit_id) is True
    assert day_store.get_by_date(WEDNESDAY).completed_habit_ids == [habit_id]

    assert day_store.toggle_completion(day.id, habit_id) is False
    assert day_store.get_by_date(WEDNESDAY).completed_habit_ids == []

    assert day_store.toggle_completion(day.id, habit_id) is True


def test_untoggle_keeps_the_day(habit_store, day_store):
    habit_id = habit_store.create("Drink water", [3], WEDNESDAY)
    day = day_store.get_or_create(WEDNESDAY)
    day_store.toggle_completion(day.id, habit_id)
    day_store.toggle_completion(day.id, habit_id)

    record = day_store.get_by_date(WEDNESDAY)
    assert record is not None
    assert record.id == day.id


def test_toggle_unknown_habit_raises_not_found(day_store):
    day = day_store.get_or_create(WEDNESDAY)
    with pytest.raises(NotFound):
        day_store.toggle_completion(day.id, uuid.uuid4())


def test_list_with_completion_counts(habit_store, day_store):
    water = habit_store.create("Drink water", [1, 3, 5], WEDNESDAY)
    read = habit_store.create("Read", [3, 4], WEDNESDAY)
    wednesday = day_store.get_or_create(WEDNESDAY)
    thursday = day_store.get_or_create(WEDNESDAY + timedelta(days=1))
    day_store.toggle_completion(wednesday.id, water)
    day_store.toggle_completion(wednesday.id, read)

    rows = [(day.id, count) for day, count in day_store.list_with_completion_counts()]
    assert rows == [(wednesday.id, 2), (thursday.id, 0)]


def test_missing_tables_raise_storage_error(tmp_path):
    # tables were never created on this database
    engine = make_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    with pytest.raises(StorageError):
        HabitStore(engine).find_eligible(WEDNESDAY)
    with pytest.raises(StorageError):
        DayStore(engine).get_or_create(WEDNESDAY)
    engine.dispose()
