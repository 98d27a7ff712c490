import functools
import logging
import uuid
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple, Union

from sqlalchemy import delete, func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from .dates import start_of_day, weekday_of
from .errors import NotFound, StorageError
from .models import Day, DayHabit, Habit, HabitWeekDay

logger = logging.getLogger(__name__)

TOGGLE_ATTEMPTS = 3


def storage_errors(method):
    """Re-raise engine failures as StorageError."""
    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except SQLAlchemyError as exc:
            logger.warning("Storage failure in %s: %s", method.__qualname__, exc)
            raise StorageError(str(exc)) from exc
    return wrapper


# ----- Habits -----
class HabitStore:
    def __init__(self, engine: Engine):
        self.engine = engine

    @storage_errors
    def create(self, title: str, week_days: Iterable[int], created_at: Union[datetime, date]) -> uuid.UUID:
        """Persist a habit. Title and week days are validated by the caller (HabitCreate)."""
        week_days = sorted(set(week_days))
        habit = Habit(title=title, created_at=start_of_day(created_at))
        habit.week_days = [HabitWeekDay(week_day=w) for w in week_days]
        with Session(self.engine) as session:
            session.add(habit)
            session.commit()
            habit_id = habit.id
        logger.info("Created habit %s (%r) on week days %s", habit_id, title, week_days)
        return habit_id

    @storage_errors
    def get(self, habit_id: uuid.UUID) -> Optional[Habit]:
        with Session(self.engine) as session:
            statement = (
                select(Habit)
                .where(Habit.id == habit_id)
                .options(selectinload(Habit.week_days))
            )
            return session.exec(statement).first()

    def _eligible(self, statement, day: datetime):
        return (
            statement.join(HabitWeekDay, HabitWeekDay.habit_id == Habit.id)
            .where(HabitWeekDay.week_day == weekday_of(day))
            .where(Habit.created_at <= day)
        )

    @storage_errors
    def find_eligible(self, when: Union[datetime, date]) -> List[Habit]:
        """Habits created on or before `when` that recur on its weekday."""
        day = start_of_day(when)
        statement = self._eligible(select(Habit), day)
        statement = statement.options(selectinload(Habit.week_days)).order_by(
            Habit.created_at, Habit.title, Habit.id
        )
        with Session(self.engine) as session:
            habits = list(session.exec(statement).all())
        logger.debug("%d habits eligible on %s", len(habits), day.date())
        return habits

    @storage_errors
    def count_eligible(self, when: Union[datetime, date]) -> int:
        day = start_of_day(when)
        statement = self._eligible(select(func.count(Habit.id)).select_from(Habit), day)
        with Session(self.engine) as session:
            return session.exec(statement).one()


# ----- Days -----
class DayStore:
    def __init__(self, engine: Engine):
        self.engine = engine

    @storage_errors
    def get_by_date(self, when: Union[datetime, date]) -> Optional[Day]:
        day = start_of_day(when)
        with Session(self.engine) as session:
            statement = (
                select(Day)
                .where(Day.date == day)
                .options(selectinload(Day.completions))
            )
            return session.exec(statement).first()

    @storage_errors
    def get_or_create(self, when: Union[datetime, date]) -> Day:
        day = start_of_day(when)
        with Session(self.engine) as session:
            record = Day(date=day)
            session.add(record)
            try:
                session.commit()
            except IntegrityError:
                # the date already has a record, possibly created by a concurrent caller
                session.rollback()
                logger.debug("Day %s already exists, fetching it", day.date())
                return session.exec(select(Day).where(Day.date == day)).one()
            session.refresh(record)
            logger.info("Materialized day %s", day.date())
            return record

    @storage_errors
    def toggle_completion(self, day_id: uuid.UUID, habit_id: uuid.UUID) -> bool:
        """Complete the habit on the day, or un-complete it if already done.

        Returns the new completion state.
        """
        for attempt in range(1, TOGGLE_ATTEMPTS + 1):
            with Session(self.engine) as session:
                removed = session.exec(
                    delete(DayHabit)
                    .where(DayHabit.day_id == day_id)
                    .where(DayHabit.habit_id == habit_id)
                )
                if removed.rowcount:
                    session.commit()
                    logger.info("Habit %s un-completed on day %s", habit_id, day_id)
                    return False

                session.add(DayHabit(day_id=day_id, habit_id=habit_id))
                try:
                    session.commit()
                except IntegrityError as exc:
                    session.rollback()
                    if session.get(DayHabit, (day_id, habit_id)) is None:
                        raise NotFound(f"Habit {habit_id} or day {day_id} does not exist") from exc
                    # a concurrent toggle inserted the pair first; ours now removes it
                    logger.debug("Toggle conflict on (%s, %s), attempt %d", day_id, habit_id, attempt)
                    continue
                logger.info("Habit %s completed on day %s", habit_id, day_id)
                return True
        raise StorageError(f"Could not toggle habit {habit_id} after {TOGGLE_ATTEMPTS} attempts")

    @storage_errors
    def list_with_completion_counts(self) -> List[Tuple[Day, int]]:
        statement = (
            select(Day, func.count(DayHabit.habit_id))
            .join(DayHabit, DayHabit.day_id == Day.id, isouter=True)
            .group_by(Day.id)
            .order_by(Day.date)
        )
        with Session(self.engine) as session:
            return [(day, count) for day, count in session.exec(statement).all()]
