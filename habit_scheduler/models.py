import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel


# ----- Tables -----
class Habit(SQLModel, table=True):
    __tablename__ = "habits"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str
    # stored as naive local midnights
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=False), index=True, nullable=False))

    week_days: List["HabitWeekDay"] = Relationship(back_populates="habit")


class HabitWeekDay(SQLModel, table=True):
    __tablename__ = "habit_week_days"
    __table_args__ = (UniqueConstraint("habit_id", "week_day"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: uuid.UUID = Field(foreign_key="habits.id", index=True)
    week_day: int = Field(index=True)  # 0 = Sunday .. 6 = Saturday

    habit: Optional[Habit] = Relationship(back_populates="week_days")


class Day(SQLModel, table=True):
    __tablename__ = "days"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    date: datetime = Field(sa_column=Column(DateTime(timezone=False), unique=True, index=True, nullable=False))

    completions: List["DayHabit"] = Relationship(back_populates="day")

    @property
    def completed_habit_ids(self) -> List[uuid.UUID]:
        return [c.habit_id for c in self.completions]


class DayHabit(SQLModel, table=True):
    """A habit completed on a day; at most one row per (day, habit)."""

    __tablename__ = "day_habits"

    day_id: uuid.UUID = Field(foreign_key="days.id", primary_key=True)
    habit_id: uuid.UUID = Field(foreign_key="habits.id", primary_key=True, index=True)

    day: Optional[Day] = Relationship(back_populates="completions")
