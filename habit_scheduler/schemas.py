"""Request and response schemas. Field aliases follow the camelCase wire format."""
import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Habit


class Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class HabitCreate(Schema):
    title: str = Field(..., min_length=1)
    week_days: List[int] = Field(..., alias="weekDays")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("week_days")
    @classmethod
    def week_days_in_range(cls, value: List[int]) -> List[int]:
        for week_day in value:
            if not 0 <= week_day <= 6:
                raise ValueError(f"week day {week_day} is outside 0..6")
        return sorted(set(value))


class HabitRead(Schema):
    id: uuid.UUID
    title: str
    created_at: datetime = Field(alias="createdAt")
    week_days: List[int] = Field(default_factory=list, alias="weekDays")

    @classmethod
    def from_habit(cls, habit: Habit) -> "HabitRead":
        return cls(
            id=habit.id,
            title=habit.title,
            created_at=habit.created_at,
            week_days=sorted(w.week_day for w in habit.week_days),
        )


class DayView(Schema):
    possible_habits: List[HabitRead] = Field(default_factory=list, alias="possibleHabits")
    completed_habits: List[uuid.UUID] = Field(default_factory=list, alias="completedHabits")


class ToggleResult(Schema):
    completed: bool


class SummaryEntry(Schema):
    id: uuid.UUID
    date: datetime
    completed: float
    amount: float
