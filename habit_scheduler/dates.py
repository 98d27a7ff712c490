"""Calendar-day helpers.

Every instant stored by the scheduler is a naive local midnight. Weekdays are
numbered 0 = Sunday .. 6 = Saturday, matching SQLite's strftime('%w').
"""
import uuid
from datetime import date, datetime, time
from typing import Union

from .errors import ValidationError

DateLike = Union[datetime, date, str, int, float]


def start_of_day(value: Union[datetime, date]) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return datetime.combine(value.date(), time.min)
    return datetime.combine(value, time.min)


def weekday_of(day: Union[datetime, date]) -> int:
    return day.isoweekday() % 7


def parse_date(value: DateLike) -> datetime:
    """Coerce user input to a datetime.

    Accepts datetime/date objects, ISO-8601 strings and JavaScript style
    millisecond timestamps.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid date: {value!r}")
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            raise ValidationError(f"Invalid date: {value!r}")
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            raise ValidationError(f"Invalid date: {value!r}")
    raise ValidationError(f"Invalid date: {value!r}")


def parse_habit_id(value: Union[uuid.UUID, str]) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid habit id: {value!r}")
