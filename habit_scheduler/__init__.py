"""Habit recurrence and daily completion tracking."""

from .errors import NotFound, SchedulerError, StorageError, ValidationError
from .scheduler import HabitScheduler

__all__ = [
    "HabitScheduler",
    "SchedulerError",
    "ValidationError",
    "NotFound",
    "StorageError",
]
