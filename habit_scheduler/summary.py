import logging
from typing import List

from .schemas import SummaryEntry
from .stores import DayStore, HabitStore

logger = logging.getLogger(__name__)


class SummaryAggregator:
    """Completed vs. possible habit counts for every stored day.

    The possible count is recomputed from the current habits, using the
    weekday of the stored date.
    """

    def __init__(self, habits: HabitStore, days: DayStore):
        self.habits = habits
        self.days = days

    def summarize(self) -> List[SummaryEntry]:
        entries = []
        for day, completed in self.days.list_with_completion_counts():
            amount = self.habits.count_eligible(day.date)
            entries.append(SummaryEntry(id=day.id, date=day.date, completed=float(completed), amount=float(amount)))
        logger.debug("Summary built for %d days", len(entries))
        return entries
