import logging
import uuid
from datetime import datetime
from typing import Callable, Iterable, List, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.engine import Engine

from .dates import DateLike, parse_date, parse_habit_id, start_of_day
from .errors import NotFound, ValidationError
from .schemas import DayView, HabitCreate, HabitRead, SummaryEntry, ToggleResult
from .stores import DayStore, HabitStore
from .summary import SummaryAggregator

logger = logging.getLogger(__name__)


class HabitScheduler:
    """Entry point for the four habit operations.

    `clock` returns the current instant; "today" is always its calendar day.
    """

    def __init__(self, engine: Engine, clock: Callable[[], datetime] = datetime.now):
        self.engine = engine
        self.clock = clock
        self.habits = HabitStore(engine)
        self.days = DayStore(engine)
        self.aggregator = SummaryAggregator(self.habits, self.days)

    def today(self) -> datetime:
        return start_of_day(self.clock())

    def create_habit(self, title: str, week_days: Iterable[int]) -> uuid.UUID:
        try:
            payload = HabitCreate(title=title, week_days=list(week_days))
        except PydanticValidationError as exc:
            raise ValidationError(_describe(exc)) from exc
        return self.add_habit(payload)

    def add_habit(self, payload: HabitCreate) -> uuid.UUID:
        return self.habits.create(payload.title, payload.week_days, self.today())

    def query_day(self, when: DateLike) -> DayView:
        # read-only: never materializes a day
        day = start_of_day(parse_date(when))
        possible = self.habits.find_eligible(day)
        record = self.days.get_by_date(day)
        completed = record.completed_habit_ids if record else []
        return DayView(
            possible_habits=[HabitRead.from_habit(h) for h in possible],
            completed_habits=completed,
        )

    def toggle_habit(self, habit_id: Union[uuid.UUID, str]) -> ToggleResult:
        habit_id = parse_habit_id(habit_id)
        if self.habits.get(habit_id) is None:
            raise NotFound(f"Habit {habit_id} not found")
        day = self.days.get_or_create(self.today())
        completed = self.days.toggle_completion(day.id, habit_id)
        return ToggleResult(completed=completed)

    def summary(self) -> List[SummaryEntry]:
        return self.aggregator.summarize()


def _describe(exc: PydanticValidationError) -> str:
    return "; ".join(
        "{}: {}".format(".".join(str(p) for p in err["loc"]), err["msg"]) for err in exc.errors()
    )
