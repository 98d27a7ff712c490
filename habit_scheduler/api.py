# HTTP layer: maps the scheduler operations to routes.
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .db import create_db_and_tables, make_engine
from .errors import NotFound, StorageError, ValidationError
from .logger import setup_logging
from .scheduler import HabitScheduler
from .schemas import DayView, HabitCreate, SummaryEntry, ToggleResult

logger = logging.getLogger(__name__)


def create_app(scheduler: Optional[HabitScheduler] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title="Habit Scheduler API")

    if scheduler is None:
        engine = make_engine(settings.database_url, echo=settings.sql_echo)
        scheduler = HabitScheduler(engine)

        @app.on_event("startup")
        def on_startup():
            create_db_and_tables(engine)

    app.state.scheduler = scheduler

    # ----- Error mapping -----
    @app.exception_handler(ValidationError)
    def validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    def request_validation_error(request: Request, exc: RequestValidationError):
        detail = "; ".join(err["msg"] for err in exc.errors())
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})

    @app.exception_handler(NotFound)
    def not_found(request: Request, exc: NotFound):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    def storage_error(request: Request, exc: StorageError):
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": "Storage unavailable"})

    # ----- Habit endpoints -----
    @app.post("/habits", status_code=201)
    def create_habit(habit_in: HabitCreate, scheduler: HabitScheduler = Depends(get_scheduler)):
        scheduler.add_habit(habit_in)
        return Response(status_code=201)

    @app.get("/days", response_model=DayView)
    def get_day(date: str, scheduler: HabitScheduler = Depends(get_scheduler)):
        return scheduler.query_day(date)

    # Toggling always targets today; past days cannot be edited
    @app.patch("/habits/{habit_id}/toggle", response_model=ToggleResult)
    def toggle_habit(habit_id: str, scheduler: HabitScheduler = Depends(get_scheduler)):
        return scheduler.toggle_habit(habit_id)

    @app.get("/summary", response_model=List[SummaryEntry])
    def summary(scheduler: HabitScheduler = Depends(get_scheduler)):
        return scheduler.summary()

    return app


def get_scheduler(request: Request) -> HabitScheduler:
    return request.app.state.scheduler


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = load_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
