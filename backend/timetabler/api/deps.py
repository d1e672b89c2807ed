from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from timetabler.core.config import get_settings
from timetabler.db.session import SessionLocal
from timetabler.services.generator import ScheduleGenerator
from timetabler.services.repositories import Repositories
from timetabler.services.schedule_service import ScheduleService
from timetabler.services.workload import WorkloadCalculator


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_repositories(db: Session = Depends(get_db)) -> Repositories:
    return Repositories.from_session(db)


def get_schedule_service(repos: Repositories = Depends(get_repositories)) -> ScheduleService:
    return ScheduleService(repos)


def get_schedule_generator(repos: Repositories = Depends(get_repositories)) -> ScheduleGenerator:
    return ScheduleGenerator(repos)


def get_workload_calculator(repos: Repositories = Depends(get_repositories)) -> WorkloadCalculator:
    settings = get_settings()
    return WorkloadCalculator(
        repos.schedules,
        repos.subjects,
        repos.faculty,
        min_hours=settings.default_min_load,
        max_hours=settings.default_max_load,
    )
