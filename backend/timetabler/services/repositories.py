from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, select, text, update
from sqlalchemy.orm import Session

from timetabler.models.classroom import Classroom, ClassroomStatus
from timetabler.models.course import Course
from timetabler.models.department import Department
from timetabler.models.faculty import Faculty, FacultyStatus
from timetabler.models.schedule import Schedule, ScheduleStatus
from timetabler.models.subject import Subject
from timetabler.services.ports import ScheduleFilter, SubjectFilter

logger = logging.getLogger(__name__)


class SqlAlchemySubjectRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_subjects(self, subject_filter: SubjectFilter) -> list[Subject]:
        query = select(Subject)
        if subject_filter.subject_ids:
            query = query.where(Subject.id.in_(subject_filter.subject_ids))
        else:
            if subject_filter.course_ids:
                query = query.where(Subject.course_id.in_(subject_filter.course_ids))
            if subject_filter.department_ids:
                query = query.where(Subject.department_id.in_(subject_filter.department_ids))
        query = query.order_by(Subject.code, Subject.id)
        return list(self.db.execute(query).scalars())

    def get(self, subject_id: str) -> Subject | None:
        return self.db.get(Subject, subject_id)

    def get_course(self, course_id: str) -> Course | None:
        return self.db.get(Course, course_id)


class SqlAlchemyDepartmentRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, department_id: str) -> Department | None:
        return self.db.get(Department, department_id)


class SqlAlchemyFacultyRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_active_faculty(self, department_ids: Sequence[str] | None = None) -> list[Faculty]:
        query = select(Faculty).where(Faculty.status == FacultyStatus.active)
        if department_ids:
            query = query.where(Faculty.department_id.in_(list(department_ids)))
        return list(self.db.execute(query.order_by(Faculty.name, Faculty.id)).scalars())

    def get(self, faculty_id: str) -> Faculty | None:
        return self.db.get(Faculty, faculty_id)

    def increment_faculty_load(self, faculty_id: str, units: float, preparations: int = 1) -> None:
        faculty = self.db.get(Faculty, faculty_id)
        if faculty is None:
            return
        faculty.current_load = max(0.0, (faculty.current_load or 0) + units)
        faculty.current_preparations = max(0, (faculty.current_preparations or 0) + preparations)
        self.db.flush()


class SqlAlchemyClassroomRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_available_classrooms(self) -> list[Classroom]:
        query = (
            select(Classroom)
            .where(Classroom.status == ClassroomStatus.available)
            .order_by(Classroom.building, Classroom.room_number, Classroom.id)
        )
        return list(self.db.execute(query).scalars())

    def get(self, classroom_id: str) -> Classroom | None:
        return self.db.get(Classroom, classroom_id)


class SqlAlchemyScheduleRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _filtered(self, query: Select, schedule_filter: ScheduleFilter) -> Select:
        if schedule_filter.semester is not None:
            query = query.where(Schedule.semester == schedule_filter.semester)
        if schedule_filter.academic_year is not None:
            query = query.where(Schedule.academic_year == schedule_filter.academic_year)
        if schedule_filter.day is not None:
            query = query.where(Schedule.day == schedule_filter.day)
        if schedule_filter.faculty_id is not None:
            query = query.where(Schedule.faculty_id == schedule_filter.faculty_id)
        if schedule_filter.classroom_id is not None:
            query = query.where(Schedule.classroom_id == schedule_filter.classroom_id)
        if schedule_filter.subject_id is not None:
            query = query.where(Schedule.subject_id == schedule_filter.subject_id)
        if schedule_filter.department_id is not None:
            query = query.where(Schedule.department_id == schedule_filter.department_id)
        if schedule_filter.subject_ids:
            query = query.where(Schedule.subject_id.in_(schedule_filter.subject_ids))
        if schedule_filter.is_generated is not None:
            query = query.where(Schedule.is_generated.is_(schedule_filter.is_generated))
        if schedule_filter.status is not None:
            query = query.where(Schedule.status == schedule_filter.status)
        elif not schedule_filter.include_archived:
            query = query.where(Schedule.status != ScheduleStatus.archived)
        if schedule_filter.exclude_id is not None:
            query = query.where(Schedule.id != schedule_filter.exclude_id)
        return query

    def find_schedules(self, schedule_filter: ScheduleFilter) -> list[Schedule]:
        query = self._filtered(select(Schedule), schedule_filter)
        query = query.order_by(Schedule.day, Schedule.start_time, Schedule.id)
        return list(self.db.execute(query).scalars())

    def get(self, schedule_id: str) -> Schedule | None:
        return self.db.get(Schedule, schedule_id)

    def create_schedule(self, **values: Any) -> Schedule:
        schedule = Schedule(**values)
        self.db.add(schedule)
        # Flush so the unique indexes fire now and later reads in the run see the row.
        self.db.flush()
        return schedule

    def update_schedule(self, schedule: Schedule, values: dict[str, Any]) -> Schedule:
        for key, value in values.items():
            setattr(schedule, key, value)
        self.db.flush()
        return schedule

    def publish(self, schedule_ids: Sequence[str]) -> int:
        if not schedule_ids:
            return 0
        result = self.db.execute(
            update(Schedule)
            .where(Schedule.id.in_(list(schedule_ids)), Schedule.status == ScheduleStatus.draft)
            .values(status=ScheduleStatus.published)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    def archive(self, schedule_filter: ScheduleFilter) -> int:
        schedules = self.find_schedules(schedule_filter)
        for schedule in schedules:
            schedule.status = ScheduleStatus.archived
        self.db.flush()
        return len(schedules)

    def acquire_term_lock(self, semester: str, academic_year: str) -> None:
        if self.db.get_bind().dialect.name != "postgresql":
            return
        key = f"schedules|{semester}|{academic_year}"
        logger.debug("Taking advisory lock for %s", key)
        self.db.execute(text("SELECT pg_advisory_xact_lock(hashtext(:key))"), {"key": key})


@dataclass
class Repositories:
    db: Session
    subjects: SqlAlchemySubjectRepository
    departments: SqlAlchemyDepartmentRepository
    faculty: SqlAlchemyFacultyRepository
    classrooms: SqlAlchemyClassroomRepository
    schedules: SqlAlchemyScheduleRepository

    @classmethod
    def from_session(cls, db: Session) -> "Repositories":
        return cls(
            db=db,
            subjects=SqlAlchemySubjectRepository(db),
            departments=SqlAlchemyDepartmentRepository(db),
            faculty=SqlAlchemyFacultyRepository(db),
            classrooms=SqlAlchemyClassroomRepository(db),
            schedules=SqlAlchemyScheduleRepository(db),
        )

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
