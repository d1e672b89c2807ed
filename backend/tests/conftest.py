import os

# Point the app engine at SQLite before anything imports the settings.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from timetabler.api.deps import get_db
from timetabler.db.base import Base
from timetabler.main import app
from timetabler.models.classroom import Classroom, ClassroomStatus, ClassroomType
from timetabler.models.course import Course
from timetabler.models.department import Department
from timetabler.models.faculty import Faculty, FacultyStatus
from timetabler.models.schedule import Schedule, ScheduleStatus, SessionType
from timetabler.models.subject import Subject
from timetabler.services.locks import term_locks
from timetabler.services.repositories import Repositories

SEMESTER = "1st Semester"
ACADEMIC_YEAR = "2026-2027"


class CatalogFactory:
    """Creates committed reference rows with sensible defaults."""

    def __init__(self, db):
        self.db = db
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def _save(self, item):
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def department(self, code: str | None = None, name: str | None = None) -> Department:
        index = self._next()
        code = code or f"D{index}"
        return self._save(Department(code=code, name=name or f"Department {code}"))

    def course(self, department: Department | None = None, code: str | None = None) -> Course:
        index = self._next()
        return self._save(
            Course(
                code=code or f"PROG{index}",
                name=f"Program {index}",
                department_id=department.id if department is not None else None,
            )
        )

    def subject(
        self,
        course: Course,
        *,
        code: str | None = None,
        department: Department | None = None,
        lecture_units: float = 3,
        lab_units: float = 0,
        is_laboratory: bool = False,
        year_level: str | None = "1st Year",
    ) -> Subject:
        index = self._next()
        code = code or f"SUB{index:03d}"
        return self._save(
            Subject(
                code=code,
                name=f"Subject {code}",
                course_id=course.id,
                department_id=department.id if department is not None else None,
                lecture_units=lecture_units,
                lab_units=lab_units,
                is_laboratory=is_laboratory,
                year_level=year_level,
                prerequisite_ids=[],
            )
        )

    def faculty(
        self,
        department: Department,
        *,
        name: str | None = None,
        max_load: float = 26,
        min_load: float = 18,
        current_load: float = 0,
        max_preparations: int = 4,
        current_preparations: int = 0,
        status: FacultyStatus = FacultyStatus.active,
    ) -> Faculty:
        index = self._next()
        return self._save(
            Faculty(
                name=name or f"Faculty {index:03d}",
                email=f"faculty{index}@example.com",
                department_id=department.id,
                max_load=max_load,
                min_load=min_load,
                current_load=current_load,
                max_preparations=max_preparations,
                current_preparations=current_preparations,
                status=status,
            )
        )

    def classroom(
        self,
        *,
        room_number: str | None = None,
        building: str = "Main",
        capacity: int = 40,
        type: ClassroomType = ClassroomType.lecture,
        facilities: list[str] | None = None,
        status: ClassroomStatus = ClassroomStatus.available,
    ) -> Classroom:
        index = self._next()
        return self._save(
            Classroom(
                room_number=room_number or f"R{index:03d}",
                building=building,
                capacity=capacity,
                type=type,
                facilities=facilities or [],
                status=status,
            )
        )

    def schedule(
        self,
        *,
        subject: Subject,
        faculty: Faculty,
        classroom: Classroom,
        day: str = "Monday",
        start_time: str = "09:00",
        end_time: str = "10:30",
        semester: str = SEMESTER,
        academic_year: str = ACADEMIC_YEAR,
        status: ScheduleStatus = ScheduleStatus.draft,
        is_generated: bool = False,
        session_type: SessionType | None = None,
    ) -> Schedule:
        if session_type is None:
            session_type = SessionType.laboratory if subject.is_laboratory else SessionType.lecture
        return self._save(
            Schedule(
                subject_id=subject.id,
                faculty_id=faculty.id,
                classroom_id=classroom.id,
                department_id=subject.department_id or faculty.department_id,
                day=day,
                start_time=start_time,
                end_time=end_time,
                session_type=session_type,
                semester=semester,
                academic_year=academic_year,
                status=status,
                is_generated=is_generated,
            )
        )

    def term_load(
        self,
        faculty: Faculty,
        units: float,
        *,
        preparations: int = 1,
        semester: str = SEMESTER,
        academic_year: str = ACADEMIC_YEAR,
    ) -> list[Schedule]:
        """Commits Saturday schedules worth ``units`` over ``preparations`` subjects.

        The room is under maintenance and the subjects have no department, so
        pass explicit subject ids when generating next to this load.
        """
        course = self.course()
        room = self.classroom(status=ClassroomStatus.maintenance)
        schedules = []
        for index in range(preparations):
            subject = self.subject(course, lecture_units=units / preparations)
            start = 7 * 60 + index * 90
            schedules.append(
                self.schedule(
                    subject=subject,
                    faculty=faculty,
                    classroom=room,
                    day="Saturday",
                    start_time=f"{start // 60:02d}:{start % 60:02d}",
                    end_time=f"{(start + 90) // 60:02d}:{(start + 90) % 60:02d}",
                    semester=semester,
                    academic_year=academic_year,
                )
            )
        return schedules


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def repos(db):
    return Repositories.from_session(db)


@pytest.fixture()
def catalog(db):
    return CatalogFactory(db)


@pytest.fixture()
def client(session_factory):
    term_locks.clear()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    term_locks.clear()
