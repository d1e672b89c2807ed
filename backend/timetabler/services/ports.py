"""Data-access contracts consumed by the scheduling engine.

Each entity has its own repository so that no engine component reaches into
another entity's storage. ``timetabler.services.repositories`` provides the
SQLAlchemy implementations.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from timetabler.models.classroom import Classroom
from timetabler.models.course import Course
from timetabler.models.department import Department
from timetabler.models.faculty import Faculty
from timetabler.models.schedule import Schedule, ScheduleStatus
from timetabler.models.subject import Subject


@dataclass(frozen=True)
class SubjectFilter:
    # Explicit subject ids take precedence over course/department filters.
    subject_ids: tuple[str, ...] = ()
    course_ids: tuple[str, ...] = ()
    department_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScheduleFilter:
    semester: str | None = None
    academic_year: str | None = None
    day: str | None = None
    faculty_id: str | None = None
    classroom_id: str | None = None
    subject_id: str | None = None
    department_id: str | None = None
    subject_ids: tuple[str, ...] = ()
    status: ScheduleStatus | None = None
    is_generated: bool | None = None
    include_archived: bool = False
    exclude_id: str | None = None


class SubjectRepository(Protocol):
    def find_subjects(self, subject_filter: SubjectFilter) -> list[Subject]: ...

    def get(self, subject_id: str) -> Subject | None: ...

    def get_course(self, course_id: str) -> Course | None: ...


class DepartmentRepository(Protocol):
    def get(self, department_id: str) -> Department | None: ...


class FacultyRepository(Protocol):
    def find_active_faculty(self, department_ids: Sequence[str] | None = None) -> list[Faculty]: ...

    def get(self, faculty_id: str) -> Faculty | None: ...

    def increment_faculty_load(self, faculty_id: str, units: float, preparations: int = 1) -> None: ...


class ClassroomRepository(Protocol):
    def find_available_classrooms(self) -> list[Classroom]: ...

    def get(self, classroom_id: str) -> Classroom | None: ...


class ScheduleRepository(Protocol):
    def find_schedules(self, schedule_filter: ScheduleFilter) -> list[Schedule]: ...

    def get(self, schedule_id: str) -> Schedule | None: ...

    def create_schedule(self, **values: Any) -> Schedule: ...

    def update_schedule(self, schedule: Schedule, values: dict[str, Any]) -> Schedule: ...

    def publish(self, schedule_ids: Sequence[str]) -> int: ...

    def archive(self, schedule_filter: ScheduleFilter) -> int: ...

    def acquire_term_lock(self, semester: str, academic_year: str) -> None: ...
