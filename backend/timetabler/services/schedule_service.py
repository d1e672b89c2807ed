from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.exc import IntegrityError

from timetabler.core.config import Settings, get_settings
from timetabler.core.exceptions import ResourceNotFoundError, ScheduleConflictError, SchedulerError
from timetabler.models.schedule import Schedule, ScheduleStatus
from timetabler.models.subject import Subject
from timetabler.schemas.conflict import Conflict, ConflictCheckRequest
from timetabler.schemas.schedule import ScheduleCreate, ScheduleUpdate
from timetabler.services.conflict_detector import ConflictDetector, ProposedAssignment
from timetabler.services.ledger import release_faculty_load
from timetabler.services.locks import TermLockRegistry, term_locks
from timetabler.services.matching import session_type_for
from timetabler.services.ports import ScheduleFilter
from timetabler.services.repositories import Repositories
from timetabler.services.time_slots import TimeSlot
from timetabler.services.workload import WorkloadCalculator

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = frozenset({"year_level", "section"})


class ScheduleService:
    """Direct, single-record schedule writes.

    Every write runs conflict detection under the term lock; error conflicts
    reject the write and warnings are handed back to the caller.
    """

    def __init__(
        self,
        repos: Repositories,
        *,
        settings: Settings | None = None,
        locks: TermLockRegistry = term_locks,
    ) -> None:
        self.repos = repos
        self.settings = settings or get_settings()
        self.locks = locks
        self.workload = WorkloadCalculator(repos.schedules, repos.subjects, repos.faculty)
        self.detector = ConflictDetector.from_repositories(repos, self.settings)

    def list_schedules(self, schedule_filter: ScheduleFilter) -> list[Schedule]:
        return self.repos.schedules.find_schedules(schedule_filter)

    def get_schedule(self, schedule_id: str) -> Schedule:
        schedule = self.repos.schedules.get(schedule_id)
        if schedule is None:
            raise ResourceNotFoundError("Schedule", schedule_id)
        return schedule

    def detect_conflicts(self, payload: ConflictCheckRequest) -> list[Conflict]:
        return self.detector.detect(
            ProposedAssignment(
                time_slot=TimeSlot(payload.time_slot.day, payload.time_slot.start_time, payload.time_slot.end_time),
                semester=payload.semester,
                academic_year=payload.academic_year,
                subject_id=payload.subject_id,
                faculty_id=payload.faculty_id,
                classroom_id=payload.classroom_id,
                schedule_id=payload.schedule_id,
            )
        )

    def create_schedule(self, payload: ScheduleCreate) -> tuple[Schedule, list[Conflict]]:
        subject = self._require_subject(payload.subject_id)
        self._require_faculty(payload.faculty_id)
        self._require_classroom(payload.classroom_id)
        department_id = self._resolve_department(subject, payload.department_id)

        values = payload.model_dump()
        values["department_id"] = department_id
        values["session_type"] = payload.session_type or session_type_for(subject)
        values["is_generated"] = False

        with self.locks.hold(payload.semester, payload.academic_year, timeout=self.settings.term_lock_timeout_seconds):
            self.repos.schedules.acquire_term_lock(payload.semester, payload.academic_year)
            warnings: list[Conflict] = []
            is_new_preparation = False
            if values["status"] != ScheduleStatus.archived:
                warnings = self._check(values, schedule_id=None)
                is_new_preparation = subject.id not in self.workload.committed_load(
                    payload.faculty_id, payload.semester, payload.academic_year
                ).subject_ids
            try:
                schedule = self.repos.schedules.create_schedule(**values)
                if schedule.status != ScheduleStatus.archived:
                    self.repos.faculty.increment_faculty_load(
                        schedule.faculty_id,
                        subject.units,
                        preparations=1 if is_new_preparation else 0,
                    )
                self.repos.commit()
            except IntegrityError as exc:
                self.repos.rollback()
                raise ScheduleConflictError("Schedule was double-booked by a concurrent change") from exc

        logger.info(
            "Created schedule %s for subject %s (%s %s-%s)",
            schedule.id,
            subject.code,
            schedule.day,
            schedule.start_time,
            schedule.end_time,
        )
        return schedule, warnings

    def update_schedule(self, schedule_id: str, payload: ScheduleUpdate) -> tuple[Schedule, list[Conflict]]:
        schedule = self.get_schedule(schedule_id)
        # Only year_level and section may be cleared; other nulls mean "unchanged".
        changes = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        if "subject_id" in changes:
            self._require_subject(changes["subject_id"])
        if "faculty_id" in changes:
            self._require_faculty(changes["faculty_id"])
        if "classroom_id" in changes:
            self._require_classroom(changes["classroom_id"])
        if "department_id" in changes:
            self._require_department(changes["department_id"])

        merged = {
            "subject_id": schedule.subject_id,
            "faculty_id": schedule.faculty_id,
            "classroom_id": schedule.classroom_id,
            "day": schedule.day,
            "start_time": schedule.start_time,
            "end_time": schedule.end_time,
            "semester": schedule.semester,
            "academic_year": schedule.academic_year,
            "status": schedule.status,
        }
        merged.update(changes)
        slot = TimeSlot(merged["day"], merged["start_time"], merged["end_time"])
        if slot.end_minutes <= slot.start_minutes:
            raise SchedulerError("end_time must be after start_time")

        with self.locks.hold(schedule.semester, schedule.academic_year, timeout=self.settings.term_lock_timeout_seconds):
            self.repos.schedules.acquire_term_lock(schedule.semester, schedule.academic_year)
            warnings: list[Conflict] = []
            if merged["status"] != ScheduleStatus.archived:
                warnings = self._check(merged, schedule_id=schedule.id)
            try:
                was_active = schedule.status != ScheduleStatus.archived
                if was_active:
                    self._release(schedule)
                self.repos.schedules.update_schedule(schedule, changes)
                if schedule.status != ScheduleStatus.archived:
                    self._charge(schedule)
                self.repos.commit()
            except IntegrityError as exc:
                self.repos.rollback()
                raise ScheduleConflictError("Schedule was double-booked by a concurrent change") from exc

        logger.info("Updated schedule %s (%s)", schedule.id, ", ".join(sorted(changes)) or "no changes")
        return schedule, warnings

    def publish_schedules(self, schedule_ids: Sequence[str]) -> int:
        published = self.repos.schedules.publish(schedule_ids)
        self.repos.commit()
        logger.info("Published %s of %s requested schedules", published, len(schedule_ids))
        return published

    def archive_term(self, semester: str, academic_year: str) -> int:
        term = ScheduleFilter(semester=semester, academic_year=academic_year)
        with self.locks.hold(semester, academic_year, timeout=self.settings.term_lock_timeout_seconds):
            self.repos.schedules.acquire_term_lock(semester, academic_year)
            release_faculty_load(self.repos.faculty, self.repos.subjects, self.repos.schedules.find_schedules(term))
            archived = self.repos.schedules.archive(term)
            self.repos.commit()
        logger.info("Archived %s schedules for %s %s", archived, semester, academic_year)
        return archived

    def _check(self, values: dict[str, Any], *, schedule_id: str | None) -> list[Conflict]:
        conflicts = self.detector.detect(
            ProposedAssignment(
                time_slot=TimeSlot(values["day"], values["start_time"], values["end_time"]),
                semester=values["semester"],
                academic_year=values["academic_year"],
                subject_id=values["subject_id"],
                faculty_id=values["faculty_id"],
                classroom_id=values["classroom_id"],
                schedule_id=schedule_id,
            )
        )
        errors = [item for item in conflicts if item.is_blocking]
        if errors:
            raise ScheduleConflictError(
                "Schedule conflicts with existing assignments",
                conflicts=[item.model_dump(mode="json") for item in errors],
            )
        return conflicts

    def _release(self, schedule: Schedule) -> None:
        others = self.workload.committed_load(
            schedule.faculty_id,
            schedule.semester,
            schedule.academic_year,
            exclude_schedule_id=schedule.id,
        )
        subject = self.repos.subjects.get(schedule.subject_id)
        self.repos.faculty.increment_faculty_load(
            schedule.faculty_id,
            -(subject.units if subject is not None else 0),
            preparations=0 if schedule.subject_id in others.subject_ids else -1,
        )

    def _charge(self, schedule: Schedule) -> None:
        others = self.workload.committed_load(
            schedule.faculty_id,
            schedule.semester,
            schedule.academic_year,
            exclude_schedule_id=schedule.id,
        )
        subject = self.repos.subjects.get(schedule.subject_id)
        self.repos.faculty.increment_faculty_load(
            schedule.faculty_id,
            subject.units if subject is not None else 0,
            preparations=0 if schedule.subject_id in others.subject_ids else 1,
        )

    def _require_subject(self, subject_id: str) -> Subject:
        subject = self.repos.subjects.get(subject_id)
        if subject is None:
            raise ResourceNotFoundError("Subject", subject_id)
        return subject

    def _require_faculty(self, faculty_id: str) -> None:
        if self.repos.faculty.get(faculty_id) is None:
            raise ResourceNotFoundError("Faculty", faculty_id)

    def _require_classroom(self, classroom_id: str) -> None:
        if self.repos.classrooms.get(classroom_id) is None:
            raise ResourceNotFoundError("Classroom", classroom_id)

    def _require_department(self, department_id: str) -> None:
        if self.repos.departments.get(department_id) is None:
            raise ResourceNotFoundError("Department", department_id)

    def _resolve_department(self, subject: Subject, department_id: str | None) -> str:
        if department_id:
            self._require_department(department_id)
            return department_id
        if subject.department_id:
            return subject.department_id
        course = self.repos.subjects.get_course(subject.course_id) if subject.course_id else None
        if course is not None and course.department_id:
            return course.department_id
        raise SchedulerError(
            f"No department found for subject {subject.code}. "
            "Please assign a department to the subject or its course.",
            details={"subject_id": subject.id},
        )
