"""End-to-end schedule generation for one semester/academic-year.

Subjects are placed one at a time in catalog order. Each placement is flushed
and recorded in the run's workload ledger before the next subject is searched,
so fairness ranking always sees earlier placements. The run holds the term
lock for its whole duration and commits once at the end.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable
from threading import Event
from time import perf_counter

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from timetabler.core.config import Settings, get_settings
from timetabler.core.exceptions import ConfigurationError, PlacementError
from timetabler.models.classroom import Classroom
from timetabler.models.faculty import Faculty
from timetabler.models.schedule import Schedule, ScheduleStatus
from timetabler.models.subject import Subject
from timetabler.schemas.generator import (
    ClassroomUtilization,
    FailedSubject,
    GenerateScheduleRequest,
    GenerationResult,
    GenerationStatistics,
    ScheduleConstraints,
)
from timetabler.schemas.schedule import ScheduleOut
from timetabler.services.assignment import AssignmentStrategy, FirstFitAssignmentSearch, SearchContext
from timetabler.services.conflict_detector import ConflictDetector
from timetabler.services.ledger import WorkloadLedger, release_faculty_load
from timetabler.services.locks import TermLockRegistry, term_locks
from timetabler.services.matching import ClassroomMatcher, FacultyMatcher
from timetabler.services.ports import ScheduleFilter, SubjectFilter
from timetabler.services.repositories import Repositories
from timetabler.services.time_slots import TimeSlotGenerator
from timetabler.services.workload import WorkloadCalculator

logger = logging.getLogger(__name__)

StrategyFactory = Callable[[WorkloadLedger], AssignmentStrategy]


class ScheduleGenerator:
    def __init__(
        self,
        repos: Repositories,
        *,
        settings: Settings | None = None,
        strategy_factory: StrategyFactory | None = None,
        locks: TermLockRegistry = term_locks,
    ) -> None:
        self.repos = repos
        self.settings = settings or get_settings()
        if self.settings.weekly_room_slots <= 0:
            raise ConfigurationError("weekly_room_slots must be positive")
        self.locks = locks
        self.workload = WorkloadCalculator(
            repos.schedules,
            repos.subjects,
            repos.faculty,
            min_hours=self.settings.default_min_load,
            max_hours=self.settings.default_max_load,
        )
        self.detector = ConflictDetector.from_repositories(repos, self.settings)
        self.strategy_factory = strategy_factory or self._first_fit

    def _first_fit(self, ledger: WorkloadLedger) -> AssignmentStrategy:
        try:
            slot_generator = TimeSlotGenerator(
                session_hours=self.settings.session_duration_hours,
                closing_time=self.settings.institution_closing_time,
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid time-slot policy: {exc}") from exc
        return FirstFitAssignmentSearch(
            detector=self.detector,
            faculty_matcher=FacultyMatcher(ledger),
            classroom_matcher=ClassroomMatcher(),
            slot_generator=slot_generator,
            accept_warnings=self.settings.accept_warning_conflicts,
        )

    def generate(self, request: GenerateScheduleRequest, *, cancel_event: Event | None = None) -> GenerationResult:
        with self.locks.hold(request.semester, request.academic_year):
            return self._run(request, cancel_event)

    def _run(self, request: GenerateScheduleRequest, cancel_event: Event | None) -> GenerationResult:
        started = perf_counter()
        logger.info(
            "SCHEDULE GENERATION START | semester=%s | academic_year=%s | departments=%s | courses=%s | subjects=%s | overwrite=%s",
            request.semester,
            request.academic_year,
            len(request.departments),
            len(request.courses),
            len(request.subjects),
            request.overwrite_existing,
        )
        try:
            self.repos.schedules.acquire_term_lock(request.semester, request.academic_year)
            subjects = self.repos.subjects.find_subjects(
                SubjectFilter(
                    subject_ids=tuple(request.subjects),
                    course_ids=tuple(request.courses),
                    department_ids=tuple(request.departments),
                )
            )
            if not subjects:
                logger.info(
                    "SCHEDULE GENERATION COMPLETE | semester=%s | academic_year=%s | subjects=0",
                    request.semester,
                    request.academic_year,
                )
                return GenerationResult(success=True, message="No subjects found to schedule")

            if request.overwrite_existing:
                self._release_existing(subjects, request)

            faculty_pool = self.repos.faculty.find_active_faculty(request.departments or None)
            classroom_pool = self.repos.classrooms.find_available_classrooms()
            ledger = WorkloadLedger(self.workload, request.semester, request.academic_year)
            strategy = self.strategy_factory(ledger)
            context = SearchContext(
                semester=request.semester,
                academic_year=request.academic_year,
                faculty_pool=faculty_pool,
                classroom_pool=classroom_pool,
                constraints=self._effective_constraints(request.constraints),
            )
            already_scheduled = self._scheduled_subject_ids(subjects, request)

            generated: list[Schedule] = []
            failed: list[FailedSubject] = []
            cancelled = False
            for subject in subjects:
                if cancel_event is not None and cancel_event.is_set():
                    cancelled = True
                    break
                try:
                    if subject.id in already_scheduled:
                        raise PlacementError(
                            f"Subject {subject.code} is already scheduled for "
                            f"{request.semester} {request.academic_year}"
                        )
                    generated.append(self._place(subject, strategy, ledger, context, request))
                except PlacementError as exc:
                    logger.info("Subject %s not placed: %s", subject.code, exc.reason)
                    failed.append(
                        FailedSubject(
                            subject_id=subject.id,
                            subject_code=subject.code,
                            subject_name=subject.name,
                            reason=exc.reason,
                        )
                    )

            statistics = self._statistics(
                generated,
                subjects,
                faculty_pool,
                classroom_pool,
                ledger,
                request,
            )
            self.repos.commit()
        except IntegrityError:
            self.repos.rollback()
            logger.exception(
                "SCHEDULE GENERATION SERIALIZATION FAILURE | semester=%s | academic_year=%s",
                request.semester,
                request.academic_year,
            )
            return GenerationResult(
                success=False,
                message="Schedule generation collided with a concurrent change; nothing was saved",
                error="serialization",
            )
        except SQLAlchemyError:
            self.repos.rollback()
            logger.exception(
                "SCHEDULE GENERATION FAILED | semester=%s | academic_year=%s",
                request.semester,
                request.academic_year,
            )
            return GenerationResult(
                success=False,
                message="Schedule generation failed: the database is unavailable",
                error="infrastructure",
            )
        except Exception:
            self.repos.rollback()
            logger.exception(
                "SCHEDULE GENERATION FAILED | semester=%s | academic_year=%s",
                request.semester,
                request.academic_year,
            )
            raise

        statistics.runtime_ms = round((perf_counter() - started) * 1000, 2)
        if cancelled:
            message = (
                f"Generation cancelled after {len(generated) + len(failed)} of {len(subjects)} subjects; "
                f"{len(generated)} schedules generated"
            )
        else:
            message = f"Successfully generated {len(generated)} out of {len(subjects)} schedules"
        logger.info(
            "SCHEDULE GENERATION COMPLETE | semester=%s | academic_year=%s | generated=%s | failed=%s | cancelled=%s | runtime_ms=%s",
            request.semester,
            request.academic_year,
            len(generated),
            len(failed),
            cancelled,
            statistics.runtime_ms,
        )
        return GenerationResult(
            success=True,
            message=message,
            generated=[ScheduleOut.model_validate(schedule) for schedule in generated],
            failed_subjects=failed,
            statistics=statistics,
            cancelled=cancelled,
        )

    def _place(
        self,
        subject: Subject,
        strategy: AssignmentStrategy,
        ledger: WorkloadLedger,
        context: SearchContext,
        request: GenerateScheduleRequest,
    ) -> Schedule:
        assignment = strategy.find(subject, context)
        if assignment is None:
            raise PlacementError("No conflict-free time slot found")

        department_id = self._department_for(subject)
        is_new_preparation = ledger.record(assignment.faculty, subject.id, subject.units)
        schedule = self.repos.schedules.create_schedule(
            subject_id=subject.id,
            faculty_id=assignment.faculty.id,
            classroom_id=assignment.classroom.id,
            department_id=department_id,
            day=assignment.time_slot.day,
            start_time=assignment.time_slot.start_time,
            end_time=assignment.time_slot.end_time,
            session_type=assignment.session_type,
            semester=request.semester,
            academic_year=request.academic_year,
            year_level=subject.year_level,
            status=ScheduleStatus.draft,
            is_generated=True,
        )
        self.repos.faculty.increment_faculty_load(
            assignment.faculty.id,
            subject.units,
            preparations=1 if is_new_preparation else 0,
        )
        logger.debug(
            "Placed %s with faculty=%s classroom=%s at %s",
            subject.code,
            assignment.faculty.id,
            assignment.classroom.id,
            assignment.time_slot.label(),
        )
        return schedule

    def _effective_constraints(self, constraints: ScheduleConstraints) -> ScheduleConstraints:
        if "minimum_capacity" in constraints.model_fields_set:
            return constraints
        return constraints.model_copy(update={"minimum_capacity": self.settings.default_minimum_capacity})

    def _department_for(self, subject: Subject) -> str:
        if subject.department_id:
            return subject.department_id
        course = self.repos.subjects.get_course(subject.course_id) if subject.course_id else None
        if course is not None and course.department_id:
            return course.department_id
        raise PlacementError(
            f"No department found for subject {subject.code}. "
            "Please assign a department to the subject or its course."
        )

    def _release_existing(self, subjects: list[Subject], request: GenerateScheduleRequest) -> None:
        previous = ScheduleFilter(
            semester=request.semester,
            academic_year=request.academic_year,
            subject_ids=tuple(subject.id for subject in subjects),
            is_generated=True,
        )
        rows = self.repos.schedules.find_schedules(previous)
        release_faculty_load(self.repos.faculty, self.repos.subjects, rows)
        archived = self.repos.schedules.archive(previous)
        logger.info(
            "Archived %s generated schedules for %s %s before regeneration",
            archived,
            request.semester,
            request.academic_year,
        )

    def _scheduled_subject_ids(self, subjects: list[Subject], request: GenerateScheduleRequest) -> set[str]:
        rows = self.repos.schedules.find_schedules(
            ScheduleFilter(
                semester=request.semester,
                academic_year=request.academic_year,
                subject_ids=tuple(subject.id for subject in subjects),
            )
        )
        return {schedule.subject_id for schedule in rows}

    def _statistics(
        self,
        generated: list[Schedule],
        subjects: list[Subject],
        faculty_pool: list[Faculty],
        classroom_pool: list[Classroom],
        ledger: WorkloadLedger,
        request: GenerateScheduleRequest,
    ) -> GenerationStatistics:
        by_department = Counter(schedule.department_id for schedule in generated)
        by_faculty = Counter(schedule.faculty_id for schedule in generated)
        by_classroom = Counter(schedule.classroom_id for schedule in generated)

        weekly_slots = self.settings.weekly_room_slots
        utilization_rates = [
            ClassroomUtilization(
                classroom_id=classroom.id,
                classroom=classroom.room_number,
                building=classroom.building,
                utilization=round(by_classroom.get(classroom.id, 0) / weekly_slots * 100, 2),
            )
            for classroom in classroom_pool
        ]
        average = (
            round(sum(item.utilization for item in utilization_rates) / len(utilization_rates), 2)
            if utilization_rates
            else 0.0
        )

        underloaded = []
        for faculty in faculty_pool:
            min_load = request.constraints.min_hours_per_week or faculty.min_load
            if ledger.entry_for(faculty).units < min_load:
                underloaded.append(faculty.id)

        return GenerationStatistics(
            total_generated=len(generated),
            total_subjects=len(subjects),
            by_department=dict(by_department),
            by_faculty=dict(by_faculty),
            by_classroom=dict(by_classroom),
            utilization_rates=utilization_rates,
            average_utilization=average,
            underloaded_faculty=underloaded,
        )
