"""Teaching-hour conversion and faculty workload reporting.

Lecture units convert to contact hours one-to-one. Laboratory units carry more
contact time: 0.75 units per hour, so 1.5 lab units are 2 hours.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from timetabler.models.schedule import SessionType
from timetabler.schemas.workload import (
    DepartmentWorkloadReport,
    FacultyWorkloadReport,
    SubjectWorkloadLine,
    WorkloadStatus,
)
from timetabler.services.ports import FacultyRepository, ScheduleFilter, ScheduleRepository, SubjectRepository

LECTURE_UNIT_TO_HOURS_RATIO = 1
LAB_HOURS_TO_UNIT_RATIO = 0.75

DEFAULT_MIN_HOURS = 18
DEFAULT_MAX_HOURS = 26


def lecture_hours(units: float) -> float:
    return units * LECTURE_UNIT_TO_HOURS_RATIO


def lab_hours(units: float) -> float:
    return units / LAB_HOURS_TO_UNIT_RATIO


def lab_units_from_hours(hours: float) -> float:
    return hours * LAB_HOURS_TO_UNIT_RATIO


def total_teaching_hours(lecture_units: float, lab_units: float) -> float:
    return lecture_hours(lecture_units) + lab_hours(lab_units)


def recommended_duration(session_type: SessionType, units: float) -> float:
    if session_type == SessionType.laboratory:
        return lab_hours(units)
    return lecture_hours(units)


def workload_status(
    hours: float,
    min_hours: float = DEFAULT_MIN_HOURS,
    max_hours: float = DEFAULT_MAX_HOURS,
) -> WorkloadStatus:
    if hours < min_hours:
        return WorkloadStatus.underloaded
    if hours > max_hours:
        return WorkloadStatus.overloaded
    return WorkloadStatus.optimal


def is_overloaded(report: FacultyWorkloadReport, max_hours: float = DEFAULT_MAX_HOURS) -> bool:
    return report.total_teaching_hours > max_hours


def is_underloaded(report: FacultyWorkloadReport, min_hours: float = DEFAULT_MIN_HOURS) -> bool:
    return report.total_teaching_hours < min_hours


@dataclass
class CommittedLoad:
    units: float = 0.0
    subject_ids: set[str] = field(default_factory=set)
    schedule_ids: list[str] = field(default_factory=list)

    @property
    def preparations(self) -> int:
        return len(self.subject_ids)


class WorkloadCalculator:
    def __init__(
        self,
        schedules: ScheduleRepository,
        subjects: SubjectRepository,
        faculty: FacultyRepository,
        *,
        min_hours: float = DEFAULT_MIN_HOURS,
        max_hours: float = DEFAULT_MAX_HOURS,
    ) -> None:
        self.schedules = schedules
        self.subjects = subjects
        self.faculty = faculty
        # Bounds for faculty missing from the catalog.
        self.min_hours = min_hours
        self.max_hours = max_hours

    def committed_load(
        self,
        faculty_id: str,
        semester: str,
        academic_year: str,
        *,
        exclude_schedule_id: str | None = None,
    ) -> CommittedLoad:
        """Units and distinct subjects on a faculty's non-archived term schedules."""
        load = CommittedLoad()
        rows = self.schedules.find_schedules(
            ScheduleFilter(
                semester=semester,
                academic_year=academic_year,
                faculty_id=faculty_id,
                exclude_id=exclude_schedule_id,
            )
        )
        for schedule in rows:
            load.schedule_ids.append(schedule.id)
            load.subject_ids.add(schedule.subject_id)
            subject = self.subjects.get(schedule.subject_id)
            if subject is not None:
                load.units += subject.units
        return load

    def calculate_faculty_workload(
        self,
        faculty_id: str,
        semester: str,
        academic_year: str,
    ) -> FacultyWorkloadReport:
        faculty = self.faculty.get(faculty_id)
        rows = self.schedules.find_schedules(
            ScheduleFilter(semester=semester, academic_year=academic_year, faculty_id=faculty_id)
        )

        lecture_total = 0.0
        lab_total = 0.0
        lecture_unit_total = 0.0
        lab_unit_total = 0.0
        subject_ids: set[str] = set()
        breakdown: list[SubjectWorkloadLine] = []

        for schedule in rows:
            subject = self.subjects.get(schedule.subject_id)
            if subject is None:
                continue
            subject_ids.add(subject.id)
            # A row only carries the units of its own session type.
            if schedule.session_type == SessionType.laboratory:
                units = subject.lab_units or 0
                hours = lab_hours(units)
                lab_total += hours
                lab_unit_total += units
            else:
                units = subject.lecture_units or 0
                hours = lecture_hours(units)
                lecture_total += hours
                lecture_unit_total += units
            if not units:
                continue
            breakdown.append(
                SubjectWorkloadLine(
                    schedule_id=schedule.id,
                    subject_id=subject.id,
                    subject_code=subject.code,
                    subject_name=subject.name,
                    session_type=schedule.session_type,
                    units=units,
                    teaching_hours=hours,
                )
            )

        min_load = faculty.min_load if faculty is not None else self.min_hours
        max_load = faculty.max_load if faculty is not None else self.max_hours
        total_hours = lecture_total + lab_total
        return FacultyWorkloadReport(
            faculty_id=faculty_id,
            faculty_name=faculty.name if faculty is not None else "Unknown",
            semester=semester,
            academic_year=academic_year,
            total_teaching_hours=total_hours,
            lecture_hours=lecture_total,
            lab_hours=lab_total,
            total_units=lecture_unit_total + lab_unit_total,
            lecture_units=lecture_unit_total,
            lab_units=lab_unit_total,
            preparations=len(subject_ids),
            schedule_count=len(rows),
            min_load=min_load,
            max_load=max_load,
            status=workload_status(total_hours, min_load, max_load),
            subject_breakdown=breakdown,
        )

    def calculate_department_workload(
        self,
        department_id: str,
        semester: str,
        academic_year: str,
    ) -> DepartmentWorkloadReport:
        rows = self.schedules.find_schedules(
            ScheduleFilter(semester=semester, academic_year=academic_year, department_id=department_id)
        )
        faculty_ids = list(dict.fromkeys(schedule.faculty_id for schedule in rows))
        reports = [
            self.calculate_faculty_workload(faculty_id, semester, academic_year) for faculty_id in faculty_ids
        ]
        reports.sort(key=lambda report: report.total_teaching_hours, reverse=True)
        return DepartmentWorkloadReport(
            department_id=department_id,
            semester=semester,
            academic_year=academic_year,
            faculty=reports,
        )
