"""Constraint checks for a proposed schedule against the committed term.

Detection is a pure read. Checks run in a fixed order: time overlaps
(faculty, then classroom, per existing schedule), then faculty workload, then
classroom capacity. Callers treat ``error`` entries as blocking.
"""

from __future__ import annotations

from dataclasses import dataclass

from timetabler.core.config import Settings
from timetabler.models.schedule import Schedule
from timetabler.schemas.conflict import Conflict, ConflictSeverity, ConflictType
from timetabler.services.ports import (
    ClassroomRepository,
    FacultyRepository,
    ScheduleFilter,
    ScheduleRepository,
    SubjectRepository,
)
from timetabler.services.time_slots import TimeSlot
from timetabler.services.workload import WorkloadCalculator

DEFAULT_TYPICAL_CLASS_SIZE = 40
DEFAULT_CAPACITY_WARNING_RATIO = 0.8


@dataclass(frozen=True)
class ProposedAssignment:
    time_slot: TimeSlot
    semester: str
    academic_year: str
    subject_id: str | None = None
    faculty_id: str | None = None
    classroom_id: str | None = None
    # Set when re-checking an existing record so it is not compared with itself.
    schedule_id: str | None = None


class ConflictDetector:
    def __init__(
        self,
        *,
        schedules: ScheduleRepository,
        subjects: SubjectRepository,
        faculty: FacultyRepository,
        classrooms: ClassroomRepository,
        workload: WorkloadCalculator,
        typical_class_size: int = DEFAULT_TYPICAL_CLASS_SIZE,
        capacity_warning_ratio: float = DEFAULT_CAPACITY_WARNING_RATIO,
    ) -> None:
        self.schedules = schedules
        self.subjects = subjects
        self.faculty = faculty
        self.classrooms = classrooms
        self.workload = workload
        self.typical_class_size = typical_class_size
        self.capacity_warning_ratio = capacity_warning_ratio

    @classmethod
    def from_repositories(cls, repos, settings: Settings | None = None) -> "ConflictDetector":
        workload = WorkloadCalculator(repos.schedules, repos.subjects, repos.faculty)
        kwargs = {}
        if settings is not None:
            kwargs = {
                "typical_class_size": settings.typical_class_size,
                "capacity_warning_ratio": settings.capacity_warning_ratio,
            }
        return cls(
            schedules=repos.schedules,
            subjects=repos.subjects,
            faculty=repos.faculty,
            classrooms=repos.classrooms,
            workload=workload,
            **kwargs,
        )

    def detect(self, proposal: ProposedAssignment) -> list[Conflict]:
        conflicts = self._overlap_conflicts(proposal)

        if proposal.faculty_id and proposal.subject_id:
            workload_conflict = self._workload_conflict(proposal)
            if workload_conflict is not None:
                conflicts.append(workload_conflict)

        if proposal.classroom_id and proposal.subject_id:
            capacity_conflict = self._capacity_conflict(proposal.classroom_id)
            if capacity_conflict is not None:
                conflicts.append(capacity_conflict)

        return conflicts

    def _overlap_conflicts(self, proposal: ProposedAssignment) -> list[Conflict]:
        conflicts: list[Conflict] = []
        same_day = self.schedules.find_schedules(
            ScheduleFilter(
                semester=proposal.semester,
                academic_year=proposal.academic_year,
                day=proposal.time_slot.day,
                exclude_id=proposal.schedule_id,
            )
        )
        for existing in same_day:
            existing_slot = TimeSlot(existing.day, existing.start_time, existing.end_time)
            if not proposal.time_slot.overlaps(existing_slot):
                continue

            if proposal.faculty_id and existing.faculty_id == proposal.faculty_id:
                faculty = self.faculty.get(existing.faculty_id)
                faculty_name = faculty.name if faculty is not None else existing.faculty_id
                conflicts.append(
                    Conflict(
                        type=ConflictType.faculty,
                        severity=ConflictSeverity.error,
                        message=(
                            f"Faculty {faculty_name} is already teaching "
                            f"{self._subject_code(existing)} at this time"
                        ),
                        schedules=[existing.id],
                        details=self._overlap_details(existing),
                    )
                )

            if proposal.classroom_id and existing.classroom_id == proposal.classroom_id:
                classroom = self.classrooms.get(existing.classroom_id)
                room_name = classroom.display_name if classroom is not None else existing.classroom_id
                conflicts.append(
                    Conflict(
                        type=ConflictType.classroom,
                        severity=ConflictSeverity.error,
                        message=(
                            f"Room {room_name} is already occupied by "
                            f"{self._subject_code(existing)} at this time"
                        ),
                        schedules=[existing.id],
                        details=self._overlap_details(existing),
                    )
                )
        return conflicts

    def _workload_conflict(self, proposal: ProposedAssignment) -> Conflict | None:
        faculty = self.faculty.get(proposal.faculty_id)
        subject = self.subjects.get(proposal.subject_id)
        if faculty is None or subject is None:
            return None

        committed = self.workload.committed_load(
            faculty.id,
            proposal.semester,
            proposal.academic_year,
            exclude_schedule_id=proposal.schedule_id,
        )
        projected = committed.units + subject.units
        if projected >= faculty.max_load:
            return Conflict(
                type=ConflictType.workload,
                severity=ConflictSeverity.error,
                message=(
                    f"Faculty {faculty.name} has reached maximum load "
                    f"({projected:g}/{faculty.max_load:g} units)"
                ),
                schedules=list(committed.schedule_ids),
                details={
                    "current_load": committed.units,
                    "proposed_units": subject.units,
                    "max_load": faculty.max_load,
                    "preparations": committed.preparations,
                },
            )

        preparations = len(committed.subject_ids | {subject.id})
        if preparations >= faculty.max_preparations:
            return Conflict(
                type=ConflictType.workload,
                severity=ConflictSeverity.warning,
                message=(
                    f"Faculty {faculty.name} has {preparations} preparations "
                    f"(max: {faculty.max_preparations})"
                ),
                schedules=list(committed.schedule_ids),
                details={
                    "current_preparations": committed.preparations,
                    "max_preparations": faculty.max_preparations,
                },
            )
        return None

    def _capacity_conflict(self, classroom_id: str) -> Conflict | None:
        classroom = self.classrooms.get(classroom_id)
        if classroom is None:
            return None
        if classroom.capacity >= self.typical_class_size * self.capacity_warning_ratio:
            return None
        return Conflict(
            type=ConflictType.capacity,
            severity=ConflictSeverity.warning,
            message=f"Room {classroom.display_name} may be too small (capacity: {classroom.capacity})",
            details={"capacity": classroom.capacity, "recommended": self.typical_class_size},
        )

    def _subject_code(self, schedule: Schedule) -> str:
        subject = self.subjects.get(schedule.subject_id)
        return subject.code if subject is not None else schedule.subject_id

    def _overlap_details(self, schedule: Schedule) -> dict:
        return {
            "schedule_id": schedule.id,
            "subject_id": schedule.subject_id,
            "faculty_id": schedule.faculty_id,
            "classroom_id": schedule.classroom_id,
            "time_slot": {
                "day": schedule.day,
                "start_time": schedule.start_time,
                "end_time": schedule.end_time,
            },
        }
