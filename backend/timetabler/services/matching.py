"""Candidate ranking for the assignment search.

Faculty are ranked by remaining headroom, largest first, so new subjects go
to whoever is least loaded. Classrooms are ranked by how closely their
capacity fits the requested minimum. Both sorts are stable: ties keep the
order of the input pool.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from timetabler.models.classroom import LAB_CLASSROOM_TYPES, Classroom, ClassroomStatus
from timetabler.models.faculty import Faculty, FacultyStatus
from timetabler.models.schedule import SessionType
from timetabler.models.subject import Subject
from timetabler.schemas.generator import ScheduleConstraints
from timetabler.services.ledger import WorkloadLedger


def session_type_for(subject: Subject) -> SessionType:
    return SessionType.laboratory if subject.is_laboratory else SessionType.lecture


@dataclass(frozen=True)
class FacultyCandidate:
    faculty: Faculty
    current_units: float
    preparations: int
    max_load: float
    max_preparations: int

    @property
    def headroom(self) -> float:
        return self.max_load - self.current_units


class FacultyMatcher:
    def __init__(self, ledger: WorkloadLedger) -> None:
        self.ledger = ledger

    def is_eligible(self, faculty: Faculty, subject: Subject) -> bool:
        if faculty.status != FacultyStatus.active:
            return False
        # Subjects without a department may be taught by anyone.
        if subject.department_id and faculty.department_id != subject.department_id:
            return False
        return True

    def match(
        self,
        subject: Subject,
        pool: Iterable[Faculty],
        constraints: ScheduleConstraints,
    ) -> list[FacultyCandidate]:
        candidates: list[FacultyCandidate] = []
        for faculty in pool:
            if not self.is_eligible(faculty, subject):
                continue
            entry = self.ledger.entry_for(faculty)
            max_load = constraints.max_hours_per_week or faculty.max_load
            max_preparations = constraints.max_preparations or faculty.max_preparations
            if entry.units + subject.units > max_load:
                continue
            if entry.preparations >= max_preparations:
                continue
            candidates.append(
                FacultyCandidate(
                    faculty=faculty,
                    current_units=entry.units,
                    preparations=entry.preparations,
                    max_load=max_load,
                    max_preparations=max_preparations,
                )
            )
        candidates.sort(key=lambda item: item.headroom, reverse=True)
        return candidates


class ClassroomMatcher:
    def is_eligible(self, classroom: Classroom, subject: Subject, constraints: ScheduleConstraints) -> bool:
        if classroom.status != ClassroomStatus.available:
            return False
        if classroom.capacity < constraints.minimum_capacity:
            return False
        facilities = set(classroom.facilities or [])
        if any(item not in facilities for item in constraints.required_facilities):
            return False
        if session_type_for(subject) == SessionType.laboratory and classroom.type not in LAB_CLASSROOM_TYPES:
            return False
        return True

    def match(
        self,
        subject: Subject,
        pool: Iterable[Classroom],
        constraints: ScheduleConstraints,
    ) -> list[Classroom]:
        suitable = [classroom for classroom in pool if self.is_eligible(classroom, subject, constraints)]
        suitable.sort(key=lambda classroom: abs(classroom.capacity - constraints.minimum_capacity))
        return suitable
