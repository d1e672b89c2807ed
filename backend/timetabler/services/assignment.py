from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from timetabler.core.exceptions import PlacementError
from timetabler.models.classroom import Classroom
from timetabler.models.faculty import Faculty
from timetabler.models.schedule import SessionType
from timetabler.models.subject import Subject
from timetabler.schemas.conflict import Conflict, ConflictSeverity, ConflictType
from timetabler.schemas.generator import ScheduleConstraints
from timetabler.services.conflict_detector import ConflictDetector, ProposedAssignment
from timetabler.services.matching import ClassroomMatcher, FacultyMatcher, session_type_for
from timetabler.services.time_slots import TimeSlot, TimeSlotGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assignment:
    subject: Subject
    faculty: Faculty
    classroom: Classroom
    time_slot: TimeSlot
    session_type: SessionType


@dataclass(frozen=True)
class SearchContext:
    semester: str
    academic_year: str
    faculty_pool: Sequence[Faculty]
    classroom_pool: Sequence[Classroom]
    constraints: ScheduleConstraints


class AssignmentStrategy(Protocol):
    def find(self, subject: Subject, context: SearchContext) -> Assignment | None:
        """Return a feasible assignment, ``None`` when none exists.

        Raises ``PlacementError`` when a precondition fails before any search
        (no eligible faculty or classroom).
        """
        ...


class FirstFitAssignmentSearch:
    """Greedy search over faculty x classroom x slot, in matcher order.

    The first triple that passes conflict detection wins. With
    ``accept_warnings`` set, warning-only results are accepted too.
    """

    def __init__(
        self,
        *,
        detector: ConflictDetector,
        faculty_matcher: FacultyMatcher,
        classroom_matcher: ClassroomMatcher,
        slot_generator: TimeSlotGenerator,
        accept_warnings: bool = False,
    ) -> None:
        self.detector = detector
        self.faculty_matcher = faculty_matcher
        self.classroom_matcher = classroom_matcher
        self.slot_generator = slot_generator
        self.accept_warnings = accept_warnings
        self._slot_cache: dict[tuple[SessionType, tuple[str, ...] | None], list[TimeSlot]] = {}

    def slots_for(self, session_type: SessionType, allowed_days: Sequence[str] | None) -> list[TimeSlot]:
        key = (session_type, tuple(allowed_days) if allowed_days is not None else None)
        slots = self._slot_cache.get(key)
        if slots is None:
            slots = self.slot_generator.generate(session_type, allowed_days=allowed_days)
            self._slot_cache[key] = slots
        return slots

    def find(self, subject: Subject, context: SearchContext) -> Assignment | None:
        session_type = session_type_for(subject)

        faculty_candidates = self.faculty_matcher.match(subject, context.faculty_pool, context.constraints)
        if not faculty_candidates:
            raise PlacementError(f"No suitable faculty found for {session_type.value} of subject {subject.code}")

        classrooms = self.classroom_matcher.match(subject, context.classroom_pool, context.constraints)
        if not classrooms:
            raise PlacementError(f"No suitable {session_type.value} classroom found for subject {subject.code}")

        slots = self.slots_for(session_type, context.constraints.allowed_days)
        if not slots:
            raise PlacementError(f"No time slots available for {session_type.value} of subject {subject.code}")

        for candidate in faculty_candidates:
            assignment = self._place_with(candidate.faculty, subject, session_type, classrooms, slots, context)
            if assignment is not None:
                return assignment
        return None

    def _place_with(
        self,
        faculty: Faculty,
        subject: Subject,
        session_type: SessionType,
        classrooms: Sequence[Classroom],
        slots: Sequence[TimeSlot],
        context: SearchContext,
    ) -> Assignment | None:
        for classroom in classrooms:
            for slot in slots:
                conflicts = self.detector.detect(
                    ProposedAssignment(
                        time_slot=slot,
                        semester=context.semester,
                        academic_year=context.academic_year,
                        subject_id=subject.id,
                        faculty_id=faculty.id,
                        classroom_id=classroom.id,
                    )
                )
                blocking = [item for item in conflicts if self._blocks(item)]
                if not blocking:
                    return Assignment(
                        subject=subject,
                        faculty=faculty,
                        classroom=classroom,
                        time_slot=slot,
                        session_type=session_type,
                    )
                blocking_types = {item.type for item in blocking}
                # Workload depends only on the faculty, capacity only on the room.
                if ConflictType.workload in blocking_types:
                    logger.debug("Faculty %s cannot take %s", faculty.id, subject.code)
                    return None
                if ConflictType.capacity in blocking_types:
                    break
        return None

    def _blocks(self, conflict: Conflict) -> bool:
        return conflict.severity == ConflictSeverity.error or not self.accept_warnings
