from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from timetabler.models.faculty import Faculty
from timetabler.models.schedule import Schedule
from timetabler.services.ports import FacultyRepository, SubjectRepository
from timetabler.services.workload import WorkloadCalculator


@dataclass
class LedgerEntry:
    units: float = 0.0
    subject_ids: set[str] = field(default_factory=set)

    @property
    def preparations(self) -> int:
        return len(self.subject_ids)


class WorkloadLedger:
    """Per-run view of faculty load.

    Entries are seeded on first use from the faculty's non-archived schedules
    in the run's term and then only move through ``record``. The counters on
    the faculty record span every term and are not read here. Later subjects
    in a run read placements made by earlier ones from here rather than from
    the database.
    """

    def __init__(self, workload: WorkloadCalculator, semester: str, academic_year: str) -> None:
        self.workload = workload
        self.semester = semester
        self.academic_year = academic_year
        self._entries: dict[str, LedgerEntry] = {}

    def entry_for(self, faculty: Faculty) -> LedgerEntry:
        entry = self._entries.get(faculty.id)
        if entry is None:
            committed = self.workload.committed_load(faculty.id, self.semester, self.academic_year)
            entry = LedgerEntry(units=committed.units, subject_ids=set(committed.subject_ids))
            self._entries[faculty.id] = entry
        return entry

    def record(self, faculty: Faculty, subject_id: str, units: float) -> bool:
        """Add a placement; returns True when the subject is a new preparation."""
        entry = self.entry_for(faculty)
        is_new = subject_id not in entry.subject_ids
        entry.units += units
        entry.subject_ids.add(subject_id)
        return is_new

    def snapshot(self) -> dict[str, LedgerEntry]:
        return dict(self._entries)


def release_faculty_load(
    faculty: FacultyRepository,
    subjects: SubjectRepository,
    schedules: Iterable[Schedule],
) -> None:
    """Take schedules off the faculty counters, one preparation per faculty/subject pair."""
    released: set[tuple[str, str]] = set()
    for schedule in schedules:
        subject = subjects.get(schedule.subject_id)
        units = subject.units if subject is not None else 0
        pair = (schedule.faculty_id, schedule.subject_id)
        faculty.increment_faculty_load(
            schedule.faculty_id,
            -units,
            preparations=0 if pair in released else -1,
        )
        released.add(pair)
