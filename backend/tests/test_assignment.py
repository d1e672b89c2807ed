import pytest

from timetabler.core.exceptions import PlacementError
from timetabler.models.classroom import ClassroomType
from timetabler.models.schedule import SessionType
from timetabler.schemas.generator import ScheduleConstraints
from timetabler.services.assignment import FirstFitAssignmentSearch, SearchContext
from timetabler.services.conflict_detector import ConflictDetector
from timetabler.services.ledger import WorkloadLedger
from timetabler.services.matching import ClassroomMatcher, FacultyCandidate, FacultyMatcher
from timetabler.services.time_slots import TimeSlot, TimeSlotGenerator
from timetabler.services.workload import WorkloadCalculator

SEMESTER = "1st Semester"
ACADEMIC_YEAR = "2026-2027"


class CountingDetector:
    def __init__(self, inner):
        self.inner = inner
        self.calls = []

    def detect(self, proposal):
        self.calls.append(proposal)
        return self.inner.detect(proposal)


class FixedFacultyMatcher:
    def __init__(self, candidates):
        self.candidates = candidates

    def match(self, subject, pool, constraints):
        return list(self.candidates)


def build_search(repos, *, detector=None, faculty_matcher=None, slot_generator=None, accept_warnings=False):
    workload = WorkloadCalculator(repos.schedules, repos.subjects, repos.faculty)
    ledger = WorkloadLedger(workload, SEMESTER, ACADEMIC_YEAR)
    return FirstFitAssignmentSearch(
        detector=detector or ConflictDetector.from_repositories(repos),
        faculty_matcher=faculty_matcher or FacultyMatcher(ledger),
        classroom_matcher=ClassroomMatcher(),
        slot_generator=slot_generator or TimeSlotGenerator(),
        accept_warnings=accept_warnings,
    )


def context_for(faculty_pool, classroom_pool, constraints=None):
    return SearchContext(
        semester=SEMESTER,
        academic_year=ACADEMIC_YEAR,
        faculty_pool=faculty_pool,
        classroom_pool=classroom_pool,
        constraints=constraints or ScheduleConstraints(),
    )


@pytest.fixture()
def department(catalog):
    return catalog.department()


@pytest.fixture()
def course(catalog, department):
    return catalog.course(department)


def test_first_feasible_triple_is_chosen(repos, catalog, department, course):
    subject = catalog.subject(course, department=department, code="CS101")
    faculty = catalog.faculty(department)
    room = catalog.classroom()

    assignment = build_search(repos).find(subject, context_for([faculty], [room]))

    assert assignment.faculty.id == faculty.id
    assert assignment.classroom.id == room.id
    assert assignment.time_slot == TimeSlot("Monday", "07:00", "08:30")
    assert assignment.session_type == SessionType.lecture


def test_occupied_slot_moves_to_next_day_in_pattern(repos, catalog, department, course):
    subject = catalog.subject(course, department=department)
    blocker = catalog.subject(course, department=department)
    faculty = catalog.faculty(department)
    other_faculty = catalog.faculty(department)
    room = catalog.classroom()
    catalog.schedule(
        subject=blocker,
        faculty=other_faculty,
        classroom=room,
        day="Monday",
        start_time="07:00",
        end_time="08:30",
    )

    assignment = build_search(repos).find(subject, context_for([faculty], [room]))

    assert assignment.time_slot == TimeSlot("Wednesday", "07:00", "08:30")


def test_lab_subject_lands_on_tuesday_in_lab_room(repos, catalog, department, course):
    subject = catalog.subject(course, department=department, lab_units=1, is_laboratory=True)
    faculty = catalog.faculty(department)
    lecture_room = catalog.classroom()
    lab_room = catalog.classroom(type=ClassroomType.computer_lab)

    assignment = build_search(repos).find(subject, context_for([faculty], [lecture_room, lab_room]))

    assert assignment.classroom.id == lab_room.id
    assert assignment.time_slot.day == "Tuesday"
    assert assignment.session_type == SessionType.laboratory


def test_no_faculty_raises_placement_error(repos, catalog, department, course):
    subject = catalog.subject(course, department=department, code="CS404")
    room = catalog.classroom()

    with pytest.raises(PlacementError, match="No suitable faculty found for lecture of subject CS404"):
        build_search(repos).find(subject, context_for([], [room]))


def test_no_lab_room_raises_placement_error(repos, catalog, department, course):
    subject = catalog.subject(course, department=department, code="CS405", is_laboratory=True, lab_units=1)
    faculty = catalog.faculty(department)
    lecture_room = catalog.classroom()

    with pytest.raises(PlacementError, match="No suitable laboratory classroom found for subject CS405"):
        build_search(repos).find(subject, context_for([faculty], [lecture_room]))


def test_no_slots_raises_placement_error(repos, catalog, department, course):
    subject = catalog.subject(course, department=department, code="CS406")
    faculty = catalog.faculty(department)
    room = catalog.classroom()
    constraints = ScheduleConstraints(allowed_days=["Saturday"])

    with pytest.raises(PlacementError, match="No time slots available"):
        build_search(repos).find(subject, context_for([faculty], [room], constraints))


def test_exhausted_search_returns_none(repos, catalog, department, course):
    subject = catalog.subject(course, department=department, is_laboratory=True, lab_units=1)
    blocker = catalog.subject(course, department=department, is_laboratory=True, lab_units=1)
    faculty = catalog.faculty(department)
    other_faculty = catalog.faculty(department)
    lab_room = catalog.classroom(type=ClassroomType.laboratory)
    for day in ("Tuesday", "Thursday"):
        catalog.schedule(
            subject=blocker,
            faculty=other_faculty,
            classroom=lab_room,
            day=day,
            start_time="07:00",
            end_time="08:30",
        )
    search = build_search(repos, slot_generator=TimeSlotGenerator(start_times=("07:00",)))

    assert search.find(subject, context_for([faculty], [lab_room])) is None


def test_workload_conflict_skips_rest_of_faculty(repos, catalog, department, course):
    subject = catalog.subject(course, department=department, lecture_units=3)
    heavy = catalog.subject(course, department=department, lecture_units=23)
    full = catalog.faculty(department, name="Full")
    free = catalog.faculty(department, name="Free")
    room = catalog.classroom()
    catalog.schedule(subject=heavy, faculty=full, classroom=room, day="Friday", start_time="15:00", end_time="16:30")

    detector = CountingDetector(ConflictDetector.from_repositories(repos))
    matcher = FixedFacultyMatcher(
        [
            FacultyCandidate(faculty=full, current_units=23, preparations=1, max_load=26, max_preparations=4),
            FacultyCandidate(faculty=free, current_units=0, preparations=0, max_load=26, max_preparations=4),
        ]
    )
    search = build_search(repos, detector=detector, faculty_matcher=matcher)

    assignment = search.find(subject, context_for([full, free], [room]))

    assert assignment.faculty.id == free.id
    assert [call.faculty_id for call in detector.calls] == [full.id, free.id]


def test_capacity_warning_blocks_unless_warnings_accepted(repos, catalog, department, course):
    subject = catalog.subject(course, department=department)
    faculty = catalog.faculty(department)
    small = catalog.classroom(capacity=30)

    strict = build_search(repos)
    lenient = build_search(repos, accept_warnings=True)

    assert strict.find(subject, context_for([faculty], [small])) is None
    assignment = lenient.find(subject, context_for([faculty], [small]))
    assert assignment.classroom.id == small.id


def test_capacity_warning_falls_through_to_next_room(repos, catalog, department, course):
    subject = catalog.subject(course, department=department)
    faculty = catalog.faculty(department)
    small = catalog.classroom(room_number="SMALL", capacity=30)
    large = catalog.classroom(room_number="LARGE", capacity=50)
    detector = CountingDetector(ConflictDetector.from_repositories(repos))

    assignment = build_search(repos, detector=detector).find(subject, context_for([faculty], [small, large]))

    assert assignment.classroom.id == large.id
    assert len(detector.calls) == 2


def test_slot_lists_are_cached_per_session_type(repos):
    search = build_search(repos)

    first = search.slots_for(SessionType.lecture, None)
    second = search.slots_for(SessionType.lecture, None)

    assert first is second
    assert search.slots_for(SessionType.laboratory, None) is not first
