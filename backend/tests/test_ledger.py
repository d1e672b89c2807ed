from timetabler.models.faculty import Faculty
from timetabler.models.schedule import ScheduleStatus
from timetabler.services.ledger import WorkloadLedger, release_faculty_load
from timetabler.services.workload import WorkloadCalculator

SEMESTER = "1st Semester"
ACADEMIC_YEAR = "2026-2027"


def make_ledger(repos):
    workload = WorkloadCalculator(repos.schedules, repos.subjects, repos.faculty)
    return WorkloadLedger(workload, SEMESTER, ACADEMIC_YEAR)


def test_entry_seeds_from_term_schedules(repos, catalog):
    department = catalog.department()
    course = catalog.course(department)
    subject = catalog.subject(course, department=department, lecture_units=3)
    room = catalog.classroom()
    scheduled = catalog.faculty(department)
    catalog.schedule(subject=subject, faculty=scheduled, classroom=room)
    catalog.term_load(scheduled, 4, preparations=2)

    entry = make_ledger(repos).entry_for(scheduled)

    assert entry.units == 7
    assert entry.preparations == 3
    assert subject.id in entry.subject_ids


def test_entry_ignores_other_terms_and_lifetime_counters(repos, catalog):
    department = catalog.department()
    faculty = catalog.faculty(department, current_load=24, current_preparations=3)
    catalog.term_load(faculty, 24, preparations=3, semester="2nd Semester")
    catalog.term_load(faculty, 6, academic_year="2025-2026")

    entry = make_ledger(repos).entry_for(faculty)

    assert entry.units == 0
    assert entry.preparations == 0


def test_archived_schedules_do_not_seed(repos, catalog):
    department = catalog.department()
    course = catalog.course(department)
    subject = catalog.subject(course, department=department)
    faculty = catalog.faculty(department)
    catalog.schedule(subject=subject, faculty=faculty, classroom=catalog.classroom(), status=ScheduleStatus.archived)

    assert make_ledger(repos).entry_for(faculty).units == 0


def test_record_tracks_new_preparations(repos, catalog):
    department = catalog.department()
    faculty = catalog.faculty(department)
    ledger = make_ledger(repos)

    assert ledger.record(faculty, "subject-a", 3) is True
    assert ledger.record(faculty, "subject-a", 3) is False
    assert ledger.record(faculty, "subject-b", 2) is True

    entry = ledger.snapshot()[faculty.id]
    assert entry.units == 8
    assert entry.preparations == 2


def test_release_counts_one_preparation_per_subject(repos, catalog, db):
    department = catalog.department()
    course = catalog.course(department)
    subject = catalog.subject(course, department=department, lecture_units=3)
    room = catalog.classroom()
    faculty = catalog.faculty(department, current_load=10, current_preparations=2)
    monday = catalog.schedule(subject=subject, faculty=faculty, classroom=room, day="Monday")
    wednesday = catalog.schedule(subject=subject, faculty=faculty, classroom=room, day="Wednesday")

    release_faculty_load(repos.faculty, repos.subjects, [monday, wednesday])

    refreshed = db.get(Faculty, faculty.id)
    assert refreshed.current_load == 4
    assert refreshed.current_preparations == 1


def test_release_never_goes_negative(repos, catalog, db):
    department = catalog.department()
    course = catalog.course(department)
    subject = catalog.subject(course, department=department, lecture_units=3)
    room = catalog.classroom()
    faculty = catalog.faculty(department)
    schedule = catalog.schedule(subject=subject, faculty=faculty, classroom=room)

    release_faculty_load(repos.faculty, repos.subjects, [schedule])

    refreshed = db.get(Faculty, faculty.id)
    assert refreshed.current_load == 0
    assert refreshed.current_preparations == 0
