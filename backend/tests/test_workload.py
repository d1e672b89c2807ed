import pytest

from timetabler.models.schedule import ScheduleStatus, SessionType
from timetabler.schemas.workload import WorkloadStatus
from timetabler.services.workload import (
    WorkloadCalculator,
    is_overloaded,
    is_underloaded,
    lab_hours,
    lab_units_from_hours,
    lecture_hours,
    recommended_duration,
    total_teaching_hours,
    workload_status,
)

SEMESTER = "1st Semester"
ACADEMIC_YEAR = "2026-2027"


def test_unit_to_hour_ratios():
    assert lecture_hours(3) == 3
    assert lab_hours(1.5) == pytest.approx(2)
    assert lab_hours(2.25) == pytest.approx(3)
    assert lab_hours(1) == pytest.approx(4 / 3)
    assert lab_units_from_hours(4) == pytest.approx(3)
    assert total_teaching_hours(2, 1.5) == pytest.approx(4)


def test_recommended_duration_by_session_type():
    assert recommended_duration(SessionType.lecture, 2) == 2
    assert recommended_duration(SessionType.laboratory, 0.75) == pytest.approx(1)


@pytest.mark.parametrize(
    ("hours", "expected"),
    [
        (17.5, WorkloadStatus.underloaded),
        (18, WorkloadStatus.optimal),
        (22, WorkloadStatus.optimal),
        (26, WorkloadStatus.optimal),
        (26.5, WorkloadStatus.overloaded),
    ],
)
def test_workload_status_bounds_are_inclusive(hours, expected):
    assert workload_status(hours) == expected


def test_workload_status_custom_bounds():
    assert workload_status(10, min_hours=6, max_hours=9) == WorkloadStatus.overloaded
    assert workload_status(5, min_hours=6, max_hours=9) == WorkloadStatus.underloaded


def _calculator(repos):
    return WorkloadCalculator(repos.schedules, repos.subjects, repos.faculty)


def test_faculty_report_sums_lecture_and_lab_hours(repos, catalog):
    department = catalog.department()
    course = catalog.course(department)
    lecture = catalog.subject(course, department=department, code="CS101", lecture_units=3)
    laboratory = catalog.subject(
        course, department=department, code="CS102", lecture_units=2, lab_units=1.5, is_laboratory=True
    )
    faculty = catalog.faculty(department, name="Prof Report")
    room = catalog.classroom()
    lab_room = catalog.classroom(capacity=35)
    catalog.schedule(subject=lecture, faculty=faculty, classroom=room, day="Monday")
    catalog.schedule(subject=laboratory, faculty=faculty, classroom=lab_room, day="Tuesday")
    catalog.schedule(
        subject=lecture, faculty=faculty, classroom=room, day="Friday", status=ScheduleStatus.archived
    )

    report = _calculator(repos).calculate_faculty_workload(faculty.id, SEMESTER, ACADEMIC_YEAR)

    assert report.faculty_name == "Prof Report"
    assert report.schedule_count == 2
    assert report.preparations == 2
    assert report.lecture_hours == pytest.approx(3)
    assert report.lab_hours == pytest.approx(2)
    assert report.total_teaching_hours == pytest.approx(5)
    assert report.lecture_units == pytest.approx(3)
    assert report.lab_units == pytest.approx(1.5)
    assert report.total_units == pytest.approx(4.5)
    assert report.status == WorkloadStatus.underloaded
    assert is_underloaded(report)
    assert not is_overloaded(report)
    by_code = {line.subject_code: line for line in report.subject_breakdown}
    assert by_code["CS102"].session_type == SessionType.laboratory
    assert by_code["CS102"].units == pytest.approx(1.5)
    assert by_code["CS102"].teaching_hours == pytest.approx(2)


def test_faculty_report_counts_units_of_the_session_type(repos, catalog):
    department = catalog.department()
    course = catalog.course(department)
    mixed = catalog.subject(course, department=department, code="CS210", lecture_units=3, lab_units=1.5)
    lecture_only = catalog.subject(course, department=department, code="CS220", lecture_units=3)
    faculty = catalog.faculty(department)
    room = catalog.classroom()
    catalog.schedule(subject=mixed, faculty=faculty, classroom=room, session_type=SessionType.lecture)
    catalog.schedule(
        subject=lecture_only,
        faculty=faculty,
        classroom=room,
        day="Tuesday",
        session_type=SessionType.laboratory,
    )

    report = _calculator(repos).calculate_faculty_workload(faculty.id, SEMESTER, ACADEMIC_YEAR)

    assert report.total_teaching_hours == pytest.approx(3)
    assert report.lab_hours == 0
    assert report.schedule_count == 2
    assert report.preparations == 2
    assert [(line.subject_code, line.units, line.teaching_hours) for line in report.subject_breakdown] == [
        ("CS210", 3, 3)
    ]


def test_faculty_report_ignores_other_terms(repos, catalog):
    department = catalog.department()
    course = catalog.course(department)
    subject = catalog.subject(course, department=department)
    faculty = catalog.faculty(department)
    room = catalog.classroom()
    catalog.schedule(subject=subject, faculty=faculty, classroom=room, academic_year="2025-2026")

    report = _calculator(repos).calculate_faculty_workload(faculty.id, SEMESTER, ACADEMIC_YEAR)

    assert report.schedule_count == 0
    assert report.total_teaching_hours == 0
    assert report.subject_breakdown == []


def test_committed_load_excludes_given_schedule(repos, catalog):
    department = catalog.department()
    course = catalog.course(department)
    first = catalog.subject(course, department=department, lecture_units=3)
    second = catalog.subject(course, department=department, lecture_units=2)
    faculty = catalog.faculty(department)
    room = catalog.classroom()
    catalog.schedule(subject=first, faculty=faculty, classroom=room, day="Monday")
    excluded = catalog.schedule(subject=second, faculty=faculty, classroom=room, day="Wednesday")

    load = _calculator(repos).committed_load(
        faculty.id, SEMESTER, ACADEMIC_YEAR, exclude_schedule_id=excluded.id
    )

    assert load.units == 3
    assert load.subject_ids == {first.id}
    assert load.preparations == 1


def test_department_report_sorted_by_hours(repos, catalog):
    department = catalog.department()
    course = catalog.course(department)
    light = catalog.faculty(department, name="Light Load")
    heavy = catalog.faculty(department, name="Heavy Load")
    room = catalog.classroom()
    small = catalog.subject(course, department=department, lecture_units=2)
    large = catalog.subject(course, department=department, lecture_units=3)
    extra = catalog.subject(course, department=department, lecture_units=3)
    catalog.schedule(subject=small, faculty=light, classroom=room, day="Monday")
    catalog.schedule(subject=large, faculty=heavy, classroom=room, day="Wednesday")
    catalog.schedule(subject=extra, faculty=heavy, classroom=room, day="Friday")

    report = _calculator(repos).calculate_department_workload(department.id, SEMESTER, ACADEMIC_YEAR)

    assert [item.faculty_name for item in report.faculty] == ["Heavy Load", "Light Load"]
    assert report.faculty[0].total_teaching_hours == 6


def test_overloaded_report(repos, catalog):
    department = catalog.department()
    course = catalog.course(department)
    faculty = catalog.faculty(department, max_load=4, min_load=2)
    room = catalog.classroom()
    subject = catalog.subject(course, department=department, lecture_units=5)
    catalog.schedule(subject=subject, faculty=faculty, classroom=room)

    report = _calculator(repos).calculate_faculty_workload(faculty.id, SEMESTER, ACADEMIC_YEAR)

    assert report.status == WorkloadStatus.overloaded
    assert is_overloaded(report, max_hours=4)
