"""Seed a small catalog for a local scheduling demo.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import os

from sqlalchemy import func, select

from timetabler.core.config import get_settings
from timetabler.db.bootstrap import ensure_runtime_schema
from timetabler.db.session import SessionLocal
from timetabler.models.classroom import Classroom, ClassroomStatus, ClassroomType
from timetabler.models.course import Course
from timetabler.models.department import Department
from timetabler.models.faculty import EmploymentType, Faculty, FacultyStatus
from timetabler.models.subject import Subject
from timetabler.schemas.generator import GenerateScheduleRequest
from timetabler.services.generator import ScheduleGenerator
from timetabler.services.repositories import Repositories

ACADEMIC_YEAR = os.getenv("SEED_ACADEMIC_YEAR", "2026-2027").strip() or "2026-2027"
SEMESTER = os.getenv("SEED_SEMESTER", "1st Semester").strip() or "1st Semester"
RUN_GENERATION = os.getenv("SEED_RUN_GENERATION", "false").strip().lower() in {"1", "true", "yes", "on"}

DEPARTMENTS = [
    ("CCS", "College of Computer Studies"),
    ("CAS", "College of Arts and Sciences"),
]

COURSE = ("BSCS", "Bachelor of Science in Computer Science", "CCS")

# code, name, lecture units, lab units, year level, laboratory flag, department code
SUBJECTS = [
    ("CS101", "Introduction to Computing", 2, 1, "1st Year", False, "CCS"),
    ("CS102", "Computer Programming 1", 2, 1, "1st Year", True, "CCS"),
    ("CS201", "Data Structures and Algorithms", 3, 0, "2nd Year", False, "CCS"),
    ("CS202", "Object-Oriented Programming", 2, 1, "2nd Year", True, "CCS"),
    ("CS301", "Operating Systems", 3, 0, "3rd Year", False, "CCS"),
    ("CS302", "Database Systems", 2, 1, "3rd Year", True, "CCS"),
    ("MATH101", "Discrete Mathematics", 3, 0, "1st Year", False, "CAS"),
    ("ENG101", "Purposive Communication", 3, 0, "1st Year", False, None),
]

# name, email, department code, employment type
FACULTY = [
    ("Maria Santos", "maria.santos@university.edu", "CCS", EmploymentType.full_time),
    ("Jose Reyes", "jose.reyes@university.edu", "CCS", EmploymentType.full_time),
    ("Ana Cruz", "ana.cruz@university.edu", "CCS", EmploymentType.part_time),
    ("Paolo Garcia", "paolo.garcia@university.edu", "CAS", EmploymentType.full_time),
]

PART_TIME_MAX_LOAD = 12

# room number, building, capacity, type, facilities
CLASSROOMS = [
    ("101", "Main Building", 40, ClassroomType.lecture, ["projector", "whiteboard"]),
    ("102", "Main Building", 45, ClassroomType.lecture, ["projector"]),
    ("201", "Main Building", 60, ClassroomType.lecture, ["projector", "sound-system"]),
    ("CL1", "Technology Building", 40, ClassroomType.computer_lab, ["computers", "projector"]),
    ("CL2", "Technology Building", 35, ClassroomType.computer_lab, ["computers"]),
    ("SL1", "Science Building", 30, ClassroomType.laboratory, ["lab-benches"]),
]


def upsert_departments(session) -> dict[str, Department]:
    departments: dict[str, Department] = {}
    for code, name in DEPARTMENTS:
        department = session.execute(select(Department).where(Department.code == code)).scalar_one_or_none()
        if department is None:
            department = Department(code=code, name=name)
            session.add(department)
        else:
            department.name = name
        departments[code] = department
    session.flush()
    return departments


def upsert_course(session, departments: dict[str, Department]) -> Course:
    code, name, department_code = COURSE
    department_id = departments[department_code].id
    course = session.execute(
        select(Course).where(Course.code == code, Course.department_id == department_id)
    ).scalar_one_or_none()
    if course is None:
        course = Course(code=code, name=name, department_id=department_id)
        session.add(course)
    else:
        course.name = name
    session.flush()
    return course


def upsert_subjects(session, course: Course, departments: dict[str, Department]) -> None:
    for code, name, lecture_units, lab_units, year_level, is_laboratory, department_code in SUBJECTS:
        department_id = departments[department_code].id if department_code else None
        subject = session.execute(
            select(Subject).where(Subject.course_id == course.id, Subject.code == code)
        ).scalar_one_or_none()
        if subject is None:
            subject = Subject(code=code, course_id=course.id, prerequisite_ids=[])
            session.add(subject)
        subject.name = name
        subject.lecture_units = lecture_units
        subject.lab_units = lab_units
        subject.year_level = year_level
        subject.semester = SEMESTER
        subject.is_laboratory = is_laboratory
        subject.department_id = department_id


def upsert_faculty(session, departments: dict[str, Department]) -> None:
    settings = get_settings()
    for name, email, department_code, employment_type in FACULTY:
        faculty = session.execute(select(Faculty).where(Faculty.email == email)).scalar_one_or_none()
        if faculty is None:
            faculty = Faculty(email=email, current_load=0, current_preparations=0)
            session.add(faculty)
        faculty.name = name
        faculty.department_id = departments[department_code].id
        faculty.employment_type = employment_type
        faculty.status = FacultyStatus.active
        faculty.max_preparations = settings.default_max_preparations
        if employment_type == EmploymentType.full_time:
            faculty.min_load = settings.default_min_load
            faculty.max_load = settings.default_max_load
        else:
            faculty.min_load = 0
            faculty.max_load = PART_TIME_MAX_LOAD


def upsert_classrooms(session) -> None:
    for room_number, building, capacity, room_type, facilities in CLASSROOMS:
        classroom = session.execute(
            select(Classroom).where(Classroom.room_number == room_number, Classroom.building == building)
        ).scalar_one_or_none()
        if classroom is None:
            classroom = Classroom(room_number=room_number, building=building)
            session.add(classroom)
        classroom.capacity = capacity
        classroom.type = room_type
        classroom.facilities = facilities
        classroom.status = ClassroomStatus.available


def main() -> None:
    ensure_runtime_schema()
    with SessionLocal() as session:
        departments = upsert_departments(session)
        course = upsert_course(session, departments)
        upsert_subjects(session, course, departments)
        upsert_faculty(session, departments)
        upsert_classrooms(session)
        session.commit()

        subject_count = session.execute(select(func.count(Subject.id))).scalar_one()
        faculty_count = session.execute(select(func.count(Faculty.id))).scalar_one()
        classroom_count = session.execute(select(func.count(Classroom.id))).scalar_one()

        print("Demo catalog seeded successfully.")
        print(f"Departments: {len(departments)}")
        print(f"Subjects: {subject_count}")
        print(f"Faculty: {faculty_count}")
        print(f"Classrooms: {classroom_count}")

        if RUN_GENERATION:
            result = ScheduleGenerator(Repositories.from_session(session)).generate(
                GenerateScheduleRequest(
                    semester=SEMESTER,
                    academic_year=ACADEMIC_YEAR,
                    overwrite_existing=True,
                )
            )
            print("")
            print(result.message)
            for failure in result.failed_subjects:
                print(f"  {failure.subject_code}: {failure.reason}")


if __name__ == "__main__":
    main()
