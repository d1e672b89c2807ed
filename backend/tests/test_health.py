from timetabler.api.routes.health import scheduling_summary
from timetabler.models.classroom import ClassroomStatus
from timetabler.models.faculty import FacultyStatus
from timetabler.models.schedule import ScheduleStatus
from timetabler.services.locks import TermLockRegistry

SEMESTER = "1st Semester"
ACADEMIC_YEAR = "2026-2027"


def test_health_endpoints(client):
    health = client.get("/api/health")
    assert health.status_code == 200
    assert health.json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code in {200, 503}
    payload = ready.json()
    assert "database" in payload
    assert set(payload["database"]) >= {"ok", "schema_ok", "missing_tables", "missing_columns"}
    assert "scheduling" in payload


def test_scheduling_summary_counts_active_rows(engine, catalog):
    department = catalog.department()
    course = catalog.course(department)
    subject = catalog.subject(course, department=department)
    faculty = catalog.faculty(department)
    catalog.faculty(department, status=FacultyStatus.inactive)
    room = catalog.classroom()
    catalog.classroom(status=ClassroomStatus.maintenance)
    catalog.schedule(subject=subject, faculty=faculty, classroom=room)
    catalog.schedule(subject=subject, faculty=faculty, classroom=room, day="Wednesday")
    catalog.schedule(subject=subject, faculty=faculty, classroom=room, day="Friday", status=ScheduleStatus.archived)
    catalog.schedule(subject=subject, faculty=faculty, classroom=room, academic_year="2025-2026")
    locks = TermLockRegistry()

    with locks.hold(SEMESTER, ACADEMIC_YEAR), engine.connect() as connection:
        summary = scheduling_summary(connection, locks=locks)

    assert summary["active_faculty"] == 1
    assert summary["available_classrooms"] == 1
    assert summary["terms"] == [
        {"semester": SEMESTER, "academic_year": ACADEMIC_YEAR, "schedules": 2, "locked": True},
        {"semester": SEMESTER, "academic_year": "2025-2026", "schedules": 1, "locked": False},
    ]
