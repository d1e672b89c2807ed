from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import Connection, func, inspect, select, text

from timetabler.db.bootstrap import REQUIRED_COLUMNS
from timetabler.db.session import engine
from timetabler.models.classroom import Classroom, ClassroomStatus
from timetabler.models.faculty import Faculty, FacultyStatus
from timetabler.models.schedule import Schedule, ScheduleStatus
from timetabler.services.locks import TermLockRegistry, term_locks

router = APIRouter()


def scheduling_summary(connection: Connection, locks: TermLockRegistry = term_locks) -> dict:
    """Schedulable catalog sizes and non-archived schedule counts per term."""
    active_faculty = connection.execute(
        select(func.count(Faculty.id)).where(Faculty.status == FacultyStatus.active)
    ).scalar_one()
    available_classrooms = connection.execute(
        select(func.count(Classroom.id)).where(Classroom.status == ClassroomStatus.available)
    ).scalar_one()
    term_rows = connection.execute(
        select(Schedule.semester, Schedule.academic_year, func.count(Schedule.id))
        .where(Schedule.status != ScheduleStatus.archived)
        .group_by(Schedule.semester, Schedule.academic_year)
        .order_by(Schedule.academic_year.desc(), Schedule.semester)
    ).all()
    return {
        "active_faculty": active_faculty,
        "available_classrooms": available_classrooms,
        "terms": [
            {
                "semester": semester,
                "academic_year": academic_year,
                "schedules": count,
                "locked": locks.is_locked(semester, academic_year),
            }
            for semester, academic_year, count in term_rows
        ],
    }


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    db_ok = True
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    db_error: str | None = None
    scheduling: dict | None = None

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            inspector = inspect(connection)
            table_names = set(inspector.get_table_names())
            for table_name, columns in REQUIRED_COLUMNS.items():
                if table_name not in table_names:
                    missing_tables.append(table_name)
                    continue
                existing = {item["name"] for item in inspector.get_columns(table_name)}
                missing = sorted(columns - existing)
                if missing:
                    missing_columns[table_name] = missing
            if not missing_tables and not missing_columns:
                scheduling = scheduling_summary(connection)
    except Exception as exc:  # pragma: no cover - environment dependent
        db_ok = False
        db_error = str(exc)

    schema_ok = not missing_tables and not missing_columns
    ready = db_ok and schema_ok
    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {
            "ok": db_ok,
            "schema_ok": schema_ok,
            "missing_tables": missing_tables,
            "missing_columns": missing_columns,
            "error": db_error,
        },
        "scheduling": scheduling,
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
