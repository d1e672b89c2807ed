import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from timetabler.db.base import Base


class ScheduleStatus(str, Enum):
    draft = "draft"
    published = "published"
    archived = "archived"


class SessionType(str, Enum):
    lecture = "lecture"
    laboratory = "laboratory"


# Only non-archived rows take part in the double-booking guard.
ACTIVE_SCHEDULE_PREDICATE = text("status != 'archived'")


class Schedule(Base):
    __tablename__ = "schedules"
    __table_args__ = (
        Index("ix_schedules_term", "semester", "academic_year"),
        Index(
            "uq_schedules_classroom_slot",
            "classroom_id",
            "day",
            "start_time",
            "semester",
            "academic_year",
            unique=True,
            sqlite_where=ACTIVE_SCHEDULE_PREDICATE,
            postgresql_where=ACTIVE_SCHEDULE_PREDICATE,
        ),
        Index(
            "uq_schedules_faculty_slot",
            "faculty_id",
            "day",
            "start_time",
            "semester",
            "academic_year",
            unique=True,
            sqlite_where=ACTIVE_SCHEDULE_PREDICATE,
            postgresql_where=ACTIVE_SCHEDULE_PREDICATE,
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    faculty_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    classroom_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    department_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    day: Mapped[str] = mapped_column(String(20), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    session_type: Mapped[SessionType] = mapped_column(
        SAEnum(SessionType, name="session_type"),
        nullable=False,
        default=SessionType.lecture,
    )
    semester: Mapped[str] = mapped_column(String(30), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    year_level: Mapped[str | None] = mapped_column(String(20), nullable=True)
    section: Mapped[str | None] = mapped_column(String(10), nullable=True)
    status: Mapped[ScheduleStatus] = mapped_column(
        SAEnum(ScheduleStatus, name="schedule_status"),
        nullable=False,
        default=ScheduleStatus.draft,
        index=True,
    )
    is_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
