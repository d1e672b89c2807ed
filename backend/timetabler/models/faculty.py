import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from timetabler.db.base import Base


class EmploymentType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"


class FacultyStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class Faculty(Base):
    __tablename__ = "faculty"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, index=True, nullable=True)
    department_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    employment_type: Mapped[EmploymentType] = mapped_column(
        SAEnum(EmploymentType, name="employment_type", values_callable=lambda items: [item.value for item in items]),
        nullable=False,
        default=EmploymentType.full_time,
    )
    min_load: Mapped[float] = mapped_column(Float, nullable=False, default=18)
    max_load: Mapped[float] = mapped_column(Float, nullable=False, default=26)
    current_load: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    max_preparations: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    current_preparations: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[FacultyStatus] = mapped_column(
        SAEnum(FacultyStatus, name="faculty_status"),
        nullable=False,
        default=FacultyStatus.active,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
