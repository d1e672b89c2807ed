import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from timetabler.db.base import Base


class Subject(Base):
    __tablename__ = "subjects"
    __table_args__ = (
        UniqueConstraint("course_id", "code", name="uq_subjects_course_code"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    lecture_units: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    lab_units: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    course_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    department_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    year_level: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    semester: Mapped[str | None] = mapped_column(String(30), nullable=True, index=True)
    is_laboratory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    prerequisite_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def units(self) -> float:
        return (self.lecture_units or 0) + (self.lab_units or 0)
