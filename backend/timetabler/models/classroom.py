import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Integer, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from timetabler.db.base import Base


class ClassroomType(str, Enum):
    lecture = "lecture"
    laboratory = "laboratory"
    computer_lab = "computer-lab"
    conference = "conference"
    other = "other"


LAB_CLASSROOM_TYPES = frozenset({ClassroomType.laboratory, ClassroomType.computer_lab})


class ClassroomStatus(str, Enum):
    available = "available"
    maintenance = "maintenance"
    reserved = "reserved"


class Classroom(Base):
    __tablename__ = "classrooms"
    __table_args__ = (
        UniqueConstraint("room_number", "building", name="uq_classrooms_room_building"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    room_number: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    building: Mapped[str | None] = mapped_column(String(100), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    type: Mapped[ClassroomType] = mapped_column(
        SAEnum(ClassroomType, name="classroom_type", values_callable=lambda items: [item.value for item in items]),
        nullable=False,
        default=ClassroomType.lecture,
    )
    facilities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[ClassroomStatus] = mapped_column(
        SAEnum(ClassroomStatus, name="classroom_status"),
        nullable=False,
        default=ClassroomStatus.available,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def display_name(self) -> str:
        return f"{self.building} - {self.room_number}" if self.building else self.room_number
