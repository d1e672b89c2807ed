from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from timetabler.schemas.common import TimeSlotPayload, validate_academic_year


class ConflictType(str, Enum):
    faculty = "faculty"
    classroom = "classroom"
    workload = "workload"
    capacity = "capacity"


class ConflictSeverity(str, Enum):
    error = "error"
    warning = "warning"


class Conflict(BaseModel):
    type: ConflictType
    severity: ConflictSeverity
    message: str
    schedules: list[str] = Field(default_factory=list)
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_blocking(self) -> bool:
        return self.severity == ConflictSeverity.error


class ConflictCheckRequest(BaseModel):
    schedule_id: str | None = None
    subject_id: str | None = None
    faculty_id: str | None = None
    classroom_id: str | None = None
    time_slot: TimeSlotPayload
    semester: str = Field(min_length=1, max_length=30)
    academic_year: str

    @field_validator("academic_year")
    @classmethod
    def check_academic_year(cls, value: str) -> str:
        return validate_academic_year(value)


class ConflictCheckResponse(BaseModel):
    has_conflicts: bool
    has_errors: bool
    conflicts: list[Conflict]
