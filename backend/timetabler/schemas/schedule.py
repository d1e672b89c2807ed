from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from timetabler.models.schedule import ScheduleStatus, SessionType
from timetabler.schemas.common import (
    TIME_PATTERN,
    TimeSlotPayload,
    normalize_day,
    parse_time_to_minutes,
    validate_academic_year,
)
from timetabler.schemas.conflict import Conflict


class ScheduleCreate(TimeSlotPayload):
    subject_id: str = Field(min_length=1, max_length=36)
    faculty_id: str = Field(min_length=1, max_length=36)
    classroom_id: str = Field(min_length=1, max_length=36)
    department_id: str | None = Field(default=None, max_length=36)
    session_type: SessionType | None = None
    semester: str = Field(min_length=1, max_length=30)
    academic_year: str
    year_level: str | None = Field(default=None, max_length=20)
    section: str | None = Field(default=None, max_length=10)
    status: ScheduleStatus = ScheduleStatus.draft

    @field_validator("academic_year")
    @classmethod
    def check_academic_year(cls, value: str) -> str:
        return validate_academic_year(value)


class ScheduleUpdate(BaseModel):
    subject_id: str | None = Field(default=None, min_length=1, max_length=36)
    faculty_id: str | None = Field(default=None, min_length=1, max_length=36)
    classroom_id: str | None = Field(default=None, min_length=1, max_length=36)
    department_id: str | None = Field(default=None, max_length=36)
    day: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    session_type: SessionType | None = None
    year_level: str | None = Field(default=None, max_length=20)
    section: str | None = Field(default=None, max_length=10)
    status: ScheduleStatus | None = None

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str | None) -> str | None:
        return normalize_day(value) if value is not None else None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str | None) -> str | None:
        if value is not None and not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "ScheduleUpdate":
        if self.start_time and self.end_time:
            if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
                raise ValueError("end_time must be after start_time")
        return self


class ScheduleOut(BaseModel):
    id: str
    subject_id: str
    faculty_id: str
    classroom_id: str
    department_id: str
    day: str
    start_time: str
    end_time: str
    session_type: SessionType
    semester: str
    academic_year: str
    year_level: str | None = None
    section: str | None = None
    status: ScheduleStatus
    is_generated: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ScheduleWriteResponse(BaseModel):
    schedule: ScheduleOut
    warnings: list[Conflict] = Field(default_factory=list)


class PublishSchedulesRequest(BaseModel):
    schedule_ids: list[str] = Field(min_length=1, max_length=1000)


class TermRequest(BaseModel):
    semester: str = Field(min_length=1, max_length=30)
    academic_year: str

    @field_validator("academic_year")
    @classmethod
    def check_academic_year(cls, value: str) -> str:
        return validate_academic_year(value)


class BulkStatusResponse(BaseModel):
    updated: int
