from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from timetabler.schemas.common import normalize_day, validate_academic_year
from timetabler.schemas.schedule import ScheduleOut


class ScheduleConstraints(BaseModel):
    max_hours_per_week: float | None = Field(default=None, gt=0)
    min_hours_per_week: float | None = Field(default=None, ge=0)
    max_preparations: int | None = Field(default=None, ge=1)
    minimum_capacity: int = Field(default=30, ge=1)
    required_facilities: list[str] = Field(default_factory=list)
    allowed_days: list[str] | None = None

    @field_validator("required_facilities")
    @classmethod
    def strip_facilities(cls, value: list[str]) -> list[str]:
        return [item.strip() for item in value if item.strip()]

    @field_validator("allowed_days")
    @classmethod
    def normalize_days(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return list(dict.fromkeys(normalize_day(item) for item in value))

    @model_validator(mode="after")
    def validate_hour_bounds(self) -> "ScheduleConstraints":
        if (
            self.min_hours_per_week is not None
            and self.max_hours_per_week is not None
            and self.min_hours_per_week > self.max_hours_per_week
        ):
            raise ValueError("min_hours_per_week cannot exceed max_hours_per_week")
        return self


class GenerateScheduleRequest(BaseModel):
    semester: str = Field(min_length=1, max_length=30)
    academic_year: str
    departments: list[str] = Field(default_factory=list)
    courses: list[str] = Field(default_factory=list)
    subjects: list[str] = Field(default_factory=list)
    constraints: ScheduleConstraints = Field(default_factory=ScheduleConstraints)
    overwrite_existing: bool = False

    @field_validator("semester")
    @classmethod
    def strip_semester(cls, value: str) -> str:
        return value.strip()

    @field_validator("academic_year")
    @classmethod
    def check_academic_year(cls, value: str) -> str:
        return validate_academic_year(value)


class FailedSubject(BaseModel):
    subject_id: str
    subject_code: str
    subject_name: str
    reason: str


class ClassroomUtilization(BaseModel):
    classroom_id: str
    classroom: str
    building: str | None = None
    utilization: float


class GenerationStatistics(BaseModel):
    total_generated: int = 0
    total_subjects: int = 0
    by_department: dict[str, int] = Field(default_factory=dict)
    by_faculty: dict[str, int] = Field(default_factory=dict)
    by_classroom: dict[str, int] = Field(default_factory=dict)
    utilization_rates: list[ClassroomUtilization] = Field(default_factory=list)
    average_utilization: float = 0.0
    underloaded_faculty: list[str] = Field(default_factory=list)
    runtime_ms: float = 0.0


class GenerationResult(BaseModel):
    success: bool
    message: str
    generated: list[ScheduleOut] = Field(default_factory=list)
    failed_subjects: list[FailedSubject] = Field(default_factory=list)
    statistics: GenerationStatistics = Field(default_factory=GenerationStatistics)
    cancelled: bool = False
    error: str | None = None
