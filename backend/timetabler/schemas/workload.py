from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from timetabler.models.schedule import SessionType


class WorkloadStatus(str, Enum):
    underloaded = "underloaded"
    optimal = "optimal"
    overloaded = "overloaded"


class SubjectWorkloadLine(BaseModel):
    schedule_id: str
    subject_id: str
    subject_code: str
    subject_name: str
    session_type: SessionType
    units: float
    teaching_hours: float


class FacultyWorkloadReport(BaseModel):
    faculty_id: str
    faculty_name: str
    semester: str
    academic_year: str
    total_teaching_hours: float
    lecture_hours: float
    lab_hours: float
    total_units: float
    lecture_units: float
    lab_units: float
    preparations: int
    schedule_count: int
    min_load: float
    max_load: float
    status: WorkloadStatus
    subject_breakdown: list[SubjectWorkloadLine]


class DepartmentWorkloadReport(BaseModel):
    department_id: str
    semester: str
    academic_year: str
    faculty: list[FacultyWorkloadReport]
