from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from timetabler.api.deps import (
    get_repositories,
    get_schedule_generator,
    get_schedule_service,
    get_workload_calculator,
)
from timetabler.core.exceptions import ResourceNotFoundError, SchedulerError
from timetabler.models.schedule import ScheduleStatus
from timetabler.schemas.common import ACADEMIC_YEAR_PATTERN, normalize_day
from timetabler.schemas.conflict import ConflictCheckRequest, ConflictCheckResponse
from timetabler.schemas.generator import GenerateScheduleRequest, GenerationResult
from timetabler.schemas.schedule import (
    BulkStatusResponse,
    PublishSchedulesRequest,
    ScheduleCreate,
    ScheduleOut,
    ScheduleUpdate,
    ScheduleWriteResponse,
    TermRequest,
)
from timetabler.schemas.workload import DepartmentWorkloadReport, FacultyWorkloadReport
from timetabler.services.generator import ScheduleGenerator
from timetabler.services.ports import ScheduleFilter
from timetabler.services.repositories import Repositories
from timetabler.services.schedule_service import ScheduleService
from timetabler.services.workload import WorkloadCalculator

router = APIRouter()

ACADEMIC_YEAR_QUERY = ACADEMIC_YEAR_PATTERN.pattern


@router.get("/", response_model=list[ScheduleOut])
def list_schedules(
    semester: str | None = Query(default=None, max_length=30),
    academic_year: str | None = Query(default=None, pattern=ACADEMIC_YEAR_QUERY),
    day: str | None = None,
    faculty_id: str | None = None,
    classroom_id: str | None = None,
    subject_id: str | None = None,
    department_id: str | None = None,
    schedule_status: ScheduleStatus | None = Query(default=None, alias="status"),
    include_archived: bool = False,
    service: ScheduleService = Depends(get_schedule_service),
) -> list[ScheduleOut]:
    if day:
        try:
            day = normalize_day(day)
        except ValueError as exc:
            raise SchedulerError(str(exc), details={"day": day}) from exc
    schedule_filter = ScheduleFilter(
        semester=semester,
        academic_year=academic_year,
        day=day or None,
        faculty_id=faculty_id,
        classroom_id=classroom_id,
        subject_id=subject_id,
        department_id=department_id,
        status=schedule_status,
        include_archived=include_archived,
    )
    return service.list_schedules(schedule_filter)


@router.post("/", response_model=ScheduleWriteResponse, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleWriteResponse:
    schedule, warnings = service.create_schedule(payload)
    return ScheduleWriteResponse(schedule=ScheduleOut.model_validate(schedule), warnings=warnings)


@router.post("/conflicts", response_model=ConflictCheckResponse)
def check_conflicts(
    payload: ConflictCheckRequest,
    service: ScheduleService = Depends(get_schedule_service),
) -> ConflictCheckResponse:
    conflicts = service.detect_conflicts(payload)
    return ConflictCheckResponse(
        has_conflicts=bool(conflicts),
        has_errors=any(item.is_blocking for item in conflicts),
        conflicts=conflicts,
    )


@router.post("/generate", response_model=GenerationResult)
def generate_schedules(
    payload: GenerateScheduleRequest,
    generator: ScheduleGenerator = Depends(get_schedule_generator),
) -> GenerationResult:
    return generator.generate(payload)


@router.post("/publish", response_model=BulkStatusResponse)
def publish_schedules(
    payload: PublishSchedulesRequest,
    service: ScheduleService = Depends(get_schedule_service),
) -> BulkStatusResponse:
    return BulkStatusResponse(updated=service.publish_schedules(payload.schedule_ids))


@router.post("/archive", response_model=BulkStatusResponse)
def archive_term(
    payload: TermRequest,
    service: ScheduleService = Depends(get_schedule_service),
) -> BulkStatusResponse:
    return BulkStatusResponse(updated=service.archive_term(payload.semester, payload.academic_year))


@router.get("/workload/faculty/{faculty_id}", response_model=FacultyWorkloadReport)
def faculty_workload(
    faculty_id: str,
    semester: str = Query(min_length=1, max_length=30),
    academic_year: str = Query(pattern=ACADEMIC_YEAR_QUERY),
    repos: Repositories = Depends(get_repositories),
    calculator: WorkloadCalculator = Depends(get_workload_calculator),
) -> FacultyWorkloadReport:
    if repos.faculty.get(faculty_id) is None:
        raise ResourceNotFoundError("Faculty", faculty_id)
    return calculator.calculate_faculty_workload(faculty_id, semester, academic_year)


@router.get("/workload/department/{department_id}", response_model=DepartmentWorkloadReport)
def department_workload(
    department_id: str,
    semester: str = Query(min_length=1, max_length=30),
    academic_year: str = Query(pattern=ACADEMIC_YEAR_QUERY),
    repos: Repositories = Depends(get_repositories),
    calculator: WorkloadCalculator = Depends(get_workload_calculator),
) -> DepartmentWorkloadReport:
    if repos.departments.get(department_id) is None:
        raise ResourceNotFoundError("Department", department_id)
    return calculator.calculate_department_workload(department_id, semester, academic_year)


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_schedule(
    schedule_id: str,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleOut:
    return service.get_schedule(schedule_id)


@router.put("/{schedule_id}", response_model=ScheduleWriteResponse)
def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdate,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleWriteResponse:
    schedule, warnings = service.update_schedule(schedule_id, payload)
    return ScheduleWriteResponse(schedule=ScheduleOut.model_validate(schedule), warnings=warnings)
