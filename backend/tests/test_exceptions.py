import pytest

from timetabler.core.exceptions import (
    AppError,
    GenerationInProgressError,
    PlacementError,
    ResourceNotFoundError,
    ScheduleConflictError,
    SchedulerError,
)
from timetabler.services.locks import TermLockRegistry


def test_scheduler_error_structure():
    err = SchedulerError(message="Test error", details={"foo": "bar"})
    assert err.status_code == 400
    assert err.message == "Test error"
    assert err.details == {"foo": "bar"}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_not_found_error():
    err = ResourceNotFoundError("Classroom", "room-1")
    assert err.status_code == 404
    assert err.message == "Classroom with id room-1 not found"
    assert err.details == {"resource_type": "Classroom", "resource_id": "room-1"}


def test_conflict_error_carries_conflicts():
    err = ScheduleConflictError("blocked", conflicts=[{"type": "faculty"}])
    assert err.status_code == 409
    assert err.details == {"conflicts": [{"type": "faculty"}]}
    assert ScheduleConflictError("blocked").details == {"conflicts": []}


def test_placement_error_is_not_an_app_error():
    err = PlacementError("No conflict-free time slot found")
    assert err.reason == "No conflict-free time slot found"
    assert not isinstance(err, AppError)


def test_term_lock_registry():
    locks = TermLockRegistry()

    with locks.hold("1st Semester", "2026-2027"):
        assert locks.is_locked("1st Semester", "2026-2027")
        assert not locks.is_locked("2nd Semester", "2026-2027")
        with pytest.raises(GenerationInProgressError) as excinfo:
            with locks.hold("1st Semester", "2026-2027", timeout=0.01):
                pass
        assert excinfo.value.status_code == 409

    assert not locks.is_locked("1st Semester", "2026-2027")


def test_conflict_error_response_shape(client):
    response = client.get("/api/schedules/unknown-id")
    assert response.status_code == 404
    assert set(response.json()) == {"message", "details"}
