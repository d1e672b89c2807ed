class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler encounters a logical error or invalid state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)

class ScheduleConflictError(AppError):
    """Raised when a schedule write is blocked by error-severity conflicts."""
    def __init__(self, message: str, conflicts: list[dict] | None = None):
        super().__init__(message, status_code=409, details={"conflicts": conflicts or []})

class GenerationInProgressError(AppError):
    """Raised when another writer already holds the term being scheduled."""
    def __init__(self, semester: str, academic_year: str):
        super().__init__(
            f"Schedules for {semester} {academic_year} are being modified by another run",
            status_code=409,
            details={"semester": semester, "academic_year": academic_year},
        )

class PlacementError(Exception):
    """A subject could not be placed; the reason is reported, the run continues."""
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
