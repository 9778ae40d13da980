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

class InvalidTimeFormat(SchedulerError):
    """Raised when a time value is malformed, off the time grid or outside the operating window."""
    def __init__(self, value: object, reason: str = "Invalid time format", field: str | None = None):
        details = {"value": value}
        if field is not None:
            details["field"] = field
        super().__init__(f"{reason}: {value!r}", details=details)
        self.value = value
        self.field = field

class InvalidWeekday(SchedulerError):
    """Raised when a day label is not one of the recognized weekdays."""
    def __init__(self, value: object, allowed: list[str]):
        super().__init__(
            f"Invalid day {value!r}. Must be one of: {', '.join(allowed)}",
            details={"value": value, "allowed": allowed},
        )
        self.value = value

class BatchValidationError(SchedulerError):
    """Raised when a submitted batch of sessions is rejected as a whole."""
    def __init__(
        self,
        message: str,
        code: str,
        indices: list[int] | None = None,
        field: str | None = None,
        resolutions: list[dict] | None = None,
    ):
        details: dict = {"code": code, "indices": list(indices or [])}
        if field is not None:
            details["field"] = field
        if resolutions:
            details["resolutions"] = list(resolutions)
        super().__init__(message, details=details)
        self.code = code
        self.indices = list(indices or [])

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
