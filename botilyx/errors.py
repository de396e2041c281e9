# botilyx/errors.py
class ValidationError(Exception):
    """Request data rejected at the API boundary."""

    status_code = 422

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field


class InvalidFrequency(ValidationError):
    def __init__(self, value):
        super().__init__(f"frequency_hours must be a positive integer, got {value!r}", field="frequency_hours")
        self.value = value


class InvalidDuration(ValidationError):
    def __init__(self, value):
        super().__init__(f"duration_days must be a non-negative integer, got {value!r}", field="duration_days")
        self.value = value
