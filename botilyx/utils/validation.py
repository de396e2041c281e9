# botilyx/utils/validation.py
from botilyx.errors import InvalidDuration, InvalidFrequency, ValidationError


def _as_int(value):
    # bool is an int subclass; "true" is never a dose interval
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(value)
        return int(value)
    return int(str(value).strip())


def validate_dosing(frequency_hours, duration_days):
    """
    Check and coerce a medication's dosing parameters.

    Returns (frequency_hours, duration_days) as ints. A zero duration is a
    valid (empty) schedule; a zero or negative frequency is not.
    """
    try:
        frequency = _as_int(frequency_hours)
    except (TypeError, ValueError):
        raise InvalidFrequency(frequency_hours)
    if frequency <= 0:
        raise InvalidFrequency(frequency_hours)

    try:
        duration = _as_int(duration_days)
    except (TypeError, ValueError):
        raise InvalidDuration(duration_days)
    if duration < 0:
        raise InvalidDuration(duration_days)

    return frequency, duration


def require_fields(data, fields):
    missing = [f for f in fields if data.get(f) in (None, "", [])]
    if missing:
        raise ValidationError(f"Missing fields: {missing}")


def optional_int(value, field):
    """Integer id from a request body; None and "" mean unset."""
    if value is None or value == "":
        return None
    try:
        return _as_int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer", field=field)


def as_bool(value, field):
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be a boolean", field=field)
    return value
