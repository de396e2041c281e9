# botilyx/helpers.py
from datetime import datetime, timezone

from flask_jwt_extended import get_jwt_identity


def api_response(success, message, data=None, status_code=200):
    return {
        "success": success,
        "message": message,
        "data": data
    }, status_code


def utcnow() -> datetime:
    """Current instant as a naive UTC datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(value):
    """
    Normalize an incoming ISO-8601 string (or datetime) to naive UTC.
    Aware values are converted to UTC; naive values are taken as UTC already.
    Returns None for empty input and raises ValueError on garbage.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def isoformat(value):
    return value.isoformat() if value is not None else None


def current_user_id():
    return int(get_jwt_identity())
