# botilyx/utils/audit.py
"""
Audit history of user actions.

Entries are added to the current session and committed together with the
change they describe, so a rolled back request leaves no history behind.
"""
import re

from flask import has_request_context, request

from botilyx.extensions import db
from botilyx.models import AuditLog

_MOBILE = re.compile(r"Mobile|Android|iPhone|iPad", re.IGNORECASE)


class AuditAction:
    LOGIN = "login"
    LOGIN_FAILED = "login_failed"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ARCHIVE = "archive"
    UNARCHIVE = "unarchive"


class AuditEntity:
    USER = "user"
    SESSION = "session"
    MEDICATION = "medication"
    TREATMENT = "treatment"
    SHOPPING_LIST = "shopping_list"


def request_metadata():
    """Client ip, user agent and a coarse device class of the current request."""
    if not has_request_context():
        return {}
    forwarded = request.headers.get("X-Forwarded-For")
    ip = (forwarded.split(",")[0].strip() if forwarded else None) \
        or request.headers.get("X-Real-IP") or request.remote_addr
    user_agent = (request.headers.get("User-Agent") or "")[:500]
    return {
        "ip_address": ip,
        "user_agent": user_agent,
        "device": "mobile" if _MOBILE.search(user_agent) else "desktop",
    }


def record_action(user_id, action, entity_type, entity_id=None, before=None, after=None):
    entry = AuditLog(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        previous_data=before,
        new_data=after,
        **request_metadata(),
    )
    db.session.add(entry)
    return entry
