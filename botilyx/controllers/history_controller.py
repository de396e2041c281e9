from flask import jsonify, request
from flask_jwt_extended import jwt_required

from botilyx.errors import ValidationError
from botilyx.extensions import db
from botilyx.helpers import current_user_id, parse_datetime
from botilyx.models import AuditLog, User
from botilyx.utils.access import group_user_ids
from botilyx.utils.validation import optional_int

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _date_arg(name):
    try:
        return parse_datetime(request.args.get(name))
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 date", field=name)


def _positive_arg(name, default):
    value = optional_int(request.args.get(name), name)
    if value is None:
        return default
    if value < 1:
        raise ValidationError(f"{name} must be at least 1", field=name)
    return value


@jwt_required()
def list_history():
    """
    Audit entries of the caller's family group, newest first.

    Query args: user_id, action, entity_type, date_from, date_to, page, limit.
    """
    query = AuditLog.query.filter(AuditLog.user_id.in_(group_user_ids(current_user_id())))

    user_id = optional_int(request.args.get("user_id"), "user_id")
    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)
    if request.args.get("action"):
        query = query.filter(AuditLog.action == request.args["action"])
    if request.args.get("entity_type"):
        query = query.filter(AuditLog.entity_type == request.args["entity_type"])

    date_from, date_to = _date_arg("date_from"), _date_arg("date_to")
    if date_from:
        query = query.filter(AuditLog.created_at >= date_from)
    if date_to:
        query = query.filter(AuditLog.created_at <= date_to)

    page = _positive_arg("page", 1)
    limit = min(_positive_arg("limit", DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)
    result = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .paginate(page=page, per_page=limit, error_out=False)
    )

    return jsonify({
        "success": True,
        "history": [entry.to_dict() for entry in result.items],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": result.total,
            "total_pages": result.pages,
            "has_next_page": result.has_next,
            "has_prev_page": result.has_prev,
        },
    }), 200


@jwt_required()
def history_filters():
    """Values the history can currently be filtered by."""
    user_ids = group_user_ids(current_user_id())
    users = User.query.filter(User.id.in_(user_ids)).order_by(User.first_name.asc()).all()
    scoped = AuditLog.user_id.in_(user_ids)
    actions = db.session.query(AuditLog.action).filter(scoped).distinct().order_by(AuditLog.action).all()
    entities = db.session.query(AuditLog.entity_type).filter(scoped).distinct().order_by(AuditLog.entity_type).all()

    return jsonify({
        "success": True,
        "users": [{"id": u.id, "name": u.full_name, "email": u.email} for u in users],
        "actions": [a for (a,) in actions],
        "entity_types": [e for (e,) in entities],
    }), 200
