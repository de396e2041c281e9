from datetime import date
from flask import current_app, jsonify, request
from flask_jwt_extended import jwt_required

from botilyx.errors import ValidationError
from botilyx.extensions import db
from botilyx.helpers import current_user_id, utcnow
from botilyx.models import Medication, NotificationSettings, TreatmentMedication
from botilyx.services.image_analysis import (
    ImageAnalysisError,
    ImageAnalysisUnavailable,
    analyze_medication_image,
)
from botilyx.utils.access import get_owned, group_user_ids
from botilyx.utils.audit import AuditAction, AuditEntity, record_action
from botilyx.utils.inventory import build_inventory_alerts
from botilyx.utils.validation import require_fields

TEXT_FIELDS = ("commercial_name", "active_ingredient", "description", "intake_recommendations", "image_url", "unit")


def _non_negative_int(value, field):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer", field=field)
    if number < 0:
        raise ValidationError(f"{field} cannot be negative", field=field)
    return number


def _parse_date(value, field):
    if value in (None, ""):
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"{field} must be YYYY-MM-DD", field=field)


def _apply_fields(medication, data):
    for field in TEXT_FIELDS:
        if field in data:
            value = data.get(field)
            setattr(medication, field, value.strip() if isinstance(value, str) else value)
    if "initial_quantity" in data:
        medication.initial_quantity = _non_negative_int(data["initial_quantity"], "initial_quantity")
    if "current_quantity" in data:
        medication.current_quantity = _non_negative_int(data["current_quantity"], "current_quantity")
    if "expiration_date" in data:
        medication.expiration_date = _parse_date(data["expiration_date"], "expiration_date")
    if "archived" in data:
        medication.archived = bool(data["archived"])


@jwt_required()
def list_medications():
    archived = (request.args.get("archived") or "false").lower() == "true"
    medications = (
        Medication.query
        .filter(Medication.user_id.in_(group_user_ids(current_user_id())), Medication.archived.is_(archived))
        .order_by(Medication.commercial_name.asc())
        .all()
    )
    return jsonify({"success": True, "medications": [m.to_dict() for m in medications]}), 200


@jwt_required()
def create_medication():
    user_id = current_user_id()
    data = request.get_json() or {}
    require_fields(data, ["commercial_name", "initial_quantity", "unit"])

    medication = Medication(user_id=user_id)
    _apply_fields(medication, data)
    if "current_quantity" not in data:
        medication.current_quantity = medication.initial_quantity
    if not medication.commercial_name:
        raise ValidationError("commercial_name cannot be empty", field="commercial_name")

    db.session.add(medication)
    db.session.flush()
    record_action(user_id, AuditAction.CREATE, AuditEntity.MEDICATION, medication.id, after=medication.to_dict())
    db.session.commit()
    return jsonify({"success": True, "message": "Medication created", "medication": medication.to_dict()}), 201


@jwt_required()
def get_medication(medication_id):
    medication = get_owned(Medication, medication_id, current_user_id())
    if not medication:
        return jsonify({"success": False, "message": "Medication not found"}), 404
    return jsonify({"success": True, "medication": medication.to_dict()}), 200


@jwt_required()
def update_medication(medication_id):
    user_id = current_user_id()
    medication = get_owned(Medication, medication_id, user_id)
    if not medication:
        return jsonify({"success": False, "message": "Medication not found"}), 404

    before = medication.to_dict()
    _apply_fields(medication, request.get_json() or {})
    if not medication.commercial_name:
        raise ValidationError("commercial_name cannot be empty", field="commercial_name")
    record_action(user_id, AuditAction.UPDATE, AuditEntity.MEDICATION, medication.id,
                  before=before, after=medication.to_dict())
    db.session.commit()
    return jsonify({"success": True, "message": "Medication updated", "medication": medication.to_dict()}), 200


@jwt_required()
def delete_medication(medication_id):
    user_id = current_user_id()
    medication = get_owned(Medication, medication_id, user_id)
    if not medication:
        return jsonify({"success": False, "message": "Medication not found"}), 404

    in_use = TreatmentMedication.query.filter_by(medication_id=medication.id).first()
    if in_use:
        return jsonify({"success": False, "message": "Medication is used by a treatment; archive it instead"}), 409

    record_action(user_id, AuditAction.DELETE, AuditEntity.MEDICATION, medication.id, before=medication.to_dict())
    db.session.delete(medication)
    db.session.commit()
    return jsonify({"success": True, "message": "Medication deleted"}), 200


def _set_archived(medication_id, archived):
    user_id = current_user_id()
    medication = get_owned(Medication, medication_id, user_id)
    if not medication:
        return jsonify({"success": False, "message": "Medication not found"}), 404
    medication.archived = archived
    action = AuditAction.ARCHIVE if archived else AuditAction.UNARCHIVE
    record_action(user_id, action, AuditEntity.MEDICATION, medication.id)
    db.session.commit()
    message = "Medication archived" if archived else "Medication restored"
    return jsonify({"success": True, "message": message, "medication": medication.to_dict()}), 200


@jwt_required()
def archive_medication(medication_id):
    return _set_archived(medication_id, True)


@jwt_required()
def unarchive_medication(medication_id):
    return _set_archived(medication_id, False)


@jwt_required()
def consume_medication(medication_id):
    medication = get_owned(Medication, medication_id, current_user_id())
    if not medication:
        return jsonify({"success": False, "message": "Medication not found"}), 404

    data = request.get_json(silent=True) or {}
    amount = _non_negative_int(data.get("amount", 1), "amount")
    if amount == 0:
        raise ValidationError("amount must be positive", field="amount")
    if medication.current_quantity < amount:
        return jsonify({"success": False, "message": "Not enough stock"}), 409

    medication.current_quantity -= amount
    db.session.commit()
    return jsonify({"success": True, "message": "Stock updated", "medication": medication.to_dict()}), 200


@jwt_required()
def get_alerts():
    user_id = current_user_id()
    settings = NotificationSettings.get_or_create(user_id)
    medications = Medication.query.filter(
        Medication.user_id.in_(group_user_ids(user_id)), Medication.archived.is_(False)
    ).all()

    alerts = build_inventory_alerts(
        medications,
        settings.days_before_expiration,
        settings.low_stock_threshold,
        utcnow().date(),
    )
    return jsonify({"success": True, "alerts": alerts}), 200


@jwt_required()
def get_settings():
    settings = NotificationSettings.get_or_create(current_user_id())
    return jsonify({"success": True, "settings": settings.to_dict()}), 200


@jwt_required()
def update_settings():
    settings = NotificationSettings.get_or_create(current_user_id())
    data = request.get_json() or {}
    for field in ("days_before_expiration", "low_stock_threshold"):
        if field in data:
            setattr(settings, field, _non_negative_int(data[field], field))
    db.session.commit()
    return jsonify({"success": True, "message": "Settings updated", "settings": settings.to_dict()}), 200


@jwt_required()
def analyze_image():
    upload = request.files.get("image")
    if upload is None or not upload.filename:
        return jsonify({"success": False, "message": "An image file is required"}), 400

    image_bytes = upload.read()
    if not image_bytes:
        return jsonify({"success": False, "message": "Empty image"}), 400
    if len(image_bytes) > current_app.config["UPLOAD_MAX_BYTES"]:
        return jsonify({"success": False, "message": "Image too large"}), 413

    try:
        result = analyze_medication_image(
            image_bytes,
            current_app.config.get("GOOGLE_API_KEY"),
            current_app.config["VISION_MODEL"],
        )
    except ImageAnalysisUnavailable as e:
        return jsonify({"success": False, "message": str(e)}), 503
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400
    except ImageAnalysisError as e:
        current_app.logger.error(f"Image analysis failed: {e}")
        return jsonify({"success": False, "message": "Could not read the medication from the image"}), 502

    return jsonify({"success": True, "analysis": result}), 200
