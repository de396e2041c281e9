from datetime import timedelta
from flask import current_app, jsonify, request
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import SQLAlchemyError

from botilyx.errors import ValidationError
from botilyx.extensions import db
from botilyx.helpers import current_user_id, parse_datetime, utcnow
from botilyx.models import (
    Medication,
    Notification,
    NotificationPreferences,
    Treatment,
    TreatmentImage,
    TreatmentMedication,
)
from botilyx.utils.access import get_owned, group_user_ids
from botilyx.utils.audit import AuditAction, AuditEntity, record_action
from botilyx.utils.scheduling import build_reminder_notifications, generate_dose_timestamps
from botilyx.utils.validation import optional_int, require_fields, validate_dosing

PATIENT_TYPES = ("user", "profile")
IMAGE_TYPES = ("prescription", "instructions")


def _parse_medication_items(items, user_id, now):
    """Validate the medications block of a treatment request."""
    if not isinstance(items, list) or not items:
        raise ValidationError("medications must be a non-empty list", field="medications")

    allowed_owners = group_user_ids(user_id)
    parsed = []
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("Each medication must be an object", field="medications")
        require_fields(item, ["medication_id", "dosage", "frequency_hours", "duration_days"])
        frequency, duration = validate_dosing(item["frequency_hours"], item["duration_days"])

        try:
            medication = db.session.get(Medication, int(item["medication_id"]))
        except (TypeError, ValueError):
            medication = None
        if medication is None or medication.user_id not in allowed_owners:
            raise ValidationError(f"Medication not found: {item['medication_id']}", field="medication_id")

        specific = item.get("start_option") == "specific" and item.get("specific_date")
        if specific:
            try:
                start = parse_datetime(item["specific_date"])
            except ValueError:
                raise ValidationError("specific_date must be an ISO-8601 datetime", field="specific_date")
        else:
            start = now

        parsed.append({
            "medication_id": medication.id,
            "dosage": str(item["dosage"]).strip(),
            "frequency_hours": frequency,
            "duration_days": duration,
            "start_date": start,
            "end_date": start + timedelta(days=duration),
            "start_at_specific_time": bool(specific),
            "specific_start_time": start if specific else None,
        })
    return parsed


def _validate_patient_type(value):
    if value not in (None, "") and value not in PATIENT_TYPES:
        raise ValidationError(f"patient_type must be one of {list(PATIENT_TYPES)}", field="patient_type")
    return value or None


def _attach_medications(treatment, parsed):
    treatment.medications = [TreatmentMedication(**p) for p in parsed]
    treatment.start_date = min(p["start_date"] for p in parsed)
    treatment.end_date = max(p["end_date"] for p in parsed)


def _schedule_reminders(treatment, not_before=None):
    """Create the reminder set of a treatment, optionally skipping reminders already past."""
    preferences = NotificationPreferences.get_or_create(treatment.user_id, commit=False)
    db.session.flush()  # ids for the treatment and its medications

    created = 0
    for item in treatment.medications:
        if not item.is_active:
            continue
        doses = generate_dose_timestamps(item.start_date, item.duration_days, item.frequency_hours)
        for record in build_reminder_notifications(treatment.id, preferences, doses):
            if not_before is not None and record["scheduled_date"] < not_before:
                continue
            treatment.notifications.append(Notification(treatment_medication_id=item.id, **record))
            created += 1
    return created


def _clear_notifications(treatment, pending_only=False):
    removed = 0
    for notification in list(treatment.notifications):
        if pending_only and notification.sent:
            continue
        # delete-orphan removes persisted rows and expunges pending ones
        treatment.notifications.remove(notification)
        removed += 1
    db.session.flush()
    return removed


@jwt_required()
def list_treatments():
    user_id = current_user_id()
    query = Treatment.query.filter(Treatment.user_id.in_(group_user_ids(user_id)))

    active = request.args.get("active")
    if active is not None:
        query = query.filter(Treatment.is_active.is_(active.lower() == "true"))

    treatments = query.order_by(Treatment.start_date.desc()).all()
    return jsonify({"success": True, "treatments": [t.to_dict() for t in treatments]}), 200


@jwt_required()
def get_treatment(treatment_id):
    treatment = get_owned(Treatment, treatment_id, current_user_id())
    if not treatment:
        return jsonify({"success": False, "message": "Treatment not found"}), 404
    return jsonify({"success": True, "treatment": treatment.to_dict(include_notifications=True)}), 200


@jwt_required()
def create_treatment():
    user_id = current_user_id()
    data = request.get_json() or {}

    require_fields(data, ["name", "patient", "medications"])
    parsed = _parse_medication_items(data["medications"], user_id, utcnow().replace(microsecond=0))

    treatment = Treatment(
        user_id=user_id,
        name=str(data["name"]).strip(),
        patient=str(data["patient"]).strip(),
        patient_id=optional_int(data.get("patient_id"), "patient_id"),
        patient_type=_validate_patient_type(data.get("patient_type")),
        symptoms=data.get("symptoms"),
        is_active=True,
    )
    _attach_medications(treatment, parsed)

    for image in data.get("images") or []:
        treatment.images.append(_build_image(image))

    try:
        db.session.add(treatment)
        created = _schedule_reminders(treatment)
        record_action(user_id, AuditAction.CREATE, AuditEntity.TREATMENT, treatment.id, after=treatment.to_dict())
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating treatment for user {user_id}: {e}")
        return jsonify({"success": False, "message": "Error creating treatment"}), 500

    current_app.logger.info(f"Treatment {treatment.id} created with {created} reminders")
    return jsonify({
        "success": True,
        "message": "Treatment created",
        "treatment": treatment.to_dict(),
        "notifications_created": created,
    }), 201


@jwt_required()
def update_treatment(treatment_id):
    user_id = current_user_id()
    treatment = get_owned(Treatment, treatment_id, user_id)
    if not treatment:
        return jsonify({"success": False, "message": "Treatment not found"}), 404

    data = request.get_json() or {}
    before = treatment.to_dict()

    for field in ("name", "patient"):
        if field in data:
            value = str(data.get(field) or "").strip()
            if not value:
                raise ValidationError(f"{field} cannot be empty", field=field)
            setattr(treatment, field, value)
    if "patient_type" in data:
        treatment.patient_type = _validate_patient_type(data.get("patient_type"))
    if "patient_id" in data:
        treatment.patient_id = optional_int(data.get("patient_id"), "patient_id")
    if "symptoms" in data:
        treatment.symptoms = data.get("symptoms")

    regenerated = None
    deactivate = data.get("is_active") is False and treatment.is_active
    reactivate = data.get("is_active") is True and not treatment.is_active
    try:
        if "medications" in data:
            parsed = _parse_medication_items(data["medications"], user_id, utcnow().replace(microsecond=0))
            _clear_notifications(treatment)
            treatment.medications.clear()
            db.session.flush()
            _attach_medications(treatment, parsed)
            if treatment.is_active and not deactivate:
                regenerated = _schedule_reminders(treatment)

        if deactivate:
            treatment.is_active = False
            _clear_notifications(treatment, pending_only=True)
        elif reactivate:
            treatment.is_active = True
            for item in treatment.medications:
                item.is_active = True
            _clear_notifications(treatment, pending_only=True)
            regenerated = _schedule_reminders(treatment, not_before=utcnow())

        record_action(user_id, AuditAction.UPDATE, AuditEntity.TREATMENT, treatment.id,
                      before=before, after=treatment.to_dict())
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating treatment {treatment_id}: {e}")
        return jsonify({"success": False, "message": "Error updating treatment"}), 500

    body = {"success": True, "message": "Treatment updated", "treatment": treatment.to_dict()}
    if regenerated is not None:
        body["notifications_created"] = regenerated
    return jsonify(body), 200


@jwt_required()
def delete_treatment(treatment_id):
    user_id = current_user_id()
    treatment = get_owned(Treatment, treatment_id, user_id)
    if not treatment:
        return jsonify({"success": False, "message": "Treatment not found"}), 404

    record_action(user_id, AuditAction.DELETE, AuditEntity.TREATMENT, treatment.id, before=treatment.to_dict())
    db.session.delete(treatment)
    db.session.commit()
    current_app.logger.info(f"Treatment {treatment_id} deleted")
    return jsonify({"success": True, "message": "Treatment deleted"}), 200


@jwt_required()
def finish_treatment(treatment_id):
    user_id = current_user_id()
    treatment = get_owned(Treatment, treatment_id, user_id)
    if not treatment:
        return jsonify({"success": False, "message": "Treatment not found"}), 404

    before = treatment.to_dict()
    treatment.is_active = False
    for item in treatment.medications:
        item.is_active = False
    removed = _clear_notifications(treatment, pending_only=True)
    record_action(user_id, AuditAction.UPDATE, AuditEntity.TREATMENT, treatment.id,
                  before=before, after=treatment.to_dict())
    db.session.commit()

    return jsonify({
        "success": True,
        "message": "Treatment finished",
        "treatment": treatment.to_dict(),
        "notifications_removed": removed,
    }), 200


@jwt_required()
def list_treatment_notifications(treatment_id):
    treatment = get_owned(Treatment, treatment_id, current_user_id())
    if not treatment:
        return jsonify({"success": False, "message": "Treatment not found"}), 404

    notifications = (
        Notification.query.filter_by(treatment_id=treatment.id)
        .order_by(Notification.scheduled_date.asc(), Notification.id.asc())
        .all()
    )
    return jsonify({"success": True, "notifications": [n.to_dict() for n in notifications]}), 200


def _build_image(data):
    if not isinstance(data, dict):
        raise ValidationError("Each image must be an object", field="images")
    image_type = data.get("image_type")
    if image_type not in IMAGE_TYPES:
        raise ValidationError(f"image_type must be one of {list(IMAGE_TYPES)}", field="image_type")
    return TreatmentImage(
        image_url=data.get("image_url") or "",
        image_type=image_type,
        extracted_text=data.get("extracted_text"),
        ai_analysis=data.get("ai_analysis"),
    )


@jwt_required()
def add_treatment_images(treatment_id):
    treatment = get_owned(Treatment, treatment_id, current_user_id())
    if not treatment:
        return jsonify({"success": False, "message": "Treatment not found"}), 404

    data = request.get_json() or {}
    images = data.get("images")
    if not isinstance(images, list) or not images:
        return jsonify({"success": False, "message": "images must be a non-empty list"}), 400

    created = [_build_image(image) for image in images]
    treatment.images.extend(created)
    db.session.commit()

    return jsonify({"success": True, "message": "Images added", "images": [i.to_dict() for i in created]}), 201
