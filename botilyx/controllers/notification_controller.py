import hmac
from flask import current_app, jsonify, request
from flask_jwt_extended import jwt_required

from botilyx.extensions import db
from botilyx.helpers import current_user_id, utcnow
from botilyx.models import Notification, NotificationPreferences, PushSubscription, Treatment
from botilyx.services.notification_dispatcher import process_due_notifications
from botilyx.utils.scheduling import CHANNELS
from botilyx.utils.validation import as_bool


@jwt_required()
def get_preferences():
    prefs = NotificationPreferences.get_or_create(current_user_id())
    return jsonify({"success": True, "preferences": prefs.to_dict()}), 200


@jwt_required()
def update_preferences():
    data = request.get_json() or {}
    updates = {c: as_bool(data[c], c) for c in CHANNELS if c in data}

    prefs = NotificationPreferences.get_or_create(current_user_id(), commit=False)
    for channel, enabled in updates.items():
        setattr(prefs, channel, enabled)
    db.session.commit()

    return jsonify({"success": True, "message": "Preferences saved", "preferences": prefs.to_dict()}), 200


@jwt_required()
def list_notifications():
    query = (
        Notification.query.join(Treatment)
        .filter(Treatment.user_id == current_user_id())
    )
    if (request.args.get("pending") or "").lower() == "true":
        query = query.filter(Notification.sent.is_(False), Notification.scheduled_date <= utcnow())

    notifications = query.order_by(Notification.scheduled_date.asc(), Notification.id.asc()).all()
    return jsonify({"success": True, "notifications": [n.to_dict() for n in notifications]}), 200


@jwt_required()
def subscribe():
    user_id = current_user_id()
    data = request.get_json() or {}
    subscription = data.get("subscription") or {}
    keys = subscription.get("keys") or {}

    endpoint = subscription.get("endpoint")
    if not endpoint or not keys.get("p256dh") or not keys.get("auth"):
        return jsonify({"success": False, "message": "subscription with endpoint and keys is required"}), 400

    existing = PushSubscription.query.filter_by(user_id=user_id, endpoint=endpoint).first()
    if existing:
        existing.p256dh_key = keys["p256dh"]
        existing.auth_key = keys["auth"]
        db.session.commit()
        return jsonify({"success": True, "message": "Subscription updated"}), 200

    db.session.add(PushSubscription(
        user_id=user_id,
        endpoint=endpoint,
        p256dh_key=keys["p256dh"],
        auth_key=keys["auth"],
    ))
    db.session.commit()
    current_app.logger.info(f"Push subscription stored for user {user_id}")
    return jsonify({"success": True, "message": "Subscription created"}), 201


@jwt_required()
def unsubscribe():
    data = request.get_json() or {}
    endpoint = data.get("endpoint")
    if not endpoint:
        return jsonify({"success": False, "message": "endpoint is required"}), 400

    removed = PushSubscription.query.filter_by(user_id=current_user_id(), endpoint=endpoint).delete()
    db.session.commit()
    if not removed:
        return jsonify({"success": False, "message": "Subscription not found"}), 404
    return jsonify({"success": True, "message": "Subscription removed"}), 200


def vapid_public_key():
    key = current_app.config.get("VAPID_PUBLIC_KEY")
    if not key:
        return jsonify({"success": False, "message": "Push notifications are not configured"}), 503
    return jsonify({"success": True, "public_key": key}), 200


def process_notifications():
    """Called by a scheduler with `Authorization: Bearer <NOTIFICATION_PROCESSOR_SECRET>`."""
    secret = current_app.config.get("NOTIFICATION_PROCESSOR_SECRET")
    header = request.headers.get("Authorization", "")
    if not secret or not hmac.compare_digest(header, f"Bearer {secret}"):
        return jsonify({"success": False, "message": "Unauthorized"}), 401

    summary = process_due_notifications()
    return jsonify({"success": True, "message": "Processing complete", **summary}), 200
