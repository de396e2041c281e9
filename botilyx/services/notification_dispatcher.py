# botilyx/services/notification_dispatcher.py
"""
Delivery of due reminders.

Reads unsent Notification rows whose scheduled_date has passed, sends each
through its channel and flips `sent`. Push goes out with pywebpush, email
through SMTP; browser and sound reminders are rendered by the client, so
the server only marks them as delivered.
"""
import logging

from flask import current_app
from pywebpush import WebPushException

from botilyx.extensions import db
from botilyx.helpers import utcnow
from botilyx.models import Notification, PushSubscription
from botilyx.services.push_service import PushNotConfigured, send_push
from botilyx.utils.email_utils import send_reminder_email

logger = logging.getLogger(__name__)

APP_NAME = "Botilyx"

CHANNEL_TITLES = {
    "push": f"💊 {APP_NAME}",
    "email": "Medication reminder - {name}",
    "browser": "Medication reminder",
    "sound": "It's time for your medication!",
}


def build_message(notification):
    treatment = notification.treatment
    item = notification.treatment_medication
    if item is None and treatment.medications:
        item = treatment.medications[0]

    name = item.medication.commercial_name if item is not None and item.medication else "Medication"
    dosage = item.dosage if item is not None and item.dosage else "1 dose"

    return {
        "title": CHANNEL_TITLES.get(notification.type, f"{APP_NAME} - Reminder").format(name=name),
        "body": f"Time to take {dosage} of {name}",
        "icon": "/icons/favicon.png",
        "badge": "/icons/favicon.png",
        "tag": f"medication-{treatment.id}",
        "requireInteraction": True,
        "data": {
            "treatmentId": treatment.id,
            "notificationId": notification.id,
            "type": notification.type,
            "url": "/treatments",
        },
        "actions": [
            {"action": "take-medication", "title": "Mark as taken"},
            {"action": "snooze", "title": "Snooze 10 min"},
        ],
    }


def _deliver_push(notification, message):
    user_id = notification.treatment.user_id
    subscriptions = PushSubscription.query.filter_by(user_id=user_id).all()
    if not subscriptions:
        notification.mark_sent()
        return {"id": notification.id, "success": True, "message": "No active push subscriptions"}

    config = current_app.config
    deliveries = []
    for sub in subscriptions:
        try:
            delivered = send_push(sub.subscription_info(), message,
                                  config.get("VAPID_PRIVATE_KEY"), config.get("VAPID_CLAIM_EMAIL"))
        except (WebPushException, PushNotConfigured) as e:
            logger.error("Push to subscription %s failed: %s", sub.id, e)
            deliveries.append({"subscription": sub.id, "success": False, "error": str(e)})
            continue

        if not delivered:
            db.session.delete(sub)
            deliveries.append({"subscription": sub.id, "success": False, "error": "subscription expired"})
        else:
            deliveries.append({"subscription": sub.id, "success": True})

    success = any(d["success"] for d in deliveries)
    if success:
        notification.mark_sent()
    else:
        notification.record_failure("No push subscription accepted the reminder")
    return {"id": notification.id, "success": success, "deliveries": deliveries}


def _deliver_email(notification, message):
    user = notification.treatment.user
    url = current_app.config["FRONTEND_URL"].rstrip("/") + message["data"]["url"]
    sent = send_reminder_email(user.email, message["title"], message["body"], url)
    notification.mark_sent()
    return {"id": notification.id, "success": True,
            "message": "Email sent" if sent else "Email disabled, marked as sent"}


def _deliver_client_side(notification, message):
    notification.mark_sent()
    return {"id": notification.id, "success": True,
            "message": f"{notification.type.capitalize()} reminder handed to the client"}


DELIVERY = {
    "push": _deliver_push,
    "email": _deliver_email,
    "browser": _deliver_client_side,
    "sound": _deliver_client_side,
}


def due_notifications(now=None, limit=50, max_attempts=3):
    """Unsent reminders that are due and still have delivery attempts left, fresh ones first."""
    now = now or utcnow()
    return (
        Notification.query
        .filter(
            Notification.sent.is_(False),
            Notification.scheduled_date <= now,
            Notification.attempts < max_attempts,
        )
        .order_by(Notification.attempts.asc(), Notification.scheduled_date.asc())
        .limit(limit)
        .all()
    )


def _record_failure(notification_id, error):
    notification = db.session.get(Notification, notification_id)
    if notification is not None:
        notification.record_failure(error)
        db.session.commit()


def process_due_notifications(now=None, limit=None):
    """Send every due reminder (up to `limit`) and report per-row results."""
    config = current_app.config
    if limit is None:
        limit = config.get("NOTIFICATION_BATCH_SIZE", 50)

    pending = due_notifications(now=now, limit=limit, max_attempts=config.get("NOTIFICATION_MAX_ATTEMPTS", 3))
    results = []
    for notification in pending:
        notification_id = notification.id
        deliver = DELIVERY.get(notification.type)
        if deliver is None:
            error = f"Unsupported notification type: {notification.type}"
            _record_failure(notification_id, error)
            results.append({"id": notification_id, "success": False, "error": error})
            continue
        try:
            results.append(deliver(notification, build_message(notification)))
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            logger.exception("Failed to process notification %s", notification_id)
            _record_failure(notification_id, str(e))
            results.append({"id": notification_id, "success": False, "error": str(e)})

    logger.info("Processed %d due notifications", len(pending))
    return {"processed": len(pending), "results": results}
