# botilyx/routes/notification_routes.py
from flask import Blueprint
from botilyx.controllers import notification_controller

notification_bp = Blueprint("notifications", __name__, url_prefix="/api/v1/notifications")

notification_bp.route("", methods=["GET"])(notification_controller.list_notifications)
notification_bp.route("/preferences", methods=["GET"])(notification_controller.get_preferences)
notification_bp.route("/preferences", methods=["PUT"])(notification_controller.update_preferences)
notification_bp.route("/subscribe", methods=["POST"])(notification_controller.subscribe)
notification_bp.route("/unsubscribe", methods=["POST"])(notification_controller.unsubscribe)
notification_bp.route("/vapid-public-key", methods=["GET"])(notification_controller.vapid_public_key)
notification_bp.route("/process", methods=["POST"])(notification_controller.process_notifications)
