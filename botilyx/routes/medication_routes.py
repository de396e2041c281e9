# botilyx/routes/medication_routes.py
from flask import Blueprint
from botilyx.controllers import medication_controller

medication_bp = Blueprint("medications", __name__, url_prefix="/api/v1/medications")

medication_bp.route("", methods=["GET"])(medication_controller.list_medications)
medication_bp.route("", methods=["POST"])(medication_controller.create_medication)
medication_bp.route("/alerts", methods=["GET"])(medication_controller.get_alerts)
medication_bp.route("/settings", methods=["GET"])(medication_controller.get_settings)
medication_bp.route("/settings", methods=["PUT"])(medication_controller.update_settings)
medication_bp.route("/analyze-image", methods=["POST"])(medication_controller.analyze_image)

medication_bp.route("/<int:medication_id>", methods=["GET"])(medication_controller.get_medication)
medication_bp.route("/<int:medication_id>", methods=["PUT"])(medication_controller.update_medication)
medication_bp.route("/<int:medication_id>", methods=["DELETE"])(medication_controller.delete_medication)
medication_bp.route("/<int:medication_id>/archive", methods=["POST"])(medication_controller.archive_medication)
medication_bp.route("/<int:medication_id>/unarchive", methods=["POST"])(medication_controller.unarchive_medication)
medication_bp.route("/<int:medication_id>/consume", methods=["POST"])(medication_controller.consume_medication)
