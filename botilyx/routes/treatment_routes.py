# botilyx/routes/treatment_routes.py
from flask import Blueprint
from botilyx.controllers import treatment_controller

treatment_bp = Blueprint("treatments", __name__, url_prefix="/api/v1/treatments")

treatment_bp.route("", methods=["GET"])(treatment_controller.list_treatments)
treatment_bp.route("", methods=["POST"])(treatment_controller.create_treatment)
treatment_bp.route("/<int:treatment_id>", methods=["GET"])(treatment_controller.get_treatment)
treatment_bp.route("/<int:treatment_id>", methods=["PUT"])(treatment_controller.update_treatment)
treatment_bp.route("/<int:treatment_id>", methods=["DELETE"])(treatment_controller.delete_treatment)
treatment_bp.route("/<int:treatment_id>/finish", methods=["POST"])(treatment_controller.finish_treatment)
treatment_bp.route("/<int:treatment_id>/notifications", methods=["GET"])(treatment_controller.list_treatment_notifications)
treatment_bp.route("/<int:treatment_id>/images", methods=["POST"])(treatment_controller.add_treatment_images)
