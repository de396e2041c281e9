# botilyx/routes/family_routes.py
from flask import Blueprint
from botilyx.controllers import family_controller

family_bp = Blueprint("family", __name__, url_prefix="/api/v1/family")

family_bp.route("", methods=["GET"])(family_controller.get_family_group)
family_bp.route("/members", methods=["POST"])(family_controller.add_member)
family_bp.route("/members/<int:user_id>", methods=["DELETE"])(family_controller.remove_member)
family_bp.route("/profiles", methods=["POST"])(family_controller.create_profile)
family_bp.route("/profiles/<int:profile_id>", methods=["PUT"])(family_controller.update_profile)
family_bp.route("/profiles/<int:profile_id>", methods=["DELETE"])(family_controller.delete_profile)
