# botilyx/routes/shopping_list_routes.py
from flask import Blueprint
from botilyx.controllers import shopping_list_controller

shopping_list_bp = Blueprint("shopping_lists", __name__, url_prefix="/api/v1/shopping-lists")

shopping_list_bp.route("", methods=["GET"])(shopping_list_controller.list_shopping_lists)
shopping_list_bp.route("", methods=["POST"])(shopping_list_controller.create_shopping_list)
shopping_list_bp.route("/<int:list_id>", methods=["GET"])(shopping_list_controller.get_shopping_list)
shopping_list_bp.route("/<int:list_id>", methods=["DELETE"])(shopping_list_controller.delete_shopping_list)
shopping_list_bp.route("/<int:list_id>/archive", methods=["POST"])(shopping_list_controller.archive_shopping_list)
