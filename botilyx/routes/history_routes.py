# botilyx/routes/history_routes.py
from flask import Blueprint
from botilyx.controllers import history_controller

history_bp = Blueprint("history", __name__, url_prefix="/api/v1/history")

history_bp.route("", methods=["GET"])(history_controller.list_history)
history_bp.route("/filters", methods=["GET"])(history_controller.history_filters)
