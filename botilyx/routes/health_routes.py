from flask import Blueprint
from sqlalchemy import text
from botilyx.extensions import db
from botilyx.helpers import api_response

health_bp = Blueprint('health', __name__, url_prefix='/api/v1')

@health_bp.route('/health')
def health():
    return api_response(True, "OK", {"version": "1.0.0"})

@health_bp.route('/health/db')
def health_db():
    try:
        db.session.execute(text('SELECT 1'))
        return api_response(
            success=True,
            message="Database connection successful",
            data={"status": "connected"}
        )
    except Exception as e:
        return api_response(
            success=False,
            message="Database connection failed",
            data={"error": str(e)},
            status_code=500
        )
