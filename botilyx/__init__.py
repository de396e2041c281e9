# botilyx/__init__.py
from flask import Flask, jsonify
from .extensions import db, migrate, jwt
from dotenv import load_dotenv
from flask_cors import CORS
import os

load_dotenv()

def create_app(test_config=None):
    app = Flask(__name__)

    app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv('DATABASE_URL', 'sqlite:///botilyx.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['FRONTEND_URL'] = os.getenv('FRONTEND_URL', 'http://localhost:3000')

    app.config["EMAIL_ENABLED"] = os.getenv("EMAIL_ENABLED", "false").lower() == "true"
    app.config['SMTP_HOST'] = os.getenv('SMTP_HOST')
    app.config['SMTP_PORT'] = int(os.getenv('SMTP_PORT', '587'))
    app.config['SMTP_USER'] = os.getenv('SMTP_USER')
    app.config['SMTP_PASS'] = os.getenv('SMTP_PASS')

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['JWT_TOKEN_LOCATION'] = ["headers", "cookies"]
    app.config['JWT_COOKIE_SECURE'] = os.getenv('JWT_COOKIE_SECURE', 'false').lower() == 'true'
    app.config['JWT_COOKIE_SAMESITE'] = 'Lax'

    app.config['VAPID_PUBLIC_KEY'] = os.getenv('VAPID_PUBLIC_KEY')
    app.config['VAPID_PRIVATE_KEY'] = os.getenv('VAPID_PRIVATE_KEY')
    app.config['VAPID_CLAIM_EMAIL'] = os.getenv('VAPID_CLAIM_EMAIL', 'mailto:admin@botilyx.app')
    app.config['NOTIFICATION_PROCESSOR_SECRET'] = os.getenv('NOTIFICATION_PROCESSOR_SECRET')
    app.config['NOTIFICATION_BATCH_SIZE'] = int(os.getenv('NOTIFICATION_BATCH_SIZE', '50'))
    app.config['NOTIFICATION_MAX_ATTEMPTS'] = int(os.getenv('NOTIFICATION_MAX_ATTEMPTS', '3'))

    app.config['GOOGLE_API_KEY'] = os.getenv('GOOGLE_API_KEY')
    app.config['VISION_MODEL'] = os.getenv('VISION_MODEL', 'gemini-2.0-flash')
    app.config['UPLOAD_MAX_BYTES'] = int(os.getenv('UPLOAD_MAX_BYTES', str(5 * 1024 * 1024)))

    if test_config:
        app.config.update(test_config)

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    CORS(app,
         origins=[app.config['FRONTEND_URL']],
         supports_credentials=True,
         methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
         allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-CSRF-TOKEN"])

    from .errors import ValidationError

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        db.session.rollback()
        body = {"success": False, "message": e.message}
        if e.field:
            body["field"] = e.field
        return jsonify(body), e.status_code

    @app.errorhandler(Exception)
    def handle_error(e):
        from werkzeug.exceptions import HTTPException
        if isinstance(e, HTTPException):
            return jsonify(success=False, message=e.description), e.code
        app.logger.exception("Unhandled error")
        return jsonify(success=False, message=str(e)), 500

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"success": False, "message": "Token expired"}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(err_msg):
        return jsonify({"success": False, "message": f"Invalid token: {err_msg}"}), 422

    @jwt.unauthorized_loader
    def missing_token_callback(err_msg):
        return jsonify({"success": False, "message": f"Missing token: {err_msg}"}), 401

    from . import models  # noqa: F401  registers tables on db.metadata
    from .routes.auth_routes import auth_bp
    from .routes.family_routes import family_bp
    from .routes.medication_routes import medication_bp
    from .routes.treatment_routes import treatment_bp
    from .routes.notification_routes import notification_bp
    from .routes.shopping_list_routes import shopping_list_bp
    from .routes.history_routes import history_bp
    from .routes.health_routes import health_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(family_bp)
    app.register_blueprint(medication_bp)
    app.register_blueprint(treatment_bp)
    app.register_blueprint(notification_bp)
    app.register_blueprint(shopping_list_bp)
    app.register_blueprint(history_bp)
    app.register_blueprint(health_bp)

    from .commands import register_commands
    register_commands(app)

    return app
