from urllib.parse import urlencode

from flask import current_app, jsonify, request
from flask_jwt_extended import create_access_token, jwt_required, set_access_cookies, unset_jwt_cookies
from sqlalchemy.exc import IntegrityError

from botilyx.errors import ValidationError
from botilyx.extensions import db
from botilyx.helpers import current_user_id, utcnow
from botilyx.models import FamilyGroup, User
from botilyx.utils.audit import AuditAction, AuditEntity, record_action
from botilyx.utils.email_utils import send_password_reset_email, send_verification_email
from botilyx.utils.validation import require_fields

MIN_PASSWORD_LENGTH = 6
MIN_RESET_INTERVAL_SECONDS = 300
RESET_TOKEN_TTL_MINUTES = 30


def _frontend_link(path: str, token: str) -> str:
    base = current_app.config["FRONTEND_URL"].rstrip("/")
    return f"{base}/{path}?{urlencode({'token': token})}"


def _normalized_email(data):
    return (data.get("email") or "").strip().lower()


def _check_password(password, field="password"):
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must have at least {MIN_PASSWORD_LENGTH} characters", field=field)


def _send_verification(user):
    link = _frontend_link("verify-email", user.verification_token)
    try:
        send_verification_email(user.email, link)
    except Exception:
        current_app.logger.exception(f"Could not send verification email to user {user.id}")


def _user_by_token(column, token, expires_column):
    """User holding a still-valid one-time token, or an error message."""
    user = User.query.filter(column == token).first()
    if user is None:
        return None, "Invalid or already used token"
    expires_at = getattr(user, expires_column)
    if expires_at is None or expires_at < utcnow():
        return None, "Token expired"
    return user, None


def register():
    data = request.get_json() or {}
    require_fields(data, ["first_name", "last_name", "email", "password"])

    email = _normalized_email(data)
    password = str(data["password"])
    _check_password(password)

    last_name = str(data["last_name"]).strip()
    user = User(first_name=str(data["first_name"]).strip(), last_name=last_name, email=email,
                is_verified=False, is_group_admin=True)
    # every account starts as the admin of its own family
    user.family_group = FamilyGroup(name=f"{last_name} family")
    user.set_password(password)
    user.set_verification_token()

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        existing = User.query.filter_by(email=email).first()
        if existing is None or existing.is_verified:
            return jsonify({"success": False, "message": "Email already registered"}), 409

        existing.set_verification_token()
        db.session.commit()
        _send_verification(existing)
        return jsonify({"success": True, "message": "Verification email resent. Please check your inbox."}), 200

    record_action(user.id, AuditAction.CREATE, AuditEntity.USER, user.id, after=user.to_dict())
    db.session.commit()

    _send_verification(user)
    current_app.logger.info(f"User {user.id} registered with family group {user.family_group_id}")
    return jsonify({"success": True, "message": "User registered. Check email to verify.", "user": user.to_dict()}), 201


def verify_email():
    token = request.args.get("token")
    if not token:
        return jsonify({"success": False, "message": "Missing token"}), 400

    user, error = _user_by_token(User.verification_token, token, "verification_token_expires_at")
    if error:
        return jsonify({"success": False, "message": error}), 400

    user.is_verified = True
    user.verified_at = utcnow()
    user.verification_token = None
    user.verification_token_expires_at = None
    db.session.commit()
    return jsonify({"success": True, "message": "Email verified"}), 200


def login():
    data = request.get_json() or {}
    require_fields(data, ["email", "password"])

    user = User.query.filter_by(email=_normalized_email(data)).first()
    if user is None:
        return jsonify({"success": False, "message": "Invalid credentials"}), 401
    if not user.check_password(str(data["password"])):
        record_action(user.id, AuditAction.LOGIN_FAILED, AuditEntity.SESSION)
        db.session.commit()
        return jsonify({"success": False, "message": "Invalid credentials"}), 401
    if not user.is_verified:
        return jsonify({"success": False, "message": "Please verify your email first"}), 403

    record_action(user.id, AuditAction.LOGIN, AuditEntity.SESSION)
    db.session.commit()

    token = create_access_token(identity=str(user.id))
    response = jsonify({"success": True, "message": "Logged in", "user": user.to_dict(), "access_token": token})
    set_access_cookies(response, token)
    return response, 200


def logout():
    response = jsonify({"success": True, "message": "Logged out"})
    unset_jwt_cookies(response)
    return response, 200


@jwt_required()
def me():
    user = db.session.get(User, current_user_id())
    if user is None:
        return jsonify({"success": False, "message": "User not found"}), 404
    return jsonify({"success": True, "user": user.to_dict()}), 200


def forgot_password():
    email = _normalized_email(request.get_json() or {})
    # same answer whether or not the address is known
    generic = {"success": True, "message": "If that email exists, a reset link has been sent."}

    user = User.query.filter_by(email=email).first() if email else None
    if user is None or not user.is_verified:
        current_app.logger.info(f"Password reset ignored for unknown or unverified email: {email}")
        return jsonify(generic), 200

    last_sent = user.last_password_reset_sent_at
    if last_sent and (utcnow() - last_sent).total_seconds() < MIN_RESET_INTERVAL_SECONDS:
        current_app.logger.info(f"Password reset throttled for user {user.id}")
        return jsonify({"success": True, "message": "A recent reset link was already sent. Please check your email."}), 200

    user.set_password_reset_token(ttl_minutes=RESET_TOKEN_TTL_MINUTES)
    db.session.commit()

    try:
        send_password_reset_email(user.email, _frontend_link("reset-password", user.password_reset_token))
    except Exception as e:
        current_app.logger.error(f"Password reset email to user {user.id} failed: {e}")
    return jsonify(generic), 200


def reset_password():
    """Token may come in the JSON body or the query string."""
    data = request.get_json() or {}
    token = request.args.get("token") or data.get("token")
    if not token:
        raise ValidationError("Missing fields: ['token']", field="token")
    require_fields(data, ["new_password"])
    new_password = str(data["new_password"]).strip()
    _check_password(new_password, field="new_password")

    user, error = _user_by_token(User.password_reset_token, token, "password_reset_expires_at")
    if error:
        return jsonify({"success": False, "message": error}), 400

    user.set_password(new_password)
    user.clear_password_reset_token()
    db.session.commit()
    return jsonify({"success": True, "message": "Password updated"}), 200
