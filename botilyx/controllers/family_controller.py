from datetime import date
from flask import current_app, jsonify, request
from flask_jwt_extended import jwt_required

from botilyx.extensions import db
from botilyx.helpers import current_user_id
from botilyx.models import FamilyGroup, FamilyProfile, User


def _current_user():
    return db.session.get(User, current_user_id())


def _ensure_group(user):
    if user.family_group is None:
        user.family_group = FamilyGroup(name=f"{user.last_name} family")
        user.is_group_admin = True
        db.session.commit()
    return user.family_group


def _parse_birth_date(raw):
    if not raw:
        return None
    return date.fromisoformat(str(raw)[:10])


@jwt_required()
def get_family_group():
    user = _current_user()
    if not user:
        return jsonify({"success": False, "message": "User not found"}), 404
    group = _ensure_group(user)
    return jsonify({"success": True, "group": group.to_dict()}), 200


@jwt_required()
def add_member():
    user = _current_user()
    if not user:
        return jsonify({"success": False, "message": "User not found"}), 404
    if not user.is_group_admin:
        return jsonify({"success": False, "message": "Only the group admin can add members"}), 403

    data = request.get_json() or {}
    email = (data.get("email") or "").lower().strip()
    if not email:
        return jsonify({"success": False, "message": "email is required"}), 400

    member = User.query.filter_by(email=email).first()
    if not member:
        return jsonify({"success": False, "message": "No registered user with that email"}), 404

    group = _ensure_group(user)
    if member.family_group_id == group.id:
        return jsonify({"success": False, "message": "User is already a member"}), 409

    # A joining adult leaves their own (possibly empty) group behind.
    member.family_group = group
    member.is_group_admin = False
    db.session.commit()
    current_app.logger.info(f"User {member.id} joined family group {group.id}")

    return jsonify({"success": True, "message": "Member added", "group": group.to_dict()}), 201


@jwt_required()
def remove_member(user_id):
    user = _current_user()
    if not user or not user.is_group_admin:
        return jsonify({"success": False, "message": "Only the group admin can remove members"}), 403
    if user_id == user.id:
        return jsonify({"success": False, "message": "The admin cannot remove themselves"}), 400

    member = db.session.get(User, user_id)
    if not member or member.family_group_id != user.family_group_id:
        return jsonify({"success": False, "message": "Member not found"}), 404

    member.family_group = FamilyGroup(name=f"{member.last_name} family")
    member.is_group_admin = True
    db.session.commit()

    return jsonify({"success": True, "message": "Member removed"}), 200


@jwt_required()
def create_profile():
    user = _current_user()
    if not user:
        return jsonify({"success": False, "message": "User not found"}), 404

    data = request.get_json() or {}
    name = (data.get("name") or "").strip()
    if not name:
        return jsonify({"success": False, "message": "name is required"}), 400

    try:
        birth_date = _parse_birth_date(data.get("birth_date"))
    except ValueError:
        return jsonify({"success": False, "message": "birth_date must be YYYY-MM-DD"}), 422

    group = _ensure_group(user)
    profile = FamilyProfile(
        family_group_id=group.id,
        name=name,
        birth_date=birth_date,
        avatar=data.get("avatar"),
        notes=data.get("notes"),
    )
    db.session.add(profile)
    db.session.commit()

    return jsonify({"success": True, "message": "Profile created", "profile": profile.to_dict()}), 201


def _get_group_profile(user, profile_id):
    profile = db.session.get(FamilyProfile, profile_id)
    if not profile or profile.family_group_id != user.family_group_id:
        return None
    return profile


@jwt_required()
def update_profile(profile_id):
    user = _current_user()
    profile = _get_group_profile(user, profile_id) if user else None
    if not profile:
        return jsonify({"success": False, "message": "Profile not found"}), 404

    data = request.get_json() or {}
    if "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            return jsonify({"success": False, "message": "name cannot be empty"}), 400
        profile.name = name
    if "birth_date" in data:
        try:
            profile.birth_date = _parse_birth_date(data.get("birth_date"))
        except ValueError:
            return jsonify({"success": False, "message": "birth_date must be YYYY-MM-DD"}), 422
    for field in ("avatar", "notes"):
        if field in data:
            setattr(profile, field, data.get(field))

    db.session.commit()
    return jsonify({"success": True, "message": "Profile updated", "profile": profile.to_dict()}), 200


@jwt_required()
def delete_profile(profile_id):
    user = _current_user()
    profile = _get_group_profile(user, profile_id) if user else None
    if not profile:
        return jsonify({"success": False, "message": "Profile not found"}), 404

    db.session.delete(profile)
    db.session.commit()
    return jsonify({"success": True, "message": "Profile deleted"}), 200
