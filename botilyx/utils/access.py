# botilyx/utils/access.py
from botilyx.extensions import db
from botilyx.models import User


def group_user_ids(user_id):
    """Ids of every account sharing a family group with user_id (itself included)."""
    user = db.session.get(User, user_id)
    if not user:
        return []
    if user.family_group_id is None:
        return [user.id]
    rows = db.session.query(User.id).filter(User.family_group_id == user.family_group_id).all()
    return [uid for (uid,) in rows]


def get_owned(model, object_id, user_id):
    """Fetch a row whose user_id belongs to the caller's family group, else None."""
    obj = db.session.get(model, object_id)
    if obj is None or obj.user_id not in group_user_ids(user_id):
        return None
    return obj
