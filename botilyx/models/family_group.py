from botilyx.extensions import db
from botilyx.helpers import utcnow, isoformat

class FamilyGroup(db.Model):
    __tablename__ = "family_group"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    members = db.relationship("User", back_populates="family_group")
    profiles = db.relationship("FamilyProfile", back_populates="family_group", cascade="all,delete-orphan")

    def member_ids(self):
        return [m.id for m in self.members]

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "members": [m.to_dict() for m in self.members],
            "profiles": [p.to_dict() for p in self.profiles],
            "created_at": isoformat(self.created_at),
        }


class FamilyProfile(db.Model):
    """A family member without an account of their own, e.g. a child."""
    __tablename__ = "family_profile"
    id = db.Column(db.Integer, primary_key=True)
    family_group_id = db.Column(db.Integer, db.ForeignKey("family_group.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    birth_date = db.Column(db.Date, nullable=True)
    avatar = db.Column(db.String(255), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    family_group = db.relationship("FamilyGroup", back_populates="profiles")

    def to_dict(self):
        return {
            "id": self.id,
            "family_group_id": self.family_group_id,
            "name": self.name,
            "birth_date": isoformat(self.birth_date),
            "avatar": self.avatar,
            "notes": self.notes,
        }
