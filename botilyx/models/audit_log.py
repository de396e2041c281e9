from botilyx.extensions import db
from botilyx.helpers import utcnow, isoformat

class AuditLog(db.Model):
    """One user action on an entity, with before/after snapshots."""
    __tablename__ = "audit_log"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    action = db.Column(db.String(30), nullable=False, index=True)        # create | update | login ...
    entity_type = db.Column(db.String(30), nullable=False, index=True)   # medication | treatment ...
    entity_id = db.Column(db.Integer, nullable=True)

    previous_data = db.Column(db.JSON, nullable=True)
    new_data = db.Column(db.JSON, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)
    device = db.Column(db.String(20), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    user = db.relationship("User", backref=db.backref("audit_entries", cascade="all,delete-orphan", lazy="dynamic"))

    def to_dict(self):
        return {
            "id": self.id,
            "user": {"id": self.user.id, "name": self.user.full_name, "email": self.user.email},
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "previous_data": self.previous_data,
            "new_data": self.new_data,
            "metadata": {"ip": self.ip_address, "user_agent": self.user_agent, "device": self.device},
            "created_at": isoformat(self.created_at),
        }
