from datetime import timedelta
from werkzeug.security import generate_password_hash, check_password_hash
from botilyx.extensions import db
from botilyx.helpers import utcnow, isoformat

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    first_name = db.Column(db.String(80), nullable=False)
    last_name  = db.Column(db.String(80), nullable=False)
    email      = db.Column(db.String(255), unique=True, index=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    avatar = db.Column(db.String(255), nullable=True)

    family_group_id = db.Column(db.Integer, db.ForeignKey("family_group.id", ondelete="SET NULL"), nullable=True, index=True)
    is_group_admin = db.Column(db.Boolean, nullable=False, default=False)

    is_verified   = db.Column(db.Boolean, default=False)
    verified_at   = db.Column(db.DateTime, nullable=True)

    verification_token = db.Column(db.String(255), nullable=True, unique=True)
    verification_token_expires_at = db.Column(db.DateTime, nullable=True)

    password_reset_token = db.Column(db.String(255), nullable=True, unique=True)
    password_reset_expires_at = db.Column(db.DateTime, nullable=True)
    last_password_reset_sent_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    family_group = db.relationship("FamilyGroup", back_populates="members")

    def set_password(self, raw: str):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return check_password_hash(self.password_hash, raw)

    def set_verification_token(self, ttl_minutes=1440):
        import secrets
        self.verification_token = secrets.token_urlsafe(48)
        self.verification_token_expires_at = utcnow() + timedelta(minutes=ttl_minutes)

    def set_password_reset_token(self, ttl_minutes=30):
        import secrets
        self.password_reset_token = secrets.token_urlsafe(48)
        self.password_reset_expires_at = utcnow() + timedelta(minutes=ttl_minutes)
        self.last_password_reset_sent_at = utcnow()

    def clear_password_reset_token(self):
        self.password_reset_token = None
        self.password_reset_expires_at = None

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "avatar": self.avatar,
            "family_group_id": self.family_group_id,
            "is_group_admin": self.is_group_admin,
            "created_at": isoformat(self.created_at),
        }
