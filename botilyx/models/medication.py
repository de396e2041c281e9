from botilyx.extensions import db
from botilyx.helpers import utcnow, isoformat

class Medication(db.Model):
    __tablename__ = "medication"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    commercial_name = db.Column(db.String(160), nullable=False)
    active_ingredient = db.Column(db.String(160), nullable=True)   # e.g., "Paracetamol 500mg"
    description = db.Column(db.Text, nullable=True)
    intake_recommendations = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.String(512), nullable=True)

    initial_quantity = db.Column(db.Integer, nullable=False, default=0)
    current_quantity = db.Column(db.Integer, nullable=False, default=0)
    unit = db.Column(db.String(40), nullable=False, default="units")  # e.g., "tablets", "ml"
    expiration_date = db.Column(db.Date, nullable=True)
    archived = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = db.relationship("User", backref=db.backref("medications", cascade="all,delete-orphan"))

    __table_args__ = (db.Index("ix_medication_user_name", "user_id", "commercial_name"),)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "commercial_name": self.commercial_name,
            "active_ingredient": self.active_ingredient,
            "description": self.description,
            "intake_recommendations": self.intake_recommendations,
            "image_url": self.image_url,
            "initial_quantity": self.initial_quantity,
            "current_quantity": self.current_quantity,
            "unit": self.unit,
            "expiration_date": isoformat(self.expiration_date),
            "archived": self.archived,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


class NotificationSettings(db.Model):
    """Inventory alert thresholds, one row per user."""
    __tablename__ = "notification_settings"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    days_before_expiration = db.Column(db.Integer, nullable=False, default=30)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=10)

    user = db.relationship("User", backref=db.backref("notification_settings", uselist=False, cascade="all,delete"))

    @classmethod
    def get_or_create(cls, user_id):
        settings = cls.query.filter_by(user_id=user_id).first()
        if not settings:
            settings = cls(user_id=user_id, days_before_expiration=30, low_stock_threshold=10)
            db.session.add(settings)
            db.session.commit()
        return settings

    def to_dict(self):
        return {
            "days_before_expiration": self.days_before_expiration,
            "low_stock_threshold": self.low_stock_threshold,
        }
