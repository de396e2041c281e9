from botilyx.extensions import db
from botilyx.helpers import utcnow, isoformat

class Notification(db.Model):
    __tablename__ = "notification"
    id = db.Column(db.Integer, primary_key=True)
    treatment_id = db.Column(db.Integer, db.ForeignKey("treatment.id", ondelete="CASCADE"), nullable=False, index=True)
    treatment_medication_id = db.Column(
        db.Integer, db.ForeignKey("treatment_medication.id", ondelete="CASCADE"), nullable=True, index=True
    )

    type = db.Column(db.String(20), nullable=False)  # push | email | browser | sound
    scheduled_date = db.Column(db.DateTime, nullable=False, index=True)
    sent = db.Column(db.Boolean, nullable=False, default=False)
    sent_at = db.Column(db.DateTime, nullable=True)
    attempts = db.Column(db.Integer, nullable=False, default=0)
    last_error = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    treatment = db.relationship("Treatment", back_populates="notifications")
    treatment_medication = db.relationship("TreatmentMedication")

    def mark_sent(self):
        self.sent = True
        self.sent_at = utcnow()

    def record_failure(self, error):
        self.attempts = (self.attempts or 0) + 1
        self.last_error = error

    def to_dict(self):
        return {
            "id": self.id,
            "treatment_id": self.treatment_id,
            "treatment_medication_id": self.treatment_medication_id,
            "type": self.type,
            "scheduled_date": isoformat(self.scheduled_date),
            "sent": self.sent,
            "sent_at": isoformat(self.sent_at),
            "attempts": self.attempts,
            "last_error": self.last_error,
        }


class NotificationPreferences(db.Model):
    __tablename__ = "notification_preferences"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    push = db.Column(db.Boolean, nullable=False, default=False)
    email = db.Column(db.Boolean, nullable=False, default=False)
    browser = db.Column(db.Boolean, nullable=False, default=False)
    sound = db.Column(db.Boolean, nullable=False, default=False)

    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = db.relationship("User", backref=db.backref("notification_preferences", uselist=False, cascade="all,delete"))

    @classmethod
    def get_or_create(cls, user_id, commit=True):
        """Stored preferences of a user; an all-disabled row is created on first access."""
        prefs = cls.query.filter_by(user_id=user_id).first()
        if not prefs:
            prefs = cls(user_id=user_id, push=False, email=False, browser=False, sound=False)
            db.session.add(prefs)
            if commit:
                db.session.commit()
            else:
                db.session.flush()
        return prefs

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "push": self.push,
            "email": self.email,
            "browser": self.browser,
            "sound": self.sound,
        }


class PushSubscription(db.Model):
    __tablename__ = "push_subscription"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    endpoint = db.Column(db.Text, nullable=False)
    p256dh_key = db.Column(db.String(255), nullable=False)
    auth_key = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = db.relationship("User", backref=db.backref("push_subscriptions", cascade="all,delete-orphan"))

    def subscription_info(self):
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.p256dh_key, "auth": self.auth_key},
        }
