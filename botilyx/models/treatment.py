from botilyx.extensions import db
from botilyx.helpers import utcnow, isoformat

class Treatment(db.Model):
    __tablename__ = "treatment"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(160), nullable=False)
    patient = db.Column(db.String(160), nullable=False)     # free-text patient name
    patient_id = db.Column(db.Integer, nullable=True)       # users.id or family_profile.id
    patient_type = db.Column(db.String(20), nullable=True)  # "user" | "profile"
    symptoms = db.Column(db.Text, nullable=True)

    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = db.relationship("User", backref=db.backref("treatments", cascade="all,delete-orphan"))
    medications = db.relationship("TreatmentMedication", back_populates="treatment",
                                  cascade="all,delete-orphan", order_by="TreatmentMedication.id")
    images = db.relationship("TreatmentImage", back_populates="treatment", cascade="all,delete-orphan")
    notifications = db.relationship("Notification", back_populates="treatment", cascade="all,delete-orphan")

    def to_dict(self, include_notifications=False):
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "patient": self.patient,
            "patient_id": self.patient_id,
            "patient_type": self.patient_type,
            "symptoms": self.symptoms,
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
            "is_active": self.is_active,
            "medications": [m.to_dict() for m in self.medications],
            "images": [i.to_dict() for i in self.images],
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_notifications:
            data["notifications"] = [
                n.to_dict() for n in sorted(self.notifications, key=lambda n: n.scheduled_date)
            ]
        return data


class TreatmentMedication(db.Model):
    __tablename__ = "treatment_medication"
    id = db.Column(db.Integer, primary_key=True)
    treatment_id = db.Column(db.Integer, db.ForeignKey("treatment.id", ondelete="CASCADE"), nullable=False, index=True)
    medication_id = db.Column(db.Integer, db.ForeignKey("medication.id", ondelete="CASCADE"), nullable=False, index=True)

    dosage = db.Column(db.String(60), nullable=False)       # e.g., "1 tablet"
    frequency_hours = db.Column(db.Integer, nullable=False)
    duration_days = db.Column(db.Integer, nullable=False)

    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    start_at_specific_time = db.Column(db.Boolean, nullable=False, default=False)
    specific_start_time = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    treatment = db.relationship("Treatment", back_populates="medications")
    medication = db.relationship("Medication")

    def to_dict(self):
        med = self.medication
        return {
            "id": self.id,
            "treatment_id": self.treatment_id,
            "medication_id": self.medication_id,
            "commercial_name": med.commercial_name if med else None,
            "active_ingredient": med.active_ingredient if med else None,
            "unit": med.unit if med else None,
            "dosage": self.dosage,
            "frequency_hours": self.frequency_hours,
            "duration_days": self.duration_days,
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
            "start_at_specific_time": self.start_at_specific_time,
            "specific_start_time": isoformat(self.specific_start_time),
            "is_active": self.is_active,
        }


class TreatmentImage(db.Model):
    __tablename__ = "treatment_image"
    id = db.Column(db.Integer, primary_key=True)
    treatment_id = db.Column(db.Integer, db.ForeignKey("treatment.id", ondelete="CASCADE"), nullable=False, index=True)

    image_url = db.Column(db.String(512), nullable=False, default="")
    image_type = db.Column(db.String(20), nullable=False)   # "prescription" | "instructions"
    extracted_text = db.Column(db.Text, nullable=True)
    ai_analysis = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    treatment = db.relationship("Treatment", back_populates="images")

    def to_dict(self):
        return {
            "id": self.id,
            "treatment_id": self.treatment_id,
            "image_url": self.image_url,
            "image_type": self.image_type,
            "extracted_text": self.extracted_text,
            "ai_analysis": self.ai_analysis,
            "created_at": isoformat(self.created_at),
        }
