"""Onboarding application model."""

from . import db


ONBOARDING_STATUSES = ("never_submitted", "pending", "approved", "rejected")


class OnboardingApplication(db.Model):
    """The single onboarding application an employee submits for HR review."""

    __tablename__ = "onboarding_applications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True
    )
    status = db.Column(
        db.String(32),
        nullable=False,
        default="never_submitted",
        server_default=db.text("'never_submitted'"),
    )
    submitted_at = db.Column(db.DateTime, nullable=True)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    reviewer_id = db.Column(db.Integer, nullable=True)
    feedback = db.Column(db.Text, nullable=True)
    form_data = db.Column(db.JSON, nullable=True)

    user = db.relationship("User", back_populates="onboarding")

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "reviewer_id": self.reviewer_id,
            "feedback": self.feedback,
            "form_data": self.form_data,
        }
