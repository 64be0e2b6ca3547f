"""Visa workflow state and notification log models."""

from datetime import datetime

from . import db


VISA_STEPS = ("not_applicable", "opt_receipt", "opt_ead", "i_983", "i_20", "completed")


class VisaWorkflow(db.Model):
    """Stored OPT pipeline state for one employee."""

    __tablename__ = "visa_workflows"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True
    )
    opt_required = db.Column(db.Boolean, nullable=False, default=False)
    current_step = db.Column(
        db.String(32),
        nullable=False,
        default="not_applicable",
        server_default=db.text("'not_applicable'"),
    )
    last_notification_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship("User", back_populates="visa_workflow")
    notifications = db.relationship(
        "NotificationLog",
        back_populates="visa_workflow",
        cascade="all, delete-orphan",
        order_by="NotificationLog.id",
    )

    def log_notification(self, subject: str, message: str) -> "NotificationLog":
        """Append a sent notification to the log."""

        entry = NotificationLog(subject=subject, message=message, sent_at=datetime.utcnow())
        self.notifications.append(entry)
        self.last_notification_at = entry.sent_at
        return entry

    def to_dict(self) -> dict:
        return {
            "opt_required": self.opt_required,
            "current_step": self.current_step,
            "last_notification_at": (
                self.last_notification_at.isoformat()
                if self.last_notification_at
                else None
            ),
            "notification_log": [entry.to_dict() for entry in self.notifications],
        }


class NotificationLog(db.Model):
    """A notification HR sent about the visa pipeline."""

    __tablename__ = "visa_notifications"

    id = db.Column(db.Integer, primary_key=True)
    visa_workflow_id = db.Column(
        db.Integer, db.ForeignKey("visa_workflows.id"), nullable=False, index=True
    )
    subject = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    sent_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    visa_workflow = db.relationship("VisaWorkflow", back_populates="notifications")

    def to_dict(self) -> dict:
        return {
            "subject": self.subject,
            "message": self.message,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
        }
