"""Document model definition and the fixed document type enumeration."""

from datetime import datetime

from . import db


DOCUMENT_LABELS = {
    "profile_picture": "Profile Picture",
    "drivers_license": "Driver's License",
    "work_authorization": "Work Authorization",
    "opt_receipt": "OPT Receipt",
    "opt_ead": "OPT EAD",
    "i_983": "Form I-983",
    "i_20": "I-20",
    "other": "Supporting Document",
}
DOCUMENT_TYPES = tuple(DOCUMENT_LABELS)

# Order matters: each step is gated on approval of the one before it.
VISA_SEQUENCE = ("opt_receipt", "opt_ead", "i_983", "i_20")

DOCUMENT_CATEGORIES = ("profile", "onboarding", "visa", "other")
DOCUMENT_STATUSES = ("uploaded", "pending", "approved", "rejected")
REVIEW_DECISIONS = ("approved", "rejected")


def category_for(doc_type: str) -> str:
    if doc_type in VISA_SEQUENCE:
        return "visa"
    if doc_type == "profile_picture":
        return "profile"
    if doc_type == "other":
        return "other"
    return "onboarding"


class Document(db.Model):
    """The live uploaded document of one type for one user."""

    __tablename__ = "documents"
    __table_args__ = (
        db.UniqueConstraint("user_id", "doc_type", name="uq_documents_user_type"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    doc_type = db.Column(db.String(32), nullable=False)
    label = db.Column(db.String(64), nullable=False)
    category = db.Column(db.String(32), nullable=False, default="onboarding")
    status = db.Column(
        db.String(32),
        nullable=False,
        default="uploaded",
        server_default=db.text("'uploaded'"),
    )
    url = db.Column(db.String(512), nullable=False)
    file_path = db.Column(db.String(512), nullable=False)
    file_name = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255), nullable=True)
    mime_type = db.Column(db.String(128), nullable=True)
    size = db.Column(db.Integer, nullable=True)
    feedback = db.Column(db.Text, nullable=True)
    uploaded_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    reviewer_id = db.Column(db.Integer, nullable=True)
    version_id = db.Column(db.Integer, nullable=False)

    user = db.relationship("User", back_populates="documents")

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return (
            f"<Document id={self.id} user_id={self.user_id} "
            f"type={self.doc_type} status={self.status}>"
        )

    def to_dict(self) -> dict:
        """Serialize the document into a dictionary."""

        return {
            "id": self.id,
            "type": self.doc_type,
            "label": self.label,
            "category": self.category,
            "status": self.status,
            "url": self.url,
            "file_name": self.file_name,
            "original_name": self.original_name,
            "mime_type": self.mime_type,
            "size": self.size,
            "feedback": self.feedback,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "reviewer_id": self.reviewer_id,
        }
