"""User model definition."""

from datetime import datetime

from sqlalchemy.orm import attribute_keyed_dict
from werkzeug.security import check_password_hash, generate_password_hash

from . import db
from .onboarding import OnboardingApplication
from .visa_workflow import VisaWorkflow


USER_ROLES = ("employee", "hr")


class User(db.Model):
    """An account on the portal; employees also own their onboarding records.

    ``profile`` stays empty until HR approves the onboarding application.
    ``documents`` is keyed by document type so each type has a single live
    record.
    """

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(150), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(32), nullable=False, default="employee")
    profile = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    onboarding = db.relationship(
        "OnboardingApplication",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    visa_workflow = db.relationship(
        "VisaWorkflow",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    documents = db.relationship(
        "Document",
        back_populates="user",
        collection_class=attribute_keyed_dict("doc_type"),
        cascade="all, delete-orphan",
        order_by="Document.id",
    )

    @classmethod
    def new_account(cls, username: str, email: str, role: str = "employee") -> "User":
        """Build a user together with its onboarding and visa workflow records."""

        return cls(
            username=username,
            email=email,
            role=role,
            onboarding=OnboardingApplication(status="never_submitted"),
            visa_workflow=VisaWorkflow(
                opt_required=False, current_step="not_applicable"
            ),
        )

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password_hash(self.password_hash, password)

    @property
    def is_hr(self) -> bool:
        return self.role == "hr"

    def ordered_documents(self) -> list:
        """Return documents in upload (insertion) order."""

        return sorted(self.documents.values(), key=lambda doc: doc.id or 0)

    def to_dict(self) -> dict:
        """Serialize the full employee record, omitting credentials."""

        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "profile": self.profile,
            "onboarding": self.onboarding.to_dict() if self.onboarding else None,
            "documents": [doc.to_dict() for doc in self.ordered_documents()],
            "visa_workflow": (
                self.visa_workflow.to_dict() if self.visa_workflow else None
            ),
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
