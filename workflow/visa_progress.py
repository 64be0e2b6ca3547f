"""Derived progress through the OPT visa pipeline.

:func:`derive_progress` is the single source of truth for both the employee
self-service view and the HR operational view. The projections below only
choose which fields each audience sees. Nothing here is cached; document
state can change between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from models.document import DOCUMENT_LABELS, VISA_SEQUENCE, Document
from models.user import User

from .employment import requires_opt


@dataclass
class StepStatus:
    type: str
    label: str
    document: Document | None

    @property
    def status(self) -> str:
        return self.document.status if self.document else "not_uploaded"

    def to_dict(self) -> dict:
        document = self.document
        return {
            "type": self.type,
            "label": self.label,
            "status": self.status,
            "url": document.url if document else None,
            "feedback": document.feedback if document else None,
            "reviewed_at": (
                document.reviewed_at.isoformat()
                if document and document.reviewed_at
                else None
            ),
        }


@dataclass
class VisaProgress:
    requires_opt: bool
    current_step: str
    completed: bool
    message: str | None = None
    next_step: str | None = None
    action: str | None = None
    pending_document: Document | None = None
    steps: list[StepStatus] = field(default_factory=list)


def derive_progress(user: User) -> VisaProgress:
    """Return where ``user`` stands in the visa pipeline.

    The first step that is missing, awaiting review, or rejected becomes the
    current step. When every step is approved the pipeline is completed.
    """

    if not requires_opt(user):
        return VisaProgress(
            requires_opt=False, current_step="not_applicable", completed=True
        )

    steps = [
        StepStatus(
            type=doc_type,
            label=DOCUMENT_LABELS[doc_type],
            document=user.documents.get(doc_type),
        )
        for doc_type in VISA_SEQUENCE
    ]

    for step in steps:
        if step.document is None:
            return VisaProgress(
                requires_opt=True,
                current_step=step.type,
                completed=False,
                message=f"Please upload {step.label}.",
                next_step=f"Employee must upload {step.label}",
                action="notify",
                steps=steps,
            )
        if step.status == "rejected":
            return VisaProgress(
                requires_opt=True,
                current_step=step.type,
                completed=False,
                message=step.document.feedback
                or f"{step.label} was rejected. Please upload an updated version.",
                next_step=step.document.feedback
                or f"{step.label} was rejected. Employee must resubmit.",
                action="notify",
                pending_document=step.document,
                steps=steps,
            )
        if step.status != "approved":
            return VisaProgress(
                requires_opt=True,
                current_step=step.type,
                completed=False,
                message=f"Waiting for HR to review your {step.label}.",
                next_step=f"Waiting for HR to review {step.label}",
                action="review",
                pending_document=step.document,
                steps=steps,
            )

    return VisaProgress(
        requires_opt=True,
        current_step="completed",
        completed=True,
        message="All documents have been approved.",
        next_step="All documents have been approved.",
        steps=steps,
    )


def employee_visa_status(progress: VisaProgress) -> dict:
    """Fields shown to the employee on their own dashboard."""

    return {
        "requires_opt": progress.requires_opt,
        "current_step": progress.current_step,
        "completed": progress.completed,
        "message": progress.message,
        "documents": [step.to_dict() for step in progress.steps],
    }


def hr_visa_summary(progress: VisaProgress) -> dict:
    """Fields HR needs to act on an employee's pipeline."""

    document = progress.pending_document
    return {
        "requires_opt": progress.requires_opt,
        "current_step": progress.current_step,
        "completed": progress.completed,
        "next_step": progress.next_step,
        "action": progress.action,
        "pending_document": (
            {
                "type": document.doc_type,
                "url": document.url,
                "status": document.status,
                "feedback": document.feedback,
            }
            if document
            else None
        ),
    }
