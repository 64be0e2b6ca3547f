"""Ordered, gated upload and review of OPT visa documents."""

from __future__ import annotations

import logging
from datetime import datetime

from models.document import (
    DOCUMENT_LABELS,
    REVIEW_DECISIONS,
    VISA_SEQUENCE,
    Document,
    category_for,
)
from models.user import User
from storage import StoredFile

from .employment import requires_opt
from .errors import NotFoundError, PrerequisiteError, ValidationError

logger = logging.getLogger(__name__)


def is_visa_type(doc_type: str) -> bool:
    return doc_type in VISA_SEQUENCE


def next_step(doc_type: str) -> str:
    """Return the step after ``doc_type``, or ``completed`` after the last one."""

    index = VISA_SEQUENCE.index(doc_type)
    if index + 1 < len(VISA_SEQUENCE):
        return VISA_SEQUENCE[index + 1]
    return "completed"


def ensure_document_type(doc_type: str) -> None:
    if doc_type not in DOCUMENT_LABELS:
        raise ValidationError("Unsupported document type.")


def check_upload(user: User, doc_type: str) -> None:
    """Raise unless ``user`` may upload a document of ``doc_type`` right now.

    Non-visa documents are always accepted. A visa document is accepted only
    for OPT employees, and only once every earlier step is approved.
    """

    ensure_document_type(doc_type)
    if not is_visa_type(doc_type):
        return

    if not requires_opt(user):
        raise ValidationError("Visa documents are only required for OPT employees.")

    for previous in VISA_SEQUENCE[: VISA_SEQUENCE.index(doc_type)]:
        document = user.documents.get(previous)
        if document is None or document.status != "approved":
            raise PrerequisiteError(
                f"Please wait for {DOCUMENT_LABELS[previous]} to be approved first.",
                missing_step=previous,
            )


def record_upload(
    user: User,
    doc_type: str,
    stored: StoredFile,
    original_name: str | None = None,
    mime_type: str | None = None,
) -> Document:
    """Create or replace the live document of ``doc_type`` for ``user``.

    Callers must run :func:`check_upload` first. Review metadata is cleared on
    replacement.
    """

    visa = is_visa_type(doc_type)
    document = user.documents.get(doc_type)
    if document is None:
        document = Document(doc_type=doc_type)
        user.documents[doc_type] = document

    document.label = DOCUMENT_LABELS[doc_type]
    document.category = category_for(doc_type)
    document.status = "pending" if visa else "uploaded"
    document.url = stored.url
    document.file_path = stored.path
    document.file_name = stored.path.rsplit("/", 1)[-1]
    document.original_name = original_name
    document.mime_type = mime_type
    document.size = stored.size
    document.uploaded_at = datetime.utcnow()
    document.feedback = None
    document.reviewed_at = None
    document.reviewer_id = None

    if visa:
        user.visa_workflow.current_step = doc_type

    logger.info(
        "Recorded %s upload for user %s with status %s",
        doc_type,
        user.id,
        document.status,
    )
    return document


def record_review(
    user: User,
    doc_type: str,
    status: str,
    reviewer_id: int,
    feedback: str | None = None,
) -> Document:
    """Apply an HR decision to the visa document of ``doc_type``."""

    if status not in REVIEW_DECISIONS:
        raise ValidationError("Status must be approved or rejected.")
    if not is_visa_type(doc_type):
        raise ValidationError("Unknown visa document type.")

    document = user.documents.get(doc_type)
    if document is None:
        raise NotFoundError("Document not found for this employee.")

    document.status = status
    document.feedback = None if status == "approved" else feedback
    document.reviewed_at = datetime.utcnow()
    document.reviewer_id = reviewer_id

    if status == "approved":
        user.visa_workflow.current_step = next_step(doc_type)
    else:
        user.visa_workflow.current_step = doc_type

    logger.info(
        "Visa document %s for user %s marked %s by reviewer %s",
        doc_type,
        user.id,
        status,
        reviewer_id,
    )
    return document
