"""Employee self-service blueprint: onboarding, profile, documents and visa status."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Iterable

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import BadRequest

from models import db
from storage.local_storage import LocalStorage
from utils.current_user import require_role
from utils.request_validation import parse_json_request
from workflow import (
    check_upload,
    derive_progress,
    employee_visa_status,
    record_upload,
    submit_application,
    update_profile,
)
from workflow.visa_sequence import ensure_document_type

employee_bp = Blueprint("employee", __name__)

MAX_UPLOAD_SIZE_DEFAULT = 10 * 1024 * 1024  # 10 MB
ALLOWED_EXTENSIONS_DEFAULT = {"jpeg", "jpg", "png", "pdf"}


def _current_employee():
    return require_role("employee", "hr")


def _allowed_extensions() -> set[str]:
    configured = current_app.config.get("ALLOWED_UPLOAD_TYPES")
    if not configured:
        return set(ALLOWED_EXTENSIONS_DEFAULT)
    if isinstance(configured, str):
        values: Iterable[str] = configured.split(",")
    else:
        values = configured

    normalized: set[str] = set()
    for raw in values:
        if not isinstance(raw, str):
            continue

        item = raw.strip().lower()
        if not item:
            continue

        if "/" in item and not item.startswith("."):
            item = item.rsplit("/", 1)[-1]

        item = item.lstrip(".")
        if item:
            normalized.add(item)

    if not normalized:
        return set(ALLOWED_EXTENSIONS_DEFAULT)
    if "jpeg" in normalized:
        normalized.add("jpg")
    if "jpg" in normalized:
        normalized.add("jpeg")
    return normalized


def _validate_upload(file: FileStorage) -> None:
    if file.filename is None or file.filename.strip() == "":
        raise BadRequest("File is required.")

    extension = file.filename.rsplit(".", 1)[-1].lower()
    if extension not in _allowed_extensions():
        allowed = ", ".join(sorted(_allowed_extensions()))
        raise BadRequest(f"Unsupported file type. Allowed types: {allowed}.")

    max_size = int(current_app.config.get("MAX_UPLOAD_SIZE", MAX_UPLOAD_SIZE_DEFAULT))
    file.stream.seek(0, os.SEEK_END)
    size = file.stream.tell()
    file.stream.seek(0)
    if size > max_size:
        raise BadRequest(
            f"File exceeds the maximum upload size of {max_size // (1024 * 1024)}MB."
        )


def _build_unique_filename(original: str) -> str:
    return f"{uuid.uuid4().hex}{Path(original).suffix}"


@employee_bp.route("/profile", methods=["GET"])
@jwt_required()
def get_profile():
    """Return the employee's profile, onboarding state, documents and visa status."""

    user = _current_employee()
    onboarding = user.onboarding

    return jsonify(
        {
            "profile": user.profile,
            "onboarding_status": onboarding.status if onboarding else "never_submitted",
            "onboarding_application": onboarding.form_data if onboarding else None,
            "onboarding_feedback": onboarding.feedback if onboarding else None,
            "documents": [doc.to_dict() for doc in user.ordered_documents()],
            "visa_status": employee_visa_status(derive_progress(user)),
        }
    )


@employee_bp.route("/onboarding", methods=["POST"])
@jwt_required()
def submit_onboarding():
    """Submit (or resubmit) the onboarding application."""

    user = _current_employee()
    payload = parse_json_request(request)

    submit_application(
        user,
        payload,
        allow_resubmit_after_approval=bool(
            current_app.config.get("ALLOW_RESUBMIT_AFTER_APPROVAL", False)
        ),
    )
    db.session.commit()

    return jsonify(
        {
            "message": "Onboarding application submitted.",
            "onboarding_status": user.onboarding.status,
            "visa_workflow": {
                "opt_required": user.visa_workflow.opt_required,
                "current_step": user.visa_workflow.current_step,
            },
        }
    )


@employee_bp.route("/profile", methods=["PUT"])
@jwt_required()
def edit_profile():
    """Update sections of an approved profile."""

    user = _current_employee()
    payload = parse_json_request(request)

    profile = update_profile(user, payload)
    db.session.commit()

    return jsonify({"message": "Profile updated.", "profile": profile})


@employee_bp.route("/visa-status", methods=["GET"])
@jwt_required()
def visa_status():
    """Return the employee's progress through the OPT document sequence."""

    user = _current_employee()
    return jsonify(employee_visa_status(derive_progress(user)))


@employee_bp.route("/documents", methods=["GET"])
@jwt_required()
def list_documents():
    user = _current_employee()
    return jsonify({"documents": [doc.to_dict() for doc in user.ordered_documents()]})


@employee_bp.route("/documents/<doc_type>", methods=["POST"])
@jwt_required()
def upload_document(doc_type: str):
    """Upload a document, replacing any earlier upload of the same type."""

    user = _current_employee()
    ensure_document_type(doc_type)

    file = request.files.get("file")
    if not isinstance(file, FileStorage):
        raise BadRequest("File is required.")
    _validate_upload(file)

    check_upload(user, doc_type)

    storage = LocalStorage(
        current_app.config.get("UPLOAD_DIR"),
        current_app.config.get("UPLOAD_URL_PREFIX"),
    )
    stored = storage.save(file, _build_unique_filename(file.filename or "document"))
    try:
        document = record_upload(
            user,
            doc_type,
            stored,
            original_name=file.filename,
            mime_type=file.mimetype or "application/octet-stream",
        )
        db.session.commit()
    except Exception:
        current_app.logger.warning(
            "Discarded %s upload for user %s after a failed save", doc_type, user.id
        )
        db.session.rollback()
        storage.delete(stored.path)
        raise

    return (
        jsonify(
            {
                "message": "Document uploaded.",
                "document": document.to_dict(),
                "current_step": user.visa_workflow.current_step,
            }
        ),
        201,
    )
