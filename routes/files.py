"""Serve stored uploads to their owner or to HR."""

from __future__ import annotations

from flask import Blueprint, current_app, send_file
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import Forbidden, NotFound

from models.document import Document
from storage.local_storage import LocalStorage
from utils.current_user import require_user

files_bp = Blueprint("files", __name__)


@files_bp.route("/<path:filename>", methods=["GET"])
@jwt_required()
def download_file(filename: str):
    """Return a stored document file."""

    user = require_user()
    document = Document.query.filter_by(file_path=filename).first()
    if document is None:
        raise NotFound("Document not found.")
    if not user.is_hr and document.user_id != user.id:
        raise Forbidden("You do not have access to this document.")

    storage = LocalStorage(
        current_app.config.get("UPLOAD_DIR"),
        current_app.config.get("UPLOAD_URL_PREFIX"),
    )
    if not storage.exists(document.file_path):
        raise NotFound("Stored file could not be found.")

    return send_file(
        storage.open(document.file_path),
        mimetype=document.mime_type or "application/octet-stream",
        as_attachment=True,
        download_name=document.original_name or document.file_name,
    )
