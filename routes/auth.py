"""Authentication blueprint providing register, login and identity endpoints."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import create_access_token, jwt_required
from sqlalchemy import func, or_
from werkzeug.exceptions import BadRequest, Conflict, Unauthorized

from models import db
from models.user import User
from utils.current_user import require_user
from utils.request_validation import parse_json_request

auth_bp = Blueprint("auth", __name__)


def _normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


def _serialize_account(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
    }


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Register a new employee account.

    HR accounts are provisioned out of band (see ``scripts/seed_hr.py``).
    """
    payload = parse_json_request(request)
    username = (payload.get("username") or "").strip()
    email = _normalize_email(payload.get("email"))
    password = (payload.get("password") or "").strip()

    if not username or not email or not password:
        raise BadRequest("Username, email and password are required.")

    existing = User.query.filter(
        or_(func.lower(User.email) == email, User.username == username)
    ).first()
    if existing is not None:
        raise Conflict("A user with that username or email already exists.")

    user = User.new_account(username=username, email=email)
    user.set_password(password)

    db.session.add(user)
    db.session.commit()
    current_app.logger.info("Registered employee account %s", user.id)

    return (
        jsonify(
            {
                "message": "Registration successful.",
                "user": _serialize_account(user),
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate by username or email and return a JWT access token."""
    payload = parse_json_request(request)
    identifier = (payload.get("username") or payload.get("email") or "").strip()
    password = (payload.get("password") or "").strip()

    if not identifier or not password:
        raise BadRequest("Username and password are required.")

    user = User.query.filter(
        or_(User.username == identifier, func.lower(User.email) == identifier.lower())
    ).first()
    if user is None or not user.check_password(password):
        raise Unauthorized("Invalid credentials.")

    token = create_access_token(identity=str(user.id))
    return (
        jsonify({"access_token": token, "user": _serialize_account(user)}),
        HTTPStatus.OK,
    )


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    """Return the authenticated account."""
    return jsonify(_serialize_account(require_user()))
