"""Helpers resolving the authenticated user from the JWT identity."""

from __future__ import annotations

from flask_jwt_extended import get_jwt_identity
from werkzeug.exceptions import Forbidden, NotFound

from models import db
from models.user import User


def get_current_user() -> User | None:
    try:
        identity = get_jwt_identity()
    except RuntimeError:
        return None
    if identity is None:
        return None
    try:
        user_id = int(identity)
    except (TypeError, ValueError):
        return None
    return db.session.get(User, user_id)


def require_user() -> User:
    user = get_current_user()
    if user is None:
        raise NotFound("User not found.")
    return user


def require_role(*roles: str) -> User:
    """Return the current user if their role is one of ``roles``."""

    user = require_user()
    if user.role not in roles:
        raise Forbidden("You do not have access to this resource.")
    return user


def require_hr() -> User:
    user = require_user()
    if not user.is_hr:
        raise Forbidden("HR privileges required.")
    return user
