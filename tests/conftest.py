"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient
from flask_jwt_extended import create_access_token

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.user import User  # noqa: E402
from notifications import AbstractNotifier, NotificationError  # noqa: E402


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    RATE_LIMIT = "1000 per minute"
    NOTIFIER_BACKEND = "log"
    ALLOW_RESUBMIT_AFTER_APPROVAL = False


class RecordingNotifier(AbstractNotifier):
    """Collects sent messages; can be told to fail."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    def send(self, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise NotificationError("SMTP relay unavailable.")
        self.sent.append({"to": to, "subject": subject, "body": body})


@pytest.fixture()
def app(tmp_path) -> Flask:
    """Create a Flask application instance for tests."""

    upload_dir = tmp_path / "uploads"

    class TestConfig(_BaseTestConfig):
        UPLOAD_DIR = str(upload_dir)

    application = create_app(TestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def create_user(app: Flask):
    """Return a factory that persists a user and returns its id."""

    def _create(
        username: str,
        role: str = "employee",
        email: str | None = None,
        password: str = "Password123!",
    ) -> int:
        with app.app_context():
            user = User.new_account(
                username=username,
                email=email or f"{username}@example.com",
                role=role,
            )
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _create


@pytest.fixture()
def auth_headers(app: Flask):
    """Return a factory producing bearer headers for a user id."""

    def _headers(user_id: int) -> dict[str, str]:
        with app.app_context():
            token = create_access_token(identity=str(user_id))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def notifier(app: Flask) -> RecordingNotifier:
    """Swap the application's notifier for one that records messages."""

    recorder = RecordingNotifier()
    app.extensions["notifier"] = recorder
    return recorder
