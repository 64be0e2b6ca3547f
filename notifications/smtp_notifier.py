"""SMTP and log-only notifier implementations."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from .abstract_notifier import AbstractNotifier, NotificationError

logger = logging.getLogger(__name__)


class SmtpNotifier(AbstractNotifier):
    """Send HTML e-mail through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or f"HR Department <{username}>"
        self.use_tls = use_tls
        self.timeout = timeout

    def send(self, to: str, subject: str, body: str) -> None:
        if not to or not subject or not body:
            raise NotificationError(
                "Recipient, subject, and body are required to send an email."
            )
        if not self.username or not self.password:
            raise NotificationError(
                "Email credentials are missing. Please set EMAIL_USER and EMAIL_PASS."
            )

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body, subtype="html")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as client:
                if self.use_tls:
                    client.starttls()
                client.login(self.username, self.password)
                client.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Failed to send email to %s: %s", to, exc)
            raise NotificationError(f"Failed to send email: {exc}") from exc

        logger.info("Sent email %r to %s", subject, to)


class LogNotifier(AbstractNotifier):
    """Write messages to the log instead of sending them."""

    def send(self, to: str, subject: str, body: str) -> None:
        if not to or not subject or not body:
            raise NotificationError(
                "Recipient, subject, and body are required to send an email."
            )
        logger.info("Notification to %s: %s\n%s", to, subject, body)


def build_notifier(config) -> AbstractNotifier:
    """Return the notifier selected by ``NOTIFIER_BACKEND``."""

    backend = (config.get("NOTIFIER_BACKEND") or "log").strip().lower()
    if backend == "smtp":
        return SmtpNotifier(
            host=config.get("EMAIL_HOST"),
            port=int(config.get("EMAIL_PORT") or 587),
            username=config.get("EMAIL_USER"),
            password=config.get("EMAIL_PASS"),
            sender=config.get("EMAIL_FROM"),
            use_tls=bool(config.get("EMAIL_USE_TLS", True)),
        )
    if backend == "log":
        return LogNotifier()
    raise ValueError(f"Unknown notifier backend: {backend}")
