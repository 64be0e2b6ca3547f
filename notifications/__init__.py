"""Notification channels."""

from .abstract_notifier import AbstractNotifier, NotificationError
from .smtp_notifier import LogNotifier, SmtpNotifier, build_notifier

__all__ = [
    "AbstractNotifier",
    "LogNotifier",
    "NotificationError",
    "SmtpNotifier",
    "build_notifier",
]
