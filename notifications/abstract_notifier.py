"""Notification channel abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod


class NotificationError(RuntimeError):
    """Raised when a message could not be delivered."""


class AbstractNotifier(ABC):
    """Interface for delivering messages to employees."""

    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> None:
        """Deliver a message or raise :class:`NotificationError`."""
