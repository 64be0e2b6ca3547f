"""Errors raised by workflow transitions.

They extend Werkzeug's HTTP exceptions so the application's JSON error
handler renders them without any translation layer.
"""

from __future__ import annotations

from werkzeug.exceptions import BadRequest, NotFound


class ValidationError(BadRequest):
    """The request cannot be applied to the current workflow state."""


class PrerequisiteError(ValidationError):
    """A visa document was uploaded before an earlier step was approved."""

    def __init__(self, description: str, missing_step: str):
        super().__init__(description)
        self.missing_step = missing_step


class NotFoundError(NotFound):
    """An employee, application, or document does not exist."""
