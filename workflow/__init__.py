"""Onboarding review and OPT visa pipeline workflow engine."""

from .errors import NotFoundError, PrerequisiteError, ValidationError
from .onboarding import decide_application, submit_application, update_profile
from .visa_progress import derive_progress, employee_visa_status, hr_visa_summary
from .visa_sequence import check_upload, record_review, record_upload

__all__ = [
    "NotFoundError",
    "PrerequisiteError",
    "ValidationError",
    "check_upload",
    "decide_application",
    "derive_progress",
    "employee_visa_status",
    "hr_visa_summary",
    "record_review",
    "record_upload",
    "submit_application",
    "update_profile",
]
