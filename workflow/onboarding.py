"""Onboarding application review state machine.

``never_submitted -> pending -> approved | rejected``; a rejected application
may be resubmitted (back to ``pending``). Approved applications are locked
unless the resubmission policy says otherwise. Every transition validates
its input before touching the user, so a refused call changes nothing.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime

from models.document import REVIEW_DECISIONS
from models.user import User

from .employment import sync_visa_requirement
from .errors import ValidationError
from .normalization import (
    normalize_citizenship,
    normalize_employment,
    normalize_gender,
)

logger = logging.getLogger(__name__)

PROFILE_SECTIONS = (
    "personal_info",
    "address",
    "contact_info",
    "employment",
    "reference",
    "emergency_contacts",
)
DEFAULT_REJECTION_FEEDBACK = "Please review the comments and resubmit."
LIST_SECTIONS = ("emergency_contacts",)


def _check_section_shapes(payload: dict) -> None:
    for section in PROFILE_SECTIONS:
        if section not in payload:
            continue
        if section in LIST_SECTIONS:
            if not isinstance(payload[section], list):
                raise ValidationError(f"{section} must be a list.")
        elif not isinstance(payload[section], dict):
            raise ValidationError(f"{section} must be an object.")


def sanitize_onboarding_payload(payload: dict, email: str) -> dict:
    """Return a normalized copy of a submitted onboarding form."""

    _check_section_shapes(payload)
    data = {
        key: copy.deepcopy(payload[key]) for key in PROFILE_SECTIONS if key in payload
    }

    personal_info = data.get("personal_info")
    if personal_info is not None:
        personal_info["email"] = email
        personal_info["gender"] = normalize_gender(personal_info.get("gender"))
        personal_info["citizenship_status"] = normalize_citizenship(
            personal_info.get("citizenship_status")
        )

    if "employment" in data:
        data["employment"] = normalize_employment(data["employment"])

    return data


def submit_application(
    user: User,
    payload: dict,
    *,
    allow_resubmit_after_approval: bool = False,
) -> None:
    """Store the employee's form and move the application to ``pending``."""

    onboarding = user.onboarding
    if onboarding.status == "approved" and not allow_resubmit_after_approval:
        raise ValidationError("Onboarding already approved.")

    if not isinstance(payload, dict):
        raise ValidationError("Onboarding form must be an object.")
    form = sanitize_onboarding_payload(payload, user.email)
    personal_info = form.get("personal_info") or {}
    if not personal_info.get("first_name") or not personal_info.get("last_name"):
        raise ValidationError("First name and last name are required.")

    onboarding.form_data = form
    onboarding.status = "pending"
    onboarding.submitted_at = datetime.utcnow()
    onboarding.feedback = None

    sync_visa_requirement(user)
    logger.info("Onboarding application submitted for user %s", user.id)


def decide_application(
    user: User,
    status: str,
    reviewer_id: int,
    feedback: str | None = None,
) -> None:
    """Apply HR's decision to a pending onboarding application."""

    if status not in REVIEW_DECISIONS:
        raise ValidationError("Status must be approved or rejected.")

    onboarding = user.onboarding
    if not onboarding.form_data:
        raise ValidationError("Employee has not submitted an application.")
    if onboarding.status != "pending":
        raise ValidationError("Only pending applications can be reviewed.")

    if status == "approved":
        profile = copy.deepcopy(onboarding.form_data)
        personal_info = dict(profile.get("personal_info") or {})
        personal_info["email"] = user.email
        photo = user.documents.get("profile_picture")
        if photo is not None:
            personal_info["profile_picture"] = photo.url
        profile["personal_info"] = personal_info
        user.profile = profile
        onboarding.feedback = None
        sync_visa_requirement(user)
    else:
        onboarding.feedback = feedback or DEFAULT_REJECTION_FEEDBACK

    onboarding.status = status
    onboarding.reviewed_at = datetime.utcnow()
    onboarding.reviewer_id = reviewer_id
    logger.info(
        "Onboarding application for user %s %s by reviewer %s",
        user.id,
        status,
        reviewer_id,
    )


def update_profile(user: User, updates: dict) -> dict:
    """Replace the given profile sections on an approved employee.

    Editing the ``employment`` section re-evaluates the visa pipeline.
    """

    if not user.profile:
        raise ValidationError("Profile is not available yet.")
    if not isinstance(updates, dict):
        raise ValidationError("Profile updates must be an object.")
    _check_section_shapes(updates)

    profile = copy.deepcopy(user.profile)
    for section in PROFILE_SECTIONS:
        if section in updates:
            profile[section] = copy.deepcopy(updates[section])

    personal_info = dict(profile.get("personal_info") or {})
    personal_info["email"] = user.email
    personal_info["gender"] = normalize_gender(personal_info.get("gender"))
    profile["personal_info"] = personal_info

    if isinstance(profile.get("employment"), dict):
        profile["employment"] = normalize_employment(profile["employment"])

    user.profile = profile
    if "employment" in updates:
        sync_visa_requirement(user)
    logger.info("Profile updated for user %s", user.id)
    return profile
