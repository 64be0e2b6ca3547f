"""Effective employment data and its link to the visa pipeline.

Precedence rule: once a profile exists it is the only source, even for a
section it lacks; until approval the submitted onboarding form is used. Nothing else reads these sections
directly.
"""

from __future__ import annotations

import logging

from models.document import VISA_SEQUENCE
from models.user import User

from .normalization import OPT_CATEGORY

logger = logging.getLogger(__name__)


def _effective_section(user: User, section: str) -> dict:
    if user.profile:
        source = user.profile
    else:
        source = user.onboarding.form_data if user.onboarding else None
    value = (source or {}).get(section)
    return value if isinstance(value, dict) else {}


def effective_employment(user: User) -> dict:
    return _effective_section(user, "employment")


def effective_personal_info(user: User) -> dict:
    return _effective_section(user, "personal_info")


def effective_contact_info(user: User) -> dict:
    return _effective_section(user, "contact_info")


def requires_opt(user: User) -> bool:
    """Return True when the employee's effective work authorization is F1 OPT."""

    return effective_employment(user).get("work_authorization") == OPT_CATEGORY


def legal_name(user: User) -> str:
    info = effective_personal_info(user)
    if not info.get("first_name") and not info.get("last_name"):
        return user.username
    parts = (info.get("first_name"), info.get("middle_name"), info.get("last_name"))
    return " ".join(part for part in parts if part)


def sync_visa_requirement(user: User) -> None:
    """Recompute the OPT requirement from the effective employment section.

    The stored step is reset unconditionally: switching category restarts the
    pipeline rather than carrying earlier progress over.
    """

    is_opt = requires_opt(user)
    workflow = user.visa_workflow
    workflow.opt_required = is_opt
    workflow.current_step = VISA_SEQUENCE[0] if is_opt else "not_applicable"
    logger.debug(
        "Visa requirement synced for user %s: opt_required=%s step=%s",
        user.id,
        workflow.opt_required,
        workflow.current_step,
    )
