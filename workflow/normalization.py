"""Keyword tables that map free-text form answers onto fixed enumerations.

Each table is scanned in order and the first keyword contained in the
lower-cased answer wins, so more specific keywords must come first
("female" before "male", "non" before "citizen"). Empty answers map to None.
"""

from __future__ import annotations

GENDER_KEYWORDS = (
    ("female", "female"),
    ("woman", "female"),
    ("male", "male"),
    ("man", "male"),
)
GENDER_FALLBACK = "prefer_not_to_answer"

WORK_AUTHORIZATION_KEYWORDS = (
    ("green", "green_card"),
    ("citizen", "citizen"),
    ("h1", "h1b"),
    ("l2", "l2"),
    ("f1", "f1_opt"),
    ("opt", "f1_opt"),
    ("h4", "h4"),
)
WORK_AUTHORIZATION_FALLBACK = "other"

CITIZENSHIP_KEYWORDS = (
    ("non", "non_resident"),
    ("citizen", "citizen"),
    ("green", "green_card"),
)
CITIZENSHIP_FALLBACK = "non_resident"

OPT_CATEGORY = "f1_opt"


def _match(value, table, fallback):
    if value is None:
        return None
    text = str(value).strip().lower()
    if not text:
        return None
    for keyword, normalized in table:
        if keyword in text:
            return normalized
    return fallback


def normalize_gender(value: str | None) -> str | None:
    return _match(value, GENDER_KEYWORDS, GENDER_FALLBACK)


def normalize_work_authorization(value: str | None) -> str | None:
    """Map a work authorization answer; unknown answers become ``other``."""

    return _match(value, WORK_AUTHORIZATION_KEYWORDS, WORK_AUTHORIZATION_FALLBACK)


def normalize_citizenship(value: str | None) -> str | None:
    return _match(value, CITIZENSHIP_KEYWORDS, CITIZENSHIP_FALLBACK)


def normalize_employment(employment: dict | None) -> dict | None:
    """Return a copy of the employment section with a canonical authorization.

    When an unrecognised answer collapses to ``other`` the original text is
    kept in ``work_authorization_other`` unless the form already provides it.
    """

    if employment is None:
        return None
    result = dict(employment)
    raw = result.get("work_authorization")
    normalized = normalize_work_authorization(raw)
    result["work_authorization"] = normalized
    if (
        normalized == WORK_AUTHORIZATION_FALLBACK
        and str(raw).strip().lower() != WORK_AUTHORIZATION_FALLBACK
        and not result.get("work_authorization_other")
    ):
        result["work_authorization_other"] = str(raw).strip()
    return result
