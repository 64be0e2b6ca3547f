"""HR blueprint: onboarding review, visa document review and employee lookups."""

from __future__ import annotations

import math
from datetime import datetime
from html import escape

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import BadGateway

from models import db
from models.onboarding import OnboardingApplication
from models.user import User
from notifications import NotificationError
from utils.current_user import require_hr
from utils.request_validation import parse_choice, parse_json_request
from workflow import (
    NotFoundError,
    decide_application,
    derive_progress,
    hr_visa_summary,
    record_review,
)
from workflow.employment import (
    effective_contact_info,
    effective_employment,
    effective_personal_info,
    legal_name,
)

hr_bp = Blueprint("hr", __name__)

ONBOARDING_FILTER_STATUSES = ("pending", "approved", "rejected")
DEFAULT_NOTIFICATION_SUBJECT = "Visa Status Update"


def _get_employee_or_404(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None or user.role != "employee":
        raise NotFoundError("Employee not found.")
    return user


def _parse_date(value) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def _days_remaining(user: User, now: datetime | None = None) -> int | None:
    end_date = _parse_date(effective_employment(user).get("end_date"))
    if end_date is None:
        return None
    now = now or datetime.utcnow()
    return math.ceil((end_date - now).total_seconds() / 86400)


def _employee_summary(user: User) -> dict:
    info = effective_personal_info(user)
    contact = effective_contact_info(user)
    return {
        "id": user.id,
        "name": legal_name(user),
        "ssn": info.get("ssn") or "N/A",
        "work_authorization": effective_employment(user).get("work_authorization")
        or "N/A",
        "phone": contact.get("cell_phone") or contact.get("work_phone") or "N/A",
        "email": user.email,
        "onboarding_status": (
            user.onboarding.status if user.onboarding else "never_submitted"
        ),
    }


def _matches_search(user: User, term: str) -> bool:
    term = term.lower()
    candidates = [user.username]
    for source in (user.profile, user.onboarding.form_data if user.onboarding else None):
        info = (source or {}).get("personal_info") or {}
        candidates.extend(
            info.get(key) for key in ("first_name", "last_name", "preferred_name")
        )
    return any(term in str(value).lower() for value in candidates if value)


def _sort_key(user: User) -> tuple:
    info = effective_personal_info(user)
    return ((info.get("last_name") or "").lower(), user.username.lower())


@hr_bp.route("/employees", methods=["GET"])
@jwt_required()
def list_employees():
    """List employee summaries, optionally filtered by a name search."""

    require_hr()
    employees = User.query.filter_by(role="employee").all()

    search = (request.args.get("search") or "").strip()
    if search:
        employees = [user for user in employees if _matches_search(user, search)]
    employees.sort(key=_sort_key)

    return jsonify(
        {
            "total": len(employees),
            "employees": [_employee_summary(user) for user in employees],
        }
    )


@hr_bp.route("/employees/<int:user_id>", methods=["GET"])
@jwt_required()
def get_employee(user_id: int):
    require_hr()
    return jsonify({"employee": _get_employee_or_404(user_id).to_dict()})


@hr_bp.route("/onboarding", methods=["GET"])
@jwt_required()
def list_applications():
    """List onboarding applications, newest submission first."""

    require_hr()
    query = User.query.filter(User.role == "employee").join(User.onboarding)

    status = parse_choice(
        request.args.get("status"),
        ONBOARDING_FILTER_STATUSES,
        message="Invalid status filter.",
    )
    if status:
        query = query.filter(OnboardingApplication.status == status)

    applications = query.order_by(OnboardingApplication.submitted_at.desc()).all()
    items = [
        {
            "user_id": user.id,
            "name": legal_name(user),
            "email": user.email,
            "status": user.onboarding.status,
            "submitted_at": (
                user.onboarding.submitted_at.isoformat()
                if user.onboarding.submitted_at
                else None
            ),
            "feedback": user.onboarding.feedback,
        }
        for user in applications
    ]

    return jsonify({"total": len(items), "applications": items})


@hr_bp.route("/onboarding/<int:user_id>", methods=["GET"])
@jwt_required()
def get_application(user_id: int):
    require_hr()
    user = _get_employee_or_404(user_id)
    onboarding = user.onboarding
    if not onboarding.form_data:
        raise NotFoundError("Application has not been submitted.")

    return jsonify(
        {
            "user_id": user.id,
            "name": legal_name(user),
            "email": user.email,
            "status": onboarding.status,
            "submitted_at": (
                onboarding.submitted_at.isoformat() if onboarding.submitted_at else None
            ),
            "feedback": onboarding.feedback,
            "form": onboarding.form_data,
        }
    )


@hr_bp.route("/onboarding/<int:user_id>", methods=["PATCH"])
@jwt_required()
def review_application(user_id: int):
    """Approve or reject a pending onboarding application."""

    reviewer = require_hr()
    payload = parse_json_request(request, required_keys=["status"])
    user = _get_employee_or_404(user_id)

    decide_application(
        user,
        payload.get("status"),
        reviewer_id=reviewer.id,
        feedback=payload.get("feedback"),
    )
    db.session.commit()

    return jsonify(
        {
            "message": f"Application {user.onboarding.status}",
            "onboarding": user.onboarding.to_dict(),
            "visa_workflow": user.visa_workflow.to_dict(),
        }
    )


@hr_bp.route("/visa/in-progress", methods=["GET"])
@jwt_required()
def visa_in_progress():
    """OPT employees whose document sequence is not yet complete."""

    require_hr()
    records = []
    for user in User.query.filter_by(role="employee").order_by(User.id).all():
        progress = derive_progress(user)
        if not progress.requires_opt or progress.completed:
            continue

        employment = effective_employment(user)
        records.append(
            {
                "user_id": user.id,
                "name": legal_name(user),
                "work_authorization": employment.get("work_authorization"),
                "start_date": employment.get("start_date"),
                "end_date": employment.get("end_date"),
                "days_remaining": _days_remaining(user),
                **hr_visa_summary(progress),
            }
        )

    return jsonify({"total": len(records), "employees": records})


@hr_bp.route("/visa/all", methods=["GET"])
@jwt_required()
def visa_all():
    """Employees in the OPT pipeline or holding approved visa documents."""

    require_hr()
    records = []
    for user in User.query.filter_by(role="employee").order_by(User.id).all():
        approved = [
            {
                "type": doc.doc_type,
                "label": doc.label,
                "url": doc.url,
                "reviewed_at": doc.reviewed_at.isoformat() if doc.reviewed_at else None,
            }
            for doc in user.ordered_documents()
            if doc.category == "visa" and doc.status == "approved"
        ]
        progress = derive_progress(user)
        if not progress.requires_opt and not approved:
            continue

        records.append(
            {
                "user_id": user.id,
                "name": legal_name(user),
                "documents": approved,
                "current_step": progress.current_step,
            }
        )

    return jsonify({"total": len(records), "records": records})


@hr_bp.route("/visa/documents/<int:user_id>/<doc_type>", methods=["PATCH"])
@jwt_required()
def review_visa_document(user_id: int, doc_type: str):
    """Approve or reject an uploaded visa document."""

    reviewer = require_hr()
    payload = parse_json_request(request, required_keys=["status"])
    user = _get_employee_or_404(user_id)

    document = record_review(
        user,
        doc_type,
        payload.get("status"),
        reviewer_id=reviewer.id,
        feedback=payload.get("feedback"),
    )
    db.session.commit()

    return jsonify(
        {
            "message": f"{document.label} marked as {document.status}",
            "document": document.to_dict(),
            "visa_workflow": user.visa_workflow.to_dict(),
        }
    )


@hr_bp.route("/visa/notify/<int:user_id>", methods=["POST"])
@jwt_required()
def notify_employee(user_id: int):
    """E-mail an employee about their visa status and log the notification."""

    require_hr()
    payload = parse_json_request(request, required_keys=["message"])
    user = _get_employee_or_404(user_id)

    message = payload["message"]
    subject = payload.get("subject") or DEFAULT_NOTIFICATION_SUBJECT
    body = f"<p>Hello {escape(legal_name(user))},</p><p>{escape(message)}</p>"

    notifier = current_app.extensions["notifier"]
    try:
        notifier.send(user.email, subject, body)
    except NotificationError as exc:
        current_app.logger.warning("Notification to user %s failed: %s", user.id, exc)
        raise BadGateway(str(exc)) from exc

    user.visa_workflow.log_notification(subject, message)
    db.session.commit()
    current_app.logger.info("Visa notification sent to user %s", user.id)

    return jsonify({"message": "Notification sent."})
