"""Bootstrap demo data for local development."""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app import create_app
from models import db
from models.user import User
from workflow import decide_application, submit_application


@dataclass
class CreatedRecords:
    """Container for created or updated record identifiers."""

    hr_id: int
    opt_employee_id: int
    citizen_employee_id: int


HR_USERNAME = "hradmin"
HR_EMAIL = "hr@example.com"
EMPLOYEE_PASSWORD = "Password123!"


def get_or_create_user(username: str, email: str, role: str) -> User:
    """Create or update a user with the demo password."""

    user = User.query.filter_by(username=username).first()
    if user is None:
        user = User.new_account(username=username, email=email, role=role)
        db.session.add(user)
    else:
        user.email = email
        user.role = role
    user.set_password(EMPLOYEE_PASSWORD)
    return user


def onboarding_form(first_name: str, last_name: str, work_authorization: str) -> dict:
    """Build a filled-in onboarding form."""

    start = date.today()
    return {
        "personal_info": {
            "first_name": first_name,
            "last_name": last_name,
            "preferred_name": first_name,
            "gender": "prefer not to answer",
            "citizenship_status": work_authorization,
        },
        "address": {
            "building": "123",
            "street": "Main St",
            "city": "San Jose",
            "state": "CA",
            "zip": "95112",
        },
        "contact_info": {"cell_phone": "555-123-4567", "work_phone": "555-987-6543"},
        "employment": {
            "work_authorization": work_authorization,
            "visa_title": "Software Engineer",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=365)).isoformat(),
        },
    }


def approve_onboarding(user: User, form: dict, reviewer: User) -> None:
    """Submit and approve onboarding unless it is already approved."""

    if user.onboarding.status == "approved":
        return
    submit_application(user, form)
    decide_application(user, "approved", reviewer_id=reviewer.id)


def bootstrap() -> CreatedRecords:
    """Bootstrap the demo records and return their identifiers."""

    app = create_app()
    with app.app_context():
        db.create_all()

        hr = get_or_create_user(HR_USERNAME, HR_EMAIL, "hr")
        opt_employee = get_or_create_user("employee1", "employee1@example.com", "employee")
        citizen = get_or_create_user("employee2", "employee2@example.com", "employee")

        db.session.flush()

        approve_onboarding(opt_employee, onboarding_form("Emily", "Chen", "F1 OPT"), hr)
        approve_onboarding(citizen, onboarding_form("Marcus", "Lee", "Citizen"), hr)

        db.session.commit()

        return CreatedRecords(
            hr_id=hr.id,
            opt_employee_id=opt_employee.id,
            citizen_employee_id=citizen.id,
        )


if __name__ == "__main__":
    records = bootstrap()
    print(json.dumps(asdict(records)))
