"""Tests for the HR review and lookup endpoints."""

from __future__ import annotations

import io

import pytest
from flask.testing import FlaskClient

from models import db
from models.user import User


def _form(first: str, last: str, work_authorization: str, **employment) -> dict:
    employment["work_authorization"] = work_authorization
    return {
        "personal_info": {"first_name": first, "last_name": last, "ssn": "111-22-3333"},
        "contact_info": {"cell_phone": "555-0101"},
        "employment": employment,
    }


@pytest.fixture()
def hr_headers(create_user, auth_headers):
    return auth_headers(create_user("hradmin", role="hr"))


@pytest.fixture()
def submitted_employee(client: FlaskClient, create_user, auth_headers):
    """Return a factory creating an employee with a submitted application."""

    def _create(username: str, form: dict):
        user_id = create_user(username)
        headers = auth_headers(user_id)
        response = client.post("/employee/onboarding", json=form, headers=headers)
        assert response.status_code == 200
        return user_id, headers

    return _create


def _upload(client: FlaskClient, headers, doc_type: str):
    return client.post(
        f"/employee/documents/{doc_type}",
        data={"file": (io.BytesIO(b"scan"), f"{doc_type}.pdf")},
        headers=headers,
        content_type="multipart/form-data",
    )


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/hr/employees"),
        ("get", "/hr/onboarding"),
        ("get", "/hr/visa/in-progress"),
        ("get", "/hr/visa/all"),
        ("patch", "/hr/onboarding/1"),
        ("post", "/hr/visa/notify/1"),
    ],
)
def test_hr_endpoints_forbidden_for_employees(
    client: FlaskClient, create_user, auth_headers, method, path
):
    headers = auth_headers(create_user("worker"))

    response = getattr(client, method)(path, headers=headers, json={"status": "approved"})

    assert response.status_code == 403
    assert response.get_json()["detail"] == "HR privileges required."


def test_list_employees_sorted_and_searchable(
    client: FlaskClient, hr_headers, submitted_employee, create_user
):
    submitted_employee("zed", _form("Zed", "Young", "H1B"))
    submitted_employee("amy", _form("Amy", "Adams", "F1 OPT"))
    create_user("newbie")

    response = client.get("/hr/employees", headers=hr_headers)

    assert response.status_code == 200
    data = response.get_json()
    assert data["total"] == 3
    names = [employee["name"] for employee in data["employees"]]
    assert names == ["newbie", "Amy Adams", "Zed Young"]
    amy = data["employees"][1]
    assert amy["ssn"] == "111-22-3333"
    assert amy["work_authorization"] == "f1_opt"
    assert amy["phone"] == "555-0101"
    assert amy["onboarding_status"] == "pending"
    assert data["employees"][0]["ssn"] == "N/A"

    search = client.get("/hr/employees?search=you", headers=hr_headers).get_json()
    assert [employee["name"] for employee in search["employees"]] == ["Zed Young"]


def test_get_employee_detail(client: FlaskClient, hr_headers, submitted_employee):
    user_id, _ = submitted_employee("amy", _form("Amy", "Adams", "F1 OPT"))

    response = client.get(f"/hr/employees/{user_id}", headers=hr_headers)

    assert response.status_code == 200
    employee = response.get_json()["employee"]
    assert employee["username"] == "amy"
    assert "password_hash" not in employee
    assert employee["visa_workflow"]["current_step"] == "opt_receipt"


def test_unknown_employee_is_404(client: FlaskClient, hr_headers, create_user):
    hr_id = create_user("otherhr", role="hr")

    assert client.get("/hr/employees/999", headers=hr_headers).status_code == 404
    assert client.get(f"/hr/employees/{hr_id}", headers=hr_headers).status_code == 404


def test_onboarding_list_filters_by_status(
    client: FlaskClient, hr_headers, submitted_employee, create_user
):
    pending_id, _ = submitted_employee("amy", _form("Amy", "Adams", "Citizen"))
    rejected_id, _ = submitted_employee("bob", _form("Bob", "Brown", "Citizen"))
    create_user("newbie")
    client.patch(
        f"/hr/onboarding/{rejected_id}",
        json={"status": "rejected", "feedback": "Fix address"},
        headers=hr_headers,
    )

    everything = client.get("/hr/onboarding", headers=hr_headers).get_json()
    assert everything["total"] == 3

    pending = client.get("/hr/onboarding?status=pending", headers=hr_headers).get_json()
    assert [item["user_id"] for item in pending["applications"]] == [pending_id]

    rejected = client.get(
        "/hr/onboarding?status=rejected", headers=hr_headers
    ).get_json()
    assert rejected["applications"][0]["feedback"] == "Fix address"

    invalid = client.get("/hr/onboarding?status=bogus", headers=hr_headers)
    assert invalid.status_code == 400
    assert invalid.get_json()["detail"] == "Invalid status filter."


def test_get_application(client: FlaskClient, hr_headers, submitted_employee, create_user):
    user_id, _ = submitted_employee("amy", _form("Amy", "Adams", "Citizen"))
    unsubmitted = create_user("newbie")

    response = client.get(f"/hr/onboarding/{user_id}", headers=hr_headers)
    assert response.status_code == 200
    data = response.get_json()
    assert data["status"] == "pending"
    assert data["form"]["personal_info"]["first_name"] == "Amy"

    missing = client.get(f"/hr/onboarding/{unsubmitted}", headers=hr_headers)
    assert missing.status_code == 404


def test_review_application(client: FlaskClient, hr_headers, submitted_employee):
    user_id, headers = submitted_employee("amy", _form("Amy", "Adams", "Citizen"))

    response = client.patch(
        f"/hr/onboarding/{user_id}", json={"status": "approved"}, headers=hr_headers
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["message"] == "Application approved"
    assert data["onboarding"]["status"] == "approved"

    profile = client.get("/employee/profile", headers=headers).get_json()
    assert profile["profile"]["personal_info"]["first_name"] == "Amy"

    again = client.patch(
        f"/hr/onboarding/{user_id}", json={"status": "rejected"}, headers=hr_headers
    )
    assert again.status_code == 400


def test_review_application_requires_status(
    client: FlaskClient, hr_headers, submitted_employee
):
    user_id, _ = submitted_employee("amy", _form("Amy", "Adams", "Citizen"))

    response = client.patch(
        f"/hr/onboarding/{user_id}", json={"feedback": "hi"}, headers=hr_headers
    )

    assert response.status_code == 400
    assert response.get_json()["detail"] == "Missing required fields: status."


def test_visa_in_progress_and_all(client: FlaskClient, hr_headers, submitted_employee):
    opt_id, opt_headers = submitted_employee(
        "amy", _form("Amy", "Adams", "F1 OPT", end_date="2099-01-01")
    )
    submitted_employee("bob", _form("Bob", "Brown", "Citizen"))

    in_progress = client.get("/hr/visa/in-progress", headers=hr_headers).get_json()
    assert in_progress["total"] == 1
    record = in_progress["employees"][0]
    assert record["user_id"] == opt_id
    assert record["current_step"] == "opt_receipt"
    assert record["action"] == "notify"
    assert record["next_step"] == "Employee must upload OPT Receipt"
    assert record["days_remaining"] > 0

    all_records = client.get("/hr/visa/all", headers=hr_headers).get_json()
    assert [item["user_id"] for item in all_records["records"]] == [opt_id]
    assert all_records["records"][0]["documents"] == []

    _upload(client, opt_headers, "opt_receipt")
    client.patch(
        f"/hr/visa/documents/{opt_id}/opt_receipt",
        json={"status": "approved"},
        headers=hr_headers,
    )

    all_records = client.get("/hr/visa/all", headers=hr_headers).get_json()
    documents = all_records["records"][0]["documents"]
    assert [doc["type"] for doc in documents] == ["opt_receipt"]
    assert all_records["records"][0]["current_step"] == "opt_ead"


def test_review_visa_document(client: FlaskClient, hr_headers, submitted_employee):
    user_id, headers = submitted_employee("amy", _form("Amy", "Adams", "F1 OPT"))
    _upload(client, headers, "opt_receipt")

    in_progress = client.get("/hr/visa/in-progress", headers=hr_headers).get_json()
    assert in_progress["employees"][0]["action"] == "review"
    assert in_progress["employees"][0]["pending_document"]["type"] == "opt_receipt"

    response = client.patch(
        f"/hr/visa/documents/{user_id}/opt_receipt",
        json={"status": "rejected", "feedback": "Unreadable"},
        headers=hr_headers,
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["document"]["status"] == "rejected"
    assert data["document"]["feedback"] == "Unreadable"
    assert data["visa_workflow"]["current_step"] == "opt_receipt"

    status = client.get("/employee/visa-status", headers=headers).get_json()
    assert status["message"] == "Unreadable"


def test_review_missing_visa_document(client: FlaskClient, hr_headers, submitted_employee):
    user_id, _ = submitted_employee("amy", _form("Amy", "Adams", "F1 OPT"))

    response = client.patch(
        f"/hr/visa/documents/{user_id}/opt_ead",
        json={"status": "approved"},
        headers=hr_headers,
    )

    assert response.status_code == 404
    assert response.get_json()["detail"] == "Document not found for this employee."


def test_notify_employee(app, client: FlaskClient, hr_headers, submitted_employee, notifier):
    user_id, _ = submitted_employee("amy", _form("Amy", "Adams", "F1 OPT"))

    response = client.post(
        f"/hr/visa/notify/{user_id}",
        json={"message": "Please upload <your> receipt"},
        headers=hr_headers,
    )

    assert response.status_code == 200
    assert len(notifier.sent) == 1
    sent = notifier.sent[0]
    assert sent["to"] == "amy@example.com"
    assert sent["subject"] == "Visa Status Update"
    assert "Hello Amy Adams" in sent["body"]
    assert "&lt;your&gt;" in sent["body"]

    with app.app_context():
        workflow = db.session.get(User, user_id).visa_workflow
        assert workflow.last_notification_at is not None
        assert [entry.message for entry in workflow.notifications] == [
            "Please upload <your> receipt"
        ]


def test_notify_failure_is_reported_and_not_logged(
    app, client: FlaskClient, hr_headers, submitted_employee, notifier
):
    user_id, _ = submitted_employee("amy", _form("Amy", "Adams", "F1 OPT"))
    notifier.fail = True

    response = client.post(
        f"/hr/visa/notify/{user_id}",
        json={"message": "Reminder", "subject": "Action needed"},
        headers=hr_headers,
    )

    assert response.status_code == 502
    assert response.get_json()["detail"] == "SMTP relay unavailable."

    with app.app_context():
        workflow = db.session.get(User, user_id).visa_workflow
        assert workflow.last_notification_at is None
        assert workflow.notifications == []


def test_notify_requires_message(client: FlaskClient, hr_headers, submitted_employee):
    user_id, _ = submitted_employee("amy", _form("Amy", "Adams", "F1 OPT"))

    response = client.post(
        f"/hr/visa/notify/{user_id}", json={"subject": "Hi"}, headers=hr_headers
    )

    assert response.status_code == 400
