"""Seed an HR user."""

from app import create_app
from models import db
from models.user import User

HR_USERNAME = "hradmin"
HR_EMAIL = "hr@example.com"
HR_PASSWORD = "Password123!"


def main() -> None:
    app = create_app()
    with app.app_context():
        hr = User.query.filter_by(username=HR_USERNAME).first()
        if hr is None:
            hr = User.new_account(username=HR_USERNAME, email=HR_EMAIL, role="hr")
            hr.set_password(HR_PASSWORD)
            db.session.add(hr)
            action = "created"
        else:
            hr.role = "hr"
            hr.email = HR_EMAIL
            hr.set_password(HR_PASSWORD)
            action = "updated"
        hr.profile = {
            "personal_info": {
                "first_name": "Hannah",
                "last_name": "Rodriguez",
                "email": HR_EMAIL,
            }
        }
        db.session.commit()
        print(f"HR user {action}: {HR_USERNAME}")


if __name__ == "__main__":
    main()
