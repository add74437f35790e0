import os
import sys

from sqlmodel import Session

# Add current directory to path
sys.path.append(os.getcwd())

from app.core.logging import setup_logging
from app.db.session import engine, init_db
from app.schemas.user import AdminUserCreate
from app.services.users import create_user, get_user_by_email


def create_initial_user():
    print("--- Initial Admin Creation ---")

    email = os.environ.get("ADMIN_EMAIL", "admin@example.com")
    password = os.environ.get("ADMIN_PASSWORD", "adminpassword")

    init_db()
    with Session(engine) as session:
        if get_user_by_email(session, email):
            print(f"User with email {email} already exists.")
            return

        print(f"Creating admin {email}...")
        admin = AdminUserCreate.model_validate({
            "firstName": os.environ.get("ADMIN_FIRST_NAME", "System"),
            "lastName": os.environ.get("ADMIN_LAST_NAME", "Admin"),
            "email": email,
            "password": password,
            "role": "ADMIN",
        })
        user = create_user(session, admin.to_payload())
        print("Initial admin created successfully!")
        print(f"Employee code: {user.employee_id}")
        print(f"Email: {user.email}")
        print("Change the password after the first login.")


if __name__ == "__main__":
    setup_logging()
    create_initial_user()
