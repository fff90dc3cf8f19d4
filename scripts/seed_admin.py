"""Seed an administrator account."""

import os

from app import create_app
from models import db
from repositories import SQLAlchemyAccountRepository

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com").strip().lower()
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "AdminPass123")


def main() -> None:
    app = create_app()
    with app.app_context():
        db.create_all()
        service = app.extensions["account_service"]
        repository = SQLAlchemyAccountRepository()
        fields = {
            "role": "admin",
            "verified": True,
            "password_hash": service.hasher.hash(ADMIN_PASSWORD),
        }

        admin = repository.find_by_email(ADMIN_EMAIL)
        if admin is None:
            repository.create(
                {"email": ADMIN_EMAIL, "firstname": "Site", "lastname": "Admin", **fields}
            )
            action = "created"
        else:
            repository.update_fields(admin.id, fields)
            action = "updated"
        print(f"Admin account {action}: {ADMIN_EMAIL}")


if __name__ == "__main__":
    main()
