"""
Seed the database with the three demo accounts (admin, manager, employee).

Usage:
  python scripts/seed_demo_users.py

This script is idempotent: existing accounts (matched by email) are left
untouched and reported as skipped.
"""

import structlog

from leavesync.config import settings
from leavesync.db import Database
from leavesync.logging import setup_logging
from leavesync.models.models import User
from leavesync.auth.security import get_password_hash


DEMO_PASSWORD = "password123"

DEMO_USERS = [
    {"name": "Admin User", "email": "admin@demo.com", "role": "admin", "department": "Management"},
    {"name": "Manager User", "email": "manager@demo.com", "role": "manager", "department": "Engineering"},
    {"name": "Employee User", "email": "employee@demo.com", "role": "employee", "department": "Software Intern"},
]


def ensure_user(session, name: str, email: str, role: str, department: str) -> bool:
    if session.query(User).filter(User.email == email).first():
        return False
    session.add(User(
        name=name,
        email=email,
        password_hash=get_password_hash(DEMO_PASSWORD),
        role=role,
        department=department,
    ))
    return True


def main() -> None:
    setup_logging()
    log = structlog.get_logger("seed_demo_users")
    database = Database(settings.database_url)
    database.create_all()
    session = database.session()
    try:
        for entry in DEMO_USERS:
            created = ensure_user(session, **entry)
            log.info("demo_user_created" if created else "demo_user_skipped", email=entry["email"], role=entry["role"])
        session.commit()
    finally:
        session.close()
        database.dispose()
    print("Seed complete. Demo credentials (password: %s):" % DEMO_PASSWORD)
    for entry in DEMO_USERS:
        print(f"  {entry['role']:<9} {entry['email']}")


if __name__ == "__main__":
    main()
