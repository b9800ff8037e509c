"""
Pytest fixtures for the LeaveSync API test suite.

Provides:
- an in-memory SQLite ``Database`` per test
- a ``TestClient`` bound to an app built on that database
- helpers to create users and bearer headers

Environment is pinned before the package is imported so the settings
singleton never sees a developer's ``.env`` values for these keys.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_DB"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENABLE_METRICS"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"
os.environ["API_PREFIX"] = ""

import pytest
from datetime import date
from fastapi.testclient import TestClient

from leavesync.auth.security import create_access_token, get_password_hash
from leavesync.db import Database
from leavesync.main import create_app
from leavesync.models.models import User


DEFAULT_PASSWORD = "password123"


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def session(database):
    s = database.session()
    yield s
    s.close()


@pytest.fixture
def client(database):
    return TestClient(create_app(database))


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make(role: str = "employee", email: str = None, name: str = None, is_active: bool = True,
              password: str = DEFAULT_PASSWORD) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"{role.title()} {n}",
            email=email or f"{role}{n}@demo.com",
            password_hash=get_password_hash(password),
            role=role,
            is_active=is_active,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest.fixture
def employee(make_user):
    return make_user("employee")


@pytest.fixture
def manager(make_user):
    return make_user("manager")


@pytest.fixture
def admin(make_user):
    return make_user("admin")


def leave_payload(start: date, end: date, leave_type: str = "sick", reason: str = "Feeling unwell today") -> dict:
    return {
        "leaveType": leave_type,
        "startDate": start.isoformat(),
        "endDate": end.isoformat(),
        "reason": reason,
    }


def claim_payload(**overrides) -> dict:
    data = {
        "title": "Client visit",
        "amount": 1500,
        "category": "Travel",
        "description": "Train tickets to the client site",
        "expenseDate": "2025-03-10",
    }
    data.update(overrides)
    return data
