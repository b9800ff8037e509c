from types import SimpleNamespace

import bcrypt
import pytest

from conftest import DEFAULT_PASSWORD, bearer
from leavesync.auth.security import create_access_token, verify_password
from leavesync.auth import service as auth_service
from leavesync.errors import ConflictError
from leavesync.models.models import User
from leavesync.schemas.auth import RegisterRequest


def register(client, **overrides):
    data = {"name": "Asha Rao", "email": "asha@demo.com", "password": "secret123"}
    data.update(overrides)
    return client.post("/auth/register", json=data)


def test_register_returns_token_and_defaults(client):
    r = register(client)
    assert r.status_code == 201
    body = r.json()
    assert body["token"]
    assert body["user"]["role"] == "employee"
    assert body["user"]["department"] == "General"
    assert body["user"]["isActive"] is True
    assert "password" not in body["user"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "asha@demo.com"


def test_register_cannot_self_assign_admin(client, session):
    r = register(client, role="admin")
    assert r.status_code == 201
    assert r.json()["user"]["role"] == "employee"
    assert session.query(User).filter(User.email == "asha@demo.com").one().role == "employee"


def test_register_as_manager_is_allowed(client):
    assert register(client, role="manager").json()["user"]["role"] == "manager"


def test_register_rejects_unknown_role_and_bad_input(client):
    assert register(client, role="owner").status_code == 400
    assert register(client, password="123").status_code == 400
    assert register(client, email="not-an-email").status_code == 400
    r = client.post("/auth/register", json={"email": "x@demo.com"})
    assert r.status_code == 400
    assert "message" in r.json()


def test_register_duplicate_email(client):
    assert register(client).status_code == 201
    r = register(client, email="ASHA@demo.com", name="Someone Else")
    assert r.status_code == 400
    assert r.json()["message"] == "Email already registered"


def test_login_success_and_failures(client, make_user):
    user = make_user("employee", email="lee@demo.com")
    r = client.post("/auth/login", json={"email": "lee@demo.com", "password": DEFAULT_PASSWORD})
    assert r.status_code == 200
    assert r.json()["user"]["_id"] == str(user.id)

    wrong_password = client.post("/auth/login", json={"email": "lee@demo.com", "password": "nope-nope"})
    unknown_email = client.post("/auth/login", json={"email": "ghost@demo.com", "password": DEFAULT_PASSWORD})
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json()["message"] == unknown_email.json()["message"] == "Invalid credentials"

    r = client.post("/auth/login", json={"email": "lee@demo.com"})
    assert r.status_code == 400
    assert r.json()["message"] == "Email and password are required"


def test_login_inactive_account_is_forbidden(client, make_user):
    make_user("employee", email="gone@demo.com", is_active=False)
    r = client.post("/auth/login", json={"email": "gone@demo.com", "password": DEFAULT_PASSWORD})
    assert r.status_code == 403
    assert r.json()["message"] == "Account deactivated. Contact admin."


def test_token_verification_failures(client, make_user, session):
    assert client.get("/auth/me").status_code == 401

    r = client.get("/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid token."

    user = make_user("employee")
    expired = create_access_token(str(user.id), ttl_seconds=-60)
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
    assert r.json()["message"] == "Token expired. Please login again."

    ghost = create_access_token("00000000-0000-0000-0000-000000000000")
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {ghost}"})
    assert r.status_code == 401
    assert r.json()["message"] == "User not found. Token invalid."

    headers = bearer(user)
    user.is_active = False
    session.commit()
    r = client.get("/auth/me", headers=headers)
    assert r.status_code == 403
    assert r.json()["message"] == "Account is deactivated. Contact admin."


def test_update_profile(client, employee):
    r = client.put(
        "/auth/profile",
        json={"name": "  New Name ", "department": "Finance", "phone": " 555-0100 ", "bio": "Hi", "teamName": "Core"},
        headers=bearer(employee),
    )
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["name"] == "New Name"
    assert user["department"] == "Finance"
    assert user["phone"] == "555-0100"
    assert user["teamName"] == "Core"
    # role cannot be changed through the profile
    assert user["role"] == "employee"

    # blank name/department are ignored
    r = client.put("/auth/profile", json={"name": "", "department": " "}, headers=bearer(employee))
    assert r.json()["user"]["name"] == "New Name"
    assert r.json()["user"]["department"] == "Finance"


def test_legacy_bcrypt_hash_verifies():
    hashed = bcrypt.hashpw(b"password123", bcrypt.gensalt(rounds=4)).decode()
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)


def test_error_body_includes_stack_outside_production(client):
    r = client.post("/auth/login", json={"email": "ghost@demo.com", "password": "x"})
    assert "stack" in r.json()


def test_unknown_route_and_health(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.json()["message"] == "Route /nope not found"
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "OK"


class _StaleLookup:
    """Session whose duplicate-email lookup misses, as when another request registers first."""

    def __init__(self, db):
        self._db = db

    def __getattr__(self, name):
        return getattr(self._db, name)

    def query(self, *entities):
        return SimpleNamespace(filter=lambda *criteria: SimpleNamespace(first=lambda: None))


def test_concurrent_duplicate_registration_is_a_conflict(session, make_user):
    make_user("employee", email="race@demo.com")
    req = RegisterRequest(name="Late Comer", email="race@demo.com", password="secret123")
    with pytest.raises(ConflictError, match="Email already registered"):
        auth_service.register(_StaleLookup(session), req)
    assert session.query(User).filter(User.email == "race@demo.com").count() == 1
