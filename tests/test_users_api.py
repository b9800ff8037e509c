from conftest import bearer


def test_manager_lists_users_with_filters(client, manager, make_user):
    make_user("employee", name="Priya Shah", email="priya@demo.com")
    make_user("employee", name="Tom Reed", email="tom@demo.com", is_active=False)

    r = client.get("/users", headers=bearer(manager))
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 3
    assert all("password" not in u and "passwordHash" not in u for u in body["users"])

    r = client.get("/users", params={"role": "employee"}, headers=bearer(manager))
    assert r.json()["count"] == 2

    r = client.get("/users", params={"isActive": "false"}, headers=bearer(manager))
    assert [u["email"] for u in r.json()["users"]] == ["tom@demo.com"]

    r = client.get("/users", params={"search": "PRIYA"}, headers=bearer(manager))
    assert [u["name"] for u in r.json()["users"]] == ["Priya Shah"]

    r = client.get("/users", params={"search": "demo.com"}, headers=bearer(manager))
    assert r.json()["count"] == 3


def test_employee_cannot_list_users(client, employee):
    r = client.get("/users", headers=bearer(employee))
    assert r.status_code == 403
    assert r.json()["message"] == "Access denied. Required role(s): admin, manager. Your role: employee"


def test_stats_are_admin_only(client, admin, manager, make_user):
    make_user("employee")
    make_user("employee", is_active=False)

    assert client.get("/users/stats", headers=bearer(manager)).status_code == 403

    r = client.get("/users/stats", headers=bearer(admin))
    assert r.status_code == 200
    stats = r.json()
    assert stats["totalUsers"] == 4
    assert stats["activeUsers"] == 3
    assert stats["byRole"] == [
        {"_id": "admin", "count": 1},
        {"_id": "employee", "count": 2},
        {"_id": "manager", "count": 1},
    ]


def test_get_user(client, admin, employee):
    r = client.get(f"/users/{employee.id}", headers=bearer(admin))
    assert r.status_code == 200
    assert r.json()["user"]["email"] == employee.email

    r = client.get("/users/00000000-0000-0000-0000-000000000000", headers=bearer(admin))
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"


def test_update_role(client, admin, manager, employee):
    r = client.patch(f"/users/{employee.id}/role", json={"role": "manager"}, headers=bearer(admin))
    assert r.status_code == 200
    assert r.json()["user"]["role"] == "manager"

    r = client.patch(f"/users/{employee.id}/role", json={"role": "boss"}, headers=bearer(admin))
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid role"

    r = client.patch(f"/users/{employee.id}/role", headers=bearer(admin))
    assert r.status_code == 400

    r = client.patch("/users/00000000-0000-0000-0000-000000000000/role", json={"role": "admin"}, headers=bearer(admin))
    assert r.status_code == 404

    r = client.patch(f"/users/{employee.id}/role", json={"role": "admin"}, headers=bearer(manager))
    assert r.status_code == 403


def test_toggle_status_flips_and_blocks_access(client, admin, employee):
    r = client.patch(f"/users/{employee.id}/status", headers=bearer(admin))
    assert r.status_code == 200
    assert r.json()["message"] == "User deactivated successfully"
    assert r.json()["user"]["isActive"] is False

    r = client.get("/auth/me", headers=bearer(employee))
    assert r.status_code == 403

    r = client.patch(f"/users/{employee.id}/status", headers=bearer(admin))
    assert r.json()["message"] == "User activated successfully"
    assert r.json()["user"]["isActive"] is True
    assert client.get("/auth/me", headers=bearer(employee)).status_code == 200


def test_admin_cannot_deactivate_self(client, admin):
    r = client.patch(f"/users/{admin.id}/status", headers=bearer(admin))
    assert r.status_code == 400
    assert r.json()["message"] == "You cannot deactivate your own account"
