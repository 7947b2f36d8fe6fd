"""Tests for user and role administration."""

import pytest
from sqlalchemy import insert, select

from backoffice.repository.users import merge_permissions, normalize_role
from backoffice.security import verify_password
from backoffice.sql import users

ALL_ON = {k: True for k in ("dashboard", "leads", "calendar", "email", "settings", "inventory", "favorites", "mls")}
ALL_OFF = {k: False for k in ALL_ON}


@pytest.fixture
def agent(client):
    resp = client.post("/users", json={
        "name": "Ada",
        "email": "ada@example.com",
        "password": "hunter22",
        "role": "agent",
        "permissions": {"leads": True, "mls": True},
    })
    assert resp.status_code == 200
    return resp.json()["user"]


def _stored_hash(engine, user_id):
    with engine.connect() as conn:
        return conn.execute(select(users.c.password_hash).where(users.c.id == user_id)).scalar_one()


@pytest.mark.parametrize("role, expected", [
    (None, "User"),
    ("", "User"),
    ("admin", "Administrator"),
    ("ADMINISTRATOR", "Administrator"),
    ("Administrator", "Administrator"),
    ("agent", "Agent"),
    ("SALES MANAGER", "Sales manager"),
])
def test_normalize_role(role, expected):
    assert normalize_role(role) == expected


def test_merge_permissions_prefers_request_then_stored_then_default():
    merged = merge_permissions({"leads": False, "mls": None}, {"leads": True, "mls": True, "email": True})

    assert merged == {**ALL_OFF, "mls": True, "email": True}


@pytest.mark.parametrize("missing", ["name", "email", "password"])
def test_create_requires_name_email_password(client, missing):
    body = {"name": "Ada", "email": "ada@example.com", "password": "pw"}
    body[missing] = ""

    resp = client.post("/users", json=body)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing required fields"


def test_create_normalises_role_and_fills_defaults(client, agent):
    assert agent["id"] >= 1
    assert agent["role"] == "Agent"
    assert agent["status"] == "active"
    assert agent["permissions"] == {**ALL_OFF, "leads": True, "mls": True}
    assert agent["createdAt"] is not None
    assert "password" not in agent
    assert "passwordHash" not in agent


def test_password_is_stored_hashed(client, engine, agent):
    hashed = _stored_hash(engine, agent["id"])

    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("wrong", hashed)


def test_duplicate_email_ignores_case(client, agent):
    resp = client.post("/users", json={"name": "Other", "email": "ADA@Example.com", "password": "x"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Email already exists"
    assert len(client.get("/users").json()) == 1


def test_admin_always_gets_full_permissions(client):
    resp = client.post("/users", json={
        "name": "Bo", "email": "bo@example.com", "password": "pw",
        "role": "admin", "permissions": {"settings": False}, "status": "invited",
    })

    user = resp.json()["user"]
    assert user["role"] == "Administrator"
    assert user["permissions"] == ALL_ON
    assert user["status"] == "invited"


def test_list_fills_permissions_and_hides_password(client, engine, agent):
    with engine.begin() as conn:
        conn.execute(insert(users).values(name="Legacy", email="old@example.com", password_hash="x"))

    listed = client.get("/users").json()

    assert [u["name"] for u in listed] == ["Ada", "Legacy"]
    assert listed[1]["permissions"] == ALL_OFF
    assert all("password" not in u and "passwordHash" not in u for u in listed)


def test_get_one(client, agent):
    resp = client.get(f"/users/{agent['id']}")

    assert resp.status_code == 200
    assert resp.json()["email"] == "ada@example.com"
    assert client.get("/users/999").status_code == 404
    assert client.get("/users/abc").status_code == 400


def test_put_merges_permissions_and_keeps_password(client, engine, agent):
    before = _stored_hash(engine, agent["id"])

    resp = client.put("/users", json={"id": agent["id"], "name": "Ada L.", "password": "", "permissions": {"email": True, "mls": False}})

    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["name"] == "Ada L."
    assert user["role"] == "Agent"
    assert user["permissions"] == {**ALL_OFF, "leads": True, "email": True}
    assert _stored_hash(engine, agent["id"]) == before


def test_put_rehashes_new_password(client, engine, agent):
    client.put("/users", json={"id": str(agent["id"]), "password": "n3w-pass"})

    hashed = _stored_hash(engine, agent["id"])
    assert verify_password("n3w-pass", hashed)
    assert not verify_password("hunter22", hashed)


def test_put_promotion_to_admin(client, agent):
    user = client.put("/users", json={"id": agent["id"], "role": "administrator"}).json()["user"]

    assert user["role"] == "Administrator"
    assert user["permissions"] == ALL_ON


def test_put_role_change_keeps_stored_permissions(client, agent):
    user = client.put("/users", json={"id": agent["id"], "role": "broker"}).json()["user"]

    assert user["role"] == "Broker"
    assert user["permissions"] == {**ALL_OFF, "leads": True, "mls": True}


def test_put_validation(client, agent):
    assert client.put("/users", json={"name": "no id"}).status_code == 400
    resp = client.put("/users", json={"id": 999, "name": "ghost"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "User not found"


def test_put_rejects_email_of_another_user(client, agent):
    client.post("/users", json={"name": "Bo", "email": "bo@example.com", "password": "pw"})

    resp = client.put("/users", json={"id": agent["id"], "email": "BO@example.com"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Email already exists"


def test_patch(client, agent):
    resp = client.patch(f"/users/{agent['id']}", json={"permissions": {"calendar": True}, "status": "suspended"})

    assert resp.status_code == 200
    assert resp.json()["message"] == "User updated successfully"
    user = client.get(f"/users/{agent['id']}").json()
    assert user["status"] == "suspended"
    assert user["permissions"] == {**ALL_OFF, "leads": True, "mls": True, "calendar": True}


def test_patch_admin_ignores_permission_downgrade(client):
    admin = client.post("/users", json={"name": "Bo", "email": "bo@example.com", "password": "pw", "role": "Admin"}).json()["user"]

    client.patch(f"/users/{admin['id']}", json={"permissions": {"mls": False}})

    assert client.get(f"/users/{admin['id']}").json()["permissions"] == ALL_ON


def test_patch_unknown_user_is_404(client):
    assert client.patch("/users/999", json={"name": "x"}).status_code == 404


def test_delete(client, agent):
    assert client.delete("/users/abc").status_code == 400

    resp = client.delete(f"/users/{agent['id']}")
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    assert client.delete(f"/users/{agent['id']}").status_code == 404
    assert client.get("/users").json() == []


def test_created_users_receive_fan_out(client, agent):
    client.post("/users", json={"name": "Bo", "email": "bo@example.com", "password": "pw", "role": "admin"})

    resp = client.post("/notifications", json={"sendToAllUsers": True, "message": "Team meeting"})

    assert resp.json()["message"] == "Notification sent to 1 users"
    assert len(client.get("/notifications", params={"userId": str(agent["id"])}).json()) == 1
