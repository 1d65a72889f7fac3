"""
Tests for Auth API endpoints
"""
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.api.deps import get_db


@pytest.fixture
def client(db_session):
    def _override():
        yield db_session

    app.dependency_overrides[get_db] = _override
    yield TestClient(app)
    app.dependency_overrides.clear()


REGISTRATION = {
    "name": "Asha",
    "email": "Asha@Example.com",
    "password": "secret1",
    "confirmPassword": "secret1",
}


def test_register_logs_in(client):
    response = client.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "asha@example.com"
    assert user["preferences"]["reminderDays"] == 3

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["id"] == user["id"]


def test_register_duplicate_email(client):
    client.post("/api/auth/register", json=REGISTRATION)
    response = client.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 400
    assert response.json()["message"] == "User already exists with this email"


def test_register_password_mismatch(client):
    response = client.post("/api/auth/register", json={**REGISTRATION, "confirmPassword": "other12"})

    assert response.status_code == 400
    assert response.json()["errors"][0]["message"] == "Passwords do not match"


def test_register_weak_password(client):
    response = client.post(
        "/api/auth/register", json={**REGISTRATION, "password": "abcdef", "confirmPassword": "abcdef"},
    )
    assert response.status_code == 400
    assert response.json()["errors"][0] == {
        "field": "password", "message": "Password must contain at least one number",
    }


def test_login_and_logout(client):
    client.post("/api/auth/register", json=REGISTRATION)
    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401

    response = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "secret1"})
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert client.get("/api/auth/me").status_code == 200


def test_login_wrong_password(client):
    client.post("/api/auth/register", json=REGISTRATION)
    client.post("/api/auth/logout")

    response = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "wrong12"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid email or password"}


def test_update_profile(client):
    client.post("/api/auth/register", json=REGISTRATION)

    response = client.put("/api/auth/update", json={
        "name": "Asha K",
        "preferences": {"reminderDays": 7, "emailNotifications": False},
    })

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["name"] == "Asha K"
    assert user["preferences"] == {"currency": "INR", "reminderDays": 7, "emailNotifications": False}


def test_update_profile_rejects_out_of_range_days(client):
    client.post("/api/auth/register", json=REGISTRATION)
    response = client.put("/api/auth/update", json={"preferences": {"reminderDays": 45}})
    assert response.status_code == 400


def test_change_password(client):
    client.post("/api/auth/register", json=REGISTRATION)

    bad = client.put("/api/auth/change-password", json={"currentPassword": "nope123", "newPassword": "fresh99"})
    assert bad.status_code == 401

    ok = client.put("/api/auth/change-password", json={"currentPassword": "secret1", "newPassword": "fresh99"})
    assert ok.status_code == 200

    client.post("/api/auth/logout")
    response = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "fresh99"})
    assert response.status_code == 200


def test_health(client):
    assert client.get("/health").text == "ok"
