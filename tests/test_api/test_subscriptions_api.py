"""
Tests for Subscriptions API endpoints
"""
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.api.deps import get_db, get_current_user


@pytest.fixture
def client(db_session):
    """Test client bound to the in-memory database"""
    def _override():
        yield db_session

    app.dependency_overrides[get_db] = _override
    yield TestClient(app)
    app.dependency_overrides.clear()


def _register(client, email="asha@example.com"):
    response = client.post("/api/auth/register", json={
        "name": "Asha",
        "email": email,
        "password": "secret1",
        "confirmPassword": "secret1",
    })
    assert response.status_code == 201
    return response.json()["user"]


@pytest.fixture
def authenticated_client(client):
    _register(client)
    return client


def _create(client, **overrides):
    payload = {
        "name": "Netflix",
        "cost": 649,
        "billingCycle": "monthly",
        "category": "Entertainment",
        "startDate": "2024-01-31",
    }
    payload.update(overrides)
    return client.post("/api/subscriptions/", json=payload)


def test_requires_login(client):
    response = client.get("/api/subscriptions/")
    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "message": "Not authorized to access this route. Please login.",
    }


def test_create_fills_next_billing_date(authenticated_client):
    response = _create(authenticated_client)

    assert response.status_code == 201
    sub = response.json()["subscription"]
    assert sub["nextBillingDate"] == "2024-02-29"
    assert sub["status"] == "active"
    assert sub["currency"] == "INR"
    assert sub["monthlyCost"] == 649.0
    assert sub["yearlyCost"] == 7788.0


def test_create_accepts_comma_decimal(authenticated_client):
    response = _create(authenticated_client, cost="12,50")
    assert response.status_code == 201
    assert response.json()["subscription"]["cost"] == 12.5


def test_create_validation_errors(authenticated_client):
    response = _create(authenticated_client, cost=-5, category="Food")

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    fields = {e["field"] for e in body["errors"]}
    assert {"cost", "category"} <= fields
    messages = {e["field"]: e["message"] for e in body["errors"]}
    assert messages["category"] == "Invalid category"


def test_list_sorted_with_totals(authenticated_client):
    _create(authenticated_client, name="A", cost=50)
    _create(authenticated_client, name="B", cost=1200, billingCycle="yearly")
    _create(authenticated_client, name="C", cost=30)

    response = authenticated_client.get("/api/subscriptions/", params={"sort": "cost-low"})

    assert response.status_code == 200
    body = response.json()
    assert [s["name"] for s in body["subscriptions"]] == ["C", "A", "B"]
    assert body["count"] == 3
    assert body["totalMonthly"] == "180.00"
    assert body["totalYearly"] == "2160.00"


def test_list_filters_by_status(authenticated_client):
    sub_id = _create(authenticated_client, name="A").json()["subscription"]["id"]
    _create(authenticated_client, name="B")
    authenticated_client.put(f"/api/subscriptions/{sub_id}", json={"status": "cancelled"})

    response = authenticated_client.get("/api/subscriptions/", params={"status": "active"})
    assert [s["name"] for s in response.json()["subscriptions"]] == ["B"]


def test_stats_summary(authenticated_client):
    soon = (date.today() + timedelta(days=5)).isoformat()
    _create(authenticated_client, name="GitHub", cost=10, category="Software", nextBillingDate=soon)
    _create(authenticated_client, name="Domain", cost=120, billingCycle="yearly", category="Software")
    _create(authenticated_client, name="Gym", cost=30, billingCycle="quarterly", category="Fitness")

    response = authenticated_client.get("/api/subscriptions/stats/summary")

    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["totalSubscriptions"] == 3
    assert stats["totalMonthly"] == "30.00"
    assert stats["totalYearly"] == "360.00"
    assert stats["byCategory"]["Software"] == {"count": 2, "totalMonthly": 20.0}
    assert [r["name"] for r in stats["upcomingRenewals"]] == ["GitHub"]


def test_get_update_delete(authenticated_client):
    sub_id = _create(authenticated_client).json()["subscription"]["id"]

    response = authenticated_client.get(f"/api/subscriptions/{sub_id}")
    assert response.status_code == 200
    assert response.json()["subscription"]["name"] == "Netflix"

    response = authenticated_client.put(
        f"/api/subscriptions/{sub_id}", json={"billingCycle": "yearly", "notes": "annual now"},
    )
    assert response.status_code == 200
    sub = response.json()["subscription"]
    assert sub["billingCycle"] == "yearly"
    assert sub["nextBillingDate"] == "2024-02-29"
    assert sub["notes"] == "annual now"

    response = authenticated_client.delete(f"/api/subscriptions/{sub_id}")
    assert response.status_code == 200
    assert authenticated_client.get(f"/api/subscriptions/{sub_id}").status_code == 404


@pytest.mark.parametrize("field", [
    "name", "cost", "billingCycle", "category", "paymentMethod", "status",
    "reminderEnabled", "reminderDaysBefore", "startDate", "nextBillingDate",
])
def test_update_with_null_keeps_value(authenticated_client, field):
    created = _create(authenticated_client, reminderDaysBefore=5).json()["subscription"]

    response = authenticated_client.put(f"/api/subscriptions/{created['id']}", json={field: None})

    assert response.status_code == 200
    assert response.json()["subscription"][field] == created[field]


def test_update_null_optional_field_clears_it(authenticated_client):
    sub_id = _create(authenticated_client, notes="family plan").json()["subscription"]["id"]

    response = authenticated_client.put(f"/api/subscriptions/{sub_id}", json={"notes": None})

    assert response.status_code == 200
    assert response.json()["subscription"]["notes"] is None


def test_missing_subscription(authenticated_client):
    response = authenticated_client.get("/api/subscriptions/999")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_other_users_subscription_is_forbidden(client):
    _register(client, "owner@example.com")
    sub_id = _create(client).json()["subscription"]["id"]
    client.post("/api/auth/logout")

    _register(client, "intruder@example.com")
    assert client.get(f"/api/subscriptions/{sub_id}").status_code == 403
    assert client.put(f"/api/subscriptions/{sub_id}", json={"name": "Mine"}).status_code == 403
    assert client.delete(f"/api/subscriptions/{sub_id}").status_code == 403


def test_unknown_route(client):
    response = client.get("/api/nope")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Route not found"}


def test_unhandled_error_hides_details(client, caplog):
    def _broken():
        raise RuntimeError("connection to db-internal:5432 refused")

    app.dependency_overrides[get_current_user] = _broken

    response = client.get("/api/subscriptions/")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}
    assert "db-internal" in caplog.text
