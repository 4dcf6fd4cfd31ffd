"""
HTTP layer: routing, error rendering and the bearer-token boundary.
Service behaviour is covered in the service tests; these check the wiring.
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import text

import config
from database import get_read_session, get_session
from main import app
from routers import stats as stats_routes
from security import get_actor_id
from services.stats_service import MonotonicStatsView


LEASE = {"lease_start_date": "2030-01-01", "lease_end_date": "2031-01-01", "monthly_rent": 50000}


@pytest.fixture
def client(db, landlord, monkeypatch):
    actor = {"id": landlord.id}

    def _session():
        yield db

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_read_session] = _session
    app.dependency_overrides[get_actor_id] = lambda: actor["id"]
    monkeypatch.setattr(stats_routes, "stats_view", MonotonicStatsView())
    with TestClient(app) as c:
        c.actor = actor
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def tenancy(client, prop):
    resp = client.post("/api/tenancies", json={"property_id": prop.id, "tenant_name": "Juma Hassan", **LEASE})
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestTenancyRoutes:
    def test_create(self, tenancy):
        assert tenancy["status"] == "active"
        assert tenancy["display_name"] == "Juma Hassan"
        assert tenancy["grace_period_days"] == 4

    def test_overlap_is_409(self, client, prop, tenancy):
        resp = client.post("/api/tenancies", json={"property_id": prop.id, "tenant_name": "Other", **LEASE})
        assert resp.status_code == 409
        assert resp.json()["error"] == "conflict"

    def test_bad_dates_is_422(self, client, prop):
        body = {**LEASE, "lease_end_date": "2029-01-01", "property_id": prop.id, "tenant_name": "X"}
        resp = client.post("/api/tenancies", json=body)
        assert resp.status_code == 422
        assert resp.json()["error"] == "validation_error"

    def test_occupant_required_by_schema(self, client, prop):
        assert client.post("/api/tenancies", json={"property_id": prop.id, **LEASE}).status_code == 422

    def test_end_then_end_again(self, client, tenancy):
        url = f"/api/tenancies/{tenancy['id']}/end"
        assert client.post(url, json={"move_out_date": "2030-06-30"}).json()["status"] == "ended"
        resp = client.post(url, json={"move_out_date": "2030-07-31"})
        assert resp.status_code == 409
        assert resp.json()["current_state"] == "ended"

    def test_other_user_forbidden(self, client, tenancy, guest):
        client.actor["id"] = guest.id
        assert client.get(f"/api/tenancies/{tenancy['id']}").status_code == 403

    def test_list(self, client, tenancy):
        body = client.get("/api/tenancies", params={"status": "active"}).json()
        assert body["total"] == 1


class TestRentRoutes:
    def _pay(self, client, tenancy, amount, **extra):
        body = {
            "tenant_id": tenancy["id"],
            "period": "2030-01",
            "amount": amount,
            "payment_method": "mpesa",
            "payment_date": "2029-12-30",
            **extra,
        }
        return client.post("/api/rent/payments", json=body)

    def test_pay_then_overpay(self, client, tenancy):
        first = self._pay(client, tenancy, 50000)
        assert first.status_code == 201, first.text
        assert first.json()["payment"]["status"] == "paid"
        second = self._pay(client, tenancy, 10000).json()
        assert second["is_overpaid"] is True
        assert Decimal(second["overpayment"]) == Decimal("10000")

    def test_waived_rejects_payment(self, client, tenancy):
        obligation = client.post("/api/rent/obligations", json={"tenant_id": tenancy["id"], "period": "2030-02"}).json()
        waived = client.post(f"/api/rent/payments/{obligation['id']}/waive", json={"reason": "Renovation"})
        assert waived.json()["payment"]["status"] == "waived"
        resp = self._pay(client, tenancy, 100, period="2030-02")
        assert resp.status_code == 409
        assert resp.json()["error"] == "invalid_state"

    def test_balance_and_ledger(self, client, tenancy):
        self._pay(client, tenancy, 20000)
        balance = client.get(f"/api/rent/tenants/{tenancy['id']}/balance").json()
        assert Decimal(balance["total_paid"]) == Decimal("20000")
        assert balance["counts"]["partial"] == 1
        payments = client.get(f"/api/rent/tenants/{tenancy['id']}/payments").json()
        assert payments["total"] == 1
        chain = client.get("/api/rent/ledger/verify-chain").json()
        assert chain == {"verified": True, "message": "Full chain verification passed", "entries_checked": 1}
        reconcile = client.get(f"/api/rent/payments/{payments['payments'][0]['id']}/reconcile").json()
        assert reconcile["verified"] is True

    def test_concurrent_update_is_409(self, client, tenancy, db):
        obligation = client.post("/api/rent/obligations", json={"tenant_id": tenancy["id"], "period": "2030-02"}).json()
        db.execute(text("UPDATE rent_payments SET version = version + 1 WHERE id = :id"), {"id": obligation["id"]})
        resp = self._pay(client, tenancy, 100, period="2030-02")
        assert resp.status_code == 409
        assert resp.json()["error"] == "conflict"
        assert resp.json()["entity_id"] == obligation["id"]

    def test_generate_month(self, client, tenancy):
        first = client.post("/api/rent/obligations/generate", json={"period": "2030-02"})
        assert first.status_code == 200, first.text
        assert first.json()["total"] == 1
        assert first.json()["payments"][0]["payment_month"] == "2030-02-01"
        again = client.post("/api/rent/obligations/generate", json={"period": "2030-02"}).json()
        assert again["total"] == 0

    def test_rollover(self, client, tenancy):
        resp = client.post("/api/rent/rollover", json={"as_of": "2030-03-10"})
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"as_of": "2030-03-10", "obligations_created": 2, "statuses_updated": 1}
        payments = client.get(f"/api/rent/tenants/{tenancy['id']}/payments").json()
        assert [p["status"] for p in payments["payments"]] == ["late", "late", "late"]

    def test_negative_amount(self, client, tenancy):
        assert self._pay(client, tenancy, -5).status_code == 422

    def test_unknown_payment_is_404(self, client):
        resp = client.post("/api/rent/payments/999/late-fee", json={})
        assert resp.status_code == 404
        assert resp.json()["entity"] == "rent_payment"


class TestMaintenanceRoutes:
    def test_pipeline(self, client, prop):
        created = client.post(
            "/api/maintenance",
            json={"property_id": prop.id, "title": "Leak", "category": "plumbing", "priority": "high"},
        )
        assert created.status_code == 201
        request_id = created.json()["id"]
        assert client.post(f"/api/maintenance/{request_id}/start").json()["status"] == "in_progress"
        done = client.post(f"/api/maintenance/{request_id}/complete", json={"actual_cost": 1500})
        assert done.json()["completed_at"] is not None
        again = client.post(f"/api/maintenance/{request_id}/complete", json={})
        assert again.status_code == 409

    def test_missing_is_404(self, client):
        assert client.get("/api/maintenance/999").status_code == 404

    def test_comments(self, client, prop, guest):
        request_id = client.post(
            "/api/maintenance",
            json={"property_id": prop.id, "title": "Leak", "category": "plumbing"},
        ).json()["id"]
        url = f"/api/maintenance/{request_id}/comments"
        created = client.post(url, json={"comment": "Plumber booked"})
        assert created.status_code == 201, created.text
        assert created.json()["author_name"] == "Lydia Landlord"
        assert created.json()["is_internal"] is False
        assert client.get(url).json()["total"] == 1
        assert client.post(url, json={"comment": ""}).status_code == 422

        client.actor["id"] = guest.id
        assert client.post(url, json={"comment": "Hi"}).status_code == 403


class TestBookingRoutes:
    def test_guest_books_host_confirms(self, client, prop, guest, landlord):
        client.actor["id"] = guest.id
        created = client.post(
            "/api/bookings",
            json={"property_id": prop.id, "check_in": "2030-07-01", "check_out": "2030-10-01", "monthly_rent": 400000},
        )
        assert created.status_code == 201, created.text
        booking = created.json()
        assert Decimal(booking["total_amount"]) == Decimal("1320000")
        assert client.get("/api/bookings", params={"role": "guest"}).json()["total"] == 1

        client.actor["id"] = landlord.id
        confirmed = client.post(f"/api/bookings/{booking['id']}/confirm")
        assert confirmed.json()["status"] == "confirmed"
        stats = client.get("/api/stats/bookings").json()
        assert Decimal(stats["total_revenue"]) == Decimal("1320000")


class TestStatsAndHealth:
    def test_tenant_stats(self, client, tenancy):
        body = client.get("/api/stats/tenants", params={"as_of": "2030-01-02"}).json()
        assert body["total_tenants"] == 1
        assert Decimal(body["on_time_payment_rate"]) == Decimal("100")
        assert body["overdue_count"] == 0

    def test_rent_payment_stats(self, client, tenancy):
        body = client.get("/api/stats/rent-payments", params={"as_of": "2030-01-02"}).json()
        assert Decimal(body["current_month_expected"]) == Decimal("50000")
        assert Decimal(body["total_pending"]) == Decimal("50000")
        assert Decimal(body["total_overdue"]) == Decimal("0")
        assert body["counts"]["pending"] == 1

    def test_property_stats_owner_only(self, client, prop, guest):
        assert client.get(f"/api/stats/properties/{prop.id}").status_code == 200
        client.actor["id"] = guest.id
        assert client.get(f"/api/stats/properties/{prop.id}").status_code == 403

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"


class TestAuth:
    def test_missing_token(self, client):
        app.dependency_overrides.pop(get_actor_id)
        assert client.get("/api/tenancies").status_code == 401

    def test_invalid_token(self, client):
        app.dependency_overrides.pop(get_actor_id)
        resp = client.get("/api/tenancies", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 403

    def test_valid_token(self, client, landlord, tenancy):
        app.dependency_overrides.pop(get_actor_id)
        token = jwt.encode({"id": landlord.id}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
        resp = client.get("/api/tenancies", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["total"] == 1
