"""
Notification dispatch: webhook delivery is best-effort, and queued events
only leave the process after the transaction commits.
"""
import pytest
import requests

from services import notifications
from services.notifications import NotificationDispatcher, notify


class FakeResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text


@pytest.fixture
def sent(monkeypatch):
    """Capture what the application-wide dispatcher would deliver."""
    events = []

    def fake_send(event_name, recipient_id, payload):
        events.append((event_name, recipient_id, payload))
        return True

    monkeypatch.setattr(notifications.dispatcher, "send", fake_send)
    return events


class TestDispatcher:
    def test_posts_json_with_timeout(self, monkeypatch):
        calls = []

        def fake_post(url, json=None, timeout=None):
            calls.append((url, json, timeout))
            return FakeResponse(202)

        monkeypatch.setattr(notifications.requests, "post", fake_post)
        dispatcher = NotificationDispatcher("http://hooks.test/notify", timeout=2)
        assert dispatcher.send("tenancy.created", 5, {"tenant_id": 1}) is True
        assert calls == [(
            "http://hooks.test/notify",
            {"event": "tenancy.created", "recipient_id": 5, "data": {"tenant_id": 1}},
            2,
        )]

    def test_error_status_returns_false(self, monkeypatch):
        monkeypatch.setattr(notifications.requests, "post", lambda *a, **kw: FakeResponse(500, "boom"))
        assert NotificationDispatcher("http://hooks.test/notify").send("x", None, {}) is False

    def test_network_error_is_swallowed(self, monkeypatch):
        def fail(*args, **kwargs):
            raise requests.ConnectionError("unreachable")

        monkeypatch.setattr(notifications.requests, "post", fail)
        assert NotificationDispatcher("http://hooks.test/notify").send("x", None, {}) is False

    def test_no_webhook_configured(self, monkeypatch):
        def unexpected(*args, **kwargs):
            raise AssertionError("should not post")

        monkeypatch.setattr(notifications.requests, "post", unexpected)
        assert NotificationDispatcher(None).send("x", None, {}) is False


class TestOutbox:
    def test_sent_only_after_commit(self, db, sent, tenant, tenant_user):
        assert sent == []
        db.commit()
        assert ("tenancy.created", tenant_user.id, {"tenant_id": tenant.id, "property_id": tenant.property_id}) in sent

    def test_dropped_on_rollback(self, db, sent, landlord):
        notify(db, "rent.payment_recorded", landlord.id, rent_payment_id=1)
        db.rollback()
        db.commit()
        assert sent == []

    def test_savepoint_rollback_keeps_queue(self, db, sent, landlord):
        notify(db, "booking.confirmed", landlord.id, booking_id=1)
        savepoint = db.begin_nested()
        savepoint.rollback()
        db.commit()
        assert [e[0] for e in sent] == ["booking.confirmed"]

    def test_delivery_failure_does_not_break_commit(self, db, monkeypatch, landlord):
        def explode(*args):
            raise RuntimeError("provider down")

        monkeypatch.setattr(notifications.dispatcher, "send", explode)
        notify(db, "tenancy.created", landlord.id)
        db.commit()
        assert notifications._OUTBOX_KEY not in db.info
