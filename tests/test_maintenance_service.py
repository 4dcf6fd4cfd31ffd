"""
Maintenance workflow: who may open requests, the status pipeline and
completion/cancellation bookkeeping.
"""
from datetime import date
from decimal import Decimal

import pytest

from models import MaintenancePriority, MaintenanceStatus
from services.audit_service import list_actions
from services.exceptions import InvalidStateError, PermissionDeniedError, ValidationError
from services.maintenance_service import MaintenanceService


@pytest.fixture
def request_(db, landlord, prop, tenant):
    return MaintenanceService.create_request(
        db, landlord.id, prop.id, "Kitchen sink leaking", "plumbing",
        priority="high", tenant_id=tenant.id,
    )


class TestCreateRequest:
    def test_landlord_opens_request(self, request_, landlord):
        assert request_.status == MaintenanceStatus.PENDING
        assert request_.priority == MaintenancePriority.HIGH
        assert request_.landlord_id == landlord.id
        assert request_.created_by == landlord.id
        assert request_.completed_at is None

    def test_tenant_opens_request_for_own_unit(self, db, tenant, tenant_user, prop):
        req = MaintenanceService.create_request(
            db, tenant_user.id, prop.id, "No hot water", "appliance", tenant_id=tenant.id
        )
        assert req.created_by == tenant_user.id
        assert req.priority == MaintenancePriority.MEDIUM

    def test_landlord_request_without_tenant(self, db, landlord, prop):
        req = MaintenanceService.create_request(db, landlord.id, prop.id, "Repaint hallway", "other")
        assert req.tenant_id is None

    def test_tenant_needs_to_occupy_property(self, db, tenant, tenant_user, other_prop):
        with pytest.raises(ValidationError):
            MaintenanceService.create_request(
                db, tenant_user.id, other_prop.id, "Leak", "plumbing", tenant_id=tenant.id
            )

    def test_stranger_cannot_open(self, db, guest, prop):
        with pytest.raises(PermissionDeniedError):
            MaintenanceService.create_request(db, guest.id, prop.id, "Leak", "plumbing")

    def test_unknown_category(self, db, landlord, prop):
        with pytest.raises(ValidationError):
            MaintenanceService.create_request(db, landlord.id, prop.id, "Leak", "roofing")

    def test_title_required(self, db, landlord, prop):
        with pytest.raises(ValidationError):
            MaintenanceService.create_request(db, landlord.id, prop.id, "   ", "plumbing")


class TestPipeline:
    def test_full_pipeline(self, db, request_, landlord):
        MaintenanceService.assign(db, landlord.id, request_.id, "Bongo Plumbers", "+255711000000")
        assert request_.status == MaintenanceStatus.ASSIGNED
        MaintenanceService.schedule(db, landlord.id, request_.id, date(2025, 3, 3), "45000")
        assert request_.estimated_cost == Decimal("45000.00")
        MaintenanceService.mark_in_progress(db, landlord.id, request_.id)
        MaintenanceService.mark_pending_parts(db, landlord.id, request_.id)
        MaintenanceService.mark_in_progress(db, landlord.id, request_.id)
        done = MaintenanceService.complete(db, landlord.id, request_.id, "Replaced trap", "52000")
        assert done.status == MaintenanceStatus.COMPLETED
        assert done.actual_cost == Decimal("52000.00")
        assert done.completed_at is not None

    def test_reassign_and_reschedule(self, db, request_, landlord):
        MaintenanceService.assign(db, landlord.id, request_.id, "Vendor A")
        MaintenanceService.assign(db, landlord.id, request_.id, "Vendor B")
        assert request_.assigned_to == "Vendor B"
        MaintenanceService.schedule(db, landlord.id, request_.id, date(2025, 3, 3))
        MaintenanceService.schedule(db, landlord.id, request_.id, date(2025, 3, 5))
        assert request_.scheduled_date == date(2025, 3, 5)

    def test_cannot_go_backwards(self, db, request_, landlord):
        MaintenanceService.schedule(db, landlord.id, request_.id, date(2025, 3, 3))
        with pytest.raises(InvalidStateError) as exc:
            MaintenanceService.assign(db, landlord.id, request_.id, "Late vendor")
        assert exc.value.current_state == "scheduled"
        assert exc.value.attempted == "assigned"

    def test_cannot_complete_from_pending(self, db, request_, landlord):
        with pytest.raises(InvalidStateError):
            MaintenanceService.complete(db, landlord.id, request_.id)

    def test_complete_twice_keeps_timestamp(self, db, request_, landlord):
        MaintenanceService.mark_in_progress(db, landlord.id, request_.id)
        MaintenanceService.complete(db, landlord.id, request_.id)
        stamped = request_.completed_at
        with pytest.raises(InvalidStateError):
            MaintenanceService.complete(db, landlord.id, request_.id)
        assert request_.completed_at == stamped

    def test_negative_cost_rejected(self, db, request_, landlord):
        with pytest.raises(ValidationError):
            MaintenanceService.schedule(db, landlord.id, request_.id, date(2025, 3, 3), "-1")

    def test_only_landlord_manages(self, db, request_, tenant_user):
        with pytest.raises(PermissionDeniedError):
            MaintenanceService.assign(db, tenant_user.id, request_.id, "Me")


class TestCancel:
    def test_tenant_can_cancel(self, db, request_, tenant_user):
        cancelled = MaintenanceService.cancel(db, tenant_user.id, request_.id, "Fixed it myself")
        assert cancelled.status == MaintenanceStatus.CANCELLED
        assert cancelled.cancelled_at is not None
        actions = list_actions(db, entity="maintenance_request", entity_id=request_.id)
        assert actions[0].details["previous_status"] == "pending"

    def test_cancel_completed_rejected(self, db, request_, landlord):
        MaintenanceService.mark_in_progress(db, landlord.id, request_.id)
        MaintenanceService.complete(db, landlord.id, request_.id)
        with pytest.raises(InvalidStateError):
            MaintenanceService.cancel(db, landlord.id, request_.id, "Changed mind")

    def test_reason_required(self, db, request_, landlord):
        with pytest.raises(ValidationError):
            MaintenanceService.cancel(db, landlord.id, request_.id, "")

    def test_stranger_cannot_cancel(self, db, request_, guest):
        with pytest.raises(PermissionDeniedError):
            MaintenanceService.cancel(db, guest.id, request_.id, "Nope")


class TestListRequests:
    def test_filters(self, db, request_, landlord, prop):
        MaintenanceService.create_request(db, landlord.id, prop.id, "Gas smell", "other", priority="emergency")
        assert len(MaintenanceService.list_requests(db, landlord.id)) == 2
        emergencies = MaintenanceService.list_requests(db, landlord.id, priority=MaintenancePriority.EMERGENCY)
        assert [r.title for r in emergencies] == ["Gas smell"]
        assert MaintenanceService.list_requests(db, landlord.id, status=MaintenanceStatus.COMPLETED) == []


def _queued(db, event_name):
    return [recipient for _, name, recipient, _ in db.info.get("pending_notifications", []) if name == event_name]


class TestComments:
    def test_thread_is_oldest_first(self, db, request_, landlord, tenant_user):
        MaintenanceService.add_comment(db, tenant_user.id, request_.id, "It is getting worse")
        MaintenanceService.add_comment(db, landlord.id, request_.id, "  Plumber booked for Friday  ")
        comments = MaintenanceService.list_comments(db, tenant_user.id, request_.id)
        assert [c.comment for c in comments] == ["It is getting worse", "Plumber booked for Friday"]
        assert [c.user_id for c in comments] == [tenant_user.id, landlord.id]
        assert request_.comments == comments

    def test_internal_notes_hidden_from_tenant(self, db, request_, landlord, tenant_user):
        MaintenanceService.add_comment(db, landlord.id, request_.id, "Vendor quote is too high", is_internal=True)
        MaintenanceService.add_comment(db, landlord.id, request_.id, "We are on it")
        assert len(MaintenanceService.list_comments(db, landlord.id, request_.id)) == 2
        visible = MaintenanceService.list_comments(db, tenant_user.id, request_.id)
        assert [c.comment for c in visible] == ["We are on it"]

    def test_only_landlord_writes_internal_notes(self, db, request_, tenant_user):
        with pytest.raises(PermissionDeniedError):
            MaintenanceService.add_comment(db, tenant_user.id, request_.id, "psst", is_internal=True)

    def test_stranger_cannot_read_or_write(self, db, request_, guest):
        with pytest.raises(PermissionDeniedError):
            MaintenanceService.add_comment(db, guest.id, request_.id, "Hello")
        with pytest.raises(PermissionDeniedError):
            MaintenanceService.list_comments(db, guest.id, request_.id)

    def test_empty_comment_rejected(self, db, request_, landlord):
        with pytest.raises(ValidationError):
            MaintenanceService.add_comment(db, landlord.id, request_.id, "   ")

    def test_allowed_on_closed_request(self, db, request_, landlord, tenant_user):
        MaintenanceService.cancel(db, landlord.id, request_.id, "Duplicate")
        entry = MaintenanceService.add_comment(db, tenant_user.id, request_.id, "Thanks")
        assert entry.id is not None

    def test_notifies_other_parties_only(self, db, request_, landlord, tenant_user):
        MaintenanceService.add_comment(db, tenant_user.id, request_.id, "Any update?")
        assert _queued(db, "maintenance.comment_added") == [landlord.id]
        MaintenanceService.add_comment(db, landlord.id, request_.id, "Note to self", is_internal=True)
        assert _queued(db, "maintenance.comment_added") == [landlord.id]
