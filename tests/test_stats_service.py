"""
Aggregates: on-time rate, maintenance counts, booking revenue and the
monotonic view over lagging reads.
"""
from datetime import date
from decimal import Decimal

from models import RentPaymentStatus
from services.booking_service import BookingService
from services.maintenance_service import MaintenanceService
from services.rent_ledger_service import RentLedgerService
from services.stats_service import (
    MonotonicStatsView,
    as_dict,
    compute_booking_stats,
    compute_maintenance_stats,
    compute_property_stats,
    compute_rent_payment_stats,
    compute_stats,
    history_watermark,
)
from services.tenancy_service import Occupant, TenancyService
from tests.conftest import make_terms


def _pay(db, landlord, tenant, period, on):
    return RentLedgerService.record_payment(
        db, landlord.id, "50000", "mpesa", tenant_id=tenant.id, period=period, payment_date=on, as_of=on
    )


class TestTenantStats:
    def test_one_on_time_one_late(self, db, tenant, landlord):
        _pay(db, landlord, tenant, "2025-02", date(2025, 2, 3))
        _pay(db, landlord, tenant, "2025-03", date(2025, 3, 10))
        stats = compute_stats(db, landlord.id, as_of=date(2025, 3, 20))
        assert stats.on_time_payment_rate == Decimal("50.00")
        assert stats.late_payments_count == 1
        assert stats.past_due_periods == 2
        assert stats.overdue_count == 0
        assert stats.total_tenants == 1
        assert stats.active_tenants == 1
        assert stats.total_monthly_rent == Decimal("50000.00")

    def test_nothing_due_yet_is_full_marks(self, db, tenant, landlord):
        stats = compute_stats(db, landlord.id, as_of=date(2025, 2, 5))
        assert stats.on_time_payment_rate == Decimal("100.00")
        assert stats.past_due_periods == 0

    def test_unpaid_past_due_counts_against_rate(self, db, tenant, landlord):
        stats = compute_stats(db, landlord.id, as_of=date(2025, 2, 6))
        assert stats.on_time_payment_rate == Decimal("0.00")

    def test_waived_month_not_counted(self, db, tenant, landlord):
        february = RentLedgerService.list_payments(db, tenant.id)[0]
        RentLedgerService.waive_payment(db, landlord.id, february.id, "Flood damage", as_of=date(2025, 2, 6))
        stats = compute_stats(db, landlord.id, as_of=date(2025, 2, 20))
        assert stats.on_time_payment_rate == Decimal("100.00")
        assert stats.past_due_periods == 0

    def test_stored_status_is_not_trusted(self, db, tenant, landlord):
        february = RentLedgerService.list_payments(db, tenant.id)[0]
        assert february.status == RentPaymentStatus.PENDING
        assert february.is_late is False
        stats = compute_stats(db, landlord.id, as_of=date(2025, 2, 20))
        assert stats.late_payments_count == 1
        assert stats.overdue_count == 1
        assert stats.on_time_payment_rate == Decimal("0.00")

    def test_months_never_issued_still_count(self, db, tenant, landlord):
        _pay(db, landlord, tenant, "2025-02", date(2025, 2, 3))
        stats = compute_stats(db, landlord.id, as_of=date(2025, 6, 10))
        assert stats.past_due_periods == 5
        assert stats.overdue_count == 4
        assert stats.late_payments_count == 4
        assert stats.on_time_payment_rate == Decimal("20.00")

    def test_late_but_settled_is_not_overdue(self, db, tenant, landlord):
        _pay(db, landlord, tenant, "2025-02", date(2025, 2, 10))
        stats = compute_stats(db, landlord.id, as_of=date(2025, 2, 20))
        assert stats.late_payments_count == 1
        assert stats.overdue_count == 0

    def test_rent_total_only_counts_active(self, db, tenant, landlord, other_prop):
        other = TenancyService.create_tenancy(
            db, landlord.id, other_prop.id, Occupant(name="Short stay"),
            make_terms(rent="30000"), as_of=date(2025, 1, 20),
        )
        assert compute_stats(db, landlord.id, as_of=date(2025, 1, 20)).total_monthly_rent == Decimal("80000.00")
        TenancyService.end_tenancy(db, landlord.id, other.id, date(2025, 2, 28))
        stats = compute_stats(db, landlord.id, as_of=date(2025, 1, 20))
        assert stats.total_monthly_rent == Decimal("50000.00")
        assert stats.total_tenants == 2

    def test_overpaid_count(self, db, tenant, landlord):
        RentLedgerService.record_payment(
            db, landlord.id, "55000", "cash", tenant_id=tenant.id, period="2025-02",
            payment_date=date(2025, 2, 1), as_of=date(2025, 2, 1),
        )
        assert compute_stats(db, landlord.id, as_of=date(2025, 2, 1)).overpaid_count == 1

    def test_property_stats(self, db, tenant, landlord, prop, other_prop):
        assert compute_property_stats(db, prop.id, as_of=date(2025, 2, 1)).total_tenants == 1
        assert compute_property_stats(db, other_prop.id, as_of=date(2025, 2, 1)).total_tenants == 0

    def test_as_dict(self, db, tenant, landlord):
        data = as_dict(compute_stats(db, landlord.id, as_of=date(2025, 2, 1)))
        assert data["total_tenants"] == 1
        assert set(data) >= {"on_time_payment_rate", "late_payments_count"}


class TestMaintenanceStats:
    def test_counts(self, db, landlord, prop):
        high = MaintenanceService.create_request(db, landlord.id, prop.id, "Leak", "plumbing", priority="high")
        MaintenanceService.create_request(db, landlord.id, prop.id, "Gas", "other", priority="emergency")
        assigned = MaintenanceService.create_request(db, landlord.id, prop.id, "Fan", "hvac")
        MaintenanceService.assign(db, landlord.id, assigned.id, "Cool Co")
        MaintenanceService.mark_in_progress(db, landlord.id, high.id)
        MaintenanceService.complete(db, landlord.id, high.id, actual_cost="12000")

        stats = compute_maintenance_stats(db, landlord.id)
        assert stats.total == 3
        assert stats.pending == 1
        assert stats.in_progress == 1
        assert stats.completed == 1
        assert stats.high_priority == 1
        assert stats.emergency == 1
        assert stats.total_actual_cost == Decimal("12000.00")


class TestBookingStats:
    def test_revenue_from_confirmed_and_completed(self, db, guest, landlord, prop):
        def book(check_in, check_out):
            return BookingService.create_booking(db, guest.id, prop.id, check_in, check_out, Decimal("400000"))

        confirmed = book(date(2025, 7, 1), date(2025, 10, 1))
        BookingService.confirm_booking(db, landlord.id, confirmed.id)
        completed = book(date(2025, 10, 1), date(2025, 12, 1))
        BookingService.confirm_booking(db, landlord.id, completed.id)
        BookingService.complete_booking(db, landlord.id, completed.id)
        book(date(2026, 3, 1), date(2026, 4, 1))
        late_cancel = book(date(2026, 1, 1), date(2026, 2, 1))
        BookingService.confirm_booking(db, landlord.id, late_cancel.id)
        BookingService.cancel_booking(db, guest.id, late_cancel.id, "Visa refused")

        stats = compute_booking_stats(db, landlord.id)
        assert stats.total_bookings == 4
        assert stats.pending_bookings == 1
        assert stats.confirmed_bookings == 1
        assert stats.completed_bookings == 1
        assert stats.cancelled_bookings == 1
        assert stats.cancelled_after_confirmation == 1
        assert stats.total_revenue == Decimal("2200000.00")
        assert stats.total_service_fees == Decimal("200000.00")
        assert stats.average_booking_value == Decimal("1100000.00")

    def test_empty(self, db, landlord):
        stats = compute_booking_stats(db, landlord.id)
        assert stats.total_bookings == 0
        assert stats.average_booking_value == Decimal("0.00")



class TestRentPaymentStats:
    def test_collected_and_owed(self, db, tenant, landlord):
        _pay(db, landlord, tenant, "2025-02", date(2025, 2, 3))
        march = RentLedgerService.record_payment(
            db, landlord.id, "20000", "mpesa", tenant_id=tenant.id, period="2025-03",
            payment_date=date(2025, 3, 10), as_of=date(2025, 3, 10),
        ).payment
        RentLedgerService.assess_late_fee(db, landlord.id, march.id, as_of=date(2025, 3, 10))

        stats = compute_rent_payment_stats(db, landlord.id, as_of=date(2025, 3, 20))
        assert stats.total_collected == Decimal("70000.00")
        assert stats.total_pending == Decimal("0.00")
        assert stats.total_overdue == Decimal("32500.00")
        assert stats.total_late_fees == Decimal("2500.00")
        assert stats.current_month_expected == Decimal("50000.00")
        assert stats.current_month_collected == Decimal("20000.00")
        assert stats.counts["paid"] == 1
        assert stats.counts["partial"] == 1

    def test_not_yet_due_is_pending(self, db, tenant, landlord):
        stats = compute_rent_payment_stats(db, landlord.id, as_of=date(2025, 2, 3))
        assert stats.total_pending == Decimal("50000.00")
        assert stats.total_overdue == Decimal("0.00")
        assert stats.counts["pending"] == 1

    def test_waived_owes_nothing(self, db, tenant, landlord):
        february = RentLedgerService.list_payments(db, tenant.id)[0]
        RentLedgerService.waive_payment(db, landlord.id, february.id, "Flood damage", as_of=date(2025, 2, 6))
        stats = compute_rent_payment_stats(db, landlord.id, as_of=date(2025, 2, 20))
        assert stats.total_overdue == Decimal("0.00")
        assert stats.current_month_expected == Decimal("0.00")
        assert stats.counts["waived"] == 1

    def test_no_tenants(self, db, guest):
        stats = compute_rent_payment_stats(db, guest.id, as_of=date(2025, 2, 20))
        assert stats.total_collected == Decimal("0.00")
        assert sum(stats.counts.values()) == 0


class TestMonotonicStatsView:
    def test_lagging_read_returns_previous_snapshot(self, db, tenant, landlord):
        view = MonotonicStatsView()
        as_of = date(2025, 3, 20)
        fresh = compute_stats(db, landlord.id, as_of=as_of)
        assert view.observe(landlord.id, as_of, 5, fresh) is fresh
        lagging = compute_stats(db, landlord.id, as_of=date(2025, 2, 1))
        assert view.observe(landlord.id, as_of, 4, lagging) is fresh

    def test_waiver_can_lower_counts(self, db, tenant, landlord):
        view = MonotonicStatsView()
        as_of = date(2025, 2, 20)
        assert view.compute(db, landlord.id, as_of).past_due_periods == 1
        february = RentLedgerService.list_payments(db, tenant.id)[0]
        RentLedgerService.waive_payment(db, landlord.id, february.id, "Flood damage", as_of=as_of)
        after = view.compute(db, landlord.id, as_of)
        assert after.past_due_periods == 0
        assert after.overdue_count == 0

    def test_keyed_by_date(self, db, tenant, landlord):
        view = MonotonicStatsView()
        assert view.compute(db, landlord.id, date(2025, 2, 20)).past_due_periods == 1
        assert view.compute(db, landlord.id, date(2025, 2, 1)).past_due_periods == 0

    def test_bounded(self, db, tenant, landlord):
        view = MonotonicStatsView(max_entries=2)
        for day in (1, 2, 3):
            view.compute(db, landlord.id, date(2025, 2, day))
        assert len(view) == 2

    def test_watermark_grows_with_history(self, db, tenant, landlord):
        before = history_watermark(db, landlord.id)
        _pay(db, landlord, tenant, "2025-02", date(2025, 2, 3))
        assert history_watermark(db, landlord.id) > before

    def test_views_are_per_landlord(self, db, tenant, landlord, guest):
        view = MonotonicStatsView()
        view.compute(db, landlord.id, as_of=date(2025, 3, 20))
        assert view.compute(db, guest.id, as_of=date(2025, 3, 20)).total_tenants == 0
