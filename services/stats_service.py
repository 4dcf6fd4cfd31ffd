"""
Stats Service - read-only aggregates for landlords, properties and hosts.

Every figure is computed from the full history on each call. Rent figures
are re-derived per billable month at `as_of` from amounts and dates, so a
month with no stored obligation still counts as unpaid and a stale stored
status never leaks into the numbers. Reads may be served by a lagging
replica; MonotonicStatsView keeps one process from handing out a snapshot
older than one it has already returned.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass, fields
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import (
     AuditLog,
     Booking,
     BookingStatus,
     MaintenancePriority,
     MaintenanceRequest,
     MaintenanceStatus,
     PaymentLedger,
     RentPayment,
     RentPaymentStatus,
     Tenant,
     TenantStatus,
)
from utils.money import ZERO, money_sum, to_money
from utils.periods import period_key
from .rent_ledger_service import PeriodStanding, evaluate_periods

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantStats:
     total_tenants: int
     active_tenants: int
     total_monthly_rent: Decimal
     on_time_payment_rate: Decimal  # percent
     late_payments_count: int
     overdue_count: int
     past_due_periods: int
     overpaid_count: int


@dataclass(frozen=True)
class RentPaymentStats:
     total_collected: Decimal
     total_pending: Decimal
     total_overdue: Decimal
     total_late_fees: Decimal
     current_month_expected: Decimal
     current_month_collected: Decimal
     counts: Dict[str, int]


@dataclass(frozen=True)
class MaintenanceStats:
     total: int
     pending: int
     in_progress: int
     scheduled: int
     pending_parts: int
     completed: int
     cancelled: int
     high_priority: int
     emergency: int
     total_actual_cost: Decimal


@dataclass(frozen=True)
class BookingStats:
     total_bookings: int
     pending_bookings: int
     confirmed_bookings: int
     cancelled_bookings: int
     cancelled_after_confirmation: int
     completed_bookings: int
     total_revenue: Decimal
     total_service_fees: Decimal
     average_booking_value: Decimal


def _past_due(standings: Iterable[PeriodStanding], as_of: date) -> List[PeriodStanding]:
     return [s for s in standings if s.due_date < as_of and not s.waived]


def on_time_rate(standings: Iterable[PeriodStanding], as_of: date) -> Decimal:
     """
     Percentage of past-due periods that were paid on time.

     The denominator is every unwaived billable month whose due date is
     before `as_of`; the numerator is those derived as paid and not late.
     Returns 100 when nothing has fallen due yet.
     """
     past_due = _past_due(standings, as_of)
     if not past_due:
          return Decimal("100.00")
     on_time = sum(1 for s in past_due if s.status == RentPaymentStatus.PAID and not s.is_late)
     rate = Decimal(on_time * 100) / Decimal(len(past_due))
     return rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _standings(db: Session, tenants: List[Tenant], as_of: date) -> List[PeriodStanding]:
     if not tenants:
          return []
     by_tenant: Dict[int, List[RentPayment]] = {t.id: [] for t in tenants}
     payments = db.query(RentPayment).filter(RentPayment.tenant_id.in_(list(by_tenant))).all()
     for p in payments:
          by_tenant[p.tenant_id].append(p)
     standings = []
     for tenant in tenants:
          standings.extend(evaluate_periods(tenant, by_tenant[tenant.id], as_of))
     return standings


def _tenant_stats(db: Session, tenants: List[Tenant], as_of: date) -> TenantStats:
     active = [t for t in tenants if t.status == TenantStatus.ACTIVE]
     standings = _standings(db, tenants, as_of)
     return TenantStats(
          total_tenants=len(tenants),
          active_tenants=len(active),
          total_monthly_rent=money_sum(t.monthly_rent for t in active),
          on_time_payment_rate=on_time_rate(standings, as_of),
          late_payments_count=sum(1 for s in standings if s.is_late),
          overdue_count=sum(1 for s in standings if s.overdue),
          past_due_periods=len(_past_due(standings, as_of)),
          overpaid_count=sum(1 for s in standings if s.overpayment > 0),
     )


def compute_stats(db: Session, landlord_id: int, as_of: Optional[date] = None) -> TenantStats:
     """Tenancy and rent aggregates across a landlord's whole portfolio."""
     as_of = as_of or date.today()
     tenants = db.query(Tenant).filter(Tenant.landlord_id == landlord_id).all()
     return _tenant_stats(db, tenants, as_of)


def compute_property_stats(db: Session, property_id: int, as_of: Optional[date] = None) -> TenantStats:
     """The same aggregates restricted to one property."""
     as_of = as_of or date.today()
     tenants = db.query(Tenant).filter(Tenant.property_id == property_id).all()
     return _tenant_stats(db, tenants, as_of)


def compute_rent_payment_stats(db: Session, landlord_id: int, as_of: Optional[date] = None) -> RentPaymentStats:
     """
     Money view of a landlord's rent roll as of a date.

     Pending is what is still owed on months not yet due; overdue is what
     is owed on months past their due date. Waived months owe nothing.
     """
     as_of = as_of or date.today()
     tenants = db.query(Tenant).filter(Tenant.landlord_id == landlord_id).all()
     standings = _standings(db, tenants, as_of)
     current = [s for s in standings if s.period == period_key(as_of)]

     counts: Dict[str, int] = {s.value: 0 for s in RentPaymentStatus}
     for s in standings:
          counts[s.status.value] += 1

     return RentPaymentStats(
          total_collected=money_sum(s.amount_paid for s in standings),
          total_pending=money_sum(s.outstanding for s in standings if as_of <= s.due_date),
          total_overdue=money_sum(s.outstanding for s in standings if as_of > s.due_date),
          total_late_fees=money_sum(s.late_fee for s in standings if not s.waived),
          current_month_expected=money_sum(s.amount_due for s in current if not s.waived),
          current_month_collected=money_sum(s.amount_paid for s in current),
          counts=counts,
     )


def compute_maintenance_stats(db: Session, landlord_id: int) -> MaintenanceStats:
     requests = db.query(MaintenanceRequest).filter(MaintenanceRequest.landlord_id == landlord_id).all()

     def count(*statuses: MaintenanceStatus) -> int:
          return sum(1 for r in requests if r.status in statuses)

     return MaintenanceStats(
          total=len(requests),
          pending=count(MaintenanceStatus.PENDING),
          in_progress=count(MaintenanceStatus.IN_PROGRESS, MaintenanceStatus.ASSIGNED),
          scheduled=count(MaintenanceStatus.SCHEDULED),
          pending_parts=count(MaintenanceStatus.PENDING_PARTS),
          completed=count(MaintenanceStatus.COMPLETED),
          cancelled=count(MaintenanceStatus.CANCELLED),
          high_priority=sum(1 for r in requests if r.priority == MaintenancePriority.HIGH),
          emergency=sum(1 for r in requests if r.priority == MaintenancePriority.EMERGENCY),
          total_actual_cost=money_sum(r.actual_cost for r in requests if r.actual_cost is not None),
     )


def compute_booking_stats(db: Session, host_id: int) -> BookingStats:
     bookings = db.query(Booking).filter(Booking.host_id == host_id).all()
     earning = [b for b in bookings if b.status in (BookingStatus.CONFIRMED, BookingStatus.COMPLETED)]
     revenue = money_sum(b.total_amount for b in earning)

     def count(status: BookingStatus) -> int:
          return sum(1 for b in bookings if b.status == status)

     return BookingStats(
          total_bookings=len(bookings),
          pending_bookings=count(BookingStatus.PENDING),
          confirmed_bookings=count(BookingStatus.CONFIRMED),
          cancelled_bookings=count(BookingStatus.CANCELLED),
          cancelled_after_confirmation=sum(1 for b in bookings if b.cancelled_after_confirmation),
          completed_bookings=count(BookingStatus.COMPLETED),
          total_revenue=revenue,
          total_service_fees=money_sum(b.service_fee for b in earning),
          average_booking_value=to_money(revenue / len(earning)) if earning else ZERO,
     )


def history_watermark(db: Session, landlord_id: int) -> int:
     """
     Size of the append-only history behind a landlord's tenant stats.

     Tenancies, obligations, ledger entries and the landlord's audited
     actions only ever grow, so a read that sees a smaller total is older
     than one that saw a larger one.
     """
     tenants = db.query(func.count(Tenant.id)).filter(Tenant.landlord_id == landlord_id).scalar()
     payments = db.query(func.count(RentPayment.id)).filter(RentPayment.landlord_id == landlord_id).scalar()
     entries = (
          db.query(func.count(PaymentLedger.id))
          .join(RentPayment, PaymentLedger.rent_payment_id == RentPayment.id)
          .filter(RentPayment.landlord_id == landlord_id)
          .scalar()
     )
     actions = db.query(func.count(AuditLog.id)).filter(AuditLog.actor_id == landlord_id).scalar()
     return (tenants or 0) + (payments or 0) + (entries or 0) + (actions or 0)


class MonotonicStatsView:
     """
     Per-process guard against replica lag.

     Snapshots are kept per (landlord, as_of) together with the history
     watermark they were computed at. A read whose watermark is behind the
     stored one is stale and the stored snapshot is returned instead; any
     read at or past it replaces the snapshot, even when counts went down
     (a waiver legitimately lowers past-due figures). The oldest keys are
     evicted past max_entries.
     """

     MAX_ENTRIES = 1024

     def __init__(self, max_entries: int = MAX_ENTRIES):
          self.max_entries = max_entries
          self._seen: "OrderedDict[Tuple[int, date], Tuple[int, TenantStats]]" = OrderedDict()

     def __len__(self) -> int:
          return len(self._seen)

     def observe(self, landlord_id: int, as_of: date, watermark: int, stats: TenantStats) -> TenantStats:
          key = (landlord_id, as_of)
          previous = self._seen.get(key)
          if previous is not None and watermark < previous[0]:
               logger.info(
                    "Stale stats read for landlord %s as of %s (watermark %s < %s); serving previous snapshot",
                    landlord_id, as_of, watermark, previous[0],
               )
               self._seen.move_to_end(key)
               return previous[1]

          self._seen[key] = (watermark, stats)
          self._seen.move_to_end(key)
          while len(self._seen) > self.max_entries:
               self._seen.popitem(last=False)
          return stats

     def compute(self, db: Session, landlord_id: int, as_of: Optional[date] = None) -> TenantStats:
          as_of = as_of or date.today()
          watermark = history_watermark(db, landlord_id)
          return self.observe(landlord_id, as_of, watermark, compute_stats(db, landlord_id, as_of))


def as_dict(stats) -> dict:
     return {f.name: getattr(stats, f.name) for f in fields(stats)}
