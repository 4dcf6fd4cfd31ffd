"""
Rent Ledger Service - per-period rent obligations and payments.

Each tenant has at most one RentPayment per month (the period key). This
service creates obligations idempotently, accumulates partial payments,
assesses late fees and keeps statuses and the tenant's lateness flag in
step with the amounts. Statuses are never set by hand: they are always
recomputed by derive_payment_status().
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from models import PaymentMethod, RentPayment, RentPaymentStatus, Tenant, TenantStatus
from utils.money import ZERO, money_sum, to_money
from utils.periods import format_period, iter_periods, next_period, parse_period, period_key, utcnow
from . import audit_service, ledger_service
from .exceptions import (
     ConflictError,
     InvalidStateError,
     NotFoundError,
     PermissionDeniedError,
     ValidationError,
)
from .notifications import notify

logger = logging.getLogger(__name__)


@dataclass
class PaymentOutcome:
     """Result of a payment event: the obligation and the tenant-level late flag."""
     payment: RentPayment
     tenant_is_late: bool
     overpayment: Decimal = ZERO

     @property
     def is_overpaid(self) -> bool:
          return self.overpayment > 0


# ---------------------------------------------------------------------------
# Pure derivations
# ---------------------------------------------------------------------------

def compute_due_date(period: date, rent_due_day: int, grace_period_days: int) -> date:
     """Due date of a period: the rent due day of that month plus the grace period."""
     return date(period.year, period.month, rent_due_day) + timedelta(days=grace_period_days)


def derive_is_late(
     amount_paid: Decimal,
     amount_due: Decimal,
     due_date: date,
     as_of: date,
     settled_on: Optional[date] = None,
     waived: bool = False,
) -> bool:
     """
     Whether an obligation counts as late.

     Settled obligations are late only if they were settled after the due
     date (a payment on the due date itself is on time). Unsettled ones
     are late once `as_of` is past the due date.
     """
     if waived:
          return False
     if amount_paid >= amount_due:
          return settled_on is not None and settled_on > due_date
     return as_of > due_date


def derive_payment_status(
     amount_paid: Decimal,
     amount_due: Decimal,
     due_date: date,
     as_of: date,
     settled_on: Optional[date] = None,
     waived: bool = False,
) -> RentPaymentStatus:
     """Status of an obligation as a pure function of its amounts and dates."""
     if waived:
          return RentPaymentStatus.WAIVED
     late = derive_is_late(amount_paid, amount_due, due_date, as_of, settled_on)
     if amount_paid >= amount_due:
          return RentPaymentStatus.LATE if late else RentPaymentStatus.PAID
     if amount_paid > 0:
          return RentPaymentStatus.PARTIAL
     return RentPaymentStatus.LATE if late else RentPaymentStatus.PENDING


@dataclass(frozen=True)
class PeriodStanding:
     """
     One billable month of a tenancy, evaluated at a given date.

     Built from the stored obligation when there is one, otherwise from the
     tenant's current rent with nothing paid. Status and lateness are always
     re-derived here; the values stored on RentPayment are not consulted.
     """
     period: date
     due_date: date
     amount_due: Decimal
     amount_paid: Decimal
     late_fee: Decimal
     status: RentPaymentStatus
     is_late: bool
     overdue: bool
     recorded: bool

     @property
     def waived(self) -> bool:
          return self.status == RentPaymentStatus.WAIVED

     @property
     def outstanding(self) -> Decimal:
          if self.waived:
               return ZERO
          return max(self.amount_due + self.late_fee - self.amount_paid, ZERO)

     @property
     def overpayment(self) -> Decimal:
          return max(self.amount_paid - self.amount_due - self.late_fee, ZERO)

     @classmethod
     def evaluate(
          cls,
          period: date,
          due_date: date,
          amount_due: Decimal,
          amount_paid: Decimal,
          late_fee: Decimal,
          as_of: date,
          settled_on: Optional[date] = None,
          waived: bool = False,
          recorded: bool = True,
     ) -> "PeriodStanding":
          return cls(
               period=period,
               due_date=due_date,
               amount_due=amount_due,
               amount_paid=amount_paid,
               late_fee=late_fee,
               status=derive_payment_status(amount_paid, amount_due, due_date, as_of, settled_on, waived),
               is_late=derive_is_late(amount_paid, amount_due, due_date, as_of, settled_on, waived),
               overdue=not waived and amount_paid < amount_due and as_of > due_date,
               recorded=recorded,
          )


def lease_end_exclusive(tenant: Tenant) -> date:
     """First day no longer billable: lease end, or the day after move-out once the tenancy is over."""
     last = tenant.lease_end_date
     if tenant.status != TenantStatus.ACTIVE and tenant.move_out_date is not None:
          last = min(last, tenant.move_out_date + timedelta(days=1))
     return last


def obligation_due_date(tenant: Tenant, period: date) -> date:
     due_date = compute_due_date(period, tenant.rent_due_day, tenant.grace_period_days)
     if due_date < tenant.lease_start_date:
          # first month of a lease starting after the usual due day
          due_date = tenant.lease_start_date + timedelta(days=tenant.grace_period_days)
     return due_date


def billable_periods(tenant: Tenant, as_of: date) -> List[date]:
     """Every month of the tenancy up to and including the month of `as_of`."""
     end = min(lease_end_exclusive(tenant), next_period(as_of))
     return list(iter_periods(tenant.lease_start_date, end))


def evaluate_periods(tenant: Tenant, payments: Iterable[RentPayment], as_of: date) -> List[PeriodStanding]:
     """
     Standing of every billable or recorded month of a tenancy as of `as_of`.

     Months with no stored obligation count as unpaid at the tenant's
     current monthly rent.
     """
     recorded = {p.payment_month: p for p in payments}
     standings = []
     for period in sorted(set(billable_periods(tenant, as_of)) | set(recorded)):
          payment = recorded.get(period)
          if payment is None:
               standings.append(PeriodStanding.evaluate(
                    period, obligation_due_date(tenant, period), to_money(tenant.monthly_rent),
                    ZERO, ZERO, as_of, recorded=False,
               ))
          else:
               standings.append(PeriodStanding.evaluate(
                    period, payment.due_date, payment.amount_due, payment.amount_paid, payment.late_fee,
                    as_of, payment.settled_on, payment.waived_at is not None,
               ))
     return standings


def derive_lateness(tenant: Tenant, payments: Iterable[RentPayment], as_of: date) -> bool:
     """True when any billable month is still unsettled past its due date."""
     return any(s.overdue for s in evaluate_periods(tenant, payments, as_of))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _today(as_of: Optional[date]) -> date:
     return as_of if as_of is not None else date.today()


def _positive_money(value, field: str, entity: str, entity_id) -> Decimal:
     try:
          amount = to_money(value)
     except ValueError:
          raise ValidationError(f"{field} must be a number", entity=entity, entity_id=entity_id) from None
     if amount <= 0:
          raise ValidationError(
               f"{field} must be greater than zero, got {amount}",
               entity=entity,
               entity_id=entity_id,
          )
     return amount


def _coerce_period(value: Union[date, str]) -> date:
     try:
          return parse_period(value)
     except ValueError as exc:
          raise ValidationError(str(exc), entity="rent_payment") from None


def _coerce_method(value: Union[PaymentMethod, str]) -> PaymentMethod:
     try:
          return PaymentMethod(value)
     except ValueError:
          allowed = ", ".join(m.value for m in PaymentMethod)
          raise ValidationError(
               f"Unknown payment method {value!r}; expected one of {allowed}",
               entity="rent_payment",
          ) from None


def _apply_status(payment: RentPayment, as_of: date) -> None:
     waived = payment.waived_at is not None
     payment.is_late = derive_is_late(
          payment.amount_paid, payment.amount_due, payment.due_date, as_of, payment.settled_on, waived
     )
     payment.status = derive_payment_status(
          payment.amount_paid, payment.amount_due, payment.due_date, as_of, payment.settled_on, waived
     )


def _flush_guarded(db: Session, payment: RentPayment) -> None:
     """
     Flush with the optimistic version check; a lost race becomes ConflictError.

     A failed flush leaves the session needing a rollback, so the error is
     built from values read beforehand.
     """
     payment_id = payment.id
     state = payment.status.value if payment.status else None
     try:
          db.flush()
     except StaleDataError as exc:
          logger.warning("Concurrent update detected on rent payment %s", payment_id)
          raise ConflictError(
               f"Rent payment {payment_id} was modified concurrently; reload and retry",
               entity="rent_payment",
               entity_id=payment_id,
               current_state=state,
          ) from exc


class RentLedgerService:
     """Service class for rent obligation and payment business logic."""

     @staticmethod
     def get_payment(db: Session, payment_id: int) -> RentPayment:
          payment = db.get(RentPayment, payment_id)
          if payment is None:
               raise NotFoundError(
                    f"Rent payment with ID {payment_id} not found",
                    entity="rent_payment",
                    entity_id=payment_id,
               )
          return payment

     @staticmethod
     def find_obligation(db: Session, tenant_id: int, period: date) -> Optional[RentPayment]:
          return (
               db.query(RentPayment)
               .filter(RentPayment.tenant_id == tenant_id, RentPayment.payment_month == period)
               .first()
          )

     @staticmethod
     def list_payments(db: Session, tenant_id: int) -> List[RentPayment]:
          return (
               db.query(RentPayment)
               .filter(RentPayment.tenant_id == tenant_id)
               .order_by(RentPayment.payment_month)
               .all()
          )

     @staticmethod
     def _get_tenant(db: Session, tenant_id: int) -> Tenant:
          tenant = db.get(Tenant, tenant_id)
          if tenant is None:
               raise NotFoundError(f"Tenant with ID {tenant_id} not found", entity="tenant", entity_id=tenant_id)
          return tenant

     @staticmethod
     def _check_actor(payment: RentPayment, actor_id: Optional[int]) -> None:
          if actor_id is not None and actor_id != payment.landlord_id:
               raise PermissionDeniedError(
                    f"User {actor_id} is not the landlord for rent payment {payment.id}",
                    entity="rent_payment",
                    entity_id=payment.id,
               )

     @staticmethod
     def _check_period_in_lease(tenant: Tenant, period: date) -> None:
          if period < period_key(tenant.lease_start_date) or period >= lease_end_exclusive(tenant):
               raise ValidationError(
                    f"Period {format_period(period)} is outside the tenancy of tenant {tenant.id}",
                    entity="tenant",
                    entity_id=tenant.id,
                    current_state=tenant.status.value,
                    attempted="ensure_period_obligation",
               )

     @staticmethod
     def _ensure(db: Session, tenant: Tenant, period: date, as_of: date) -> Tuple[RentPayment, bool]:
          existing = RentLedgerService.find_obligation(db, tenant.id, period)
          if existing is not None:
               return existing, False

          RentLedgerService._check_period_in_lease(tenant, period)
          due_date = obligation_due_date(tenant, period)
          payment = RentPayment(
               tenant_id=tenant.id,
               property_id=tenant.property_id,
               landlord_id=tenant.landlord_id,
               payment_month=period,
               amount_due=to_money(tenant.monthly_rent),
               amount_paid=ZERO,
               late_fee=ZERO,
               due_date=due_date,
          )
          _apply_status(payment, as_of)

          try:
               with db.begin_nested():
                    db.add(payment)
                    db.flush()
          except IntegrityError:
               # Another transaction created the same (tenant, period) first
               winner = RentLedgerService.find_obligation(db, tenant.id, period)
               if winner is None:
                    raise
               return winner, False

          logger.info("Created rent obligation %s for tenant %s period %s", payment.id, tenant.id, period)
          return payment, True

     @staticmethod
     def ensure_period_obligation(
          db: Session,
          tenant_id: int,
          period: Union[date, str],
          as_of: Optional[date] = None,
     ) -> RentPayment:
          """
          Return the obligation for (tenant, period), creating it if missing.

          Safe to call repeatedly: the (tenant_id, payment_month) unique key
          guarantees a single record even under concurrent callers. The
          amount due is the tenant's current monthly rent.

          Raises:
               NotFoundError: If the tenant doesn't exist
               ValidationError: If the period is malformed or outside the lease
          """
          tenant = RentLedgerService._get_tenant(db, tenant_id)
          payment, _ = RentLedgerService._ensure(db, tenant, _coerce_period(period), _today(as_of))
          return payment

     @staticmethod
     def refresh_tenant_lateness(db: Session, tenant: Tenant, as_of: Optional[date] = None) -> bool:
          """Recompute and store tenant.is_late_on_rent from every billable month."""
          payments = db.query(RentPayment).filter(RentPayment.tenant_id == tenant.id).all()
          tenant.is_late_on_rent = derive_lateness(tenant, payments, _today(as_of))
          return tenant.is_late_on_rent

     @staticmethod
     def record_payment(
          db: Session,
          actor_id: Optional[int],
          amount,
          method: Union[PaymentMethod, str],
          payment_id: Optional[int] = None,
          tenant_id: Optional[int] = None,
          period: Union[date, str, None] = None,
          transaction_ref: Optional[str] = None,
          payment_date: Optional[date] = None,
          notes: Optional[str] = None,
          as_of: Optional[date] = None,
     ) -> PaymentOutcome:
          """
          Record an externally confirmed payment against an obligation.

          The obligation is addressed either by payment_id or by
          (tenant_id, period); the latter creates it if needed. The amount is
          added to the running amount_paid, a ledger entry is appended and
          the status plus the tenant's late flag are recomputed.

          Overpayment is accepted and returned in the outcome; it is never
          moved to another period unless carry_forward_overpayment is called.

          Raises:
               ValidationError: Non-positive amount, unknown method, bad address
               NotFoundError: Obligation or tenant missing
               InvalidStateError: Obligation was waived
               ConflictError: Concurrent update on the same obligation
          """
          as_of = _today(as_of)
          method = _coerce_method(method)

          if payment_id is not None:
               payment = RentLedgerService.get_payment(db, payment_id)
          elif tenant_id is not None and period is not None:
               payment = None
          else:
               raise ValidationError(
                    "Provide payment_id or both tenant_id and period",
                    entity="rent_payment",
               )

          amount = _positive_money(amount, "amount", "rent_payment", payment_id)

          if payment is None:
               payment = RentLedgerService.ensure_period_obligation(db, tenant_id, period, as_of)
          RentLedgerService._check_actor(payment, actor_id)

          if payment.waived_at is not None:
               raise InvalidStateError(
                    f"Rent payment {payment.id} was waived and cannot take payments",
                    entity="rent_payment",
                    entity_id=payment.id,
                    current_state=payment.status.value,
                    attempted="record_payment",
               )

          paid_on = payment_date or as_of
          new_total = payment.amount_paid + amount
          if payment.settled_on is None and new_total >= payment.amount_due:
               payment.settled_on = paid_on
          payment.amount_paid = new_total
          payment.payment_method = method
          if transaction_ref:
               payment.transaction_id = transaction_ref
          payment.payment_date = paid_on
          if notes:
               payment.notes = notes
          _apply_status(payment, as_of)
          _flush_guarded(db, payment)

          ledger_service.append_entry(db, payment, amount, method.value, paid_on, transaction_ref)
          tenant_is_late = RentLedgerService.refresh_tenant_lateness(db, payment.tenant, as_of)
          db.flush()

          overpayment = payment.overpayment
          if overpayment > 0:
               logger.warning(
                    "Overpayment of %s on rent payment %s (tenant %s, period %s)",
                    overpayment, payment.id, payment.tenant_id, payment.payment_month,
               )
          logger.info(
               "Recorded %s on rent payment %s: paid %s of %s, status %s",
               amount, payment.id, payment.amount_paid, payment.amount_due, payment.status.value,
          )
          notify(
               db, "rent.payment_recorded", payment.tenant.user_id,
               rent_payment_id=payment.id,
               period=format_period(payment.payment_month),
               amount=str(amount),
               status=payment.status.value,
          )
          return PaymentOutcome(payment=payment, tenant_is_late=tenant_is_late, overpayment=overpayment)

     @staticmethod
     def assess_late_fee(
          db: Session,
          actor_id: Optional[int],
          payment_id: int,
          fee_amount=None,
          as_of: Optional[date] = None,
     ) -> PaymentOutcome:
          """
          Add a late fee to an overdue, unsettled obligation.

          amount_due is untouched; the fee is tracked in late_fee and summed at
          collection time. When no amount is given the tenant's configured
          late_fee_amount is used.

          Raises:
               InvalidStateError: Not yet past due, already settled, or waived
               ValidationError: Fee is not positive
          """
          as_of = _today(as_of)
          payment = RentLedgerService.get_payment(db, payment_id)
          RentLedgerService._check_actor(payment, actor_id)

          if payment.waived_at is not None or payment.is_settled or as_of <= payment.due_date:
               raise InvalidStateError(
                    f"Late fee not allowed on rent payment {payment.id}: it must be past due "
                    f"({payment.due_date}) and not fully paid",
                    entity="rent_payment",
                    entity_id=payment.id,
                    current_state=payment.status.value,
                    attempted="assess_late_fee",
               )

          if fee_amount is None:
               fee_amount = payment.tenant.late_fee_amount
          fee = _positive_money(fee_amount, "fee_amount", "rent_payment", payment.id)

          payment.late_fee = payment.late_fee + fee
          _apply_status(payment, as_of)
          _flush_guarded(db, payment)
          tenant_is_late = RentLedgerService.refresh_tenant_lateness(db, payment.tenant, as_of)

          audit_service.record_action(
               db, actor_id, "rent.late_fee_assessed", "rent_payment", payment.id,
               fee=fee, late_fee_total=payment.late_fee,
          )
          notify(
               db, "rent.late_fee_assessed", payment.tenant.user_id,
               rent_payment_id=payment.id, fee=str(fee),
          )
          return PaymentOutcome(payment=payment, tenant_is_late=tenant_is_late, overpayment=payment.overpayment)

     @staticmethod
     def waive_payment(
          db: Session,
          actor_id: Optional[int],
          payment_id: int,
          reason: str,
          as_of: Optional[date] = None,
     ) -> PaymentOutcome:
          """Forgive an unsettled obligation. The waiver is audited."""
          as_of = _today(as_of)
          payment = RentLedgerService.get_payment(db, payment_id)
          RentLedgerService._check_actor(payment, actor_id)

          if payment.waived_at is not None or payment.is_settled:
               raise InvalidStateError(
                    f"Rent payment {payment.id} cannot be waived",
                    entity="rent_payment",
                    entity_id=payment.id,
                    current_state=payment.status.value,
                    attempted="waive",
               )
          if not reason or not reason.strip():
               raise ValidationError("A reason is required to waive rent", entity="rent_payment", entity_id=payment.id)

          payment.waived_at = utcnow()
          payment.notes = reason
          _apply_status(payment, as_of)
          _flush_guarded(db, payment)
          tenant_is_late = RentLedgerService.refresh_tenant_lateness(db, payment.tenant, as_of)

          audit_service.record_action(
               db, actor_id, "rent.waived", "rent_payment", payment.id,
               reason=reason, outstanding=payment.amount_due - payment.amount_paid,
          )
          return PaymentOutcome(payment=payment, tenant_is_late=tenant_is_late, overpayment=payment.overpayment)

     @staticmethod
     def carry_forward_overpayment(
          db: Session,
          actor_id: Optional[int],
          payment_id: int,
          as_of: Optional[date] = None,
     ) -> PaymentOutcome:
          """
          Move an obligation's overpayment into the next period as a credit.

          The source keeps exactly what it owed; a negative ledger entry on
          the source and a credit payment on the target keep both ledgers
          reconciled. Returns the outcome for the target period.
          """
          as_of = _today(as_of)
          source = RentLedgerService.get_payment(db, payment_id)
          RentLedgerService._check_actor(source, actor_id)

          excess = source.overpayment
          if excess <= 0:
               raise InvalidStateError(
                    f"Rent payment {source.id} has no overpayment to carry forward",
                    entity="rent_payment",
                    entity_id=source.id,
                    current_state=source.status.value,
                    attempted="carry_forward_overpayment",
               )

          target = RentLedgerService.ensure_period_obligation(
               db, source.tenant_id, next_period(source.payment_month), as_of
          )
          credit_date = source.payment_date or as_of

          source.amount_paid = source.amount_paid - excess
          _apply_status(source, as_of)
          _flush_guarded(db, source)
          ledger_service.append_entry(
               db, source, -excess, PaymentMethod.CREDIT.value, credit_date, f"credit-to-{target.id}"
          )

          audit_service.record_action(
               db, actor_id, "rent.overpayment_carried_forward", "rent_payment", source.id,
               amount=excess, target_payment_id=target.id,
          )
          return RentLedgerService.record_payment(
               db,
               actor_id,
               excess,
               PaymentMethod.CREDIT,
               payment_id=target.id,
               transaction_ref=f"credit-from-{source.id}",
               payment_date=credit_date,
               as_of=as_of,
          )

     @staticmethod
     def refresh_statuses(db: Session, as_of: Optional[date] = None, landlord_id: Optional[int] = None) -> int:
          """
          Recompute stored statuses of open obligations and tenant late flags.

          Run daily as part of roll_over().

          Returns:
               Number of obligations whose status changed
          """
          as_of = _today(as_of)
          query = db.query(RentPayment).filter(
               RentPayment.status.in_([
                    RentPaymentStatus.PENDING,
                    RentPaymentStatus.PARTIAL,
                    RentPaymentStatus.LATE,
               ])
          )
          if landlord_id is not None:
               query = query.filter(RentPayment.landlord_id == landlord_id)

          changed = 0
          for payment in query.all():
               before = (payment.status, payment.is_late)
               _apply_status(payment, as_of)
               if (payment.status, payment.is_late) != before:
                    changed += 1

          tenants = db.query(Tenant)
          if landlord_id is not None:
               tenants = tenants.filter(Tenant.landlord_id == landlord_id)
          for tenant in tenants.all():
               RentLedgerService.refresh_tenant_lateness(db, tenant, as_of)

          db.flush()
          logger.info("Status sweep as of %s updated %d obligations", as_of, changed)
          return changed

     @staticmethod
     def generate_monthly_obligations(
          db: Session,
          period: Union[date, str],
          as_of: Optional[date] = None,
          landlord_id: Optional[int] = None,
     ) -> List[RentPayment]:
          """
          Seed the obligation for `period` for every active tenant whose lease covers it.

          Exposed as POST /api/rent/obligations/generate for month-end runs.

          Returns:
               List of newly created obligations
          """
          as_of = _today(as_of)
          period = _coerce_period(period)
          query = db.query(Tenant).filter(
               Tenant.status == TenantStatus.ACTIVE,
               Tenant.lease_end_date > period,
          )
          if landlord_id is not None:
               query = query.filter(Tenant.landlord_id == landlord_id)

          created = []
          for tenant in query.all():
               if period_key(tenant.lease_start_date) > period:
                    continue
               payment, was_created = RentLedgerService._ensure(db, tenant, period, as_of)
               if was_created:
                    created.append(payment)
          return created

     @staticmethod
     def roll_over(db: Session, as_of: Optional[date] = None, landlord_id: Optional[int] = None) -> Dict:
          """
          Daily maintenance run: backfill every missing billable month, then sweep statuses.

          Months a tenancy skipped (no payment recorded, no job run) get their
          obligation at the tenant's current rent. Safe to run repeatedly.
          Driven by scripts/rent_rollover.py or POST /api/rent/rollover.
          """
          as_of = _today(as_of)
          query = db.query(Tenant)
          if landlord_id is not None:
               query = query.filter(Tenant.landlord_id == landlord_id)

          created = 0
          for tenant in query.all():
               for period in billable_periods(tenant, as_of):
                    _, was_created = RentLedgerService._ensure(db, tenant, period, as_of)
                    if was_created:
                         created += 1

          updated = RentLedgerService.refresh_statuses(db, as_of, landlord_id)
          logger.info("Rent rollover as of %s: %d obligations created, %d statuses updated", as_of, created, updated)
          return {"as_of": as_of, "obligations_created": created, "statuses_updated": updated}

     @staticmethod
     def calculate_tenant_balance(db: Session, tenant_id: int, as_of: Optional[date] = None) -> Dict:
          """
          Calculate the balance position of a tenant.

          Every billable month up to `as_of` counts, including months with
          no stored obligation yet.

          Returns:
               Dictionary with balance information
          """
          tenant = RentLedgerService._get_tenant(db, tenant_id)
          standings = evaluate_periods(tenant, RentLedgerService.list_payments(db, tenant.id), _today(as_of))

          by_status: Dict[str, int] = {s.value: 0 for s in RentPaymentStatus}
          for s in standings:
               by_status[s.status.value] += 1

          return {
               "tenant_id": tenant.id,
               "total_owed": money_sum(s.outstanding for s in standings),
               "total_paid": money_sum(s.amount_paid for s in standings),
               "late_fees": money_sum(s.late_fee for s in standings if not s.waived),
               "overpaid_amount": money_sum(s.overpayment for s in standings),
               "is_late_on_rent": any(s.overdue for s in standings),
               "total_periods": len(standings),
               "counts": by_status,
          }
