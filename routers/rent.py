"""
Rent ledger API routes.

Record payments, assess late fees and inspect a tenant's obligations.
Payments are recorded after an external provider has confirmed them; this
service never moves money.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_session
from schemas.rent import (
     ObligationRequest,
     PaymentRecordRequest,
     LateFeeRequest,
     WaiveRequest,
     RentPaymentResponse,
     PaymentOutcomeResponse,
     RentPaymentListResponse,
     TenantBalanceResponse,
     LedgerVerificationResponse,
     GenerateObligationsRequest,
     RolloverRequest,
     RolloverResponse,
)
from security import get_actor_id
from services import ledger_service
from services.rent_ledger_service import RentLedgerService, PaymentOutcome
from services.tenancy_service import TenancyService

router = APIRouter(prefix="/api/rent", tags=["rent"])


def _outcome(outcome: PaymentOutcome) -> PaymentOutcomeResponse:
     return PaymentOutcomeResponse.model_validate(outcome, from_attributes=True)


@router.post(
     "/obligations",
     response_model=RentPaymentResponse,
     summary="Ensure the obligation for a tenant and month exists"
)
def ensure_obligation(
     body: ObligationRequest,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """Idempotent: returns the existing record when the month was already issued."""
     TenancyService._get_for_landlord(db, actor_id, body.tenant_id)
     payment = RentLedgerService.ensure_period_obligation(db, body.tenant_id, body.period)
     return RentPaymentResponse.model_validate(payment)


@router.post(
     "/payments",
     response_model=PaymentOutcomeResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Record a payment"
)
def record_payment(
     body: PaymentRecordRequest,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """
     Add a confirmed payment to an obligation's running total.

     - Partial payments accumulate across calls.
     - Overpayment is accepted and reported via **is_overpaid**; it is not moved
       to another month unless `/payments/{id}/carry-forward` is called.
     """
     outcome = RentLedgerService.record_payment(
          db,
          actor_id,
          body.amount,
          body.payment_method,
          payment_id=body.payment_id,
          tenant_id=body.tenant_id,
          period=body.period,
          transaction_ref=body.transaction_id,
          payment_date=body.payment_date,
          notes=body.notes,
     )
     return _outcome(outcome)


@router.post(
     "/payments/{payment_id}/late-fee",
     response_model=PaymentOutcomeResponse,
     summary="Assess a late fee"
)
def assess_late_fee(
     payment_id: int,
     body: LateFeeRequest,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     outcome = RentLedgerService.assess_late_fee(db, actor_id, payment_id, body.fee_amount)
     return _outcome(outcome)


@router.post(
     "/payments/{payment_id}/waive",
     response_model=PaymentOutcomeResponse,
     summary="Waive an obligation"
)
def waive_payment(
     payment_id: int,
     body: WaiveRequest,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     outcome = RentLedgerService.waive_payment(db, actor_id, payment_id, body.reason)
     return _outcome(outcome)


@router.post(
     "/payments/{payment_id}/carry-forward",
     response_model=PaymentOutcomeResponse,
     summary="Move an overpayment into the next month"
)
def carry_forward(
     payment_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     outcome = RentLedgerService.carry_forward_overpayment(db, actor_id, payment_id)
     return _outcome(outcome)


@router.get(
     "/tenants/{tenant_id}/payments",
     response_model=RentPaymentListResponse,
     summary="List a tenant's obligations"
)
def list_tenant_payments(
     tenant_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     TenancyService._get_for_landlord(db, actor_id, tenant_id)
     payments = RentLedgerService.list_payments(db, tenant_id)
     return RentPaymentListResponse(
          payments=[RentPaymentResponse.model_validate(p) for p in payments],
          total=len(payments),
     )


@router.get(
     "/tenants/{tenant_id}/balance",
     response_model=TenantBalanceResponse,
     summary="Get a tenant's balance"
)
def tenant_balance(
     tenant_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     TenancyService._get_for_landlord(db, actor_id, tenant_id)
     return RentLedgerService.calculate_tenant_balance(db, tenant_id)


@router.post(
     "/obligations/generate",
     response_model=RentPaymentListResponse,
     summary="Issue a month's obligations for all active tenants"
)
def generate_obligations(
     body: GenerateObligationsRequest,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """Only the caller's tenants are covered. Months already issued are skipped."""
     created = RentLedgerService.generate_monthly_obligations(db, body.period, landlord_id=actor_id)
     return RentPaymentListResponse(
          payments=[RentPaymentResponse.model_validate(p) for p in created],
          total=len(created),
     )


@router.post(
     "/rollover",
     response_model=RolloverResponse,
     summary="Backfill missing months and refresh statuses"
)
def rollover(
     body: RolloverRequest,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """
     Daily maintenance for the caller's portfolio: every billable month up to
     `as_of` gets an obligation, then statuses and late flags are recomputed.
     The same run is available to cron as `python -m scripts.rent_rollover`.
     """
     return RentLedgerService.roll_over(db, body.as_of, landlord_id=actor_id)


# ---------------------------------------------------------------------------
# Payment ledger verification
# ---------------------------------------------------------------------------

@router.get(
     "/ledger/verify-chain",
     response_model=LedgerVerificationResponse,
     summary="Verify full payment ledger chain"
)
def verify_ledger_chain(
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """
     Recompute hashes for all ledger entries and verify the chain.
     Returns verification result and number of entries checked.
     """
     valid, message, count = ledger_service.verify_full_chain(db)
     return LedgerVerificationResponse(verified=valid, message=message, entries_checked=count)


@router.get(
     "/payments/{payment_id}/reconcile",
     response_model=LedgerVerificationResponse,
     summary="Check an obligation against its ledger entries"
)
def reconcile_payment(
     payment_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     payment = RentLedgerService.get_payment(db, payment_id)
     RentLedgerService._check_actor(payment, actor_id)
     matches, ledger_total = ledger_service.reconcile_payment(db, payment)
     message = (
          "Ledger matches amount paid"
          if matches
          else f"Ledger total {ledger_total} differs from amount paid {payment.amount_paid}"
     )
     return LedgerVerificationResponse(verified=matches, message=message)


@router.get(
     "/ledger/entries/{ledger_id}/verify",
     response_model=LedgerVerificationResponse,
     summary="Verify one payment ledger entry"
)
def verify_ledger_entry(
     ledger_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """
     Recompute the entry's hash and check that it links to its predecessor.
     Returns verified false with a message if the record was tampered with.
     """
     valid, message = ledger_service.verify_ledger_entry(db, ledger_id)
     return LedgerVerificationResponse(verified=valid, message=message, entries_checked=1)
