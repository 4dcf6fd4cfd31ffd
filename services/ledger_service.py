"""
Payment Ledger Service - hash-chained record of payment events.

When a payment is recorded against a rent obligation:
1. Compute SHA-256 hash from rent_payment_id + tenant_id + amount + paid_on + timestamp
2. Store record with reference to the previous hash in the tenant's chain
3. Ledger records are append-only; no update/delete

Each tenant has its own chain, so payments for unrelated tenants never
contend for the same tail.

Verification: recompute hash and compare with stored hash; optionally verify
the chains; reconcile an obligation's amount_paid against its entries.
"""
import hashlib
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Optional, Tuple

from sqlalchemy import desc, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import PaymentLedger, RentPayment
from utils.money import to_money
from utils.periods import utcnow
from .exceptions import ConflictError

logger = logging.getLogger(__name__)


# Genesis block: no previous record
GENESIS_HASH = "0"


def _normalize_amount(amount: Decimal) -> str:
     """Normalize amount to canonical string for hashing (2 decimal places)."""
     return str(to_money(amount))


def _normalize_timestamp(ts: datetime) -> str:
     """Normalize timestamp to ISO format for deterministic hashing."""
     return ts.isoformat()


def compute_transaction_hash(
     rent_payment_id: int,
     tenant_id: int,
     amount: Decimal,
     paid_on: date,
     timestamp: datetime
) -> str:
     """
     Compute SHA-256 hash for a payment record.

     Input string: rent_payment_id|tenant_id|amount|paid_on|timestamp (canonical format).
     Returns 64-char hex string.
     """
     payload = "|".join([
          str(rent_payment_id),
          str(tenant_id),
          _normalize_amount(amount),
          paid_on.isoformat(),
          _normalize_timestamp(timestamp)
     ])
     return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def get_previous_hash(db: Session, tenant_id: int) -> str:
     """Get the transaction_hash of the tenant's most recent entry, or GENESIS_HASH if none."""
     last = (
          db.query(PaymentLedger)
          .filter(PaymentLedger.tenant_id == tenant_id)
          .order_by(desc(PaymentLedger.id))
          .limit(1)
          .first()
     )
     if last is None:
          return GENESIS_HASH
     return last.transaction_hash


def append_entry(
     db: Session,
     payment: RentPayment,
     amount: Decimal,
     method: str,
     paid_on: date,
     transaction_ref: Optional[str] = None,
     timestamp: Optional[datetime] = None
) -> PaymentLedger:
     """
     Append an immutable record for one payment event.

     - Computes transaction_hash from the payment identity, amount and dates
     - Sets previous_hash to the tenant's last transaction_hash (or "0")
     - Does NOT update or delete existing records (immutability)

     Raises:
          ConflictError: If another transaction extended the chain first. The
               session must be rolled back before it is used again.
     """
     if timestamp is None:
          timestamp = utcnow()

     payment_id = payment.id
     tenant_id = payment.tenant_id
     transaction_hash = compute_transaction_hash(payment_id, tenant_id, amount, paid_on, timestamp)
     previous_hash = get_previous_hash(db, tenant_id)

     entry = PaymentLedger(
          rent_payment_id=payment_id,
          tenant_id=tenant_id,
          amount=to_money(amount),
          payment_method=method,
          transaction_ref=transaction_ref,
          paid_on=paid_on,
          transaction_hash=transaction_hash,
          previous_hash=previous_hash,
          timestamp=timestamp
     )
     db.add(entry)
     try:
          db.flush()
     except IntegrityError as exc:
          logger.warning("Ledger chain of tenant %s was extended concurrently", tenant_id)
          raise ConflictError(
               "Payment ledger was extended concurrently; retry the payment",
               entity="rent_payment",
               entity_id=payment_id,
               attempted="append_ledger_entry",
          ) from exc
     return entry


def _recompute(entry: PaymentLedger) -> str:
     return compute_transaction_hash(
          entry.rent_payment_id,
          entry.tenant_id,
          entry.amount,
          entry.paid_on,
          entry.timestamp
     )


def verify_ledger_entry(db: Session, ledger_id: int) -> Tuple[bool, str]:
     """
     Verify a ledger entry by recomputing the hash and comparing.

     Returns:
          (success: bool, message: str)
          - (True, "Verification passed") if hash matches
          - (False, reason) if hash mismatch, missing record, or chain broken
     """
     entry = db.query(PaymentLedger).filter(PaymentLedger.id == ledger_id).first()
     if entry is None:
          return False, "Ledger entry not found"

     computed = _recompute(entry)
     if computed != entry.transaction_hash:
          return False, f"Hash mismatch: stored={entry.transaction_hash[:16]}..., computed={computed[:16]}..."

     if entry.previous_hash != GENESIS_HASH:
          prev_entry = (
               db.query(PaymentLedger)
               .filter(PaymentLedger.tenant_id == entry.tenant_id, PaymentLedger.id < entry.id)
               .order_by(desc(PaymentLedger.id))
               .limit(1)
               .first()
          )
          if prev_entry is None:
               return False, "Previous chain link not found"
          if prev_entry.transaction_hash != entry.previous_hash:
               return False, "Chain broken: previous_hash does not match previous record"

     return True, "Verification passed"


def verify_full_chain(db: Session) -> Tuple[bool, str, int]:
     """
     Verify every tenant's chain from first to last entry.

     Returns:
          (all_valid: bool, message: str, entries_checked: int)
     """
     entries = db.query(PaymentLedger).order_by(PaymentLedger.id).all()
     if not entries:
          return True, "Chain is empty (no entries)", 0

     tails: Dict[int, str] = {}
     checked = 0

     for entry in entries:
          if entry.previous_hash != tails.get(entry.tenant_id, GENESIS_HASH):
               return False, f"Chain broken at id={entry.id}: previous_hash mismatch", checked
          if _recompute(entry) != entry.transaction_hash:
               return False, f"Hash mismatch at ledger id={entry.id}", checked
          tails[entry.tenant_id] = entry.transaction_hash
          checked += 1

     return True, "Full chain verification passed", checked


def reconcile_payment(db: Session, payment: RentPayment) -> Tuple[bool, Decimal]:
     """
     Check that the obligation's amount_paid equals the sum of its ledger entries.

     Returns:
          (matches: bool, ledger_total: Decimal)
     """
     total = (
          db.query(func.coalesce(func.sum(PaymentLedger.amount), 0))
          .filter(PaymentLedger.rent_payment_id == payment.id)
          .scalar()
     )
     ledger_total = to_money(total)
     return ledger_total == to_money(payment.amount_paid), ledger_total
