from .exceptions import (
     LifecycleError,
     ValidationError,
     ConflictError,
     InvalidStateError,
     NotFoundError,
     PermissionDeniedError,
)
from .tenancy_service import TenancyService, Occupant, LeaseTerms
from .rent_ledger_service import (
     RentLedgerService,
     PaymentOutcome,
     derive_payment_status,
     derive_is_late,
     derive_lateness,
     evaluate_periods,
     PeriodStanding,
)
from .maintenance_service import MaintenanceService
from .booking_service import BookingService, quote_booking
from .ledger_service import (
     compute_transaction_hash,
     verify_ledger_entry,
     verify_full_chain,
     reconcile_payment,
     GENESIS_HASH,
)

__all__ = [
     "LifecycleError",
     "ValidationError",
     "ConflictError",
     "InvalidStateError",
     "NotFoundError",
     "PermissionDeniedError",
     "TenancyService",
     "Occupant",
     "LeaseTerms",
     "RentLedgerService",
     "PaymentOutcome",
     "derive_payment_status",
     "derive_is_late",
     "derive_lateness",
     "evaluate_periods",
     "PeriodStanding",
     "MaintenanceService",
     "BookingService",
     "quote_booking",
     "compute_transaction_hash",
     "verify_ledger_entry",
     "verify_full_chain",
     "reconcile_payment",
     "GENESIS_HASH",
]
