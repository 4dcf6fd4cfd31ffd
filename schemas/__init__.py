from .tenancy import (
     TenancyCreate,
     TenancyEnd,
     TenancyEvict,
     LeaseRenewal,
     TenantResponse,
     TenantListResponse,
)
from .rent import (
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
from .maintenance import (
     MaintenanceCreate,
     MaintenanceAssign,
     MaintenanceSchedule,
     MaintenanceComplete,
     MaintenanceCancel,
     MaintenanceResponse,
     MaintenanceListResponse,
     MaintenanceCommentCreate,
     MaintenanceCommentResponse,
     MaintenanceCommentListResponse,
)
from .booking import BookingCreate, BookingCancel, BookingResponse, BookingListResponse
from .stats import (
     TenantStatsResponse,
     RentPaymentStatsResponse,
     MaintenanceStatsResponse,
     BookingStatsResponse,
)

__all__ = [
     "TenancyCreate",
     "TenancyEnd",
     "TenancyEvict",
     "LeaseRenewal",
     "TenantResponse",
     "TenantListResponse",
     "ObligationRequest",
     "PaymentRecordRequest",
     "LateFeeRequest",
     "WaiveRequest",
     "RentPaymentResponse",
     "PaymentOutcomeResponse",
     "RentPaymentListResponse",
     "TenantBalanceResponse",
     "LedgerVerificationResponse",
     "GenerateObligationsRequest",
     "RolloverRequest",
     "RolloverResponse",
     "MaintenanceCreate",
     "MaintenanceAssign",
     "MaintenanceSchedule",
     "MaintenanceComplete",
     "MaintenanceCancel",
     "MaintenanceResponse",
     "MaintenanceListResponse",
     "MaintenanceCommentCreate",
     "MaintenanceCommentResponse",
     "MaintenanceCommentListResponse",
     "BookingCreate",
     "BookingCancel",
     "BookingResponse",
     "BookingListResponse",
     "TenantStatsResponse",
     "RentPaymentStatsResponse",
     "MaintenanceStatsResponse",
     "BookingStatsResponse",
]
