from .base import Base
from .user import User
from .property import Property
from .tenant import Tenant, TenantStatus
from .rent_payment import RentPayment, RentPaymentStatus, PaymentMethod
from .payment_ledger import PaymentLedger
from .maintenance_request import (
     MaintenanceRequest,
     MaintenanceStatus,
     MaintenancePriority,
     MaintenanceCategory,
)
from .maintenance_comment import MaintenanceComment
from .booking import Booking, BookingStatus
from .audit_log import AuditLog

__all__ = [
     "Base",
     "User",
     "Property",
     "Tenant",
     "TenantStatus",
     "RentPayment",
     "RentPaymentStatus",
     "PaymentMethod",
     "PaymentLedger",
     "MaintenanceRequest",
     "MaintenanceStatus",
     "MaintenancePriority",
     "MaintenanceCategory",
     "MaintenanceComment",
     "Booking",
     "BookingStatus",
     "AuditLog",
]
