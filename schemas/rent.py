"""
Pydantic schemas for rent ledger API request/response validation.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Optional, List
from pydantic import BaseModel, Field, ConfigDict

from models import PaymentMethod, RentPaymentStatus


class ObligationRequest(BaseModel):
     tenant_id: int = Field(..., gt=0)
     period: str = Field(..., description="Billing month, YYYY-MM or YYYY-MM-01")


class PaymentRecordRequest(BaseModel):
     """Request body for recording an externally confirmed payment."""
     payment_id: Optional[int] = Field(None, gt=0, description="Obligation to pay")
     tenant_id: Optional[int] = Field(None, gt=0, description="Tenant, used with period when payment_id is omitted")
     period: Optional[str] = Field(None, description="Billing month, YYYY-MM or YYYY-MM-01")
     amount: Decimal = Field(..., max_digits=12, decimal_places=2, description="Amount received")
     payment_method: PaymentMethod
     transaction_id: Optional[str] = Field(None, max_length=255, description="External reference (e.g. M-Pesa code)")
     payment_date: Optional[date] = None
     notes: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "tenant_id": 1,
                    "period": "2025-02",
                    "amount": 500000,
                    "payment_method": "mpesa",
                    "transaction_id": "QK81XYZ",
                    "payment_date": "2025-02-03"
               }
          }
     )


class LateFeeRequest(BaseModel):
     fee_amount: Optional[Decimal] = Field(None, max_digits=12, decimal_places=2, description="Defaults to the tenant's late fee")


class WaiveRequest(BaseModel):
     reason: str = Field(..., min_length=1)


class GenerateObligationsRequest(BaseModel):
     period: str = Field(..., description="Billing month, YYYY-MM or YYYY-MM-01")


class RolloverRequest(BaseModel):
     as_of: Optional[date] = Field(None, description="Run as of this date (default today)")


class RentPaymentResponse(BaseModel):
     """Schema for rent obligation response."""
     id: int
     tenant_id: int
     property_id: int
     payment_month: date
     amount_due: Decimal
     amount_paid: Decimal
     late_fee: Decimal
     due_date: date
     status: RentPaymentStatus
     is_late: bool
     payment_method: Optional[PaymentMethod] = None
     transaction_id: Optional[str] = None
     payment_date: Optional[date] = None
     waived_at: Optional[datetime] = None
     notes: Optional[str] = None
     outstanding_amount: Decimal
     overpayment: Decimal

     model_config = ConfigDict(from_attributes=True)


class PaymentOutcomeResponse(BaseModel):
     """Updated obligation plus the tenant-level late flag."""
     payment: RentPaymentResponse
     tenant_is_late: bool
     overpayment: Decimal
     is_overpaid: bool

     model_config = ConfigDict(from_attributes=True)


class RentPaymentListResponse(BaseModel):
     payments: List[RentPaymentResponse]
     total: int


class TenantBalanceResponse(BaseModel):
     tenant_id: int
     total_owed: Decimal
     total_paid: Decimal
     late_fees: Decimal
     overpaid_amount: Decimal
     is_late_on_rent: bool
     total_periods: int
     counts: Dict[str, int]


class LedgerVerificationResponse(BaseModel):
     verified: bool
     message: str
     entries_checked: Optional[int] = None


class RolloverResponse(BaseModel):
     """Result of backfilling missing months and sweeping statuses."""
     as_of: date
     obligations_created: int
     statuses_updated: int
