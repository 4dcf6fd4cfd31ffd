"""
Pydantic schemas for tenancy lifecycle API request/response validation.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, model_validator

from models import TenantStatus


class TenancyCreate(BaseModel):
     """Schema for letting a unit to a registered user or an independent tenant."""
     property_id: int = Field(..., gt=0, description="Unit being let")
     user_id: Optional[int] = Field(None, gt=0, description="Registered occupant (omit for independent tenants)")
     tenant_name: Optional[str] = Field(None, max_length=200)
     tenant_email: Optional[str] = Field(None, max_length=255)
     tenant_phone: Optional[str] = Field(None, max_length=50)
     emergency_contact_name: Optional[str] = Field(None, max_length=200)
     emergency_contact_phone: Optional[str] = Field(None, max_length=50)
     emergency_contact_relationship: Optional[str] = Field(None, max_length=100)

     lease_start_date: date
     lease_end_date: date
     monthly_rent: Decimal = Field(..., max_digits=12, decimal_places=2)
     security_deposit: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
     rent_due_day: Optional[int] = Field(None, ge=1, le=28)
     grace_period_days: Optional[int] = Field(None, ge=0)
     late_fee_amount: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)

     move_in_date: Optional[date] = None
     move_in_condition_notes: Optional[str] = None
     move_in_photos: List[str] = Field(default_factory=list)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "property_id": 1,
                    "tenant_name": "Amina Juma",
                    "tenant_phone": "+255700000000",
                    "lease_start_date": "2025-01-01",
                    "lease_end_date": "2025-12-31",
                    "monthly_rent": 500000,
                    "security_deposit": 1000000,
                    "rent_due_day": 1,
                    "late_fee_amount": 25000
               }
          }
     )

     @model_validator(mode="after")
     def _occupant_present(self):
          if self.user_id is None and not self.tenant_name:
               raise ValueError("Provide user_id or tenant_name")
          return self


class TenancyEnd(BaseModel):
     move_out_date: date
     move_out_condition_notes: Optional[str] = None
     move_out_photos: List[str] = Field(default_factory=list)
     security_deposit_returned: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)


class TenancyEvict(BaseModel):
     reason: str = Field(..., min_length=1)
     move_out_date: Optional[date] = None


class LeaseRenewal(BaseModel):
     new_end_date: date
     new_monthly_rent: Optional[Decimal] = Field(None, max_digits=12, decimal_places=2)


class TenantResponse(BaseModel):
     """Schema for tenant response."""
     id: int
     property_id: int
     landlord_id: int
     user_id: Optional[int] = None
     tenant_name: Optional[str] = None
     tenant_email: Optional[str] = None
     tenant_phone: Optional[str] = None
     lease_start_date: date
     lease_end_date: date
     monthly_rent: Decimal
     security_deposit: Decimal
     rent_due_day: int
     grace_period_days: int
     late_fee_amount: Decimal
     status: TenantStatus
     is_late_on_rent: bool
     move_in_date: Optional[date] = None
     move_out_date: Optional[date] = None
     move_out_condition_notes: Optional[str] = None
     security_deposit_returned: Optional[Decimal] = None
     eviction_reason: Optional[str] = None
     ended_at: Optional[datetime] = None

     # Resolved from the identity directory
     display_name: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class TenantListResponse(BaseModel):
     tenants: List[TenantResponse]
     total: int
