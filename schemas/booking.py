"""
Pydantic schemas for booking API.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from models import BookingStatus


class BookingCreate(BaseModel):
     property_id: int = Field(..., gt=0)
     check_in: date
     check_out: date
     monthly_rent: Decimal = Field(..., max_digits=12, decimal_places=2)
     special_requests: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "property_id": 1,
                    "check_in": "2025-07-01",
                    "check_out": "2025-10-01",
                    "monthly_rent": 400000
               }
          }
     )


class BookingCancel(BaseModel):
     reason: str = Field(..., min_length=1)


class BookingResponse(BaseModel):
     id: int
     property_id: int
     guest_id: int
     host_id: int
     check_in: date
     check_out: date
     total_months: int
     monthly_rent: Decimal
     commission_rate: Decimal
     subtotal: Decimal
     service_fee: Decimal
     total_amount: Decimal
     status: BookingStatus
     special_requests: Optional[str] = None
     confirmed_at: Optional[datetime] = None
     completed_at: Optional[datetime] = None
     cancellation_reason: Optional[str] = None
     cancellation_date: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class BookingListResponse(BaseModel):
     bookings: List[BookingResponse]
     total: int
