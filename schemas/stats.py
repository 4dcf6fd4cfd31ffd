"""
Pydantic schemas for read-only aggregate endpoints.
"""
from decimal import Decimal
from typing import Dict
from pydantic import BaseModel, ConfigDict


class TenantStatsResponse(BaseModel):
     total_tenants: int
     active_tenants: int
     total_monthly_rent: Decimal
     on_time_payment_rate: Decimal
     late_payments_count: int
     overdue_count: int
     past_due_periods: int
     overpaid_count: int

     model_config = ConfigDict(from_attributes=True)


class RentPaymentStatsResponse(BaseModel):
     """Amounts collected and owed across a landlord's rent roll."""
     total_collected: Decimal
     total_pending: Decimal
     total_overdue: Decimal
     total_late_fees: Decimal
     current_month_expected: Decimal
     current_month_collected: Decimal
     counts: Dict[str, int]

     model_config = ConfigDict(from_attributes=True)


class MaintenanceStatsResponse(BaseModel):
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

     model_config = ConfigDict(from_attributes=True)


class BookingStatsResponse(BaseModel):
     total_bookings: int
     pending_bookings: int
     confirmed_bookings: int
     cancelled_bookings: int
     cancelled_after_confirmation: int
     completed_bookings: int
     total_revenue: Decimal
     total_service_fees: Decimal
     average_booking_value: Decimal

     model_config = ConfigDict(from_attributes=True)
