"""
Read-only aggregate endpoints.

Served from the read session, which may point at a replica. Landlord
tenant stats pass through a per-process MonotonicStatsView so a lagging
read never replaces a newer snapshot for the same date.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_read_session
from models import Property
from schemas.stats import (
     TenantStatsResponse,
     RentPaymentStatsResponse,
     MaintenanceStatsResponse,
     BookingStatsResponse,
)
from security import get_actor_id
from services.exceptions import NotFoundError, PermissionDeniedError
from services.stats_service import (
     MonotonicStatsView,
     as_dict,
     compute_booking_stats,
     compute_maintenance_stats,
     compute_property_stats,
     compute_rent_payment_stats,
)

router = APIRouter(prefix="/api/stats", tags=["stats"])

stats_view = MonotonicStatsView()


@router.get("/tenants", response_model=TenantStatsResponse, summary="Tenancy and rent stats")
def tenant_stats(
     as_of: Optional[date] = Query(None, description="Evaluate lateness as of this date (default today)"),
     db: Session = Depends(get_read_session),
     actor_id: int = Depends(get_actor_id),
):
     return as_dict(stats_view.compute(db, actor_id, as_of))


@router.get("/rent-payments", response_model=RentPaymentStatsResponse, summary="Rent collected and owed")
def rent_payment_stats(
     as_of: Optional[date] = Query(None, description="Evaluate as of this date (default today)"),
     db: Session = Depends(get_read_session),
     actor_id: int = Depends(get_actor_id),
):
     return as_dict(compute_rent_payment_stats(db, actor_id, as_of))


@router.get("/properties/{property_id}", response_model=TenantStatsResponse, summary="Stats for one property")
def property_stats(
     property_id: int,
     as_of: Optional[date] = Query(None),
     db: Session = Depends(get_read_session),
     actor_id: int = Depends(get_actor_id),
):
     prop = db.get(Property, property_id)
     if prop is None:
          raise NotFoundError(f"Property with ID {property_id} not found", entity="property", entity_id=property_id)
     if prop.landlord_id != actor_id:
          raise PermissionDeniedError(
               f"User {actor_id} does not own property {property_id}",
               entity="property",
               entity_id=property_id,
          )
     return as_dict(compute_property_stats(db, property_id, as_of))


@router.get("/maintenance", response_model=MaintenanceStatsResponse, summary="Maintenance stats")
def maintenance_stats(
     db: Session = Depends(get_read_session),
     actor_id: int = Depends(get_actor_id),
):
     return as_dict(compute_maintenance_stats(db, actor_id))


@router.get("/bookings", response_model=BookingStatsResponse, summary="Booking stats for a host")
def booking_stats(
     db: Session = Depends(get_read_session),
     actor_id: int = Depends(get_actor_id),
):
     return as_dict(compute_booking_stats(db, actor_id))
