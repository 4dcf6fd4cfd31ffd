"""
Unit occupancy guard shared by tenancies and bookings.

A unit is occupied by any ACTIVE tenancy or CONFIRMED booking whose
half-open date range intersects the requested one. Callers must hold the
property row lock (lock_property) for the rest of the transaction so the
check and the insert that follows cannot interleave with another writer.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from models import Booking, BookingStatus, Property, Tenant, TenantStatus
from .exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def lock_property(db: Session, property_id: int) -> Property:
     """
     Load a property with SELECT ... FOR UPDATE.

     Raises:
          NotFoundError: If the property does not exist.
     """
     prop = (
          db.query(Property)
          .filter(Property.id == property_id)
          .with_for_update()
          .populate_existing()
          .first()
     )
     if prop is None:
          raise NotFoundError(
               f"Property with ID {property_id} not found",
               entity="property",
               entity_id=property_id,
          )
     return prop


def find_conflicts(
     db: Session,
     property_id: int,
     start: date,
     end: date,
     exclude_tenant_id: Optional[int] = None,
     exclude_booking_id: Optional[int] = None,
) -> List[str]:
     """Describe every occupancy overlapping [start, end) on the unit."""
     tenants = db.query(Tenant).filter(
          Tenant.property_id == property_id,
          Tenant.status == TenantStatus.ACTIVE,
          Tenant.lease_start_date < end,
          Tenant.lease_end_date > start,
     )
     if exclude_tenant_id is not None:
          tenants = tenants.filter(Tenant.id != exclude_tenant_id)

     bookings = db.query(Booking).filter(
          Booking.property_id == property_id,
          Booking.status == BookingStatus.CONFIRMED,
          Booking.check_in < end,
          Booking.check_out > start,
     )
     if exclude_booking_id is not None:
          bookings = bookings.filter(Booking.id != exclude_booking_id)

     conflicts = [
          f"tenant {t.id} ({t.lease_start_date} to {t.lease_end_date})" for t in tenants.all()
     ]
     conflicts += [
          f"booking {b.id} ({b.check_in} to {b.check_out})" for b in bookings.all()
     ]
     return conflicts


def assert_unit_available(
     db: Session,
     property_id: int,
     start: date,
     end: date,
     exclude_tenant_id: Optional[int] = None,
     exclude_booking_id: Optional[int] = None,
) -> None:
     """
     Raise ConflictError when the unit is already occupied for any part of [start, end).
     """
     if end <= start:
          raise ValidationError(
               f"End date {end} must be after start date {start}",
               entity="property",
               entity_id=property_id,
          )
     conflicts = find_conflicts(db, property_id, start, end, exclude_tenant_id, exclude_booking_id)
     if conflicts:
          logger.info("Rejected overlapping occupancy on property %s: %s", property_id, conflicts)
          raise ConflictError(
               f"Property {property_id} is already occupied between {start} and {end}: "
               + ", ".join(conflicts),
               entity="property",
               entity_id=property_id,
          )
