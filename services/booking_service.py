"""
Booking Service - fixed-term reservations of a unit.

pending -> {confirmed, cancelled}, confirmed -> {completed, cancelled}.
Only confirmed bookings occupy the unit, so confirmation re-runs the
overlap check under the unit lock.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

import config
from models import Booking, BookingStatus
from utils.money import percent_of, to_money
from utils.periods import months_between, utcnow
from .exceptions import NotFoundError, PermissionDeniedError, ValidationError
from .notifications import notify
from .occupancy import assert_unit_available, lock_property
from .state_machines import check_booking_transition

logger = logging.getLogger(__name__)


def quote_booking(
     check_in: date,
     check_out: date,
     monthly_rent,
     commission_rate: Optional[Decimal] = None,
) -> dict:
     """
     Price a stay: subtotal = rent x months, service fee = commission on the subtotal.

     Raises:
          ValidationError: check_out not after check_in or rent not positive
     """
     if check_out <= check_in:
          raise ValidationError(f"Check-out {check_out} must be after check-in {check_in}", entity="booking")
     try:
          rent = to_money(monthly_rent)
     except ValueError as exc:
          raise ValidationError(str(exc), entity="booking") from None
     if rent <= 0:
          raise ValidationError(f"Monthly rent must be greater than zero, got {rent}", entity="booking")

     rate = config.PLATFORM_COMMISSION_RATE if commission_rate is None else Decimal(str(commission_rate))
     months = months_between(check_in, check_out)
     subtotal = to_money(rent * months)
     service_fee = percent_of(subtotal, rate)
     return {
          "total_months": months,
          "monthly_rent": rent,
          "commission_rate": rate,
          "subtotal": subtotal,
          "service_fee": service_fee,
          "total_amount": subtotal + service_fee,
     }


class BookingService:
     """Service class for booking status coordination."""

     @staticmethod
     def get_booking(db: Session, booking_id: int) -> Booking:
          booking = db.get(Booking, booking_id)
          if booking is None:
               raise NotFoundError(f"Booking with ID {booking_id} not found", entity="booking", entity_id=booking_id)
          return booking

     @staticmethod
     def list_bookings(
          db: Session,
          host_id: Optional[int] = None,
          guest_id: Optional[int] = None,
          status: Optional[BookingStatus] = None,
     ) -> List[Booking]:
          query = db.query(Booking)
          if host_id is not None:
               query = query.filter(Booking.host_id == host_id)
          if guest_id is not None:
               query = query.filter(Booking.guest_id == guest_id)
          if status is not None:
               query = query.filter(Booking.status == status)
          return query.order_by(Booking.check_in.desc()).all()

     @staticmethod
     def _for_host(db: Session, actor_id: int, booking_id: int) -> Booking:
          booking = BookingService.get_booking(db, booking_id)
          if booking.host_id != actor_id:
               raise PermissionDeniedError(
                    f"User {actor_id} is not the host of booking {booking_id}",
                    entity="booking",
                    entity_id=booking_id,
               )
          return booking

     @staticmethod
     def create_booking(
          db: Session,
          actor_id: int,
          property_id: int,
          check_in: date,
          check_out: date,
          monthly_rent,
          special_requests: Optional[str] = None,
     ) -> Booking:
          """
          Request a stay as the acting guest.

          Raises:
               ValidationError: Bad dates or rent, or the host booking their own unit
               NotFoundError: Property missing
               ConflictError: Overlaps an active tenancy or confirmed booking
          """
          quote = quote_booking(check_in, check_out, monthly_rent)

          prop = lock_property(db, property_id)
          if prop.landlord_id == actor_id:
               raise ValidationError("Hosts cannot book their own property", entity="booking")
          assert_unit_available(db, property_id, check_in, check_out)

          booking = Booking(
               property_id=property_id,
               guest_id=actor_id,
               host_id=prop.landlord_id,
               check_in=check_in,
               check_out=check_out,
               special_requests=special_requests,
               status=BookingStatus.PENDING,
               **quote,
          )
          db.add(booking)
          db.flush()

          notify(db, "booking.requested", booking.host_id, booking_id=booking.id, property_id=property_id)
          logger.info("Created booking %s on property %s", booking.id, property_id)
          return booking

     @staticmethod
     def confirm_booking(db: Session, actor_id: int, booking_id: int) -> Booking:
          booking = BookingService._for_host(db, actor_id, booking_id)
          check_booking_transition(booking.id, booking.status, BookingStatus.CONFIRMED)

          lock_property(db, booking.property_id)
          assert_unit_available(
               db, booking.property_id, booking.check_in, booking.check_out, exclude_booking_id=booking.id
          )

          booking.status = BookingStatus.CONFIRMED
          booking.confirmed_at = utcnow()
          db.flush()

          notify(db, "booking.confirmed", booking.guest_id, booking_id=booking.id)
          logger.info("Confirmed booking %s", booking.id)
          return booking

     @staticmethod
     def cancel_booking(db: Session, actor_id: int, booking_id: int, reason: str) -> Booking:
          """
          Cancel a pending or confirmed booking (guest or host).

          Cancellations after confirmation keep confirmed_at, which is how
          reporting tells them apart from declined requests.
          """
          booking = BookingService.get_booking(db, booking_id)
          if actor_id not in (booking.guest_id, booking.host_id):
               raise PermissionDeniedError(
                    f"User {actor_id} is not a party to booking {booking_id}",
                    entity="booking",
                    entity_id=booking_id,
               )
          check_booking_transition(booking.id, booking.status, BookingStatus.CANCELLED)
          if not reason or not reason.strip():
               raise ValidationError("A cancellation reason is required", entity="booking", entity_id=booking.id)

          booking.status = BookingStatus.CANCELLED
          booking.cancellation_reason = reason
          booking.cancellation_date = utcnow()
          db.flush()

          other_party = booking.host_id if actor_id == booking.guest_id else booking.guest_id
          notify(
               db, "booking.cancelled", other_party,
               booking_id=booking.id,
               after_confirmation=booking.confirmed_at is not None,
          )
          logger.info("Cancelled booking %s (after confirmation: %s)", booking.id, booking.confirmed_at is not None)
          return booking

     @staticmethod
     def complete_booking(db: Session, actor_id: int, booking_id: int) -> Booking:
          booking = BookingService._for_host(db, actor_id, booking_id)
          check_booking_transition(booking.id, booking.status, BookingStatus.COMPLETED)

          booking.status = BookingStatus.COMPLETED
          booking.completed_at = utcnow()
          db.flush()

          notify(db, "booking.completed", booking.guest_id, booking_id=booking.id)
          logger.info("Completed booking %s", booking.id)
          return booking
