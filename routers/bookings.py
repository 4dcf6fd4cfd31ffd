"""
Booking API routes.

Guests request stays; hosts confirm, complete or decline them. Prices are
computed server-side from the stay length and the platform commission.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from models import BookingStatus
from schemas.booking import BookingCreate, BookingCancel, BookingResponse, BookingListResponse
from security import get_actor_id
from services.booking_service import BookingService
from services.exceptions import PermissionDeniedError

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post(
     "",
     response_model=BookingResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Request a booking"
)
def create_booking(
     body: BookingCreate,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """
     Request a stay as the authenticated guest.

     - **409**: the dates overlap an active tenancy or a confirmed booking
     - **422**: check-out not after check-in, or the host booking their own property
     """
     booking = BookingService.create_booking(
          db,
          actor_id,
          body.property_id,
          body.check_in,
          body.check_out,
          body.monthly_rent,
          special_requests=body.special_requests,
     )
     return BookingResponse.model_validate(booking)


@router.get(
     "",
     response_model=BookingListResponse,
     summary="List bookings"
)
def list_bookings(
     role: str = Query("host", pattern="^(host|guest)$", description="List as host or as guest"),
     status: Optional[BookingStatus] = Query(None, description="Filter by status"),
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     if role == "guest":
          bookings = BookingService.list_bookings(db, guest_id=actor_id, status=status)
     else:
          bookings = BookingService.list_bookings(db, host_id=actor_id, status=status)
     return BookingListResponse(
          bookings=[BookingResponse.model_validate(b) for b in bookings],
          total=len(bookings),
     )


@router.get("/{booking_id}", response_model=BookingResponse, summary="Get a booking")
def get_booking(
     booking_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     booking = BookingService.get_booking(db, booking_id)
     if actor_id not in (booking.guest_id, booking.host_id):
          raise PermissionDeniedError(
               f"User {actor_id} is not a party to booking {booking_id}",
               entity="booking",
               entity_id=booking_id,
          )
     return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/confirm", response_model=BookingResponse, summary="Confirm a booking")
def confirm_booking(
     booking_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     return BookingResponse.model_validate(BookingService.confirm_booking(db, actor_id, booking_id))


@router.post("/{booking_id}/cancel", response_model=BookingResponse, summary="Cancel a booking")
def cancel_booking(
     booking_id: int,
     body: BookingCancel,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     return BookingResponse.model_validate(BookingService.cancel_booking(db, actor_id, booking_id, body.reason))


@router.post("/{booking_id}/complete", response_model=BookingResponse, summary="Complete a booking")
def complete_booking(
     booking_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     return BookingResponse.model_validate(BookingService.complete_booking(db, actor_id, booking_id))
