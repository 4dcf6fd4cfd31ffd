import enum
from sqlalchemy import (
     Column, Integer, Numeric, Date, Text, DateTime,
     ForeignKey, CheckConstraint, func,
)
from sqlalchemy.orm import relationship
from .base import Base, enum_type


class BookingStatus(str, enum.Enum):
     PENDING = "pending"
     CONFIRMED = "confirmed"
     CANCELLED = "cancelled"
     COMPLETED = "completed"


class Booking(Base):
     """
     Booking model - a fixed-term reservation of a unit by a guest.

     total_amount = monthly_rent * total_months + service_fee, where the
     service fee is the platform commission captured at booking time.
     """
     __tablename__ = "bookings"
     __table_args__ = (
          CheckConstraint("check_out > check_in", name="ck_bookings_dates"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
     guest_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     host_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

     # Stay
     check_in = Column(Date, nullable=False)
     check_out = Column(Date, nullable=False)
     total_months = Column(Integer, nullable=False)
     special_requests = Column(Text, nullable=True)

     # Pricing
     monthly_rent = Column(Numeric(12, 2), nullable=False)
     commission_rate = Column(Numeric(5, 2), nullable=False)
     subtotal = Column(Numeric(12, 2), nullable=False)
     service_fee = Column(Numeric(12, 2), nullable=False)
     total_amount = Column(Numeric(12, 2), nullable=False)

     # Status
     status = Column(
          enum_type(BookingStatus, "booking_status"),
          default=BookingStatus.PENDING,
          nullable=False,
          index=True
     )
     confirmed_at = Column(DateTime, nullable=True)
     completed_at = Column(DateTime, nullable=True)
     cancellation_reason = Column(Text, nullable=True)
     cancellation_date = Column(DateTime, nullable=True)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     def __repr__(self):
          return f"<Booking(id={self.id}, property_id={self.property_id}, status='{self.status.value}')>"

     @property
     def cancelled_after_confirmation(self) -> bool:
          return self.status == BookingStatus.CANCELLED and self.confirmed_at is not None

     # Relationships
     property = relationship("Property", back_populates="bookings")
