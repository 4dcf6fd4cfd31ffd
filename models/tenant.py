import enum
from sqlalchemy import (
     Column, Integer, String, Numeric, Date, Boolean, Text, DateTime, JSON,
     ForeignKey, CheckConstraint, func,
)
from sqlalchemy.orm import relationship
from .base import Base, enum_type


class TenantStatus(str, enum.Enum):
     """Tenancy status. Only ACTIVE is non-terminal."""
     ACTIVE = "active"
     ENDED = "ended"
     EVICTED = "evicted"


class Tenant(Base):
     """
     Tenant model - one occupancy of a unit under a lease.

     The occupant is either a registered user (user_id) or an independent
     tenant without a platform account, described by tenant_name and
     optional contact details. Rows are never deleted; the status marks
     closure and the record stays for history.
     """
     __tablename__ = "tenants"
     __table_args__ = (
          CheckConstraint("lease_end_date > lease_start_date", name="ck_tenants_lease_dates"),
          CheckConstraint("monthly_rent > 0", name="ck_tenants_monthly_rent_positive"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
     landlord_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

     # Occupant
     user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
     tenant_name = Column(String(200), nullable=True)
     tenant_email = Column(String(255), nullable=True)
     tenant_phone = Column(String(50), nullable=True)

     # Emergency contact
     emergency_contact_name = Column(String(200), nullable=True)
     emergency_contact_phone = Column(String(50), nullable=True)
     emergency_contact_relationship = Column(String(100), nullable=True)

     # Lease terms
     lease_start_date = Column(Date, nullable=False)
     lease_end_date = Column(Date, nullable=False)
     monthly_rent = Column(Numeric(12, 2), nullable=False)
     security_deposit = Column(Numeric(12, 2), nullable=False, default=0)
     rent_due_day = Column(Integer, nullable=False, default=1)
     grace_period_days = Column(Integer, nullable=False, default=0)
     late_fee_amount = Column(Numeric(12, 2), nullable=False, default=0)

     # Status
     status = Column(
          enum_type(TenantStatus, "tenant_status"),
          default=TenantStatus.ACTIVE,
          nullable=False,
          index=True
     )
     is_late_on_rent = Column(Boolean, default=False, nullable=False)  # cache of derive_lateness()

     # Move-in / move-out
     move_in_date = Column(Date, nullable=True)
     move_in_condition_notes = Column(Text, nullable=True)
     move_in_photos = Column(JSON, nullable=False, default=list)
     move_out_date = Column(Date, nullable=True)
     move_out_condition_notes = Column(Text, nullable=True)
     move_out_photos = Column(JSON, nullable=False, default=list)
     security_deposit_returned = Column(Numeric(12, 2), nullable=True)
     eviction_reason = Column(Text, nullable=True)
     ended_at = Column(DateTime, nullable=True)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     def __repr__(self):
          return f"<Tenant(id={self.id}, property_id={self.property_id}, status='{self.status.value}')>"

     @property
     def is_active(self) -> bool:
          return self.status == TenantStatus.ACTIVE

     @property
     def is_independent(self) -> bool:
          """True for occupants without a platform account."""
          return self.user_id is None

     # Relationships
     property = relationship("Property", back_populates="tenants")
     user = relationship("User", foreign_keys=[user_id])
     landlord = relationship("User", foreign_keys=[landlord_id])
     payments = relationship(
          "RentPayment",
          back_populates="tenant",
          order_by="RentPayment.payment_month",
     )
