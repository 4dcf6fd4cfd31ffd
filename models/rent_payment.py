import enum
from decimal import Decimal
from sqlalchemy import (
     Column, Integer, String, Numeric, Date, Boolean, Text, DateTime,
     ForeignKey, UniqueConstraint, func,
)
from sqlalchemy.orm import relationship
from .base import Base, enum_type


class RentPaymentStatus(str, enum.Enum):
     """Obligation status, always derived from amounts and dates."""
     PENDING = "pending"
     PARTIAL = "partial"
     PAID = "paid"
     LATE = "late"
     WAIVED = "waived"


class PaymentMethod(str, enum.Enum):
     MPESA = "mpesa"
     BANK_TRANSFER = "bank_transfer"
     CASH = "cash"
     CARD = "card"
     CREDIT = "credit"  # excess carried forward from another period


class RentPayment(Base):
     """
     RentPayment model - the rent obligation of one tenant for one month.

     (tenant_id, payment_month) is the natural key. amount_paid accumulates
     across partial payments; every update is guarded by the version column
     so concurrent payments cannot overwrite each other.
     """
     __tablename__ = "rent_payments"
     __table_args__ = (
          UniqueConstraint("tenant_id", "payment_month", name="uq_rent_payments_tenant_month"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
     landlord_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

     # Period and amounts
     payment_month = Column(Date, nullable=False, index=True)  # first day of the month
     amount_due = Column(Numeric(12, 2), nullable=False)
     amount_paid = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     late_fee = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     due_date = Column(Date, nullable=False, index=True)

     # Latest payment details
     payment_method = Column(enum_type(PaymentMethod, "payment_method"), nullable=True)
     transaction_id = Column(String(255), nullable=True)
     payment_date = Column(Date, nullable=True)
     settled_on = Column(Date, nullable=True)  # date amount_paid first reached amount_due

     # Status
     status = Column(
          enum_type(RentPaymentStatus, "rent_payment_status"),
          default=RentPaymentStatus.PENDING,
          nullable=False,
          index=True
     )
     is_late = Column(Boolean, default=False, nullable=False)
     waived_at = Column(DateTime, nullable=True)
     notes = Column(Text, nullable=True)

     version = Column(Integer, nullable=False)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     __mapper_args__ = {"version_id_col": version}

     # Relationships
     tenant = relationship("Tenant", back_populates="payments")
     ledger_entries = relationship(
          "PaymentLedger",
          back_populates="rent_payment",
          order_by="PaymentLedger.id",
     )

     def __repr__(self):
          return (
               f"<RentPayment(id={self.id}, tenant_id={self.tenant_id}, "
               f"month={self.payment_month}, status='{self.status.value}')>"
          )

     @property
     def total_owed(self) -> Decimal:
          """Base rent plus any late fees assessed."""
          return self.amount_due + self.late_fee

     @property
     def is_settled(self) -> bool:
          return self.amount_paid >= self.amount_due

     @property
     def outstanding_amount(self) -> Decimal:
          return max(self.total_owed - self.amount_paid, Decimal("0.00"))

     @property
     def overpayment(self) -> Decimal:
          """Amount received beyond rent and late fees; flagged, never discarded."""
          return max(self.amount_paid - self.total_owed, Decimal("0.00"))
