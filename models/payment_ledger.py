"""
PaymentLedger model - append-only, hash-chained record of payment events.

Each record stores a SHA-256 hash of
(rent_payment_id + tenant_id + amount + paid_on + timestamp) and the
previous hash in the same tenant's chain. The sum of a payment's entries
always equals its amount_paid. (tenant_id, previous_hash) is unique so two
concurrent appends cannot fork a chain.
"""
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base


class PaymentLedger(Base):
     """
     Immutable ledger entry. One is appended for every recorded payment and
     for every credit moved between periods (negative amount on the source).
     """
     __tablename__ = "payment_ledger"
     __table_args__ = (
          UniqueConstraint("tenant_id", "previous_hash", name="uq_payment_ledger_tenant_previous_hash"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     rent_payment_id = Column(
          Integer,
          ForeignKey("rent_payments.id", ondelete="RESTRICT"),
          nullable=False,
          index=True
     )
     tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
     amount = Column(Numeric(12, 2), nullable=False)
     payment_method = Column(String(50), nullable=False)
     transaction_ref = Column(String(255), nullable=True)
     paid_on = Column(Date, nullable=False)
     transaction_hash = Column(String(64), nullable=False, unique=True, index=True)  # SHA-256 hex length
     previous_hash = Column(String(64), nullable=False)  # "0" for the first entry of a tenant
     timestamp = Column(DateTime, nullable=False)

     # Relationships
     rent_payment = relationship("RentPayment", back_populates="ledger_entries")

     def __repr__(self):
          return f"<PaymentLedger(id={self.id}, rent_payment_id={self.rent_payment_id}, hash={self.transaction_hash[:16]}...)>"
