import enum
from sqlalchemy import (
     Column, Integer, String, Numeric, Date, Text, DateTime,
     ForeignKey, CheckConstraint, func,
)
from sqlalchemy.orm import relationship
from .base import Base, enum_type


class MaintenanceStatus(str, enum.Enum):
     PENDING = "pending"
     ASSIGNED = "assigned"
     SCHEDULED = "scheduled"
     IN_PROGRESS = "in_progress"
     PENDING_PARTS = "pending_parts"
     COMPLETED = "completed"
     CANCELLED = "cancelled"


class MaintenancePriority(str, enum.Enum):
     LOW = "low"
     MEDIUM = "medium"
     HIGH = "high"
     EMERGENCY = "emergency"


class MaintenanceCategory(str, enum.Enum):
     PLUMBING = "plumbing"
     ELECTRICAL = "electrical"
     HVAC = "hvac"
     APPLIANCE = "appliance"
     STRUCTURAL = "structural"
     PEST_CONTROL = "pest_control"
     OTHER = "other"


class MaintenanceRequest(Base):
     """
     MaintenanceRequest model - a repair or service job on a property.

     tenant_id is empty for landlord-initiated work. completed_at is set
     exactly when the status is COMPLETED.
     """
     __tablename__ = "maintenance_requests"
     __table_args__ = (
          CheckConstraint(
               "(status = 'completed' AND completed_at IS NOT NULL) "
               "OR (status <> 'completed' AND completed_at IS NULL)",
               name="ck_maintenance_requests_completed_at",
          ),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
     tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True, index=True)
     landlord_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     created_by = Column(Integer, ForeignKey("users.id"), nullable=False)

     # Request details
     title = Column(String(255), nullable=False)
     description = Column(Text, nullable=True)
     category = Column(enum_type(MaintenanceCategory, "maintenance_category"), nullable=False)
     priority = Column(
          enum_type(MaintenancePriority, "maintenance_priority"),
          default=MaintenancePriority.MEDIUM,
          nullable=False,
          index=True
     )
     status = Column(
          enum_type(MaintenanceStatus, "maintenance_status"),
          default=MaintenanceStatus.PENDING,
          nullable=False,
          index=True
     )

     # Assignment and scheduling
     assigned_to = Column(String(200), nullable=True)
     assigned_contact = Column(String(100), nullable=True)
     scheduled_date = Column(Date, nullable=True)
     estimated_cost = Column(Numeric(12, 2), nullable=True)

     # Resolution
     actual_cost = Column(Numeric(12, 2), nullable=True)
     resolution_notes = Column(Text, nullable=True)
     completed_at = Column(DateTime, nullable=True)
     cancellation_reason = Column(Text, nullable=True)
     cancelled_at = Column(DateTime, nullable=True)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     # Relationships
     property = relationship("Property", back_populates="maintenance_requests")
     tenant = relationship("Tenant")
     comments = relationship(
          "MaintenanceComment",
          back_populates="request",
          order_by="MaintenanceComment.id",
     )

     def __repr__(self):
          return f"<MaintenanceRequest(id={self.id}, status='{self.status.value}', priority='{self.priority.value}')>"
