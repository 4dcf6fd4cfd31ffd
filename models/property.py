from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base


class Property(Base):
     """
     Property model - a rentable unit owned by a landlord.

     Only the fields the lifecycle core needs are mirrored from the catalog.
     The row doubles as the lock anchor that serialises occupancy writes
     (tenancies and bookings) for the unit.
     """
     __tablename__ = "properties"

     id = Column(Integer, primary_key=True, autoincrement=True)
     landlord_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     title = Column(String(255), nullable=False)
     address = Column(String(255), nullable=True)
     city = Column(String(100), nullable=True)

     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     landlord = relationship("User")
     tenants = relationship("Tenant", back_populates="property")
     bookings = relationship("Booking", back_populates="property")
     maintenance_requests = relationship("MaintenanceRequest", back_populates="property")

     def __repr__(self):
          return f"<Property(id={self.id}, title='{self.title}')>"
