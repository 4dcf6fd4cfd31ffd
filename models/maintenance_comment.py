from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from .base import Base


class MaintenanceComment(Base):
     """
     MaintenanceComment model - one message in a request's thread.

     Internal comments are notes the landlord keeps for themselves and their
     vendors; the tenant never sees them.
     """
     __tablename__ = "maintenance_comments"

     id = Column(Integer, primary_key=True, autoincrement=True)
     maintenance_id = Column(
          Integer,
          ForeignKey("maintenance_requests.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
     comment = Column(Text, nullable=False)
     is_internal = Column(Boolean, default=False, nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     request = relationship("MaintenanceRequest", back_populates="comments")
     user = relationship("User")

     def __repr__(self):
          return f"<MaintenanceComment(id={self.id}, maintenance_id={self.maintenance_id})>"
