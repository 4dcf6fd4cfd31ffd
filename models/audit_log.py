"""
AuditLog model - append-only trail of administrative actions.

Rows are inserted by services.audit_service and never updated or deleted.
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON

from .base import Base


class AuditLog(Base):
     __tablename__ = "audit_logs"

     id = Column(Integer, primary_key=True, autoincrement=True)
     actor_id = Column(Integer, nullable=True, index=True)  # None for scheduled jobs
     action = Column(String(100), nullable=False, index=True)
     entity = Column(String(50), nullable=False)
     entity_id = Column(Integer, nullable=False, index=True)
     details = Column(JSON, nullable=False, default=dict)
     created_at = Column(DateTime, nullable=False)

     def __repr__(self):
          return f"<AuditLog(id={self.id}, action='{self.action}', entity='{self.entity}:{self.entity_id}')>"
