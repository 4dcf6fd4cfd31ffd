from sqlalchemy import Column, Integer, String, DateTime, func
from .base import Base


class User(Base):
     """
     User model - local mirror of the identity provider's profiles.

     Registered tenants, landlords, guests and hosts all resolve to a row
     here. Authentication itself lives outside this service.
     """
     __tablename__ = "users"

     id = Column(Integer, primary_key=True, autoincrement=True)
     email = Column(String(255), unique=True, nullable=False, index=True)
     full_name = Column(String(200), nullable=True)
     phone = Column(String(50), nullable=True)
     role = Column(String(50), nullable=False, default="tenant")  # admin, landlord, tenant, guest
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
