"""
Identity lookup for occupants.

Resolves a registered user id to display details, and builds the same
view for independent tenants who have no platform account.
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from models import Tenant, User
from .exceptions import NotFoundError


@dataclass(frozen=True)
class Identity:
     name: str
     email: Optional[str] = None
     phone: Optional[str] = None
     user_id: Optional[int] = None


class IdentityDirectory:
     """Reads identities from the local users table."""

     def __init__(self, db: Session):
          self.db = db

     def resolve(self, user_id: int) -> Identity:
          user = self.db.get(User, user_id)
          if user is None:
               raise NotFoundError(f"User with ID {user_id} not found", entity="user", entity_id=user_id)
          return Identity(
               name=user.full_name or user.email,
               email=user.email,
               phone=user.phone,
               user_id=user.id,
          )

     def for_tenant(self, tenant: Tenant) -> Identity:
          if tenant.user_id is not None:
               return self.resolve(tenant.user_id)
          return Identity(name=tenant.tenant_name, email=tenant.tenant_email, phone=tenant.tenant_phone)
