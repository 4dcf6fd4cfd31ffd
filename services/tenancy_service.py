"""
Tenancy Service - lifecycle of a tenant's occupancy of a unit.

Creating a tenancy claims the unit for the lease dates and seeds the first
rent obligation. A tenancy then leaves ACTIVE exactly once, either ENDED
or EVICTED, and is kept afterwards for history.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

import config
from models import Tenant, TenantStatus
from utils.money import to_money
from utils.periods import period_key, utcnow
from . import audit_service
from .exceptions import InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError
from .identity import IdentityDirectory
from .notifications import notify
from .occupancy import assert_unit_available, lock_property
from .rent_ledger_service import RentLedgerService
from .state_machines import check_tenant_transition

logger = logging.getLogger(__name__)


@dataclass
class Occupant:
     """
     Who occupies the unit.

     Either a registered user (user_id) or an independent tenant described
     by name and optional contact details.
     """
     user_id: Optional[int] = None
     name: Optional[str] = None
     email: Optional[str] = None
     phone: Optional[str] = None
     emergency_contact_name: Optional[str] = None
     emergency_contact_phone: Optional[str] = None
     emergency_contact_relationship: Optional[str] = None


@dataclass
class LeaseTerms:
     lease_start_date: date
     lease_end_date: date
     monthly_rent: Decimal
     security_deposit: Decimal = Decimal("0")
     rent_due_day: Optional[int] = None
     grace_period_days: Optional[int] = None
     late_fee_amount: Decimal = Decimal("0")
     move_in_date: Optional[date] = None
     move_in_condition_notes: Optional[str] = None
     move_in_photos: List[str] = field(default_factory=list)


def _validate_terms(terms: LeaseTerms) -> None:
     if terms.lease_end_date <= terms.lease_start_date:
          raise ValidationError(
               f"Lease end date {terms.lease_end_date} must be after start date {terms.lease_start_date}",
               entity="tenant",
          )
     try:
          rent = to_money(terms.monthly_rent)
          deposit = to_money(terms.security_deposit)
          late_fee = to_money(terms.late_fee_amount)
     except ValueError as exc:
          raise ValidationError(str(exc), entity="tenant") from None
     if rent <= 0:
          raise ValidationError(f"Monthly rent must be greater than zero, got {rent}", entity="tenant")
     if deposit < 0 or late_fee < 0:
          raise ValidationError("Security deposit and late fee cannot be negative", entity="tenant")
     if terms.rent_due_day is not None and not 1 <= terms.rent_due_day <= 28:
          raise ValidationError("Rent due day must be between 1 and 28", entity="tenant")
     if terms.grace_period_days is not None and terms.grace_period_days < 0:
          raise ValidationError("Grace period cannot be negative", entity="tenant")


def _validate_occupant(occupant: Occupant) -> None:
     if occupant.user_id is None and not (occupant.name and occupant.name.strip()):
          raise ValidationError(
               "An occupant needs either a registered user_id or a name",
               entity="tenant",
          )


class TenancyService:
     """Service class for tenancy lifecycle business logic."""

     @staticmethod
     def get_tenant(db: Session, tenant_id: int) -> Tenant:
          tenant = db.get(Tenant, tenant_id)
          if tenant is None:
               raise NotFoundError(f"Tenant with ID {tenant_id} not found", entity="tenant", entity_id=tenant_id)
          return tenant

     @staticmethod
     def _get_for_landlord(db: Session, actor_id: int, tenant_id: int) -> Tenant:
          tenant = TenancyService.get_tenant(db, tenant_id)
          if tenant.landlord_id != actor_id:
               raise PermissionDeniedError(
                    f"User {actor_id} is not the landlord of tenant {tenant_id}",
                    entity="tenant",
                    entity_id=tenant_id,
               )
          return tenant

     @staticmethod
     def list_tenants(db: Session, landlord_id: int, status: Optional[TenantStatus] = None) -> List[Tenant]:
          query = db.query(Tenant).filter(Tenant.landlord_id == landlord_id)
          if status is not None:
               query = query.filter(Tenant.status == status)
          return query.order_by(Tenant.lease_start_date.desc()).all()

     @staticmethod
     def display_name(db: Session, tenant: Tenant) -> str:
          return IdentityDirectory(db).for_tenant(tenant).name

     @staticmethod
     def create_tenancy(
          db: Session,
          actor_id: int,
          property_id: int,
          occupant: Occupant,
          terms: LeaseTerms,
          as_of: Optional[date] = None,
     ) -> Tenant:
          """
          Let a unit to an occupant.

          Validates the lease terms, locks the unit, rejects any overlap with
          an active tenancy or confirmed booking, creates the tenant as ACTIVE
          and seeds the rent obligation for the first lease month.

          Raises:
               ValidationError: Bad dates, rent or occupant
               NotFoundError: Property or registered user missing
               PermissionDeniedError: Actor does not own the property
               ConflictError: Unit already occupied for overlapping dates
          """
          _validate_terms(terms)
          _validate_occupant(occupant)

          prop = lock_property(db, property_id)
          if prop.landlord_id != actor_id:
               raise PermissionDeniedError(
                    f"User {actor_id} does not own property {property_id}",
                    entity="property",
                    entity_id=property_id,
               )

          if occupant.user_id is not None:
               IdentityDirectory(db).resolve(occupant.user_id)

          assert_unit_available(db, property_id, terms.lease_start_date, terms.lease_end_date)

          tenant = Tenant(
               property_id=property_id,
               landlord_id=prop.landlord_id,
               user_id=occupant.user_id,
               tenant_name=occupant.name,
               tenant_email=occupant.email,
               tenant_phone=occupant.phone,
               emergency_contact_name=occupant.emergency_contact_name,
               emergency_contact_phone=occupant.emergency_contact_phone,
               emergency_contact_relationship=occupant.emergency_contact_relationship,
               lease_start_date=terms.lease_start_date,
               lease_end_date=terms.lease_end_date,
               monthly_rent=to_money(terms.monthly_rent),
               security_deposit=to_money(terms.security_deposit),
               rent_due_day=terms.rent_due_day or config.DEFAULT_RENT_DUE_DAY,
               grace_period_days=(
                    terms.grace_period_days
                    if terms.grace_period_days is not None
                    else config.RENT_GRACE_PERIOD_DAYS
               ),
               late_fee_amount=to_money(terms.late_fee_amount),
               status=TenantStatus.ACTIVE,
               is_late_on_rent=False,
               move_in_date=terms.move_in_date or terms.lease_start_date,
               move_in_condition_notes=terms.move_in_condition_notes,
               move_in_photos=list(terms.move_in_photos),
               move_out_photos=[],
          )
          db.add(tenant)
          db.flush()

          RentLedgerService.ensure_period_obligation(db, tenant.id, period_key(terms.lease_start_date), as_of)
          RentLedgerService.refresh_tenant_lateness(db, tenant, as_of)
          db.flush()

          audit_service.record_action(
               db, actor_id, "tenancy.created", "tenant", tenant.id,
               property_id=property_id,
               lease_start_date=terms.lease_start_date,
               lease_end_date=terms.lease_end_date,
               monthly_rent=tenant.monthly_rent,
          )
          notify(db, "tenancy.created", tenant.user_id, tenant_id=tenant.id, property_id=property_id)
          logger.info("Created tenancy %s on property %s", tenant.id, property_id)
          return tenant

     @staticmethod
     def _close(
          db: Session,
          actor_id: int,
          tenant_id: int,
          target: TenantStatus,
          move_out_date: date,
     ) -> Tenant:
          tenant = TenancyService._get_for_landlord(db, actor_id, tenant_id)
          check_tenant_transition(tenant.id, tenant.status, target)
          if move_out_date < tenant.lease_start_date:
               raise ValidationError(
                    f"Move-out date {move_out_date} is before lease start {tenant.lease_start_date}",
                    entity="tenant",
                    entity_id=tenant.id,
                    current_state=tenant.status.value,
                    attempted=target.value,
               )
          return tenant

     @staticmethod
     def end_tenancy(
          db: Session,
          actor_id: int,
          tenant_id: int,
          move_out_date: date,
          condition_notes: Optional[str] = None,
          photos: Optional[List[str]] = None,
          deposit_returned=None,
     ) -> Tenant:
          """
          End an active tenancy normally.

          Raises:
               InvalidStateError: Tenancy is already ended or evicted
               ValidationError: Move-out before lease start or bad deposit return
          """
          tenant = TenancyService._close(db, actor_id, tenant_id, TenantStatus.ENDED, move_out_date)

          returned = None
          if deposit_returned is not None:
               try:
                    returned = to_money(deposit_returned)
               except ValueError as exc:
                    raise ValidationError(str(exc), entity="tenant", entity_id=tenant.id) from None
               if returned < 0 or returned > tenant.security_deposit:
                    raise ValidationError(
                         f"Returned deposit must be between 0 and {tenant.security_deposit}",
                         entity="tenant",
                         entity_id=tenant.id,
                    )

          tenant.status = TenantStatus.ENDED
          tenant.move_out_date = move_out_date
          tenant.move_out_condition_notes = condition_notes
          tenant.move_out_photos = list(photos or [])
          tenant.security_deposit_returned = returned
          tenant.ended_at = utcnow()
          db.flush()

          audit_service.record_action(
               db, actor_id, "tenancy.ended", "tenant", tenant.id,
               move_out_date=move_out_date, deposit_returned=returned,
          )
          notify(db, "tenancy.ended", tenant.user_id, tenant_id=tenant.id, move_out_date=str(move_out_date))
          logger.info("Ended tenancy %s on %s", tenant.id, move_out_date)
          return tenant

     @staticmethod
     def evict_tenant(
          db: Session,
          actor_id: int,
          tenant_id: int,
          reason: str,
          move_out_date: Optional[date] = None,
          as_of: Optional[date] = None,
     ) -> Tenant:
          """
          Evict an active tenant, preserving the reason.

          Same preconditions as end_tenancy; kept distinct for reporting and
          legal purposes.
          """
          if not reason or not reason.strip():
               raise ValidationError("An eviction reason is required", entity="tenant", entity_id=tenant_id)
          move_out_date = move_out_date or as_of or date.today()
          tenant = TenancyService._close(db, actor_id, tenant_id, TenantStatus.EVICTED, move_out_date)

          tenant.status = TenantStatus.EVICTED
          tenant.move_out_date = move_out_date
          tenant.eviction_reason = reason
          tenant.ended_at = utcnow()
          db.flush()

          audit_service.record_action(
               db, actor_id, "tenancy.evicted", "tenant", tenant.id,
               reason=reason, move_out_date=move_out_date,
          )
          notify(db, "tenancy.evicted", tenant.user_id, tenant_id=tenant.id)
          logger.info("Evicted tenant %s: %s", tenant.id, reason)
          return tenant

     @staticmethod
     def renew_lease(
          db: Session,
          actor_id: int,
          tenant_id: int,
          new_end_date: date,
          new_rent=None,
     ) -> Tenant:
          """
          Extend an active lease and optionally change the rent.

          The new rent only applies to obligations created after the renewal;
          obligations already issued keep their amount_due.

          Raises:
               InvalidStateError: Tenancy is not active
               ValidationError: End date does not extend the lease or rent not positive
               ConflictError: The extension overlaps another occupancy
          """
          tenant = TenancyService._get_for_landlord(db, actor_id, tenant_id)
          if tenant.status != TenantStatus.ACTIVE:
               raise InvalidStateError(
                    f"Only active tenancies can be renewed; tenant {tenant.id} is {tenant.status.value}",
                    entity="tenant",
                    entity_id=tenant.id,
                    current_state=tenant.status.value,
                    attempted="renew",
               )
          if new_end_date <= tenant.lease_end_date:
               raise ValidationError(
                    f"New end date {new_end_date} must be after current end date {tenant.lease_end_date}",
                    entity="tenant",
                    entity_id=tenant.id,
               )
          rent = None
          if new_rent is not None:
               try:
                    rent = to_money(new_rent)
               except ValueError as exc:
                    raise ValidationError(str(exc), entity="tenant", entity_id=tenant.id) from None
               if rent <= 0:
                    raise ValidationError(
                         f"Monthly rent must be greater than zero, got {rent}",
                         entity="tenant",
                         entity_id=tenant.id,
                    )

          lock_property(db, tenant.property_id)
          assert_unit_available(
               db, tenant.property_id, tenant.lease_end_date, new_end_date, exclude_tenant_id=tenant.id
          )

          previous_end, previous_rent = tenant.lease_end_date, tenant.monthly_rent
          tenant.lease_end_date = new_end_date
          if rent is not None:
               tenant.monthly_rent = rent
          db.flush()

          audit_service.record_action(
               db, actor_id, "tenancy.renewed", "tenant", tenant.id,
               previous_end_date=previous_end,
               new_end_date=new_end_date,
               previous_rent=previous_rent,
               new_rent=tenant.monthly_rent,
          )
          notify(db, "tenancy.renewed", tenant.user_id, tenant_id=tenant.id, lease_end_date=str(new_end_date))
          logger.info("Renewed tenancy %s until %s", tenant.id, new_end_date)
          return tenant
