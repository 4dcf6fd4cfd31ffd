"""
Tenancy API routes.

Landlords let units, end or evict tenancies and renew leases. The caller's
user id from the bearer token is passed as the acting landlord.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from models import Tenant, TenantStatus
from schemas.tenancy import (
     TenancyCreate,
     TenancyEnd,
     TenancyEvict,
     LeaseRenewal,
     TenantResponse,
     TenantListResponse,
)
from security import get_actor_id
from services.tenancy_service import TenancyService, Occupant, LeaseTerms

router = APIRouter(prefix="/api/tenancies", tags=["tenancies"])


def _build_tenant_response(tenant: Tenant, db: Session) -> TenantResponse:
     response = TenantResponse.model_validate(tenant)
     response.display_name = TenancyService.display_name(db, tenant)
     return response


@router.post(
     "",
     response_model=TenantResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Let a unit to a tenant"
)
def create_tenancy(
     body: TenancyCreate,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """
     Create an active tenancy and seed the first month's rent obligation.

     - **409**: the unit already has an active tenancy or confirmed booking for overlapping dates
     - **422**: lease end not after start, or rent not positive
     """
     occupant = Occupant(
          user_id=body.user_id,
          name=body.tenant_name,
          email=body.tenant_email,
          phone=body.tenant_phone,
          emergency_contact_name=body.emergency_contact_name,
          emergency_contact_phone=body.emergency_contact_phone,
          emergency_contact_relationship=body.emergency_contact_relationship,
     )
     terms = LeaseTerms(
          lease_start_date=body.lease_start_date,
          lease_end_date=body.lease_end_date,
          monthly_rent=body.monthly_rent,
          security_deposit=body.security_deposit,
          rent_due_day=body.rent_due_day,
          grace_period_days=body.grace_period_days,
          late_fee_amount=body.late_fee_amount,
          move_in_date=body.move_in_date,
          move_in_condition_notes=body.move_in_condition_notes,
          move_in_photos=body.move_in_photos,
     )
     tenant = TenancyService.create_tenancy(db, actor_id, body.property_id, occupant, terms)
     return _build_tenant_response(tenant, db)


@router.get(
     "",
     response_model=TenantListResponse,
     summary="List the caller's tenants"
)
def list_tenancies(
     status: Optional[TenantStatus] = Query(None, description="Filter by status"),
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     tenants = TenancyService.list_tenants(db, actor_id, status)
     return TenantListResponse(
          tenants=[_build_tenant_response(t, db) for t in tenants],
          total=len(tenants),
     )


@router.get(
     "/{tenant_id}",
     response_model=TenantResponse,
     summary="Get a tenancy"
)
def get_tenancy(
     tenant_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     tenant = TenancyService._get_for_landlord(db, actor_id, tenant_id)
     return _build_tenant_response(tenant, db)


@router.post(
     "/{tenant_id}/end",
     response_model=TenantResponse,
     summary="End a tenancy"
)
def end_tenancy(
     tenant_id: int,
     body: TenancyEnd,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """Record move-out and close the tenancy. Fails with 409 if it is not active."""
     tenant = TenancyService.end_tenancy(
          db,
          actor_id,
          tenant_id,
          move_out_date=body.move_out_date,
          condition_notes=body.move_out_condition_notes,
          photos=body.move_out_photos,
          deposit_returned=body.security_deposit_returned,
     )
     return _build_tenant_response(tenant, db)


@router.post(
     "/{tenant_id}/evict",
     response_model=TenantResponse,
     summary="Evict a tenant"
)
def evict_tenant(
     tenant_id: int,
     body: TenancyEvict,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     tenant = TenancyService.evict_tenant(db, actor_id, tenant_id, body.reason, body.move_out_date)
     return _build_tenant_response(tenant, db)


@router.post(
     "/{tenant_id}/renew",
     response_model=TenantResponse,
     summary="Renew a lease"
)
def renew_lease(
     tenant_id: int,
     body: LeaseRenewal,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """Extend the lease end date; a new rent applies to future periods only."""
     tenant = TenancyService.renew_lease(db, actor_id, tenant_id, body.new_end_date, body.new_monthly_rent)
     return _build_tenant_response(tenant, db)
