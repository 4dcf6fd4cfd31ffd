"""
Maintenance request API routes.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from models import MaintenanceComment, MaintenancePriority, MaintenanceStatus
from schemas.maintenance import (
     MaintenanceCreate,
     MaintenanceAssign,
     MaintenanceSchedule,
     MaintenanceComplete,
     MaintenanceCancel,
     MaintenanceResponse,
     MaintenanceListResponse,
     MaintenanceCommentCreate,
     MaintenanceCommentResponse,
     MaintenanceCommentListResponse,
)
from security import get_actor_id
from services.maintenance_service import MaintenanceService

router = APIRouter(prefix="/api/maintenance", tags=["maintenance"])


@router.post(
     "",
     response_model=MaintenanceResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Open a maintenance request"
)
def create_request(
     body: MaintenanceCreate,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """Landlords may open requests on any of their properties; tenants only on the unit they occupy."""
     request = MaintenanceService.create_request(
          db,
          actor_id,
          body.property_id,
          body.title,
          body.category,
          priority=body.priority,
          description=body.description,
          tenant_id=body.tenant_id,
     )
     return MaintenanceResponse.model_validate(request)


@router.get(
     "",
     response_model=MaintenanceListResponse,
     summary="List the caller's maintenance requests"
)
def list_requests(
     status: Optional[MaintenanceStatus] = Query(None, description="Filter by status"),
     priority: Optional[MaintenancePriority] = Query(None, description="Filter by priority"),
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     requests = MaintenanceService.list_requests(db, actor_id, status, priority)
     return MaintenanceListResponse(
          requests=[MaintenanceResponse.model_validate(r) for r in requests],
          total=len(requests),
     )


@router.get("/{request_id}", response_model=MaintenanceResponse, summary="Get a maintenance request")
def get_request(
     request_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     return MaintenanceResponse.model_validate(MaintenanceService._for_landlord(db, actor_id, request_id))


@router.post("/{request_id}/assign", response_model=MaintenanceResponse, summary="Assign a vendor")
def assign_vendor(
     request_id: int,
     body: MaintenanceAssign,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     request = MaintenanceService.assign(db, actor_id, request_id, body.assigned_to, body.assigned_contact)
     return MaintenanceResponse.model_validate(request)


@router.post("/{request_id}/schedule", response_model=MaintenanceResponse, summary="Schedule the work")
def schedule_request(
     request_id: int,
     body: MaintenanceSchedule,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     request = MaintenanceService.schedule(db, actor_id, request_id, body.scheduled_date, body.estimated_cost)
     return MaintenanceResponse.model_validate(request)


@router.post("/{request_id}/start", response_model=MaintenanceResponse, summary="Mark work in progress")
def start_request(
     request_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     return MaintenanceResponse.model_validate(MaintenanceService.mark_in_progress(db, actor_id, request_id))


@router.post("/{request_id}/pending-parts", response_model=MaintenanceResponse, summary="Wait for parts")
def pending_parts(
     request_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     return MaintenanceResponse.model_validate(MaintenanceService.mark_pending_parts(db, actor_id, request_id))


@router.post("/{request_id}/complete", response_model=MaintenanceResponse, summary="Complete a request")
def complete_request(
     request_id: int,
     body: MaintenanceComplete,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """
     Close the request as done.

     - **409**: the request is already completed or cancelled
     """
     request = MaintenanceService.complete(
          db, actor_id, request_id,
          resolution_notes=body.resolution_notes,
          actual_cost=body.actual_cost,
     )
     return MaintenanceResponse.model_validate(request)


@router.post("/{request_id}/cancel", response_model=MaintenanceResponse, summary="Cancel a request")
def cancel_request(
     request_id: int,
     body: MaintenanceCancel,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     return MaintenanceResponse.model_validate(MaintenanceService.cancel(db, actor_id, request_id, body.reason))


def _comment_response(entry: MaintenanceComment) -> MaintenanceCommentResponse:
     response = MaintenanceCommentResponse.model_validate(entry)
     response.author_name = entry.user.full_name if entry.user is not None else None
     return response


@router.get(
     "/{request_id}/comments",
     response_model=MaintenanceCommentListResponse,
     summary="List a request's comments"
)
def list_comments(
     request_id: int,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """Oldest first. Internal notes are only returned to the landlord."""
     comments = MaintenanceService.list_comments(db, actor_id, request_id)
     return MaintenanceCommentListResponse(
          comments=[_comment_response(c) for c in comments],
          total=len(comments),
     )


@router.post(
     "/{request_id}/comments",
     response_model=MaintenanceCommentResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Comment on a request"
)
def add_comment(
     request_id: int,
     body: MaintenanceCommentCreate,
     db: Session = Depends(get_session),
     actor_id: int = Depends(get_actor_id),
):
     """
     Any party to the request may comment, in any status.

     - **403**: internal notes are landlord-only
     - **422**: empty comment
     """
     entry = MaintenanceService.add_comment(db, actor_id, request_id, body.comment, body.is_internal)
     return _comment_response(entry)
