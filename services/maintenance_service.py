"""
Maintenance Service - repair and service requests on a property.

Requests move through the pipeline
pending -> assigned -> scheduled -> in_progress -> pending_parts -> completed,
with cancellation allowed from any non-terminal state. Every move is checked
against the transition table in state_machines.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Set, Union

from sqlalchemy.orm import Session

from models import (
     MaintenanceCategory,
     MaintenanceComment,
     MaintenancePriority,
     MaintenanceRequest,
     MaintenanceStatus,
     Property,
     Tenant,
)
from utils.money import to_money
from utils.periods import utcnow
from . import audit_service
from .exceptions import NotFoundError, PermissionDeniedError, ValidationError
from .notifications import notify
from .state_machines import check_maintenance_transition

logger = logging.getLogger(__name__)


def _cost(value, field: str, request_id: Optional[int]) -> Optional[Decimal]:
     if value is None:
          return None
     try:
          amount = to_money(value)
     except ValueError as exc:
          raise ValidationError(str(exc), entity="maintenance_request", entity_id=request_id) from None
     if amount < 0:
          raise ValidationError(f"{field} cannot be negative", entity="maintenance_request", entity_id=request_id)
     return amount


def _enum(enum_cls, value, field: str):
     try:
          return enum_cls(value)
     except ValueError:
          allowed = ", ".join(m.value for m in enum_cls)
          raise ValidationError(
               f"Invalid {field} {value!r}; expected one of {allowed}",
               entity="maintenance_request",
          ) from None


class MaintenanceService:
     """Service class for maintenance request workflow."""

     @staticmethod
     def get_request(db: Session, request_id: int) -> MaintenanceRequest:
          request = db.get(MaintenanceRequest, request_id)
          if request is None:
               raise NotFoundError(
                    f"Maintenance request with ID {request_id} not found",
                    entity="maintenance_request",
                    entity_id=request_id,
               )
          return request

     @staticmethod
     def list_requests(
          db: Session,
          landlord_id: int,
          status: Optional[MaintenanceStatus] = None,
          priority: Optional[MaintenancePriority] = None,
     ) -> List[MaintenanceRequest]:
          query = db.query(MaintenanceRequest).filter(MaintenanceRequest.landlord_id == landlord_id)
          if status is not None:
               query = query.filter(MaintenanceRequest.status == status)
          if priority is not None:
               query = query.filter(MaintenanceRequest.priority == priority)
          return query.order_by(MaintenanceRequest.created_at.desc(), MaintenanceRequest.id.desc()).all()

     @staticmethod
     def _for_landlord(db: Session, actor_id: int, request_id: int) -> MaintenanceRequest:
          request = MaintenanceService.get_request(db, request_id)
          if request.landlord_id != actor_id:
               raise PermissionDeniedError(
                    f"User {actor_id} cannot manage maintenance request {request_id}",
                    entity="maintenance_request",
                    entity_id=request_id,
               )
          return request

     @staticmethod
     def _move(request: MaintenanceRequest, target: MaintenanceStatus) -> MaintenanceStatus:
          previous = request.status
          check_maintenance_transition(request.id, previous, target)
          return previous

     @staticmethod
     def _log(db: Session, request: MaintenanceRequest, previous: MaintenanceStatus) -> None:
          db.flush()
          logger.info(
               "Maintenance request %s: %s -> %s", request.id, previous.value, request.status.value
          )
          notify(
               db, "maintenance.status_changed",
               request.tenant.user_id if request.tenant is not None else None,
               request_id=request.id,
               status=request.status.value,
          )

     @staticmethod
     def create_request(
          db: Session,
          actor_id: int,
          property_id: int,
          title: str,
          category: Union[MaintenanceCategory, str],
          priority: Union[MaintenancePriority, str] = MaintenancePriority.MEDIUM,
          description: Optional[str] = None,
          tenant_id: Optional[int] = None,
     ) -> MaintenanceRequest:
          """
          Open a request on a property.

          Landlords may open requests with or without a tenant; a tenant may
          open one only for a unit they occupy.
          """
          if not title or not title.strip():
               raise ValidationError("A title is required", entity="maintenance_request")
          category = _enum(MaintenanceCategory, category, "category")
          priority = _enum(MaintenancePriority, priority, "priority")

          prop = db.get(Property, property_id)
          if prop is None:
               raise NotFoundError(f"Property with ID {property_id} not found", entity="property", entity_id=property_id)

          if tenant_id is not None:
               tenant = db.get(Tenant, tenant_id)
               if tenant is None:
                    raise NotFoundError(f"Tenant with ID {tenant_id} not found", entity="tenant", entity_id=tenant_id)
               if tenant.property_id != property_id:
                    raise ValidationError(
                         f"Tenant {tenant_id} does not occupy property {property_id}",
                         entity="maintenance_request",
                    )
               allowed = {prop.landlord_id, tenant.user_id}
          else:
               allowed = {prop.landlord_id}
          if actor_id not in allowed:
               raise PermissionDeniedError(
                    f"User {actor_id} cannot open requests on property {property_id}",
                    entity="property",
                    entity_id=property_id,
               )

          request = MaintenanceRequest(
               property_id=property_id,
               tenant_id=tenant_id,
               landlord_id=prop.landlord_id,
               created_by=actor_id,
               title=title.strip(),
               description=description,
               category=category,
               priority=priority,
               status=MaintenanceStatus.PENDING,
          )
          db.add(request)
          db.flush()

          notify(db, "maintenance.created", prop.landlord_id, request_id=request.id, priority=priority.value)
          if priority == MaintenancePriority.EMERGENCY:
               logger.warning("Emergency maintenance request %s on property %s", request.id, property_id)
          else:
               logger.info("Created maintenance request %s on property %s", request.id, property_id)
          return request

     @staticmethod
     def assign(
          db: Session,
          actor_id: int,
          request_id: int,
          vendor: str,
          contact: Optional[str] = None,
     ) -> MaintenanceRequest:
          """Assign (or reassign) a vendor."""
          request = MaintenanceService._for_landlord(db, actor_id, request_id)
          previous = MaintenanceService._move(request, MaintenanceStatus.ASSIGNED)
          if not vendor or not vendor.strip():
               raise ValidationError("A vendor is required", entity="maintenance_request", entity_id=request.id)

          request.assigned_to = vendor.strip()
          request.assigned_contact = contact
          request.status = MaintenanceStatus.ASSIGNED
          MaintenanceService._log(db, request, previous)
          return request

     @staticmethod
     def schedule(
          db: Session,
          actor_id: int,
          request_id: int,
          scheduled_date: date,
          estimated_cost=None,
     ) -> MaintenanceRequest:
          """Set (or move) the visit date and cost estimate."""
          request = MaintenanceService._for_landlord(db, actor_id, request_id)
          previous = MaintenanceService._move(request, MaintenanceStatus.SCHEDULED)
          if scheduled_date is None:
               raise ValidationError("A scheduled date is required", entity="maintenance_request", entity_id=request.id)
          cost = _cost(estimated_cost, "estimated_cost", request.id)

          request.scheduled_date = scheduled_date
          if cost is not None:
               request.estimated_cost = cost
          request.status = MaintenanceStatus.SCHEDULED
          MaintenanceService._log(db, request, previous)
          return request

     @staticmethod
     def mark_in_progress(db: Session, actor_id: int, request_id: int) -> MaintenanceRequest:
          request = MaintenanceService._for_landlord(db, actor_id, request_id)
          previous = MaintenanceService._move(request, MaintenanceStatus.IN_PROGRESS)
          request.status = MaintenanceStatus.IN_PROGRESS
          MaintenanceService._log(db, request, previous)
          return request

     @staticmethod
     def mark_pending_parts(db: Session, actor_id: int, request_id: int) -> MaintenanceRequest:
          request = MaintenanceService._for_landlord(db, actor_id, request_id)
          previous = MaintenanceService._move(request, MaintenanceStatus.PENDING_PARTS)
          request.status = MaintenanceStatus.PENDING_PARTS
          MaintenanceService._log(db, request, previous)
          return request

     @staticmethod
     def complete(
          db: Session,
          actor_id: int,
          request_id: int,
          resolution_notes: Optional[str] = None,
          actual_cost=None,
     ) -> MaintenanceRequest:
          """
          Close the request as done. completed_at is stamped here and only here;
          a second completion fails and leaves it untouched.
          """
          request = MaintenanceService._for_landlord(db, actor_id, request_id)
          previous = MaintenanceService._move(request, MaintenanceStatus.COMPLETED)
          cost = _cost(actual_cost, "actual_cost", request.id)

          request.status = MaintenanceStatus.COMPLETED
          request.resolution_notes = resolution_notes
          request.actual_cost = cost
          request.completed_at = utcnow()
          MaintenanceService._log(db, request, previous)
          return request

     @staticmethod
     def cancel(db: Session, actor_id: int, request_id: int, reason: str) -> MaintenanceRequest:
          request = MaintenanceService.get_request(db, request_id)
          if actor_id not in MaintenanceService._participants(request):
               raise PermissionDeniedError(
                    f"User {actor_id} cannot cancel maintenance request {request_id}",
                    entity="maintenance_request",
                    entity_id=request_id,
               )
          previous = MaintenanceService._move(request, MaintenanceStatus.CANCELLED)
          if not reason or not reason.strip():
               raise ValidationError("A cancellation reason is required", entity="maintenance_request", entity_id=request.id)

          request.status = MaintenanceStatus.CANCELLED
          request.cancellation_reason = reason
          request.cancelled_at = utcnow()
          MaintenanceService._log(db, request, previous)
          audit_service.record_action(
               db, actor_id, "maintenance.cancelled", "maintenance_request", request.id,
               reason=reason, previous_status=previous.value,
          )
          return request

     @staticmethod
     def _participants(request: MaintenanceRequest) -> Set[int]:
          tenant_user = request.tenant.user_id if request.tenant is not None else None
          return {request.landlord_id, request.created_by, tenant_user} - {None}

     @staticmethod
     def _for_participant(db: Session, actor_id: int, request_id: int) -> MaintenanceRequest:
          request = MaintenanceService.get_request(db, request_id)
          if actor_id not in MaintenanceService._participants(request):
               raise PermissionDeniedError(
                    f"User {actor_id} is not a party to maintenance request {request_id}",
                    entity="maintenance_request",
                    entity_id=request_id,
               )
          return request

     @staticmethod
     def add_comment(
          db: Session,
          actor_id: int,
          request_id: int,
          comment: str,
          is_internal: bool = False,
     ) -> MaintenanceComment:
          """
          Add a message to a request's thread. Allowed in any status.

          Internal comments are landlord-only notes and notify nobody; a
          regular comment notifies every other party to the request.
          """
          request = MaintenanceService._for_participant(db, actor_id, request_id)
          if not comment or not comment.strip():
               raise ValidationError("A comment cannot be empty", entity="maintenance_comment", entity_id=request_id)
          if is_internal and actor_id != request.landlord_id:
               raise PermissionDeniedError(
                    f"Only the landlord can add internal notes to maintenance request {request_id}",
                    entity="maintenance_request",
                    entity_id=request_id,
               )

          entry = MaintenanceComment(
               maintenance_id=request.id,
               user_id=actor_id,
               comment=comment.strip(),
               is_internal=is_internal,
          )
          db.add(entry)
          db.flush()

          logger.info("Comment %s added to maintenance request %s by user %s", entry.id, request.id, actor_id)
          if not is_internal:
               for user_id in sorted(MaintenanceService._participants(request) - {actor_id}):
                    notify(db, "maintenance.comment_added", user_id, request_id=request.id, comment_id=entry.id)
          return entry

     @staticmethod
     def list_comments(db: Session, actor_id: int, request_id: int) -> List[MaintenanceComment]:
          """Oldest first. Internal notes are only shown to the landlord."""
          request = MaintenanceService._for_participant(db, actor_id, request_id)
          query = db.query(MaintenanceComment).filter(MaintenanceComment.maintenance_id == request.id)
          if actor_id != request.landlord_id:
               query = query.filter(MaintenanceComment.is_internal.is_(False))
          return query.order_by(MaintenanceComment.created_at, MaintenanceComment.id).all()
