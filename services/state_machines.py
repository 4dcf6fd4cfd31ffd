"""
Transition tables for every stateful entity.

Each entity has exactly one function that decides whether a move from the
current status to a target status is legal. Services call it before
touching any field.
"""
from typing import Dict, FrozenSet, Optional

from models import TenantStatus, MaintenanceStatus, BookingStatus
from .exceptions import InvalidStateError


TENANT_TRANSITIONS: Dict[TenantStatus, FrozenSet[TenantStatus]] = {
     TenantStatus.ACTIVE: frozenset({TenantStatus.ENDED, TenantStatus.EVICTED}),
     TenantStatus.ENDED: frozenset(),
     TenantStatus.EVICTED: frozenset(),
}

MAINTENANCE_TRANSITIONS: Dict[MaintenanceStatus, FrozenSet[MaintenanceStatus]] = {
     MaintenanceStatus.PENDING: frozenset({
          MaintenanceStatus.ASSIGNED,
          MaintenanceStatus.SCHEDULED,
          MaintenanceStatus.IN_PROGRESS,
          MaintenanceStatus.CANCELLED,
     }),
     # reassigning a vendor and rescheduling are self-transitions
     MaintenanceStatus.ASSIGNED: frozenset({
          MaintenanceStatus.ASSIGNED,
          MaintenanceStatus.SCHEDULED,
          MaintenanceStatus.IN_PROGRESS,
          MaintenanceStatus.CANCELLED,
     }),
     MaintenanceStatus.SCHEDULED: frozenset({
          MaintenanceStatus.SCHEDULED,
          MaintenanceStatus.IN_PROGRESS,
          MaintenanceStatus.COMPLETED,
          MaintenanceStatus.CANCELLED,
     }),
     MaintenanceStatus.IN_PROGRESS: frozenset({
          MaintenanceStatus.PENDING_PARTS,
          MaintenanceStatus.COMPLETED,
          MaintenanceStatus.CANCELLED,
     }),
     MaintenanceStatus.PENDING_PARTS: frozenset({
          MaintenanceStatus.IN_PROGRESS,
          MaintenanceStatus.COMPLETED,
          MaintenanceStatus.CANCELLED,
     }),
     MaintenanceStatus.COMPLETED: frozenset(),
     MaintenanceStatus.CANCELLED: frozenset(),
}

BOOKING_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
     BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
     BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
     BookingStatus.CANCELLED: frozenset(),
     BookingStatus.COMPLETED: frozenset(),
}


def is_terminal(table, status) -> bool:
     return not table[status]


def _check(table, entity: str, entity_id: Optional[int], current, target) -> None:
     if target not in table[current]:
          if is_terminal(table, current):
               message = f"Cannot move {entity} {entity_id} to '{target.value}': '{current.value}' is final"
          else:
               message = f"Cannot move {entity} {entity_id} from '{current.value}' to '{target.value}'"
          raise InvalidStateError(
               message,
               entity=entity,
               entity_id=entity_id,
               current_state=current.value,
               attempted=target.value,
          )


def check_tenant_transition(tenant_id: Optional[int], current: TenantStatus, target: TenantStatus) -> None:
     _check(TENANT_TRANSITIONS, "tenant", tenant_id, current, target)


def check_maintenance_transition(
     request_id: Optional[int],
     current: MaintenanceStatus,
     target: MaintenanceStatus,
) -> None:
     _check(MAINTENANCE_TRANSITIONS, "maintenance_request", request_id, current, target)


def check_booking_transition(booking_id: Optional[int], current: BookingStatus, target: BookingStatus) -> None:
     _check(BOOKING_TRANSITIONS, "booking", booking_id, current, target)
