"""
Domain error taxonomy for the lifecycle core.

Every error carries enough context (entity, id, current state, attempted
action) for the API layer to render a meaningful message.
"""
from typing import Any, Optional


class LifecycleError(Exception):
     """Base class for all errors raised by lifecycle services."""

     status_code = 400
     error = "lifecycle_error"

     def __init__(
          self,
          message: str,
          entity: Optional[str] = None,
          entity_id: Optional[Any] = None,
          current_state: Optional[str] = None,
          attempted: Optional[str] = None,
     ):
          super().__init__(message)
          self.message = message
          self.entity = entity
          self.entity_id = entity_id
          self.current_state = current_state
          self.attempted = attempted

     def to_dict(self) -> dict:
          return {
               "error": self.error,
               "detail": self.message,
               "entity": self.entity,
               "entity_id": self.entity_id,
               "current_state": self.current_state,
               "attempted": self.attempted,
          }


class ValidationError(LifecycleError):
     """Malformed input: bad dates, non-positive amounts, missing fields."""
     status_code = 422
     error = "validation_error"


class ConflictError(LifecycleError):
     """Overlapping occupancy, duplicate active tenancy or a lost write race."""
     status_code = 409
     error = "conflict"


class InvalidStateError(LifecycleError):
     """A state transition that the entity's state machine does not allow."""
     status_code = 409
     error = "invalid_state"


class NotFoundError(LifecycleError):
     status_code = 404
     error = "not_found"


class PermissionDeniedError(LifecycleError):
     """The acting user is not a party entitled to perform the action."""
     status_code = 403
     error = "forbidden"
