"""
Audit Service - append-only log of administrative actions.

Evictions, waivers, late fees and other landlord actions are recorded so
they can be reviewed later. Entries are only ever inserted.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from models import AuditLog
from utils.periods import utcnow


def _jsonable(details: Dict[str, Any]) -> Dict[str, Any]:
     """Turn dates and Decimals into strings so the row is portable JSON."""
     clean = {}
     for key, value in details.items():
          if value is None or isinstance(value, (bool, int, float, str)):
               clean[key] = value
          elif isinstance(value, (list, tuple)):
               clean[key] = [v if isinstance(v, (bool, int, float, str)) else str(v) for v in value]
          else:
               clean[key] = str(value)
     return clean


def record_action(
     db: Session,
     actor_id: Optional[int],
     action: str,
     entity: str,
     entity_id: int,
     **details: Any,
) -> AuditLog:
     """Append an audit entry inside the caller's transaction."""
     entry = AuditLog(
          actor_id=actor_id,
          action=action,
          entity=entity,
          entity_id=entity_id,
          details=_jsonable(details),
          created_at=utcnow(),
     )
     db.add(entry)
     db.flush()
     return entry


def list_actions(
     db: Session,
     entity: Optional[str] = None,
     entity_id: Optional[int] = None,
     actor_id: Optional[int] = None,
) -> List[AuditLog]:
     query = db.query(AuditLog)
     if entity is not None:
          query = query.filter(AuditLog.entity == entity)
     if entity_id is not None:
          query = query.filter(AuditLog.entity_id == entity_id)
     if actor_id is not None:
          query = query.filter(AuditLog.actor_id == actor_id)
     return query.order_by(AuditLog.id).all()
