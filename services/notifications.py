"""
Notification dispatcher.

Lifecycle services queue notifications on the session; they are posted to
the configured webhook only after the transaction commits and are dropped
if it rolls back. Delivery is fire-and-forget: every failure is logged and
swallowed so an outage never blocks a lifecycle transition.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests
from sqlalchemy import event
from sqlalchemy.orm import Session

import config

logger = logging.getLogger(__name__)

_OUTBOX_KEY = "pending_notifications"


class NotificationDispatcher:
     """Posts JSON events to a webhook with a bounded timeout."""

     def __init__(self, webhook_url: Optional[str] = None, timeout: Optional[float] = None):
          self.webhook_url = webhook_url
          self.timeout = timeout if timeout is not None else config.NOTIFY_TIMEOUT_SECONDS

     def send(self, event_name: str, recipient_id: Optional[int], payload: Dict[str, Any]) -> bool:
          """
          Deliver one notification.

          Returns True on success, False on any error (logs the reason).
          Safe to call with no webhook configured; returns False silently.
          """
          if not self.webhook_url:
               return False
          try:
               resp = requests.post(
                    self.webhook_url,
                    json={"event": event_name, "recipient_id": recipient_id, "data": payload},
                    timeout=self.timeout,
               )
               if resp.status_code in (200, 201, 202, 204):
                    return True
               logger.warning(
                    "Notification %s returned %d: %s", event_name, resp.status_code, resp.text[:200]
               )
               return False
          except requests.RequestException as exc:
               logger.warning("Notification %s failed (recipient=%s): %s", event_name, recipient_id, exc)
               return False

     def notify(self, db: Session, event_name: str, recipient_id: Optional[int], **payload: Any) -> None:
          """Queue a notification to be sent once `db` commits."""
          outbox: List[Tuple["NotificationDispatcher", str, Optional[int], Dict[str, Any]]]
          outbox = db.info.setdefault(_OUTBOX_KEY, [])
          outbox.append((self, event_name, recipient_id, payload))


dispatcher = NotificationDispatcher(webhook_url=config.NOTIFY_WEBHOOK_URL)


def notify(db: Session, event_name: str, recipient_id: Optional[int], **payload: Any) -> None:
     """Queue a notification through the application-wide dispatcher."""
     dispatcher.notify(db, event_name, recipient_id, **payload)


@event.listens_for(Session, "after_commit")
def _flush_outbox(session: Session) -> None:
     outbox = session.info.pop(_OUTBOX_KEY, [])
     for target, event_name, recipient_id, payload in outbox:
          try:
               target.send(event_name, recipient_id, payload)
          except Exception:
               logger.exception("Unexpected error delivering %s", event_name)


@event.listens_for(Session, "after_soft_rollback")
def _discard_outbox(session: Session, previous_transaction) -> None:
     if previous_transaction.nested:
          return
     dropped = session.info.pop(_OUTBOX_KEY, [])
     if dropped:
          logger.debug("Discarded %d notifications after rollback", len(dropped))
