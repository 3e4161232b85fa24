"""Best-effort notification fan-out for claim and chat events.

Callers invoke :meth:`NotificationDispatcher.notify` only after their own
transaction has committed. Nothing raised here reaches the caller.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from ..models.notification import Notification
from ..modules.notifications.bus import publish

logger = logging.getLogger(__name__)

CLAIM_CREATED = "CLAIM_CREATED"
CLAIM_APPROVED = "CLAIM_APPROVED"
CLAIM_REJECTED = "CLAIM_REJECTED"
CLAIM_CANCELLED = "CLAIM_CANCELLED"
CLAIM_COMPLETED = "CLAIM_COMPLETED"
CHAT_MESSAGE = "CHAT_MESSAGE"

_TEMPLATES = {
    CLAIM_CREATED: ("New claim on your alert", "Someone submitted a claim for the pet in your {alert} alert."),
    CLAIM_APPROVED: ("Claim approved", "Your claim was approved. You can now chat to arrange the hand-over."),
    CLAIM_REJECTED: ("Claim rejected", "Your claim was rejected."),
    CLAIM_CANCELLED: ("Claim cancelled", "A claim you are part of was cancelled."),
    CLAIM_COMPLETED: ("Pet delivered", "The hand-over was confirmed. Claim completed!"),
    CHAT_MESSAGE: ("New message", "{preview}"),
}


def _render(event_type: str, payload: dict) -> tuple[str, str]:
    title, body = _TEMPLATES.get(event_type, ("Notification", ""))
    alert = str(payload.get("alertType") or "").lower() or "pet"
    preview = str(payload.get("content") or "")[:120]
    body = body.format(alert=alert, preview=preview)
    reason = payload.get("rejectionReason") or payload.get("comment")
    if event_type in (CLAIM_REJECTED, CLAIM_CANCELLED) and reason:
        body = f"{body} Reason: {reason}"
    return title, body


def _enqueue_push(notification_id: int) -> None:
    from ..tasks.jobs.notifications import deliver_push_notification  # local import keeps celery out of request startup

    deliver_push_notification.delay(int(notification_id))


def notification_to_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "userId": n.user_id,
        "senderId": n.sender_id,
        "type": n.event_type,
        "channel": n.channel,
        "title": n.title,
        "message": n.body,
        "payload": n.payload,
        "status": n.status,
        "read": bool(n.read_at),
        "createdAt": n.created_at.isoformat() if n.created_at else None,
        "sentAt": n.sent_at.isoformat() if n.sent_at else None,
        "readAt": n.read_at.isoformat() if n.read_at else None,
    }


class NotificationDispatcher:
    def __init__(
        self,
        db,
        *,
        push_async: bool = False,
        publisher: Callable[[int, dict], None] = publish,
        enqueue: Callable[[int], None] = _enqueue_push,
    ):
        self.db = db
        self.push_async = push_async
        self.publisher = publisher
        self.enqueue = enqueue

    def notify(
        self,
        event_type: str,
        recipient_id: int,
        payload: dict[str, Any],
        *,
        sender_id: int | None = None,
    ) -> Notification | None:
        session = self.db.session
        try:
            title, body = _render(event_type, payload)
            n = Notification(
                user_id=int(recipient_id),
                sender_id=sender_id,
                event_type=event_type,
                channel="inapp",
                title=title,
                body=body,
                payload=payload,
            )
            session.add(n)
            session.commit()
        except Exception:
            logger.exception("Failed to store %s notification for user %s", event_type, recipient_id)
            session.rollback()
            return None

        try:
            self.publisher(int(recipient_id), {"type": "notification", "notification": notification_to_dict(n)})
        except Exception:
            logger.exception("Failed to publish notification %s", n.id)

        if self.push_async:
            try:
                self.enqueue(int(n.id))
            except Exception:
                logger.exception("Failed to enqueue push for notification %s", n.id)
        return n
