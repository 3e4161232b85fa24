from __future__ import annotations

import logging
from datetime import datetime, timezone

import requests
from flask import current_app

from petclaims.extensions import db
from petclaims.integrations.push.client import send_push
from petclaims.models.notification import Notification
from petclaims.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)

_flask_app = None


def _app():
    global _flask_app
    if _flask_app is None:
        from petclaims import create_app
        _flask_app = create_app()
    return _flask_app


def relay_notification(notification_id: int) -> str:
    """Push a stored notification to the recipient's device. Needs an app context.

    Returns the resulting notification status.
    """
    n = db.session.get(Notification, int(notification_id))
    if n is None:
        logger.warning("Notification %s vanished before push relay", notification_id)
        return "missing"
    if n.status in ("sent", "read"):
        return n.status
    user = n.user
    try:
        send_push(
            getattr(user, "push_token", None) or "",
            n.title or "",
            n.body or "",
            dict(n.payload or {}, type=n.event_type, notificationId=n.id),
            gateway_url=current_app.config.get("PUSH_GATEWAY_URL"),
            api_key=current_app.config.get("PUSH_GATEWAY_KEY"),
        )
        n.status = "sent"
        n.sent_at = datetime.now(timezone.utc)
    except (RuntimeError, requests.RequestException) as exc:
        logger.warning("Push relay failed for notification %s: %s", n.id, exc)
        n.status = "failed"
    db.session.add(n)
    db.session.commit()
    return n.status


@celery_app.task
def deliver_push_notification(notification_id: int) -> str:
    with _app().app_context():
        return relay_notification(notification_id)
