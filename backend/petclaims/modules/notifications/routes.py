from __future__ import annotations

from datetime import datetime, timezone
from flask import Blueprint, jsonify, request, Response, g, stream_with_context
import json
import time
from queue import Empty
from ...models.notification import Notification
from ...extensions import db
from ...security import verify_token
from ...services.notifications import notification_to_dict
from .bus import subscribe, unsubscribe

bp = Blueprint("notifications", __name__, url_prefix="/notifications")

KEEPALIVE_SECONDS = 15


def _json_error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def _current_user_id() -> int | None:
    uid = getattr(g, "current_user_id", None)
    return int(uid) if uid is not None else None


@bp.get("")
def list_notifications():
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    try:
        limit = int(request.args.get("limit", 20))
    except (TypeError, ValueError):
        limit = 20
    q = Notification.query.filter(Notification.user_id == uid)
    if (request.args.get("unread") or "").lower() in {"1", "true", "yes"}:
        q = q.filter(Notification.read_at.is_(None))
    rows = (
        q.order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(max(1, min(100, limit)))
        .all()
    )
    return jsonify({"notifications": [notification_to_dict(n) for n in rows]})


@bp.get("/unread-count")
def unread_count():
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    count = Notification.query.filter(Notification.user_id == uid, Notification.read_at.is_(None)).count()
    return jsonify({"count": count})


@bp.route("/<int:notif_id>/read", methods=["PATCH", "PUT"])
def mark_read(notif_id: int):
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    n = db.session.get(Notification, notif_id)
    if not n or int(n.user_id) != uid:
        return _json_error("Not found", 404)
    if not n.read_at:
        n.read_at = datetime.now(timezone.utc)
        n.status = "read"
        db.session.add(n)
        db.session.commit()
    return jsonify({"notification": notification_to_dict(n)})


@bp.get("/stream")
def stream_notifications():
    """Server-Sent Events stream of the caller's notifications.

    EventSource cannot set headers, so ?token=<bearer token> is accepted too.
    """
    uid = _current_user_id()
    if not uid and request.args.get("token"):
        uid = verify_token(request.args["token"])
    if not uid:
        return _json_error("Authentication required", 401)

    q = subscribe(uid)

    def event_stream():
        try:
            # Initial comment to establish stream
            yield ": connected\n\n"
            while True:
                try:
                    # Keep below gunicorn's timeout to ensure periodic yields
                    evt = q.get(timeout=KEEPALIVE_SECONDS)
                except Empty:
                    yield "event: ping\n" + f"data: {json.dumps({'ts': int(time.time())})}\n\n"
                    continue
                yield "event: notification\n" + f"data: {json.dumps(evt)}\n\n"
        finally:
            unsubscribe(uid, q)

    headers = {
        "Content-Type": "text/event-stream",
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        "X-Accel-Buffering": "no",
    }
    return Response(stream_with_context(event_stream()), headers=headers)


@bp.put("/read-all")
def mark_all_read():
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    updated = (
        Notification.query
        .filter(Notification.user_id == uid, Notification.read_at.is_(None))
        .update({"read_at": datetime.now(timezone.utc), "status": "read"}, synchronize_session=False)
    )
    db.session.commit()
    return jsonify({"updated": updated})


@bp.delete("/<int:notif_id>")
def delete_notification(notif_id: int):
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    n = db.session.get(Notification, notif_id)
    if not n or int(n.user_id) != uid:
        return _json_error("Not found", 404)
    db.session.delete(n)
    db.session.commit()
    return jsonify({"deleted": True, "id": notif_id})


@bp.delete("")
def delete_all_notifications():
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    deleted = Notification.query.filter(Notification.user_id == uid).delete(synchronize_session=False)
    db.session.commit()
    return jsonify({"deleted": deleted})
