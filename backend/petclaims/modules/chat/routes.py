from __future__ import annotations

from flask import Blueprint, jsonify, request, g

from ...models.chat import ChatMessage, ChatRoom
from ...schemas.chat import OpenRoomSchema, SendMessageSchema, message_schema, messages_schema
from ...services import get_services
from ...services.claim_verification import normalize_alert_type

bp = Blueprint("chat", __name__, url_prefix="/chat")

_open_schema = OpenRoomSchema()
_send_schema = SendMessageSchema()


def _json_error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def _current_user_id() -> int | None:
    uid = getattr(g, "current_user_id", None)
    return int(uid) if uid is not None else None


def _room_to_dict(room: ChatRoom, uid: int, *, last: ChatMessage | None = None) -> dict:
    services = get_services()
    return {
        "id": room.id,
        "alertId": room.alert_id,
        "alertType": room.alert_type,
        "claimId": room.claim_id,
        "claimantId": room.claimant_id,
        "ownerId": room.owner_id,
        "otherUserId": room.counterpart_of(uid),
        # History stays readable; sending needs a live approved claim
        "canSend": services.chat.can_send(room, uid),
        "lastMessage": message_schema.dump(last) if last else None,
        "updatedAt": room.updated_at.isoformat() if room.updated_at else None,
    }


@bp.get("/access")
def chat_access():
    """Query params: counterpartId, alertId, alertType."""
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    try:
        counterpart_id = int(request.args.get("counterpartId", ""))
        alert_id = int(request.args.get("alertId", ""))
    except ValueError:
        return _json_error("counterpartId and alertId are required", 400)
    alert_type = normalize_alert_type(request.args.get("alertType"))
    decision = get_services().gate.can_open_chat(uid, counterpart_id, alert_id, alert_type)
    return jsonify(decision.to_dict())


@bp.post("/rooms")
def open_room():
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    data = _open_schema.load(request.get_json(silent=True) or {})
    alert_type = normalize_alert_type(data.get("alert_type"))
    room, created = get_services().chat.open_room(uid, data["counterpart_id"], data["alert_id"], alert_type)
    return jsonify({"room": _room_to_dict(room, uid)}), (201 if created else 200)


@bp.get("/rooms")
def list_rooms():
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    chat = get_services().chat
    rooms = chat.list_rooms(uid)
    return jsonify({"rooms": [_room_to_dict(r, uid, last=chat.last_message(r)) for r in rooms]})


@bp.get("/rooms/<int:room_id>")
def get_room(room_id: int):
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    room = get_services().chat.get_room(room_id, uid)
    data = _room_to_dict(room, uid)
    data["messages"] = messages_schema.dump(room.messages)
    return jsonify({"room": data})


@bp.post("/rooms/<int:room_id>/messages")
def send_message(room_id: int):
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    data = _send_schema.load(request.get_json(silent=True) or {})
    msg = get_services().chat.send_message(room_id, uid, data.get("content"))
    return jsonify({"message": message_schema.dump(msg)}), 201
