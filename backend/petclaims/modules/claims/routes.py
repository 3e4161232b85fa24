from flask import Blueprint, current_app, jsonify, request, g

from ...models.claim import Claim
from ...schemas.claim import (
    ClaimSubmitSchema,
    ClaimTransitionSchema,
    ClaimVerifySchema,
    claim_schema,
    history_schema,
)
from ...services import get_services
from ...services.claim_state_machine import allowed_targets

bp = Blueprint("claims", __name__, url_prefix="/claims")

_submit_schema = ClaimSubmitSchema()
_transition_schema = ClaimTransitionSchema()
_verify_schema = ClaimVerifySchema()


def _json_error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def _current_user_id() -> int | None:
    uid = getattr(g, "current_user_id", None)
    return int(uid) if uid is not None else None


def _alert_summary(c: Claim) -> dict | None:
    alert = get_services().alerts.get_alert(c.alert_id, c.alert_type)
    if alert is None:
        return None
    return {
        "id": alert.id,
        "type": c.alert_type,
        "status": alert.status,
        "species": alert.species,
        "petName": getattr(alert, "pet_name", None),
        "location": alert.location,
        "image": alert.image,
    }


def _claim_to_dict(c: Claim, uid: int) -> dict:
    data = claim_schema.dump(c)
    data["role"] = "claimant" if int(uid) == int(c.claimant_id) else "owner"
    data["allowedTransitions"] = allowed_targets(c.status, uid, c.owner_id, c.claimant_id)
    data["alert"] = _alert_summary(c)
    return data


def _transition_kwargs(data: dict) -> dict:
    return {
        "comment": data.get("comment"),
        "rejection_reason": data.get("rejection_reason"),
        "meeting_location": data.get("meeting_location"),
        "meeting_date": data.get("meeting_date"),
        "meeting_notes": data.get("meeting_notes"),
    }


def _after_transition(claim: Claim):
    """Open the chat room once a claim is approved. Failure only costs convenience."""
    if claim.status != "APPROVED":
        return None
    try:
        room, _created = get_services().chat.ensure_room_for_claim(claim)
        return room.id
    except Exception:
        current_app.logger.exception("Could not open chat room for claim %s", claim.id)
        return None


@bp.post("")
def create_claim():
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    data = _submit_schema.load(request.get_json(silent=True) or {})
    claim = get_services().verification.submit_claim(
        data["alert_id"],
        data.get("alert_type"),
        uid,
        data.get("verification_details"),
        data.get("verification_images"),
    )
    return (
        jsonify({
            "claim": _claim_to_dict(claim, uid),
            "message": "Claim submitted and awaiting review",
        }),
        201,
    )


@bp.get("")
def list_claims():
    """List the caller's claims.

    Query params:
      - role: 'sent' (claims I made, default) or 'received' (claims on my alerts)
      - status: comma-separated statuses
      - limit: int (default 100)
    """
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    role = (request.args.get("role") or "sent").lower()
    if role not in {"sent", "received"}:
        return _json_error("Invalid role. Use sent or received.", 400)
    try:
        limit = int(request.args.get("limit", 100))
    except (TypeError, ValueError):
        return _json_error("Invalid limit", 400)
    claims = get_services().views.list_for_user(uid, role, request.args.get("status"), limit)
    return jsonify({"claims": [_claim_to_dict(c, uid) for c in claims]})


@bp.get("/received")
def list_received_claims():
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    claims = get_services().views.list_for_user(uid, "received", request.args.get("status"))
    return jsonify({"claims": [_claim_to_dict(c, uid) for c in claims]})


@bp.get("/<int:claim_id>")
def get_claim(claim_id: int):
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    claim = get_services().views.get_for_party(claim_id, uid)
    return jsonify({"claim": _claim_to_dict(claim, uid)})


@bp.get("/<int:claim_id>/history")
def get_claim_history(claim_id: int):
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    rows = get_services().views.history_for_party(claim_id, uid)
    return jsonify({"history": history_schema.dump(rows)})


@bp.put("/<int:claim_id>/status")
def update_claim_status(claim_id: int):
    """Move a claim along its lifecycle.

    Body JSON: { targetStatus, comment?, rejectionReason?, meetingLocation?, meetingDate?, meetingNotes? }
    """
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    data = _transition_schema.load(request.get_json(silent=True) or {})
    claim = get_services().state_machine.transition(claim_id, uid, data["target_status"], **_transition_kwargs(data))
    room_id = _after_transition(claim)
    return jsonify({"claim": _claim_to_dict(claim, uid), "chatRoomId": room_id})


@bp.post("/<int:claim_id>/verify")
def verify_claim(claim_id: int):
    """Owner decision. Body JSON: { action: 'APPROVE' | 'REJECT', rejectionReason?, meeting* }"""
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    data = _verify_schema.load(request.get_json(silent=True) or {})
    claim = get_services().state_machine.verify(claim_id, uid, data["action"], **_transition_kwargs(data))
    room_id = _after_transition(claim)
    return jsonify({"claim": _claim_to_dict(claim, uid), "chatRoomId": room_id})


@bp.post("/<int:claim_id>/complete")
def complete_claim(claim_id: int):
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    data = request.get_json(silent=True) or {}
    claim = get_services().state_machine.complete(claim_id, uid, comment=data.get("comment"))
    return jsonify({"claim": _claim_to_dict(claim, uid)})


@bp.post("/<int:claim_id>/cancel")
def cancel_claim(claim_id: int):
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    data = request.get_json(silent=True) or {}
    claim = get_services().state_machine.cancel(claim_id, uid, comment=data.get("comment"))
    return jsonify({"claim": _claim_to_dict(claim, uid)})


@bp.delete("/<int:claim_id>")
def hide_claim(claim_id: int):
    """Remove a finished claim from the caller's list. The record itself is kept."""
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    get_services().views.hide_for_user(claim_id, uid)
    return jsonify({"hidden": True, "claimId": claim_id})
