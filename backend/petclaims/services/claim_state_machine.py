"""Claim lifecycle transitions.

    PENDING  -> APPROVED | REJECTED | CANCELLED
    APPROVED -> COMPLETED | CANCELLED

REJECTED, COMPLETED and CANCELLED are terminal.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ..errors import ClaimNotFound, IllegalTransition, Unauthorized
from ..models.claim import Claim
from .notifications import CLAIM_APPROVED, CLAIM_CANCELLED, CLAIM_COMPLETED, CLAIM_REJECTED

logger = logging.getLogger(__name__)

OWNER = "owner"
CLAIMANT = "claimant"
EITHER = "either"

# (from, to) -> (who may trigger it, event sent to the other party)
TRANSITIONS: dict[tuple[str, str], tuple[str, str]] = {
    ("PENDING", "APPROVED"): (OWNER, CLAIM_APPROVED),
    ("PENDING", "REJECTED"): (OWNER, CLAIM_REJECTED),
    ("PENDING", "CANCELLED"): (CLAIMANT, CLAIM_CANCELLED),
    ("APPROVED", "COMPLETED"): (OWNER, CLAIM_COMPLETED),
    ("APPROVED", "CANCELLED"): (EITHER, CLAIM_CANCELLED),
}

VERIFY_ACTIONS = {"APPROVE": "APPROVED", "REJECT": "REJECTED"}


def _actor_matches(role: str, is_owner: bool, is_claimant: bool) -> bool:
    if role == OWNER:
        return is_owner
    if role == CLAIMANT:
        return is_claimant
    return is_owner or is_claimant


def allowed_targets(status: str, actor_id: int, owner_id: int, claimant_id: int) -> list[str]:
    """Statuses ``actor_id`` may move a claim to from ``status``; used by clients to render actions."""
    is_owner = int(actor_id) == int(owner_id)
    is_claimant = int(actor_id) == int(claimant_id)
    return [
        target
        for (current, target), (role, _event) in TRANSITIONS.items()
        if current == status and _actor_matches(role, is_owner, is_claimant)
    ]


class ClaimStateMachine:
    def __init__(self, db, store, alerts, notifier):
        self.db = db
        self.store = store
        self.alerts = alerts
        self.notifier = notifier

    def transition(
        self,
        claim_id: int,
        actor_id: int,
        target_status: Any,
        *,
        comment: str | None = None,
        rejection_reason: str | None = None,
        meeting_location: str | None = None,
        meeting_date: datetime | None = None,
        meeting_notes: str | None = None,
    ) -> Claim:
        claim = self.store.find_by_id(claim_id)
        if claim is None:
            raise ClaimNotFound()

        actor = int(actor_id)
        is_owner = actor == int(claim.owner_id)
        is_claimant = actor == int(claim.claimant_id)
        if not (is_owner or is_claimant):
            raise Unauthorized()

        # Snapshot what was read; the conditional update compares against it
        current = claim.status
        read_version = int(claim.version)
        target = str(target_status or "").strip().upper()

        edge = TRANSITIONS.get((current, target))
        if edge is None:
            raise IllegalTransition(
                f"Cannot move a {current} claim to {target or 'an empty status'}",
                fromStatus=current,
                toStatus=target,
            )
        role, event = edge
        if not _actor_matches(role, is_owner, is_claimant):
            raise Unauthorized()

        now = datetime.now(timezone.utc)
        fields: dict[str, Any] = {}
        if target in ("APPROVED", "REJECTED"):
            fields["verified_at"] = now
        if target == "APPROVED":
            fields.update(
                meeting_location=meeting_location,
                meeting_date=meeting_date,
                meeting_notes=meeting_notes,
            )
        elif target == "REJECTED":
            fields["rejection_reason"] = rejection_reason
        elif target == "COMPLETED":
            fields["completed_at"] = now
        elif target == "CANCELLED":
            fields["cancelled_at"] = now

        alert_id, alert_type = claim.alert_id, claim.alert_type
        try:
            if target == "COMPLETED":
                self.alerts.mark_resolved(alert_id, alert_type, comment or f"Pet returned through claim {claim.id}")
            updated = self.store.update_status(claim.id, read_version, target, **fields)
            self.store.add_history(updated.id, target, actor, comment or rejection_reason)
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise
        logger.info("Claim %s moved %s -> %s by user %s", updated.id, current, target, actor)

        payload: dict[str, Any] = {
            "claimId": updated.id,
            "alertId": updated.alert_id,
            "alertType": updated.alert_type,
            "status": updated.status,
            "previousStatus": current,
        }
        if comment:
            payload["comment"] = comment
        if target == "REJECTED" and rejection_reason:
            payload["rejectionReason"] = rejection_reason
        self.notifier.notify(event, updated.other_party(actor), payload, sender_id=actor)
        return updated

    def verify(self, claim_id: int, actor_id: int, action: str, **kwargs: Any) -> Claim:
        key = str(action or "").strip().upper()
        target = VERIFY_ACTIONS.get(key)
        if target is None:
            raise IllegalTransition(f"Unknown verification action {key or '(empty)'}", action=key)
        return self.transition(claim_id, actor_id, target, **kwargs)

    def complete(self, claim_id: int, actor_id: int, comment: str | None = None) -> Claim:
        return self.transition(claim_id, actor_id, "COMPLETED", comment=comment)

    def cancel(self, claim_id: int, actor_id: int, comment: str | None = None) -> Claim:
        return self.transition(claim_id, actor_id, "CANCELLED", comment=comment)
