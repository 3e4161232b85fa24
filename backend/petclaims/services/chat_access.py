from __future__ import annotations

from dataclasses import dataclass

from ..errors import ChatAccessRevoked

NO_APPROVED_CLAIM = "NoApprovedClaim"


@dataclass(frozen=True)
class ChatAccessDecision:
    allowed: bool
    reason: str | None = None
    claim_id: int | None = None

    def __bool__(self) -> bool:
        return self.allowed

    def to_dict(self) -> dict:
        return {"allowed": self.allowed, "reason": self.reason, "claimId": self.claim_id}


class ChatAccessGate:
    """Decides whether two users may talk about an alert.

    Evaluated from the stored claims on every call; an approval that is later
    cancelled stops granting access immediately.
    """

    def __init__(self, store):
        self.store = store

    def can_open_chat(
        self,
        requester_id: int,
        counterpart_id: int,
        alert_id: int,
        alert_type: str | None = None,
    ) -> ChatAccessDecision:
        if int(requester_id) == int(counterpart_id):
            return ChatAccessDecision(False, NO_APPROVED_CLAIM)
        claim = self.store.find_approved_between(requester_id, counterpart_id, alert_id, alert_type)
        if claim is None:
            return ChatAccessDecision(False, NO_APPROVED_CLAIM)
        return ChatAccessDecision(True, None, int(claim.id))

    def ensure_can_send(self, room, sender_id: int) -> ChatAccessDecision:
        decision = self.can_open_chat(sender_id, room.counterpart_of(sender_id), room.alert_id, room.alert_type)
        if not decision.allowed:
            raise ChatAccessRevoked(reason=decision.reason, roomId=room.id)
        return decision
