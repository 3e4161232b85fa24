from __future__ import annotations

from ..errors import ClaimNotFound, ClaimStillActive
from ..models.claim import Claim
from ..models.enums import TERMINAL_CLAIM_STATUSES


class ClaimViews:
    """Per-user reads of claims. Only the two parties ever see a claim."""

    def __init__(self, db, store):
        self.db = db
        self.store = store

    def get_for_party(self, claim_id: int, user_id: int) -> Claim:
        claim = self.store.find_by_id(claim_id)
        # Non-parties get a 404 so claim ids cannot be probed
        if claim is None or int(user_id) not in (int(claim.claimant_id), int(claim.owner_id)):
            raise ClaimNotFound()
        return claim

    def list_for_user(self, user_id: int, role: str = "sent", status: str | None = None, limit: int = 100) -> list[Claim]:
        statuses = [s.strip().upper() for s in (status or "").split(",") if s.strip()]
        return self.store.list_for_user(user_id, role, statuses, limit)

    def history_for_party(self, claim_id: int, user_id: int):
        claim = self.get_for_party(claim_id, user_id)
        return self.store.history(claim.id)

    def hide_for_user(self, claim_id: int, user_id: int) -> Claim:
        claim = self.get_for_party(claim_id, user_id)
        if claim.status not in TERMINAL_CLAIM_STATUSES:
            raise ClaimStillActive()
        if int(user_id) == int(claim.claimant_id):
            claim.hidden_by_claimant = True
        if int(user_id) == int(claim.owner_id):
            claim.hidden_by_owner = True
        self.db.session.add(claim)
        self.db.session.commit()
        return claim
