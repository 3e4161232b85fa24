"""Persistence gateway for claims.

All reads and writes of ``pet_claims`` go through :class:`ClaimStore` so the
optimistic version check and the uniqueness translation live in one place.
The store flushes but never commits; the calling service owns the transaction.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy import and_, or_, update
from sqlalchemy.exc import IntegrityError

from ..errors import ConcurrentModification, DuplicatePendingClaim
from ..models.claim import ACTIVE_CLAIM_INDEX, Claim
from ..models.claim_history import ClaimStatusHistory
from ..models.enums import ACTIVE_CLAIM_STATUSES

logger = logging.getLogger(__name__)

# SQLite names the columns instead of the index
_SQLITE_ACTIVE_CLAIM_COLUMNS = "pet_claims.claimant_id, pet_claims.alert_type, pet_claims.alert_id"


def _violates_active_claim_index(exc: IntegrityError) -> bool:
    diag = getattr(exc.orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name == ACTIVE_CLAIM_INDEX
    message = str(exc.orig)
    return ACTIVE_CLAIM_INDEX in message or _SQLITE_ACTIVE_CLAIM_COLUMNS in message


class ClaimStore:
    def __init__(self, db):
        self.db = db

    @property
    def session(self):
        return self.db.session

    def insert(self, claim: Claim) -> Claim:
        """Add a new claim and flush it so the partial unique index is checked now."""
        self.session.add(claim)
        try:
            self.session.flush()
        except IntegrityError as exc:
            self.session.rollback()
            if not _violates_active_claim_index(exc):
                raise
            logger.info(
                "Rejected concurrent duplicate claim claimant=%s alert=%s/%s",
                claim.claimant_id, claim.alert_type, claim.alert_id,
            )
            raise DuplicatePendingClaim() from exc
        return claim

    def find_by_id(self, claim_id: int) -> Claim | None:
        return self.session.get(Claim, int(claim_id))

    def find_active_by_claimant_and_alert(self, claimant_id: int, alert_id: int, alert_type: str) -> Claim | None:
        return (
            Claim.query
            .filter(
                Claim.claimant_id == int(claimant_id),
                Claim.alert_id == int(alert_id),
                Claim.alert_type == alert_type,
                Claim.status.in_(ACTIVE_CLAIM_STATUSES),
            )
            .first()
        )

    def update_status(self, claim_id: int, expected_version: int, new_status: str, **fields: Any) -> Claim:
        """Conditionally move a claim to ``new_status``.

        The UPDATE only matches when the row still carries ``expected_version``;
        otherwise somebody else changed the claim since it was read.
        """
        values = dict(fields)
        values.update(
            status=new_status,
            version=Claim.version + 1,
            updated_at=datetime.now(timezone.utc),
        )
        stmt = (
            update(Claim)
            .where(Claim.id == int(claim_id), Claim.version == int(expected_version))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount != 1:
            raise ConcurrentModification()
        claim = self.find_by_id(claim_id)
        # Refresh the identity-map copy with what the UPDATE wrote
        self.session.refresh(claim)
        return claim

    def add_history(self, claim_id: int, status: str, actor_id: int | None, comment: str | None = None) -> ClaimStatusHistory:
        row = ClaimStatusHistory(claim_id=int(claim_id), status=status, actor_id=actor_id, comment=comment)
        self.session.add(row)
        return row

    def history(self, claim_id: int) -> list[ClaimStatusHistory]:
        return (
            ClaimStatusHistory.query
            .filter(ClaimStatusHistory.claim_id == int(claim_id))
            .order_by(ClaimStatusHistory.id.asc())
            .all()
        )

    def find_approved_between(
        self,
        user_a: int,
        user_b: int,
        alert_id: int,
        alert_type: str | None = None,
    ) -> Claim | None:
        """Approved claim linking the two users on an alert, in either direction."""
        pair = or_(
            and_(Claim.claimant_id == int(user_a), Claim.owner_id == int(user_b)),
            and_(Claim.claimant_id == int(user_b), Claim.owner_id == int(user_a)),
        )
        q = Claim.query.filter(pair, Claim.alert_id == int(alert_id), Claim.status == "APPROVED")
        if alert_type:
            q = q.filter(Claim.alert_type == alert_type)
        return q.order_by(Claim.updated_at.desc()).first()

    def list_for_user(
        self,
        user_id: int,
        role: str = "sent",
        statuses: Iterable[str] | None = None,
        limit: int = 100,
    ) -> list[Claim]:
        if role == "received":
            q = Claim.query.filter(Claim.owner_id == int(user_id), Claim.hidden_by_owner.is_(False))
        else:
            q = Claim.query.filter(Claim.claimant_id == int(user_id), Claim.hidden_by_claimant.is_(False))
        statuses = list(statuses or [])
        if statuses:
            q = q.filter(Claim.status.in_(statuses))
        return q.order_by(Claim.created_at.desc(), Claim.id.desc()).limit(max(1, min(200, int(limit)))).all()
