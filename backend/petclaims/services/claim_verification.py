"""Admission checks for new claims.

A claim is only stored once its alert type, evidence and parties are valid.
Checks run cheapest first: payload shape, then alert lookup, then the
duplicate query. The partial unique index on ``pet_claims`` backs the
duplicate rule when two submissions race.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from ..errors import (
    AlertClosed,
    AlertNotFound,
    DuplicatePendingClaim,
    InsufficientEvidence,
    InvalidAlertType,
    MissingEvidence,
    SelfClaimForbidden,
    TooManyImages,
)
from ..models.claim import Claim
from ..models.enums import ALERT_TYPES
from .notifications import CLAIM_CREATED

logger = logging.getLogger(__name__)


def normalize_alert_type(alert_type: Any) -> str:
    """Upper-case and validate an alert type. There is no default."""
    if not isinstance(alert_type, str) or alert_type.strip().upper() not in ALERT_TYPES:
        raise InvalidAlertType()
    return alert_type.strip().upper()


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class ClaimVerificationEngine:
    def __init__(self, db, store, alerts, notifier, *, min_features_length: int = 10, max_images: int = 5):
        self.db = db
        self.store = store
        self.alerts = alerts
        self.notifier = notifier
        self.min_features_length = min_features_length
        self.max_images = max_images

    def validate_evidence(self, verification_details: dict | None, verification_images: Iterable[Any] | None) -> tuple[dict, list[str]]:
        details = verification_details or {}
        features = _clean(details.get("pet_features", details.get("petFeatures"))) or ""
        if len(features) < self.min_features_length:
            raise InsufficientEvidence(minLength=self.min_features_length)

        images = [str(i).strip() for i in (verification_images or []) if i is not None and str(i).strip()]
        if not images:
            raise MissingEvidence()
        if len(images) > self.max_images:
            raise TooManyImages(maxImages=self.max_images)

        cleaned = {
            "microchipNumber": _clean(details.get("microchip_number", details.get("microchipNumber"))),
            "petFeatures": features,
            "additionalInfo": _clean(details.get("additional_info", details.get("additionalInfo"))),
        }
        return cleaned, images

    def submit_claim(
        self,
        alert_id: int,
        alert_type: Any,
        claimant_id: int,
        verification_details: dict | None,
        verification_images: Iterable[Any] | None,
    ) -> Claim:
        alert_type = normalize_alert_type(alert_type)
        details, images = self.validate_evidence(verification_details, verification_images)

        owner = self.alerts.get_alert_owner(alert_id, alert_type)
        if owner is None:
            raise AlertNotFound()
        if owner.alert_status == "RESOLVED":
            raise AlertClosed()
        if int(owner.owner_id) == int(claimant_id):
            raise SelfClaimForbidden()

        existing = self.store.find_active_by_claimant_and_alert(claimant_id, alert_id, alert_type)
        if existing is not None:
            raise DuplicatePendingClaim(claimId=existing.id)

        claim = Claim(
            alert_id=int(alert_id),
            alert_type=alert_type,
            claimant_id=int(claimant_id),
            owner_id=int(owner.owner_id),
            status="PENDING",
            version=1,
            verification_details=details,
            verification_images=images,
        )
        try:
            self.store.insert(claim)
            self.store.add_history(claim.id, "PENDING", int(claimant_id))
            self.db.session.commit()
        except DuplicatePendingClaim:
            raise
        except Exception:
            self.db.session.rollback()
            raise
        logger.info("Claim %s created by user %s on %s alert %s", claim.id, claimant_id, alert_type, alert_id)

        self.notifier.notify(
            CLAIM_CREATED,
            claim.owner_id,
            {
                "claimId": claim.id,
                "alertId": claim.alert_id,
                "alertType": claim.alert_type,
                "status": claim.status,
            },
            sender_id=claim.claimant_id,
        )
        return claim
