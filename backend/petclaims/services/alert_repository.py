from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from ..errors import AlertNotFound
from ..models.alert import ALERT_MODELS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertOwner:
    owner_id: int
    alert_status: str


class AlertRepository:
    """Lookup of lost/found alerts. ``alert_type`` picks the table."""

    def __init__(self, db):
        self.db = db

    def _get(self, alert_id: int, alert_type: str):
        model = ALERT_MODELS.get(alert_type)
        if model is None:
            return None
        return self.db.session.get(model, int(alert_id))

    def get_alert(self, alert_id: int, alert_type: str):
        return self._get(alert_id, alert_type)

    def get_alert_owner(self, alert_id: int, alert_type: str) -> AlertOwner | None:
        alert = self._get(alert_id, alert_type)
        if alert is None:
            return None
        return AlertOwner(owner_id=int(alert.user_id), alert_status=alert.status)

    def mark_resolved(self, alert_id: int, alert_type: str, resolution_note: str | None = None) -> None:
        # Flushed with the caller's transaction; the claim update commits it
        alert = self._get(alert_id, alert_type)
        if alert is None:
            raise AlertNotFound()
        alert.status = "RESOLVED"
        alert.resolution_note = resolution_note
        alert.resolved_at = datetime.now(timezone.utc)
        self.db.session.add(alert)
        logger.info("Alert %s/%s marked resolved", alert_type, alert_id)
