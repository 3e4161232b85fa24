from sqlalchemy import func, Index
from ..extensions import db
from .enums import id_type, alert_status_enum


class _AlertColumns:
    """Columns shared by lost and found alerts."""

    id = db.Column(id_type, primary_key=True)
    species = db.Column(db.String(60))
    description = db.Column(db.Text)
    location = db.Column(db.String(200))
    image = db.Column(db.String(512))
    status = db.Column(alert_status_enum, nullable=False, server_default="ACTIVE", default="ACTIVE")
    resolution_note = db.Column(db.Text)
    resolved_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class LostPetAlert(_AlertColumns, db.Model):
    __tablename__ = "lost_pet_alerts"

    user_id = db.Column(id_type, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    pet_name = db.Column(db.String(120))

    user = db.relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        Index("idx_lost_alerts_user", "user_id"),
        Index("idx_lost_alerts_status", "status"),
    )


class FoundPetAlert(_AlertColumns, db.Model):
    __tablename__ = "found_pet_alerts"

    user_id = db.Column(id_type, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    user = db.relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        Index("idx_found_alerts_user", "user_id"),
        Index("idx_found_alerts_status", "status"),
    )


ALERT_MODELS = {
    "LOST": LostPetAlert,
    "FOUND": FoundPetAlert,
}
