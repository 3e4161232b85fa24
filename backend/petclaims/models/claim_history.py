from sqlalchemy import Index, func
from ..extensions import db
from .enums import id_type, claim_status_enum


class ClaimStatusHistory(db.Model):
    __tablename__ = "claim_status_history"

    id = db.Column(id_type, primary_key=True)
    claim_id = db.Column(id_type, db.ForeignKey("pet_claims.id", ondelete="CASCADE"), nullable=False)
    status = db.Column(claim_status_enum, nullable=False)
    actor_id = db.Column(id_type, db.ForeignKey("users.id", ondelete="SET NULL"))
    comment = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    claim = db.relationship("Claim", back_populates="history")
    actor = db.relationship("User", foreign_keys=[actor_id])

    __table_args__ = (
        Index("idx_claim_history_claim", "claim_id"),
    )
