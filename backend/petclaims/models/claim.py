from sqlalchemy import func, Index
from ..extensions import db
from .enums import id_type, json_type, alert_type_enum, claim_status_enum, ACTIVE_CLAIM_STATUSES


ACTIVE_CLAIM_INDEX = "uq_claims_active_claimant_alert"


class Claim(db.Model):
    __tablename__ = "pet_claims"

    id = db.Column(id_type, primary_key=True)
    # Points into lost_pet_alerts or found_pet_alerts depending on alert_type
    alert_id = db.Column(id_type, nullable=False)
    alert_type = db.Column(alert_type_enum, nullable=False)
    claimant_id = db.Column(id_type, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    owner_id = db.Column(id_type, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = db.Column(claim_status_enum, nullable=False, server_default="PENDING", default="PENDING")
    verification_details = db.Column(json_type, nullable=False)
    verification_images = db.Column(json_type, nullable=False)
    # Optimistic concurrency counter, bumped on every status change
    version = db.Column(db.Integer, nullable=False, server_default="1", default=1)

    verified_at = db.Column(db.DateTime(timezone=True))
    rejection_reason = db.Column(db.Text)
    meeting_location = db.Column(db.String(200))
    meeting_date = db.Column(db.DateTime(timezone=True))
    meeting_notes = db.Column(db.Text)
    completed_at = db.Column(db.DateTime(timezone=True))
    cancelled_at = db.Column(db.DateTime(timezone=True))

    hidden_by_claimant = db.Column(db.Boolean, nullable=False, server_default=db.false(), default=False)
    hidden_by_owner = db.Column(db.Boolean, nullable=False, server_default=db.false(), default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    claimant = db.relationship("User", back_populates="claims", foreign_keys=[claimant_id])
    owner = db.relationship("User", back_populates="received_claims", foreign_keys=[owner_id])
    history = db.relationship(
        "ClaimStatusHistory",
        back_populates="claim",
        order_by="ClaimStatusHistory.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        # At most one live claim per claimant and alert
        Index(
            ACTIVE_CLAIM_INDEX,
            "claimant_id",
            "alert_type",
            "alert_id",
            unique=True,
            postgresql_where=status.in_(ACTIVE_CLAIM_STATUSES),
            sqlite_where=status.in_(ACTIVE_CLAIM_STATUSES),
        ),
        Index("idx_claims_alert", "alert_type", "alert_id"),
        Index("idx_claims_claimant", "claimant_id"),
        Index("idx_claims_owner", "owner_id"),
        Index("idx_claims_status", "status"),
    )

    def other_party(self, user_id: int) -> int:
        return int(self.owner_id) if int(user_id) == int(self.claimant_id) else int(self.claimant_id)
