from sqlalchemy import func
from ..extensions import db
from .enums import id_type


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(id_type, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(120))
    password_hash = db.Column(db.Text)
    profile_image = db.Column(db.String(512))
    # Device token registered by the mobile app for push delivery
    push_token = db.Column(db.String(512))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    claims = db.relationship(
        "Claim",
        back_populates="claimant",
        foreign_keys="Claim.claimant_id",
        lazy=True,
    )
    received_claims = db.relationship(
        "Claim",
        back_populates="owner",
        foreign_keys="Claim.owner_id",
        lazy=True,
    )
    notifications = db.relationship(
        "Notification",
        back_populates="user",
        foreign_keys="Notification.user_id",
        lazy=True,
        cascade="all, delete-orphan",
    )
