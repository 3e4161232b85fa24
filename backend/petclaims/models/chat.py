from sqlalchemy import func, Index, UniqueConstraint
from ..extensions import db
from .enums import id_type, alert_type_enum


class ChatRoom(db.Model):
    __tablename__ = "chat_rooms"

    id = db.Column(id_type, primary_key=True)
    alert_type = db.Column(alert_type_enum, nullable=False)
    alert_id = db.Column(id_type, nullable=False)
    claimant_id = db.Column(id_type, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    owner_id = db.Column(id_type, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Claim whose approval opened the room; later claims on the same pair reuse it
    claim_id = db.Column(id_type, db.ForeignKey("pet_claims.id", ondelete="SET NULL"))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    claimant = db.relationship("User", foreign_keys=[claimant_id])
    owner = db.relationship("User", foreign_keys=[owner_id])
    messages = db.relationship(
        "ChatMessage",
        back_populates="room",
        order_by="ChatMessage.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("alert_type", "alert_id", "claimant_id", "owner_id", name="uq_chat_rooms_alert_pair"),
        Index("idx_chat_rooms_claimant", "claimant_id"),
        Index("idx_chat_rooms_owner", "owner_id"),
    )

    def has_participant(self, user_id: int) -> bool:
        return int(user_id) in (int(self.claimant_id), int(self.owner_id))

    def counterpart_of(self, user_id: int) -> int:
        return int(self.owner_id) if int(user_id) == int(self.claimant_id) else int(self.claimant_id)


class ChatMessage(db.Model):
    __tablename__ = "chat_messages"

    id = db.Column(id_type, primary_key=True)
    room_id = db.Column(id_type, db.ForeignKey("chat_rooms.id", ondelete="CASCADE"), nullable=False)
    sender_id = db.Column(id_type, db.ForeignKey("users.id", ondelete="SET NULL"))
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    room = db.relationship("ChatRoom", back_populates="messages")
    sender = db.relationship("User", foreign_keys=[sender_id])

    __table_args__ = (
        Index("idx_chat_messages_room", "room_id", "created_at"),
    )
