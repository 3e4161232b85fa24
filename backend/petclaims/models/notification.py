from sqlalchemy import Index, func
from ..extensions import db
from .enums import id_type, json_type, notification_channel_enum, notification_status_enum


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(id_type, primary_key=True)
    user_id = db.Column(id_type, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sender_id = db.Column(id_type, db.ForeignKey("users.id", ondelete="SET NULL"))
    event_type = db.Column(db.String(60), nullable=False)
    channel = db.Column(notification_channel_enum, nullable=False, server_default="inapp", default="inapp")
    title = db.Column(db.String(200))
    body = db.Column(db.Text)
    payload = db.Column(json_type)
    status = db.Column(notification_status_enum, nullable=False, server_default="queued", default="queued")
    sent_at = db.Column(db.DateTime(timezone=True))
    read_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    user = db.relationship("User", back_populates="notifications", foreign_keys=[user_id])
    sender = db.relationship("User", foreign_keys=[sender_id])

    __table_args__ = (
        Index("idx_notifications_user_status", "user_id", "status"),
    )
