"""Chat rooms between a claimant and an alert owner.

Every join and every message send goes through :class:`ChatAccessGate`.
Rooms are never deleted, so history stays readable after access is revoked.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from ..errors import ChatAccessDenied, ChatRoomNotFound, EmptyMessage, NotRoomParticipant
from ..models.chat import ChatMessage, ChatRoom
from ..models.claim import Claim
from .notifications import CHAT_MESSAGE

logger = logging.getLogger(__name__)


class ChatService:
    def __init__(self, db, gate, notifier, store):
        self.db = db
        self.gate = gate
        self.notifier = notifier
        self.store = store

    def _find_room(self, claim: Claim) -> ChatRoom | None:
        return ChatRoom.query.filter_by(
            alert_type=claim.alert_type,
            alert_id=claim.alert_id,
            claimant_id=claim.claimant_id,
            owner_id=claim.owner_id,
        ).first()

    def ensure_room_for_claim(self, claim: Claim) -> tuple[ChatRoom, bool]:
        """Get or create the room for an approved claim. Returns (room, created)."""
        room = self._find_room(claim)
        if room is not None:
            return room, False
        room = ChatRoom(
            alert_type=claim.alert_type,
            alert_id=claim.alert_id,
            claimant_id=claim.claimant_id,
            owner_id=claim.owner_id,
            claim_id=claim.id,
        )
        self.db.session.add(room)
        try:
            self.db.session.commit()
        except IntegrityError:
            # Both parties opened the room at the same time
            self.db.session.rollback()
            room = self._find_room(claim)
            if room is None:
                raise
            return room, False
        logger.info("Chat room %s opened for claim %s", room.id, claim.id)
        return room, True

    def open_room(self, requester_id: int, counterpart_id: int, alert_id: int, alert_type: str | None = None) -> tuple[ChatRoom, bool]:
        decision = self.gate.can_open_chat(requester_id, counterpart_id, alert_id, alert_type)
        if not decision.allowed:
            raise ChatAccessDenied(reason=decision.reason)
        claim = self.store.find_by_id(decision.claim_id)
        return self.ensure_room_for_claim(claim)

    def get_room(self, room_id: int, user_id: int) -> ChatRoom:
        room = self.db.session.get(ChatRoom, int(room_id))
        if room is None:
            raise ChatRoomNotFound()
        if not room.has_participant(user_id):
            raise NotRoomParticipant()
        return room

    def can_send(self, room: ChatRoom, user_id: int) -> bool:
        return self.gate.can_open_chat(user_id, room.counterpart_of(user_id), room.alert_id, room.alert_type).allowed

    def list_rooms(self, user_id: int) -> list[ChatRoom]:
        return (
            ChatRoom.query
            .filter(or_(ChatRoom.claimant_id == int(user_id), ChatRoom.owner_id == int(user_id)))
            .order_by(ChatRoom.updated_at.desc(), ChatRoom.id.desc())
            .all()
        )

    def last_message(self, room: ChatRoom) -> ChatMessage | None:
        return (
            ChatMessage.query
            .filter(ChatMessage.room_id == room.id)
            .order_by(ChatMessage.id.desc())
            .first()
        )

    def send_message(self, room_id: int, sender_id: int, content: str | None) -> ChatMessage:
        text = (content or "").strip()
        if not text:
            raise EmptyMessage()
        room = self.get_room(room_id, sender_id)
        self.gate.ensure_can_send(room, sender_id)

        msg = ChatMessage(room_id=room.id, sender_id=int(sender_id), content=text)
        room.updated_at = datetime.now(timezone.utc)
        self.db.session.add(msg)
        self.db.session.add(room)
        try:
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise

        self.notifier.notify(
            CHAT_MESSAGE,
            room.counterpart_of(sender_id),
            {"roomId": room.id, "messageId": msg.id, "content": text},
            sender_id=int(sender_id),
        )
        return msg
