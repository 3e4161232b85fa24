from .user import User
from .alert import LostPetAlert, FoundPetAlert, ALERT_MODELS
from .claim import Claim
from .claim_history import ClaimStatusHistory
from .notification import Notification
from .chat import ChatRoom, ChatMessage

__all__ = [
    "User",
    "LostPetAlert",
    "FoundPetAlert",
    "ALERT_MODELS",
    "Claim",
    "ClaimStatusHistory",
    "Notification",
    "ChatRoom",
    "ChatMessage",
]
