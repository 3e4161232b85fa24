from sqlalchemy import BigInteger, Enum, Integer, JSON
from sqlalchemy.dialects.postgresql import JSONB

# Named enum types. PostgreSQL gets native ENUMs, SQLite (tests) falls back to VARCHAR.

ALERT_TYPES = ("FOUND", "LOST")
ALERT_STATUSES = ("ACTIVE", "RESOLVED")
CLAIM_STATUSES = ("PENDING", "APPROVED", "REJECTED", "COMPLETED", "CANCELLED")
ACTIVE_CLAIM_STATUSES = ("PENDING", "APPROVED")
TERMINAL_CLAIM_STATUSES = ("REJECTED", "COMPLETED", "CANCELLED")

alert_type_enum = Enum(*ALERT_TYPES, name="alert_type_enum")
alert_status_enum = Enum(*ALERT_STATUSES, name="alert_status_enum")
claim_status_enum = Enum(*CLAIM_STATUSES, name="claim_status_enum")
notification_channel_enum = Enum("inapp", "push", name="notification_channel_enum")
notification_status_enum = Enum("queued", "sent", "failed", "read", name="notification_status_enum")

# BIGINT ids on PostgreSQL; SQLite only auto-increments INTEGER PRIMARY KEY
id_type = BigInteger().with_variant(Integer(), "sqlite")
json_type = JSON().with_variant(JSONB(), "postgresql")
