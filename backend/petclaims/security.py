from __future__ import annotations

from typing import Optional

from flask import current_app
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired


def _serializer() -> URLSafeTimedSerializer:
    secret = current_app.config.get("SECRET_KEY") or "change-me"
    # Salt provides namespace isolation for tokens
    return URLSafeTimedSerializer(secret_key=secret, salt="petclaims-auth")


def issue_token(user_id: int) -> str:
    """Issue a signed bearer token. Payload is just {"uid": int}."""
    return _serializer().dumps({"uid": int(user_id)})


def verify_token(token: str) -> Optional[int]:
    """Return the user id carried by a valid token, else None.

    Max age comes from AUTH_TOKEN_MAX_AGE (seconds).
    """
    max_age = int(current_app.config.get("AUTH_TOKEN_MAX_AGE") or 60 * 60 * 24 * 30)
    try:
        data = _serializer().loads(token, max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(data, dict) or data.get("uid") is None:
        return None
    try:
        return int(data["uid"])
    except (TypeError, ValueError):
        return None
