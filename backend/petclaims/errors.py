"""Domain errors raised by the claim services.

Every error carries a stable ``code`` (returned to clients), the HTTP status the
API maps it to, and whether the caller may retry after re-reading state.
"""
from __future__ import annotations

from typing import Any

from flask import Flask, jsonify
from marshmallow import ValidationError


class ClaimError(Exception):
    status = 400
    retryable = False
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None, **details: Any) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        body: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            body.update(self.details)
        if self.retryable:
            body["retryable"] = True
        return body


# Validation

class InvalidAlertType(ClaimError):
    default_message = "Invalid alert type. Must be FOUND or LOST"


class InsufficientEvidence(ClaimError):
    status = 422
    default_message = "Describe the pet's distinguishing features in more detail"


class MissingEvidence(ClaimError):
    status = 422
    default_message = "At least one verification image is required"


class TooManyImages(ClaimError):
    status = 422
    default_message = "Too many verification images"


class EmptyMessage(ClaimError):
    default_message = "Message content is required"


# Authorization

class Unauthorized(ClaimError):
    status = 403
    default_message = "You are not allowed to perform this action on the claim"


class SelfClaimForbidden(ClaimError):
    status = 403
    default_message = "You cannot claim your own alert"


class ChatAccessDenied(ClaimError):
    status = 403
    default_message = "Chat is only available between users with an approved claim"


class ChatAccessRevoked(ClaimError):
    status = 403
    default_message = "The claim backing this chat is no longer approved"


class NotRoomParticipant(ClaimError):
    status = 403
    default_message = "You are not a participant of this chat room"


# Not found

class AlertNotFound(ClaimError):
    status = 404
    default_message = "Alert not found"


class ClaimNotFound(ClaimError):
    status = 404
    default_message = "Claim not found"


class ChatRoomNotFound(ClaimError):
    status = 404
    default_message = "Chat room not found"


# Conflicts

class DuplicatePendingClaim(ClaimError):
    status = 409
    default_message = "You already have a pending or approved claim for this alert"


class IllegalTransition(ClaimError):
    status = 409
    default_message = "This status change is not allowed"


class ConcurrentModification(ClaimError):
    status = 409
    retryable = True
    default_message = "The claim was modified by someone else; reload and try again"


class AlertClosed(ClaimError):
    status = 409
    default_message = "This alert has already been resolved"


class ClaimStillActive(ClaimError):
    status = 409
    default_message = "Only finished claims can be removed from your list"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ClaimError)
    def _claim_error(err: ClaimError):
        return jsonify(err.to_dict()), err.status

    @app.errorhandler(ValidationError)
    def _validation_error(err: ValidationError):
        return jsonify({"error": "Invalid request body", "fields": err.messages}), 400
