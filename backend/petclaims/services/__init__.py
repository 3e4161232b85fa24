from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from .alert_repository import AlertRepository
from .chat import ChatService
from .chat_access import ChatAccessGate
from .claim_state_machine import ClaimStateMachine
from .claim_store import ClaimStore
from .claim_verification import ClaimVerificationEngine
from .claim_views import ClaimViews
from .notifications import NotificationDispatcher

EXTENSION_KEY = "petclaims"


@dataclass
class ClaimServices:
    store: ClaimStore
    alerts: AlertRepository
    notifier: NotificationDispatcher
    verification: ClaimVerificationEngine
    state_machine: ClaimStateMachine
    gate: ChatAccessGate
    chat: ChatService
    views: ClaimViews


def build_services(db, config) -> ClaimServices:
    store = ClaimStore(db)
    alerts = AlertRepository(db)
    notifier = NotificationDispatcher(db, push_async=bool(config.get("PUSH_ASYNC")))
    gate = ChatAccessGate(store)
    return ClaimServices(
        store=store,
        alerts=alerts,
        notifier=notifier,
        verification=ClaimVerificationEngine(
            db,
            store,
            alerts,
            notifier,
            min_features_length=int(config.get("CLAIM_MIN_PET_FEATURES_LENGTH", 10)),
            max_images=int(config.get("CLAIM_MAX_VERIFICATION_IMAGES", 5)),
        ),
        state_machine=ClaimStateMachine(db, store, alerts, notifier),
        gate=gate,
        chat=ChatService(db, gate, notifier, store),
        views=ClaimViews(db, store),
    )


def init_services(app: Flask, db) -> ClaimServices:
    services = build_services(db, app.config)
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> ClaimServices:
    return current_app.extensions[EXTENSION_KEY]
