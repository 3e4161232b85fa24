from flask import Blueprint, Flask, g, request, current_app

from ...modules.alerts.routes import bp as alerts_bp
from ...modules.auth.routes import bp as auth_bp
from ...modules.chat.routes import bp as chat_bp
from ...modules.claims.routes import bp as claims_bp
from ...modules.notifications.routes import bp as notifications_bp


def register_api(app: Flask) -> None:
    api_v1 = Blueprint("api_v1", __name__, url_prefix="/api/v1")

    # Auth context loader.
    # In development (DEBUG=True) we accept either an `X-User-Id` header or an
    # `Authorization: User <id>` header to simplify local testing.
    # In production (DEBUG=False), require a signed bearer token issued by our app.
    @api_v1.before_request  # type: ignore
    def _load_current_user():
        from ...extensions import db
        from ...models.user import User  # local import to avoid circulars
        from ...security import verify_token
        uid: int | None = None
        debug_mode = bool(current_app.config.get("DEBUG"))

        # Bearer token takes precedence
        auth = request.headers.get("Authorization") or ""
        if auth.lower().startswith("bearer "):
            uid = verify_token(auth[7:].strip())
        elif debug_mode:
            # Dev-only header shortcuts
            raw = request.headers.get("X-User-Id") or ""
            if not raw and auth.lower().startswith("user "):
                raw = auth[5:].strip()
            if raw:
                try:
                    cand = int(raw)
                    if cand > 0:
                        uid = cand
                except ValueError:
                    uid = None
        user_obj = db.session.get(User, uid) if uid is not None else None
        g.current_user = user_obj  # type: ignore[attr-defined]
        g.current_user_id = getattr(user_obj, "id", None) if user_obj else None  # type: ignore[attr-defined]

    # Mount feature blueprints
    api_v1.register_blueprint(auth_bp)
    api_v1.register_blueprint(alerts_bp)
    api_v1.register_blueprint(claims_bp)
    api_v1.register_blueprint(chat_bp)
    api_v1.register_blueprint(notifications_bp)

    app.register_blueprint(api_v1)
