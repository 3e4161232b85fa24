from flask import Blueprint, request, jsonify, g
from werkzeug.security import generate_password_hash, check_password_hash

from ...extensions import db
from ...models.user import User
from ...security import issue_token

bp = Blueprint("auth", __name__, url_prefix="/auth")

MIN_PASSWORD_LENGTH = 8


def _json_error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def _user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "profileImage": user.profile_image,
    }


@bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}

    email = (data.get("email") or "").strip().lower()
    name = (data.get("name") or "").strip()
    password = data.get("password") or ""

    if not name:
        return _json_error("Name is required")
    if not email or "@" not in email:
        return _json_error("Valid email is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        return _json_error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if User.query.filter_by(email=email).first():
        return _json_error("Email already in use", 409)

    user = User(email=email, name=name, password_hash=generate_password_hash(password))
    db.session.add(user)
    db.session.commit()

    return jsonify({"user": _user_to_dict(user), "token": issue_token(int(user.id))}), 201


@bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}

    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or "@" not in email:
        return _json_error("Valid email is required")
    if not password:
        return _json_error("Password is required")

    user = User.query.filter_by(email=email).first()
    if not user or not user.password_hash or not check_password_hash(user.password_hash, password):
        return _json_error("Invalid email or password", 401)

    return jsonify({"user": _user_to_dict(user), "token": issue_token(int(user.id))})


@bp.put("/push-token")
def register_push_token():
    """Store the device token the push relay delivers to."""
    user = getattr(g, "current_user", None)
    if user is None:
        return _json_error("Authentication required", 401)
    data = request.get_json(silent=True) or {}
    token = (data.get("pushToken") or "").strip() or None
    user.push_token = token
    db.session.add(user)
    db.session.commit()
    return jsonify({"pushToken": token})


@bp.delete("/push-token")
def remove_push_token():
    """Forget the device token, e.g. on logout. Pending pushes then fail instead of sending."""
    user = getattr(g, "current_user", None)
    if user is None:
        return _json_error("Authentication required", 401)
    user.push_token = None
    db.session.add(user)
    db.session.commit()
    return jsonify({"pushToken": None})
