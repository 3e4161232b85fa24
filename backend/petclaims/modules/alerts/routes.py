from flask import Blueprint, jsonify, request, g, abort

from ...extensions import db
from ...models.alert import ALERT_MODELS
from ...schemas.alert import AlertCreateSchema, alert_schema

bp = Blueprint("alerts", __name__, url_prefix="/alerts")

_create_schema = AlertCreateSchema()


def _json_error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def _model_for(kind: str):
    model = ALERT_MODELS.get(kind.upper())
    if model is None:
        abort(404)
    return model


@bp.post("/<kind>")
def create_alert(kind: str):
    """Report a lost or found pet. ``kind`` is 'lost' or 'found'."""
    uid = getattr(g, "current_user_id", None)
    if not uid:
        return _json_error("Authentication required", 401)
    model = _model_for(kind)
    data = _create_schema.load(request.get_json(silent=True) or {})
    if model.__tablename__ != "lost_pet_alerts":
        data.pop("pet_name", None)
    alert = model(user_id=int(uid), **data)
    db.session.add(alert)
    db.session.commit()
    return jsonify({"alert": alert_schema.dump(alert), "alertType": kind.upper()}), 201


@bp.get("/<kind>/<int:alert_id>")
def get_alert(kind: str, alert_id: int):
    alert = db.session.get(_model_for(kind), alert_id)
    if alert is None:
        return _json_error("Alert not found", 404)
    return jsonify({"alert": alert_schema.dump(alert), "alertType": kind.upper()})
