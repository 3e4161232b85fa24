from __future__ import annotations

import pytest

from petclaims.models import Notification, User

BASE = "/api/v1/notifications"


def _auth(user):
    return {"X-User-Id": str(user.id)}


@pytest.fixture()
def inbox(db, owner, claimant):
    rows = [
        Notification(user_id=owner.id, event_type="CLAIM_CREATED", title="New claim", body="one"),
        Notification(user_id=owner.id, event_type="CHAT_MESSAGE", title="New message", body="two"),
        Notification(user_id=claimant.id, event_type="CLAIM_APPROVED", title="Claim approved", body="three"),
    ]
    db.session.add_all(rows)
    db.session.commit()
    return rows


def test_list_and_unread_count(client, owner, inbox):
    listed = client.get(BASE, headers=_auth(owner)).get_json()["notifications"]
    assert len(listed) == 2
    assert client.get(f"{BASE}/unread-count", headers=_auth(owner)).get_json() == {"count": 2}


@pytest.mark.parametrize("method", ["patch", "put"])
def test_mark_one_read(client, owner, inbox, method):
    resp = getattr(client, method)(f"{BASE}/{inbox[0].id}/read", headers=_auth(owner))
    assert resp.status_code == 200
    assert resp.get_json()["notification"]["read"] is True
    assert client.get(f"{BASE}/unread-count", headers=_auth(owner)).get_json() == {"count": 1}
    unread = client.get(f"{BASE}?unread=true", headers=_auth(owner)).get_json()["notifications"]
    assert [n["id"] for n in unread] == [inbox[1].id]


def test_mark_all_read_only_touches_caller(client, owner, claimant, inbox):
    resp = client.put(f"{BASE}/read-all", headers=_auth(owner))
    assert resp.get_json() == {"updated": 2}
    assert client.get(f"{BASE}/unread-count", headers=_auth(owner)).get_json() == {"count": 0}
    assert client.get(f"{BASE}/unread-count", headers=_auth(claimant)).get_json() == {"count": 1}


def test_delete_one(client, owner, claimant, inbox):
    assert client.delete(f"{BASE}/{inbox[2].id}", headers=_auth(owner)).status_code == 404
    resp = client.delete(f"{BASE}/{inbox[0].id}", headers=_auth(owner))
    assert resp.status_code == 200
    assert Notification.query.filter_by(user_id=owner.id).count() == 1


def test_delete_all_only_touches_caller(client, owner, claimant, inbox):
    resp = client.delete(BASE, headers=_auth(owner))
    assert resp.get_json() == {"deleted": 2}
    assert Notification.query.filter_by(user_id=owner.id).count() == 0
    assert Notification.query.filter_by(user_id=claimant.id).count() == 1


def test_endpoints_require_auth(client, inbox):
    assert client.get(f"{BASE}/unread-count").status_code == 401
    assert client.put(f"{BASE}/read-all").status_code == 401
    assert client.delete(BASE).status_code == 401


def test_remove_push_token(client, db, owner):
    owner.push_token = "device-abc"
    db.session.commit()
    resp = client.delete("/api/v1/auth/push-token", headers=_auth(owner))
    assert resp.status_code == 200
    db.session.expire_all()
    assert db.session.get(User, owner.id).push_token is None
    assert client.delete("/api/v1/auth/push-token").status_code == 401


def test_cors_uses_configured_origins(client, owner):
    allowed = client.get(BASE, headers={**_auth(owner), "Origin": "http://localhost:8081"})
    assert allowed.headers.get("Access-Control-Allow-Origin") == "http://localhost:8081"
    other = client.get(BASE, headers={**_auth(owner), "Origin": "http://evil.example"})
    assert "Access-Control-Allow-Origin" not in other.headers
