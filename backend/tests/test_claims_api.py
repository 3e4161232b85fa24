from __future__ import annotations

import pytest

from petclaims.models import ChatRoom, Claim
from petclaims.security import issue_token

BASE = "/api/v1/claims"


def _auth(user):
    return {"X-User-Id": str(user.id)}


def _body(alert, **overrides):
    body = {
        "alertId": alert.id,
        "alertType": "FOUND",
        "verificationDetails": {"petFeatures": "Scar over the left eye, blue collar"},
        "verificationImages": ["uploads/claims/eye.jpg"],
    }
    body.update(overrides)
    return body


def _create(client, user, alert, **overrides):
    return client.post(BASE, json=_body(alert, **overrides), headers=_auth(user))


def test_create_requires_auth(client, found_alert):
    resp = client.post(BASE, json=_body(found_alert))
    assert resp.status_code == 401


def test_bearer_token_is_accepted(client, claimant, found_alert):
    headers = {"Authorization": f"Bearer {issue_token(claimant.id)}"}
    resp = client.post(BASE, json=_body(found_alert), headers=headers)
    assert resp.status_code == 201


def test_create_claim(client, claimant, found_alert):
    resp = _create(client, claimant, found_alert)
    assert resp.status_code == 201
    claim = resp.get_json()["claim"]
    assert claim["status"] == "PENDING"
    assert claim["role"] == "claimant"
    assert claim["allowedTransitions"] == ["CANCELLED"]
    assert claim["alert"]["type"] == "FOUND"


def test_single_image_string_is_accepted(client, claimant, found_alert):
    resp = _create(client, claimant, found_alert, verificationImages="uploads/claims/one.jpg")
    assert resp.status_code == 201
    assert resp.get_json()["claim"]["verificationImages"] == ["uploads/claims/one.jpg"]


@pytest.mark.parametrize(
    "overrides, status, code",
    [
        ({"alertType": None}, 400, "InvalidAlertType"),
        ({"alertType": "STRAY"}, 400, "InvalidAlertType"),
        ({"alertType": 5}, 400, "InvalidAlertType"),
        ({"verificationDetails": {"petFeatures": "cute"}}, 422, "InsufficientEvidence"),
        ({"verificationImages": []}, 422, "MissingEvidence"),
        ({"verificationImages": None}, 422, "MissingEvidence"),
        ({"verificationDetails": None}, 422, "InsufficientEvidence"),
        ({"alertId": 9999}, 404, "AlertNotFound"),
    ],
)
def test_create_errors(client, claimant, found_alert, overrides, status, code):
    resp = _create(client, claimant, found_alert, **overrides)
    assert resp.status_code == status
    assert resp.get_json()["code"] == code
    assert Claim.query.count() == 0


def test_missing_alert_id_is_validation_error(client, claimant):
    resp = client.post(BASE, json={"alertType": "FOUND"}, headers=_auth(claimant))
    assert resp.status_code == 400
    assert "alertId" in resp.get_json()["fields"]


def test_self_claim_forbidden(client, owner, found_alert):
    resp = _create(client, owner, found_alert)
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "SelfClaimForbidden"


def test_duplicate_claim_conflict(client, claimant, found_alert):
    first = _create(client, claimant, found_alert).get_json()["claim"]
    resp = _create(client, claimant, found_alert)
    assert resp.status_code == 409
    body = resp.get_json()
    assert body["code"] == "DuplicatePendingClaim"
    assert body["claimId"] == first["id"]


def test_approve_opens_chat_room(client, owner, claimant, found_alert):
    claim_id = _create(client, claimant, found_alert).get_json()["claim"]["id"]
    resp = client.put(
        f"{BASE}/{claim_id}/status",
        json={"targetStatus": "APPROVED", "meetingLocation": "Park gate", "meetingDate": "2026-10-20T15:00:00"},
        headers=_auth(owner),
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["claim"]["status"] == "APPROVED"
    assert body["claim"]["meetingLocation"] == "Park gate"
    assert body["claim"]["allowedTransitions"] == ["COMPLETED", "CANCELLED"]
    room = ChatRoom.query.one()
    assert body["chatRoomId"] == room.id


def test_status_alias_and_wrong_role(client, owner, claimant, found_alert):
    claim_id = _create(client, claimant, found_alert).get_json()["claim"]["id"]
    resp = client.put(f"{BASE}/{claim_id}/status", json={"status": "APPROVED"}, headers=_auth(claimant))
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "Unauthorized"


def test_illegal_transition_conflict(client, owner, claimant, found_alert):
    claim_id = _create(client, claimant, found_alert).get_json()["claim"]["id"]
    resp = client.post(f"{BASE}/{claim_id}/complete", headers=_auth(owner))
    assert resp.status_code == 409
    body = resp.get_json()
    assert body["code"] == "IllegalTransition"
    assert body["fromStatus"] == "PENDING"


def test_verify_reject_flow(client, owner, claimant, found_alert):
    claim_id = _create(client, claimant, found_alert).get_json()["claim"]["id"]
    resp = client.post(
        f"{BASE}/{claim_id}/verify",
        json={"action": "REJECT", "rejectionReason": "Different markings"},
        headers=_auth(owner),
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["claim"]["status"] == "REJECTED"
    assert body["claim"]["rejectionReason"] == "Different markings"
    assert body["chatRoomId"] is None


def test_verify_rejects_unknown_action(client, owner, claimant, found_alert):
    claim_id = _create(client, claimant, found_alert).get_json()["claim"]["id"]
    resp = client.post(f"{BASE}/{claim_id}/verify", json={"action": "MAYBE"}, headers=_auth(owner))
    assert resp.status_code == 400


def test_complete_flow_resolves_alert(client, owner, claimant, found_alert):
    claim_id = _create(client, claimant, found_alert).get_json()["claim"]["id"]
    client.post(f"{BASE}/{claim_id}/verify", json={"action": "APPROVE"}, headers=_auth(owner))
    resp = client.post(f"{BASE}/{claim_id}/complete", json={"comment": "Reunited"}, headers=_auth(owner))
    assert resp.status_code == 200
    assert resp.get_json()["claim"]["status"] == "COMPLETED"

    alert = client.get(f"/api/v1/alerts/found/{found_alert.id}").get_json()["alert"]
    assert alert["status"] == "RESOLVED"

    again = _create(client, claimant, found_alert)
    assert again.status_code == 409
    assert again.get_json()["code"] == "AlertClosed"


def test_claim_is_private_to_parties(client, claimant, bystander, found_alert):
    claim_id = _create(client, claimant, found_alert).get_json()["claim"]["id"]
    assert client.get(f"{BASE}/{claim_id}", headers=_auth(bystander)).status_code == 404
    assert client.get(f"{BASE}/{claim_id}/history", headers=_auth(bystander)).status_code == 404
    assert client.get(f"{BASE}/{claim_id}", headers=_auth(claimant)).status_code == 200


def test_history_endpoint(client, owner, claimant, found_alert):
    claim_id = _create(client, claimant, found_alert).get_json()["claim"]["id"]
    client.post(f"{BASE}/{claim_id}/cancel", json={"comment": "Found mine at home"}, headers=_auth(claimant))
    rows = client.get(f"{BASE}/{claim_id}/history", headers=_auth(owner)).get_json()["history"]
    assert [r["status"] for r in rows] == ["PENDING", "CANCELLED"]
    assert rows[1]["comment"] == "Found mine at home"


def test_list_by_role_and_status(client, owner, claimant, found_alert, lost_alert):
    _create(client, claimant, found_alert)
    lost_id = _create(client, claimant, lost_alert, alertType="LOST").get_json()["claim"]["id"]
    client.post(f"{BASE}/{lost_id}/cancel", headers=_auth(claimant))

    sent = client.get(BASE, headers=_auth(claimant)).get_json()["claims"]
    assert len(sent) == 2

    received = client.get(f"{BASE}?role=received&status=PENDING", headers=_auth(owner)).get_json()["claims"]
    assert [c["alertType"] for c in received] == ["FOUND"]
    assert received[0]["role"] == "owner"

    shortcut = client.get(f"{BASE}/received", headers=_auth(owner)).get_json()["claims"]
    assert len(shortcut) == 2

    assert client.get(f"{BASE}?role=everyone", headers=_auth(owner)).status_code == 400


def test_hide_only_finished_claims(client, owner, claimant, found_alert):
    claim_id = _create(client, claimant, found_alert).get_json()["claim"]["id"]
    resp = client.delete(f"{BASE}/{claim_id}", headers=_auth(claimant))
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "ClaimStillActive"

    client.post(f"{BASE}/{claim_id}/cancel", headers=_auth(claimant))
    assert client.delete(f"{BASE}/{claim_id}", headers=_auth(claimant)).status_code == 200

    assert client.get(BASE, headers=_auth(claimant)).get_json()["claims"] == []
    # Hiding is per user; the owner still sees it
    assert len(client.get(f"{BASE}/received", headers=_auth(owner)).get_json()["claims"]) == 1
    assert Claim.query.count() == 1
