from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from petclaims.errors import (
    AlertClosed,
    AlertNotFound,
    DuplicatePendingClaim,
    InsufficientEvidence,
    InvalidAlertType,
    MissingEvidence,
    SelfClaimForbidden,
    TooManyImages,
)
from petclaims.models import Claim, ClaimStatusHistory, Notification


def test_submit_creates_pending_claim_and_notifies_owner(submit, owner, claimant, found_alert):
    claim = submit()

    assert claim.status == "PENDING"
    assert claim.owner_id == owner.id
    assert claim.claimant_id == claimant.id
    assert claim.alert_type == "FOUND"
    assert claim.version == 1
    assert claim.verification_details["petFeatures"] == "has a white paw and chipped ear"
    assert claim.verification_images == ["uploads/claims/paw.jpg"]

    notes = Notification.query.filter_by(user_id=owner.id).all()
    assert [n.event_type for n in notes] == ["CLAIM_CREATED"]
    assert notes[0].payload["claimId"] == claim.id
    assert notes[0].sender_id == claimant.id

    history = ClaimStatusHistory.query.filter_by(claim_id=claim.id).all()
    assert [h.status for h in history] == ["PENDING"]


def test_lost_alert_claims_resolve_owner_from_lost_table(submit, owner, lost_alert):
    claim = submit(alert_id=lost_alert.id, alert_type="lost")
    assert claim.alert_type == "LOST"
    assert claim.owner_id == owner.id


@pytest.mark.parametrize("alert_type", [None, "", "MISSING", 3])
def test_invalid_alert_type_is_rejected_without_default(submit, alert_type):
    with pytest.raises(InvalidAlertType):
        submit(alert_type=alert_type)
    assert Claim.query.count() == 0


@pytest.mark.parametrize("features", [None, "", "   ", "white paw", "  short    "])
def test_pet_features_need_minimum_length(submit, features):
    with pytest.raises(InsufficientEvidence):
        submit(verification_details={"petFeatures": features})
    assert Claim.query.count() == 0


def test_features_length_counts_trimmed_text(submit):
    claim = submit(verification_details={"petFeatures": "   ten chars!   "})
    assert claim.verification_details["petFeatures"] == "ten chars!"


@pytest.mark.parametrize("images", [None, [], ["", "   "]])
def test_at_least_one_image_required(submit, images):
    with pytest.raises(MissingEvidence):
        submit(verification_images=images)


def test_too_many_images(submit):
    with pytest.raises(TooManyImages):
        submit(verification_images=[f"img{i}.jpg" for i in range(6)])


def test_unknown_alert(submit):
    with pytest.raises(AlertNotFound):
        submit(alert_id=9999)


def test_alert_type_selects_the_table(submit, found_alert):
    # found_alert's id does not exist among lost alerts
    with pytest.raises(AlertNotFound):
        submit(alert_id=found_alert.id, alert_type="LOST")


def test_owner_cannot_claim_own_alert(submit, owner):
    with pytest.raises(SelfClaimForbidden):
        submit(claimant_id=owner.id)


def test_resolved_alert_cannot_be_claimed(submit, db, found_alert):
    found_alert.status = "RESOLVED"
    db.session.commit()
    with pytest.raises(AlertClosed):
        submit()


def test_second_claim_while_pending_is_duplicate(submit):
    first = submit()
    with pytest.raises(DuplicatePendingClaim) as exc:
        submit()
    assert exc.value.details["claimId"] == first.id
    assert Claim.query.count() == 1


def test_storage_constraint_blocks_duplicate_when_check_is_bypassed(submit, services, monkeypatch):
    submit()
    # Simulate the race: the application-level lookup saw nothing
    monkeypatch.setattr(services.store, "find_active_by_claimant_and_alert", lambda *a, **kw: None)
    with pytest.raises(DuplicatePendingClaim):
        submit()
    assert Claim.query.filter(Claim.status.in_(["PENDING", "APPROVED"])).count() == 1


def test_new_claim_allowed_after_previous_one_ends(submit, services, claimant):
    first = submit()
    services.state_machine.transition(first.id, claimant.id, "CANCELLED")
    second = submit()
    assert second.id != first.id
    assert second.status == "PENDING"


def test_optional_details_are_trimmed(submit):
    claim = submit(
        verification_details={
            "petFeatures": "has a white paw and chipped ear",
            "microchipNumber": " 985112345678901 ",
            "additionalInfo": "   ",
        }
    )
    assert claim.verification_details["microchipNumber"] == "985112345678901"
    assert claim.verification_details["additionalInfo"] is None


def test_other_integrity_errors_are_not_reported_as_duplicates(services, db, claimant, found_alert):
    incomplete = Claim(
        alert_id=found_alert.id,
        alert_type="FOUND",
        claimant_id=claimant.id,
        owner_id=None,
        verification_details={"petFeatures": "has a white paw and chipped ear"},
        verification_images=["x.jpg"],
    )
    with pytest.raises(IntegrityError):
        services.store.insert(incomplete)
    assert Claim.query.count() == 0
