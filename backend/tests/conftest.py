"""
Test configuration and fixtures.

Provides:
- A Flask app on in-memory SQLite with all tables created per test
- Users (alert owner, claimant, bystander) and one lost + one found alert
- The service container and a test client with X-User-Id auth headers
"""
from __future__ import annotations

import pytest

from petclaims import create_app
from petclaims.extensions import db as _db
from petclaims.models import FoundPetAlert, LostPetAlert, User
from petclaims.services import get_services

GOOD_FEATURES = "has a white paw and chipped ear"


@pytest.fixture()
def app():
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()
    _db.create_all()
    yield app
    _db.session.remove()
    _db.drop_all()
    ctx.pop()


@pytest.fixture()
def db(app):
    return _db


@pytest.fixture()
def services(app):
    return get_services()


@pytest.fixture()
def client(app):
    return app.test_client()


def _user(email: str, name: str) -> User:
    user = User(email=email, name=name)
    _db.session.add(user)
    _db.session.commit()
    return user


@pytest.fixture()
def owner(app):
    return _user("owner@example.com", "Olivia Owner")


@pytest.fixture()
def claimant(app):
    return _user("claimant@example.com", "Carlos Claimant")


@pytest.fixture()
def bystander(app):
    return _user("bystander@example.com", "Bea Bystander")


@pytest.fixture()
def found_alert(owner):
    alert = FoundPetAlert(user_id=owner.id, species="dog", description="Brown terrier near the park", location="Central Park")
    _db.session.add(alert)
    _db.session.commit()
    return alert


@pytest.fixture()
def lost_alert(owner):
    alert = LostPetAlert(user_id=owner.id, pet_name="Rex", species="dog", location="Downtown")
    _db.session.add(alert)
    _db.session.commit()
    return alert


@pytest.fixture()
def submit(services, claimant, found_alert):
    """Submit a valid claim by ``claimant`` on ``found_alert`` unless overridden."""

    def _submit(**overrides):
        kwargs = dict(
            alert_id=found_alert.id,
            alert_type="FOUND",
            claimant_id=claimant.id,
            verification_details={"petFeatures": GOOD_FEATURES},
            verification_images=["uploads/claims/paw.jpg"],
        )
        kwargs.update(overrides)
        return services.verification.submit_claim(**kwargs)

    return _submit


