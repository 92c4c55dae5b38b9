"""Shared test fixtures for the FundBridge test suite.

Provides:
- app: Flask app configured for testing (in-memory SQLite, CSRF off, no push)
- client: anonymous Flask test client
- login_as: factory for test clients logged in as a given user id
- db_session: clean database per test (tables created/dropped)
- seed_data: owner + idea, investors (complete and incomplete), bankers
"""

import pytest
from flask import g
from flask_login import FlaskLoginClient

from fundbridge import create_app
from fundbridge.extensions import db as _db
from fundbridge.models.business_idea import BusinessIdea
from fundbridge.models.user import User


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    app.test_client_class = FlaskLoginClient

    @app.before_request
    def _forget_cached_login():
        # The app context outlives each request here, so Flask-Login's
        # per-request user cache would leak between test clients.
        g.pop("_login_user", None)

    yield app


@pytest.fixture(autouse=True)
def db_session(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield _db.session
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Anonymous Flask test client."""
    return app.test_client()


@pytest.fixture
def login_as(app, db_session):
    """Return a function that builds a test client logged in as `user_id`."""

    def _login_as(user_id):
        user = db_session.get(User, user_id)
        return app.test_client(user=user)

    return _login_as


@pytest.fixture
def seed_data(db_session):
    """Seed users and business ideas.

    Returns a dict of plain ids so tests never depend on attached objects.
    """
    # --- Idea owner ---
    owner = User(
        id="uid-owner",
        email="owner@test.com",
        display_name="Bina Owner",
        role="business_person",
        is_complete=True,
        profile={"fullName": "Bina Owner", "companyName": "Chai Co"},
        fcm_token="owner-device-token",
    )

    # --- Investor with a complete profile ---
    investor = User(
        id="uid-investor",
        email="investor@test.com",
        display_name="Arjun Investor",
        role="investor",
        is_complete=True,
        profile={
            "fullName": "Arjun Investor",
            "mobileNumber": "+91 98765 43210",
            "companyName": "Arjun Capital",
        },
        fcm_token="investor-device-token",
    )

    # --- Investor who has not completed their profile ---
    new_investor = User(
        id="uid-new-investor",
        email="new-investor@test.com",
        display_name="Nisha New",
        role="investor",
        is_complete=False,
        profile={"mobileNumber": "+91 90000 00000"},
    )

    # --- Another business person (not the idea owner) ---
    outsider = User(
        id="uid-outsider",
        email="outsider@test.com",
        display_name="Om Outsider",
        role="business_person",
        is_complete=True,
    )

    # --- Bankers ---
    banker = User(
        id="uid-banker",
        email="banker@test.com",
        display_name="Meera Banker",
        role="banker",
        is_complete=True,
        fcm_token="banker-device-token",
    )
    banker_two = User(
        id="uid-banker-two",
        email="banker2@test.com",
        display_name="Kabir Banker",
        role="banker",
        is_complete=True,
    )

    db_session.add_all([owner, investor, new_investor, outsider, banker, banker_two])
    db_session.flush()

    # --- Ideas ---
    idea = BusinessIdea(
        user_id=owner.id,
        title="Solar Cold Storage",
        description="Solar powered cold rooms for farmers.",
        category="AgriTech",
    )
    uncategorized_idea = BusinessIdea(
        user_id=owner.id,
        title="Neighbourhood Library Cafe",
    )
    db_session.add_all([idea, uncategorized_idea])
    db_session.commit()

    return {
        "owner_id": owner.id,
        "investor_id": investor.id,
        "new_investor_id": new_investor.id,
        "outsider_id": outsider.id,
        "banker_id": banker.id,
        "banker_two_id": banker_two.id,
        "idea_id": idea.id,
        "uncategorized_idea_id": uncategorized_idea.id,
    }
