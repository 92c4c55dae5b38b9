"""Tests for proposal_service: the investment proposal lifecycle.

Covers:
- Validation order and error types for create / accept
- Amount and equity boundaries
- Duplicate proposal guard (pre-check and unique constraint)
- Investor snapshot only for complete profiles
- Acceptance: investment seeding, category default, owner-only, no double accept
- Exactly one notification + one audit event per action
- Listings and their ordering
"""

from datetime import datetime, timedelta, timezone

import pytest
from flask_login import AnonymousUserMixin

from fundbridge.errors import (
    AlreadyExists,
    FailedPrecondition,
    InvalidArgument,
    NotFound,
    PermissionDenied,
    Unauthenticated,
)
from fundbridge.extensions import db
from fundbridge.models.audit import AuditEvent
from fundbridge.models.business_idea import BusinessIdea
from fundbridge.models.investment import Investment
from fundbridge.models.notification import Notification
from fundbridge.models.proposal import InvestmentProposal
from fundbridge.models.user import User
from fundbridge.services import proposal_service


# ─── Helpers ───────────────────────────────────────────────

def _user(user_id):
    return db.session.get(User, user_id)


def _propose(seed_data, investor_key="investor_id", idea_key="idea_id",
             amount=500000, equity=15, message="Happy to help scale."):
    proposal, notification = proposal_service.create_proposal(
        _user(seed_data[investor_key]),
        business_idea_id=seed_data[idea_key],
        amount=amount,
        equity=equity,
        message=message,
    )
    db.session.commit()
    return proposal, notification


# ─── CreateProposal ────────────────────────────────────────

class TestCreateProposal:

    def test_creates_pending_proposal(self, seed_data):
        proposal, _ = _propose(seed_data)

        assert proposal.id is not None
        assert proposal.status == "pending"
        assert proposal.amount == 500000
        assert proposal.equity == 15
        assert proposal.business_idea_title == "Solar Cold Storage"
        assert proposal.business_idea_category == "AgriTech"
        assert proposal.business_idea_user_id == seed_data["owner_id"]
        assert proposal.investor_id == seed_data["investor_id"]
        assert proposal.investor_name == "Arjun Investor"
        assert proposal.accepted_at is None
        assert InvestmentProposal.query.count() == 1

    def test_notifies_owner_once(self, seed_data):
        proposal, notification = _propose(seed_data)

        notes = Notification.query.all()
        assert len(notes) == 1
        assert notes[0].id == notification.id
        assert notification.user_id == seed_data["owner_id"]
        assert notification.type == "INVESTMENT_PROPOSAL"
        assert notification.read is False
        assert "₹5,00,000" in notification.body
        assert "15% equity" in notification.body
        assert '"Solar Cold Storage"' in notification.body
        assert notification.body.startswith("Arjun Investor has made")
        assert notification.data["proposalId"] == proposal.id
        assert notification.data["amount"] == 500000

    def test_writes_one_audit_event(self, seed_data):
        proposal, _ = _propose(seed_data)

        events = AuditEvent.query.filter_by(action="INVESTMENT_PROPOSAL_CREATED").all()
        assert len(events) == 1
        assert events[0].user_id == seed_data["investor_id"]
        assert events[0].data["proposalId"] == proposal.id

    def test_increments_idea_interest(self, seed_data):
        _propose(seed_data)
        idea = db.session.get(BusinessIdea, seed_data["idea_id"])
        assert idea.interested == 1

    def test_complete_profile_snapshot_included(self, seed_data):
        proposal, _ = _propose(seed_data)

        assert proposal.investor_email == "investor@test.com"
        assert proposal.investor_profile == {
            "uid": seed_data["investor_id"],
            "fullName": "Arjun Investor",
            "email": "investor@test.com",
            "role": "investor",
            "mobileNumber": "+91 98765 43210",
            "companyName": "Arjun Capital",
            "isComplete": True,
        }

    def test_incomplete_profile_leaks_no_contact_fields(self, seed_data):
        proposal, notification = _propose(seed_data, investor_key="new_investor_id")

        assert proposal.investor_profile is None
        assert proposal.investor_email is None
        assert "+91" not in str(proposal.to_dict())
        assert notification.user_id == seed_data["owner_id"]

    def test_snapshot_not_refreshed_after_profile_change(self, seed_data):
        proposal, _ = _propose(seed_data)

        investor = _user(seed_data["investor_id"])
        investor.profile = {**investor.profile, "mobileNumber": "+91 11111 11111"}
        db.session.commit()

        db.session.refresh(proposal)
        assert proposal.investor_profile["mobileNumber"] == "+91 98765 43210"

    def test_message_is_sanitized(self, seed_data):
        proposal, _ = _propose(seed_data, message="<script>x()</script><b>Let's talk</b>")
        assert "<" not in proposal.message
        assert "Let's talk" in proposal.message

    def test_message_optional(self, seed_data):
        proposal, _ = _propose(seed_data, message=None)
        assert proposal.message == ""

    def test_unauthenticated(self, seed_data):
        with pytest.raises(Unauthenticated, match="must be authenticated"):
            proposal_service.create_proposal(
                AnonymousUserMixin(), seed_data["idea_id"], 1000, 10
            )
        with pytest.raises(Unauthenticated):
            proposal_service.create_proposal(None, seed_data["idea_id"], 1000, 10)

    def test_missing_idea_id(self, seed_data):
        with pytest.raises(InvalidArgument, match="Business idea ID is required"):
            proposal_service.create_proposal(_user(seed_data["investor_id"]), "  ", 1000, 10)

    @pytest.mark.parametrize("amount", [0, -5, None, "abc", True, 10**400, "nan", "inf"])
    def test_invalid_amount(self, seed_data, amount):
        with pytest.raises(InvalidArgument, match="Valid investment amount"):
            proposal_service.create_proposal(
                _user(seed_data["investor_id"]), seed_data["idea_id"], amount, 10
            )

    def test_smallest_amount_accepted(self, seed_data):
        proposal, _ = _propose(seed_data, amount=0.01)
        assert proposal.amount == 0.01

    def test_very_large_amount_accepted(self, seed_data):
        proposal, notification = _propose(seed_data, amount=1e26)
        assert proposal.amount == 1e26
        assert "₹10,00,00," in notification.body

    @pytest.mark.parametrize("equity", [0, 100.01, -1, None])
    def test_invalid_equity(self, seed_data, equity):
        with pytest.raises(InvalidArgument, match="Valid equity percentage"):
            proposal_service.create_proposal(
                _user(seed_data["investor_id"]), seed_data["idea_id"], 1000, equity
            )

    def test_full_equity_accepted(self, seed_data):
        proposal, _ = _propose(seed_data, equity=100)
        assert proposal.equity == 100

    def test_argument_errors_before_role_check(self, seed_data):
        # A non-investor with a bad amount sees the argument error first
        with pytest.raises(InvalidArgument):
            proposal_service.create_proposal(
                _user(seed_data["owner_id"]), seed_data["idea_id"], 0, 10
            )

    def test_non_investor_denied(self, seed_data):
        with pytest.raises(PermissionDenied, match="Only investors"):
            proposal_service.create_proposal(
                _user(seed_data["owner_id"]), seed_data["idea_id"], 1000, 10
            )
        assert InvestmentProposal.query.count() == 0

    def test_unknown_idea(self, seed_data):
        with pytest.raises(NotFound, match="Business idea not found"):
            proposal_service.create_proposal(
                _user(seed_data["investor_id"]), "no-such-idea", 1000, 10
            )

    def test_duplicate_proposal_rejected(self, seed_data):
        _propose(seed_data)

        with pytest.raises(AlreadyExists, match="already have a proposal"):
            proposal_service.create_proposal(
                _user(seed_data["investor_id"]), seed_data["idea_id"], 999, 5
            )
        db.session.rollback()
        assert InvestmentProposal.query.count() == 1
        assert Notification.query.count() == 1

    def test_duplicate_rejected_after_acceptance(self, seed_data):
        proposal, _ = _propose(seed_data)
        proposal_service.accept_proposal(_user(seed_data["owner_id"]), proposal.id)
        db.session.commit()

        with pytest.raises(AlreadyExists):
            proposal_service.create_proposal(
                _user(seed_data["investor_id"]), seed_data["idea_id"], 999, 5
            )

    def test_same_investor_may_propose_on_another_idea(self, seed_data):
        _propose(seed_data)
        _propose(seed_data, idea_key="uncategorized_idea_id")
        assert InvestmentProposal.query.count() == 2


# ─── AcceptProposal ────────────────────────────────────────

class TestAcceptProposal:

    def test_accept_creates_investment(self, seed_data):
        proposal, _ = _propose(seed_data)

        investment, _ = proposal_service.accept_proposal(
            _user(seed_data["owner_id"]), proposal.id
        )
        db.session.commit()

        assert investment.amount == 500000
        assert investment.equity == 15
        assert investment.current_value == 500000
        assert investment.roi == 0
        assert investment.milestones == []
        assert investment.status == "active"
        assert investment.proposal_id == proposal.id
        assert investment.business_person_id == seed_data["owner_id"]
        assert investment.investor_id == seed_data["investor_id"]
        assert investment.investor_name == "Arjun Investor"
        assert investment.business_idea_title == "Solar Cold Storage"
        assert investment.business_idea_category == "AgriTech"
        assert investment.investment_date is not None

    def test_accept_updates_proposal(self, seed_data):
        proposal, _ = _propose(seed_data)
        proposal_service.accept_proposal(_user(seed_data["owner_id"]), proposal.id)
        db.session.commit()

        stored = db.session.get(InvestmentProposal, proposal.id)
        assert stored.status == "accepted"
        assert stored.accepted_at is not None

    def test_category_defaults_to_general(self, seed_data):
        proposal, _ = _propose(seed_data, idea_key="uncategorized_idea_id")
        investment, _ = proposal_service.accept_proposal(
            _user(seed_data["owner_id"]), proposal.id
        )
        db.session.commit()
        assert investment.business_idea_category == "General"

    def test_accept_notifies_investor_once(self, seed_data):
        proposal, _ = _propose(seed_data)
        investment, notification = proposal_service.accept_proposal(
            _user(seed_data["owner_id"]), proposal.id
        )
        db.session.commit()

        investor_notes = Notification.query.filter_by(
            user_id=seed_data["investor_id"]
        ).all()
        assert len(investor_notes) == 1
        assert investor_notes[0].id == notification.id
        assert notification.type == "INVESTMENT_ACCEPTED"
        assert "₹5,00,000" in notification.body
        assert "has been accepted!" in notification.body
        assert notification.data["investmentId"] == investment.id

    def test_accept_writes_audit_event(self, seed_data):
        proposal, _ = _propose(seed_data)
        investment, _ = proposal_service.accept_proposal(
            _user(seed_data["owner_id"]), proposal.id
        )
        db.session.commit()

        event = AuditEvent.query.filter_by(action="INVESTMENT_PROPOSAL_ACCEPTED").one()
        assert event.user_id == seed_data["owner_id"]
        assert event.data["investmentId"] == investment.id

    def test_unauthenticated(self, seed_data):
        with pytest.raises(Unauthenticated, match="accept investment proposals"):
            proposal_service.accept_proposal(AnonymousUserMixin(), "anything")

    def test_missing_proposal_id(self, seed_data):
        with pytest.raises(InvalidArgument, match="Proposal ID is required"):
            proposal_service.accept_proposal(_user(seed_data["owner_id"]), "")

    def test_unknown_proposal(self, seed_data):
        with pytest.raises(NotFound, match="Investment proposal not found"):
            proposal_service.accept_proposal(_user(seed_data["owner_id"]), "missing")

    def test_only_owner_may_accept(self, seed_data):
        proposal, _ = _propose(seed_data)

        for intruder in ("outsider_id", "investor_id"):
            with pytest.raises(PermissionDenied, match="Only the business idea owner"):
                proposal_service.accept_proposal(_user(seed_data[intruder]), proposal.id)
            db.session.rollback()

        stored = db.session.get(InvestmentProposal, proposal.id)
        assert stored.status == "pending"
        assert Investment.query.count() == 0

    def test_second_accept_creates_nothing(self, seed_data):
        proposal, _ = _propose(seed_data)
        owner = _user(seed_data["owner_id"])
        proposal_service.accept_proposal(owner, proposal.id)
        db.session.commit()

        with pytest.raises(FailedPrecondition, match="already been accepted"):
            proposal_service.accept_proposal(owner, proposal.id)
        db.session.rollback()

        assert Investment.query.count() == 1
        assert Notification.query.filter_by(type="INVESTMENT_ACCEPTED").count() == 1


# ─── Listings ──────────────────────────────────────────────

class TestListings:

    def test_list_for_owner_newest_first(self, seed_data):
        first, _ = _propose(seed_data)
        second, _ = _propose(seed_data, investor_key="new_investor_id")

        first.created_at = datetime.now(timezone.utc) - timedelta(days=2)
        db.session.commit()

        proposals = proposal_service.list_proposals_for_owner(_user(seed_data["owner_id"]))
        assert [p.id for p in proposals] == [second.id, first.id]

    def test_list_for_owner_excludes_other_owners(self, seed_data):
        _propose(seed_data)
        assert proposal_service.list_proposals_for_owner(_user(seed_data["outsider_id"])) == []

    def test_list_sent_proposals(self, seed_data):
        mine, _ = _propose(seed_data)
        _propose(seed_data, investor_key="new_investor_id")

        proposals = proposal_service.list_proposals_for_investor(_user(seed_data["investor_id"]))
        assert [p.id for p in proposals] == [mine.id]

    def test_list_investments_newest_first(self, seed_data):
        owner = _user(seed_data["owner_id"])
        p1, _ = _propose(seed_data)
        p2, _ = _propose(seed_data, idea_key="uncategorized_idea_id")
        older, _ = proposal_service.accept_proposal(owner, p1.id)
        newer, _ = proposal_service.accept_proposal(owner, p2.id)
        older.investment_date = datetime.now(timezone.utc) - timedelta(days=30)
        db.session.commit()

        investments = proposal_service.list_investments_for_investor(
            _user(seed_data["investor_id"])
        )
        assert [i.id for i in investments] == [newer.id, older.id]

    def test_listings_require_authentication(self, seed_data):
        anonymous = AnonymousUserMixin()
        with pytest.raises(Unauthenticated):
            proposal_service.list_proposals_for_owner(anonymous)
        with pytest.raises(Unauthenticated):
            proposal_service.list_investments_for_investor(anonymous)
        with pytest.raises(Unauthenticated):
            proposal_service.list_proposals_for_investor(anonymous)
