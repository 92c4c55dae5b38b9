"""Endpoint tests for /api/investments/*.

Covers:
- Create / accept through HTTP, response shape
- Error envelope {"success": false, "error": {"code", "message"}}
- Anonymous callers get 401
- Push delivery happens after commit and failures don't fail the request
- Listing endpoints
"""

from unittest.mock import patch

from fundbridge.extensions import db
from fundbridge.models.investment import Investment
from fundbridge.models.notification import Notification
from fundbridge.models.proposal import InvestmentProposal


CREATE_URL = "/api/investments/createInvestmentProposal"
ACCEPT_URL = "/api/investments/acceptInvestmentProposal"


def _create(login_as, seed_data, **overrides):
    payload = {
        "businessIdeaId": seed_data["idea_id"],
        "amount": 500000,
        "equity": 15,
        "message": "Let's build this together.",
    }
    payload.update(overrides)
    return login_as(seed_data["investor_id"]).post(CREATE_URL, json=payload)


class TestCreateInvestmentProposalEndpoint:

    @patch("fundbridge.services.firebase_service.send_push", return_value=True)
    def test_create_success(self, mock_push, login_as, seed_data):
        response = _create(login_as, seed_data)

        assert response.status_code == 200
        body = response.get_json()
        assert body["success"] is True
        assert body["message"] == "Investment proposal created successfully!"
        assert db.session.get(InvestmentProposal, body["proposalId"]) is not None

    @patch("fundbridge.services.firebase_service.send_push", return_value=True)
    def test_owner_device_pushed(self, mock_push, login_as, seed_data):
        response = _create(login_as, seed_data)
        proposal_id = response.get_json()["proposalId"]

        mock_push.assert_called_once()
        token, title, body = mock_push.call_args.args
        assert token == "owner-device-token"
        assert title == "New Investment Proposal"
        assert "₹5,00,000" in body
        data = mock_push.call_args.kwargs["data"]
        assert data["proposalId"] == proposal_id
        assert data["type"] == "INVESTMENT_PROPOSAL"
        assert "notificationId" in data

    @patch("fundbridge.services.firebase_service.send_push", return_value=False)
    def test_push_failure_does_not_fail_request(self, mock_push, login_as, seed_data):
        response = _create(login_as, seed_data)

        assert response.status_code == 200
        assert InvestmentProposal.query.count() == 1
        assert Notification.query.count() == 1

    def test_payload_wrapped_in_data(self, login_as, seed_data):
        client = login_as(seed_data["investor_id"])
        response = client.post(CREATE_URL, json={
            "data": {"businessIdeaId": seed_data["idea_id"], "amount": 1000, "equity": 5},
        })
        assert response.status_code == 200
        assert response.get_json()["success"] is True

    def test_anonymous_rejected(self, client, seed_data):
        response = client.post(CREATE_URL, json={
            "businessIdeaId": seed_data["idea_id"], "amount": 1000, "equity": 5,
        })
        assert response.status_code == 401
        body = response.get_json()
        assert body["success"] is False
        assert body["error"]["code"] == "unauthenticated"
        assert InvestmentProposal.query.count() == 0

    def test_invalid_amount_envelope(self, login_as, seed_data):
        response = _create(login_as, seed_data, amount=0)
        assert response.status_code == 400
        assert response.get_json()["error"] == {
            "code": "invalid-argument",
            "message": "Valid investment amount is required.",
        }

    @patch("fundbridge.services.firebase_service.send_push", return_value=True)
    def test_very_large_amount(self, mock_push, login_as, seed_data):
        response = _create(login_as, seed_data, amount=1e26)

        assert response.status_code == 200
        proposal = db.session.get(InvestmentProposal, response.get_json()["proposalId"])
        assert proposal.amount == 1e26

    def test_amount_beyond_float_range(self, login_as, seed_data):
        response = _create(login_as, seed_data, amount=10**400)
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "invalid-argument"

    def test_non_object_body_rejected(self, login_as, seed_data):
        client = login_as(seed_data["investor_id"])
        response = client.post(CREATE_URL, json=[1, 2, 3])
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "invalid-argument"

    def test_business_person_forbidden(self, login_as, seed_data):
        client = login_as(seed_data["owner_id"])
        response = client.post(CREATE_URL, json={
            "businessIdeaId": seed_data["idea_id"], "amount": 1000, "equity": 5,
        })
        assert response.status_code == 403
        assert response.get_json()["error"]["code"] == "permission-denied"

    def test_unknown_idea(self, login_as, seed_data):
        response = _create(login_as, seed_data, businessIdeaId="nope")
        assert response.status_code == 404
        assert response.get_json()["error"]["code"] == "not-found"

    def test_duplicate_conflict(self, login_as, seed_data):
        _create(login_as, seed_data)
        response = _create(login_as, seed_data, amount=42)

        assert response.status_code == 409
        assert response.get_json()["error"]["code"] == "already-exists"
        assert InvestmentProposal.query.count() == 1


class TestAcceptInvestmentProposalEndpoint:

    def _proposal_id(self, login_as, seed_data):
        return _create(login_as, seed_data).get_json()["proposalId"]

    @patch("fundbridge.services.firebase_service.send_push", return_value=True)
    def test_accept_success(self, mock_push, login_as, seed_data):
        proposal_id = self._proposal_id(login_as, seed_data)
        mock_push.reset_mock()

        response = login_as(seed_data["owner_id"]).post(
            ACCEPT_URL, json={"proposalId": proposal_id}
        )

        assert response.status_code == 200
        body = response.get_json()
        assert body["success"] is True
        assert body["message"] == "Investment proposal accepted successfully!"
        investment = db.session.get(Investment, body["investmentId"])
        assert investment.proposal_id == proposal_id
        assert investment.current_value == 500000

        mock_push.assert_called_once()
        assert mock_push.call_args.args[0] == "investor-device-token"
        assert mock_push.call_args.args[1] == "Investment Proposal Accepted"

    def test_non_owner_forbidden(self, login_as, seed_data):
        proposal_id = self._proposal_id(login_as, seed_data)

        response = login_as(seed_data["outsider_id"]).post(
            ACCEPT_URL, json={"proposalId": proposal_id}
        )

        assert response.status_code == 403
        assert db.session.get(InvestmentProposal, proposal_id).status == "pending"
        assert Investment.query.count() == 0

    def test_double_accept_conflict(self, login_as, seed_data):
        proposal_id = self._proposal_id(login_as, seed_data)
        owner = login_as(seed_data["owner_id"])

        first = owner.post(ACCEPT_URL, json={"proposalId": proposal_id})
        second = owner.post(ACCEPT_URL, json={"proposalId": proposal_id})

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.get_json()["error"] == {
            "code": "failed-precondition",
            "message": "This investment proposal has already been accepted.",
        }
        assert Investment.query.count() == 1

    def test_missing_proposal_id(self, login_as, seed_data):
        response = login_as(seed_data["owner_id"]).post(ACCEPT_URL, json={})
        assert response.status_code == 400
        assert response.get_json()["error"]["message"] == "Proposal ID is required."

    def test_anonymous_rejected(self, client, seed_data):
        response = client.post(ACCEPT_URL, json={"proposalId": "anything"})
        assert response.status_code == 401


class TestListingEndpoints:

    def test_get_my_proposals(self, login_as, seed_data):
        proposal_id = _create(login_as, seed_data).get_json()["proposalId"]

        response = login_as(seed_data["owner_id"]).post("/api/investments/getMyProposals")

        assert response.status_code == 200
        proposals = response.get_json()["proposals"]
        assert [p["id"] for p in proposals] == [proposal_id]
        assert proposals[0]["investorProfile"]["companyName"] == "Arjun Capital"
        assert proposals[0]["status"] == "pending"

    def test_get_my_sent_proposals(self, login_as, seed_data):
        _create(login_as, seed_data)

        response = login_as(seed_data["investor_id"]).get("/api/investments/getMySentProposals")

        proposals = response.get_json()["proposals"]
        assert len(proposals) == 1
        assert proposals[0]["businessIdeaTitle"] == "Solar Cold Storage"

    def test_get_my_investments(self, login_as, seed_data):
        proposal_id = _create(login_as, seed_data).get_json()["proposalId"]
        login_as(seed_data["owner_id"]).post(ACCEPT_URL, json={"proposalId": proposal_id})

        response = login_as(seed_data["investor_id"]).post("/api/investments/getMyInvestments")

        investments = response.get_json()["investments"]
        assert len(investments) == 1
        assert investments[0]["amount"] == 500000
        assert investments[0]["roi"] == 0
        assert investments[0]["milestones"] == []

    def test_listings_require_login(self, client):
        for path in ("getMyProposals", "getMySentProposals", "getMyInvestments"):
            response = client.post(f"/api/investments/{path}")
            assert response.status_code == 401
