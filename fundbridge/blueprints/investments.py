"""Investments blueprint — /api/investments/*

Callable endpoints for the investment proposal lifecycle. Each takes a JSON
object and returns {"success": true, ...}; failures are rendered by the
ApiError handler registered in create_app().

Route Map:
  POST /api/investments/createInvestmentProposal  — investor proposes
  POST /api/investments/acceptInvestmentProposal  — idea owner accepts
  POST /api/investments/getMyProposals            — proposals on my ideas
  POST /api/investments/getMySentProposals        — proposals I sent
  POST /api/investments/getMyInvestments          — my investments
"""

from flask import Blueprint, jsonify
from flask_login import current_user

from fundbridge.decorators import callable_endpoint, protect_session_callers
from fundbridge.extensions import db, limiter
from fundbridge.services import notification_service, proposal_service

investments_bp = Blueprint("investments", __name__, url_prefix="/api/investments")
investments_bp.before_request(protect_session_callers)


@investments_bp.route("/createInvestmentProposal", methods=["POST"])
@limiter.limit("30 per hour")
@callable_endpoint
def create_investment_proposal(data):
    """Create a pending proposal; the idea owner is notified (inbox + push)."""
    proposal, notification = proposal_service.create_proposal(
        current_user,
        business_idea_id=data.get("businessIdeaId"),
        amount=data.get("amount"),
        equity=data.get("equity"),
        message=data.get("message"),
    )
    db.session.commit()

    notification_service.deliver_push([notification])

    return jsonify(
        success=True,
        proposalId=proposal.id,
        message="Investment proposal created successfully!",
    )


@investments_bp.route("/acceptInvestmentProposal", methods=["POST"])
@limiter.limit("60 per hour")
@callable_endpoint
def accept_investment_proposal(data):
    """Accept a proposal; creates the Investment and notifies the investor."""
    investment, notification = proposal_service.accept_proposal(
        current_user,
        proposal_id=data.get("proposalId"),
    )
    db.session.commit()

    notification_service.deliver_push([notification])

    return jsonify(
        success=True,
        investmentId=investment.id,
        message="Investment proposal accepted successfully!",
    )


@investments_bp.route("/getMyProposals", methods=["GET", "POST"])
@callable_endpoint
def get_my_proposals(data):
    """Proposals received on the caller's business ideas."""
    proposals = proposal_service.list_proposals_for_owner(current_user)
    return jsonify(success=True, proposals=[p.to_dict() for p in proposals])


@investments_bp.route("/getMySentProposals", methods=["GET", "POST"])
@callable_endpoint
def get_my_sent_proposals(data):
    """Proposals the caller has made as an investor."""
    proposals = proposal_service.list_proposals_for_investor(current_user)
    return jsonify(success=True, proposals=[p.to_dict() for p in proposals])


@investments_bp.route("/getMyInvestments", methods=["GET", "POST"])
@callable_endpoint
def get_my_investments(data):
    """Investments the caller holds."""
    investments = proposal_service.list_investments_for_investor(current_user)
    return jsonify(success=True, investments=[i.to_dict() for i in investments])
