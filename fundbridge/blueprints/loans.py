"""Loans blueprint — /api/loans/*

Route Map:
  POST /api/loans/createLoanProposal   — business person submits; bankers notified
  POST /api/loans/getMyLoanProposals   — the caller's own submissions
"""

from flask import Blueprint, jsonify
from flask_login import current_user

from fundbridge.decorators import callable_endpoint, protect_session_callers
from fundbridge.extensions import db, limiter
from fundbridge.services import loan_service, notification_service

loans_bp = Blueprint("loans", __name__, url_prefix="/api/loans")
loans_bp.before_request(protect_session_callers)


@loans_bp.route("/createLoanProposal", methods=["POST"])
@limiter.limit("10 per hour")
@callable_endpoint
def create_loan_proposal(data):
    """Submit a loan proposal. Every banker gets an inbox entry and a push."""
    loan, notifications = loan_service.create_loan_proposal(current_user, data)
    db.session.commit()

    notification_service.deliver_push(
        notifications,
        title=loan_service.PUSH_TITLE,
        body=loan_service.PUSH_BODY,
    )

    return jsonify(
        success=True,
        loanProposalId=loan.id,
        message="Loan proposal created successfully!",
    )


@loans_bp.route("/getMyLoanProposals", methods=["GET", "POST"])
@callable_endpoint
def get_my_loan_proposals(data):
    loans = loan_service.list_loan_proposals_for_owner(current_user)
    return jsonify(success=True, loanProposals=[loan.to_dict() for loan in loans])
