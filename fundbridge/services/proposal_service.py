"""Proposal service — investment proposal lifecycle.

create_proposal -> (owner notified) -> accept_proposal -> Investment
created -> (investor notified). Plus the read-only listings.

Validation runs in a fixed order and the first failure wins. Writers flush
but do NOT commit. The caller commits once, so the proposal/acceptance,
investment, notification and audit rows land in a single transaction.
Push delivery happens after the commit (see notification_service).
"""

import logging
import math
from datetime import datetime, timezone

import bleach
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from fundbridge.errors import (
    AlreadyExists,
    FailedPrecondition,
    Internal,
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
from fundbridge.models.proposal import InvestmentProposal, InvestorSnapshot
from fundbridge.models.user import User
from fundbridge.services import notification_service
from fundbridge.utils import format_inr, format_number

logger = logging.getLogger(__name__)


def _sanitize(text):
    """Strip all HTML tags from user input."""
    if text is None:
        return ""
    return bleach.clean(str(text), tags=[], strip=True).strip()


def _require_caller(caller, message):
    if caller is None or not getattr(caller, "is_authenticated", False):
        raise Unauthenticated(message)


def _as_number(value):
    """Coerce a JSON number (or numeric string) to a finite float, else None."""
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        value = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        # OverflowError: integers beyond float range
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def create_proposal(caller, business_idea_id, amount, equity, message=None):
    """Create a pending investment proposal and notify the idea owner.

    Args:
        caller: The authenticated user (must have role "investor").
        business_idea_id: Id of the idea being funded.
        amount: Offered amount, > 0.
        equity: Requested equity percentage, 0 < equity <= 100.
        message: Optional note to the owner (will be sanitized).

    Returns:
        Tuple of (proposal, notification).

    Raises:
        Unauthenticated, InvalidArgument, PermissionDenied, NotFound,
        AlreadyExists, in that validation order.
    """
    _require_caller(caller, "User must be authenticated to create investment proposals.")

    if not isinstance(business_idea_id, str) or not business_idea_id.strip():
        raise InvalidArgument("Business idea ID is required.")
    business_idea_id = business_idea_id.strip()

    amount = _as_number(amount)
    if amount is None or amount <= 0:
        raise InvalidArgument("Valid investment amount is required.")

    equity = _as_number(equity)
    if equity is None or equity <= 0 or equity > 100:
        raise InvalidArgument("Valid equity percentage (1-100) is required.")

    investor = db.session.get(User, caller.id)
    if investor is None or investor.role != "investor":
        raise PermissionDenied("Only investors can create investment proposals.")

    idea = db.session.get(BusinessIdea, business_idea_id)
    if idea is None:
        raise NotFound("Business idea not found.")

    existing = InvestmentProposal.query.filter_by(
        business_idea_id=business_idea_id,
        investor_id=investor.id,
    ).first()
    if existing is not None:
        raise AlreadyExists("You already have a proposal for this business idea.")

    # Capability check, done once: only complete profiles share contact details
    snapshot = InvestorSnapshot.capture(investor)

    now = datetime.now(timezone.utc)
    proposal = InvestmentProposal(
        business_idea_id=idea.id,
        business_idea_title=idea.title,
        business_idea_category=idea.category,
        business_idea_user_id=idea.user_id,
        investor_id=investor.id,
        investor_name=investor.full_name,
        investor_email=snapshot.email if snapshot else None,
        investor_profile=snapshot.to_dict() if snapshot else None,
        amount=amount,
        equity=equity,
        message=_sanitize(message),
        status="pending",
        created_at=now,
        updated_at=now,
    )
    db.session.add(proposal)
    try:
        db.session.flush()
    except IntegrityError as e:
        # A concurrent request won the (idea, investor) unique constraint
        db.session.rollback()
        raise AlreadyExists("You already have a proposal for this business idea.") from e

    idea.interested = (idea.interested or 0) + 1

    notification = notification_service.create_notification(
        user_id=idea.user_id,
        title="New Investment Proposal",
        body=(
            f"{investor.display_name or 'An investor'} has made an investment "
            f"proposal of ₹{format_inr(amount)} for {format_number(equity)}% "
            f'equity in "{idea.title}"'
        ),
        type=Notification.INVESTMENT_PROPOSAL,
        data={
            "proposalId": proposal.id,
            "businessIdeaId": idea.id,
            "investorId": investor.id,
            "amount": amount,
            "equity": equity,
        },
    )

    # Audit log
    audit = AuditEvent(
        user_id=investor.id,
        action="INVESTMENT_PROPOSAL_CREATED",
        data={
            "proposalId": proposal.id,
            "businessIdeaId": idea.id,
            "amount": amount,
            "equity": equity,
        },
    )
    db.session.add(audit)
    db.session.flush()

    logger.info(
        f"Investment proposal {proposal.id} created by {investor.id} "
        f"for idea {idea.id}"
    )
    return proposal, notification


def accept_proposal(caller, proposal_id):
    """Accept a pending proposal and materialize the Investment.

    The status flip is a conditional update (pending -> accepted); when it
    matches no row the proposal was already accepted and nothing is created.

    Args:
        caller: The authenticated idea owner.
        proposal_id: Id of the proposal to accept.

    Returns:
        Tuple of (investment, notification).

    Raises:
        Unauthenticated, InvalidArgument, NotFound, PermissionDenied,
        FailedPrecondition.
    """
    _require_caller(caller, "User must be authenticated to accept investment proposals.")

    if not isinstance(proposal_id, str) or not proposal_id.strip():
        raise InvalidArgument("Proposal ID is required.")
    proposal_id = proposal_id.strip()

    proposal = db.session.get(InvestmentProposal, proposal_id)
    if proposal is None:
        raise NotFound("Investment proposal not found.")

    if proposal.business_idea_user_id != caller.id:
        raise PermissionDenied("Only the business idea owner can accept proposals.")

    now = datetime.now(timezone.utc)
    updated = (
        InvestmentProposal.query
        .filter_by(id=proposal_id, status="pending")
        .update(
            {"status": "accepted", "accepted_at": now, "updated_at": now},
            synchronize_session="fetch",
        )
    )
    if updated == 0:
        raise FailedPrecondition("This investment proposal has already been accepted.")

    investment = Investment(
        proposal_id=proposal.id,
        business_idea_id=proposal.business_idea_id,
        business_idea_title=proposal.business_idea_title,
        business_idea_category=proposal.business_idea_category or Investment.DEFAULT_CATEGORY,
        business_person_id=caller.id,
        investor_id=proposal.investor_id,
        investor_name=proposal.investor_name,
        amount=proposal.amount,
        equity=proposal.equity,
        current_value=proposal.amount,  # initial value is the amount invested
        roi=0,
        investment_date=now,
        status="active",
        milestones=[],
        created_at=now,
        updated_at=now,
    )
    db.session.add(investment)
    try:
        db.session.flush()
    except IntegrityError as e:
        # Investment.proposal_id is unique: a racing accept already materialized it
        db.session.rollback()
        raise FailedPrecondition("This investment proposal has already been accepted.") from e

    notification = notification_service.create_notification(
        user_id=proposal.investor_id,
        title="Investment Proposal Accepted",
        body=(
            f"Your investment proposal of ₹{format_inr(proposal.amount)} for "
            f'"{proposal.business_idea_title}" has been accepted!'
        ),
        type=Notification.INVESTMENT_ACCEPTED,
        data={
            "investmentId": investment.id,
            "businessIdeaId": proposal.business_idea_id,
            "amount": proposal.amount,
            "equity": proposal.equity,
        },
    )

    # Audit log
    audit = AuditEvent(
        user_id=caller.id,
        action="INVESTMENT_PROPOSAL_ACCEPTED",
        data={
            "proposalId": proposal.id,
            "investmentId": investment.id,
            "amount": proposal.amount,
            "equity": proposal.equity,
        },
    )
    db.session.add(audit)
    db.session.flush()

    logger.info(f"Investment proposal {proposal.id} accepted -> investment {investment.id}")
    return investment, notification


def list_proposals_for_owner(caller):
    """Proposals received on the caller's ideas, newest first."""
    _require_caller(caller, "User must be authenticated.")
    try:
        return (
            InvestmentProposal.query
            .filter_by(business_idea_user_id=caller.id)
            .order_by(InvestmentProposal.created_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error getting proposals: {e}")
        raise Internal("Failed to get investment proposals.") from e


def list_proposals_for_investor(caller):
    """Proposals the caller has sent, newest first."""
    _require_caller(caller, "User must be authenticated.")
    try:
        return (
            InvestmentProposal.query
            .filter_by(investor_id=caller.id)
            .order_by(InvestmentProposal.created_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error getting sent proposals: {e}")
        raise Internal("Failed to get investment proposals.") from e


def list_investments_for_investor(caller):
    """The caller's investments, most recent investment_date first."""
    _require_caller(caller, "User must be authenticated.")
    try:
        return (
            Investment.query
            .filter_by(investor_id=caller.id)
            .order_by(Investment.investment_date.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error getting investments: {e}")
        raise Internal("Failed to get investments.") from e
