"""Loan proposal service — submission by business persons, banker fan-out.

Every banker gets one inbox notification, written in the same transaction
as the proposal. Functions flush but do NOT commit. The caller commits,
then pushes (notification_service.deliver_push).
"""

import logging
from datetime import datetime, timezone

import bleach
from sqlalchemy.exc import SQLAlchemyError

from fundbridge.errors import Internal, InvalidArgument, PermissionDenied, Unauthenticated
from fundbridge.extensions import db
from fundbridge.models.audit import AuditEvent
from fundbridge.models.loan_proposal import LoanProposal
from fundbridge.models.notification import Notification
from fundbridge.models.user import User
from fundbridge.services import notification_service

logger = logging.getLogger(__name__)

PUSH_TITLE = "New Loan Proposal"
PUSH_BODY = "A new loan proposal is available for review."

# (path into the payload, error message), checked in order
REQUIRED_FIELDS = [
    (("loanPurpose",), "Loan purpose is required."),
    (("loanAmount",), "Loan amount is required."),
    (("repaymentPlan", "repaymentPeriod"), "Repayment period is required."),
    (("repaymentPlan", "interestRate"), "Interest rate is required."),
    (("repaymentPlan", "incomeSources"), "Income source is required."),
    (("businessOverview", "history"), "Business history is required."),
    (("executiveSummary",), "Executive summary is required."),
]


def _sanitize(text):
    """Strip all HTML tags from user input."""
    if text is None:
        return ""
    return bleach.clean(str(text), tags=[], strip=True).strip()


def _lookup(data, path):
    value = data
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _section(data, key, fields):
    section = data.get(key)
    if not isinstance(section, dict):
        section = {}
    return {field: _sanitize(section.get(field)) for field in fields}


def _string_list(value):
    if not isinstance(value, list):
        return []
    return [_sanitize(item) for item in value]


def create_loan_proposal(caller, data):
    """Create a pending loan proposal and notify every banker.

    Args:
        caller: Authenticated user with role "business_person".
        data: Request payload (camelCase keys, nested sections).

    Returns:
        Tuple of (loan_proposal, notifications).

    Raises:
        Unauthenticated, PermissionDenied, InvalidArgument, Internal.
    """
    if caller is None or not getattr(caller, "is_authenticated", False):
        raise Unauthenticated("User must be authenticated to create loan proposals.")

    applicant = db.session.get(User, caller.id)
    if applicant is None or applicant.role != "business_person":
        raise PermissionDenied("Only business persons can create loan proposals.")

    data = data if isinstance(data, dict) else {}
    for path, message in REQUIRED_FIELDS:
        value = _lookup(data, path)
        if not isinstance(value, str) or not value.strip():
            raise InvalidArgument(message)

    collateral = data.get("collateral")
    documents = data.get("supportingDocuments")
    if not isinstance(documents, dict):
        documents = {}

    now = datetime.now(timezone.utc)
    loan = LoanProposal(
        user_id=applicant.id,
        loan_purpose=_sanitize(data["loanPurpose"]),
        loan_amount=_sanitize(data["loanAmount"]),
        repayment_plan=_section(
            data, "repaymentPlan", ["repaymentPeriod", "interestRate", "incomeSources"]
        ),
        collateral=[
            {
                "description": _sanitize(item.get("description")),
                "estimatedValue": _sanitize(item.get("estimatedValue")),
            }
            for item in (collateral if isinstance(collateral, list) else [])
            if isinstance(item, dict)
        ],
        business_overview=_section(
            data,
            "businessOverview",
            ["history", "legalStructure", "productsOrServices", "targetMarket"],
        ),
        financial_information=_section(
            data,
            "financialInformation",
            ["incomeStatements", "balanceSheets", "cashFlowProjections"],
        ),
        market_analysis=_sanitize(data.get("marketAnalysis")),
        management_team=_sanitize(data.get("managementTeam")),
        supporting_documents={
            "personalAndBusinessDocs": _string_list(documents.get("personalAndBusinessDocs")),
            "financialRecords": _string_list(documents.get("financialRecords")),
            "quotationsAndInvoices": _string_list(documents.get("quotationsAndInvoices")),
            "otherDocuments": _string_list(documents.get("otherDocuments")),
        },
        executive_summary=_sanitize(data["executiveSummary"]),
        status="pending",
        created_at=now,
        updated_at=now,
    )

    try:
        db.session.add(loan)
        db.session.flush()

        # Audit log
        audit = AuditEvent(
            user_id=applicant.id,
            action="LOAN_PROPOSAL_CREATED",
            data={"proposalId": loan.id},
        )
        db.session.add(audit)

        banker_ids = [
            row.id
            for row in db.session.query(User.id).filter(
                User.role == "banker", User.is_active.is_(True)
            )
        ]
        notifications = notification_service.create_bulk_notifications(
            banker_ids,
            title=PUSH_TITLE,
            body=f"New loan proposal submitted by {applicant.full_name or applicant.email}",
            type=Notification.LOAN_PROPOSAL_CREATED,
            data={"loanProposalId": loan.id},
        )
    except SQLAlchemyError as e:
        logger.error(f"Error creating loan proposal: {e}")
        db.session.rollback()
        raise Internal("Failed to create loan proposal.") from e

    logger.info(
        f"Loan proposal {loan.id} created by {applicant.id}; "
        f"{len(notifications)} bankers notified"
    )
    return loan, notifications


def list_loan_proposals_for_owner(caller):
    """The caller's own loan proposals, newest first."""
    if caller is None or not getattr(caller, "is_authenticated", False):
        raise Unauthenticated("User must be authenticated.")
    try:
        return (
            LoanProposal.query
            .filter_by(user_id=caller.id)
            .order_by(LoanProposal.created_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error getting loan proposals: {e}")
        raise Internal("Failed to get loan proposals.") from e
