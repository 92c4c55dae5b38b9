"""Loan proposal model.

Submitted by business persons for bankers to review. Nested sections
(repayment plan, business overview, financials, documents) are stored as
JSON with camelCase keys, the same shape the API accepts and returns.
"""

import uuid

from fundbridge.extensions import db
from fundbridge.utils import to_iso


class LoanProposal(db.Model):
    __tablename__ = "loan_proposals"

    # -- Valid statuses (only "pending" is created here) --
    STATUSES = ["pending", "reviewed", "approved"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id = db.Column(
        db.String(128), db.ForeignKey("users.id"), nullable=False, index=True
    )
    loan_purpose = db.Column(db.Text, nullable=False)
    loan_amount = db.Column(db.String(100), nullable=False)  # as entered, e.g. "25 lakh"
    repayment_plan = db.Column(db.JSON, default=dict)
    collateral = db.Column(db.JSON, default=list)
    business_overview = db.Column(db.JSON, default=dict)
    financial_information = db.Column(db.JSON, default=dict)
    market_analysis = db.Column(db.Text, default="")
    management_team = db.Column(db.Text, default="")
    supporting_documents = db.Column(db.JSON, default=dict)
    executive_summary = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(50), default="pending", nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "loanPurpose": self.loan_purpose,
            "loanAmount": self.loan_amount,
            "repaymentPlan": self.repayment_plan or {},
            "collateral": self.collateral or [],
            "businessOverview": self.business_overview or {},
            "financialInformation": self.financial_information or {},
            "marketAnalysis": self.market_analysis,
            "managementTeam": self.management_team,
            "supportingDocuments": self.supporting_documents or {},
            "executiveSummary": self.executive_summary,
            "status": self.status,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    def __repr__(self):
        return f"<LoanProposal {self.loan_amount} ({self.status})>"
