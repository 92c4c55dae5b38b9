"""Investment model.

Created exactly once, when the idea owner accepts a proposal. Holds a copy
of the proposal's terms; current_value and roi evolve independently of the
proposal afterwards.
"""

import uuid

from fundbridge.extensions import db
from fundbridge.utils import to_iso


class Investment(db.Model):
    __tablename__ = "investments"

    # -- Valid statuses (only "active" is created here) --
    STATUSES = ["active", "completed", "withdrawn"]

    DEFAULT_CATEGORY = "General"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    proposal_id = db.Column(
        db.String(36),
        db.ForeignKey("investment_proposals.id"),
        unique=True,
        nullable=False,
    )
    business_idea_id = db.Column(
        db.String(36), db.ForeignKey("business_ideas.id"), nullable=False
    )
    business_idea_title = db.Column(db.String(255))
    business_idea_category = db.Column(
        db.String(100), default=DEFAULT_CATEGORY, nullable=False
    )
    business_person_id = db.Column(
        db.String(128), db.ForeignKey("users.id"), nullable=False
    )
    investor_id = db.Column(
        db.String(128), db.ForeignKey("users.id"), nullable=False, index=True
    )
    investor_name = db.Column(db.String(255))
    amount = db.Column(db.Float, nullable=False)
    equity = db.Column(db.Float, nullable=False)
    current_value = db.Column(db.Float, nullable=False)
    roi = db.Column(db.Float, default=0, nullable=False)
    investment_date = db.Column(db.DateTime(timezone=True), nullable=False)
    status = db.Column(db.String(50), default="active", nullable=False)
    milestones = db.Column(db.JSON, default=list)  # [{title, completed, date}]
    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False)

    # --- Relationships ---
    proposal = db.relationship("InvestmentProposal")

    def to_dict(self):
        return {
            "id": self.id,
            "proposalId": self.proposal_id,
            "businessIdeaId": self.business_idea_id,
            "businessIdeaTitle": self.business_idea_title,
            "businessIdeaCategory": self.business_idea_category,
            "businessPersonId": self.business_person_id,
            "investorId": self.investor_id,
            "investorName": self.investor_name,
            "amount": self.amount,
            "equity": self.equity,
            "currentValue": self.current_value,
            "roi": self.roi,
            "investmentDate": to_iso(self.investment_date),
            "status": self.status,
            "milestones": list(self.milestones or []),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Investment {self.amount} in {self.business_idea_id} ({self.status})>"
