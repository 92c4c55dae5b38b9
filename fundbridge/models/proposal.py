"""Investment proposal model.

- InvestmentProposal: an investor's offer to fund a business idea.
- InvestorSnapshot: the investor's contact details, copied into the
  proposal at creation time. Never refreshed afterwards.

Idea title/category/owner are denormalized onto the proposal so that the
owner's inbox and the acceptance step never re-read the idea.
"""

import uuid
from dataclasses import asdict, dataclass
from typing import Optional

from fundbridge.extensions import db
from fundbridge.utils import to_iso


@dataclass(frozen=True)
class InvestorSnapshot:
    uid: str
    full_name: Optional[str]
    email: Optional[str]
    role: str
    mobile_number: Optional[str] = None
    company_name: Optional[str] = None
    is_complete: bool = True

    @classmethod
    def capture(cls, user):
        """Snapshot `user`, or None when their profile is not complete.

        Incomplete profiles never expose contact fields to the idea owner.
        """
        if not user.is_complete:
            return None
        profile = user.profile or {}
        return cls(
            uid=user.id,
            full_name=profile.get("fullName") or user.display_name,
            email=user.email,
            role=user.role,
            mobile_number=profile.get("mobileNumber"),
            company_name=profile.get("companyName"),
            is_complete=True,
        )

    def to_dict(self):
        data = asdict(self)
        return {
            "uid": data["uid"],
            "fullName": data["full_name"],
            "email": data["email"],
            "role": data["role"],
            "mobileNumber": data["mobile_number"],
            "companyName": data["company_name"],
            "isComplete": data["is_complete"],
        }


class InvestmentProposal(db.Model):
    __tablename__ = "investment_proposals"
    __table_args__ = (
        # One live proposal per (idea, investor); there is no reject/withdraw state.
        db.UniqueConstraint(
            "business_idea_id", "investor_id", name="uq_proposal_idea_investor"
        ),
    )

    # -- Valid statuses --
    STATUSES = ["pending", "accepted"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    business_idea_id = db.Column(
        db.String(36), db.ForeignKey("business_ideas.id"), nullable=False
    )
    business_idea_title = db.Column(db.String(255))
    business_idea_category = db.Column(db.String(100))
    business_idea_user_id = db.Column(
        db.String(128), db.ForeignKey("users.id"), nullable=False, index=True
    )
    investor_id = db.Column(
        db.String(128), db.ForeignKey("users.id"), nullable=False, index=True
    )
    investor_name = db.Column(db.String(255))
    investor_email = db.Column(db.String(255))  # only set for complete profiles
    investor_profile = db.Column(db.JSON, nullable=True)  # InvestorSnapshot.to_dict()
    amount = db.Column(db.Float, nullable=False)
    equity = db.Column(db.Float, nullable=False)
    message = db.Column(db.Text, default="")
    status = db.Column(
        db.String(50), default="pending", nullable=False
    )  # pending | accepted
    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False)
    accepted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "businessIdeaId": self.business_idea_id,
            "businessIdeaTitle": self.business_idea_title,
            "businessIdeaCategory": self.business_idea_category,
            "businessIdeaUserId": self.business_idea_user_id,
            "investorId": self.investor_id,
            "investorName": self.investor_name,
            "investorEmail": self.investor_email,
            "investorProfile": self.investor_profile,
            "amount": self.amount,
            "equity": self.equity,
            "message": self.message,
            "status": self.status,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
            "acceptedAt": to_iso(self.accepted_at),
        }

    def __repr__(self):
        return f"<InvestmentProposal {self.amount} for {self.equity}% ({self.status})>"
