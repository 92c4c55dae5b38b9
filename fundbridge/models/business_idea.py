"""Business idea model.

Ideas are posted by business persons and referenced (by id) from
investment proposals. `interested` counts proposals received. The author's
name, email and (for complete profiles) contact snapshot are copied in at
posting time, like the investor snapshot on a proposal.
"""

import uuid

from fundbridge.extensions import db
from fundbridge.utils import to_iso


class BusinessIdea(db.Model):
    __tablename__ = "business_ideas"
    __table_args__ = (
        db.Index("ix_business_ideas_status_created", "status", "created_at"),
    )

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id = db.Column(
        db.String(128), db.ForeignKey("users.id"), nullable=False, index=True
    )
    author_name = db.Column(db.String(255))
    author_email = db.Column(db.String(255))
    author_profile = db.Column(db.JSON, nullable=True)  # only for complete profiles
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(100), nullable=True)
    budget = db.Column(db.String(100), nullable=True)
    timeline = db.Column(db.String(100), nullable=True)
    target_market = db.Column(db.Text, nullable=True)
    revenue_model = db.Column(db.Text, nullable=True)
    team_info = db.Column(db.Text, nullable=True)
    tags = db.Column(db.JSON, default=list)
    status = db.Column(db.String(50), default="active", nullable=False)
    views = db.Column(db.Integer, default=0, nullable=False)
    interested = db.Column(db.Integer, default=0, nullable=False)
    featured = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    owner = db.relationship("User", back_populates="business_ideas")

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "authorName": self.author_name,
            "authorEmail": self.author_email,
            "authorProfile": self.author_profile,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "budget": self.budget,
            "timeline": self.timeline,
            "targetMarket": self.target_market or "",
            "revenueModel": self.revenue_model or "",
            "teamInfo": self.team_info or "",
            "tags": self.tags or [],
            "status": self.status,
            "views": self.views,
            "interested": self.interested,
            "featured": self.featured,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    def __repr__(self):
        return f"<BusinessIdea {self.title[:30]}>"
