"""In-app notification model.

One row per recipient. Push delivery (FCM) is separate and best-effort;
this table is the source of truth for the inbox.
"""

import uuid

from fundbridge.extensions import db
from fundbridge.utils import to_iso


class Notification(db.Model):
    __tablename__ = "notifications"
    __table_args__ = (
        db.Index("ix_notifications_user_created", "user_id", "created_at"),
    )

    # -- Notification types written by the services --
    INVESTMENT_PROPOSAL = "INVESTMENT_PROPOSAL"
    INVESTMENT_ACCEPTED = "INVESTMENT_ACCEPTED"
    LOAN_PROPOSAL_CREATED = "LOAN_PROPOSAL_CREATED"
    NEW_BUSINESS_IDEA = "NEW_BUSINESS_IDEA"
    ROLE_UPDATE = "ROLE_UPDATE"
    SYSTEM_NOTIFICATION = "SYSTEM_NOTIFICATION"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id = db.Column(
        db.String(128), db.ForeignKey("users.id"), nullable=False
    )
    title = db.Column(db.String(255), nullable=False)
    body = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(100), nullable=True)
    data = db.Column(db.JSON, default=dict)
    read = db.Column(db.Boolean, default=False, nullable=False)
    read_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False)

    # --- Relationships ---
    user = db.relationship("User", back_populates="notifications")

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "body": self.body,
            "type": self.type,
            "data": self.data or {},
            "read": self.read,
            "readAt": to_iso(self.read_at),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Notification {self.type} -> {self.user_id} read={self.read}>"
