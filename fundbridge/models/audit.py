"""Audit event model.

Append-only log of significant actions (proposal created/accepted, loan
proposal submitted, profile completed, cleanup runs). user_id is the acting
user, or "system" for scheduled jobs, so it carries no foreign key.
"""

import uuid

from fundbridge.extensions import db


class AuditEvent(db.Model):
    __tablename__ = "audit_events"

    SYSTEM_USER = "system"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id = db.Column(db.String(128), nullable=False, index=True)
    action = db.Column(db.String(255), nullable=False)  # e.g. "INVESTMENT_PROPOSAL_CREATED"
    data = db.Column(db.JSON, default=dict)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    def __repr__(self):
        return f"<AuditEvent {self.action}>"
