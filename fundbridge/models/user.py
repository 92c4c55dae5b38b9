"""User model — the profile store.

The primary key is the identity-provider uid (Firebase Auth), so a verified
ID token maps straight onto a row. Role-specific profile fields live in the
`profile` JSON column; `is_complete` gates whether contact details may be
copied into other users' documents.
Flask-Login integration via UserMixin.
"""

import uuid

from flask_login import UserMixin

from fundbridge.extensions import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    # -- Valid roles --
    ROLES = ["user", "business_person", "investor", "banker", "business_advisor", "admin"]

    # -- Roles that must complete a profile before full use --
    ROLES_REQUIRING_COMPLETION = ["business_person", "investor", "banker", "business_advisor"]

    id = db.Column(
        db.String(128), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email = db.Column(db.String(255), unique=True, nullable=True)  # phone sign-ins have none
    display_name = db.Column(db.String(255))
    role = db.Column(
        db.String(50), default="user", nullable=False, index=True
    )  # user | business_person | investor | banker | business_advisor | admin
    previous_role = db.Column(db.String(50), nullable=True)
    role_changed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    profile = db.Column(db.JSON, default=dict)
    is_complete = db.Column(db.Boolean, default=False, nullable=False)
    fcm_token = db.Column(db.String(512), nullable=True)  # push delivery token
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    business_ideas = db.relationship(
        "BusinessIdea", back_populates="owner", lazy="dynamic"
    )
    notifications = db.relationship(
        "Notification", back_populates="user", lazy="dynamic"
    )

    @property
    def full_name(self):
        """Best available human name: display name, then profile full name."""
        return self.display_name or (self.profile or {}).get("fullName")

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
