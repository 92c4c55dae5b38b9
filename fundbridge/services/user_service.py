"""User service — first-login provisioning and role management.

A verified ID token for a uid with no users row provisions one (role
"user") plus a welcome notification. Roles are then picked once with
set_user_role and changed later with change_user_role, which follows
ROLE_MATRIX. Writers flush; the caller commits.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from fundbridge.errors import (
    FailedPrecondition,
    InvalidArgument,
    NotFound,
    PermissionDenied,
    Unauthenticated,
)
from fundbridge.extensions import db
from fundbridge.models.audit import AuditEvent
from fundbridge.models.notification import Notification
from fundbridge.models.user import User
from fundbridge.services import notification_service

logger = logging.getLogger(__name__)

# Roles a new user may pick for themselves
SELECTABLE_ROLES = ["user", "business_person", "investor", "banker", "business_advisor"]

# current role -> roles it may change to
ROLE_MATRIX = {
    "user": ["investor", "business_person", "business_advisor", "banker"],
    "investor": ["user", "business_person", "business_advisor", "banker"],
    "business_person": ["user", "investor", "business_advisor", "banker"],
    "business_advisor": ["user", "investor", "business_person", "banker"],
    "banker": ["user", "business_person", "investor", "business_advisor"],
    "admin": [],
}

ROLE_DESCRIPTIONS = {
    "user": "General user with browsing privileges",
    "investor": "Can invest in business ideas and manage portfolio",
    "business_person": "Can post business ideas and seek investments",
    "business_advisor": "Can provide expert advice and guidance",
    "banker": "Can create loan schemes and assess risks",
    "admin": "Full system administration privileges",
}

# Never granted by a self-service change
RESTRICTED_ROLES = ["banker", "admin"]


def _require_caller(caller, message):
    if caller is None or not getattr(caller, "is_authenticated", False):
        raise Unauthenticated(message)


def _role_label(role):
    return role.replace("_", " ")


def provision_user(claims):
    """Create the users row for a first-time token holder.

    Args:
        claims: Decoded ID token claims (uid, email, name, firebase).

    Returns:
        The new (flushed) User, or the existing row if a concurrent request
        created it first.
    """
    uid = claims["uid"]
    provider = (claims.get("firebase") or {}).get("sign_in_provider") or "email"

    user = User(
        id=uid,
        email=claims.get("email"),
        display_name=claims.get("name") or "",
        role="user",
        profile={},
        is_complete=False,
        is_active=True,
    )
    db.session.add(user)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        existing = db.session.get(User, uid)
        if existing is None:
            # Same email already held by another uid
            logger.warning(f"Could not provision user {uid}: email already registered")
        return existing

    notification_service.create_notification(
        user_id=uid,
        title="Welcome to FundBridge!",
        body="Complete your profile to get started with connecting investors and entrepreneurs.",
        type=Notification.SYSTEM_NOTIFICATION,
        data={"action": "COMPLETE_PROFILE", "priority": "high"},
    )

    # Audit log
    audit = AuditEvent(
        user_id=uid,
        action="USER_CREATED_BY_AUTH",
        data={"email": user.email, "provider": provider},
    )
    db.session.add(audit)
    db.session.flush()

    logger.info(f"New user created: {uid}")
    return user


def set_user_role(caller, uid, role):
    """Pick a role during registration.

    Only allowed while the caller still has the default "user" role; later
    changes go through change_user_role.

    Raises:
        Unauthenticated, InvalidArgument, PermissionDenied, FailedPrecondition.
    """
    _require_caller(caller, "User must be authenticated to set role.")

    if role not in SELECTABLE_ROLES:
        raise InvalidArgument("Invalid role specified.")
    if uid != caller.id:
        raise PermissionDenied("Users can only set their own role.")

    user = db.session.get(User, caller.id)
    if user is None:
        raise NotFound("User profile not found.")
    if user.role != "user":
        raise FailedPrecondition("Role is already set. Use changeUserRole to switch roles.")

    user.role = role
    user.role_changed_at = datetime.now(timezone.utc)

    # Audit log
    audit = AuditEvent(user_id=user.id, action="ROLE_ASSIGNED", data={"role": role})
    db.session.add(audit)
    db.session.flush()

    logger.info(f"User {user.id} assigned role {role}")
    return user


def change_user_role(caller, new_role):
    """Switch the caller to `new_role` along ROLE_MATRIX.

    A role that needs a completed profile starts incomplete, so contact
    details are only shared once the new role's form has been filled in.

    Returns:
        Tuple of (previous_role, notification).

    Raises:
        Unauthenticated, InvalidArgument, NotFound, FailedPrecondition,
        PermissionDenied.
    """
    _require_caller(caller, "User must be authenticated to change role.")

    if new_role not in ROLE_DESCRIPTIONS:
        raise InvalidArgument("Invalid role specified.")

    user = db.session.get(User, caller.id)
    if user is None:
        raise NotFound("User profile not found.")

    current_role = user.role or "user"
    allowed = ROLE_MATRIX.get(current_role, [])
    if new_role not in allowed:
        logger.warning(f"ROLE_CHANGE_FAILED {user.id}: {current_role} -> {new_role}")
        raise FailedPrecondition(
            f"Role change from {current_role} to {new_role} is not allowed. "
            f"Allowed transitions: {', '.join(allowed)}"
        )
    if new_role in RESTRICTED_ROLES:
        logger.warning(f"ROLE_CHANGE_FAILED {user.id}: {new_role} is restricted")
        raise PermissionDenied(
            f"Cannot change to restricted role: {new_role}. "
            "This role requires administrative approval."
        )

    user.previous_role = current_role
    user.role = new_role
    user.role_changed_at = datetime.now(timezone.utc)
    if new_role in User.ROLES_REQUIRING_COMPLETION:
        user.is_complete = False

    # Audit log
    audit = AuditEvent(
        user_id=user.id,
        action="ROLE_CHANGED",
        data={
            "previousRole": current_role,
            "newRole": new_role,
            "changeReason": "user_initiated",
        },
    )
    db.session.add(audit)

    notification = notification_service.create_notification(
        user_id=user.id,
        title="Role Changed Successfully",
        body=(
            f"Your role has been changed from {_role_label(current_role)} "
            f"to {_role_label(new_role)}."
        ),
        type=Notification.ROLE_UPDATE,
        data={"previousRole": current_role, "newRole": new_role},
    )

    logger.info(f"User {user.id} changed role {current_role} -> {new_role}")
    return current_role, notification


def get_available_roles(caller):
    """The caller's role and the roles they may switch to."""
    _require_caller(caller, "User must be authenticated.")

    user = db.session.get(User, caller.id)
    if user is None:
        raise NotFound("User profile not found.")

    current_role = user.role or "user"
    return {
        "currentRole": current_role,
        "currentRoleDescription": ROLE_DESCRIPTIONS.get(current_role, ""),
        "availableRoles": [
            {
                "role": role,
                "description": ROLE_DESCRIPTIONS.get(role, ""),
                "requiresApproval": role in RESTRICTED_ROLES,
            }
            for role in ROLE_MATRIX.get(current_role, [])
        ],
    }


def register_device_token(caller, token):
    """Store the caller's push delivery token; an empty token clears it."""
    _require_caller(caller, "User must be authenticated.")

    if token is not None and not isinstance(token, str):
        raise InvalidArgument("Device token must be a string.")
    token = (token or "").strip() or None
    if token is not None and len(token) > 512:
        raise InvalidArgument("Device token is too long.")

    user = db.session.get(User, caller.id)
    if user is None:
        raise NotFound("User profile not found.")

    user.fcm_token = token
    db.session.flush()
    return user
