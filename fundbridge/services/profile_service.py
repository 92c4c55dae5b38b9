"""Profile service — role-specific profile completion.

Each role that requires a complete profile has one validator in
ROLE_VALIDATORS; the common checks (full name, mobile number) run for all
of them. Completing a profile is what later allows an investor's contact
details to be copied into their proposals.
"""

import logging
import re
from datetime import datetime, timezone

from fundbridge.errors import FailedPrecondition, InvalidArgument, NotFound, Unauthenticated
from fundbridge.extensions import db
from fundbridge.models.audit import AuditEvent
from fundbridge.models.user import User

logger = logging.getLogger(__name__)

MOBILE_RE = re.compile(r"^\+?[\d\s\-()]{10,}$")


def _blank(value):
    return not isinstance(value, str) or not value.strip()


def _validate_business_person(data):
    errors = []
    if _blank(data.get("companyName")):
        errors.append("Company name is required")
    if not data.get("businessCategory"):
        errors.append("Business category is required")
    description = data.get("briefDescription")
    if _blank(description):
        errors.append("Brief description is required")
    elif len(description) < 50:
        errors.append("Description should be at least 50 characters")
    return errors


def _validate_investor(data):
    errors = []
    if not data.get("investmentBudget"):
        errors.append("Investment budget is required")
    if not data.get("preferredSectors"):
        errors.append("At least one preferred sector is required")
    if _blank(data.get("investmentExperience")):
        errors.append("Investment experience is required")
    return errors


def _validate_banker_or_advisor(data):
    errors = []
    if _blank(data.get("institutionName")):
        errors.append("Institution name is required")
    if not data.get("designation"):
        errors.append("Designation is required")
    if not data.get("experienceYears"):
        errors.append("Experience is required")
    if not data.get("areaOfExpertise"):
        errors.append("At least one area of expertise is required")
    summary = data.get("professionalSummary")
    if _blank(summary):
        errors.append("Professional summary is required")
    elif len(summary) < 100:
        errors.append("Professional summary should be at least 100 characters")
    return errors


ROLE_VALIDATORS = {
    "business_person": _validate_business_person,
    "investor": _validate_investor,
    "banker": _validate_banker_or_advisor,
    "business_advisor": _validate_banker_or_advisor,
}


def validate_profile_data(role, data):
    """Return a list of human-readable problems with `data` for `role`."""
    errors = []
    if _blank(data.get("fullName")):
        errors.append("Full name is required")

    mobile = data.get("mobileNumber")
    if _blank(mobile):
        errors.append("Mobile number is required")
    elif not MOBILE_RE.match(mobile):
        errors.append("Invalid mobile number format")

    validator = ROLE_VALIDATORS.get(role)
    if validator is not None:
        errors.extend(validator(data))
    return errors


def complete_profile(caller, profile_data):
    """Validate and store the caller's role-specific profile.

    Returns:
        The updated User.

    Raises:
        Unauthenticated, InvalidArgument, NotFound, FailedPrecondition.
    """
    if caller is None or not getattr(caller, "is_authenticated", False):
        raise Unauthenticated("User must be authenticated")
    if not isinstance(profile_data, dict) or not profile_data:
        raise InvalidArgument("Profile data is required")

    user = db.session.get(User, caller.id)
    if user is None:
        raise NotFound("User profile not found")

    if user.role not in User.ROLES_REQUIRING_COMPLETION:
        raise FailedPrecondition("Profile completion not required for this role")

    errors = validate_profile_data(user.role, profile_data)
    if errors:
        raise InvalidArgument("; ".join(errors))

    merged = dict(user.profile or {})
    merged.update(profile_data)
    merged["isComplete"] = True

    user.display_name = profile_data["fullName"].strip()
    user.profile = merged  # reassign so the JSON column is marked dirty
    user.is_complete = True
    user.updated_at = datetime.now(timezone.utc)
    db.session.flush()

    # Audit log
    audit = AuditEvent(
        user_id=user.id,
        action="PROFILE_COMPLETED",
        data={
            "role": user.role,
            "completedAt": datetime.now(timezone.utc).isoformat(),
        },
    )
    db.session.add(audit)
    db.session.flush()

    logger.info(f"Profile completed for {user.id} ({user.role})")
    return user


def get_completion_status(caller):
    """Return the caller's profile completion status dict."""
    if caller is None or not getattr(caller, "is_authenticated", False):
        raise Unauthenticated("User must be authenticated")

    user = db.session.get(User, caller.id)
    if user is None:
        raise NotFound("User profile not found")

    return {
        "isComplete": user.is_complete is True,
        "requiresCompletion": user.role in User.ROLES_REQUIRING_COMPLETION,
        "role": user.role,
        "profile": user.profile or {},
    }
