"""Profile blueprint — /api/profile/*

Route Map:
  POST /api/profile/completeUserProfile         — role-specific completion
  POST /api/profile/getProfileCompletionStatus  — completion status
"""

from flask import Blueprint, jsonify
from flask_login import current_user

from fundbridge.decorators import callable_endpoint, protect_session_callers
from fundbridge.extensions import db
from fundbridge.services import profile_service

profile_bp = Blueprint("profile", __name__, url_prefix="/api/profile")
profile_bp.before_request(protect_session_callers)


@profile_bp.route("/completeUserProfile", methods=["POST"])
@callable_endpoint
def complete_user_profile(data):
    """Body: {"profileData": {...}} with fullName, mobileNumber and role fields."""
    profile_service.complete_profile(current_user, data.get("profileData"))
    db.session.commit()
    return jsonify(success=True, message="Profile completed successfully")


@profile_bp.route("/getProfileCompletionStatus", methods=["GET", "POST"])
@callable_endpoint
def get_profile_completion_status(data):
    return jsonify(profile_service.get_completion_status(current_user))
