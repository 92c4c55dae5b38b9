"""Users blueprint — /api/users/*

Route Map:
  POST /api/users/setUserRole          — pick a role at registration
  POST /api/users/changeUserRole       — switch role along the role matrix
  POST /api/users/getAvailableRoles    — current role and allowed switches
  POST /api/users/registerDeviceToken  — store (or clear) the push token
"""

from flask import Blueprint, jsonify
from flask_login import current_user

from fundbridge.decorators import callable_endpoint, protect_session_callers
from fundbridge.extensions import db, limiter
from fundbridge.services import firebase_service, notification_service, user_service

users_bp = Blueprint("users", __name__, url_prefix="/api/users")
users_bp.before_request(protect_session_callers)


@users_bp.route("/setUserRole", methods=["POST"])
@limiter.limit("10 per hour")
@callable_endpoint
def set_user_role(data):
    user = user_service.set_user_role(current_user, data.get("uid"), data.get("role"))
    db.session.commit()

    firebase_service.set_role_claim(user.id, user.role)

    return jsonify(success=True, role=user.role)


@users_bp.route("/changeUserRole", methods=["POST"])
@limiter.limit("10 per hour")
@callable_endpoint
def change_user_role(data):
    new_role = data.get("newRole")
    previous_role, notification = user_service.change_user_role(current_user, new_role)
    db.session.commit()

    firebase_service.set_role_claim(current_user.id, new_role)
    notification_service.deliver_push([notification])

    return jsonify(
        success=True,
        previousRole=previous_role,
        newRole=new_role,
        message=f"Role successfully changed from {previous_role} to {new_role}",
    )


@users_bp.route("/getAvailableRoles", methods=["GET", "POST"])
@callable_endpoint
def get_available_roles(data):
    return jsonify(user_service.get_available_roles(current_user))


@users_bp.route("/registerDeviceToken", methods=["POST"])
@callable_endpoint
def register_device_token(data):
    user_service.register_device_token(current_user, data.get("fcmToken"))
    db.session.commit()
    return jsonify(success=True, message="Device token saved.")
