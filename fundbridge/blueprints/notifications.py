"""Notifications blueprint — /api/notifications/*

Route Map:
  POST /api/notifications/getUserNotifications    — paged inbox, newest first
  POST /api/notifications/markNotificationAsRead  — recipient marks one read
"""

from flask import Blueprint, jsonify
from flask_login import current_user

from fundbridge.decorators import callable_endpoint, protect_session_callers
from fundbridge.extensions import db
from fundbridge.services import notification_service

notifications_bp = Blueprint(
    "notifications", __name__, url_prefix="/api/notifications"
)
notifications_bp.before_request(protect_session_callers)


@notifications_bp.route("/getUserNotifications", methods=["GET", "POST"])
@callable_endpoint
def get_user_notifications(data):
    """Accepts optional `limit` and `lastVisible` (cursor from the last page)."""
    page = notification_service.list_notifications(
        current_user,
        limit=data.get("limit"),
        last_visible=data.get("lastVisible"),
    )
    return jsonify(page)


@notifications_bp.route("/markNotificationAsRead", methods=["POST"])
@callable_endpoint
def mark_notification_as_read(data):
    notification_service.mark_as_read(current_user, data.get("notificationId"))
    db.session.commit()
    return jsonify(success=True, message="Notification marked as read!")
