"""Business ideas blueprint — /api/ideas/*

Route Map:
  POST /api/ideas/postBusinessIdea   — publish an idea; matching investors notified
  POST /api/ideas/getBusinessIdeas   — active ideas, newest first, paged
"""

from flask import Blueprint, jsonify
from flask_login import current_user

from fundbridge.decorators import callable_endpoint, protect_session_callers
from fundbridge.errors import Unauthenticated
from fundbridge.extensions import db, limiter
from fundbridge.services import idea_service, notification_service

ideas_bp = Blueprint("ideas", __name__, url_prefix="/api/ideas")
ideas_bp.before_request(protect_session_callers)


@ideas_bp.route("/postBusinessIdea", methods=["POST"])
@limiter.limit("20 per hour")
@callable_endpoint
def post_business_idea(data):
    idea, notifications = idea_service.post_business_idea(current_user, data)
    db.session.commit()

    notification_service.deliver_push(notifications)

    return jsonify(
        success=True,
        businessIdeaId=idea.id,
        message="Business idea posted successfully!",
    )


@ideas_bp.route("/getBusinessIdeas", methods=["GET", "POST"])
@callable_endpoint
def get_business_ideas(data):
    """Accepts optional `category`, `search`, `limit` and `lastVisible`."""
    if not current_user.is_authenticated:
        raise Unauthenticated("User must be authenticated.")
    page = idea_service.list_business_ideas(
        category=data.get("category"),
        search=data.get("search"),
        limit=data.get("limit"),
        last_visible=data.get("lastVisible"),
    )
    return jsonify(success=True, **page)
