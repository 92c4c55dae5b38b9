"""Business idea service — posting ideas and browsing the active listing.

post_business_idea writes the idea, its audit entry, and one
NEW_BUSINESS_IDEA notification per matching investor, all flushed into the
caller's transaction. The endpoint commits, then pushes.
"""

import logging
from datetime import datetime, timezone

import bleach
from flask import current_app
from sqlalchemy import String, and_, cast, or_
from sqlalchemy.exc import SQLAlchemyError

from fundbridge.errors import (
    FailedPrecondition,
    Internal,
    InvalidArgument,
    NotFound,
    Unauthenticated,
)
from fundbridge.extensions import db
from fundbridge.models.audit import AuditEvent
from fundbridge.models.business_idea import BusinessIdea
from fundbridge.models.notification import Notification
from fundbridge.models.user import User
from fundbridge.services import notification_service

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All Categories"
MAX_PAGE_SIZE = 100

# (payload key, error message), checked in order
REQUIRED_FIELDS = [
    ("title", "Title is required."),
    ("category", "Category is required."),
    ("description", "Description is required."),
    ("budget", "Budget is required."),
    ("timeline", "Timeline is required."),
]

# Description keywords -> tag
TAG_KEYWORDS = [
    (("ai", "artificial intelligence", "machine learning"), "AI"),
    (("blockchain", "crypto", "cryptocurrency"), "Blockchain"),
    (("mobile", "app", "android", "ios"), "Mobile"),
    (("web", "website", "online"), "Web"),
    (("startup", "entrepreneur"), "Startup"),
    (("b2b", "business to business"), "B2B"),
    (("b2c", "business to consumer"), "B2C"),
    (("saas", "software as a service"), "SaaS"),
    (("iot", "internet of things"), "IoT"),
    (("fintech", "financial technology"), "FinTech"),
]


def _sanitize(text):
    """Strip all HTML tags from user input."""
    if text is None:
        return ""
    return bleach.clean(str(text), tags=[], strip=True).strip()


def extract_tags(description, category):
    """The category, then one tag per keyword group found in the description."""
    tags = [category]
    lowered = (description or "").lower()
    for terms, tag in TAG_KEYWORDS:
        if any(term in lowered for term in terms) and tag not in tags:
            tags.append(tag)
    return tags


def _author_snapshot(user):
    if not user.is_complete:
        return None
    profile = user.profile or {}
    return {
        "uid": user.id,
        "fullName": profile.get("fullName") or user.display_name or "",
        "email": user.email or "",
        "role": user.role,
        "mobileNumber": profile.get("mobileNumber"),
        "companyName": profile.get("companyName"),
        "designation": profile.get("designation"),
        "isComplete": True,
    }


def _interested_investor_ids(category):
    """Complete, active investors with no sector preference or a matching one."""
    investors = User.query.filter(
        User.role == "investor",
        User.is_complete.is_(True),
        User.is_active.is_(True),
    ).order_by(User.id)
    ids = []
    for investor in investors:
        sectors = (investor.profile or {}).get("preferredSectors") or []
        if not sectors or category in sectors:
            ids.append(investor.id)
    return ids


def post_business_idea(caller, data):
    """Publish a business idea and notify investors who may want it.

    Args:
        caller: The authenticated author.
        data: Payload with title, category, description, budget, timeline
            and optional targetMarket, revenue, team.

    Returns:
        Tuple of (idea, notifications).

    Raises:
        Unauthenticated, InvalidArgument, NotFound, FailedPrecondition,
        Internal.
    """
    if caller is None or not getattr(caller, "is_authenticated", False):
        raise Unauthenticated("User must be authenticated to post business ideas.")

    data = data if isinstance(data, dict) else {}
    for key, message in REQUIRED_FIELDS:
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            raise InvalidArgument(message)

    author = db.session.get(User, caller.id)
    if author is None:
        raise NotFound("User profile not found.")

    profile = author.profile or {}
    if author.role == "business_person" and not str(profile.get("companyName") or "").strip():
        raise FailedPrecondition(
            "Your company name is missing. Please complete your profile "
            "before posting a business idea."
        )

    title = _sanitize(data["title"])
    category = _sanitize(data["category"])
    description = _sanitize(data["description"])

    now = datetime.now(timezone.utc)
    idea = BusinessIdea(
        user_id=author.id,
        author_name=author.display_name or profile.get("fullName") or "",
        author_email=author.email or "",
        author_profile=_author_snapshot(author),
        title=title,
        category=category,
        description=description,
        budget=_sanitize(data["budget"]),
        timeline=_sanitize(data["timeline"]),
        target_market=_sanitize(data.get("targetMarket")),
        revenue_model=_sanitize(data.get("revenue")),
        team_info=_sanitize(data.get("team")),
        tags=extract_tags(description, category),
        status="active",
        views=0,
        interested=0,
        featured=False,
        created_at=now,
        updated_at=now,
    )

    try:
        db.session.add(idea)
        db.session.flush()

        # Audit log
        audit = AuditEvent(
            user_id=author.id,
            action="BUSINESS_IDEA_POSTED",
            data={
                "businessIdeaId": idea.id,
                "title": title,
                "category": category,
                "budget": idea.budget,
            },
        )
        db.session.add(audit)

        notifications = notification_service.create_bulk_notifications(
            _interested_investor_ids(category),
            title="New Business Opportunity",
            body=f'A new {category} business idea "{title}" is looking for investment.',
            type=Notification.NEW_BUSINESS_IDEA,
            data={"businessIdeaId": idea.id, "category": category, "title": title},
        )
    except SQLAlchemyError as e:
        logger.error(f"Error posting business idea: {e}")
        db.session.rollback()
        raise Internal("Failed to post business idea.") from e

    logger.info(
        f"Business idea {idea.id} posted by {author.id}; "
        f"{len(notifications)} investors notified"
    )
    return idea, notifications


def list_business_ideas(category=None, search=None, limit=None, last_visible=None):
    """Page through active ideas, newest first.

    Args:
        category: Exact category filter; None or "All Categories" for all.
        search: Case-insensitive text matched against title, description
            and tags.
        limit: Page size (default NOTIFICATION_PAGE_SIZE, capped at 100).
        last_visible: Id of the last idea of the previous page.

    Returns:
        dict with businessIdeas, hasMore, lastVisible.
    """
    if limit is None:
        limit = current_app.config.get("NOTIFICATION_PAGE_SIZE", 20)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidArgument("Limit must be a positive integer.")
    limit = min(limit, MAX_PAGE_SIZE)

    try:
        query = BusinessIdea.query.filter_by(status="active")

        if category and category != ALL_CATEGORIES:
            query = query.filter_by(category=category)

        if isinstance(search, str) and search.strip():
            term = search.strip()
            query = query.filter(
                or_(
                    BusinessIdea.title.icontains(term, autoescape=True),
                    BusinessIdea.description.icontains(term, autoescape=True),
                    cast(BusinessIdea.tags, String).icontains(term, autoescape=True),
                )
            )

        if last_visible:
            cursor = db.session.get(BusinessIdea, last_visible)
            if cursor is not None:
                query = query.filter(
                    or_(
                        BusinessIdea.created_at < cursor.created_at,
                        and_(
                            BusinessIdea.created_at == cursor.created_at,
                            BusinessIdea.id < cursor.id,
                        ),
                    )
                )

        ideas = (
            query
            .order_by(BusinessIdea.created_at.desc(), BusinessIdea.id.desc())
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error getting business ideas: {e}")
        raise Internal("Failed to get business ideas.") from e

    return {
        "businessIdeas": [idea.to_dict() for idea in ideas],
        "hasMore": len(ideas) == limit,
        "lastVisible": ideas[-1].id if ideas else None,
    }
