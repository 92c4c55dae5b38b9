"""Notification service — inbox writes, reads, push fan-out, retention.

Writers flush but do NOT commit. The caller commits, so a notification
lands in the same transaction as the action that caused it. Push delivery
(deliver_push) must be called after the commit; it never raises.
"""

import logging
from datetime import datetime, timedelta, timezone

from flask import current_app
from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError

from fundbridge.errors import InvalidArgument, Internal, NotFound, PermissionDenied, Unauthenticated
from fundbridge.extensions import db
from fundbridge.models.audit import AuditEvent
from fundbridge.models.notification import Notification
from fundbridge.models.user import User
from fundbridge.services import firebase_service

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def create_notification(user_id, title, body, type=None, data=None):
    """Add one notification for `user_id`.

    Returns:
        The created Notification (flushed, not committed).
    """
    now = datetime.now(timezone.utc)
    notification = Notification(
        user_id=user_id,
        title=title,
        body=body,
        type=type,
        data=data or {},
        read=False,
        created_at=now,
        updated_at=now,
    )
    db.session.add(notification)
    db.session.flush()
    return notification


def create_bulk_notifications(user_ids, title, body, type=None, data=None):
    """Add the same notification for every id in `user_ids`.

    Returns:
        List of created Notification objects, in `user_ids` order.
    """
    now = datetime.now(timezone.utc)
    notifications = [
        Notification(
            user_id=user_id,
            title=title,
            body=body,
            type=type,
            data=dict(data or {}),
            read=False,
            created_at=now,
            updated_at=now,
        )
        for user_id in user_ids
    ]
    db.session.add_all(notifications)
    db.session.flush()
    return notifications


def deliver_push(notifications, title=None, body=None):
    """Push each notification to its recipient's device, if they have one.

    `title`/`body` override the stored text (e.g. a shorter lock-screen line).
    Returns the number of messages FCM accepted.
    """
    sent = 0
    for notification in notifications:
        try:
            user = db.session.get(User, notification.user_id)
            if user is None or not user.fcm_token:
                continue
            payload = dict(notification.data or {})
            payload["type"] = notification.type
            payload["notificationId"] = notification.id
            if firebase_service.send_push(
                user.fcm_token,
                title or notification.title,
                body or notification.body,
                data=payload,
            ):
                sent += 1
        except SQLAlchemyError as e:
            # The action is already committed; a lost push is logged only
            db.session.rollback()
            logger.error(f"Push skipped, recipient lookup failed: {e}")
    return sent


def list_notifications(caller, limit=None, last_visible=None):
    """Page through the caller's notifications, newest first.

    Args:
        caller: Authenticated user.
        limit: Page size (default NOTIFICATION_PAGE_SIZE, capped at 100).
        last_visible: Id of the last notification of the previous page.

    Returns:
        dict with notifications, hasMore, lastVisible.
    """
    if caller is None or not caller.is_authenticated:
        raise Unauthenticated("User must be authenticated.")

    if limit is None:
        limit = current_app.config.get("NOTIFICATION_PAGE_SIZE", 20)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidArgument("Limit must be a positive integer.")
    limit = min(limit, MAX_PAGE_SIZE)

    try:
        query = Notification.query.filter_by(user_id=caller.id)

        if last_visible:
            cursor = db.session.get(Notification, last_visible)
            if cursor is not None and cursor.user_id == caller.id:
                query = query.filter(
                    or_(
                        Notification.created_at < cursor.created_at,
                        and_(
                            Notification.created_at == cursor.created_at,
                            Notification.id < cursor.id,
                        ),
                    )
                )

        notifications = (
            query
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error getting notifications: {e}")
        raise Internal("Failed to get notifications.") from e

    return {
        "notifications": [n.to_dict() for n in notifications],
        "hasMore": len(notifications) == limit,
        "lastVisible": notifications[-1].id if notifications else None,
    }


def mark_as_read(caller, notification_id):
    """Mark one of the caller's notifications as read.

    Raises:
        NotFound: If the notification doesn't exist.
        PermissionDenied: If it belongs to someone else.
    """
    if caller is None or not caller.is_authenticated:
        raise Unauthenticated("User must be authenticated.")
    if not notification_id or not str(notification_id).strip():
        raise InvalidArgument("Notification ID is required.")

    notification = db.session.get(Notification, notification_id)
    if notification is None:
        raise NotFound("Notification not found.")
    if notification.user_id != caller.id:
        raise PermissionDenied("You can only update your own notifications.")

    now = datetime.now(timezone.utc)
    notification.read = True
    notification.read_at = now
    notification.updated_at = now
    db.session.flush()
    return notification


def cleanup_old_notifications(days=None, batch_size=None):
    """Delete one batch of notifications older than the retention window.

    Writes a NOTIFICATIONS_CLEANUP audit event attributed to "system".
    Flushes; the caller commits.

    Returns:
        Number of notifications deleted.
    """
    if days is None:
        days = current_app.config.get("NOTIFICATION_RETENTION_DAYS", 30)
    if batch_size is None:
        batch_size = current_app.config.get("NOTIFICATION_CLEANUP_BATCH", 500)

    cutoff = datetime.now(timezone.utc) - timedelta(days=days)

    old_ids = [
        row.id
        for row in (
            db.session.query(Notification.id)
            .filter(Notification.created_at < cutoff)
            .limit(batch_size)
            .all()
        )
    ]
    deleted = 0
    if old_ids:
        deleted = (
            Notification.query
            .filter(Notification.id.in_(old_ids))
            .delete(synchronize_session=False)
        )

    audit = AuditEvent(
        user_id=AuditEvent.SYSTEM_USER,
        action="NOTIFICATIONS_CLEANUP",
        data={
            "deletedCount": deleted,
            "cutoffDate": cutoff.isoformat(),
        },
    )
    db.session.add(audit)
    db.session.flush()

    logger.info(f"Deleted {deleted} old notifications")
    return deleted
