"""
================================================================================
DRIFNET - NOTIFICATION FAN-OUT
================================================================================

Every notification is written to the database first; the row is the source
of truth for the inbox and for pending follow/join requests.

Once the surrounding transaction commits, a denormalized JSON copy is pushed
to Redis for realtime delivery:

    RPUSH   notifications:<receiver_id>  <json>
    PUBLISH notifications:<receiver_id>  <json>

The list keeps a backlog for clients that connect later; the channel feeds
connected ones. The push is best-effort: a Redis outage is logged as a
warning and never fails the operation that produced the notification. With
REDIS_URL unset the push is skipped entirely.

A user never notifies themselves (liking or commenting on their own content
produces nothing).
================================================================================
"""

import json
import logging

import redis
from django.conf import settings
from django.db import transaction

from .formatting import iso, user_card
from .models import Notification, NotificationStatus

logger = logging.getLogger(__name__)

_client = None


def get_redis():
    """Shared client for REDIS_URL, or None when realtime push is disabled."""
    global _client
    if not settings.REDIS_URL:
        return None
    if _client is None:
        _client = redis.from_url(settings.REDIS_URL, socket_timeout=2, socket_connect_timeout=2)
    return _client


def channel_for(user_id):
    return f"notifications:{user_id}"


def serialize(notification):
    return {
        "id": notification.id,
        "type": notification.type,
        "status": notification.status,
        "sender": user_card(notification.sender),
        "receiver": user_card(notification.receiver),
        "postId": notification.post_id,
        "commentId": notification.comment_id,
        "communityId": notification.community_id,
        "createdAt": iso(notification.created_at),
    }


def publish(notification):
    """Push ``notification`` to its receiver's realtime channel. Returns True on success."""
    try:
        client = get_redis()
    except ValueError as e:
        logger.warning(f"Invalid REDIS_URL, realtime push disabled: {e}")
        return False
    if client is None:
        return False

    channel = channel_for(notification.receiver_id)
    payload = json.dumps(serialize(notification))
    try:
        client.rpush(channel, payload)
        client.publish(channel, payload)
    except redis.RedisError as e:
        logger.warning(f"Realtime push failed for notification {notification.id}: {e}")
        return False
    return True


def notify(type, receiver, sender=None, post=None, comment=None, community=None):
    """
    Record a notification for ``receiver`` and schedule its realtime push.

    Returns the Notification, or None for self-notifications.
    """
    if sender is not None and sender.pk == receiver.pk:
        return None

    notification = Notification.objects.create(
        type=type,
        sender=sender,
        receiver=receiver,
        post=post,
        comment=comment,
        community=community,
    )
    transaction.on_commit(lambda: publish(notification))
    return notification


# ============================================================================
# INBOX
# ============================================================================

def get_notifications(user):
    try:
        notifications = (
            Notification.objects
            .filter(receiver=user)
            .exclude(sender=user)
            .select_related('sender', 'receiver')
            .order_by('-created_at', '-id')
        )
        data = [serialize(n) for n in notifications]
    except Exception:
        logger.exception(f"Failed to get notifications for user {user.pk}")
        return {"success": False, "message": "Failed to get notifications", "data": []}

    return {"success": True, "message": "Fetched notifications", "data": data}


def read_notification(user, notification_id):
    """Reading a notification removes it from the inbox."""
    deleted, _ = Notification.objects.filter(pk=notification_id, receiver=user).delete()
    if not deleted:
        return {"success": False, "message": "Notification not found"}
    return {"success": True, "message": "Notification read"}


def clear_notifications(user):
    deleted, _ = Notification.objects.filter(receiver=user).delete()
    return {"success": True, "message": "All notifications cleared", "count": deleted}


def unread_count(user):
    count = (
        Notification.objects
        .filter(receiver=user, status=NotificationStatus.UNREAD)
        .exclude(sender=user)
        .count()
    )
    return {"success": True, "message": "Unread notifications counted", "count": count}
