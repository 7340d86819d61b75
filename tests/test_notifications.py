"""Tests for notification storage and the realtime Redis push."""

import json
import logging
from unittest.mock import MagicMock

import pytest
import redis

from social import notifications
from social.models import Notification, NotificationStatus, NotificationType


@pytest.fixture
def fake_redis(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(notifications, "get_redis", lambda: client)
    return client


@pytest.mark.django_db
def test_notify_skips_self_notifications(alice):
    assert notifications.notify(NotificationType.LIKE_POST, alice, sender=alice) is None
    assert not Notification.objects.exists()


@pytest.mark.django_db
def test_notify_pushes_after_commit(alice, bob, fake_redis, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        notification = notifications.notify(NotificationType.FOLLOWED, bob, sender=alice)

    channel = f"notifications:{bob.id}"
    fake_redis.rpush.assert_called_once()
    fake_redis.publish.assert_called_once()
    pushed_channel, payload = fake_redis.rpush.call_args.args
    assert pushed_channel == channel
    assert fake_redis.publish.call_args.args == (channel, payload)

    message = json.loads(payload)
    assert message["id"] == notification.id
    assert message["type"] == "FOLLOWED"
    assert message["status"] == NotificationStatus.UNREAD
    assert message["sender"] == {"id": alice.id, "name": alice.name, "imgUrl": alice.img_url}
    assert message["receiver"]["id"] == bob.id


@pytest.mark.django_db
def test_nothing_is_pushed_before_commit(alice, bob, fake_redis, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks() as callbacks:
        notifications.notify(NotificationType.FOLLOWED, bob, sender=alice)

    assert len(callbacks) == 1
    fake_redis.rpush.assert_not_called()


@pytest.mark.django_db
def test_redis_outage_is_logged_not_raised(alice, bob, fake_redis, caplog):
    fake_redis.rpush.side_effect = redis.ConnectionError("connection refused")
    notification = notifications.notify(NotificationType.FOLLOWED, bob, sender=alice)

    with caplog.at_level(logging.WARNING, logger="social.notifications"):
        assert notifications.publish(notification) is False

    assert "Realtime push failed" in caplog.text
    assert Notification.objects.filter(pk=notification.id).exists()


@pytest.mark.django_db
def test_publish_without_redis_url(alice, bob):
    notification = notifications.notify(NotificationType.FOLLOWED, bob, sender=alice)

    assert notifications.get_redis() is None
    assert notifications.publish(notification) is False


@pytest.mark.django_db
def test_invalid_redis_url_disables_push(alice, bob, settings, caplog):
    settings.REDIS_URL = "not-a-redis-url"
    notification = notifications.notify(NotificationType.FOLLOWED, bob, sender=alice)

    with caplog.at_level(logging.WARNING, logger="social.notifications"):
        assert notifications.publish(notification) is False

    assert "Invalid REDIS_URL" in caplog.text


# ==================== INBOX ====================

@pytest.mark.django_db
def test_inbox_lists_newest_first(alice, bob, carol):
    first = notifications.notify(NotificationType.FOLLOWED, alice, sender=bob)
    second = notifications.notify(NotificationType.PROFILE_VIEW, alice, sender=carol)
    notifications.notify(NotificationType.REPORT, bob)

    result = notifications.get_notifications(alice)

    assert [n["id"] for n in result["data"]] == [second.id, first.id]
    assert result["data"][1]["sender"]["id"] == bob.id


@pytest.mark.django_db
def test_read_notification_removes_it(alice, bob):
    notification = notifications.notify(NotificationType.FOLLOWED, alice, sender=bob)

    assert notifications.read_notification(bob, notification.id)["message"] == "Notification not found"
    assert notifications.read_notification(alice, notification.id)["success"] is True
    assert not Notification.objects.exists()


@pytest.mark.django_db
def test_clear_and_count(alice, bob, carol):
    notifications.notify(NotificationType.FOLLOWED, alice, sender=bob)
    notifications.notify(NotificationType.FOLLOWED, alice, sender=carol)
    notifications.notify(NotificationType.FOLLOWED, bob, sender=carol)

    assert notifications.unread_count(alice)["count"] == 2

    result = notifications.clear_notifications(alice)

    assert result["count"] == 2
    assert notifications.unread_count(alice)["count"] == 0
    assert Notification.objects.count() == 1
