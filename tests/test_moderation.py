"""Tests for the content moderation client."""

from unittest.mock import MagicMock

import pytest
import requests

from social import moderation


@pytest.fixture
def moderation_api(settings, monkeypatch):
    settings.MODERATEAI_API_KEY = "test-key"
    post = MagicMock()
    monkeypatch.setattr(moderation.requests, "post", post)

    def reply(payload):
        post.return_value = MagicMock(**{"json.return_value": payload})
        return post

    return reply


def test_no_api_key_means_no_verdict(monkeypatch):
    post = MagicMock()
    monkeypatch.setattr(moderation.requests, "post", post)

    assert moderation.content_filter("anything") is None
    assert moderation.is_flagged("anything") is False
    post.assert_not_called()


def test_safe_content(moderation_api, settings):
    post = moderation_api({"safe": True, "confidence": 0.4})

    assert moderation.content_filter("hello there") is True
    assert post.call_args.kwargs["json"] == {"text": "hello there", "context": "comment"}
    assert post.call_args.kwargs["headers"]["X-API-Key"] == "test-key"
    assert post.call_args.kwargs["timeout"] == settings.MODERATION_TIMEOUT


@pytest.mark.parametrize("payload", [
    {"safe": False, "confidence": 0.2},
    {"safe": True, "confidence": 0.99},
])
def test_flagged_content(moderation_api, payload):
    moderation_api(payload)

    assert moderation.content_filter("text") is False
    assert moderation.is_flagged("text") is True


def test_boundary_confidence_is_safe(moderation_api):
    moderation_api({"safe": True, "confidence": moderation.MAX_SAFE_CONFIDENCE})

    assert moderation.content_filter("text") is True


@pytest.mark.parametrize("payload", [{"confidence": 0.1}, ["safe"], None])
def test_reply_without_verdict(moderation_api, payload):
    moderation_api(payload)

    assert moderation.content_filter("text") is None


def test_network_error_means_no_verdict(moderation_api, monkeypatch):
    monkeypatch.setattr(
        moderation.requests, "post", MagicMock(side_effect=requests.Timeout("slow"))
    )

    assert moderation.content_filter("text") is None
    assert moderation.is_flagged("text") is False
