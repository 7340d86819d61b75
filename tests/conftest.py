"""pytest configuration and fixtures."""

import itertools
import json
import logging

import pytest
from django.conf import settings as django_settings
from django.utils import timezone

from social.models import Community, CommunityMember, Post, User, Visibility
from social.sessions import start_session

PASSWORD = "correct-horse-42"


@pytest.fixture(autouse=True)
def offline_services(settings, monkeypatch):
    """Keep every test away from Redis, the moderation API and GitHub."""
    settings.REDIS_URL = ""
    settings.MODERATEAI_API_KEY = ""
    settings.GITHUB_CLIENT_ID = "gh-client"
    settings.GITHUB_CLIENT_SECRET = "gh-secret"
    monkeypatch.setattr("social.notifications._client", None)
    # LOGGING stops "social" at its own handler; let caplog see it
    monkeypatch.setattr(logging.getLogger("social"), "propagate", True)


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(name=None, account_type=Visibility.PUBLIC, verified=True, password=PASSWORD, **extra):
        n = next(counter)
        return User.objects.create_user(
            email=f"user{n}@example.com",
            password=password,
            name=name or f"User {n}",
            account_type=account_type,
            is_verified=verified,
            **extra,
        )

    return _make


@pytest.fixture
def alice(make_user):
    return make_user(name="Alice")


@pytest.fixture
def bob(make_user):
    return make_user(name="Bob")


@pytest.fixture
def carol(make_user):
    return make_user(name="Carol")


@pytest.fixture
def make_community(db):
    def _make(owner, name="Pythonistas", community_type=Visibility.PUBLIC, members=()):
        community = Community.objects.create(
            owner=owner,
            name=name,
            description=f"All about {name}",
            img_url="https://res.cloudinary.com/demo/image/upload/community.png",
            community_type=community_type,
        )
        CommunityMember.objects.create(user=owner, community=community, last_active=timezone.now())
        for member in members:
            CommunityMember.objects.create(user=member, community=community)
        return community

    return _make


@pytest.fixture
def make_post(db):
    def _make(user, title="Hello", body="First post", community=None, created_at=None, **extra):
        return Post.objects.create(
            user=user,
            title=title,
            body=body,
            community=community,
            created_at=created_at or timezone.now(),
            **extra,
        )

    return _make


@pytest.fixture
def login(client):
    """Attach a valid session cookie for ``user`` to the test client."""

    def _login(user):
        token = start_session(user, "127.0.0.1", "pytest")
        client.cookies[django_settings.SESSION_TOKEN_COOKIE] = token
        return token

    return _login


@pytest.fixture
def api(client):
    """JSON helpers over the test client; requests are sent as HTTPS."""

    class Api:
        def get(self, path, **params):
            return client.get(path, params, secure=True)

        def post(self, path, payload=None):
            return client.post(
                path,
                data=json.dumps(payload or {}),
                content_type="application/json",
                secure=True,
            )

    return Api()
