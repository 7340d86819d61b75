"""Tests for the trending feed."""

from datetime import timedelta

import pytest
from django.utils import timezone

from social.models import Comment, Engagement, EngagementType, Post
from social.posts import TRENDING_PAGE_SIZE, get_trending_posts


def _like(post, users):
    for user in users:
        Engagement.objects.create(user=user, post=post, type=EngagementType.LIKE)


def _walk(viewer, type):
    """Follow nextCursor until the feed runs out; returns the pages of ids."""
    pages = []
    cursor = None
    while True:
        result = get_trending_posts(viewer, cursor, type)
        assert result["success"] is True
        pages.append([p["id"] for p in result["posts"]])
        if not result["hasNextPage"]:
            assert result["nextCursor"] is None
            return pages
        assert result["nextCursor"] == pages[-1][-1]
        cursor = result["nextCursor"]


@pytest.mark.django_db
def test_top_ranks_by_engagement_then_comments(alice, bob, carol, make_post):
    quiet = make_post(alice, title="quiet")
    liked = make_post(alice, title="liked")
    discussed = make_post(alice, title="discussed")
    _like(liked, [bob, carol])
    _like(discussed, [bob, carol])
    Comment.objects.create(user=bob, post=discussed, content="hm")

    result = get_trending_posts(alice, None, "top")

    assert [p["id"] for p in result["posts"]] == [discussed.id, liked.id, quiet.id]


@pytest.mark.django_db
def test_top_only_covers_last_fourteen_days(alice, make_post):
    fresh = make_post(alice, title="fresh")
    old = make_post(alice, title="old", created_at=timezone.now() - timedelta(days=15))

    top = [p["id"] for p in get_trending_posts(None, None, "top")["posts"]]
    new = [p["id"] for p in get_trending_posts(None, None, "new")["posts"]]

    assert top == [fresh.id]
    assert new == [fresh.id, old.id]


@pytest.mark.django_db
def test_new_orders_by_creation_time(alice, bob, make_post):
    now = timezone.now()
    older = make_post(alice, created_at=now - timedelta(hours=2))
    newer = make_post(alice, created_at=now - timedelta(hours=1))
    _like(older, [bob])

    result = get_trending_posts(None, None, "new")

    assert [p["id"] for p in result["posts"]] == [newer.id, older.id]


@pytest.mark.django_db
@pytest.mark.parametrize("type", ["top", "new"])
def test_paging_never_repeats_or_skips(type, make_user, make_post):
    author = make_user()
    fans = [make_user() for _ in range(3)]
    same_time = timezone.now() - timedelta(hours=3)
    created = []
    for i in range(12):
        post = make_post(author, title=f"post {i}", created_at=same_time if i % 2 else None)
        _like(post, fans[: i % 3])
        created.append(post.id)

    pages = _walk(None, type)

    assert [len(page) for page in pages] == [TRENDING_PAGE_SIZE, TRENDING_PAGE_SIZE, 2]
    seen = [post_id for page in pages for post_id in page]
    assert sorted(seen) == sorted(created)
    assert len(set(seen)) == len(seen)


@pytest.mark.django_db
def test_cursor_survives_deletion_of_its_post(alice, make_post):
    for i in range(7):
        make_post(alice, title=f"post {i}")
    first = get_trending_posts(None, None, "new")
    first_ids = [p["id"] for p in first["posts"]]

    Post.objects.filter(pk=first["nextCursor"]).update(is_deleted=True)

    second = get_trending_posts(None, first["nextCursor"], "new")

    assert len(second["posts"]) == 2
    assert not set(first_ids) & {p["id"] for p in second["posts"]}


@pytest.mark.django_db
def test_deleted_posts_are_hidden(alice, make_post):
    make_post(alice, is_deleted=True)

    result = get_trending_posts(None, None, "top")

    assert result["posts"] == []
    assert result["hasNextPage"] is False


@pytest.mark.django_db
def test_unknown_feed_type(alice):
    result = get_trending_posts(alice, None, "hot")

    assert result == {
        "success": False,
        "message": "Invalid feed type",
        "posts": [],
        "hasNextPage": False,
        "nextCursor": None,
    }
