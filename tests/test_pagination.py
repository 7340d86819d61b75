"""Tests for keyset pagination."""

from datetime import timedelta

import pytest
from django.db.models import Q
from django.utils import timezone

from social.models import Post
from social.pagination import keyset_filter, paginate


def test_keyset_filter_shape():
    condition = keyset_filter(['-score', 'id'], {'score': 3, 'id': 7})

    expected = Q(score__lt=3) | (Q(id__gt=7) & Q(score=3))
    assert condition == expected


@pytest.mark.django_db
def test_pages_never_repeat_or_skip(alice, make_post):
    same_time = timezone.now() - timedelta(hours=1)
    created = [make_post(alice, title=f"tie {i}", created_at=same_time) for i in range(7)]
    created += [make_post(alice, title=f"later {i}") for i in range(4)]

    seen = []
    cursor = None
    while True:
        rows, has_more = paginate(Post.objects.all(), ['-created_at', '-id'], cursor, 3)
        seen.extend(p.id for p in rows)
        if not has_more:
            break
        cursor = rows[-1].id

    assert len(seen) == len(set(seen)) == len(created)
    expected = [p.id for p in sorted(created, key=lambda p: (p.created_at, p.id), reverse=True)]
    assert seen == expected


@pytest.mark.django_db
def test_last_page_reports_no_more(alice, make_post):
    for i in range(3):
        make_post(alice, title=f"post {i}")

    rows, has_more = paginate(Post.objects.all(), ['-id'], None, 3)

    assert len(rows) == 3
    assert has_more is False


@pytest.mark.django_db
def test_unknown_cursor_yields_empty_page(alice, make_post):
    make_post(alice)

    rows, has_more = paginate(Post.objects.all(), ['-id'], 999999, 5)

    assert rows == []
    assert has_more is False


@pytest.mark.django_db
def test_lookup_finds_cursor_outside_filter(alice, make_post):
    posts = [make_post(alice, title=f"post {i}") for i in range(4)]
    posts[2].is_deleted = True
    posts[2].save(update_fields=["is_deleted"])

    base = Post.objects.all()
    rows, _ = paginate(base.filter(is_deleted=False), ['-id'], posts[2].id, 5, lookup=base)

    assert [p.id for p in rows] == [posts[1].id, posts[0].id]
