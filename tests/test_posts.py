"""Tests for posts, reactions, comments and reports."""

from unittest.mock import MagicMock

import pytest
from django.db import DatabaseError

from social import posts
from social.models import (
    Comment, CommunityMember, Deletion, Engagement, EngagementType, Notification,
    NotificationType, Post, Report,
)
from social.moderation import WARN_COMMENT, WARN_POST


@pytest.fixture
def flag_everything(monkeypatch):
    monkeypatch.setattr(posts, "is_flagged", lambda text: True)


# ==================== POSTS ====================

@pytest.mark.django_db
def test_create_post(alice):
    result = posts.create_post(alice, {
        "title": " Launch ",
        "body": "We shipped it",
        "imgUrls": ["https://img.example.com/a.png", "  "],
    })

    assert result["success"] is True
    post = Post.objects.get(pk=result["post"]["id"])
    assert post.title == "Launch"
    assert post.img_urls == ["https://img.example.com/a.png"]
    assert post.community is None


@pytest.mark.django_db
def test_create_post_validation(alice):
    assert posts.create_post(alice, {"title": "t"})["message"] == "Required fields are missing"
    assert posts.create_post(alice, {"title": "t", "body": "b", "imgUrls": "x"})["success"] is False
    assert not Post.objects.exists()


@pytest.mark.django_db
def test_community_post_requires_membership(alice, bob, make_community):
    community = make_community(bob)

    result = posts.create_post(alice, {"title": "t", "body": "b", "communityId": community.id})

    assert result["message"] == "User is not a member of this community"
    assert not Post.objects.exists()


@pytest.mark.django_db
def test_community_post_touches_last_active(alice, bob, make_community):
    community = make_community(bob, members=[alice])

    result = posts.create_post(alice, {"title": "t", "body": "b", "communityId": community.id})

    assert result["success"] is True
    assert Post.objects.get().community == community
    assert CommunityMember.objects.get(user=alice, community=community).last_active is not None


@pytest.mark.django_db
def test_flagged_post_is_not_stored(alice, flag_everything):
    result = posts.create_post(alice, {"title": "t", "body": "b"})

    assert result == {"success": True, "message": "Content is intense", "warnAI": WARN_POST}
    assert not Post.objects.exists()


@pytest.mark.django_db
def test_delete_post_is_owner_only_and_soft(alice, bob, make_post):
    post = make_post(alice)

    assert posts.delete_post(bob, post.id)["message"] == "You can only delete your own posts"
    assert posts.delete_post(alice, post.id)["success"] is True
    assert posts.delete_post(alice, post.id)["message"] == "Post not found"

    post.refresh_from_db()
    assert post.is_deleted is True
    assert Deletion.objects.filter(post=post, user=alice).exists()
    assert posts.get_user_posts(alice.id, bob)["posts"] == []


@pytest.mark.django_db
def test_delete_post_database_error(alice, make_post, monkeypatch, caplog):
    post = make_post(alice)
    monkeypatch.setattr(posts, "soft_delete_post", MagicMock(side_effect=DatabaseError("down")))

    assert posts.delete_post(alice, post.id) == {"success": False, "message": "Failed to delete post"}
    assert "Failed to delete post" in caplog.text
    post.refresh_from_db()
    assert post.is_deleted is False


@pytest.mark.django_db
def test_user_posts_reflect_viewer(alice, bob, make_post, make_community):
    community = make_community(alice, members=[bob])
    post = make_post(alice, community=community)
    Engagement.objects.create(user=bob, post=post, type=EngagementType.LIKE)
    Comment.objects.create(user=bob, post=post, content="nice")

    [card] = posts.get_user_posts(alice.id, bob)["posts"]

    assert card["id"] == post.id
    assert card["likesCount"] == 1
    assert card["commentsCount"] == 1
    assert card["isLiked"] is True
    assert card["isDisliked"] is False
    assert card["user"]["id"] == alice.id
    assert card["user"]["isFollowedByCurrentUser"] is False
    assert card["community"]["isCommunityMember"] is True
    assert card["community"]["membersCount"] == 2


@pytest.mark.django_db
def test_user_posts_for_anonymous_viewer(alice, make_post):
    make_post(alice)

    [card] = posts.get_user_posts(alice.id)["posts"]

    assert card["isLiked"] is False
    assert card["user"]["isRequested"] is False


# ==================== REACTIONS ====================

@pytest.mark.django_db
def test_like_toggle_cycle(alice, bob, make_post):
    post = make_post(alice)

    assert posts.like_dislike(bob, post.id, "LIKE")["message"] == "LIKE added"
    assert posts.like_dislike(bob, post.id, "DISLIKE")["message"] == "Changed to DISLIKE"
    assert Engagement.objects.get(user=bob, post=post).type == EngagementType.DISLIKE
    assert posts.like_dislike(bob, post.id, "DISLIKE")["message"] == "Action removed"
    assert not Engagement.objects.exists()


@pytest.mark.django_db
def test_only_likes_notify_the_owner(alice, bob, carol, make_post):
    post = make_post(alice)

    posts.like_dislike(bob, post.id, "LIKE")
    posts.like_dislike(carol, post.id, "DISLIKE")
    posts.like_dislike(alice, post.id, "LIKE")

    likes = Notification.objects.filter(type=NotificationType.LIKE_POST)
    assert [(n.sender, n.receiver) for n in likes] == [(bob, alice)]


@pytest.mark.django_db
def test_comment_like_notifies_comment_author(alice, bob, carol, make_post):
    post = make_post(alice)
    comment = Comment.objects.create(user=bob, post=post, content="first")

    posts.like_dislike(carol, post.id, "LIKE", comment.id)

    notification = Notification.objects.get(type=NotificationType.LIKE_POST)
    assert notification.receiver == bob
    assert notification.comment == comment
    # A comment like is not a post like
    assert posts.get_user_posts(alice.id, carol)["posts"][0]["likesCount"] == 0


@pytest.mark.django_db
def test_reaction_validation(alice, make_post):
    post = make_post(alice)

    assert posts.like_dislike(alice, post.id, "LOVE")["message"] == "Invalid reaction type"
    assert posts.like_dislike(alice, 55555, "LIKE")["message"] == "Post not found"
    assert posts.like_dislike(alice, post.id, "LIKE", 55555)["message"] == "Comment not found"


# ==================== COMMENTS ====================

@pytest.mark.django_db
def test_add_comment_notifies_post_owner_once(alice, bob, make_post):
    post = make_post(alice)

    result = posts.add_comment(bob, post.id, " great post ")

    assert result["success"] is True
    [created] = result["comments"]
    assert created["content"] == "great post"
    assert created["replies"] == []
    assert created["user"]["id"] == bob.id
    assert Notification.objects.filter(type=NotificationType.COMMENT_POST).count() == 1


@pytest.mark.django_db
def test_replies_stay_one_level_deep(alice, bob, make_post):
    post = make_post(alice)
    top = Comment.objects.create(user=alice, post=post, content="top")

    reply = posts.add_comment(bob, post.id, "reply", top.id)
    assert reply["comments"][0]["parentCommentId"] == top.id

    nested = posts.add_comment(alice, post.id, "nested", reply["comments"][0]["id"])
    assert nested["message"] == "Maximum reply depth reached"


@pytest.mark.django_db
def test_flagged_comment_is_not_stored(alice, make_post, flag_everything):
    post = make_post(alice)

    result = posts.add_comment(alice, post.id, "!!!")

    assert result["warnAI"] == WARN_COMMENT
    assert not Comment.objects.exists()


@pytest.mark.django_db
def test_get_comments_and_replies(alice, bob, make_post):
    post = make_post(alice)
    top = Comment.objects.create(user=alice, post=post, content="top")
    Comment.objects.create(user=bob, post=post, parent=top, content="reply")
    Comment.objects.create(user=bob, post=post, content="gone", is_deleted=True)
    Engagement.objects.create(user=bob, post=post, comment=top, type=EngagementType.LIKE)

    [comment] = posts.get_comments(post.id, bob)["comments"]

    assert comment["id"] == top.id
    assert comment["likeCount"] == 1
    assert comment["isLiked"] is True
    assert comment["repliesCount"] == 1

    replies = posts.get_comments(post.id, None, top.id)["comments"]
    assert [r["content"] for r in replies] == ["reply"]
    assert replies[0]["isLiked"] is False


@pytest.mark.django_db
def test_delete_comment(alice, bob, make_post):
    post = make_post(alice)
    comment = Comment.objects.create(user=bob, post=post, content="oops")

    assert posts.delete_comment(alice, comment.id)["message"] == "You can only delete your own comments"
    assert posts.delete_comment(bob, comment.id)["success"] is True
    assert posts.delete_comment(bob, comment.id)["message"] == "Comment already deleted"
    assert Deletion.objects.filter(comment=comment).count() == 1
    assert posts.get_comments(post.id)["comments"] == []


@pytest.mark.django_db
def test_edit_comment(alice, bob, make_post):
    post = make_post(alice)
    comment = Comment.objects.create(user=bob, post=post, content="typo")

    assert posts.edit_comment(alice, comment.id, "hijack")["success"] is False
    assert posts.edit_comment(bob, comment.id, " fixed ")["success"] is True
    comment.refresh_from_db()
    assert comment.content == "fixed"


# ==================== REPORTS ====================

@pytest.mark.django_db
def test_report_post(alice, bob, make_post):
    post = make_post(bob)

    result = posts.report(alice, bob.id, "spam", post_id=post.id)

    assert result["success"] is True
    report = Report.objects.get()
    assert (report.user, report.reporter, report.post) == (bob, alice, post)
    notification = Notification.objects.get(type=NotificationType.REPORT)
    assert notification.receiver == bob
    assert notification.sender is None


@pytest.mark.django_db
def test_report_validation(alice, bob, make_post):
    alices_post = make_post(alice)

    assert posts.report(alice, alice.id, "me")["message"] == "You cannot report yourself"
    assert posts.report(alice, bob.id, "")["message"] == "Required fields are missing"
    assert posts.report(alice, bob.id, "x", post_id=alices_post.id)["message"] == "Reported post not found"
    assert posts.report(alice, 777777, "x")["message"] == "User not found"
    assert not Report.objects.exists()
