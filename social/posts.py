"""
================================================================================
DRIFNET - POST SERVICE
================================================================================

Posts, comments, likes/dislikes and reports.

TRENDING FEED
================================================================================
Two rankings, both paged 5 posts at a time with a keyset cursor
(see social.pagination):

    top  posts from the last 14 days, ordered by
         engagement count desc, comment count desc, id desc
    new  all posts, ordered by
         created_at desc, engagement count desc, comment count desc, id desc

Ranking counts include every engagement on the post (likes and dislikes on
the post and on its comments) and every comment. The counts shown on a post
card are narrower: likesCount counts post likes only and commentsCount
counts live top-level comments.

ENGAGEMENT TOGGLE
================================================================================
    no reaction   + LIKE/DISLIKE  -> reaction created (LIKE notifies the owner)
    same reaction + same type     -> reaction removed
    other reaction                -> reaction switched

MODERATION
================================================================================
New posts and comments go through social.moderation first. Flagged content
is not stored; the call still succeeds and carries a ``warnAI`` message for
the client to display.
================================================================================
"""

import logging
from datetime import timedelta

from django.db import transaction
from django.db.models import Exists, OuterRef, Value, BooleanField
from django.utils import timezone

from .formatting import iso, user_card
from .models import (
    Comment, CommunityMember, Deletion, Engagement, EngagementType, NotificationType, Post,
    Report, User,
)
from .moderation import WARN_COMMENT, WARN_POST, is_flagged
from .notifications import notify
from .pagination import paginate
from .queries import community_flags, count_of, follow_flags, member_count, viewer_reaction

logger = logging.getLogger(__name__)

TRENDING_PAGE_SIZE = 5
TRENDING_WINDOW_DAYS = 14
TRENDING_TYPES = ("top", "new")

TOP_ORDERING = ['-engagement_count', '-comment_count', '-id']
NEW_ORDERING = ['-created_at', '-engagement_count', '-comment_count', '-id']
TIMELINE_ORDERING = ['-created_at', '-id']


def _fail(message, **payload):
    return {"success": False, "message": message, **payload}


# ============================================================================
# SECTION 1: FEED QUERIES & FORMATTING
# ============================================================================

def feed_queryset(viewer):
    """Posts annotated with everything format_post needs for ``viewer``."""
    return (
        Post.objects
        .select_related('user', 'community')
        .annotate(
            comments_count=count_of(
                Comment.objects.filter(parent__isnull=True, is_deleted=False), 'post'
            ),
            likes_count=count_of(
                Engagement.objects.filter(type=EngagementType.LIKE, comment__isnull=True), 'post'
            ),
            community_members_count=member_count(ref='community'),
            viewer_reaction=viewer_reaction(viewer),
            **follow_flags(viewer, ref='user'),
            **community_flags(viewer, ref='community'),
        )
    )


def ranked_queryset(viewer):
    return feed_queryset(viewer).annotate(
        engagement_count=count_of(Engagement.objects.all(), 'post'),
        comment_count=count_of(Comment.objects.all(), 'post'),
    )


def format_post(post):
    community = None
    if post.community is not None:
        community = {
            "id": post.community.id,
            "name": post.community.name,
            "description": post.community.description,
            "imgUrl": post.community.img_url,
            "membersCount": post.community_members_count,
            "isCommunityMember": post.is_member,
            "isRequested": post.join_requested,
        }

    return {
        "id": post.id,
        "title": post.title,
        "body": post.body,
        "imgUrls": post.img_urls,
        "createdAt": iso(post.created_at),
        "community": community,
        "user": {
            **user_card(post.user),
            "isRequested": post.is_requested,
            "isFollowedByCurrentUser": post.is_followed,
            "followsCurrentUser": post.follows_viewer,
        },
        "commentsCount": post.comments_count,
        "likesCount": post.likes_count,
        "isLiked": post.viewer_reaction == EngagementType.LIKE,
        "isDisliked": post.viewer_reaction == EngagementType.DISLIKE,
    }


def format_comment(comment, like_count=0, is_liked=False, replies_count=0):
    return {
        "id": comment.id,
        "content": comment.content,
        "parentCommentId": comment.parent_id,
        "user": user_card(comment.user),
        "likeCount": like_count,
        "isLiked": is_liked,
        "repliesCount": replies_count,
        "createdAt": iso(comment.created_at),
    }


def soft_delete_post(post, user):
    with transaction.atomic():
        post.is_deleted = True
        post.save(update_fields=['is_deleted'])
        Deletion.objects.create(user=user, post=post)


def soft_delete_comment(comment, user):
    with transaction.atomic():
        comment.is_deleted = True
        comment.save(update_fields=['is_deleted'])
        Deletion.objects.create(user=user, comment=comment)


# ============================================================================
# SECTION 2: POSTS
# ============================================================================

def clean_img_urls(img_urls):
    if img_urls is None:
        return []
    if not isinstance(img_urls, list) or not all(isinstance(u, str) for u in img_urls):
        return None
    return [u.strip() for u in img_urls if u.strip()]


def create_post(user, data):
    title = (data.get("title") or "").strip()
    body = (data.get("body") or "").strip()
    if not title or not body:
        return _fail("Required fields are missing")

    img_urls = clean_img_urls(data.get("imgUrls"))
    if img_urls is None:
        return _fail("imgUrls must be a list of URLs")

    membership = None
    community_id = data.get("communityId")
    if community_id:
        membership = CommunityMember.objects.filter(user=user, community_id=community_id).first()
        if membership is None:
            return _fail("User is not a member of this community")

    if is_flagged(f"{title} {body}"):
        return {"success": True, "message": "Content is intense", "warnAI": WARN_POST}

    try:
        with transaction.atomic():
            post = Post.objects.create(
                user=user,
                community_id=community_id or None,
                title=title,
                body=body,
                img_urls=img_urls,
            )
            if membership is not None:
                membership.last_active = timezone.now()
                membership.save(update_fields=['last_active'])
    except Exception:
        logger.exception(f"Failed to create post for user {user.pk}")
        return _fail("Failed to create post")

    logger.info(f"Post {post.pk} created by user {user.pk}")
    return {"success": True, "message": "Post created successfully", "post": {"id": post.id}}


def get_user_posts(user_id, viewer=None):
    if not user_id:
        return _fail("UserId is required", posts=[])
    try:
        posts = (
            feed_queryset(viewer)
            .filter(user_id=user_id, is_deleted=False)
            .order_by(*TIMELINE_ORDERING)
        )
        data = [format_post(p) for p in posts]
    except Exception:
        logger.exception(f"Error while fetching posts of user {user_id}")
        return _fail("Failed to get user posts", posts=[])

    return {"success": True, "message": "Posts fetched successfully", "posts": data}


def get_trending_posts(viewer=None, last_post_id=None, type="top"):
    if type not in TRENDING_TYPES:
        return _fail("Invalid feed type", posts=[], hasNextPage=False, nextCursor=None)

    try:
        base = ranked_queryset(viewer)
        posts = base.filter(is_deleted=False)
        if type == "top":
            cutoff = timezone.now() - timedelta(days=TRENDING_WINDOW_DAYS)
            posts = posts.filter(created_at__gte=cutoff)
            ordering = TOP_ORDERING
        else:
            ordering = NEW_ORDERING

        rows, has_next = paginate(posts, ordering, last_post_id, TRENDING_PAGE_SIZE, lookup=base)
        data = [format_post(p) for p in rows]
    except Exception:
        logger.exception(f"Error fetching {type} trending posts after {last_post_id}")
        return _fail("Failed to fetch trending posts", posts=[], hasNextPage=False, nextCursor=None)

    return {
        "success": True,
        "message": "Posts fetched successfully",
        "posts": data,
        "hasNextPage": has_next,
        "nextCursor": data[-1]["id"] if has_next else None,
    }


def delete_post(user, post_id):
    post = Post.objects.filter(pk=post_id, is_deleted=False).first()
    if post is None:
        return _fail("Post not found")
    if post.user_id != user.pk:
        return _fail("You can only delete your own posts")

    try:
        soft_delete_post(post, user)
    except Exception:
        logger.exception(f"Failed to delete post {post_id}")
        return _fail("Failed to delete post")
    logger.info(f"Post {post_id} deleted by user {user.pk}")
    return {"success": True, "message": "Post deleted"}


def like_dislike(user, post_id, type, comment_id=None):
    if type not in EngagementType.values:
        return _fail("Invalid reaction type")

    post = Post.objects.filter(pk=post_id, is_deleted=False).select_related('user').first()
    if post is None:
        return _fail("Post not found")

    comment = None
    if comment_id:
        comment = (
            Comment.objects
            .filter(pk=comment_id, post=post, is_deleted=False)
            .select_related('user')
            .first()
        )
        if comment is None:
            return _fail("Comment not found")

    try:
        with transaction.atomic():
            existing = (
                Engagement.objects
                .select_for_update()
                .filter(user=user, post=post, comment=comment)
                .first()
            )

            if existing is None:
                Engagement.objects.create(user=user, post=post, comment=comment, type=type)
                if type == EngagementType.LIKE:
                    owner = comment.user if comment is not None else post.user
                    notify(NotificationType.LIKE_POST, owner, sender=user, post=post, comment=comment)
                return {"success": True, "message": f"{type} added"}

            if existing.type == type:
                existing.delete()
                return {"success": True, "message": "Action removed"}

            existing.type = type
            existing.save(update_fields=['type'])
    except Exception:
        logger.exception(f"Like/dislike failed: user {user.pk}, post {post_id}, comment {comment_id}")
        return _fail("Failed to perform like/dislike actions")

    return {"success": True, "message": f"Changed to {type}"}


# ============================================================================
# SECTION 3: COMMENTS
# ============================================================================

def add_comment(user, post_id, content, parent_id=None):
    content = (content or "").strip()
    if not post_id or not content:
        return _fail("Required fields are missing to add comments", comments=[])

    post = Post.objects.filter(pk=post_id, is_deleted=False).select_related('user').first()
    if post is None:
        return _fail("Post not found", comments=[])

    parent = None
    if parent_id:
        parent = Comment.objects.filter(pk=parent_id, post=post, is_deleted=False).first()
        if parent is None:
            return _fail("Invalid parent comment", comments=[])
        # Replies stay one level deep
        if parent.parent_id is not None:
            return _fail("Maximum reply depth reached", comments=[])

    if is_flagged(content):
        return {"success": True, "message": "Content is intense", "warnAI": WARN_COMMENT, "comments": []}

    try:
        with transaction.atomic():
            comment = Comment.objects.create(user=user, post=post, parent=parent, content=content)
            notify(NotificationType.COMMENT_POST, post.user, sender=user, post=post, comment=comment)
    except Exception:
        logger.exception(f"Error while adding comment to post {post_id}")
        return _fail("Failed to add comment", comments=[])

    return {
        "success": True,
        "message": "Comment created successfully",
        "comments": [{**format_comment(comment), "replies": []}],
    }


def get_comments(post_id, viewer=None, parent_id=None):
    """Live top-level comments of a post, or the replies of ``parent_id``; newest first."""
    if not post_id:
        return _fail("Required fields are missing to get comments", comments=[])

    if viewer is None:
        is_liked = Value(False, output_field=BooleanField())
    else:
        is_liked = Exists(
            Engagement.objects.filter(user=viewer, comment=OuterRef('pk'), type=EngagementType.LIKE)
        )

    try:
        comments = (
            Comment.objects
            .filter(post_id=post_id, parent_id=parent_id, is_deleted=False)
            .select_related('user')
            .annotate(
                like_count=count_of(Engagement.objects.filter(type=EngagementType.LIKE), 'comment'),
                replies_count=count_of(Comment.objects.filter(is_deleted=False), 'parent'),
                viewer_liked=is_liked,
            )
            .order_by('-created_at', '-id')
        )
        data = [
            format_comment(c, like_count=c.like_count, is_liked=c.viewer_liked, replies_count=c.replies_count)
            for c in comments
        ]
    except Exception:
        logger.exception(f"Error while fetching comments of post {post_id}")
        return _fail("Failed to fetch comments", comments=[])

    return {"success": True, "message": "Comments fetched successfully", "comments": data}


def delete_comment(user, comment_id):
    comment = Comment.objects.filter(pk=comment_id).first()
    if comment is None:
        return _fail("Comment not found")
    if comment.user_id != user.pk:
        return _fail("You can only delete your own comments")
    if comment.is_deleted or Deletion.objects.filter(comment=comment).exists():
        return _fail("Comment already deleted")

    soft_delete_comment(comment, user)
    return {"success": True, "message": "Comment deleted successfully"}


def edit_comment(user, comment_id, content):
    content = (content or "").strip()
    if not comment_id or not content:
        return _fail("Required fields are missing")

    comment = Comment.objects.filter(pk=comment_id, is_deleted=False).first()
    if comment is None:
        return _fail("Comment not found")
    if comment.user_id != user.pk:
        return _fail("You can only edit your own comments")

    comment.content = content
    comment.save(update_fields=['content'])
    return {"success": True, "message": "Comment edited successfully"}


# ============================================================================
# SECTION 4: REPORTS
# ============================================================================

def report(reporter, reported_user_id, reason, post_id=None, comment_id=None):
    """File a moderation report; the reported user gets a system REPORT notification."""
    reason = (reason or "").strip()
    if not reported_user_id or not reason:
        return _fail("Required fields are missing")
    if reporter is not None and reporter.pk == reported_user_id:
        return _fail("You cannot report yourself")

    reported = User.objects.filter(pk=reported_user_id).first()
    if reported is None:
        return _fail("User not found")

    post = comment = None
    if post_id:
        post = Post.objects.filter(pk=post_id, user=reported).first()
        if post is None:
            return _fail("Reported post not found")
    if comment_id:
        comment = Comment.objects.filter(pk=comment_id, user=reported).first()
        if comment is None:
            return _fail("Reported comment not found")

    try:
        with transaction.atomic():
            Report.objects.create(user=reported, reporter=reporter, post=post, comment=comment, reason=reason)
            notify(NotificationType.REPORT, reported, post=post, comment=comment)
    except Exception:
        logger.exception(f"Failed to report user {reported_user_id}")
        return _fail("Failed to report user")

    logger.info(f"User {reported_user_id} reported by {getattr(reporter, 'pk', None)}")
    return {"success": True, "message": "User reported"}
