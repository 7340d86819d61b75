"""
Owner-facing content studio: list, inspect and edit one's own posts,
comments, communities and engagements.
"""

import logging

from django.db import transaction

from .formatting import iso, user_card
from .models import Comment, Community, Engagement, Post, Report
from .posts import clean_img_urls, soft_delete_comment, soft_delete_post
from .queries import count_of

logger = logging.getLogger(__name__)

COLLECTIONS = ("post", "comment", "community", "engage")
EDITABLE = ("post", "comment", "community")


def _fail(message, **payload):
    return {"success": False, "message": message, **payload}


def _first_image(img_urls):
    return img_urls[0] if img_urls else None


def _text(data, key):
    """Stripped string under ``key``, or None when missing or blank."""
    value = data.get(key)
    if not isinstance(value, str):
        return None
    return value.strip() or None


def get_documents(user, collection):
    if collection not in COLLECTIONS:
        return _fail("No collection exists", data=[])

    if collection == "post":
        posts = Post.objects.filter(user=user, is_deleted=False).order_by('-created_at', '-id')
        data = [
            {
                "id": p.id,
                "title": p.title,
                "content": p.body,
                "imgUrl": _first_image(p.img_urls),
                "createdAt": iso(p.created_at),
            }
            for p in posts
        ]
        message = "posts fetched"

    elif collection == "comment":
        comments = Comment.objects.filter(user=user, is_deleted=False).order_by('-created_at', '-id')
        data = [{"id": c.id, "content": c.content, "createdAt": iso(c.created_at)} for c in comments]
        message = "comments fetched"

    elif collection == "community":
        communities = Community.objects.filter(members__user=user).order_by('-created_at', '-id')
        data = [
            {
                "id": c.id,
                "name": c.name,
                "description": c.description,
                "imgUrl": c.img_url,
                "createdAt": iso(c.created_at),
            }
            for c in communities
        ]
        message = "communities fetched"

    else:
        engagements = (
            Engagement.objects
            .filter(user=user)
            .select_related('post', 'comment')
            .order_by('-created_at', '-id')
        )
        data = []
        for e in engagements:
            if e.comment is not None:
                data.append({
                    "id": e.comment.id,
                    "title": e.post.title,
                    "content": e.comment.content,
                    "imgUrl": _first_image(e.post.img_urls),
                    "type": "comment",
                    "reaction": e.type,
                    "createdAt": iso(e.comment.created_at),
                })
            else:
                data.append({
                    "id": e.post.id,
                    "title": e.post.title,
                    "content": e.post.body,
                    "imgUrl": _first_image(e.post.img_urls),
                    "type": "post",
                    "reaction": e.type,
                    "createdAt": iso(e.post.created_at),
                })
        message = "engagements data fetched"

    return {"success": True, "message": message, "data": data}


def get_document_by_id(user, collection, document_id):
    if not collection or not document_id:
        return _fail("Required data is missing", data=None)

    if collection == "post":
        post = (
            Post.objects
            .filter(pk=document_id, user=user)
            .annotate(report_count=count_of(Report.objects.all(), 'post'))
            .first()
        )
        if post is None:
            return _fail("Document not found", data=None)
        data = {
            "id": post.id,
            "title": post.title,
            "content": post.body,
            "imgUrls": post.img_urls,
            "isReported": post.report_count > 0,
            "isDeleted": post.is_deleted,
            "reportCount": post.report_count,
            "type": "post",
            "createdAt": iso(post.created_at),
        }
        return {"success": True, "message": "Post fetched", "data": data}

    if collection == "comment":
        comment = (
            Comment.objects
            .filter(pk=document_id, user=user)
            .select_related('user')
            .annotate(report_count=count_of(Report.objects.all(), 'comment'))
            .first()
        )
        if comment is None:
            return _fail("Document not found", data=None)
        data = {
            "id": comment.id,
            "content": comment.content,
            "owner": user_card(comment.user),
            "isReported": comment.report_count > 0,
            "isDeleted": comment.is_deleted,
            "reportCount": comment.report_count,
            "type": "comment",
            "createdAt": iso(comment.created_at),
        }
        return {"success": True, "message": "Comment fetched", "data": data}

    if collection == "community":
        community = (
            Community.objects
            .filter(pk=document_id, members__user=user)
            .select_related('owner')
            .first()
        )
        if community is None:
            return _fail("Document not found", data=None)
        data = {
            "id": community.id,
            "name": community.name,
            "content": community.description,
            "imgUrl": community.img_url,
            "owner": user_card(community.owner),
            "type": "community",
            "createdAt": iso(community.created_at),
        }
        return {"success": True, "message": "Community fetched", "data": data}

    return _fail("No collection exists", data=None)


def update_document(user, content_type, data):
    """
    Owner-only edit of a post, comment or community.

    ``data`` keys: id (required), title, name, content, imgUrls, isDeleted.
    ``content`` maps to a post body, a comment's text or a community
    description; ``isDeleted`` soft-deletes posts and comments.
    """
    if content_type not in EDITABLE or not data or not data.get("id"):
        return _fail("Required fields are missing")

    document_id = data["id"]
    try:
        with transaction.atomic():
            if content_type == "post":
                post = Post.objects.filter(pk=document_id, user=user, is_deleted=False).first()
                if post is None:
                    return _fail("Document not found")
                post.title = _text(data, "title") or post.title
                post.body = _text(data, "content") or post.body
                if "imgUrls" in data:
                    img_urls = clean_img_urls(data["imgUrls"])
                    if img_urls is None:
                        return _fail("imgUrls must be a list of URLs")
                    post.img_urls = img_urls
                post.save(update_fields=['title', 'body', 'img_urls'])
                if data.get("isDeleted"):
                    soft_delete_post(post, user)

            elif content_type == "comment":
                comment = Comment.objects.filter(pk=document_id, user=user, is_deleted=False).first()
                if comment is None:
                    return _fail("Document not found")
                content = _text(data, "content")
                if content:
                    comment.content = content
                    comment.save(update_fields=['content'])
                if data.get("isDeleted"):
                    soft_delete_comment(comment, user)

            else:
                community = Community.objects.filter(pk=document_id, owner=user).first()
                if community is None:
                    return _fail("Document not found")
                community.name = _text(data, "name") or community.name
                community.description = _text(data, "content") or community.description
                community.save(update_fields=['name', 'description'])
    except Exception:
        logger.exception(f"Failed to update {content_type} {document_id}")
        return _fail("Failed to update document.")

    return {"success": True, "message": "Updated successfully"}
