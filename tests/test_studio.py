"""Tests for the owner content studio."""

import pytest

from social import studio
from social.models import (
    Comment, Deletion, Engagement, EngagementType, Post, Report,
)


@pytest.mark.django_db
def test_documents_per_collection(alice, bob, make_post, make_community):
    community = make_community(bob, members=[alice])
    post = make_post(alice, img_urls=["https://img.example.com/1.png"])
    make_post(alice, is_deleted=True)
    comment = Comment.objects.create(user=alice, post=post, content="mine")
    others = make_post(bob)
    Engagement.objects.create(user=alice, post=others, type=EngagementType.DISLIKE)

    posts = studio.get_documents(alice, "post")["data"]
    assert [p["id"] for p in posts] == [post.id]
    assert posts[0]["imgUrl"] == "https://img.example.com/1.png"

    assert [c["id"] for c in studio.get_documents(alice, "comment")["data"]] == [comment.id]
    assert [c["id"] for c in studio.get_documents(alice, "community")["data"]] == [community.id]

    [engagement] = studio.get_documents(alice, "engage")["data"]
    assert engagement["id"] == others.id
    assert engagement["type"] == "post"
    assert engagement["reaction"] == "DISLIKE"


@pytest.mark.django_db
def test_unknown_collection(alice):
    assert studio.get_documents(alice, "videos") == {
        "success": False, "message": "No collection exists", "data": [],
    }


@pytest.mark.django_db
def test_document_by_id_reports_moderation_state(alice, bob, make_post):
    post = make_post(alice)
    Report.objects.create(user=alice, reporter=bob, post=post, reason="spam")

    data = studio.get_document_by_id(alice, "post", post.id)["data"]

    assert data["isReported"] is True
    assert data["reportCount"] == 1
    assert data["isDeleted"] is False


@pytest.mark.django_db
def test_document_by_id_is_owner_only(alice, bob, make_post, make_community):
    post = make_post(bob)
    community = make_community(bob)

    assert studio.get_document_by_id(alice, "post", post.id)["message"] == "Document not found"
    assert studio.get_document_by_id(alice, "community", community.id)["message"] == "Document not found"
    assert studio.get_document_by_id(bob, "community", community.id)["data"]["owner"]["id"] == bob.id
    assert studio.get_document_by_id(alice, "post", None)["message"] == "Required data is missing"


@pytest.mark.django_db
def test_update_post_and_soft_delete(alice, make_post):
    post = make_post(alice)

    result = studio.update_document(alice, "post", {
        "id": post.id, "title": "Edited", "imgUrls": ["https://img.example.com/2.png"],
    })
    assert result["success"] is True
    post.refresh_from_db()
    assert post.title == "Edited"
    assert post.img_urls == ["https://img.example.com/2.png"]

    studio.update_document(alice, "post", {"id": post.id, "isDeleted": True})
    post.refresh_from_db()
    assert post.is_deleted is True
    assert Deletion.objects.filter(post=post).exists()


@pytest.mark.django_db
def test_update_comment(alice, make_post):
    comment = Comment.objects.create(user=alice, post=make_post(alice), content="draft")

    studio.update_document(alice, "comment", {"id": comment.id, "content": "final"})

    comment.refresh_from_db()
    assert comment.content == "final"


@pytest.mark.django_db
def test_blank_values_keep_existing_text(alice, make_post, make_community):
    post = make_post(alice, title="Kept", body="Body")
    comment = Comment.objects.create(user=alice, post=post, content="kept")
    community = make_community(alice, name="Keepers")

    studio.update_document(alice, "post", {"id": post.id, "title": "   ", "content": " "})
    studio.update_document(alice, "comment", {"id": comment.id, "content": "  "})
    studio.update_document(alice, "community", {"id": community.id, "name": "  ", "content": ""})

    post.refresh_from_db()
    comment.refresh_from_db()
    community.refresh_from_db()
    assert (post.title, post.body) == ("Kept", "Body")
    assert comment.content == "kept"
    assert community.name == "Keepers"
    assert community.description == "All about Keepers"


@pytest.mark.django_db
def test_update_rejects_non_owner(alice, bob, make_post, make_community):
    post = make_post(bob)
    community = make_community(bob, members=[alice])

    assert studio.update_document(alice, "post", {"id": post.id, "title": "x"})["success"] is False
    assert studio.update_document(alice, "community", {"id": community.id, "name": "x"})["success"] is False
    assert studio.update_document(alice, "engage", {"id": 1})["message"] == "Required fields are missing"
    assert Post.objects.get(pk=post.id).title == post.title
