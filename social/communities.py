"""
================================================================================
DRIFNET - COMMUNITY SERVICE
================================================================================

Community lifecycle, membership management and the "top communities"
recommendation.

TOP COMMUNITIES
================================================================================
Up to CANDIDATE_POOL communities the viewer has not joined are pulled
(most posts, then most members) and ranked by:

    score = members * 0.5 + posts * 2 + comments * 1.5 + boost

    boost = average over the RECENT_MEMBERS most recently active members of
            max(0, 48 - hours since that member was last active)

so a community whose members posted in the last two days climbs above a
larger but idle one. The best TOP_LIMIT are returned with member counts in
display form (999, 1.2k, 3.4M).
================================================================================
"""

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .formatting import follow_status, iso, manage_high_value, membership_status
from .models import (
    Comment, Community, CommunityMember, Notification, NotificationType, User, Visibility,
)
from .pagination import paginate
from .posts import TIMELINE_ORDERING, feed_queryset, format_post
from .queries import community_flags, communities_with_counts, count_of, follow_flags

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50
MEMBERS_LIMIT = 1000

CANDIDATE_POOL = 50
TOP_LIMIT = 5
RECENT_MEMBERS = 10
BOOST_WINDOW_HOURS = 48

UPDATABLE_FIELDS = {
    "name": "name",
    "description": "description",
    "imgUrl": "img_url",
    "bannerUrl": "banner_url",
    "communityType": "community_type",
}


def _fail(message, **payload):
    return {"success": False, "message": message, **payload}


def activity_boost(last_active_times, now=None):
    """Average of max(0, 48 - hours idle); members never active count as 0."""
    if not last_active_times:
        return 0.0
    now = now or timezone.now()
    total = 0.0
    for last_active in last_active_times:
        if last_active is None:
            continue
        hours_ago = (now - last_active).total_seconds() / 3600
        total += max(0.0, BOOST_WINDOW_HOURS - hours_ago)
    return total / len(last_active_times)


def activity_score(members, posts, comments, boost):
    return members * 0.5 + posts * 2 + comments * 1.5 + boost


# ============================================================================
# SECTION 1: LIFECYCLE
# ============================================================================

def create_community(owner, data):
    name = (data.get("name") or "").strip()
    description = (data.get("description") or "").strip()
    img_url = (data.get("imgUrl") or "").strip()
    if not name or not description or not img_url:
        return _fail("Requirements missing to create community")

    community_type = data.get("communityType") or Visibility.PUBLIC
    if community_type not in Visibility.values:
        return _fail("Invalid community type")

    try:
        with transaction.atomic():
            community = Community.objects.create(
                owner=owner,
                name=name,
                description=description,
                img_url=img_url,
                banner_url=(data.get("bannerUrl") or "").strip(),
                community_type=community_type,
            )
            CommunityMember.objects.create(user=owner, community=community, last_active=timezone.now())
    except Exception:
        logger.exception(f"Failed to create community for user {owner.pk}")
        return _fail("Failed to create community.")

    logger.info(f"Community {community.pk} created by user {owner.pk}")
    return {
        "success": True,
        "message": "Community created successfully.",
        "data": {"id": community.id, "name": community.name, "ownerId": community.owner_id},
    }


def get_community(community_id, viewer):
    community = (
        communities_with_counts()
        .filter(pk=community_id)
        .annotate(**community_flags(viewer))
        .first()
    )
    if community is None:
        return _fail("Community not found.", community={})

    return {
        "success": True,
        "message": "Community fetched successfully",
        "community": {
            "id": community.id,
            "name": community.name,
            "description": community.description,
            "imgUrl": community.img_url,
            "bannerUrl": community.banner_url,
            "communityType": community.community_type,
            "ownerId": community.owner_id,
            "membersCount": community.members_count,
            "postsCount": community.posts_count,
            "createdAt": iso(community.created_at),
            "isMember": membership_status(community.is_member, community.join_requested),
        },
    }


def update_community(user, community_id, data):
    """Owner-only edit. Switching to PUBLIC drops the pending join requests."""
    community = Community.objects.filter(pk=community_id).first()
    if community is None:
        return _fail("Community not found")
    if community.owner_id != user.pk:
        return _fail("Only the owner can update this community")
    if not data:
        return _fail("Required field is missing")

    changed = []
    for key, field in UPDATABLE_FIELDS.items():
        if key not in data:
            continue
        value = data[key]
        value = value.strip() if isinstance(value, str) else value
        if key in ("name", "description", "imgUrl") and not value:
            return _fail(f"{key} cannot be empty")
        if key == "communityType" and value not in Visibility.values:
            return _fail("Invalid community type")
        setattr(community, field, value or '')
        changed.append(field)

    if not changed:
        return _fail("Nothing to update")

    try:
        with transaction.atomic():
            community.save(update_fields=changed)
            if 'community_type' in changed and community.community_type == Visibility.PUBLIC:
                Notification.objects.filter(
                    community=community, type=NotificationType.JOIN_REQUEST_COMMUNITY
                ).delete()
    except Exception:
        logger.exception(f"Failed to update community {community_id}")
        return _fail("Failed to update community data")

    return {"success": True, "message": "Community data updated successfully"}


# ============================================================================
# SECTION 2: POSTS & MEMBERS
# ============================================================================

def get_community_posts(community_id, viewer, cursor=None, limit=DEFAULT_PAGE_SIZE):
    empty = {"posts": [], "hasMore": False, "nextCursor": None}
    if not Community.objects.filter(pk=community_id).exists():
        return _fail("Community not found", **empty)

    try:
        limit = max(1, min(int(limit or DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE))
        base = feed_queryset(viewer).filter(community_id=community_id)
        rows, has_more = paginate(
            base.filter(is_deleted=False), TIMELINE_ORDERING, cursor, limit, lookup=base
        )
        data = [format_post(p) for p in rows]
    except Exception:
        logger.exception(f"Failed to get posts of community {community_id}")
        return _fail("Failed to get community posts", **empty)

    return {
        "success": True,
        "message": "Posts fetched successfully",
        "posts": data,
        "hasMore": has_more,
        "nextCursor": data[-1]["id"] if has_more else None,
    }


def get_community_members(community_id, viewer):
    """Members by name with the viewer's follow status; the viewer is listed first."""
    if not Community.objects.filter(pk=community_id).exists():
        return _fail("Community not found", members=[])

    members = (
        User.objects
        .filter(community_memberships__community_id=community_id)
        .annotate(**follow_flags(viewer))
        .order_by('name', 'id')[:MEMBERS_LIMIT]
    )
    formatted = [
        {
            "id": m.id,
            "name": m.name,
            "imgUrl": m.img_url,
            "followStatus": follow_status(m.is_followed, m.is_requested, m.follows_viewer),
        }
        for m in members
    ]
    viewer_id = getattr(viewer, 'pk', None)
    formatted.sort(key=lambda m: m["id"] != viewer_id)

    return {"success": True, "message": "Community members fetched successfully", "members": formatted}


def remove_member(owner, community_id, user_id):
    community = Community.objects.filter(pk=community_id).first()
    if community is None or community.owner_id != owner.pk:
        return _fail("Unauthorized or community not found")
    if user_id == owner.pk:
        return _fail("Owner cannot be removed from their community")

    deleted, _ = CommunityMember.objects.filter(community=community, user_id=user_id).delete()
    if not deleted:
        return _fail("User is not a member of this community")

    logger.info(f"User {user_id} removed from community {community_id}")
    return {"success": True, "message": "Member removed from community"}


def leave_community(user, community_id):
    community = Community.objects.filter(pk=community_id).first()
    if community is None:
        return _fail("Community not found")
    if community.owner_id == user.pk:
        return _fail("Owner cannot leave their own community")

    deleted, _ = CommunityMember.objects.filter(community=community, user=user).delete()
    if not deleted:
        return _fail("User is not a member of this community")
    return {"success": True, "message": "Member left the community"}


# ============================================================================
# SECTION 3: RECOMMENDATIONS
# ============================================================================

def get_top_communities(viewer=None):
    try:
        candidates = communities_with_counts().annotate(
            comments_count=count_of(
                Comment.objects.filter(is_deleted=False, post__is_deleted=False), 'post__community'
            ),
        )
        if viewer is not None:
            candidates = candidates.exclude(members__user=viewer)
        candidates = candidates.order_by('-posts_count', '-members_count', '-id')[:CANDIDATE_POOL]

        now = timezone.now()
        ranked = []
        for community in candidates:
            recent = list(
                community.members
                .order_by(F('last_active').desc(nulls_last=True))
                .values_list('last_active', flat=True)[:RECENT_MEMBERS]
            )
            score = activity_score(
                community.members_count,
                community.posts_count,
                community.comments_count,
                activity_boost(recent, now),
            )
            ranked.append((score, community))

        ranked.sort(key=lambda item: (item[0], item[1].id), reverse=True)
        data = [
            {
                "id": c.id,
                "name": c.name,
                "membersCount": manage_high_value(c.members_count),
                "imgUrl": c.img_url,
            }
            for _, c in ranked[:TOP_LIMIT]
        ]
    except Exception:
        logger.exception("Failed to get most active communities")
        return _fail("Failed to get most active communities", communities=[])

    return {"success": True, "message": "Most active communities fetched successfully", "communities": data}
