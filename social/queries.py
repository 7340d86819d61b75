"""
Reusable queryset annotations.

Counts are correlated subqueries rather than ``Count()`` over joins, so
several of them can sit on one queryset without multiplying rows. The
viewer-relative flags collapse to constant ``False`` for anonymous viewers.
"""

from django.db.models import (
    BooleanField, CharField, Count, Exists, IntegerField, OuterRef, Subquery, Value,
)
from django.db.models.functions import Coalesce

from .models import (
    Community, CommunityMember, Engagement, Follow, Notification, NotificationStatus,
    NotificationType, Post,
)


def _false():
    return Value(False, output_field=BooleanField())


def count_of(queryset, field, outer='pk'):
    """COUNT of ``queryset`` rows whose ``field`` equals the outer row's ``outer``."""
    subquery = (
        queryset.filter(**{field: OuterRef(outer)})
        .order_by()
        .values(field)
        .annotate(total=Count('pk'))
        .values('total')
    )
    return Coalesce(Subquery(subquery, output_field=IntegerField()), 0)


def follow_flags(viewer, ref='pk'):
    """
    Relationship between ``viewer`` and the user referenced by ``ref``.

    Returns annotations:
        is_followed: viewer follows the user
        follows_viewer: the user follows viewer
        is_requested: viewer has a pending follow request to the user
    """
    if viewer is None:
        return {'is_followed': _false(), 'follows_viewer': _false(), 'is_requested': _false()}
    return {
        'is_followed': Exists(
            Follow.objects.filter(follower=viewer, following=OuterRef(ref))
        ),
        'follows_viewer': Exists(
            Follow.objects.filter(follower=OuterRef(ref), following=viewer)
        ),
        'is_requested': Exists(
            Notification.objects.filter(
                sender=viewer,
                receiver=OuterRef(ref),
                type=NotificationType.FOLLOW_REQUEST,
                status=NotificationStatus.UNREAD,
            )
        ),
    }


def community_flags(viewer, ref='pk'):
    """Membership and pending join request of ``viewer`` for the community at ``ref``."""
    if viewer is None:
        return {'is_member': _false(), 'join_requested': _false()}
    return {
        'is_member': Exists(
            CommunityMember.objects.filter(user=viewer, community=OuterRef(ref))
        ),
        'join_requested': Exists(
            Notification.objects.filter(
                sender=viewer,
                community=OuterRef(ref),
                type=NotificationType.JOIN_REQUEST_COMMUNITY,
                status=NotificationStatus.UNREAD,
            )
        ),
    }


def viewer_reaction(viewer, ref='pk'):
    """LIKE/DISLIKE the viewer left on the post at ``ref`` (not on its comments)."""
    if viewer is None:
        return Value(None, output_field=CharField())
    reaction = Engagement.objects.filter(
        user=viewer, post=OuterRef(ref), comment__isnull=True
    ).values('type')[:1]
    return Subquery(reaction, output_field=CharField())


def member_count(ref='pk'):
    return count_of(CommunityMember.objects.all(), 'community', outer=ref)


def communities_with_counts():
    return Community.objects.annotate(
        members_count=member_count(),
        posts_count=count_of(Post.objects.filter(is_deleted=False), 'community'),
    )
