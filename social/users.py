"""
================================================================================
DRIFNET - USER SERVICE
================================================================================

Accounts, authentication flows and the social graph.

FOLLOW STATE MACHINE
================================================================================
follow_unfollow(follower, target) moves between:

    Follow / Follow Back --(target PUBLIC)--> Following   (Follow edge + FOLLOWED)
    Follow / Follow Back --(target PRIVATE)-> Requested   (FOLLOW_REQUEST only)
    Requested --(click again)--------------> Follow      (request withdrawn)
    Requested --(target accepts)-----------> Following   (respond_to_request)
    Requested --(target rejects)-----------> Follow
    Following --(click again)--------------> Follow / Follow Back

"Follow Back" is shown instead of "Follow" when the target already follows
the viewer. join_leave_community runs the same machine against a community
(Join / Requested / Joined) with notifications going to the owner.

All functions return {"success": bool, "message": str, ...payload}.
================================================================================
"""

import logging

import requests
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from .emails import RESET, SIGNUP, new_otp, send_otp_email
from .formatting import (
    FOLLOW, FOLLOW_BACK, FOLLOWING, JOIN, JOINED, REQUESTED, follow_status, user_card,
)
from .models import (
    Community, CommunityMember, Follow, Notification, NotificationType, Post, Session, User,
    Visibility,
)
from .notifications import notify
from .pagination import paginate
from .queries import count_of, follow_flags, member_count
from .sessions import start_session

logger = logging.getLogger(__name__)

SEARCH_PAGE_SIZE = 20
GITHUB_TIMEOUT = 10
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"

UPDATABLE_FIELDS = {
    "name": "name",
    "imgUrl": "img_url",
    "designation": "designation",
    "accountType": "account_type",
}


def _fail(message, **payload):
    return {"success": False, "message": message, **payload}


def _send_otp(user, otp, purpose):
    try:
        send_otp_email(user.email, user.name, otp, purpose)
    except Exception as e:
        logger.error(f"Failed to send {purpose} OTP to {user.email}: {e}")


def _account_summary(user):
    return {"id": user.id, "isVerified": user.is_verified}


# ============================================================================
# SECTION 1: ACCOUNTS
# ============================================================================

def create_user(email, name):
    """Register ``email`` (or refresh an unverified registration) and mail a sign-up OTP."""
    email = (email or "").strip().lower()
    name = (name or "").strip()
    if not email or not name:
        return _fail("User data is missing.")
    try:
        validate_email(email)
    except ValidationError:
        return _fail("Invalid email address.")

    otp, expires_at = new_otp()
    try:
        user = User.objects.filter(email=email).first()
        if user is not None and user.is_verified:
            return _fail("Email exists. Proceed to login.")

        if user is not None:
            user.name = name
            user.verification_token = otp
            user.verification_token_time = expires_at
            user.save(update_fields=['name', 'verification_token', 'verification_token_time'])
        else:
            user = User.objects.create_user(
                email=email,
                name=name,
                verification_token=otp,
                verification_token_time=expires_at,
            )
    except Exception:
        logger.exception(f"User creation failed for {email}")
        return _fail("Failed to create user")

    _send_otp(user, otp, SIGNUP)
    return {
        "success": True,
        "message": "OTP Sent to mail for verification",
        "user": _account_summary(user),
    }


def verify_user(token, email=None, password=None):
    """Confirm a sign-up OTP and set the first password.

    ``email`` narrows the lookup when the client knows it. ``password`` is
    optional here; without it the account can only sign in after a reset.
    """
    if not token:
        return _fail("Token missing.")
    if password is not None and not str(password).strip():
        return _fail("Password cannot be empty")

    users = User.objects.filter(verification_token=token)
    if email:
        users = users.filter(email=email.strip().lower())
    user = users.first()
    if user is None:
        return _fail("Invalid verification token.")
    if user.verification_token_time and user.verification_token_time < timezone.now():
        return _fail("Verification token expired.")

    user.is_verified = True
    user.verification_token = None
    user.verification_token_time = None
    changed = ['is_verified', 'verification_token', 'verification_token_time']
    if password is not None:
        user.set_password(password)
        changed.append('password')

    try:
        user.save(update_fields=changed)
    except Exception:
        logger.exception(f"Failed to verify user {user.pk}")
        return _fail("Failed to verify user")
    logger.info(f"User {user.pk} verified")
    return {"success": True, "message": "User verified successfully", "user": _account_summary(user)}


def login(email, password, ip_address='', user_agent=''):
    """Check credentials and start a session; the token is returned under ``token``."""
    email = (email or "").strip().lower()
    if not email or not password:
        return _fail("Email and password are required")

    user = User.objects.filter(email=email).first()
    if user is None:
        return _fail("User not found")
    if not user.is_verified:
        return _fail("User not Verified")
    if not user.is_active or not user.check_password(password):
        return _fail("Password is wrong")

    try:
        token = start_session(user, ip_address, user_agent)
    except Exception:
        logger.exception(f"Failed to start session for user {user.pk}")
        return _fail("Failed to handle session")

    return {
        "success": True,
        "message": "Logged In Successfully",
        "user": _account_summary(user),
        "token": token,
    }


def update_user(user, data):
    """Update profile fields. ``password`` is hashed; switching to PUBLIC drops pending requests."""
    if not data:
        return _fail("Data missing for update.")

    changed = []
    for key, field in UPDATABLE_FIELDS.items():
        if key not in data:
            continue
        value = data[key]
        value = value.strip() if isinstance(value, str) else value
        if key == "name" and not value:
            return _fail("Name cannot be empty")
        if key == "accountType" and value not in Visibility.values:
            return _fail("Invalid account type")
        setattr(user, field, value or '')
        changed.append(field)

    if "password" in data:
        if not data["password"] or not str(data["password"]).strip():
            return _fail("Password cannot be empty")
        user.set_password(data["password"])
        changed.append('password')

    if not changed:
        return _fail("Nothing to update.")

    try:
        with transaction.atomic():
            user.save(update_fields=changed)
            if 'account_type' in changed and user.account_type == Visibility.PUBLIC:
                Notification.objects.filter(
                    receiver=user, type=NotificationType.FOLLOW_REQUEST
                ).delete()
    except Exception:
        logger.exception(f"Failed to update user {user.pk}")
        return _fail("Failed to update user")

    return {"success": True, "message": "User updated successfully", "user": _account_summary(user)}


def delete_user(user):
    user_id = user.pk
    try:
        user.delete()
    except Exception:
        logger.exception(f"Failed to delete user {user_id}")
        return _fail("Failed to delete user")
    logger.info(f"User {user_id} deleted")
    return {"success": True, "message": "User deleted successfully."}


# ============================================================================
# SECTION 2: PROFILES
# ============================================================================

def get_user(user_id, viewer):
    """Public profile of ``user_id`` as seen by ``viewer``; records a PROFILE_VIEW."""
    try:
        user = (
            User.objects
            .filter(pk=user_id, is_active=True)
            .annotate(
                followers_count=count_of(Follow.objects.all(), 'following'),
                following_count=count_of(Follow.objects.all(), 'follower'),
                posts_count=count_of(Post.objects.filter(is_deleted=False), 'user'),
                **follow_flags(viewer),
            )
            .first()
        )
        if user is None:
            return _fail("User not found.", user={})

        if viewer is not None and viewer.pk != user.pk:
            notify(NotificationType.PROFILE_VIEW, user, sender=viewer)
    except Exception:
        logger.exception(f"Failed to fetch user {user_id}")
        return _fail("Failed to fetch user.", user={})

    return {
        "success": True,
        "message": "User fetched successfully.",
        "user": {
            "id": user.id,
            "name": user.name,
            "designation": user.designation,
            "accountType": user.account_type,
            "imgUrl": user.img_url,
            "followersCount": user.followers_count,
            "followingCount": user.following_count,
            "postsCount": user.posts_count,
            "followStatus": follow_status(user.is_followed, user.is_requested, user.follows_viewer),
        },
    }


def get_current_user(user):
    """Summary of the signed-in user: counts and community memberships."""
    counts = (
        User.objects
        .filter(pk=user.pk)
        .annotate(
            followers_count=count_of(Follow.objects.all(), 'following'),
            following_count=count_of(Follow.objects.all(), 'follower'),
        )
        .values('followers_count', 'following_count')
        .first()
    )
    memberships = (
        CommunityMember.objects
        .filter(user=user)
        .select_related('community')
        .order_by('joined_at', 'id')
    )
    return {
        "success": True,
        "message": "User session is valid",
        "user": {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "imgUrl": user.img_url,
            "followersCount": counts["followers_count"],
            "followingCount": counts["following_count"],
            "communityMemberships": [
                {
                    "id": m.community.id,
                    "name": m.community.name,
                    "ownerId": m.community.owner_id,
                }
                for m in memberships
            ],
        },
    }


def list_by_email(email):
    email = (email or "").strip().lower()
    if not email:
        return _fail("Email missing.", data=[])
    users = User.objects.filter(email=email)
    data = [
        {"id": u.id, "name": u.name, "email": u.email, "imgUrl": u.img_url, "isVerified": u.is_verified}
        for u in users
    ]
    return {"success": True, "message": "Users fetched.", "data": data}


def get_followers(user_id):
    if not User.objects.filter(pk=user_id).exists():
        return _fail("User not found.", data=[])

    edges = Follow.objects.filter(following_id=user_id).select_related('follower').order_by('-created_at')
    followed_back = set(
        Follow.objects.filter(follower_id=user_id).values_list('following_id', flat=True)
    )
    data = [
        {**user_card(edge.follower), "isFollowBack": edge.follower_id in followed_back}
        for edge in edges
    ]
    return {"success": True, "message": "Followers fetched successfully.", "data": data}


def get_followings(user_id):
    if not User.objects.filter(pk=user_id).exists():
        return _fail("User not found.", data=[])

    edges = Follow.objects.filter(follower_id=user_id).select_related('following').order_by('-created_at')
    data = [user_card(edge.following) for edge in edges]
    return {"success": True, "message": "Followings fetched successfully.", "data": data}


# ============================================================================
# SECTION 3: FOLLOW / JOIN STATE MACHINE
# ============================================================================

def _not_following_status(follower, target):
    if Follow.objects.filter(follower=target, following=follower).exists():
        return FOLLOW_BACK
    return FOLLOW


def follow_unfollow(follower, following_id):
    if not following_id:
        return _fail("Required parameters are missing", status=None)
    if follower.pk == following_id:
        return _fail("You cannot follow yourself", status=None)

    target = User.objects.filter(pk=following_id, is_active=True).first()
    if target is None:
        return _fail("User not found", status=None)

    try:
        with transaction.atomic():
            edge = Follow.objects.filter(follower=follower, following=target).first()
            if edge is not None:
                edge.delete()
                return {
                    "success": True,
                    "message": "User unfollowed successfully",
                    "status": _not_following_status(follower, target),
                }

            pending = Notification.objects.filter(
                type=NotificationType.FOLLOW_REQUEST, sender=follower, receiver=target
            )
            if pending.exists():
                pending.delete()
                return {
                    "success": True,
                    "message": "Follow request withdrawn",
                    "status": _not_following_status(follower, target),
                }

            if target.account_type == Visibility.PUBLIC:
                Follow.objects.create(follower=follower, following=target)
                notify(NotificationType.FOLLOWED, target, sender=follower)
                return {"success": True, "message": "User followed successfully", "status": FOLLOWING}

            notify(NotificationType.FOLLOW_REQUEST, target, sender=follower)
    except Exception:
        logger.exception(f"Follow action failed: {follower.pk} -> {following_id}")
        return _fail("Failed to follow/unfollow user", status=None)

    return {"success": True, "message": "Follow request sent (private account)", "status": REQUESTED}


def join_leave_community(user, community_id):
    if not community_id:
        return _fail("Required parameters are missing", status=None)

    community = Community.objects.filter(pk=community_id).select_related('owner').first()
    if community is None:
        return _fail("Community not found", status=None)

    try:
        with transaction.atomic():
            membership = CommunityMember.objects.filter(user=user, community=community).first()
            if membership is not None:
                if community.owner_id == user.pk:
                    return _fail("Owner cannot leave their own community", status=JOINED)
                membership.delete()
                return {"success": True, "message": "User left community successfully", "status": JOIN}

            pending = Notification.objects.filter(
                type=NotificationType.JOIN_REQUEST_COMMUNITY, sender=user, community=community
            )
            if pending.exists():
                pending.delete()
                return {"success": True, "message": "Join request withdrawn", "status": JOIN}

            if community.community_type == Visibility.PUBLIC:
                CommunityMember.objects.create(user=user, community=community, last_active=timezone.now())
                notify(NotificationType.JOINED_COMMUNITY, community.owner, sender=user, community=community)
                return {
                    "success": True,
                    "message": "Community joined successfully",
                    "status": JOINED,
                    "communityName": community.name,
                }

            notify(NotificationType.JOIN_REQUEST_COMMUNITY, community.owner, sender=user, community=community)
    except Exception:
        logger.exception(f"Join action failed: user {user.pk}, community {community_id}")
        return _fail("Failed to join/leave community", status=None)

    return {"success": True, "message": "Join request sent (private community)", "status": REQUESTED}


def respond_to_request(user, notification_id, action):
    """Accept or reject a follow/join request addressed to ``user``."""
    if action not in ("accept", "reject"):
        return _fail("Invalid action")

    notification = Notification.objects.filter(
        pk=notification_id,
        receiver=user,
        type__in=[NotificationType.FOLLOW_REQUEST, NotificationType.JOIN_REQUEST_COMMUNITY],
    ).first()
    if notification is None or notification.sender_id is None:
        return _fail("Request not found")

    try:
        with transaction.atomic():
            if action == "accept":
                if notification.type == NotificationType.FOLLOW_REQUEST:
                    Follow.objects.get_or_create(follower_id=notification.sender_id, following=user)
                else:
                    CommunityMember.objects.get_or_create(
                        user_id=notification.sender_id,
                        community_id=notification.community_id,
                        defaults={'last_active': timezone.now()},
                    )
            notification.delete()
    except Exception:
        logger.exception(f"Failed to {action} request {notification_id}")
        return _fail(f"Failed to {action} request")

    return {"success": True, "message": "Request accepted" if action == "accept" else "Request rejected"}


# ============================================================================
# SECTION 4: SEARCH
# ============================================================================

def handle_search(query, search_type, cursor=None):
    query = (query or "").strip()
    if not query or not search_type:
        return _fail("Required fields are missing", data=[], nextCursor=None)

    try:
        if search_type == "people":
            users = User.objects.filter(
                Q(name__icontains=query) | Q(designation__icontains=query), is_active=True
            )
            rows, has_more = paginate(users, ['id'], cursor, SEARCH_PAGE_SIZE)
            data = [
                {"id": u.id, "name": u.name, "designation": u.designation, "imgUrl": u.img_url}
                for u in rows
            ]
        elif search_type == "community":
            communities = Community.objects.filter(name__icontains=query).annotate(
                members_count=member_count()
            )
            rows, has_more = paginate(communities, ['id'], cursor, SEARCH_PAGE_SIZE)
            data = [
                {"id": c.id, "name": c.name, "imgUrl": c.img_url, "membersCount": c.members_count}
                for c in rows
            ]
        else:
            return _fail("Invalid search type", data=[], nextCursor=None)
    except Exception:
        logger.exception(f"Search failed for {search_type!r} query {query!r}")
        return _fail("Failed to get the searched result", data=[], nextCursor=None)

    return {
        "success": True,
        "message": "Fetched query result",
        "data": data,
        "nextCursor": rows[-1].id if has_more else None,
    }


# ============================================================================
# SECTION 5: PASSWORD RESET
# ============================================================================

def verify_forgot_password(email):
    email = (email or "").strip().lower()
    if not email:
        return _fail("Email required to verify forgot password")

    user = User.objects.filter(email=email).first()
    if user is None:
        return _fail("User not exist with this email.")

    otp, expires_at = new_otp()
    user.forgot_verification_token = otp
    user.forgot_verification_token_time = expires_at
    user.save(update_fields=['forgot_verification_token', 'forgot_verification_token_time'])

    _send_otp(user, otp, RESET)
    return {"success": True, "message": "OTP Sent to mail for password verification"}


def reset_password(email, otp, password):
    email = (email or "").strip().lower()
    if not email or not otp or not (password or "").strip():
        return _fail("Required fields are missing")

    user = User.objects.filter(email=email).first()
    if user is None:
        return _fail("User not exist with this email")

    verified = (
        user.forgot_verification_token == otp
        and user.forgot_verification_token_time is not None
        and user.forgot_verification_token_time > timezone.now()
    )
    if not verified:
        return _fail("Token is invalid or expired")

    try:
        with transaction.atomic():
            user.set_password(password)
            user.forgot_verification_token = None
            user.forgot_verification_token_time = None
            user.save(update_fields=['password', 'forgot_verification_token', 'forgot_verification_token_time'])
            Session.objects.filter(user=user).delete()
    except Exception:
        logger.exception(f"Password reset failed for user {user.pk}")
        return _fail("Failed to reset password")

    logger.info(f"Password reset for user {user.pk}")
    return {"success": True, "message": "Password updated successfully"}


# ============================================================================
# SECTION 6: GITHUB SIGN-IN
# ============================================================================

def _github_identity(code):
    """Exchange an OAuth ``code`` for (email, name, avatar_url). Raises on HTTP errors."""
    token_response = requests.post(
        GITHUB_TOKEN_URL,
        json={
            "client_id": settings.GITHUB_CLIENT_ID,
            "client_secret": settings.GITHUB_CLIENT_SECRET,
            "code": code,
        },
        headers={"Accept": "application/json"},
        timeout=GITHUB_TIMEOUT,
    )
    token_response.raise_for_status()
    access_token = token_response.json().get("access_token")
    if not access_token:
        return None

    headers = {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}
    user_response = requests.get(f"{GITHUB_API_URL}/user", headers=headers, timeout=GITHUB_TIMEOUT)
    user_response.raise_for_status()
    profile = user_response.json()

    emails_response = requests.get(f"{GITHUB_API_URL}/user/emails", headers=headers, timeout=GITHUB_TIMEOUT)
    emails = emails_response.json() if emails_response.ok else []

    primary = next(
        (e.get("email") for e in emails if isinstance(e, dict) and e.get("primary") and e.get("verified")),
        None,
    )
    email = primary or profile.get("email")
    name = profile.get("name") or profile.get("login") or ""
    return email, name, profile.get("avatar_url") or ""


def github_login(code, ip_address='', user_agent=''):
    """Sign in (creating the account if needed) with a GitHub OAuth code."""
    if not code:
        return _fail("No code provided")
    if not settings.GITHUB_CLIENT_ID or not settings.GITHUB_CLIENT_SECRET:
        logger.error("GitHub sign-in attempted without GITHUB_CLIENT_ID/GITHUB_CLIENT_SECRET")
        return _fail("Server misconfigured")

    try:
        identity = _github_identity(code)
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"GitHub OAuth error: {e}")
        return _fail("GitHub auth failed")
    if identity is None:
        return _fail("GitHub auth failed")

    email, name, avatar_url = identity
    if not email:
        return _fail("Could not retrieve user email")

    email = email.lower()
    try:
        with transaction.atomic():
            user, created = User.objects.update_or_create(
                email=email,
                defaults={'name': name or email, 'img_url': avatar_url, 'is_verified': True},
            )
            if created:
                user.set_unusable_password()
                user.save(update_fields=['password'])
        token = start_session(user, ip_address, user_agent)
    except Exception:
        logger.exception(f"GitHub sign-in failed for {email}")
        return _fail("Failed to handle session")

    logger.info(f"GitHub sign-in for user {user.pk} (created={created})")
    return {"success": True, "message": "Logged in with GitHub", "user": _account_summary(user), "token": token}
