"""
================================================================================
DRIFNET - URL CONFIGURATION
================================================================================

@file        urls.py
@description JSON API routing for the DrifNet backend
@version     1.0.0

MODULE PURPOSE
================================================================================
This module maps every ``/api/...`` path to its view function. URLs are
grouped into sections mirroring the service modules.

URL STRUCTURE OVERVIEW
================================================================================
1. Authentication & Sessions (register, verify, login, logout, GitHub, OTP)
2. Users & Search (profiles, follow lists, follow toggle, search)
3. Notifications (list, unread count, read, clear, respond to requests)
4. Communities (create, top, detail, posts, members, join/leave, remove)
5. Posts & Comments (create, trending, delete, react, comment CRUD, report)
6. Studio (owner content listing and editing)
7. Media (image uploads)

NAMING CONVENTIONS
================================================================================
URL names use underscore_case:
- Resource actions: <resource>_<action> (e.g., 'post_delete', 'comment_edit')
- Toggles: Prefixed with 'toggle_' (e.g., 'toggle_follow')

URL PARAMETER TYPES
================================================================================
- <int:user_id>: User primary key
- <int:community_id>: Community primary key
- <int:post_id>: Post primary key
- <int:comment_id>: Comment primary key
- <int:notification_id>: Notification primary key
- <str:collection> / <str:content_type>: Studio collection name

SECURITY CONSIDERATIONS
================================================================================
- Protected views use @session_required (401 JSON without a valid session)
- State-changing views accept POST only (405 otherwise)
- Ownership is checked in the service layer
================================================================================
"""

from django.urls import path

from . import views


# ============================================================================
# URL PATTERNS DEFINITION
# ============================================================================

urlpatterns = [

    # ========================================================================
    # SECTION 1: AUTHENTICATION & SESSIONS
    # ========================================================================

    path("api/auth/register", views.register, name="register"),  # Sign up, e-mails OTP
    path("api/auth/verify", views.verify_account, name="verify_account"),  # Confirm OTP
    path("api/auth/login", views.login_view, name="login"),  # Sets session cookie
    path("api/auth/logout", views.logout_view, name="logout"),  # Ends session
    path("api/auth/github/callback", views.github_callback, name="github_callback"),
    path("api/auth/validate", views.validate_token, name="validate_token"),  # Token check
    path("api/auth/verify-user", views.verify_session, name="verify_session"),  # Cookie check
    path("api/auth/forgot-password", views.forgot_password, name="forgot_password"),
    path("api/auth/reset-password", views.reset_password, name="reset_password"),

    # ========================================================================
    # SECTION 2: USERS & SEARCH
    # ========================================================================

    path("api/users", views.list_users_by_email, name="users_by_email"),  # ?email=
    path("api/users/me/update", views.update_profile, name="update_profile"),
    path("api/users/me/delete", views.delete_account, name="delete_account"),
    path("api/users/<int:user_id>", views.profile, name="profile"),
    path("api/users/<int:user_id>/followers", views.followers, name="followers"),
    path("api/users/<int:user_id>/followings", views.followings, name="followings"),
    path("api/users/<int:user_id>/follow", views.toggle_follow, name="toggle_follow"),
    path("api/users/<int:user_id>/posts", views.user_posts, name="user_posts"),
    path("api/search", views.search, name="search"),  # ?q=&type=people|community&cursor=

    # ========================================================================
    # SECTION 3: NOTIFICATIONS
    # ========================================================================

    path("api/notifications", views.notification_list, name="notifications"),
    path(
        "api/notifications/unread-count",
        views.notification_unread_count,
        name="notification_unread_count"
    ),
    path(
        "api/notifications/<int:notification_id>/read",
        views.read_notification,
        name="notification_read"
    ),  # Reading removes the notification
    path("api/notifications/clear", views.clear_notifications, name="notifications_clear"),
    path(
        "api/notifications/<int:notification_id>/respond",
        views.respond_to_request,
        name="notification_respond"
    ),  # Accept/reject follow and join requests

    # ========================================================================
    # SECTION 4: COMMUNITIES
    # ========================================================================

    path("api/communities/create", views.create_community, name="community_create"),
    path("api/communities/top", views.top_communities, name="community_top"),
    path("api/communities/<int:community_id>", views.community_detail, name="community_detail"),
    path(
        "api/communities/<int:community_id>/posts",
        views.community_posts,
        name="community_posts"
    ),  # ?cursor=&limit=
    path(
        "api/communities/<int:community_id>/members",
        views.community_members,
        name="community_members"
    ),
    path(
        "api/communities/<int:community_id>/update",
        views.update_community,
        name="community_update"
    ),
    path(
        "api/communities/<int:community_id>/join",
        views.toggle_membership,
        name="toggle_membership"
    ),  # Join, request, withdraw or leave
    path(
        "api/communities/<int:community_id>/leave",
        views.leave_community,
        name="community_leave"
    ),
    path(
        "api/communities/<int:community_id>/members/<int:user_id>/remove",
        views.remove_member,
        name="community_remove_member"
    ),  # Owner only

    # ========================================================================
    # SECTION 5: POSTS & COMMENTS
    # ========================================================================

    path("api/posts/create", views.create_post, name="post_create"),
    path("api/posts/trending", views.trending_posts, name="post_trending"),  # ?type=top|new
    path("api/posts/<int:post_id>/delete", views.delete_post, name="post_delete"),
    path("api/posts/<int:post_id>/react", views.react, name="post_react"),  # LIKE / DISLIKE
    path("api/posts/<int:post_id>/comments", views.comments, name="post_comments"),
    path("api/posts/<int:post_id>/comments/add", views.add_comment, name="comment_add"),
    path("api/comments/<int:comment_id>/delete", views.delete_comment, name="comment_delete"),
    path("api/comments/<int:comment_id>/edit", views.edit_comment, name="comment_edit"),
    path("api/reports", views.report, name="report"),

    # ========================================================================
    # SECTION 6: STUDIO
    # ========================================================================

    path(
        "api/studio/<str:content_type>/update",
        views.studio_update,
        name="studio_update"
    ),
    path("api/studio/<str:collection>", views.studio_documents, name="studio_documents"),
    path(
        "api/studio/<str:collection>/<int:document_id>",
        views.studio_document,
        name="studio_document"
    ),

    # ========================================================================
    # SECTION 7: MEDIA
    # ========================================================================

    path("api/upload", views.upload, name="upload"),  # multipart "files"
]
