import json
import logging

import cloudinary.exceptions
from django.conf import settings
from django.http import HttpResponseRedirect, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from . import communities, notifications, posts, sessions, studio, uploads, users
from .middleware import session_required


# Logger
logger = logging.getLogger(__name__)


# ==================== HELPERS ====================

def _json_body(request):
    """Parsed JSON object body, or None when the body is not a JSON object."""
    try:
        data = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


def _bad_body():
    return JsonResponse({"success": False, "message": "Invalid JSON body"}, status=400)


def _respond(result):
    return JsonResponse(result, status=200 if result.get("success") else 400)


def _client_ip(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')


def _user_agent(request):
    return request.META.get('HTTP_USER_AGENT', 'unknown')


def _set_session_cookie(response, token):
    response.set_cookie(
        settings.SESSION_TOKEN_COOKIE,
        token,
        max_age=settings.SESSION_TOKEN_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=not settings.DEBUG,
        samesite='Lax',
        path='/',
    )


def _clear_session_cookie(response):
    response.delete_cookie(settings.SESSION_TOKEN_COOKIE, path='/', samesite='Lax')


def _int_param(value):
    try:
        return int(value) if value not in (None, '') else None
    except (TypeError, ValueError):
        return None


# ==================== AUTH ====================

@csrf_exempt
@require_POST
def register(request):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(users.create_user(data.get("email"), data.get("name")))


@csrf_exempt
@require_POST
def verify_account(request):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(users.verify_user(data.get("token"), data.get("email"), data.get("password")))


@csrf_exempt
@require_POST
def login_view(request):
    data = _json_body(request)
    if data is None:
        return _bad_body()

    result = users.login(
        data.get("email"), data.get("password"), _client_ip(request), _user_agent(request)
    )
    token = result.pop("token", None)
    response = _respond(result)
    if token:
        _set_session_cookie(response, token)
    return response


@csrf_exempt
@require_POST
@session_required
def logout_view(request):
    response = _respond(sessions.end_session(request.member))
    _clear_session_cookie(response)
    return response


@require_GET
def github_callback(request):
    result = users.github_login(request.GET.get("code"), _client_ip(request), _user_agent(request))
    token = result.pop("token", None)
    if not token:
        return _respond(result)

    response = HttpResponseRedirect(settings.FRONTEND_URL)
    _set_session_cookie(response, token)
    return response


@csrf_exempt
@require_POST
def validate_token(request):
    data = _json_body(request)
    if data is None:
        return _bad_body()

    user_id = sessions.validate_token(data.get("token"))
    if user_id is None:
        return JsonResponse({"valid": False})
    return JsonResponse({"valid": True, "userId": user_id})


@require_GET
def verify_session(request):
    if request.member is None:
        return JsonResponse({"valid": False})
    result = users.get_current_user(request.member)
    return JsonResponse({"valid": True, "user": result["user"]})


@csrf_exempt
@require_POST
def forgot_password(request):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(users.verify_forgot_password(data.get("email")))


@csrf_exempt
@require_POST
def reset_password(request):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(users.reset_password(data.get("email"), data.get("otp"), data.get("password")))


# ==================== USERS ====================

@require_GET
@session_required
def list_users_by_email(request):
    return _respond(users.list_by_email(request.GET.get("email")))


@csrf_exempt
@require_POST
@session_required
def update_profile(request):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(users.update_user(request.member, data))


@csrf_exempt
@require_POST
@session_required
def delete_account(request):
    sessions.end_session(request.member)
    response = _respond(users.delete_user(request.member))
    _clear_session_cookie(response)
    return response


@require_GET
@session_required
def profile(request, user_id):
    return _respond(users.get_user(user_id, request.member))


@require_GET
@session_required
def followers(request, user_id):
    return _respond(users.get_followers(user_id))


@require_GET
@session_required
def followings(request, user_id):
    return _respond(users.get_followings(user_id))


@csrf_exempt
@require_POST
@session_required
def toggle_follow(request, user_id):
    return _respond(users.follow_unfollow(request.member, user_id))


@require_GET
def user_posts(request, user_id):
    return _respond(posts.get_user_posts(user_id, request.member))


@require_GET
@session_required
def search(request):
    return _respond(users.handle_search(
        request.GET.get("q"), request.GET.get("type"), request.GET.get("cursor") or None
    ))


# ==================== NOTIFICATIONS ====================

@require_GET
@session_required
def notification_list(request):
    return _respond(notifications.get_notifications(request.member))


@require_GET
@session_required
def notification_unread_count(request):
    return _respond(notifications.unread_count(request.member))


@csrf_exempt
@require_POST
@session_required
def read_notification(request, notification_id):
    return _respond(notifications.read_notification(request.member, notification_id))


@csrf_exempt
@require_POST
@session_required
def clear_notifications(request):
    return _respond(notifications.clear_notifications(request.member))


@csrf_exempt
@require_POST
@session_required
def respond_to_request(request, notification_id):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(users.respond_to_request(request.member, notification_id, data.get("action")))


# ==================== COMMUNITIES ====================

@csrf_exempt
@require_POST
@session_required
def create_community(request):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(communities.create_community(request.member, data))


@require_GET
@session_required
def top_communities(request):
    return _respond(communities.get_top_communities(request.member))


@require_GET
@session_required
def community_detail(request, community_id):
    return _respond(communities.get_community(community_id, request.member))


@require_GET
@session_required
def community_posts(request, community_id):
    return _respond(communities.get_community_posts(
        community_id,
        request.member,
        cursor=request.GET.get("cursor") or None,
        limit=_int_param(request.GET.get("limit")) or communities.DEFAULT_PAGE_SIZE,
    ))


@require_GET
@session_required
def community_members(request, community_id):
    return _respond(communities.get_community_members(community_id, request.member))


@csrf_exempt
@require_POST
@session_required
def update_community(request, community_id):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(communities.update_community(request.member, community_id, data))


@csrf_exempt
@require_POST
@session_required
def toggle_membership(request, community_id):
    return _respond(users.join_leave_community(request.member, community_id))


@csrf_exempt
@require_POST
@session_required
def leave_community(request, community_id):
    return _respond(communities.leave_community(request.member, community_id))


@csrf_exempt
@require_POST
@session_required
def remove_member(request, community_id, user_id):
    return _respond(communities.remove_member(request.member, community_id, user_id))


# ==================== POSTS ====================

@csrf_exempt
@require_POST
@session_required
def create_post(request):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(posts.create_post(request.member, data))


@require_GET
def trending_posts(request):
    return _respond(posts.get_trending_posts(
        request.member,
        last_post_id=request.GET.get("cursor") or None,
        type=request.GET.get("type") or "top",
    ))


@csrf_exempt
@require_POST
@session_required
def delete_post(request, post_id):
    return _respond(posts.delete_post(request.member, post_id))


@csrf_exempt
@require_POST
@session_required
def react(request, post_id):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(posts.like_dislike(
        request.member, post_id, data.get("type"), _int_param(data.get("commentId"))
    ))


@require_GET
def comments(request, post_id):
    return _respond(posts.get_comments(
        post_id, request.member, _int_param(request.GET.get("parent"))
    ))


@csrf_exempt
@require_POST
@session_required
def add_comment(request, post_id):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(posts.add_comment(
        request.member, post_id, data.get("content"), _int_param(data.get("parentCommentId"))
    ))


@csrf_exempt
@require_POST
@session_required
def delete_comment(request, comment_id):
    return _respond(posts.delete_comment(request.member, comment_id))


@csrf_exempt
@require_POST
@session_required
def edit_comment(request, comment_id):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(posts.edit_comment(request.member, comment_id, data.get("content")))


@csrf_exempt
@require_POST
@session_required
def report(request):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(posts.report(
        request.member,
        _int_param(data.get("reportedUserId")),
        data.get("reason"),
        post_id=_int_param(data.get("postId")),
        comment_id=_int_param(data.get("commentId")),
    ))


# ==================== STUDIO ====================

@require_GET
@session_required
def studio_documents(request, collection):
    return _respond(studio.get_documents(request.member, collection))


@require_GET
@session_required
def studio_document(request, collection, document_id):
    return _respond(studio.get_document_by_id(request.member, collection, document_id))


@csrf_exempt
@require_POST
@session_required
def studio_update(request, content_type):
    data = _json_body(request)
    if data is None:
        return _bad_body()
    return _respond(studio.update_document(request.member, content_type, data))


# ==================== MEDIA ====================

@csrf_exempt
@require_POST
@session_required
def upload(request):
    files = request.FILES.getlist("files")
    if not files:
        return JsonResponse({"success": False, "message": "No files uploaded"}, status=400)

    try:
        results = uploads.upload_files(files)
    except (cloudinary.exceptions.Error, ValueError) as e:
        logger.error(f"Cloudinary upload error: {e}")
        return JsonResponse({"success": False, "message": "Upload failed"}, status=502)

    return JsonResponse({"success": True, "message": "Files uploaded", "files": results})
