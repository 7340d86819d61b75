"""
================================================================================
DRIFNET - CUSTOM MIDDLEWARE
================================================================================

@file        middleware.py
@description Session-token authentication for the JSON API
@version     1.0.0

MODULE PURPOSE
================================================================================
This module resolves the signed session cookie into the acting user:

1. SessionTokenMiddleware
   - Reads the ``drifnet_session`` cookie
   - Verifies signature, expiry and the matching Session row
   - Sets ``request.member`` to the User, or None

2. session_required
   - View decorator answering 401 JSON when ``request.member`` is None

``request.user`` (Django's session auth) is left untouched and only backs
the admin site.

PERFORMANCE IMPACT
================================================================================
- No cookie: no database queries
- With cookie: token decode (CPU only) plus two indexed lookups
  (Session by jti, User by pk)

ERROR HANDLING
================================================================================
Invalid, expired or revoked tokens never raise: the request simply proceeds
anonymously and protected views answer 401.
================================================================================
"""

from functools import wraps

from django.conf import settings
from django.http import JsonResponse

from .sessions import resolve_user


# ============================================================================
# SESSION TOKEN MIDDLEWARE
# ============================================================================

class SessionTokenMiddleware:
    """
    Attach the signed-in API user to the request.

    Flow:
        1. Read the session cookie (absent -> anonymous)
        2. Validate the token against the Session table
        3. Set request.member to the User or None
        4. Continue to the view

    Attributes:
        get_response: Next middleware or view in the chain
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        token = request.COOKIES.get(settings.SESSION_TOKEN_COOKIE)
        request.member = resolve_user(token) if token else None
        return self.get_response(request)


def session_required(view_func):
    """Reject requests without a valid session with 401 JSON."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if getattr(request, 'member', None) is None:
            return JsonResponse({"success": False, "message": "User not authorized"}, status=401)
        return view_func(request, *args, **kwargs)

    return _wrapped
