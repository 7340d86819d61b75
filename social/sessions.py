"""
================================================================================
DRIFNET - API SESSIONS
================================================================================

Login sessions are HS256-signed tokens carried in the ``drifnet_session``
cookie. Claims:

    sub  user id (string)
    jti  random token id, must match the user's Session row
    iat  issue time
    exp  issue time + SESSION_TOKEN_DAYS

A token is valid only while its signature and expiry verify AND a Session
row with the same jti exists. Each user has at most one Session row, so a
new login (from any device) revokes the previous token.
================================================================================
"""

import logging
import uuid
from datetime import timedelta

import jwt
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .models import Session, User

logger = logging.getLogger(__name__)


def session_lifetime():
    return timedelta(days=settings.SESSION_TOKEN_DAYS)


def start_session(user, ip_address='', user_agent=''):
    """Sign a new token for ``user`` and make it their only session. Returns the token."""
    now = timezone.now()
    expires_at = now + session_lifetime()
    jti = uuid.uuid4().hex
    token = jwt.encode(
        {"sub": str(user.pk), "jti": jti, "iat": now, "exp": expires_at},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

    with transaction.atomic():
        Session.objects.update_or_create(
            user=user,
            defaults={
                'jti': jti,
                'token': token,
                'device_id': uuid.uuid4().hex,
                'user_agent': (user_agent or '')[:512],
                'ip_address': (ip_address or '')[:64],
                'created_at': now,
                'expires_at': expires_at,
            },
        )

    logger.info(f"Session started for user {user.pk}")
    return token


def decode_token(token):
    """Verified claims of ``token``, or None when it is malformed, forged or expired."""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "jti", "iat", "exp"]},
        )
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected session token: {e}")
        return None


def validate_token(token):
    """User id the token belongs to, or None."""
    if not token:
        return None
    claims = decode_token(token)
    if claims is None:
        return None

    session = (
        Session.objects
        .filter(jti=claims["jti"], expires_at__gt=timezone.now())
        .only('user_id')
        .first()
    )
    if session is None or str(session.user_id) != claims["sub"]:
        return None
    return session.user_id


def resolve_user(token):
    user_id = validate_token(token)
    if user_id is None:
        return None
    return User.objects.filter(pk=user_id, is_active=True).first()


def end_session(user):
    Session.objects.filter(user=user).delete()
    logger.info(f"Session ended for user {user.pk}")
    return {"success": True, "message": "User signed out successfully"}
