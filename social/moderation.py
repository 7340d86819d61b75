"""Content moderation through the external moderation API."""

import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

# Verdicts more confident than this are treated as unsafe even when marked safe
MAX_SAFE_CONFIDENCE = 0.95

WARN_POST = "AI detected your post content seems intense. Let's keep the conversation respectful."
WARN_COMMENT = "AI detected your comment seems intense. Let's keep the conversation respectful."


def content_filter(text):
    """
    Ask the moderation API whether ``text`` is acceptable.

    Returns:
        True: content is safe
        False: content should be rejected
        None: no verdict (API key missing, network error, malformed reply);
              callers accept the content
    """
    if not settings.MODERATEAI_API_KEY:
        return None

    try:
        response = requests.post(
            settings.MODERATEAI_URL,
            json={"text": text, "context": "comment"},
            headers={
                "Content-Type": "application/json",
                "X-API-Key": settings.MODERATEAI_API_KEY,
            },
            timeout=settings.MODERATION_TIMEOUT,
        )
        response.raise_for_status()
        result = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Moderation API error: {e}")
        return None

    if not isinstance(result, dict) or "safe" not in result:
        logger.warning(f"Moderation API returned no verdict: {result!r}")
        return None

    confidence = result.get("confidence") or 0
    return bool(result["safe"]) and confidence <= MAX_SAFE_CONFIDENCE


def is_flagged(text):
    return content_filter(text) is False
