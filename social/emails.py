import logging
from datetime import timedelta

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.crypto import get_random_string
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)

SIGNUP = "signup"
RESET = "reset"

SUBJECTS = {
    SIGNUP: "Verify your DrifNet account",
    RESET: "Reset your DrifNet password",
}


def new_otp():
    """Six-digit one-time password and its expiry time."""
    otp = get_random_string(6, allowed_chars="0123456789")
    expires_at = timezone.now() + timedelta(minutes=settings.OTP_EXPIRY_MINUTES)
    return otp, expires_at


def send_otp_email(email, name, otp, purpose=SIGNUP):
    context = {
        "name": name,
        "otp": otp,
        "purpose": purpose,
        "expiry_minutes": settings.OTP_EXPIRY_MINUTES,
    }
    html_message = render_to_string("social/emails/otp_email.html", context)
    plain_message = strip_tags(html_message)

    email_msg = EmailMultiAlternatives(
        subject=SUBJECTS[purpose],
        body=plain_message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[email],
        reply_to=[settings.DEFAULT_FROM_EMAIL],
    )
    email_msg.attach_alternative(html_message, "text/html")
    email_msg.send(fail_silently=False)
    logger.info(f"{purpose} OTP sent to {email}")
