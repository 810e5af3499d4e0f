"""
Email verification flow for the classification quiz and web connect roles.

A user requests a token, receives a link by email and consumes the token
exactly once; consuming it creates the role row. Expired tokens are never
cleaned up by a job, a new request simply supersedes them.
"""
import base64
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from auth_app.models import (
    ClassificationQuizRole,
    ClassificationQuizVerification,
    WebConnectRole,
    WebConnectVerification,
)
from core.utils.email import render_verification_email, send_html_email

logger = logging.getLogger(__name__)

# kind -> (token model, role model)
KINDS = {
    'classification-quiz': (ClassificationQuizVerification, ClassificationQuizRole),
    'web-connect': (WebConnectVerification, WebConnectRole),
}


class VerificationError(Exception):
    """Base class for verification failures; the message is safe to show"""
    pass


class InvalidToken(VerificationError):
    def __init__(self):
        super().__init__('Invalid or expired verification token')


class ExpiredToken(VerificationError):
    def __init__(self):
        super().__init__('Verification token has expired')


@dataclass
class VerificationRequestResult:
    status: str  # 'already_verified' | 'pending' | 'sent'
    expires_in: Optional[str] = None
    message_id: Optional[str] = None


def generate_verification_token() -> str:
    """URL-safe Base64 of 32 cryptographically random bytes, without padding"""
    return base64.urlsafe_b64encode(secrets.token_bytes(32)).decode('ascii').rstrip('=')


def format_remaining(delta: timedelta) -> str:
    total_minutes = max(int(delta.total_seconds() // 60), 0)
    return f'{total_minutes // 60} hours and {total_minutes % 60} minutes'


def _models_for(kind: str):
    try:
        return KINDS[kind]
    except KeyError:
        raise ValueError(f'Unknown verification kind: {kind}')


def request_verification(user, kind: str, now=None,
                         send: Optional[Callable[[str, str, str], str]] = None) -> VerificationRequestResult:
    """
    Issues a verification token for `user` and mails the link.

    No token is issued when the user already holds the role or still has a
    pending, unexpired one. An email failure propagates and rolls the new
    token back.
    """
    token_model, role_model = _models_for(kind)
    now = now or timezone.now()

    if role_model.objects.filter(user=user).exists():
        return VerificationRequestResult(status='already_verified')

    pending = token_model.objects.filter(user=user, expires_at__gt=now, verified_at__isnull=True).first()
    if pending is not None:
        return VerificationRequestResult(status='pending', expires_in=format_remaining(pending.expires_at - now))

    ttl = timedelta(hours=settings.VERIFICATION_TOKEN_TTL_HOURS)
    with transaction.atomic():
        superseded, _ = token_model.objects.filter(user=user).delete()
        entry = token_model.objects.create(
            user=user,
            token=generate_verification_token(),
            created_at=now,
            expires_at=now + ttl,
        )
        link = f'{settings.WEB_URL.rstrip("/")}/verify-{kind}?token={entry.token}'
        subject, html = render_verification_email(kind, user.get_username(), link, settings.VERIFICATION_TOKEN_TTL_HOURS)
        message_id = (send or send_html_email)(user.email, subject, html)

    logger.info('Issued %s verification token for User(%s), superseded %s old token(s).', kind, user.pk, superseded)
    return VerificationRequestResult(status='sent', message_id=message_id)


def consume_verification(kind: str, token: str, now=None) -> bool:
    """
    Consumes `token` and grants the role.

    Returns True when the user already had the role (the token is consumed
    anyway), False when the role was created now. Raises InvalidToken for an
    unknown or already used token and ExpiredToken after expiry.
    """
    token_model, role_model = _models_for(kind)
    now = now or timezone.now()
    if not token:
        raise InvalidToken()

    with transaction.atomic():
        entry = token_model.objects.select_for_update().filter(token=token).first()
        if entry is None:
            raise InvalidToken()
        if entry.expires_at < now:
            raise ExpiredToken()

        _, created = role_model.objects.get_or_create(user_id=entry.user_id, defaults={'is_trusted': False})
        entry.delete()

    logger.info('User(%s) consumed a %s verification token.', entry.user_id, kind)
    return not created
