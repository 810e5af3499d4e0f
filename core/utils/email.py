"""
Outgoing notification emails.

All mails go through Django's configured email backend. Callers get back the
Message-ID of the sent mail or an EmailSendError; the original exception is
logged here and never shown to the client.
"""
import logging
from datetime import datetime, timezone
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.core.mail.message import make_msgid
from django.utils.html import escape, strip_tags

logger = logging.getLogger(__name__)


class EmailSendError(Exception):
    """Raised when the email backend fails to deliver a message"""
    pass


def send_html_email(to_email: str, subject: str, html: str) -> str:
    """Sends an HTML mail with a plain text fallback and returns its Message-ID"""
    message_id = make_msgid(domain='devexchange')
    message = EmailMultiAlternatives(
        subject=subject,
        body=strip_tags(html),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to_email],
        headers={'Message-ID': message_id},
    )
    message.attach_alternative(html, 'text/html')
    try:
        message.send(fail_silently=False)
    except Exception as exc:
        logger.error('Failed to send email to %s: %s', to_email, exc)
        raise EmailSendError(f'Failed to send email to {to_email}') from exc
    logger.info('Email sent to %s. MessageId: %s', to_email, message_id)
    return message_id


def _today() -> str:
    return datetime.now(timezone.utc).strftime('%B %d, %Y')


VERIFICATION_TEMPLATES = {
    'classification-quiz': (
        'Verify Your Classification Quiz',
        '<h2>Verify Your Classification Quiz</h2>'
        '<p>Dear {username},</p>'
        '<p>To complete your Classification Quiz verification, please click the link below:</p>'
        '<p><a href="{link}">Verify Classification Quiz</a></p>'
        '<p>This link will expire in {hours} hours.</p>'
        '<p>If you did not request this verification, please ignore this email.</p>'
        '<p>Best regards,<br>The DevExchange Team</p>',
    ),
    'web-connect': (
        'Verify Your Web Connect',
        '<h2>Verify Your Account</h2>'
        '<p>Dear {username},</p>'
        '<p>To complete your Web/Program Connection verification, please click the link below:</p>'
        '<p><a href="{link}">Verify Web Connection</a></p>'
        '<p>This link will expire in {hours} hours.</p>'
        '<p>If you did not request this verification, please ignore this email.</p>'
        '<p>Best regards,<br>The DevExchange Team</p>',
    ),
}


def render_verification_email(kind: str, username: str, link: str, hours: int):
    """Returns (subject, html) for a verification mail of the given kind"""
    subject, template = VERIFICATION_TEMPLATES[kind]
    return subject, template.format(username=escape(username), link=escape(link), hours=hours)


def render_submission_email(username: str, title: str):
    html = (
        '<h2>Website Connection Submission Received</h2>'
        f'<p>Dear {escape(username)},</p>'
        f'<p>We have received your website connection submission for <strong>{escape(title)}</strong>.</p>'
        '<p>Your submission is currently under review by our team. '
        'We will notify you once the review is complete.</p>'
        f'<ul><li>Website Title: {escape(title)}</li><li>Submission Date: {_today()}</li></ul>'
        '<p>Best regards,<br>The DevExchange Team</p>'
    )
    return 'Website Connection Submission Received', html


def render_approval_email(username: str, title: str):
    html = (
        '<h2>Website Connection Approved!</h2>'
        f'<p>Dear {escape(username)},</p>'
        f'<p>Your website connection for <strong>{escape(title)}</strong> has been approved '
        'and is now live on our platform.</p>'
        f'<ul><li>Website Title: {escape(title)}</li><li>Approval Date: {_today()}</li>'
        '<li>Status: Active</li></ul>'
        '<p>Thank you for contributing to our platform!</p>'
        '<p>Best regards,<br>The DevExchange Team</p>'
    )
    return 'Website Connection Approved', html


def render_removal_email(username: str, title: str):
    html = (
        '<h2>Website Connection Status Update</h2>'
        f'<p>Dear {escape(username)},</p>'
        f'<p>Your website connection for <strong>{escape(title)}</strong> has been removed from our platform.</p>'
        f'<ul><li>Website Title: {escape(title)}</li><li>Removal Date: {_today()}</li></ul>'
        '<p>If you have any questions about this decision, please contact our support team.</p>'
        '<p>Best regards,<br>The DevExchange Team</p>'
    )
    return 'Website Connection Removed', html
