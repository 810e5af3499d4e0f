import re
from datetime import timedelta
import pytest
from django.core import mail
from django.urls import reverse
from django.utils import timezone
from auth_app.models import (
    ClassificationQuizRole,
    ClassificationQuizVerification,
    WebConnectRole,
    WebConnectVerification,
)
from auth_app.services import verification
from core.utils.email import EmailSendError


def _token_from_last_mail() -> str:
    body = mail.outbox[-1].alternatives[0][0]
    return re.search(r'token=([A-Za-z0-9_\-]+)', body).group(1)


def test_generated_token_is_urlsafe_base64_of_32_bytes():
    """32 random bytes encode to 43 URL-safe characters once padding is stripped"""
    token = verification.generate_verification_token()
    assert len(token) == 43
    assert re.fullmatch(r'[A-Za-z0-9_\-]+', token)
    assert token != verification.generate_verification_token()


@pytest.mark.django_db
def test_request_sends_mail_and_stores_token(auth_client, user):
    client = auth_client(user)
    resp = client.post(reverse('verification-request', args=['classification-quiz']))
    assert resp.status_code == 200
    assert resp.json()['message'] == 'Verification email sent successfully.'
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ['alice@example.com']
    entry = ClassificationQuizVerification.objects.get(user=user)
    assert entry.token == _token_from_last_mail()
    assert entry.expires_at - entry.created_at == timedelta(hours=24)


@pytest.mark.django_db
def test_second_request_reports_pending_token(auth_client, user):
    client = auth_client(user)
    client.post(reverse('verification-request', args=['web-connect']))
    resp = client.post(reverse('verification-request', args=['web-connect']))
    assert resp.status_code == 200
    body = resp.json()
    assert body['message'] == 'Verification token already exists.'
    assert 'hours' in body['expires_in']
    assert len(mail.outbox) == 1
    assert WebConnectVerification.objects.filter(user=user).count() == 1


@pytest.mark.django_db
def test_request_when_role_exists_is_already_verified(auth_client, user):
    WebConnectRole.objects.create(user=user)
    resp = auth_client(user).post(reverse('verification-request', args=['web-connect']))
    assert resp.status_code == 200
    assert resp.json()['already_verified'] is True
    assert len(mail.outbox) == 0


@pytest.mark.django_db
def test_request_requires_authentication(api_client):
    resp = api_client.post(reverse('verification-request', args=['web-connect']))
    assert resp.status_code == 401


@pytest.mark.django_db
def test_unknown_kind_returns_404(auth_client, user):
    resp = auth_client(user).post(reverse('verification-request', args=['nope']))
    assert resp.status_code == 404


@pytest.mark.django_db
def test_expired_token_is_superseded_by_new_request(user):
    now = timezone.now()
    old = ClassificationQuizVerification.objects.create(
        user=user, token='old-token', created_at=now - timedelta(hours=30), expires_at=now - timedelta(hours=6)
    )
    result = verification.request_verification(user, 'classification-quiz', now=now, send=lambda *a: 'mid-1')
    assert result.status == 'sent'
    assert result.message_id == 'mid-1'
    tokens = list(ClassificationQuizVerification.objects.filter(user=user))
    assert len(tokens) == 1
    assert tokens[0].pk != old.pk


@pytest.mark.django_db
def test_email_failure_rolls_back_new_token(user, monkeypatch):
    def boom(*args):
        raise EmailSendError('smtp down')

    monkeypatch.setattr(verification, 'send_html_email', boom)
    with pytest.raises(EmailSendError):
        verification.request_verification(user, 'classification-quiz')
    assert not ClassificationQuizVerification.objects.filter(user=user).exists()


@pytest.mark.django_db
def test_request_view_maps_email_failure_to_500(auth_client, user, monkeypatch):
    def boom(*args):
        raise EmailSendError('smtp down')

    monkeypatch.setattr(verification, 'send_html_email', boom)
    resp = auth_client(user).post(reverse('verification-request', args=['classification-quiz']))
    assert resp.status_code == 500
    assert resp.json()['success'] is False


@pytest.mark.django_db
def test_token_is_accepted_exactly_once(auth_client, api_client, user):
    auth_client(user).post(reverse('verification-request', args=['classification-quiz']))
    token = _token_from_last_mail()
    url = reverse('verification-verify', args=['classification-quiz'])

    first = api_client.get(url, {'token': token})
    assert first.status_code == 200
    assert first.json()['message'] == 'Successfully verified.'
    role = ClassificationQuizRole.objects.get(user=user)
    assert role.is_trusted is False

    second = api_client.get(url, {'token': token})
    assert second.status_code == 400
    assert second.json()['message'] == 'Invalid or expired verification token'


@pytest.mark.django_db
def test_expired_token_is_rejected(api_client, user):
    now = timezone.now()
    WebConnectVerification.objects.create(
        user=user, token='expired-token', created_at=now - timedelta(hours=25), expires_at=now - timedelta(hours=1)
    )
    resp = api_client.get(reverse('verification-verify', args=['web-connect']), {'token': 'expired-token'})
    assert resp.status_code == 400
    assert resp.json()['message'] == 'Verification token has expired'
    assert not WebConnectRole.objects.filter(user=user).exists()


@pytest.mark.django_db
def test_consuming_with_existing_role_reports_already_verified(user):
    now = timezone.now()
    WebConnectRole.objects.create(user=user, is_trusted=True)
    WebConnectVerification.objects.create(user=user, token='t-1', created_at=now, expires_at=now + timedelta(hours=1))
    assert verification.consume_verification('web-connect', 't-1') is True
    assert WebConnectRole.objects.get(user=user).is_trusted is True
    assert not WebConnectVerification.objects.exists()


@pytest.mark.django_db
def test_missing_token_parameter_returns_400(api_client):
    resp = api_client.get(reverse('verification-verify', args=['web-connect']))
    assert resp.status_code == 400
