import pytest
from django.core import mail
from django.urls import reverse
from core.utils import email as mailer
from showcase_app.models import WebsiteConnection


def _form(image_file, **overrides):
    data = {
        'title': 'Bird Atlas',
        'link': 'https://birds.example.com',
        'githubLink': 'https://github.com/example/birds',
        'description': 'An atlas of sea birds.',
        'banner': image_file('banner.png'),
    }
    data.update(overrides)
    return data


def _connection(user, **fields):
    defaults = {
        'title': 'Fish Finder', 'link': 'https://fish.example.com', 'description': 'Fish.',
        'image_path': 'https://blobs.test/website-connections/f.png', 'user': user,
    }
    defaults.update(fields)
    return WebsiteConnection.objects.create(**defaults)


@pytest.mark.django_db
def test_submit_stores_inactive_entry_and_mails_owner(auth_client, web_member, fake_storage, image_file):
    resp = auth_client(web_member).post(reverse('connection-list'), _form(image_file), format='multipart')
    assert resp.status_code == 201
    body = resp.json()
    assert body['isActive'] is False
    assert body['imagePath'].startswith('https://blobs.test/website-connections/')
    assert [c for c, _ in fake_storage.blobs] == ['website-connections']
    assert mail.outbox[0].subject == 'Website Connection Submission Received'


@pytest.mark.django_db
def test_submit_survives_mail_failure(auth_client, web_member, fake_storage, image_file, monkeypatch):
    def boom(*args):
        raise mailer.EmailSendError('smtp down')

    monkeypatch.setattr(mailer, 'send_html_email', boom)
    resp = auth_client(web_member).post(reverse('connection-list'), _form(image_file), format='multipart')
    assert resp.status_code == 201
    assert WebsiteConnection.objects.count() == 1


@pytest.mark.django_db
def test_submit_requires_fields_and_banner(auth_client, web_member, fake_storage, image_file):
    client = auth_client(web_member)
    data = _form(image_file)
    del data['banner']
    resp = client.post(reverse('connection-list'), data, format='multipart')
    assert resp.status_code == 400
    assert 'banner' in resp.json()

    resp = client.post(reverse('connection-list'), _form(image_file, title='  '), format='multipart')
    assert resp.status_code == 400
    assert not WebsiteConnection.objects.exists()


@pytest.mark.django_db
def test_submit_requires_trusted_member(auth_client, user, fake_storage, image_file):
    resp = auth_client(user).post(reverse('connection-list'), _form(image_file), format='multipart')
    assert resp.status_code == 403


@pytest.mark.django_db
def test_banner_upload_failure_is_500(auth_client, web_member, fake_storage, image_file):
    fake_storage.fail_uploads = True
    resp = auth_client(web_member).post(reverse('connection-list'), _form(image_file), format='multipart')
    assert resp.status_code == 500
    assert not WebsiteConnection.objects.exists()


@pytest.mark.django_db
def test_public_and_owned_lists(api_client, auth_client, user, other_user):
    _connection(user, title='Pending')
    _connection(user, title='Live', is_active=True)
    _connection(other_user, title='Star', is_active=True, is_featured=True)

    assert sorted(c['title'] for c in api_client.get(reverse('connection-active')).json()) == ['Live', 'Star']
    assert [c['title'] for c in api_client.get(reverse('connection-featured')).json()] == ['Star']
    owned = auth_client(user).get(reverse('connection-owned')).json()
    assert sorted(c['title'] for c in owned) == ['Live', 'Pending']


@pytest.mark.django_db
def test_full_list_is_staff_only(auth_client, user, staff_user):
    _connection(user)
    assert auth_client(user).get(reverse('connection-list')).status_code == 403
    assert len(auth_client(staff_user).get(reverse('connection-list')).json()) == 1


@pytest.mark.django_db
def test_status_change_sends_approval_then_removal_mail(auth_client, user, staff_user):
    connection = _connection(user)
    client = auth_client(staff_user)
    url = reverse('connection-status', args=[connection.id])

    resp = client.post(url, {'isActive': True}, format='json')
    assert resp.status_code == 200
    assert resp.json()['isActive'] is True
    resp = client.post(url, {'isActive': False}, format='json')
    assert resp.json()['isActive'] is False

    assert len(mail.outbox) == 2
    assert mail.outbox[0].to == ['alice@example.com']
    assert mail.outbox[0].subject != mail.outbox[1].subject


@pytest.mark.django_db
def test_feature_toggle_is_staff_only(auth_client, user, staff_user):
    connection = _connection(user, is_active=True)
    url = reverse('connection-feature', args=[connection.id])
    assert auth_client(user).post(url, {'isFeatured': True}, format='json').status_code == 403
    assert auth_client(staff_user).post(url, {'isFeatured': True}, format='json').status_code == 200
    connection.refresh_from_db()
    assert connection.is_featured is True


@pytest.mark.django_db
def test_moderating_unknown_connection_is_404(auth_client, staff_user):
    resp = auth_client(staff_user).post(reverse('connection-status', args=[404]), {'isActive': True}, format='json')
    assert resp.status_code == 404


@pytest.mark.django_db
def test_delete_by_owner_removes_banner(auth_client, user, fake_storage):
    connection = _connection(user)
    fake_storage.blobs[('website-connections', 'f.png')] = b'x'
    resp = auth_client(user).delete(reverse('connection-detail', args=[connection.id]))
    assert resp.status_code == 204
    assert fake_storage.deleted == [('website-connections', 'f.png')]
    assert not WebsiteConnection.objects.exists()


@pytest.mark.django_db
def test_delete_ignores_banner_failure_and_checks_owner(auth_client, user, other_user, staff_user, fake_storage):
    connection = _connection(user)
    assert auth_client(other_user).delete(reverse('connection-detail', args=[connection.id])).status_code == 403

    fake_storage.fail_deletes.add('f.png')
    resp = auth_client(staff_user).delete(reverse('connection-detail', args=[connection.id]))
    assert resp.status_code == 204
    assert not WebsiteConnection.objects.exists()
