import pytest
from django.urls import reverse


@pytest.mark.django_db
class TestTokenRefreshEndpoint:
    """Tests for /api/token/refresh/"""

    def test_refresh_sets_new_access_cookie(self, auth_client, author):
        client = auth_client(author)
        resp = client.post(reverse('api-token-refresh'), {}, format='json')
        assert resp.status_code == 200
        data = resp.json()
        assert data['detail'] == 'Token refreshed'
        assert data['access']
        assert resp.cookies['access_token'].value == data['access']

        # the refreshed cookie authenticates on its own
        client.cookies['access_token'] = data['access']
        del client.cookies['refresh_token']
        assert client.get(reverse('api-me')).json()['is_trusted_classification_quiz'] is True

    def test_refresh_missing_cookie_is_401(self, api_client):
        resp = api_client.post(reverse('api-token-refresh'), {}, format='json')
        assert resp.status_code == 401
        assert 'missing' in resp.json()['detail'].lower()

    def test_refresh_invalid_cookie_is_401(self, api_client):
        api_client.cookies['refresh_token'] = 'not-a-valid-jwt'
        resp = api_client.post(reverse('api-token-refresh'), {}, format='json')
        assert resp.status_code == 401
        assert resp.json()['detail'] == 'Invalid refresh token.'
