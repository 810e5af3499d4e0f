import io
import pytest  # required to define shared fixtures
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from auth_app.models import ClassificationQuizRole, WebConnectRole
from quiz_app.services import storage as blob_storage


def authenticate_client(client: APIClient, user):
    """Creates JWTs for user and sets them as cookies on the test client"""
    refresh = RefreshToken.for_user(user)
    client.cookies['access_token'] = str(refresh.access_token)
    client.cookies['refresh_token'] = str(refresh)
    return client


class FakeBlobStorage:
    """
    In-memory stand-in for BlobStorage.

    `fail_deletes` holds file names whose delete raises, `download_errors`
    is a list of exceptions raised by consecutive downloads before a blob is
    served. `fail_uploads_after` lets that many uploads succeed, then every
    further upload raises.
    """
    public_base_url = 'https://blobs.test'

    def __init__(self):
        self.blobs = {}
        self.deleted = []
        self.fail_deletes = set()
        self.fail_uploads = False
        self.fail_uploads_after = None
        self.upload_calls = 0
        self.download_errors = []
        self.download_calls = 0

    def url_for(self, container, file_name):
        return f'{self.public_base_url}/{container}/{file_name}'

    def upload(self, container, file_name, stream, content_type=None):
        self.upload_calls += 1
        if self.fail_uploads or (
            self.fail_uploads_after is not None and self.upload_calls > self.fail_uploads_after
        ):
            raise blob_storage.BlobStorageError('upload refused')
        self.blobs[(container, file_name)] = stream.read()
        return self.url_for(container, file_name)

    def download(self, container, file_name):
        self.download_calls += 1
        if self.download_errors:
            raise self.download_errors.pop(0)
        if (container, file_name) not in self.blobs:
            raise blob_storage.BlobNotFound(f'{container}/{file_name}')
        return self.blobs[(container, file_name)]

    def delete(self, container, file_name):
        if file_name in self.fail_deletes:
            raise blob_storage.BlobStorageError(f'delete refused for {file_name}')
        self.blobs.pop((container, file_name), None)
        self.deleted.append((container, file_name))


@pytest.fixture
def api_client() -> APIClient:
    """Provides a DRF APIClient instance for making HTTP requests in tests"""
    return APIClient()


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(username='alice', email='alice@example.com', password='Str0ng!Pass')


@pytest.fixture
def other_user(db):
    return get_user_model().objects.create_user(username='bob', email='bob@example.com', password='Str0ng!Pass')


@pytest.fixture
def staff_user(db):
    return get_user_model().objects.create_user(
        username='admin', email='admin@example.com', password='Str0ng!Pass', is_staff=True
    )


@pytest.fixture
def author(user):
    """`user` trusted for classification quiz authoring"""
    ClassificationQuizRole.objects.create(user=user, is_trusted=True)
    return user


@pytest.fixture
def web_member(user):
    """`user` trusted for the project showcase"""
    WebConnectRole.objects.create(user=user, is_trusted=True)
    return user


@pytest.fixture
def auth_client():
    """Returns a callable building an APIClient authenticated as the given user via JWT cookies"""
    def _make(user):
        return authenticate_client(APIClient(), user)
    return _make


@pytest.fixture
def fake_storage(monkeypatch):
    """Replaces the process-wide blob storage with an in-memory fake"""
    storage = FakeBlobStorage()
    monkeypatch.setattr(blob_storage, 'get_storage', lambda: storage)
    return storage


@pytest.fixture
def image_file():
    """Builds a named in-memory upload for multipart requests"""
    def _make(name='bird.png', content=b'\x89PNG fake image bytes'):
        f = io.BytesIO(content)
        f.name = name
        return f
    return _make
