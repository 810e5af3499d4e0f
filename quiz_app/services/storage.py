"""
Object storage access for uploaded images and showcase banners.

Blobs live in a single S3-compatible bucket (BLOB_BUCKET) under the key
'<container>/<file_name>'; the public URL is
'<BLOB_PUBLIC_BASE_URL>/<container>/<file_name>'.
"""
import logging
import time
from typing import Callable, Optional, Tuple
from urllib.parse import unquote, urlparse
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from django.utils.text import slugify

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = ('404', 'NoSuchKey', 'NotFound')
_API_IMAGES_PREFIX = '/api/images/'


class BlobStorageError(Exception):
    pass


class BlobNotFound(BlobStorageError):
    pass


def container_name_for(category_name: str) -> str:
    """
    Container name derived from a category name.

    Reduced to lowercase [a-z0-9-] so the name stays one URL path segment;
    whitespace runs and underscores become hyphens. Names with no usable
    character fall back to 'images'.
    """
    return slugify(category_name or '').replace('_', '-').strip('-') or 'images'


class BlobStorage:
    """Thin wrapper around a boto3 S3 client"""

    def __init__(self, client=None, bucket: Optional[str] = None, public_base_url: Optional[str] = None):
        self._client = client
        self.bucket = bucket or settings.BLOB_BUCKET
        self.public_base_url = (public_base_url or settings.BLOB_PUBLIC_BASE_URL).rstrip('/')

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                's3',
                endpoint_url=settings.BLOB_ENDPOINT_URL,
                aws_access_key_id=settings.BLOB_ACCESS_KEY or None,
                aws_secret_access_key=settings.BLOB_SECRET_KEY or None,
                region_name=settings.BLOB_REGION,
            )
        return self._client

    @staticmethod
    def key_for(container: str, file_name: str) -> str:
        return f'{container}/{file_name}'

    def url_for(self, container: str, file_name: str) -> str:
        return f'{self.public_base_url}/{container}/{file_name}'

    def upload(self, container: str, file_name: str, stream, content_type: Optional[str] = None) -> str:
        key = self.key_for(container, file_name)
        try:
            self.client.upload_fileobj(
                Fileobj=stream,
                Bucket=self.bucket,
                Key=key,
                ExtraArgs={'ContentType': content_type or 'application/octet-stream'},
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error('Upload of %s failed: %s', key, exc)
            raise BlobStorageError(f'Upload failed for {key}') from exc
        return self.url_for(container, file_name)

    def download(self, container: str, file_name: str) -> bytes:
        key = self.key_for(container, file_name)
        try:
            resp = self.client.get_object(Bucket=self.bucket, Key=key)
            return resp['Body'].read()
        except ClientError as exc:
            code = (exc.response.get('Error') or {}).get('Code')
            if code in _NOT_FOUND_CODES:
                raise BlobNotFound(key) from exc
            raise BlobStorageError(f'Download failed for {key}') from exc
        except BotoCoreError as exc:
            raise BlobStorageError(f'Download failed for {key}') from exc

    def delete(self, container: str, file_name: str) -> None:
        key = self.key_for(container, file_name)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise BlobStorageError(f'Delete failed for {key}') from exc


_storage: Optional[BlobStorage] = None


def get_storage() -> BlobStorage:
    """Process-wide storage instance, created on first use"""
    global _storage
    if _storage is None:
        _storage = BlobStorage()
    return _storage


def download_with_retry(storage, container: str, file_name: str, attempts: int = 3,
                        backoff: float = 1.0, sleep: Callable[[float], None] = time.sleep) -> bytes:
    """
    Downloads a blob, retrying transient failures with linear backoff.

    Sleeps backoff * n seconds after the n-th failed attempt (1s, then 2s
    with the defaults). A missing blob is not retried.
    """
    last_error = None
    for attempt in range(1, attempts + 1):
        try:
            return storage.download(container, file_name)
        except BlobNotFound:
            raise
        except BlobStorageError as exc:
            last_error = exc
            logger.warning('Download attempt %s/%s of %s/%s failed: %s',
                           attempt, attempts, container, file_name, exc)
            if attempt < attempts:
                sleep(backoff * attempt)
    raise last_error


def parse_blob_url(image_path: str) -> Optional[Tuple[str, str]]:
    """
    Recovers (container, file_name) from a stored image path.

    Accepts absolute blob URLs and relative '/api/images/<container>/<file>'
    paths; returns None when the path has no container segment.
    """
    if not image_path:
        return None
    path = unquote(urlparse(image_path).path)
    if path.startswith(_API_IMAGES_PREFIX):
        path = path[len(_API_IMAGES_PREFIX):]
    parts = [p for p in path.split('/') if p]
    if len(parts) < 2:
        return None
    return parts[-2], parts[-1]
