import logging
import os
import uuid
from typing import List, Tuple
from django.db import transaction
from quiz_app.models import Category, ImageUpload
from quiz_app.services.sequences import GROUP_ID, next_value
from quiz_app.services.storage import BlobStorageError, container_name_for, parse_blob_url

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
    '.gif': 'image/gif',
    '.bmp': 'image/bmp',
    '.webp': 'image/webp',
}


def content_type_for(file_name: str) -> str:
    return CONTENT_TYPES.get(os.path.splitext(file_name or '')[1].lower(), 'application/octet-stream')


def register_upload_batch(user, category: Category, files, storage) -> Tuple[int, List[ImageUpload]]:
    """
    Uploads every non-empty file to the category's container and records it.

    All files of one call share a freshly drawn group_id. Blobs are stored
    under '<uuid4 hex><original extension>'; image_name keeps the client
    file name. When an upload fails, blobs already stored by this call are
    removed again (best effort) and the storage error propagates; no rows
    are written in that case.
    Returns (group_id, created records).
    """
    container = container_name_for(category.category_name)
    group_id = next_value(GROUP_ID)

    pending = []
    stored = []
    for upload in files:
        if not getattr(upload, 'size', 0):
            continue
        ext = os.path.splitext(upload.name)[1].lower()
        blob_name = f'{uuid.uuid4().hex}{ext}'
        try:
            url = storage.upload(container, blob_name, upload, content_type=content_type_for(upload.name))
        except BlobStorageError:
            _discard_blobs(storage, container, stored)
            raise
        stored.append(blob_name)
        pending.append(ImageUpload(
            image_name=upload.name,
            folder_name=container,
            image_path=url,
            group_id=group_id,
            config_link_id=category.config_link_id,
            user=user,
        ))

    with transaction.atomic():
        for record in pending:
            record.save()
    records = pending

    logger.info('User(%s) uploaded %s image(s) to Category(%s), group %s.',
                user.id, len(records), category.id, group_id)
    return group_id, records


def _discard_blobs(storage, container: str, blob_names: List[str]) -> None:
    for blob_name in blob_names:
        try:
            storage.delete(container, blob_name)
        except BlobStorageError as exc:
            logger.warning('Could not remove orphaned blob %s/%s: %s', container, blob_name, exc)


def delete_image(image: ImageUpload, storage) -> None:
    """Deletes the blob first, then the record; a storage error keeps the record"""
    location = parse_blob_url(image.image_path)
    if location is not None:
        storage.delete(*location)
    image.delete()
