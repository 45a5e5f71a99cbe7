"""Blob storage backends and the per-request backend selector."""

from app.core.config import Settings

from .base import (
    CHUNK_SIZE,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_LIST_LIMIT,
    DownloadResult,
    StorageService,
    UploadResult,
    read_upload_data,
    validate_key,
)
from .bucket import ObjectBucketStorage, create_bucket_client
from .local import LocalStorage


def select_storage(config: Settings) -> StorageService:
    """Pick the bucket backend when a bucket is configured, local disk otherwise."""
    if config.s3_bucket_name:
        client = create_bucket_client(
            config.s3_region,
            config.s3_endpoint_url,
            config.aws_access_key_id,
            config.aws_secret_access_key,
        )
        return ObjectBucketStorage(client, config.s3_bucket_name, config.storage_public_url)
    return LocalStorage(config.storage_path, config.storage_public_url)


__all__ = [
    "CHUNK_SIZE",
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_LIST_LIMIT",
    "DownloadResult",
    "LocalStorage",
    "ObjectBucketStorage",
    "StorageService",
    "UploadResult",
    "create_bucket_client",
    "read_upload_data",
    "select_storage",
    "validate_key",
]
