"""Object bucket storage backend (S3 API: AWS S3, Cloudflare R2, MinIO).

Every operation maps 1:1 onto a bucket call. boto3 is blocking, so calls run
in Starlette's threadpool.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from functools import lru_cache
from typing import Any

import boto3
from botocore.exceptions import ClientError
from starlette.concurrency import run_in_threadpool

from .base import (
    CHUNK_SIZE,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_LIST_LIMIT,
    DEFAULT_SIGNED_URL_EXPIRY,
    DownloadResult,
    StorageService,
    UploadResult,
    read_upload_data,
    validate_key,
)

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


@lru_cache(maxsize=8)
def create_bucket_client(
    region: str,
    endpoint_url: str | None = None,
    access_key_id: str | None = None,
    secret_access_key: str | None = None,
):
    """Build (and memoize) an S3 client for the given connection settings."""
    return boto3.client(
        "s3",
        region_name=region,
        endpoint_url=endpoint_url,
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
    )


class ObjectBucketStorage(StorageService):
    """
    Storage backend delegating to a bucket.

    :ivar client: boto3 S3 client.
    :ivar bucket: Bucket name.
    :type bucket: str
    """

    def __init__(self, client: Any, bucket: str, public_url: str | None = None):
        super().__init__(public_url)
        self.client = client
        self.bucket = bucket

    def _url(self, key: str) -> str:
        return f"{self.public_url}/{key}" if self.public_url else key

    async def upload(
        self, key: str, data: Any, content_type: str = DEFAULT_CONTENT_TYPE
    ) -> UploadResult:
        validate_key(key)
        body = await read_upload_data(data)
        response = await run_in_threadpool(
            self.client.put_object,
            Bucket=self.bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
        )
        logger.debug("Put %s into bucket %s (%d bytes)", key, self.bucket, len(body))
        return UploadResult(
            key=key,
            size=len(body),
            etag=response.get("ETag", ""),
            url=self._url(key),
        )

    async def download(self, key: str) -> DownloadResult | None:
        validate_key(key)
        try:
            response = await run_in_threadpool(
                self.client.get_object, Bucket=self.bucket, Key=key
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in MISSING_OBJECT_CODES:
                return None
            raise

        return DownloadResult(
            data=self._stream(response["Body"]),
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
        )

    @staticmethod
    async def _stream(body) -> AsyncIterator[bytes]:
        try:
            while True:
                chunk = await run_in_threadpool(body.read, CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        finally:
            body.close()

    async def delete(self, key: str) -> bool:
        validate_key(key)
        await run_in_threadpool(self.client.delete_object, Bucket=self.bucket, Key=key)
        return True

    async def list(self, prefix: str = "", limit: int = DEFAULT_LIST_LIMIT) -> list[str]:
        if limit <= 0:
            return []
        response = await run_in_threadpool(
            self.client.list_objects_v2, Bucket=self.bucket, Prefix=prefix, MaxKeys=limit
        )
        return [obj["Key"] for obj in response.get("Contents", [])]

    def get_signed_url(self, key: str, expires_in: int = DEFAULT_SIGNED_URL_EXPIRY) -> str:
        # Same fallback as the local backend: public URL or bare key
        return self._url(key)
