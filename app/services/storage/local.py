"""Local filesystem storage backend.

Blobs are plain files under a root directory. Each blob gets a JSON sidecar
holding its content type and size, because the filesystem itself has nowhere
to keep the content type. Sidecars live in a separate ``.meta`` tree
(``<root>/.meta/<key>.json``) so any key a client can produce stays usable.
"""

from __future__ import annotations

import json
import logging
import os
import time
from collections.abc import AsyncIterator
from pathlib import Path, PurePosixPath
from typing import Any

import aiofiles
import aiofiles.os
from starlette.concurrency import run_in_threadpool

from app.exceptions.file import InvalidStorageKeyError

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

META_DIR = ".meta"
META_SUFFIX = ".json"


class LocalStorage(StorageService):
    """
    Storage backend rooted at a local directory.

    :ivar root: Absolute storage root, resolved once at construction.
    :type root: Path
    """

    def __init__(self, base_path: str | os.PathLike, public_url: str | None = None):
        super().__init__(public_url)
        self.root = Path(base_path).resolve()

    def _path_for(self, key: str) -> Path:
        validate_key(key)
        # The sidecar tree is reserved
        if PurePosixPath(key).parts[0] == META_DIR:
            raise InvalidStorageKeyError(key)
        path = (self.root / key).resolve()
        if path == self.root or not path.is_relative_to(self.root):
            raise InvalidStorageKeyError(key)
        return path

    def _meta_path(self, key: str) -> Path:
        return self.root / META_DIR / f"{key}{META_SUFFIX}"

    def _url(self, key: str) -> str:
        if self.public_url:
            return f"{self.public_url}/{key}"
        return f"/api/files/{key}"

    async def upload(
        self, key: str, data: Any, content_type: str = DEFAULT_CONTENT_TYPE
    ) -> UploadResult:
        path = self._path_for(key)
        meta_path = self._meta_path(key)
        buffer = await read_upload_data(data)

        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        async with aiofiles.open(path, "wb") as blob:
            await blob.write(buffer)

        meta = {"contentType": content_type, "size": len(buffer)}
        try:
            await aiofiles.os.makedirs(meta_path.parent, exist_ok=True)
            async with aiofiles.open(meta_path, "w", encoding="utf-8") as sidecar:
                await sidecar.write(json.dumps(meta))
        except OSError:
            logger.error("Could not write sidecar for %s, removing blob", key)
            try:
                await aiofiles.os.remove(path)
            except OSError:
                logger.exception("Could not remove blob %s", key)
            raise

        logger.debug("Stored %s (%d bytes) at %s", key, len(buffer), path)
        return UploadResult(
            key=key,
            size=len(buffer),
            # Write time, not a content hash
            etag=f'"{time.time_ns() // 1_000_000}"',
            url=self._url(key),
        )

    async def download(self, key: str) -> DownloadResult | None:
        path = self._path_for(key)
        if not await aiofiles.os.path.isfile(path):
            return None

        content_type = DEFAULT_CONTENT_TYPE
        try:
            async with aiofiles.open(self._meta_path(key), "r", encoding="utf-8") as sidecar:
                meta = json.loads(await sidecar.read())
            content_type = meta.get("contentType") or content_type
        except (OSError, ValueError, AttributeError):
            logger.debug("No readable sidecar for %s, using %s", key, content_type)

        return DownloadResult(data=self._stream(path), content_type=content_type)

    @staticmethod
    async def _stream(path: Path) -> AsyncIterator[bytes]:
        async with aiofiles.open(path, "rb") as blob:
            while True:
                chunk = await blob.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk

    async def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            logger.debug("Could not delete %s: %s", key, e)
            return False

        try:
            await aiofiles.os.remove(self._meta_path(key))
        except OSError:
            logger.debug("No sidecar to delete for %s", key)
        return True

    async def list(self, prefix: str = "", limit: int = DEFAULT_LIST_LIMIT) -> list[str]:
        if limit <= 0:
            return []
        if prefix:
            validate_key(prefix.rstrip("/") or prefix)
        return await run_in_threadpool(self._collect, prefix, limit)

    def _collect(self, prefix: str, limit: int) -> list[str]:
        # Start from the directory part of the prefix and filter on the rest
        directory, _, _ = prefix.rpartition("/")
        if directory and PurePosixPath(directory).parts[0] == META_DIR:
            return []
        start = self.root / directory if directory else self.root
        results: list[str] = []

        def order(entry: os.DirEntry) -> str:
            # Directories sort as "<name>/" so keys come out in string order
            return entry.name + "/" if entry.is_dir(follow_symlinks=False) else entry.name

        def walk(current: Path) -> None:
            try:
                with os.scandir(current) as it:
                    entries = sorted(it, key=order)
            except OSError:
                return

            for entry in entries:
                if len(results) >= limit:
                    return
                if entry.is_dir(follow_symlinks=False):
                    if current == self.root and entry.name == META_DIR:
                        continue
                    walk(Path(entry.path))
                else:
                    key = Path(entry.path).relative_to(self.root).as_posix()
                    if key.startswith(prefix):
                        results.append(key)

        walk(start)
        return results

    def get_signed_url(self, key: str, expires_in: int = DEFAULT_SIGNED_URL_EXPIRY) -> str:
        # No signing support on local disk
        return self._url(key)
