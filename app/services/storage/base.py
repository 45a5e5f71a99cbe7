"""Storage service contract shared by every blob backend."""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any

from app.exceptions.file import InvalidStorageKeyError

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_LIST_LIMIT = 100
DEFAULT_SIGNED_URL_EXPIRY = 3600
CHUNK_SIZE = 64 * 1024


@dataclass
class UploadResult:
    """What a backend reports after storing a blob."""

    key: str
    size: int
    etag: str
    url: str


@dataclass
class DownloadResult:
    """A stored blob as an async stream of byte chunks plus its content type."""

    data: AsyncIterator[bytes]
    content_type: str

    async def read(self) -> bytes:
        """Drain the stream into a single buffer."""
        chunks = [chunk async for chunk in self.data]
        return b"".join(chunks)


def validate_key(key: str) -> str:
    """Reject empty keys, absolute keys and keys with ``..`` segments."""
    if not isinstance(key, str) or not key.strip() or "\x00" in key or "\\" in key:
        raise InvalidStorageKeyError(str(key))
    path = PurePosixPath(key)
    if path.is_absolute() or ".." in path.parts or key.endswith("/"):
        raise InvalidStorageKeyError(key)
    return key


async def read_upload_data(data: Any) -> bytes:
    """Normalize upload input into one bytes buffer.

    Accepts raw bytes, text (encoded as UTF-8), sync or async file-like
    objects exposing ``read()``, and sync or async iterables of byte chunks.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    if hasattr(data, "read"):
        content = data.read()
        if inspect.isawaitable(content):
            content = await content
        return content.encode("utf-8") if isinstance(content, str) else bytes(content)
    if hasattr(data, "__aiter__"):
        return b"".join([bytes(chunk) async for chunk in data])
    if hasattr(data, "__iter__"):
        return b"".join(bytes(chunk) for chunk in data)
    raise TypeError(f"Unsupported upload data type: {type(data).__name__}")


class StorageService(ABC):
    """
    Key-addressed blob storage.

    Keys are path-like strings. Writing to an existing key overwrites it; the
    contract does not enforce uniqueness.

    :ivar public_url: Optional URL prefix under which blobs are publicly served.
    :type public_url: str
    """

    def __init__(self, public_url: str | None = None):
        self.public_url = public_url.rstrip("/") if public_url else None

    @abstractmethod
    async def upload(
        self, key: str, data: Any, content_type: str = DEFAULT_CONTENT_TYPE
    ) -> UploadResult:
        """Store ``data`` under ``key``."""

    @abstractmethod
    async def download(self, key: str) -> DownloadResult | None:
        """Return the blob under ``key``, or ``None`` when there is none."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove the blob under ``key``. A missing key is not an error."""

    @abstractmethod
    async def list(self, prefix: str = "", limit: int = DEFAULT_LIST_LIMIT) -> list[str]:
        """Return up to ``limit`` keys starting with ``prefix``, in key order."""

    @abstractmethod
    def get_signed_url(self, key: str, expires_in: int = DEFAULT_SIGNED_URL_EXPIRY) -> str:
        """Best-effort temporary URL for ``key``."""
