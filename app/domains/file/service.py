"""File service: blob storage plus metadata rows.

A file lives in two places that are not covered by one transaction: the
blob in the storage backend and its row in ``files``. Uploads write the blob
first and remove it again if the row cannot be inserted. Deletes remove the
row only after the backend delete call has returned.
"""

import logging
import threading
import time
from collections.abc import Callable
from pathlib import PurePosixPath
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.exceptions.base import UnauthorizedError
from app.exceptions.file import BlobNotFoundError, FileDeleteForbiddenError, FileRecordNotFoundError
from app.services.storage import DEFAULT_CONTENT_TYPE, DownloadResult, StorageService, UploadResult
from models.file import FileRecord
from models.user import User

logger = logging.getLogger(__name__)

# Keeps "<ts>-<name>" plus the sidecar suffix under the usual 255-byte name limit
MAX_FILENAME_BYTES = 200
MAX_EXTENSION_BYTES = 16


def current_millis() -> int:
    return time.time_ns() // 1_000_000


class UploadKeyGenerator:
    """
    Issues ``<prefix>/<timestamp>-<filename>`` storage keys.

    The timestamp is a millisecond clock forced to be strictly increasing
    within the process, so two uploads in the same millisecond (same filename
    or not) still get different keys.
    """

    def __init__(self, prefix: str = "uploads", clock: Callable[[], int] = current_millis):
        self.prefix = prefix
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_timestamp(self) -> int:
        with self._lock:
            now = self._clock()
            if now <= self._last:
                now = self._last + 1
            self._last = now
            return now

    def generate(self, filename: str) -> str:
        return f"{self.prefix}/{self.next_timestamp()}-{filename}"


key_generator = UploadKeyGenerator()


def _truncate_utf8(value: str, limit: int) -> str:
    return value.encode("utf-8")[:limit].decode("utf-8", "ignore")


def sanitize_filename(filename: str | None, default: str | None = None) -> str:
    """Keep only the final path component of a client-supplied filename.

    Names longer than ``MAX_FILENAME_BYTES`` (UTF-8) are shortened, keeping a
    short extension, so the generated key stays within filesystem name limits.
    """
    name = PurePosixPath((filename or "").replace("\\", "/")).name.strip()
    if not name or name in {".", ".."}:
        return default or f"file-{current_millis()}"

    if len(name.encode("utf-8")) <= MAX_FILENAME_BYTES:
        return name
    stem, dot, extension = name.rpartition(".")
    suffix = ""
    if dot and stem and len(extension.encode("utf-8")) <= MAX_EXTENSION_BYTES:
        suffix = f".{extension}"
    base = stem if suffix else name
    return _truncate_utf8(base, MAX_FILENAME_BYTES - len(suffix.encode("utf-8"))) + suffix


class FileService:
    """Service class for file uploads, downloads and deletes."""

    def __init__(
        self,
        db: AsyncSession,
        storage: StorageService,
        keys: UploadKeyGenerator = key_generator,
    ):
        self.db = db
        self.storage = storage
        self.keys = keys

    async def upload_file(
        self,
        filename: str,
        data: Any,
        content_type: str = DEFAULT_CONTENT_TYPE,
        user_id: Optional[UUID] = None,
        metadata: Optional[dict] = None,
    ) -> tuple[FileRecord, UploadResult]:
        """Store the blob, then record its metadata."""
        key = self.keys.generate(filename)
        result = await self.storage.upload(key, data, content_type)

        record = FileRecord(
            key=key,
            filename=filename,
            mime_type=content_type,
            size=result.size,
            user_id=user_id,
            extra_metadata=metadata,
        )
        try:
            self.db.add(record)
            await self.db.commit()
            await self.db.refresh(record)
        except Exception:
            await self.db.rollback()
            logger.error("Metadata insert failed for %s, removing stored blob", key)
            try:
                await self.storage.delete(key)
            except Exception:
                logger.exception("Could not remove orphaned blob %s", key)
            raise

        logger.info("Uploaded %s (%d bytes)", key, result.size)
        return record, result

    async def get_file_by_key(self, key: str) -> Optional[FileRecord]:
        """Get a metadata row by storage key."""
        result = await self.db.execute(select(FileRecord).where(FileRecord.key == key))
        return result.scalar_one_or_none()

    async def list_files(self, user_id: Optional[UUID] = None) -> list[FileRecord]:
        """List metadata rows oldest first, restricted to ``user_id`` when given."""
        stmt = select(FileRecord)
        if user_id is not None:
            stmt = stmt.where(FileRecord.user_id == user_id)
        stmt = stmt.order_by(FileRecord.created_at, FileRecord.key)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def open_file(self, key: str) -> tuple[FileRecord, DownloadResult]:
        """Look up the row, then the blob.

        Raises:
            FileRecordNotFoundError: No metadata row for ``key``
            BlobNotFoundError: A row exists but the backend has no blob
        """
        record = await self.get_file_by_key(key)
        if not record:
            raise FileRecordNotFoundError(key)

        download = await self.storage.download(key)
        if download is None:
            logger.warning("Metadata row for %s has no blob in storage", key)
            raise BlobNotFoundError(key)
        return record, download

    async def delete_file(
        self,
        key: str,
        user: Optional[User] = None,
        allow_anonymous: bool = True,
    ) -> None:
        """Delete the blob and then the metadata row.

        Files without an owner, and requests without a session (unless
        ``allow_anonymous`` is off), are not ownership-checked.
        """
        record = await self.get_file_by_key(key)
        if not record:
            raise FileRecordNotFoundError(key)

        if record.user_id is not None:
            if user is not None and record.user_id != user.id:
                raise FileDeleteForbiddenError()
            if user is None and not allow_anonymous:
                raise UnauthorizedError()

        removed = await self.storage.delete(key)
        if not removed:
            logger.warning("Blob for %s was already missing, removing metadata row", key)

        await self.db.delete(record)
        await self.db.commit()
        logger.info("Deleted %s", key)

    def signed_url(self, key: str) -> str:
        return self.storage.get_signed_url(key)
