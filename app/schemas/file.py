"""File schemas for response serialization."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from .base import BaseSchema


class FileResponse(BaseSchema):
    """Metadata row as listed."""

    id: UUID
    key: str
    filename: str
    mime_type: str
    size: int
    user_id: UUID | None = None
    created_at: datetime


class UploadedFileResponse(FileResponse):
    """Metadata row merged with the backend URL after an upload."""

    url: str
    etag: str | None = None
    extra_metadata: dict[str, Any] | None = None


class FileDeleteResponse(BaseSchema):
    """Payload returned by a successful delete."""

    deleted: bool
    key: str
