"""File API controller with FastAPI endpoints."""

import logging
from collections.abc import AsyncIterator
from urllib.parse import quote

from fastapi import APIRouter, Depends, Path, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.core.config import settings
from app.core.dependencies import get_db, get_optional_user, get_storage, resolve_session
from app.domains.file.service import FileService, sanitize_filename
from app.exceptions.file import FileTooLargeError, MissingFileError
from app.schemas.base import ResponseSchema
from app.schemas.file import FileDeleteResponse, FileResponse, UploadedFileResponse
from app.services.storage import CHUNK_SIZE, DEFAULT_CONTENT_TYPE, StorageService
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/files",
    tags=["files"],
    dependencies=[Depends(resolve_session)],
)


# Room for boundaries and part headers around the file in a multipart body
MULTIPART_OVERHEAD = 64 * 1024


def _check_declared_size(request: Request, limit: int) -> None:
    """Reject a body whose ``Content-Length`` already exceeds ``limit``."""
    try:
        declared = int(request.headers.get("content-length", ""))
    except ValueError:
        return
    if declared > limit:
        raise FileTooLargeError(declared, settings.max_file_size)


async def _read_limited(chunks: AsyncIterator[bytes], limit: int) -> bytes:
    """Collect ``chunks``, giving up as soon as more than ``limit`` bytes arrive."""
    buffer = bytearray()
    async for chunk in chunks:
        buffer.extend(chunk)
        if len(buffer) > limit:
            raise FileTooLargeError(len(buffer), limit)
    return bytes(buffer)


async def _upload_chunks(upload: UploadFile) -> AsyncIterator[bytes]:
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


def _content_disposition(filename: str) -> str:
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "'")
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.post("", response_model=ResponseSchema, status_code=201)
async def upload_file(
    request: Request,
    current_user: User | None = Depends(get_optional_user),
    storage: StorageService = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    """Upload a file.

    Accepts ``multipart/form-data`` with a ``file`` part, or a raw body whose
    ``Content-Type`` is the file's type and whose name comes from ``X-Filename``.
    """
    content_type = request.headers.get("content-type", "")
    limit = settings.max_file_size

    if "multipart/form-data" in content_type:
        _check_declared_size(request, limit + MULTIPART_OVERHEAD)
        form = await request.form()
        upload = form.get("file")
        if not isinstance(upload, UploadFile):
            raise MissingFileError()
        data = await _read_limited(_upload_chunks(upload), limit)
        filename = sanitize_filename(upload.filename)
        mime_type = upload.content_type or DEFAULT_CONTENT_TYPE
    else:
        _check_declared_size(request, limit)
        data = await _read_limited(request.stream(), limit)
        filename = sanitize_filename(request.headers.get("x-filename"))
        mime_type = content_type or DEFAULT_CONTENT_TYPE

    service = FileService(db, storage)
    record, result = await service.upload_file(
        filename=filename,
        data=data,
        content_type=mime_type,
        user_id=current_user.id if current_user else None,
    )

    payload = UploadedFileResponse(
        **FileResponse.model_validate(record).model_dump(),
        url=result.url,
        etag=result.etag,
        extra_metadata=record.extra_metadata,
    )
    return ResponseSchema.ok(request, payload.model_dump(mode="json"))


@router.get("", response_model=ResponseSchema)
async def list_files(
    request: Request,
    current_user: User | None = Depends(get_optional_user),
    storage: StorageService = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    """List the session user's files, or every file for anonymous callers."""
    service = FileService(db, storage)
    records = await service.list_files(user_id=current_user.id if current_user else None)

    files = [
        {
            **FileResponse.model_validate(record).model_dump(mode="json"),
            "url": service.signed_url(record.key),
        }
        for record in records
    ]
    return ResponseSchema.ok(request, files)


@router.get("/{key:path}")
async def download_file(
    key: str = Path(..., description="Storage key"),
    storage: StorageService = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    """Stream a stored file back with its content type."""
    service = FileService(db, storage)
    record, download = await service.open_file(key)

    return StreamingResponse(
        download.data,
        headers={
            "Content-Type": download.content_type,
            "Content-Disposition": _content_disposition(record.filename),
        },
    )


@router.delete("/{key:path}", response_model=ResponseSchema)
async def delete_file(
    request: Request,
    key: str = Path(..., description="Storage key"),
    current_user: User | None = Depends(get_optional_user),
    storage: StorageService = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    """Delete a stored file and its metadata."""
    service = FileService(db, storage)
    await service.delete_file(
        key, user=current_user, allow_anonymous=settings.allow_anonymous_file_delete
    )

    return ResponseSchema.ok(request, FileDeleteResponse(deleted=True, key=key).model_dump())
