"""File-related exceptions."""

from .base import AppPermissionError, BaseAppException, NotFoundError


class FileRecordNotFoundError(NotFoundError):
    """Raised when no metadata row exists for a key."""

    def __init__(self, key: str):
        super().__init__(
            message=f"File {key} not found",
            error_code="FILE_NOT_FOUND",
            details={"key": key, "source": "metadata"},
        )


class BlobNotFoundError(NotFoundError):
    """Raised when a metadata row exists but the storage backend has no blob for it."""

    def __init__(self, key: str):
        super().__init__(
            message=f"File {key} not found in storage",
            error_code="FILE_NOT_FOUND",
            details={"key": key, "source": "storage"},
        )


class MissingFileError(BaseAppException):
    """Raised when a multipart upload has no file part."""

    def __init__(self, message: str = "No file provided"):
        super().__init__(message=message, status_code=400, error_code="MISSING_FILE")


class FileTooLargeError(BaseAppException):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            message=f"File of {size} bytes exceeds the {limit} byte limit",
            status_code=413,
            error_code="FILE_TOO_LARGE",
            details={"size": size, "limit": limit},
        )


class InvalidStorageKeyError(BaseAppException):
    """Raised when a storage key is empty or escapes the storage namespace."""

    def __init__(self, key: str):
        super().__init__(
            message=f"Invalid storage key: {key!r}",
            status_code=400,
            error_code="INVALID_KEY",
        )


class FileDeleteForbiddenError(AppPermissionError):
    """Raised when a session user tries to delete another user's file."""

    def __init__(self, message: str = "You do not have permission to delete this file"):
        super().__init__(message=message)
