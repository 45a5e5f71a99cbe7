"""Base schemas for the application."""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from fastapi import Request
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema class with common configuration."""
    model_config = ConfigDict(from_attributes=True)


class BaseModelSchema(BaseSchema):
    """Base schema for database models."""
    id: UUID
    created_at: datetime
    updated_at: datetime


class ErrorInfo(BaseSchema):
    """Error block of the response envelope."""
    code: str
    message: str
    details: Optional[Any] = None


class ResponseMeta(BaseSchema):
    """Per-response metadata."""
    requestId: Optional[str] = None
    timestamp: str


def build_meta(request: Request | None) -> ResponseMeta:
    request_id = getattr(request.state, "request_id", None) if request is not None else None
    return ResponseMeta(requestId=request_id, timestamp=datetime.now(timezone.utc).isoformat())


class ResponseSchema(BaseSchema):
    """Standard API response envelope."""
    success: bool
    data: Optional[Any] = None
    error: Optional[ErrorInfo] = None
    meta: ResponseMeta

    @classmethod
    def ok(cls, request: Request, data: Any = None) -> "ResponseSchema":
        return cls(success=True, data=data, meta=build_meta(request))

    @classmethod
    def fail(
        cls, request: Request | None, code: str, message: str, details: Any = None
    ) -> "ResponseSchema":
        return cls(
            success=False,
            error=ErrorInfo(code=code, message=message, details=details),
            meta=build_meta(request),
        )
