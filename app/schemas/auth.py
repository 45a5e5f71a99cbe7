"""Auth-related Pydantic schemas for request/response validation."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from app.core.config import settings

from .base import BaseModelSchema, BaseSchema


class SignUpRequest(BaseSchema):
    """Schema for email/password sign-up."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., description="Plain-text password")
    image: Optional[str] = Field(None, max_length=1000, description="Avatar URL")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty or only whitespace")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < settings.password_min_length:
            raise ValueError(
                f"Password must be at least {settings.password_min_length} characters"
            )
        if len(v) > settings.password_max_length:
            raise ValueError(f"Password must be at most {settings.password_max_length} characters")
        return v


class SignInRequest(BaseSchema):
    """Schema for email/password sign-in."""

    email: EmailStr
    password: str = Field(..., min_length=1)
    rememberMe: bool = Field(True, description="Persistent cookie when true")


class UserResponse(BaseModelSchema):
    """Schema for user response data."""

    name: str
    email: str
    email_verified: bool
    image: Optional[str] = None


class SessionResponse(BaseModelSchema):
    """Schema for session response data. The raw token is never echoed."""

    user_id: UUID
    expires_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class AuthResponse(BaseSchema):
    """Schema returned by sign-up and sign-in."""

    token: str
    user: UserResponse


class SessionInfo(BaseSchema):
    """Schema returned by get-session."""

    session: SessionResponse
    user: UserResponse
