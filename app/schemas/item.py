"""Item schemas for request/response serialization."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field, field_validator

from .base import BaseModelSchema, BaseSchema


class ItemCreate(BaseSchema):
    """Schema for creating a new item."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate and clean the item name."""
        v = v.strip()
        if not v:
            raise ValueError("Item name cannot be empty or only whitespace")
        return v


class ItemUpdate(BaseSchema):
    """Schema for updating an item. Every field is optional."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Item name cannot be empty or only whitespace")
        return v


class ItemResponse(BaseModelSchema):
    """Schema for item response."""

    name: str
    description: str | None = None
    user_id: UUID | None = None


class ItemListResponse(BaseSchema):
    """Schema for item list payload."""

    items: list[ItemResponse]
    total: int
