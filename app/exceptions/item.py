"""Item-related exceptions."""

from uuid import UUID

from .base import NotFoundError


class ItemNotFoundError(NotFoundError):
    """Raised when an item is not found."""

    def __init__(self, item_id: UUID | str):
        super().__init__(message=f"Item with id {item_id} not found", error_code="ITEM_NOT_FOUND")
