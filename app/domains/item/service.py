"""Item service layer with business logic."""

from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.exceptions.item import ItemNotFoundError
from app.schemas.item import ItemCreate, ItemUpdate
from models.base import utcnow
from models.item import Item


class ItemService:
    """Service class for item business logic."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_item(self, item_data: ItemCreate, user_id: Optional[UUID] = None) -> Item:
        """Create a new item, owned by ``user_id`` when a session is present."""
        item = Item(
            name=item_data.name,
            description=item_data.description,
            user_id=user_id,
        )

        try:
            self.db.add(item)
            await self.db.commit()
            await self.db.refresh(item)
            return item
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def get_item_by_id(self, item_id: UUID) -> Optional[Item]:
        """Get an item by ID."""
        result = await self.db.execute(select(Item).where(Item.id == item_id))
        return result.scalar_one_or_none()

    async def get_items_list(self) -> Dict[str, Any]:
        """Get every item, oldest first."""
        result = await self.db.execute(select(Item).order_by(Item.created_at))
        items = result.scalars().all()
        return {"items": items, "total": len(items)}

    async def update_item(self, item_id: UUID, item_data: ItemUpdate) -> Item:
        """Update an item."""
        item = await self.get_item_by_id(item_id)
        if not item:
            raise ItemNotFoundError(item_id)

        update_data = item_data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(item, field, value)
        item.updated_at = utcnow()

        try:
            await self.db.commit()
            await self.db.refresh(item)
            return item
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete_item(self, item_id: UUID) -> bool:
        """Delete an item."""
        item = await self.get_item_by_id(item_id)
        if not item:
            raise ItemNotFoundError(item_id)

        try:
            await self.db.delete(item)
            await self.db.commit()
            return True
        except SQLAlchemyError:
            await self.db.rollback()
            raise
