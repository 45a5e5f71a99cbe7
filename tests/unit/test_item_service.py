"""Unit tests for ItemService."""

import uuid

import pytest

from app.domains.item.service import ItemService
from app.exceptions.item import ItemNotFoundError
from app.schemas.item import ItemCreate, ItemUpdate


class TestItemService:
    """Test cases for ItemService."""

    @pytest.mark.asyncio
    async def test_create_item(self, test_db, test_user):
        item = await ItemService(test_db).create_item(
            ItemCreate(name="  Widget  ", description="A widget"), user_id=test_user.id
        )

        assert item.id is not None
        assert item.name == "Widget"
        assert item.user_id == test_user.id

    @pytest.mark.asyncio
    async def test_create_anonymous_item(self, test_db):
        item = await ItemService(test_db).create_item(ItemCreate(name="Loose"))

        assert item.user_id is None
        assert item.description is None

    @pytest.mark.asyncio
    async def test_list_items(self, test_db):
        service = ItemService(test_db)
        await service.create_item(ItemCreate(name="First"))
        await service.create_item(ItemCreate(name="Second"))

        result = await service.get_items_list()

        assert result["total"] == 2
        assert [item.name for item in result["items"]] == ["First", "Second"]

    @pytest.mark.asyncio
    async def test_get_item_missing(self, test_db):
        assert await ItemService(test_db).get_item_by_id(uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_update_item_partial(self, test_db, test_item):
        original_description = test_item.description

        item = await ItemService(test_db).update_item(test_item.id, ItemUpdate(name="Renamed"))

        assert item.name == "Renamed"
        assert item.description == original_description

    @pytest.mark.asyncio
    async def test_update_missing_item(self, test_db):
        with pytest.raises(ItemNotFoundError):
            await ItemService(test_db).update_item(uuid.uuid4(), ItemUpdate(name="x"))

    @pytest.mark.asyncio
    async def test_delete_item(self, test_db, test_item):
        service = ItemService(test_db)

        assert await service.delete_item(test_item.id) is True
        assert await service.get_item_by_id(test_item.id) is None

        with pytest.raises(ItemNotFoundError):
            await service.delete_item(test_item.id)
