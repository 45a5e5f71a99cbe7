"""Item API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db, get_optional_user, resolve_session
from app.domains.item.service import ItemService
from app.exceptions.item import ItemNotFoundError
from app.schemas.base import ResponseSchema
from app.schemas.item import ItemCreate, ItemListResponse, ItemResponse, ItemUpdate
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/items",
    tags=["items"],
    dependencies=[Depends(resolve_session)],
)


@router.get("", response_model=ResponseSchema)
async def get_items(request: Request, db: AsyncSession = Depends(get_db)):
    """List all items."""
    service = ItemService(db)
    result = await service.get_items_list()

    payload = ItemListResponse(
        items=[ItemResponse.model_validate(item) for item in result["items"]],
        total=result["total"],
    )
    return ResponseSchema.ok(request, payload.model_dump(mode="json"))


@router.get("/{item_id}", response_model=ResponseSchema)
async def get_item(
    request: Request,
    item_id: UUID = Path(..., description="Item ID"),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific item by ID."""
    service = ItemService(db)
    item = await service.get_item_by_id(item_id)
    if not item:
        raise ItemNotFoundError(item_id)

    return ResponseSchema.ok(request, ItemResponse.model_validate(item).model_dump(mode="json"))


@router.post("", response_model=ResponseSchema, status_code=201)
async def create_item(
    request: Request,
    item_data: ItemCreate,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new item."""
    service = ItemService(db)
    item = await service.create_item(item_data, user_id=current_user.id if current_user else None)
    logger.info("Created item %s", item.id)

    return ResponseSchema.ok(request, ItemResponse.model_validate(item).model_dump(mode="json"))


@router.put("/{item_id}", response_model=ResponseSchema)
async def update_item(
    request: Request,
    item_id: UUID = Path(..., description="Item ID"),
    item_data: ItemUpdate = Body(...),
    db: AsyncSession = Depends(get_db),
):
    """Update a specific item."""
    service = ItemService(db)
    item = await service.update_item(item_id, item_data)

    return ResponseSchema.ok(request, ItemResponse.model_validate(item).model_dump(mode="json"))


@router.delete("/{item_id}", response_model=ResponseSchema)
async def delete_item(
    request: Request,
    item_id: UUID = Path(..., description="Item ID"),
    db: AsyncSession = Depends(get_db),
):
    """Delete a specific item."""
    service = ItemService(db)
    deleted = await service.delete_item(item_id)

    return ResponseSchema.ok(request, {"deleted": deleted})
