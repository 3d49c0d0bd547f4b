"""Item endpoints - the parts of the catalog billing depends on"""

from typing import Any, List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from billboard.api import deps
from billboard.core.exceptions import ItemNotFoundError
from billboard.models.user import User
from billboard.schemas.inventory import ItemCreate, ItemResponse
from billboard.schemas.responses import SuccessResponse
from billboard.services.access_service import AccessService
from billboard.services.item_service import ItemService

router = APIRouter()


@router.post("", response_model=SuccessResponse)
async def create_item(
    shop_id: UUID,
    item_in: ItemCreate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    item = await ItemService.create_item(db, shop_id, current_user.id, item_in)
    return SuccessResponse(
        data=ItemResponse.model_validate(item),
        message="Item created successfully",
    )


@router.post("/bulk", response_model=SuccessResponse)
async def bulk_create_items(
    shop_id: UUID,
    items_in: List[ItemCreate],
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Create several items at once. One invalid row rejects the whole batch."""
    items = await ItemService.bulk_create_items(db, shop_id, current_user.id, items_in)
    return SuccessResponse(
        data=[ItemResponse.model_validate(item) for item in items],
        message=f"{len(items)} items created successfully",
    )


@router.get("/{item_id}", response_model=SuccessResponse)
async def get_item(
    shop_id: UUID,
    item_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    await AccessService.check_access(db, shop_id, current_user.id)
    item = await ItemService.get_item(db, shop_id, item_id)
    if not item:
        raise ItemNotFoundError()
    return SuccessResponse(data=ItemResponse.model_validate(item))
