"""Item Catalog - lookups, stock adjustment and item creation"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.core.exceptions import InvalidInputError
from billboard.core.logging import get_logger
from billboard.models.inventory import Item
from billboard.schemas.inventory import ItemCreate
from billboard.services.access_service import AccessService

logger = get_logger(__name__)

DEFAULT_UNIT = "PCS"


class ItemService:
    @staticmethod
    async def get_item(db: AsyncSession, shop_id: UUID, item_id: UUID) -> Optional[Item]:
        result = await db.execute(
            select(Item).where(
                Item.id == item_id,
                Item.shop_id == shop_id,
                Item.live(),
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_items_by_ids(
        db: AsyncSession, shop_id: UUID, item_ids: Iterable[UUID]
    ) -> Dict[UUID, Item]:
        ids = set(item_ids)
        if not ids:
            return {}
        result = await db.execute(
            select(Item).where(
                Item.id.in_(ids),
                Item.shop_id == shop_id,
                Item.live(),
            )
        )
        return {item.id: item for item in result.scalars().all()}

    @staticmethod
    async def adjust_quantity(db: AsyncSession, item_id: UUID, delta: Decimal) -> None:
        """Add delta to stock in a single UPDATE. No floor: stock may go negative."""
        await db.execute(
            update(Item)
            .where(Item.id == item_id)
            .values(quantity=Item.quantity + delta)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def validate_item(data: ItemCreate) -> None:
        if not data.name or not data.name.strip():
            raise InvalidInputError("name is required")
        if data.price is None or data.price <= 0:
            raise InvalidInputError("price must be greater than 0")

    @staticmethod
    async def sku_exists(db: AsyncSession, shop_id: UUID, sku: str) -> bool:
        existing = await db.scalar(
            select(Item.id).where(
                Item.shop_id == shop_id,
                Item.sku == sku,
                Item.live(),
            ).limit(1)
        )
        return existing is not None

    @staticmethod
    def _build_item(shop_id: UUID, data: ItemCreate) -> Item:
        return Item(
            shop_id=shop_id,
            name=data.name.strip(),
            description=data.description,
            sku=data.sku or None,
            price=data.price,
            cost_price=data.cost_price,
            tax_rate=data.tax_rate,
            category=data.category,
            quantity=data.quantity,
            min_quantity=data.min_quantity,
            unit=data.unit or DEFAULT_UNIT,
            barcode=data.barcode,
            is_active=data.is_active,
        )

    @staticmethod
    async def create_item(
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
        data: ItemCreate,
    ) -> Item:
        await AccessService.check_access(db, shop_id, user_id)
        ItemService.validate_item(data)
        if data.sku and await ItemService.sku_exists(db, shop_id, data.sku):
            raise InvalidInputError("SKU already exists")

        item = ItemService._build_item(shop_id, data)
        try:
            db.add(item)
            await db.commit()
        except BaseException:
            await db.rollback()
            raise
        await db.refresh(item)
        return item

    @staticmethod
    async def bulk_create_items(
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
        items: List[ItemCreate],
    ) -> List[Item]:
        """
        Create many items all-or-nothing.
        Every row is validated before anything is written; the first bad
        row aborts the whole batch.
        """
        await AccessService.check_access(db, shop_id, user_id)
        if not items:
            raise InvalidInputError("at least one item is required")

        seen_skus = set()
        for index, data in enumerate(items, start=1):
            try:
                ItemService.validate_item(data)
            except InvalidInputError as exc:
                raise InvalidInputError(f"item {index}: {exc.message}") from exc
            if data.sku:
                if data.sku in seen_skus:
                    raise InvalidInputError(f"item {index}: duplicate SKU {data.sku} in batch")
                if await ItemService.sku_exists(db, shop_id, data.sku):
                    raise InvalidInputError(f"item {index}: SKU {data.sku} already exists")
                seen_skus.add(data.sku)

        created = [ItemService._build_item(shop_id, data) for data in items]
        try:
            db.add_all(created)
            await db.commit()
        except BaseException:
            await db.rollback()
            raise

        logger.info(
            "Items created in bulk",
            extra={"shop_id": str(shop_id), "count": len(created)},
        )
        return created
