"""Access Guard - shop membership checks"""

from typing import Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.core.exceptions import AccessDeniedError
from billboard.core.logging import get_logger
from billboard.models.shop import ShopUser

logger = get_logger(__name__)


class AccessService:
    @staticmethod
    async def get_membership(db: AsyncSession, shop_id: UUID, user_id: UUID) -> Optional[ShopUser]:
        result = await db.execute(
            select(ShopUser).where(
                ShopUser.shop_id == shop_id,
                ShopUser.user_id == user_id,
                ShopUser.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def check_access(db: AsyncSession, shop_id: UUID, user_id: UUID) -> ShopUser:
        """
        Return the user's active membership in the shop.

        Raises:
            AccessDeniedError: If there is no active membership
        """
        membership = await AccessService.get_membership(db, shop_id, user_id)
        if membership is None:
            logger.info(
                "Shop access denied",
                extra={"shop_id": str(shop_id), "user_id": str(user_id)},
            )
            raise AccessDeniedError()
        return membership
