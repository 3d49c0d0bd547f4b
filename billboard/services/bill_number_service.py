"""Bill Number Allocator"""

from typing import Optional
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.config import settings
from billboard.core.exceptions import AllocationExhaustedError
from billboard.core.logging import get_logger
from billboard.models.billing import Bill
from billboard.utils.time import get_utc_now

logger = get_logger(__name__)


class BillNumberService:
    @staticmethod
    def format_bill_number(year: int, sequence: int) -> str:
        """BILL-2026-000042"""
        return f"{settings.BILL_NUMBER_PREFIX}-{year}-{sequence:06d}"

    @staticmethod
    async def count_shop_bills(db: AsyncSession, shop_id: UUID) -> int:
        # Soft-deleted bills still hold their numbers
        count = await db.scalar(
            select(func.count()).select_from(Bill).where(Bill.shop_id == shop_id)
        )
        return count or 0

    @staticmethod
    async def bill_number_exists(db: AsyncSession, bill_number: str) -> bool:
        # Uniqueness is table-wide, not per shop
        existing = await db.scalar(
            select(Bill.id).where(Bill.bill_number == bill_number).limit(1)
        )
        return existing is not None

    @staticmethod
    def parse_sequence(bill_number: str) -> int:
        """Trailing sequence of a bill number, 0 if it has none."""
        tail = bill_number.rsplit("-", 1)[-1]
        return int(tail) if tail.isdigit() else 0

    @staticmethod
    async def highest_sequence(db: AsyncSession, year: int) -> int:
        """Highest sequence already issued for the year, across all shops."""
        prefix = f"{settings.BILL_NUMBER_PREFIX}-{year}-"
        # Longer numbers sort after shorter ones once the sequence outgrows its padding
        latest = await db.scalar(
            select(Bill.bill_number)
            .where(Bill.bill_number.startswith(prefix, autoescape=True))
            .order_by(func.length(Bill.bill_number).desc(), Bill.bill_number.desc())
            .limit(1)
        )
        return BillNumberService.parse_sequence(latest) if latest else 0

    @staticmethod
    async def next_bill_number(
        db: AsyncSession,
        shop_id: UUID,
        max_attempts: Optional[int] = None,
    ) -> str:
        """
        Allocate the next free bill number for a shop.

        The first candidate sequence is the shop's bill count plus one.
        Numbers are unique across all shops, so a taken candidate is
        retried past the highest sequence issued this year.

        Raises:
            AllocationExhaustedError: If every attempt collided
        """
        max_attempts = max_attempts or settings.BILL_NUMBER_MAX_ATTEMPTS
        year = get_utc_now().year

        sequence = await BillNumberService.count_shop_bills(db, shop_id) + 1
        for attempt in range(max_attempts):
            if attempt:
                highest = await BillNumberService.highest_sequence(db, year)
                sequence = max(sequence + 1, highest + 1)
            candidate = BillNumberService.format_bill_number(year, sequence)
            if not await BillNumberService.bill_number_exists(db, candidate):
                return candidate
            logger.info(
                "Bill number collision",
                extra={"shop_id": str(shop_id), "bill_number": candidate, "attempt": attempt + 1},
            )

        logger.error(
            "Bill number allocation exhausted",
            extra={"shop_id": str(shop_id), "attempts": max_attempts},
        )
        raise AllocationExhaustedError()
