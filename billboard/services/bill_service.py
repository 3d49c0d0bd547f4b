"""Bill Service - bill lifecycle: create, list, read, update, delete, stats"""

import uuid
from datetime import date
from typing import Dict, List, Optional, Tuple
from uuid import UUID
from pydantic import ValidationError
from sqlalchemy import select, func, delete, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from billboard.config import settings
from billboard.core.exceptions import (
    AllocationExhaustedError,
    BillNotFoundError,
    CustomerNotFoundError,
    InvalidDateError,
    InvalidInputError,
    InvalidStateError,
    ItemNotFoundError,
)
from billboard.core.logging import get_logger
from billboard.models.billing import Bill, BillItem
from billboard.models.customer import Customer
from billboard.models.enums import BillStatus
from billboard.models.inventory import Item
from billboard.schemas.billing import BillCreate, BillFilters, BillResponse, BillStats, BillUpdate
from billboard.services.access_service import AccessService
from billboard.services.bill_number_service import BillNumberService
from billboard.services.item_service import ItemService
from billboard.services.ledger import (
    MONEY_PLACES,
    QUANTITY_PLACES,
    ZERO,
    compute_totals,
    decimal_places,
    line_total,
    outstanding_balance,
    to_money,
)
from billboard.utils.time import parse_date, parse_optional_date, start_of_month

logger = get_logger(__name__)

BILL_NUMBER_CONSTRAINT = "uq_bills_bill_number"


class BillService:
    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @staticmethod
    async def get_bill_by_id(
        db: AsyncSession,
        bill_id: UUID,
        shop_id: UUID,
        for_update: bool = False,
    ) -> Optional[Bill]:
        """Live bill header only. for_update locks the row until commit."""
        stmt = select(Bill).where(
            Bill.id == bill_id,
            Bill.shop_id == shop_id,
            Bill.live(),
        )
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _hydrated_query(shop_id: UUID):
        return (
            select(Bill)
            .options(
                selectinload(Bill.customer),
                selectinload(Bill.items),
                selectinload(Bill.payments),
            )
            .where(Bill.shop_id == shop_id, Bill.live())
            .execution_options(populate_existing=True)
        )

    @staticmethod
    async def get_bill_with_relations(
        db: AsyncSession, bill_id: UUID, shop_id: UUID
    ) -> Optional[Bill]:
        result = await db.execute(
            BillService._hydrated_query(shop_id).where(Bill.id == bill_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def to_response(bill: Bill) -> BillResponse:
        return BillResponse.model_validate(bill)

    @staticmethod
    async def _hydrate(db: AsyncSession, bill_id: UUID, shop_id: UUID) -> BillResponse:
        bill = await BillService.get_bill_with_relations(db, bill_id, shop_id)
        if bill is None:
            raise BillNotFoundError()
        return BillService.to_response(bill)

    # ------------------------------------------------------------------
    # Request validation (runs before any write)
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_dates(data: BillCreate) -> Tuple[date, Optional[date]]:
        try:
            bill_date = parse_date(data.bill_date)
        except ValueError:
            raise InvalidDateError("invalid bill date format")
        try:
            due_date = parse_optional_date(data.due_date)
        except ValueError:
            raise InvalidDateError("invalid due date format")
        return bill_date, due_date

    @staticmethod
    def _validate_amounts(data: BillCreate) -> None:
        if not data.items:
            raise InvalidInputError("at least one line item is required")
        for index, line in enumerate(data.items, start=1):
            if line.quantity is None or line.quantity <= 0:
                raise InvalidInputError(f"line {index}: quantity must be greater than 0")
            if line.unit_price is None or line.unit_price < 0:
                raise InvalidInputError(f"line {index}: unit price cannot be negative")
            if decimal_places(line.quantity) > QUANTITY_PLACES:
                raise InvalidInputError(
                    f"line {index}: quantity allows at most {QUANTITY_PLACES} decimal places"
                )
            if decimal_places(line.unit_price) > MONEY_PLACES:
                raise InvalidInputError(
                    f"line {index}: unit price allows at most {MONEY_PLACES} decimal places"
                )
            if decimal_places(line.quantity * line.unit_price) > MONEY_PLACES:
                raise InvalidInputError(
                    f"line {index}: quantity * unit price must be a whole number of cents"
                )
        if data.discount is not None and data.discount < 0:
            raise InvalidInputError("discount cannot be negative")
        if data.tax_rate is not None and data.tax_rate < 0:
            raise InvalidInputError("tax rate cannot be negative")

    @staticmethod
    async def _check_customer(
        db: AsyncSession, shop_id: UUID, customer_id: Optional[UUID]
    ) -> None:
        if customer_id is None:
            return
        found = await db.scalar(
            select(Customer.id).where(
                Customer.id == customer_id,
                Customer.shop_id == shop_id,
                Customer.live(),
            )
        )
        if found is None:
            raise CustomerNotFoundError()

    @staticmethod
    async def _resolve_items(
        db: AsyncSession, shop_id: UUID, data: BillCreate
    ) -> Dict[UUID, Item]:
        items = await ItemService.get_items_by_ids(
            db, shop_id, [line.item_id for line in data.items]
        )
        for line in data.items:
            if line.item_id not in items:
                raise ItemNotFoundError(f"item not found: {line.item_id}")
        return items

    @staticmethod
    async def _prepare(
        db: AsyncSession, shop_id: UUID, data: BillCreate
    ) -> Tuple[date, Optional[date], Dict[UUID, Item]]:
        bill_date, due_date = BillService._parse_dates(data)
        BillService._validate_amounts(data)
        await BillService._check_customer(db, shop_id, data.customer_id)
        items = await BillService._resolve_items(db, shop_id, data)
        return bill_date, due_date, items

    @staticmethod
    def _build_lines(bill_id: UUID, data: BillCreate, items: Dict[UUID, Item]) -> List[BillItem]:
        return [
            BillItem(
                id=uuid.uuid4(),
                bill_id=bill_id,
                item_id=line.item_id,
                position=position,
                item_name=items[line.item_id].name,
                description=line.description,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total_price=line_total(line.quantity, line.unit_price),
            )
            for position, line in enumerate(data.items)
        ]

    # ------------------------------------------------------------------
    # Bill number
    # ------------------------------------------------------------------

    @staticmethod
    def _is_bill_number_conflict(exc: IntegrityError) -> bool:
        return BILL_NUMBER_CONSTRAINT in str(exc.orig)

    @staticmethod
    async def _insert_with_bill_number(db: AsyncSession, bill: Bill) -> None:
        """
        Allocate a number and insert the bill header inside a savepoint.
        A concurrent creator that committed the same number first makes the
        flush fail; only the savepoint is rolled back and a new number drawn.
        """
        for attempt in range(settings.BILL_NUMBER_MAX_ATTEMPTS):
            bill.bill_number = await BillNumberService.next_bill_number(db, bill.shop_id)
            try:
                async with db.begin_nested():
                    db.add(bill)
                    await db.flush()
                return
            except IntegrityError as exc:
                if not BillService._is_bill_number_conflict(exc):
                    raise
                logger.warning(
                    "Bill number taken concurrently, retrying",
                    extra={"bill_number": bill.bill_number, "attempt": attempt + 1},
                )
        raise AllocationExhaustedError()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @staticmethod
    async def create_bill(
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
        data: BillCreate,
    ) -> BillResponse:
        """
        Create a draft bill with its lines.
        Item names are snapshotted onto the lines and each item's stock is
        decremented by the billed quantity, all in one transaction.
        """
        await AccessService.check_access(db, shop_id, user_id)
        bill_date, due_date, items = await BillService._prepare(db, shop_id, data)
        totals = compute_totals(data.items, data.tax_rate, data.discount)

        bill = Bill(
            id=uuid.uuid4(),
            shop_id=shop_id,
            customer_id=data.customer_id,
            bill_date=bill_date,
            due_date=due_date,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            discount_amount=totals.discount_amount,
            total_amount=totals.total_amount,
            paid_amount=ZERO,
            pending_amount=totals.total_amount,
            balance=totals.total_amount,
            status=BillStatus.DRAFT,
            notes=data.notes,
            terms=data.terms,
            created_by=user_id,
        )

        try:
            await BillService._insert_with_bill_number(db, bill)
            db.add_all(BillService._build_lines(bill.id, data, items))
            for line in data.items:
                await ItemService.adjust_quantity(db, line.item_id, -line.quantity)
            await db.commit()
        except BaseException:
            await db.rollback()
            raise

        logger.info(
            "Bill created",
            extra={
                "shop_id": str(shop_id),
                "bill_id": str(bill.id),
                "bill_number": bill.bill_number,
                "total_amount": str(totals.total_amount),
            },
        )
        return await BillService._hydrate(db, bill.id, shop_id)

    @staticmethod
    async def get_bills(
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
        filters: Optional[BillFilters] = None,
    ) -> List[BillResponse]:
        """
        List live bills, newest first.
        A bill whose relations cannot be turned into a response is logged
        and left out instead of failing the whole listing.
        """
        await AccessService.check_access(db, shop_id, user_id)
        filters = filters or BillFilters()

        query = BillService._hydrated_query(shop_id)
        if filters.search:
            query = query.where(
                or_(
                    Bill.bill_number.icontains(filters.search, autoescape=True),
                    Bill.notes.icontains(filters.search, autoescape=True),
                )
            )
        if filters.status:
            query = query.where(Bill.status == filters.status)
        if filters.customer_id:
            query = query.where(Bill.customer_id == filters.customer_id)
        if filters.start_date:
            query = query.where(Bill.bill_date >= filters.start_date)
        if filters.end_date:
            query = query.where(Bill.bill_date <= filters.end_date)

        result = await db.execute(query.order_by(Bill.created_at.desc()))

        responses = []
        for bill in result.scalars().all():
            try:
                responses.append(BillService.to_response(bill))
            except ValidationError as exc:
                logger.warning(
                    "Skipping bill that failed to hydrate",
                    extra={"bill_id": str(bill.id), "error_count": exc.error_count()},
                )
        return responses

    @staticmethod
    async def get_bill(
        db: AsyncSession,
        bill_id: UUID,
        shop_id: UUID,
        user_id: UUID,
    ) -> BillResponse:
        await AccessService.check_access(db, shop_id, user_id)
        return await BillService._hydrate(db, bill_id, shop_id)

    @staticmethod
    async def update_bill(
        db: AsyncSession,
        bill_id: UUID,
        shop_id: UUID,
        user_id: UUID,
        data: BillUpdate,
    ) -> BillResponse:
        """
        Replace a draft bill's header fields and lines.
        Payments already applied are kept: balance = new total - paid_amount.
        Stock is not touched on update.
        """
        await AccessService.check_access(db, shop_id, user_id)
        bill = await BillService.get_bill_by_id(db, bill_id, shop_id, for_update=True)
        if bill is None:
            raise BillNotFoundError()
        if not bill.is_draft:
            raise InvalidStateError("only draft bills can be updated")

        bill_date, due_date, items = await BillService._prepare(db, shop_id, data)
        totals = compute_totals(data.items, data.tax_rate, data.discount)
        balance = outstanding_balance(totals.total_amount, bill.paid_amount)

        try:
            bill.customer_id = data.customer_id
            bill.bill_date = bill_date
            bill.due_date = due_date
            bill.subtotal = totals.subtotal
            bill.tax_amount = totals.tax_amount
            bill.discount_amount = totals.discount_amount
            bill.total_amount = totals.total_amount
            bill.balance = balance
            bill.pending_amount = balance
            bill.notes = data.notes
            bill.terms = data.terms

            # Lines are replaced wholesale; their ids do not survive an update
            await db.execute(delete(BillItem).where(BillItem.bill_id == bill.id))
            db.add_all(BillService._build_lines(bill.id, data, items))
            await db.commit()
        except BaseException:
            await db.rollback()
            raise

        logger.info(
            "Bill updated",
            extra={"shop_id": str(shop_id), "bill_id": str(bill.id), "total_amount": str(totals.total_amount)},
        )
        return await BillService._hydrate(db, bill.id, shop_id)

    @staticmethod
    async def delete_bill(
        db: AsyncSession,
        bill_id: UUID,
        shop_id: UUID,
        user_id: UUID,
    ) -> None:
        """Soft delete a draft bill."""
        await AccessService.check_access(db, shop_id, user_id)
        bill = await BillService.get_bill_by_id(db, bill_id, shop_id, for_update=True)
        if bill is None:
            raise BillNotFoundError()
        if not bill.is_draft:
            raise InvalidStateError("only draft bills can be deleted")

        try:
            if settings.RESTORE_STOCK_ON_DRAFT_DELETE:
                result = await db.execute(select(BillItem).where(BillItem.bill_id == bill.id))
                for line in result.scalars().all():
                    await ItemService.adjust_quantity(db, line.item_id, line.quantity)
            bill.soft_delete()
            await db.commit()
        except BaseException:
            await db.rollback()
            raise

        logger.info(
            "Bill deleted",
            extra={"shop_id": str(shop_id), "bill_id": str(bill.id)},
        )

    @staticmethod
    async def get_bill_stats(
        db: AsyncSession,
        shop_id: UUID,
        user_id: UUID,
    ) -> BillStats:
        """Ledger totals across the shop's live bills."""
        await AccessService.check_access(db, shop_id, user_id)
        live = (Bill.shop_id == shop_id, Bill.live())

        totals = (
            await db.execute(
                select(
                    func.count(Bill.id),
                    func.coalesce(func.sum(Bill.total_amount), 0),
                    func.coalesce(func.sum(Bill.paid_amount), 0),
                    func.coalesce(func.sum(Bill.balance), 0),
                ).where(*live)
            )
        ).one()
        overdue_amount = await db.scalar(
            select(func.coalesce(func.sum(Bill.balance), 0)).where(
                *live, Bill.status == BillStatus.OVERDUE
            )
        )
        this_month = (
            await db.execute(
                select(
                    func.count(Bill.id),
                    func.coalesce(func.sum(Bill.total_amount), 0),
                ).where(*live, Bill.bill_date >= start_of_month())
            )
        ).one()

        return BillStats(
            total_bills=totals[0] or 0,
            total_amount=to_money(totals[1]),
            paid_amount=to_money(totals[2]),
            outstanding_amount=to_money(totals[3]),
            overdue_amount=to_money(overdue_amount),
            this_month_bills=this_month[0] or 0,
            this_month_amount=to_money(this_month[1]),
        )
