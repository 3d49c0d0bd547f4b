"""Payment Recorder - appends payments and re-derives the bill ledger"""

import uuid
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.core.exceptions import BillNotFoundError, InvalidDateError, InvalidInputError
from billboard.core.logging import get_logger
from billboard.models.billing import Payment
from billboard.models.enums import PaymentMethod
from billboard.schemas.billing import PaymentCreate
from billboard.services.access_service import AccessService
from billboard.services.bill_service import BillService
from billboard.services.ledger import ZERO, apply_payment, to_money
from billboard.utils.time import parse_date

logger = get_logger(__name__)


class PaymentService:
    @staticmethod
    async def add_payment(
        db: AsyncSession,
        bill_id: UUID,
        shop_id: UUID,
        user_id: UUID,
        data: PaymentCreate,
    ) -> Payment:
        """
        Record a payment against a bill in any live status.

        The bill row is locked while the payment is applied, and the payment
        insert and the bill's paid_amount/balance/status update commit
        together.

        Raises:
            AccessDeniedError: No active membership in the shop
            BillNotFoundError: Bill missing or soft-deleted
            InvalidInputError: Non-positive amount or unknown method
            InvalidDateError: Unparseable payment date
        """
        await AccessService.check_access(db, shop_id, user_id)
        bill = await BillService.get_bill_by_id(db, bill_id, shop_id, for_update=True)
        if bill is None:
            raise BillNotFoundError()

        # Sub-cent amounts round to zero and are rejected too
        amount = to_money(data.amount)
        if amount <= ZERO:
            raise InvalidInputError("payment amount must be greater than 0")
        try:
            payment_date = parse_date(data.payment_date)
        except ValueError:
            raise InvalidDateError("invalid payment date format")
        try:
            method = PaymentMethod(data.payment_method)
        except ValueError:
            raise InvalidInputError(f"unsupported payment method: {data.payment_method}")

        outcome = apply_payment(bill, amount)
        payment = Payment(
            id=uuid.uuid4(),
            bill_id=bill.id,
            amount=amount,
            payment_date=payment_date,
            payment_method=method,
            reference=data.reference,
            notes=data.notes,
            created_by=user_id,
        )

        try:
            db.add(payment)
            bill.paid_amount = outcome.paid_amount
            bill.balance = outcome.balance
            bill.pending_amount = outcome.balance
            bill.status = outcome.status
            await db.commit()
        except BaseException:
            await db.rollback()
            raise

        logger.info(
            "Payment recorded",
            extra={
                "shop_id": str(shop_id),
                "bill_id": str(bill.id),
                "amount": str(amount),
                "paid_amount": str(outcome.paid_amount),
                "balance": str(outcome.balance),
                "status": outcome.status.value,
            },
        )
        return payment
