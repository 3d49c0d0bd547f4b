"""Bill endpoints - invoices and their payments, scoped to a shop"""

from datetime import date
from typing import Any, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from billboard.api import deps
from billboard.models.enums import BillStatus
from billboard.models.user import User
from billboard.schemas.billing import (
    BillCreate,
    BillFilters,
    BillUpdate,
    PaymentCreate,
    PaymentResponse,
)
from billboard.schemas.responses import SuccessResponse
from billboard.services.bill_service import BillService
from billboard.services.payment_service import PaymentService

router = APIRouter()


@router.get("", response_model=SuccessResponse)
async def list_bills(
    shop_id: UUID,
    search: Optional[str] = None,
    status: Optional[BillStatus] = None,
    customer_id: Optional[UUID] = None,
    start_date: Optional[date] = Query(None, description="Inclusive, YYYY-MM-DD"),
    end_date: Optional[date] = Query(None, description="Inclusive, YYYY-MM-DD"),
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """List the shop's bills, newest first."""
    filters = BillFilters(
        search=search,
        status=status,
        customer_id=customer_id,
        start_date=start_date,
        end_date=end_date,
    )
    bills = await BillService.get_bills(db, shop_id, current_user.id, filters)
    return SuccessResponse(data=bills)


@router.post("", response_model=SuccessResponse)
async def create_bill(
    shop_id: UUID,
    bill_in: BillCreate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Create a draft bill. Stock of every billed item is decremented."""
    bill = await BillService.create_bill(db, shop_id, current_user.id, bill_in)
    return SuccessResponse(data=bill, message="Bill created successfully")


@router.get("/stats", response_model=SuccessResponse)
async def get_bill_stats(
    shop_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    stats = await BillService.get_bill_stats(db, shop_id, current_user.id)
    return SuccessResponse(data=stats)


@router.get("/{bill_id}", response_model=SuccessResponse)
async def get_bill(
    shop_id: UUID,
    bill_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    bill = await BillService.get_bill(db, bill_id, shop_id, current_user.id)
    return SuccessResponse(data=bill)


@router.put("/{bill_id}", response_model=SuccessResponse)
async def update_bill(
    shop_id: UUID,
    bill_id: UUID,
    bill_in: BillUpdate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Replace a draft bill. Bills in any other status are read-only."""
    bill = await BillService.update_bill(db, bill_id, shop_id, current_user.id, bill_in)
    return SuccessResponse(data=bill, message="Bill updated successfully")


@router.delete("/{bill_id}", response_model=SuccessResponse)
async def delete_bill(
    shop_id: UUID,
    bill_id: UUID,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    await BillService.delete_bill(db, bill_id, shop_id, current_user.id)
    return SuccessResponse(data=None, message="Bill deleted successfully")


@router.post("/{bill_id}/payments", response_model=SuccessResponse)
async def add_payment(
    shop_id: UUID,
    bill_id: UUID,
    payment_in: PaymentCreate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Record a payment; the bill's paid amount, balance and status follow."""
    payment = await PaymentService.add_payment(
        db, bill_id, shop_id, current_user.id, payment_in
    )
    return SuccessResponse(
        data=PaymentResponse.model_validate(payment),
        message="Payment recorded successfully",
    )
