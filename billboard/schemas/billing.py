from typing import Optional, List
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from uuid import UUID
from datetime import datetime, date

from billboard.models.enums import BillStatus, PaymentMethod
from billboard.services.ledger import MONEY_PLACES, QUANTITY_PLACES, decimal_places


class BillLineCreate(BaseModel):
    item_id: UUID
    quantity: Decimal = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    description: Optional[str] = None

    # Scale must fit the line columns exactly; nothing is rounded on the way in
    @field_validator("quantity")
    @classmethod
    def check_quantity_scale(cls, v: Decimal) -> Decimal:
        if decimal_places(v) > QUANTITY_PLACES:
            raise ValueError(f"quantity allows at most {QUANTITY_PLACES} decimal places")
        return v

    @field_validator("unit_price")
    @classmethod
    def check_price_scale(cls, v: Decimal) -> Decimal:
        if decimal_places(v) > MONEY_PLACES:
            raise ValueError(f"unit price allows at most {MONEY_PLACES} decimal places")
        return v

    @model_validator(mode="after")
    def check_line_total_in_cents(self) -> "BillLineCreate":
        if decimal_places(self.quantity * self.unit_price) > MONEY_PLACES:
            raise ValueError("quantity * unit price must be a whole number of cents")
        return self


class BillCreate(BaseModel):
    """
    Payload for creating or replacing a bill.
    Dates are YYYY-MM-DD strings; the service parses them so a bad date
    surfaces as INVALID_DATE rather than a schema error.
    """
    customer_id: Optional[UUID] = None
    bill_date: str
    due_date: Optional[str] = None
    items: List[BillLineCreate]
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None
    terms: Optional[str] = None


class BillUpdate(BillCreate):
    pass


class BillFilters(BaseModel):
    search: Optional[str] = None
    status: Optional[BillStatus] = None
    customer_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    payment_date: str
    payment_method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None


class BillLineResponse(BaseModel):
    id: UUID
    bill_id: UUID
    item_id: UUID
    item_name: str
    description: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal
    total_price: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentResponse(BaseModel):
    id: UUID
    bill_id: UUID
    amount: Decimal
    payment_date: date
    payment_method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomerBrief(BaseModel):
    """Customer fields embedded in a bill."""
    id: UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    tax_number: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class BillResponse(BaseModel):
    id: UUID
    shop_id: UUID
    customer_id: Optional[UUID] = None
    bill_number: str
    bill_date: date
    due_date: Optional[date] = None
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    pending_amount: Decimal
    balance: Decimal
    status: BillStatus
    notes: Optional[str] = None
    terms: Optional[str] = None
    created_by: UUID
    customer: Optional[CustomerBrief] = None
    items: List[BillLineResponse] = []
    payments: List[PaymentResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BillStats(BaseModel):
    total_bills: int = 0
    total_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    outstanding_amount: Decimal = Decimal("0")
    overdue_amount: Decimal = Decimal("0")
    this_month_bills: int = 0
    this_month_amount: Decimal = Decimal("0")
