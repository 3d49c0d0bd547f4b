from typing import Optional
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict
from uuid import UUID
from datetime import datetime


class ItemCreate(BaseModel):
    name: str
    description: Optional[str] = None
    sku: Optional[str] = None
    price: Decimal
    cost_price: Optional[Decimal] = None
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0)
    category: Optional[str] = None
    quantity: Decimal = Decimal("0")
    min_quantity: Decimal = Decimal("0")
    unit: Optional[str] = None
    barcode: Optional[str] = None
    is_active: bool = True


class ItemResponse(BaseModel):
    id: UUID
    shop_id: UUID
    name: str
    description: Optional[str] = None
    sku: Optional[str] = None
    price: Decimal
    cost_price: Optional[Decimal] = None
    tax_rate: Decimal
    category: Optional[str] = None
    quantity: Decimal
    min_quantity: Decimal
    unit: str
    barcode: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
