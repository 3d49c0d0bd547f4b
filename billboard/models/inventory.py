"""Inventory Model: the shop's item catalog"""

from sqlalchemy import Column, String, Text, Numeric
from sqlalchemy.orm import relationship

from billboard.models.base import BaseModel, ShopScopedMixin, SoftDeleteMixin, StatusMixin


class Item(BaseModel, ShopScopedMixin, SoftDeleteMixin, StatusMixin):
    """
    Catalog entry with stock on hand.
    quantity is decremented when billed and may go negative.
    """
    __tablename__ = "items"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    sku = Column(String(100), nullable=True, index=True)
    price = Column(Numeric(12, 2), nullable=False)
    cost_price = Column(Numeric(12, 2), nullable=True)
    tax_rate = Column(Numeric(5, 2), default=0, nullable=False)
    category = Column(String(100), nullable=True, index=True)
    quantity = Column(Numeric(12, 3), default=0, nullable=False)
    min_quantity = Column(Numeric(12, 3), default=0, nullable=False)
    unit = Column(String(20), default="PCS", nullable=False)
    barcode = Column(String(100), nullable=True)

    # Relationships
    shop = relationship("Shop", back_populates="items")

    def __repr__(self) -> str:
        return f"<Item {self.name} qty={self.quantity}>"
