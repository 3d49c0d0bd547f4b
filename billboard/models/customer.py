"""Customer Model"""

from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship

from billboard.models.base import BaseModel, ShopScopedMixin, SoftDeleteMixin, StatusMixin


class Customer(BaseModel, ShopScopedMixin, SoftDeleteMixin, StatusMixin):
    """A shop's customer; bills may optionally point at one."""
    __tablename__ = "customers"

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    tax_number = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)

    # Relationships
    shop = relationship("Shop", back_populates="customers")
    bills = relationship("Bill", back_populates="customer")

    def __repr__(self) -> str:
        return f"<Customer {self.name}>"
