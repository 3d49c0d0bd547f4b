"""Billing Models: bills, their lines and payments"""

from sqlalchemy import Column, Date, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID, ENUM
from sqlalchemy.orm import relationship

from billboard.models.base import BaseModel, ShopScopedMixin, SoftDeleteMixin
from billboard.models.enums import BillStatus, PaymentMethod, enum_values

MONEY = Numeric(12, 2)
QUANTITY = Numeric(12, 3)


class Bill(BaseModel, ShopScopedMixin, SoftDeleteMixin):
    """
    Invoice issued by a shop.

    paid_amount, balance and pending_amount are derived from the payments
    and recomputed inside the transaction that changes them; they are never
    taken from request input. balance is signed: an overpaid bill carries a
    negative balance.
    """
    __tablename__ = "bills"
    __table_args__ = (
        UniqueConstraint("bill_number", name="uq_bills_bill_number"),
    )

    customer_id = Column(
        UUID(as_uuid=True),
        ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    bill_number = Column(String(50), nullable=False)
    bill_date = Column(Date, nullable=False, index=True)
    due_date = Column(Date, nullable=True)

    # Ledger
    subtotal = Column(MONEY, default=0, nullable=False)
    tax_amount = Column(MONEY, default=0, nullable=False)
    discount_amount = Column(MONEY, default=0, nullable=False)
    total_amount = Column(MONEY, default=0, nullable=False)
    paid_amount = Column(MONEY, default=0, nullable=False)
    pending_amount = Column(MONEY, default=0, nullable=False)
    balance = Column(MONEY, default=0, nullable=False)

    status = Column(
        ENUM(BillStatus, name="bill_status", values_callable=enum_values),
        default=BillStatus.DRAFT,
        nullable=False,
        index=True
    )
    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    # Relationships
    shop = relationship("Shop", back_populates="bills")
    customer = relationship("Customer", back_populates="bills")
    items = relationship(
        "BillItem",
        back_populates="bill",
        order_by="BillItem.position",
        cascade="all, delete-orphan",
    )
    payments = relationship(
        "Payment",
        back_populates="bill",
        order_by="Payment.created_at",
        cascade="all, delete-orphan",
    )

    @property
    def is_draft(self) -> bool:
        return self.status == BillStatus.DRAFT

    def __repr__(self) -> str:
        return f"<Bill {self.bill_number} {self.total_amount} - {self.status}>"


class BillItem(BaseModel):
    """
    One charged line of a bill.
    item_name is a snapshot so renaming the catalog item does not
    rewrite historical bills.
    """
    __tablename__ = "bill_items"

    bill_id = Column(
        UUID(as_uuid=True),
        ForeignKey("bills.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    item_id = Column(
        UUID(as_uuid=True),
        ForeignKey("items.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    position = Column(Integer, default=0, nullable=False)
    item_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(QUANTITY, nullable=False)
    unit_price = Column(MONEY, nullable=False)
    total_price = Column(MONEY, nullable=False)

    # Relationships
    bill = relationship("Bill", back_populates="items")
    item = relationship("Item")

    def __repr__(self) -> str:
        return f"<BillItem {self.item_name} x{self.quantity}>"


class Payment(BaseModel):
    """Append-only receipt against a bill."""
    __tablename__ = "payments"

    bill_id = Column(
        UUID(as_uuid=True),
        ForeignKey("bills.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    amount = Column(MONEY, nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_method = Column(
        ENUM(PaymentMethod, name="payment_method", values_callable=enum_values),
        nullable=False
    )
    reference = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    # Relationships
    bill = relationship("Bill", back_populates="payments")

    def __repr__(self) -> str:
        return f"<Payment {self.amount} ({self.payment_method})>"
