"""Tenancy Models: shops and their memberships"""

from sqlalchemy import Column, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID, ENUM
from sqlalchemy.orm import relationship

from billboard.models.base import BaseModel, SoftDeleteMixin, StatusMixin
from billboard.models.enums import ShopRole, enum_values


class Shop(BaseModel, StatusMixin, SoftDeleteMixin):
    """
    Tenant model - the multi-tenant anchor.
    Items, customers and bills all hang off a shop.
    """
    __tablename__ = "shops"

    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    gst_number = Column(String(50), nullable=True)
    logo_url = Column(Text, nullable=True)

    # Relationships
    members = relationship("ShopUser", back_populates="shop", cascade="all, delete-orphan")
    items = relationship("Item", back_populates="shop", cascade="all, delete-orphan")
    customers = relationship("Customer", back_populates="shop", cascade="all, delete-orphan")
    bills = relationship("Bill", back_populates="shop", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Shop {self.name}>"


class ShopUser(BaseModel, StatusMixin):
    """Membership of a user in a shop. Inactive rows grant nothing."""
    __tablename__ = "shop_users"
    __table_args__ = (
        UniqueConstraint("shop_id", "user_id", name="uq_shop_users_shop_user"),
    )

    shop_id = Column(
        UUID(as_uuid=True),
        ForeignKey("shops.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    role = Column(
        ENUM(ShopRole, name="shop_role", values_callable=enum_values),
        default=ShopRole.CASHIER,
        nullable=False
    )

    # Relationships
    shop = relationship("Shop", back_populates="members")
    user = relationship("User", back_populates="memberships")

    def __repr__(self) -> str:
        return f"<ShopUser shop={self.shop_id} user={self.user_id} ({self.role})>"
