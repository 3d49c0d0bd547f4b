"""Models Package - Export all models for easy imports"""

from billboard.models.base import BaseModel, ShopScopedMixin, SoftDeleteMixin, StatusMixin
from billboard.models.enums import ShopRole, BillStatus, PaymentMethod
from billboard.models.user import User
from billboard.models.shop import Shop, ShopUser
from billboard.models.customer import Customer
from billboard.models.inventory import Item
from billboard.models.billing import Bill, BillItem, Payment


__all__ = [
    # Base classes
    "BaseModel",
    "ShopScopedMixin",
    "SoftDeleteMixin",
    "StatusMixin",

    # Enums
    "ShopRole",
    "BillStatus",
    "PaymentMethod",

    # Tenancy
    "User",
    "Shop",
    "ShopUser",

    # Catalog
    "Customer",
    "Item",

    # Billing
    "Bill",
    "BillItem",
    "Payment",
]
