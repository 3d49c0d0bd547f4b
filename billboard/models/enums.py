"""Centralized Enum Definitions"""

import enum


def enum_values(enum_cls) -> list:
    """Persist enum values (lowercase) rather than member names."""
    return [member.value for member in enum_cls]


# Tenancy
class ShopRole(str, enum.Enum):
    """Roles a user can hold inside a shop"""
    OWNER = "owner"
    MANAGER = "manager"
    CASHIER = "cashier"


# Billing
class BillStatus(str, enum.Enum):
    """Bill lifecycle states. Only DRAFT bills can be edited or deleted."""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentMethod(str, enum.Enum):
    """How a payment was received"""
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"
    OTHER = "other"
