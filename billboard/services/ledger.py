"""Ledger Calculator - pure bill arithmetic and status derivation.

No I/O happens here; the bill and payment services feed plain values in
and persist what comes out.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional, Union

from billboard.models.enums import BillStatus
from billboard.utils.time import get_utc_now

CENT = Decimal("0.01")
ZERO = Decimal("0")

# Scales of the stored Numeric columns
MONEY_PLACES = 2
QUANTITY_PLACES = 3

Number = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class LedgerTotals:
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class PaymentOutcome:
    paid_amount: Decimal
    balance: Decimal
    status: BillStatus


def to_decimal(value: Optional[Number]) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from dragging binary noise along
    return Decimal(str(value))


def to_money(value: Optional[Number]) -> Decimal:
    """Quantize to cents, rounding half up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def decimal_places(value: Number) -> int:
    """Significant fractional digits; 1.500 has 1, 100 has 0."""
    exponent = to_decimal(value).normalize().as_tuple().exponent
    if not isinstance(exponent, int):
        return 0
    return max(0, -exponent)


def line_total(quantity: Number, unit_price: Number) -> Decimal:
    return to_money(to_decimal(quantity) * to_decimal(unit_price))


def compute_totals(
    lines: Iterable[Any],
    tax_rate_percent: Optional[Number] = None,
    discount: Optional[Number] = None,
) -> LedgerTotals:
    """
    Compute the bill header amounts from its lines.

    subtotal = sum(quantity * unit_price)
    tax_amount = subtotal * tax_rate_percent / 100
    total_amount = max(0, subtotal + tax_amount - discount)
    """
    # Summing rounded line totals keeps subtotal equal to the stored lines
    subtotal = sum((line_total(line.quantity, line.unit_price) for line in lines), ZERO)
    tax_amount = to_money(subtotal * to_decimal(tax_rate_percent) / Decimal(100))
    discount_amount = to_money(discount)
    total_amount = max(ZERO, subtotal + tax_amount - discount_amount)

    return LedgerTotals(
        subtotal=to_money(subtotal),
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total_amount=to_money(total_amount),
    )


def is_past_due(due_date: Optional[date], now: Optional[datetime] = None) -> bool:
    """A bill is past due once "now" is strictly after the start of its due date."""
    if due_date is None:
        return False
    now = now or get_utc_now()
    return datetime.combine(due_date, time.min) < now


def derive_status(
    balance: Number,
    due_date: Optional[date],
    now: Optional[datetime] = None,
) -> BillStatus:
    """Status of a bill that has received at least one payment."""
    if to_decimal(balance) <= ZERO:
        return BillStatus.PAID
    if is_past_due(due_date, now):
        return BillStatus.OVERDUE
    return BillStatus.SENT


def apply_payment(
    bill: Any,
    payment_amount: Number,
    now: Optional[datetime] = None,
) -> PaymentOutcome:
    """
    Ledger state after adding a payment to a bill.

    The balance is not clamped: an overpayment yields a negative balance,
    which still derives to PAID.
    """
    paid_amount = to_money(to_decimal(bill.paid_amount) + to_decimal(payment_amount))
    balance = to_money(to_decimal(bill.total_amount) - paid_amount)
    return PaymentOutcome(
        paid_amount=paid_amount,
        balance=balance,
        status=derive_status(balance, bill.due_date, now),
    )


def outstanding_balance(total_amount: Number, paid_amount: Number) -> Decimal:
    """Signed balance after the total changes under already-applied payments."""
    return to_money(to_decimal(total_amount) - to_decimal(paid_amount))
