"""
Money helpers.

All ledger amounts are Decimal, quantized to cents, so repeated
recalculation cannot accumulate binary floating-point drift.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Coerce an int/str/float/Decimal to a Decimal rounded to cents."""
    if value is None:
        return ZERO
    if isinstance(value, float):
        # str() keeps the shortest repr (0.1 -> "0.1"), avoiding binary expansion
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_amounts(items: Iterable) -> Decimal:
    """Sum the `.amount` of objects (or dict["amount"]) as money. Empty -> 0."""
    total = ZERO
    for item in items:
        amount = item["amount"] if isinstance(item, dict) else item.amount
        total += to_money(amount)
    return total
