"""
Advance Lifecycle.

Advances follow the same three-state rule as disbursements, with
reimbursements playing the role of justifications.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from treasury_backend.app.core.clock import as_naive_utc, utcnow
from treasury_backend.app.core.exceptions import InvalidInputError
from treasury_backend.app.domain.ledger.money import ZERO, sum_amounts, to_money
from treasury_backend.app.models.ledger_enums import AdvanceStatus


def advance_remaining(amount, reimbursements: Iterable = ()) -> Decimal:
    """amount - sum(reimbursement.amount)."""
    return to_money(amount) - sum_amounts(reimbursements)


def advance_status(amount, remaining) -> AdvanceStatus:
    """
    FULLY_REPAID iff remaining == 0, ONGOING iff remaining == amount,
    PARTIALLY_REPAID in between.
    
    Raises:
        InvalidInputError: If remaining falls outside [0, amount].
    """
    amount = to_money(amount)
    remaining = to_money(remaining)
    
    if remaining < ZERO or remaining > amount:
        raise InvalidInputError(f"Advance remaining {remaining} is outside [0, {amount}]")
    if remaining == ZERO:
        return AdvanceStatus.FULLY_REPAID
    if remaining < amount:
        return AdvanceStatus.PARTIALLY_REPAID
    return AdvanceStatus.ONGOING


def is_advance_overdue(advance, now: Optional[datetime] = None) -> bool:
    if advance.due_date is None or advance.status == AdvanceStatus.FULLY_REPAID:
        return False
    now = as_naive_utc(now) if now else utcnow()
    return as_naive_utc(advance.due_date) < now
