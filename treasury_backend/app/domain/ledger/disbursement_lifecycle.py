"""
Disbursement Lifecycle.

Pure functions deriving a disbursement's remaining amount and status from
its justifications and returns to cash, plus overdue/age predicates.
"""

import math
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from treasury_backend.app.core.clock import as_naive_utc, utcnow
from treasury_backend.app.core.exceptions import InvalidInputError, ValidationFailedError, ValidationReason
from treasury_backend.app.domain.ledger.money import ZERO, sum_amounts, to_money
from treasury_backend.app.models.ledger_enums import DisbursementStatus

SECONDS_PER_DAY = 24 * 60 * 60


def disbursement_remaining(initial_amount, justifications: Iterable = (), returns: Iterable = ()) -> Decimal:
    """initial - sum(justification.amount) - sum(return.amount). Not clamped."""
    return to_money(initial_amount) - sum_amounts(justifications) - sum_amounts(returns)


def disbursement_status(initial_amount, remaining) -> DisbursementStatus:
    """
    JUSTIFIED iff remaining == 0, OPEN iff remaining == initial,
    PARTIALLY_JUSTIFIED in between.
    
    Raises:
        InvalidInputError: If remaining falls outside [0, initial].
    """
    initial = to_money(initial_amount)
    remaining = to_money(remaining)
    
    if remaining < ZERO or remaining > initial:
        raise InvalidInputError(
            f"Disbursement remaining {remaining} is outside [0, {initial}]"
        )
    if remaining == ZERO:
        return DisbursementStatus.JUSTIFIED
    if remaining < initial:
        return DisbursementStatus.PARTIALLY_JUSTIFIED
    return DisbursementStatus.OPEN


def is_disbursement_overdue(disbursement, now: Optional[datetime] = None) -> bool:
    """True iff a due date exists, is strictly in the past and the disbursement is not JUSTIFIED."""
    if disbursement.due_date is None:
        return False
    if disbursement.status == DisbursementStatus.JUSTIFIED:
        return False
    now = as_naive_utc(now) if now else utcnow()
    return as_naive_utc(disbursement.due_date) < now


def days_outstanding(disbursement, now: Optional[datetime] = None) -> int:
    """Whole days since creation, rounded up; never negative."""
    now = as_naive_utc(now) if now else utcnow()
    elapsed = (now - as_naive_utc(disbursement.created_at)).total_seconds()
    return max(0, math.ceil(elapsed / SECONDS_PER_DAY))


def is_long_open(disbursement, open_days: int, now: Optional[datetime] = None) -> bool:
    """True iff not JUSTIFIED and created more than `open_days` days before now."""
    if disbursement.status == DisbursementStatus.JUSTIFIED:
        return False
    now = as_naive_utc(now) if now else utcnow()
    age = now - as_naive_utc(disbursement.created_at)
    return age.total_seconds() > open_days * SECONDS_PER_DAY


def validate_amount_within(amount, available, field: str = "amount") -> Decimal:
    """
    Write-time check for justifications, returns and reimbursements:
    0 < amount <= available.
    """
    amount = to_money(amount)
    available = to_money(available)
    if amount <= ZERO:
        raise ValidationFailedError(
            ValidationReason.INVALID_AMOUNT,
            "Amount must be greater than zero",
            field=field,
        )
    if amount > available:
        raise ValidationFailedError(
            ValidationReason.AMOUNT_EXCEEDS_REMAINING,
            f"Amount ({amount}) exceeds remaining amount ({available})",
            field=field,
            details={"remaining": str(available)},
        )
    return amount
