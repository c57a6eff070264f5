"""
Document Payment Lifecycle.

Pure calculations for document payment progress, plus the write-time
validation rules every mutation of a document must honor.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from treasury_backend.app.core.exceptions import ValidationFailedError, ValidationReason
from treasury_backend.app.domain.ledger.money import ZERO, sum_amounts, to_money
from treasury_backend.app.models.ledger_enums import DocumentStatus

HUNDRED = Decimal("100")


def remaining_amount(total, paid) -> Decimal:
    """total - paid, unclamped."""
    return to_money(total) - to_money(paid)


def document_status(total, paid) -> DocumentStatus:
    """
    UNPAID iff paid == 0, PAID iff paid >= total, else PARTIALLY_PAID.
    
    paid == 0 is checked first, so a zero-total document reads as UNPAID;
    creation rejects total <= 0 for that reason.
    """
    total = to_money(total)
    paid = to_money(paid)
    if paid == ZERO:
        return DocumentStatus.UNPAID
    if paid >= total:
        return DocumentStatus.PAID
    return DocumentStatus.PARTIALLY_PAID


def payment_percentage(total, paid) -> Decimal:
    """paid / total * 100 clamped to [0, 100]; 0 when total is 0."""
    total = to_money(total)
    if total == ZERO:
        return Decimal("0")
    percentage = to_money(paid) / total * HUNDRED
    return min(max(percentage, Decimal("0")), HUNDRED).quantize(Decimal("0.01"))


def sum_justification_amounts(justifications: Iterable) -> Decimal:
    """The only source of truth for a document's paid amount."""
    return sum_amounts(justifications)


# Write-time validation

def validate_document_amount(amount) -> Decimal:
    """Total amount must be strictly positive."""
    if amount is None or to_money(amount) <= ZERO:
        raise ValidationFailedError(
            ValidationReason.INVALID_DOCUMENT_AMOUNT,
            "Amount must be greater than zero",
            field="total_amount",
        )
    return to_money(amount)


def validate_document_dates(issue_date: date, due_date: Optional[date]) -> None:
    """Due date, when present, must be strictly after the issue date."""
    if due_date is not None and due_date <= issue_date:
        raise ValidationFailedError(
            ValidationReason.INVALID_DATES,
            "Due date must be after issue date",
            field="due_date",
        )


def validate_reference(reference: Optional[str]) -> str:
    """Non-empty after trimming; returns the trimmed reference."""
    if reference is None or not reference.strip():
        raise ValidationFailedError(
            ValidationReason.REFERENCE_EMPTY,
            "Document reference cannot be empty",
            field="reference",
        )
    return reference.strip()


def validate_payment_amount(amount, document_remaining) -> Decimal:
    """A payment must be positive and cannot exceed the document's remaining amount."""
    amount = to_money(amount)
    document_remaining = to_money(document_remaining)
    if amount <= ZERO:
        raise ValidationFailedError(
            ValidationReason.INVALID_AMOUNT,
            "Payment amount must be greater than zero",
            field="amount",
        )
    if amount > document_remaining:
        raise ValidationFailedError(
            ValidationReason.PAYMENT_EXCEEDS_REMAINING,
            f"Payment amount ({amount}) exceeds remaining amount ({document_remaining})",
            field="amount",
            details={"remaining": str(document_remaining)},
        )
    return amount


def validate_total_change(new_total, paid) -> Decimal:
    """A document's total cannot be reduced below what has already been paid."""
    new_total = validate_document_amount(new_total)
    paid = to_money(paid)
    if new_total < paid:
        raise ValidationFailedError(
            ValidationReason.AMOUNT_TOO_LOW,
            f"Cannot set total amount ({new_total}) below paid amount ({paid})",
            field="total_amount",
            details={"paid": str(paid)},
        )
    return new_total


def validate_can_delete(linked_justification_count: int, paid) -> None:
    """A document with any linked justification (or any payment) cannot be deleted."""
    if linked_justification_count > 0 or to_money(paid) > ZERO:
        raise ValidationFailedError(
            ValidationReason.HAS_PAYMENTS,
            "Cannot delete document with linked justifications",
            details={"linked_justifications": linked_justification_count},
        )
