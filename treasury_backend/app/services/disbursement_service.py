"""
Disbursement write paths.

Every mutation of justifications or returns recalculates the disbursement and
any linked document inside the same transaction, then commits once.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.clock import as_naive_utc, utcnow
from treasury_backend.app.core.exceptions import ResourceNotFoundError, ValidationFailedError, ValidationReason
from treasury_backend.app.domain.ledger import queries
from treasury_backend.app.domain.ledger.disbursement_lifecycle import validate_amount_within
from treasury_backend.app.domain.ledger.document_lifecycle import validate_payment_amount
from treasury_backend.app.domain.ledger.money import ZERO, to_money
from treasury_backend.app.domain.ledger.recalculation import recalculate_disbursement, recalculate_document
from treasury_backend.app.models.disbursement import Disbursement
from treasury_backend.app.models.document import Document
from treasury_backend.app.models.justification import Justification
from treasury_backend.app.models.ledger_enums import (
    DisbursementCategory, DisbursementStatus, JustificationCategory, Modality, MovementKind
)
from treasury_backend.app.models.movement import Movement
from treasury_backend.app.services.cache import CashBalanceCache

logger = logging.getLogger("treasury.disbursements")


class DisbursementService:

    @staticmethod
    async def _get_justification(
        db: AsyncSession, tenant_id: int, disbursement_id: int, justification_id: int
    ) -> Justification:
        justification = await queries.get_owned(db, Justification, tenant_id, justification_id, "Justification")
        if justification.disbursement_id != disbursement_id:
            raise ResourceNotFoundError("Justification", justification_id)
        return justification

    @staticmethod
    async def grant(
        db: AsyncSession,
        tenant_id: int,
        intervenant_id: int,
        amount,
        category: DisbursementCategory = DisbursementCategory.OTHER,
        date: Optional[datetime] = None,
        due_date: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> Disbursement:
        """
        Hand out cash to an active intervenant.

        Creates the disbursement (remaining = initial, OPEN) and its originating
        OUTFLOW cash movement.
        """
        intervenant = await queries.get_active_intervenant(db, tenant_id, intervenant_id)
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValidationFailedError(
                ValidationReason.INVALID_AMOUNT, "Amount must be greater than zero", field="amount"
            )

        disbursement = Disbursement(
            tenant_id=tenant_id,
            intervenant_id=intervenant.id,
            initial_amount=amount,
            remaining_amount=amount,
            status=DisbursementStatus.OPEN,
            category=category,
            due_date=as_naive_utc(due_date) if due_date else None,
            note=note,
        )
        db.add(disbursement)
        await db.flush()

        db.add(Movement(
            tenant_id=tenant_id,
            intervenant_id=intervenant.id,
            date=as_naive_utc(date) if date else utcnow(),
            kind=MovementKind.OUTFLOW,
            amount=amount,
            modality=Modality.CASH,
            category=category.value,
            note=note,
            is_disbursement=True,
            disbursement_id=disbursement.id,
        ))
        await db.commit()
        await CashBalanceCache.invalidate(tenant_id)

        logger.info(
            "Disbursement granted",
            extra={"tenant_id": tenant_id, "disbursement_id": disbursement.id, "amount": str(amount)},
        )
        return disbursement

    @staticmethod
    async def add_justification(
        db: AsyncSession,
        tenant_id: int,
        disbursement_id: int,
        amount,
        category: JustificationCategory,
        date: Optional[datetime] = None,
        document_id: Optional[int] = None,
        reference: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Justification:
        disbursement = await queries.get_owned(db, Disbursement, tenant_id, disbursement_id, "Disbursement")
        amount = validate_amount_within(amount, disbursement.remaining_amount)

        document = None
        if document_id is not None:
            document = await queries.get_owned(db, Document, tenant_id, document_id, "Document")
            validate_payment_amount(amount, document.remaining_amount)

        justification = Justification(
            tenant_id=tenant_id,
            disbursement_id=disbursement.id,
            document_id=document_id,
            date=as_naive_utc(date) if date else utcnow(),
            amount=amount,
            category=category,
            reference=reference,
            note=note,
        )
        db.add(justification)

        await recalculate_disbursement(db, disbursement)
        if document is not None:
            await recalculate_document(db, document)
        await db.commit()

        logger.info(
            "Justification added",
            extra={"tenant_id": tenant_id, "disbursement_id": disbursement.id, "document_id": document_id},
        )
        return justification

    @staticmethod
    async def update_justification(
        db: AsyncSession,
        tenant_id: int,
        disbursement_id: int,
        justification_id: int,
        changes: Dict[str, Any],
    ) -> Justification:
        """
        Apply a partial update to a justification.

        The edited justification's current amount is given back to the
        disbursement (and to its document when the link is unchanged) before
        the new amount is validated. Both the previous and the new document
        are recalculated when the link moves.
        """
        disbursement = await queries.get_owned(db, Disbursement, tenant_id, disbursement_id, "Disbursement")
        justification = await DisbursementService._get_justification(
            db, tenant_id, disbursement_id, justification_id
        )

        current_amount = to_money(justification.amount)
        new_amount = to_money(changes.get("amount", current_amount))
        validate_amount_within(new_amount, to_money(disbursement.remaining_amount) + current_amount)

        old_document_id = justification.document_id
        new_document_id = changes.get("document_id", old_document_id)

        old_document = None
        if old_document_id is not None:
            old_document = await queries.get_owned(db, Document, tenant_id, old_document_id, "Document")

        new_document = old_document
        if new_document_id != old_document_id:
            new_document = None
            if new_document_id is not None:
                new_document = await queries.get_owned(db, Document, tenant_id, new_document_id, "Document")

        if new_document is not None:
            available = to_money(new_document.remaining_amount)
            if new_document_id == old_document_id:
                available += current_amount
            validate_payment_amount(new_amount, available)

        for key in ("category", "reference", "note"):
            if key in changes:
                setattr(justification, key, changes[key])
        if changes.get("date") is not None:
            justification.date = as_naive_utc(changes["date"])
        justification.amount = new_amount
        justification.document_id = new_document_id

        await recalculate_disbursement(db, disbursement)
        if old_document is not None:
            await recalculate_document(db, old_document)
        if new_document is not None and new_document is not old_document:
            await recalculate_document(db, new_document)
        await db.commit()

        logger.info(
            "Justification updated",
            extra={"tenant_id": tenant_id, "justification_id": justification.id},
        )
        return justification

    @staticmethod
    async def delete_justification(
        db: AsyncSession, tenant_id: int, disbursement_id: int, justification_id: int
    ) -> None:
        disbursement = await queries.get_owned(db, Disbursement, tenant_id, disbursement_id, "Disbursement")
        justification = await DisbursementService._get_justification(
            db, tenant_id, disbursement_id, justification_id
        )

        document = None
        if justification.document_id is not None:
            document = await queries.get_owned(db, Document, tenant_id, justification.document_id, "Document")

        await db.delete(justification)

        await recalculate_disbursement(db, disbursement)
        if document is not None:
            await recalculate_document(db, document)
        await db.commit()

        logger.info(
            "Justification deleted",
            extra={"tenant_id": tenant_id, "justification_id": justification_id},
        )

    @staticmethod
    async def return_to_cash(
        db: AsyncSession,
        tenant_id: int,
        disbursement_id: int,
        amount,
        date: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> Movement:
        """Record unspent funds coming back to the cash box as an INFLOW cash movement."""
        disbursement = await queries.get_owned(db, Disbursement, tenant_id, disbursement_id, "Disbursement")
        amount = validate_amount_within(amount, disbursement.remaining_amount)

        movement = Movement(
            tenant_id=tenant_id,
            intervenant_id=disbursement.intervenant_id,
            date=as_naive_utc(date) if date else utcnow(),
            kind=MovementKind.INFLOW,
            amount=amount,
            modality=Modality.CASH,
            category="DISBURSEMENT_RETURN",
            note=note,
            disbursement_id=disbursement.id,
        )
        db.add(movement)

        await recalculate_disbursement(db, disbursement)
        await db.commit()
        await CashBalanceCache.invalidate(tenant_id)

        logger.info(
            "Disbursement returned to cash",
            extra={"tenant_id": tenant_id, "disbursement_id": disbursement.id, "amount": str(amount)},
        )
        return movement
