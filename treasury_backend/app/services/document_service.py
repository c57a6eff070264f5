"""
Document write paths.

paid_amount, remaining_amount and status are never taken from the caller;
they are derived from linked justifications by recalculate_document().
"""

import logging
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.exceptions import ValidationFailedError, ValidationReason
from treasury_backend.app.domain.ledger import queries
from treasury_backend.app.domain.ledger.document_lifecycle import (
    validate_can_delete, validate_document_amount, validate_document_dates,
    validate_reference, validate_total_change,
)
from treasury_backend.app.domain.ledger.money import ZERO
from treasury_backend.app.domain.ledger.recalculation import recalculate_document
from treasury_backend.app.models.document import Document
from treasury_backend.app.models.intervenant import Intervenant
from treasury_backend.app.models.ledger_enums import DocumentStatus, DocumentType

logger = logging.getLogger("treasury.documents")


class DocumentService:

    @staticmethod
    async def ensure_reference_available(
        db: AsyncSession, tenant_id: int, reference: str, exclude_id: Optional[int] = None
    ) -> None:
        query = select(Document.id).where(
            Document.tenant_id == tenant_id,
            Document.reference == reference,
        )
        if exclude_id is not None:
            query = query.where(Document.id != exclude_id)

        if (await db.execute(query.limit(1))).scalar_one_or_none() is not None:
            raise ValidationFailedError(
                ValidationReason.REFERENCE_EXISTS,
                f"A document with reference '{reference}' already exists",
                field="reference",
            )

    @staticmethod
    async def create(
        db: AsyncSession,
        tenant_id: int,
        type: DocumentType,
        reference: str,
        total_amount,
        issue_date: date,
        due_date: Optional[date] = None,
        intervenant_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Document:
        reference = validate_reference(reference)
        total = validate_document_amount(total_amount)
        validate_document_dates(issue_date, due_date)
        await DocumentService.ensure_reference_available(db, tenant_id, reference)
        if intervenant_id is not None:
            await queries.get_owned(db, Intervenant, tenant_id, intervenant_id, "Intervenant")

        document = Document(
            tenant_id=tenant_id,
            intervenant_id=intervenant_id,
            type=type,
            reference=reference,
            description=description,
            total_amount=total,
            paid_amount=ZERO,
            remaining_amount=total,
            status=DocumentStatus.UNPAID,
            issue_date=issue_date,
            due_date=due_date,
        )
        db.add(document)
        await db.commit()

        logger.info("Document created", extra={"tenant_id": tenant_id, "document_id": document.id})
        return document

    @staticmethod
    async def update(db: AsyncSession, tenant_id: int, document_id: int, changes: Dict[str, Any]) -> Document:
        """Partial update; totals and dates are re-validated against the merged state."""
        document = await queries.get_owned(db, Document, tenant_id, document_id, "Document")

        if "reference" in changes:
            reference = validate_reference(changes["reference"])
            await DocumentService.ensure_reference_available(db, tenant_id, reference, exclude_id=document.id)
            document.reference = reference

        if changes.get("total_amount") is not None:
            document.total_amount = validate_total_change(changes["total_amount"], document.paid_amount)

        issue_date = changes.get("issue_date") or document.issue_date
        due_date = changes["due_date"] if "due_date" in changes else document.due_date
        validate_document_dates(issue_date, due_date)
        document.issue_date = issue_date
        document.due_date = due_date

        if "intervenant_id" in changes:
            if changes["intervenant_id"] is not None:
                await queries.get_owned(db, Intervenant, tenant_id, changes["intervenant_id"], "Intervenant")
            document.intervenant_id = changes["intervenant_id"]
        for key in ("type", "description"):
            if changes.get(key) is not None:
                setattr(document, key, changes[key])

        await recalculate_document(db, document)
        await db.commit()

        logger.info("Document updated", extra={"tenant_id": tenant_id, "document_id": document.id})
        return document

    @staticmethod
    async def delete(db: AsyncSession, tenant_id: int, document_id: int) -> None:
        document = await queries.get_owned(db, Document, tenant_id, document_id, "Document")
        linked = await queries.list_document_justifications(db, tenant_id, document.id)
        validate_can_delete(len(linked), document.paid_amount)

        await db.delete(document)
        await db.commit()

        logger.info("Document deleted", extra={"tenant_id": tenant_id, "document_id": document_id})
