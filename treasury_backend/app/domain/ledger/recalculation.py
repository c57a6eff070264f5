"""
Recalculation entry points.

Derived fields (disbursement remaining/status, document paid/remaining/status,
advance status) are persisted for filtering but only ever written here, from
the full current set of child rows. Callers invoke these inside the same
transaction as the mutation and commit afterwards.
"""

import logging
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.domain.ledger import queries
from treasury_backend.app.domain.ledger.advance_lifecycle import advance_remaining, advance_status
from treasury_backend.app.domain.ledger.disbursement_lifecycle import disbursement_remaining, disbursement_status
from treasury_backend.app.domain.ledger.document_lifecycle import (
    document_status, remaining_amount, sum_justification_amounts
)
from treasury_backend.app.models.advance import Advance
from treasury_backend.app.models.disbursement import Disbursement
from treasury_backend.app.models.document import Document

logger = logging.getLogger("treasury.recalculation")


async def recalculate_disbursement(db: AsyncSession, disbursement: Disbursement) -> Disbursement:
    """Recompute remaining_amount and status from all justifications and returns."""
    # Pending inserts/deletes must be visible to the child queries
    await db.flush()
    
    justifications = await queries.list_disbursement_justifications(db, disbursement.tenant_id, disbursement.id)
    returns = await queries.list_disbursement_returns(db, disbursement.tenant_id, disbursement.id)
    
    remaining = disbursement_remaining(disbursement.initial_amount, justifications, returns)
    disbursement.remaining_amount = remaining
    disbursement.status = disbursement_status(disbursement.initial_amount, remaining)
    await db.flush()
    
    logger.debug(
        "Disbursement recalculated",
        extra={"disbursement_id": disbursement.id, "remaining": str(remaining), "status": disbursement.status.value},
    )
    return disbursement


async def recalculate_document(db: AsyncSession, document: Document) -> Document:
    """Recompute paid_amount, remaining_amount and status from all linked justifications."""
    await db.flush()
    
    linked = await queries.list_document_justifications(db, document.tenant_id, document.id)
    
    paid = sum_justification_amounts(linked)
    document.paid_amount = paid
    document.remaining_amount = remaining_amount(document.total_amount, paid)
    document.status = document_status(document.total_amount, paid)
    await db.flush()
    
    logger.debug(
        "Document recalculated",
        extra={"document_id": document.id, "paid": str(paid), "status": document.status.value},
    )
    return document


async def recalculate_advance(db: AsyncSession, advance: Advance) -> Advance:
    """Recompute status from all reimbursements."""
    await db.flush()
    
    reimbursements = await queries.list_advance_reimbursements(db, advance.tenant_id, advance.id)
    remaining = advance_remaining(advance.amount, reimbursements)
    advance.status = advance_status(advance.amount, remaining)
    await db.flush()
    
    logger.debug(
        "Advance recalculated",
        extra={"advance_id": advance.id, "remaining": str(remaining), "status": advance.status.value},
    )
    return advance
