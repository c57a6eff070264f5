"""
Document API Endpoints.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.dependencies import get_current_tenant
from treasury_backend.app.db.session import get_db
from treasury_backend.app.domain.ledger.aggregation_service import AggregationService
from treasury_backend.app.domain.ledger.document_lifecycle import payment_percentage
from treasury_backend.app.models.document import Document
from treasury_backend.app.models.tenant import Tenant
from treasury_backend.app.schemas.document import (
    DocumentCreate, DocumentResponse, DocumentStatsResponse, DocumentUpdate
)
from treasury_backend.app.services.document_service import DocumentService

router = APIRouter(prefix="/documents", tags=["Documents"])


def _to_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        intervenant_id=document.intervenant_id,
        type=document.type,
        reference=document.reference,
        description=document.description,
        total_amount=document.total_amount,
        paid_amount=document.paid_amount,
        remaining_amount=document.remaining_amount,
        payment_percentage=payment_percentage(document.total_amount, document.paid_amount),
        status=document.status,
        issue_date=document.issue_date,
        due_date=document.due_date,
        created_at=document.created_at,
    )


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    req: DocumentCreate,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    document = await DocumentService.create(db, tenant.id, **req.model_dump())
    return _to_response(document)


@router.get("/stats", response_model=DocumentStatsResponse)
async def get_document_stats(
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Counts and remaining amounts: unpaid, overdue, due within 7 days, partially paid."""
    return await AggregationService.document_stats(db, tenant.id)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    req: DocumentUpdate,
    document_id: int = Path(...),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    document = await DocumentService.update(db, tenant.id, document_id, req.model_dump(exclude_unset=True))
    return _to_response(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: int = Path(...),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    await DocumentService.delete(db, tenant.id, document_id)
