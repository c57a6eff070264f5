"""
Disbursement API Endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.dependencies import get_current_tenant
from treasury_backend.app.db.session import get_db
from treasury_backend.app.domain.ledger.aggregation_service import AggregationService
from treasury_backend.app.models.ledger_enums import DisbursementStatus
from treasury_backend.app.models.tenant import Tenant
from treasury_backend.app.schemas.disbursement import (
    DisbursementCreate, DisbursementResponse, DisbursementSummaryResponse,
    JustificationCreate, JustificationResponse, JustificationUpdate, ReturnToCashCreate,
)
from treasury_backend.app.schemas.ledger import MovementResponse
from treasury_backend.app.services.disbursement_service import DisbursementService

router = APIRouter(prefix="/disbursements", tags=["Disbursements"])


@router.post("", response_model=DisbursementResponse, status_code=status.HTTP_201_CREATED)
async def create_disbursement(
    req: DisbursementCreate,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    return await DisbursementService.grant(
        db,
        tenant.id,
        intervenant_id=req.intervenant_id,
        amount=req.amount,
        category=req.category,
        date=req.date,
        due_date=req.due_date,
        note=req.note,
    )


@router.get("/summary", response_model=DisbursementSummaryResponse)
async def get_disbursement_summary(
    status_filter: Optional[DisbursementStatus] = Query(None, alias="status"),
    intervenant_id: Optional[int] = Query(None),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    return await AggregationService.disbursement_summary(
        db, tenant.id, status=status_filter, intervenant_id=intervenant_id
    )


@router.post(
    "/{disbursement_id}/justifications",
    response_model=JustificationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_justification(
    req: JustificationCreate,
    disbursement_id: int = Path(...),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    return await DisbursementService.add_justification(
        db,
        tenant.id,
        disbursement_id,
        amount=req.amount,
        category=req.category,
        date=req.date,
        document_id=req.document_id,
        reference=req.reference,
        note=req.note,
    )


@router.put("/{disbursement_id}/justifications/{justification_id}", response_model=JustificationResponse)
async def update_justification(
    req: JustificationUpdate,
    disbursement_id: int = Path(...),
    justification_id: int = Path(...),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    return await DisbursementService.update_justification(
        db, tenant.id, disbursement_id, justification_id, req.model_dump(exclude_unset=True)
    )


@router.delete("/{disbursement_id}/justifications/{justification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_justification(
    disbursement_id: int = Path(...),
    justification_id: int = Path(...),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    await DisbursementService.delete_justification(db, tenant.id, disbursement_id, justification_id)


@router.post(
    "/{disbursement_id}/return",
    response_model=MovementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def return_to_cash(
    req: ReturnToCashCreate,
    disbursement_id: int = Path(...),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Bring unspent funds back to the cash box."""
    return await DisbursementService.return_to_cash(
        db, tenant.id, disbursement_id, amount=req.amount, date=req.date, note=req.note
    )
