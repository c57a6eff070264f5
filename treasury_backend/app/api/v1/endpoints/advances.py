"""
Advance API Endpoints.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.dependencies import get_current_tenant
from treasury_backend.app.db.session import get_db
from treasury_backend.app.domain.ledger.aggregation_service import AggregationService
from treasury_backend.app.models.tenant import Tenant
from treasury_backend.app.schemas.advance import (
    AdvanceCreate, AdvanceResponse, AdvanceSummaryResponse, ReimbursementCreate
)
from treasury_backend.app.services.advance_service import AdvanceService

router = APIRouter(prefix="/advances", tags=["Advances"])


@router.post("", response_model=AdvanceResponse, status_code=status.HTTP_201_CREATED)
async def create_advance(
    req: AdvanceCreate,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    return await AdvanceService.grant(
        db,
        tenant.id,
        intervenant_id=req.intervenant_id,
        amount=req.amount,
        date=req.date,
        due_date=req.due_date,
        note=req.note,
    )


@router.get("/summary", response_model=AdvanceSummaryResponse)
async def get_advance_summary(
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    return await AggregationService.advance_summary(db, tenant.id)


@router.post("/{advance_id}/reimburse", response_model=AdvanceResponse)
async def reimburse_advance(
    req: ReimbursementCreate,
    advance_id: int = Path(...),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    return await AdvanceService.reimburse(
        db, tenant.id, advance_id, amount=req.amount, date=req.date, note=req.note
    )
