"""
Cash API Endpoints.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.dependencies import get_current_tenant
from treasury_backend.app.db.session import get_db
from treasury_backend.app.domain.ledger.aggregation_service import AggregationService
from treasury_backend.app.models.tenant import Tenant
from treasury_backend.app.schemas.ledger import (
    CashBalanceResponse, CashDashboardResponse, CashInflowCreate, MovementResponse
)
from treasury_backend.app.services.movement_service import MovementService
from treasury_backend.app.services.settings_service import DEFAULT_CURRENCY, SettingsService

router = APIRouter(prefix="/cash", tags=["Cash"])


async def _currency(db: AsyncSession, tenant_id: int) -> str:
    cfg = await SettingsService.load_effective(db, tenant_id)
    return cfg.currency if cfg is not None else DEFAULT_CURRENCY


@router.get("/balance", response_model=CashBalanceResponse)
async def get_cash_balance(
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    balance = await AggregationService.current_cash_balance(db, tenant.id)
    return CashBalanceResponse(balance=balance, currency=await _currency(db, tenant.id))


@router.get("/dashboard", response_model=CashDashboardResponse)
async def get_cash_dashboard(
    days: int = Query(30, ge=0, le=366),
    limit: int = Query(20, ge=1, le=100),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Balance, daily trend, today's totals and the latest cash movements."""
    return CashDashboardResponse(
        balance=await AggregationService.current_cash_balance(db, tenant.id),
        currency=await _currency(db, tenant.id),
        trend=await AggregationService.cash_balance_trend(db, tenant.id, days=days),
        today=await AggregationService.today_cash_summary(db, tenant.id),
        recent_movements=await AggregationService.recent_cash_movements(db, tenant.id, limit=limit),
    )


@router.post("/inflow", response_model=MovementResponse, status_code=status.HTTP_201_CREATED)
async def create_cash_inflow(
    req: CashInflowCreate,
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    return await MovementService.record_cash_inflow(
        db,
        tenant.id,
        amount=req.amount,
        category=req.category,
        date=req.date,
        intervenant_id=req.intervenant_id,
        reference=req.reference,
        note=req.note,
    )
