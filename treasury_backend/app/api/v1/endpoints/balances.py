"""
Party Balance API Endpoints.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.dependencies import get_current_tenant
from treasury_backend.app.db.session import get_db
from treasury_backend.app.domain.ledger.aggregation_service import AggregationService
from treasury_backend.app.models.ledger_enums import IntervenantType
from treasury_backend.app.models.tenant import Tenant
from treasury_backend.app.schemas.ledger import PartyBalanceResponse

router = APIRouter(prefix="/balances", tags=["Balances"])


@router.get("", response_model=List[PartyBalanceResponse])
async def list_party_balances(
    party_type: Optional[IntervenantType] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Balances of all active intervenants, highest debt first."""
    return await AggregationService.all_party_balances(
        db, tenant.id, party_type=party_type, date_from=date_from, date_to=date_to
    )


@router.get("/{intervenant_id}", response_model=PartyBalanceResponse)
async def get_party_balance(
    intervenant_id: int = Path(...),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    return await AggregationService.party_balance(db, tenant.id, intervenant_id)
