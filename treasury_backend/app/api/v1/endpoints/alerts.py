"""
Alert API Endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.dependencies import get_current_tenant
from treasury_backend.app.db.session import get_db
from treasury_backend.app.domain.alerts.alert_evaluator import AlertEvaluator
from treasury_backend.app.models.tenant import Tenant
from treasury_backend.app.schemas.alert import AlertCheckResponse, AlertResponse
from treasury_backend.app.services.alert_service import AlertService

router = APIRouter(prefix="/alerts", tags=["Alerts"])


@router.get("", response_model=List[AlertResponse])
async def list_alerts(
    include_dismissed: bool = Query(False),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    return await AlertService.list_alerts(db, tenant.id, include_dismissed=include_dismissed)


@router.post("/check", response_model=AlertCheckResponse)
async def check_alerts(
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    """Evaluate all alert rules now and return the alerts that were created."""
    created = await AlertEvaluator.evaluate_alerts(db, tenant.id)
    return AlertCheckResponse(
        created=len(created),
        alerts=[AlertResponse.model_validate(alert) for alert in created],
    )


@router.patch("/{alert_id}/dismiss", response_model=AlertResponse)
async def dismiss_alert(
    alert_id: int = Path(...),
    tenant: Tenant = Depends(get_current_tenant),
    db: AsyncSession = Depends(get_db)
):
    return await AlertService.dismiss(db, tenant.id, alert_id)
