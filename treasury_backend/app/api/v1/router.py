"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from treasury_backend.app.api.v1.endpoints import (
    advances, alerts, balances, cash, disbursements, documents
)

router = APIRouter()

# Read side: balances, cash dashboard, alerts
router.include_router(balances.router)
router.include_router(cash.router)
router.include_router(alerts.router)

# Write paths
router.include_router(disbursements.router)
router.include_router(advances.router)
router.include_router(documents.router)
