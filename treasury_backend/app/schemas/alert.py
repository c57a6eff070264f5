"""
Alert Schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List
from treasury_backend.app.models.ledger_enums import AlertSeverity, AlertType


class AlertResponse(BaseModel):
    id: int
    type: AlertType
    title: str
    message: str
    severity: AlertSeverity
    related_id: Optional[int]
    dismissed: bool
    dismissed_at: Optional[datetime]
    created_at: datetime
    
    class Config:
        from_attributes = True


class AlertCheckResponse(BaseModel):
    """Alerts created by an on-demand evaluation."""
    created: int
    alerts: List[AlertResponse]
