"""
Advance Schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import Optional
from treasury_backend.app.models.ledger_enums import AdvanceStatus


class AdvanceCreate(BaseModel):
    intervenant_id: int
    amount: Decimal
    date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    note: Optional[str] = None


class ReimbursementCreate(BaseModel):
    amount: Decimal
    date: Optional[datetime] = None
    note: Optional[str] = None


class AdvanceResponse(BaseModel):
    id: int
    intervenant_id: int
    amount: Decimal
    due_date: Optional[datetime]
    status: AdvanceStatus
    note: Optional[str]
    created_at: datetime
    
    class Config:
        from_attributes = True


class AdvanceSummaryResponse(BaseModel):
    total_advances: Decimal
    total_reimbursed: Decimal
    total_outstanding: Decimal
    overdue_count: int
    overdue_outstanding: Decimal
    
    class Config:
        from_attributes = True
