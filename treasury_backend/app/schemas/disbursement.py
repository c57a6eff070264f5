"""
Disbursement Schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Dict
from treasury_backend.app.models.ledger_enums import (
    DisbursementCategory, DisbursementStatus, JustificationCategory
)


class DisbursementCreate(BaseModel):
    intervenant_id: int
    amount: Decimal
    category: DisbursementCategory = DisbursementCategory.OTHER
    date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    note: Optional[str] = None


class DisbursementResponse(BaseModel):
    id: int
    intervenant_id: int
    initial_amount: Decimal
    remaining_amount: Decimal
    status: DisbursementStatus
    category: DisbursementCategory
    due_date: Optional[datetime]
    note: Optional[str]
    created_at: datetime
    
    class Config:
        from_attributes = True


class JustificationCreate(BaseModel):
    amount: Decimal
    category: JustificationCategory
    date: Optional[datetime] = None
    document_id: Optional[int] = None
    reference: Optional[str] = Field(default=None, max_length=255)
    note: Optional[str] = None


class JustificationUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""
    amount: Optional[Decimal] = None
    category: Optional[JustificationCategory] = None
    date: Optional[datetime] = None
    document_id: Optional[int] = None
    reference: Optional[str] = Field(default=None, max_length=255)
    note: Optional[str] = None


class JustificationResponse(BaseModel):
    id: int
    disbursement_id: int
    document_id: Optional[int]
    date: datetime
    amount: Decimal
    category: JustificationCategory
    reference: Optional[str]
    note: Optional[str]
    
    class Config:
        from_attributes = True


class ReturnToCashCreate(BaseModel):
    amount: Decimal
    date: Optional[datetime] = None
    note: Optional[str] = None


class CategoryBreakdownResponse(BaseModel):
    total_disbursed: Decimal
    total_justified: Decimal
    total_outstanding: Decimal
    count: int
    
    class Config:
        from_attributes = True


class DisbursementSummaryResponse(BaseModel):
    total_disbursed: Decimal
    total_justified: Decimal
    total_outstanding: Decimal
    total_count: int
    by_category: Dict[str, CategoryBreakdownResponse]
    
    class Config:
        from_attributes = True
