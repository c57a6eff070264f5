"""
Document Schemas.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from treasury_backend.app.models.ledger_enums import DocumentStatus, DocumentType


class DocumentCreate(BaseModel):
    type: DocumentType
    reference: str = Field(..., max_length=100)
    total_amount: Decimal
    issue_date: date
    due_date: Optional[date] = None
    intervenant_id: Optional[int] = None
    description: Optional[str] = None


class DocumentUpdate(BaseModel):
    """Partial update. paid/remaining/status are derived and cannot be set."""
    type: Optional[DocumentType] = None
    reference: Optional[str] = Field(default=None, max_length=100)
    total_amount: Optional[Decimal] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    intervenant_id: Optional[int] = None
    description: Optional[str] = None


class DocumentResponse(BaseModel):
    id: int
    intervenant_id: Optional[int]
    type: DocumentType
    reference: str
    description: Optional[str]
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    payment_percentage: Decimal
    status: DocumentStatus
    issue_date: date
    due_date: Optional[date]
    created_at: datetime


class DocumentBucketResponse(BaseModel):
    count: int
    amount: Decimal
    
    class Config:
        from_attributes = True


class DocumentStatsResponse(BaseModel):
    unpaid: DocumentBucketResponse
    overdue: DocumentBucketResponse
    due_within_7_days: DocumentBucketResponse
    partially_paid: DocumentBucketResponse
    
    class Config:
        from_attributes = True
