"""
Ledger Schemas: party balances and cash dashboard.
"""

from pydantic import BaseModel
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from treasury_backend.app.models.ledger_enums import IntervenantType, Modality, MovementKind


class PartyBalanceResponse(BaseModel):
    """Balance report for one intervenant. Positive balance = the party owes the company."""
    intervenant_id: int
    intervenant_name: str
    intervenant_type: IntervenantType
    total_entries: Decimal
    total_exits: Decimal
    adjusted_exits: Decimal
    balance: Decimal
    movement_count: int
    last_movement_date: Optional[datetime]
    
    class Config:
        from_attributes = True


class CashBalanceResponse(BaseModel):
    balance: Decimal
    currency: str


class TrendPointResponse(BaseModel):
    date: date
    balance: Decimal
    
    class Config:
        from_attributes = True


class CashSummaryResponse(BaseModel):
    inflows: Decimal
    outflows: Decimal
    net: Decimal
    count: int
    
    class Config:
        from_attributes = True


class MovementResponse(BaseModel):
    id: int
    intervenant_id: int
    date: datetime
    kind: MovementKind
    amount: Decimal
    modality: Optional[Modality]
    category: Optional[str]
    reference: Optional[str]
    note: Optional[str]
    is_advance: bool
    is_disbursement: bool
    advance_id: Optional[int]
    disbursement_id: Optional[int]
    
    class Config:
        from_attributes = True


class CashDashboardResponse(BaseModel):
    balance: Decimal
    currency: str
    trend: List[TrendPointResponse]
    today: CashSummaryResponse
    recent_movements: List[MovementResponse]


class CashInflowCreate(BaseModel):
    """Manual cash inflow; booked against the default cash intervenant when none is given."""
    amount: Decimal
    category: str
    date: Optional[datetime] = None
    intervenant_id: Optional[int] = None
    reference: Optional[str] = None
    note: Optional[str] = None
