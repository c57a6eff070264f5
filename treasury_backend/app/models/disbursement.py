"""
Disbursement database model.

Funds handed out to be spent and justified, or partly returned to cash.
"""

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Enum, Numeric
from sqlalchemy.sql import func
from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.db.session import Base
from treasury_backend.app.models.ledger_enums import DisbursementStatus, DisbursementCategory


class Disbursement(Base):
    """
    Disbursement model.
    
    remaining_amount and status are derived, persisted for filtering, and
    only ever written by recalculate_disbursement().
    """
    __tablename__ = "disbursements"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey('tenants.id'), nullable=False, index=True)
    intervenant_id = Column(Integer, ForeignKey('intervenants.id'), nullable=False, index=True)
    
    # Financials
    initial_amount = Column(Numeric(14, 2), nullable=False)
    remaining_amount = Column(Numeric(14, 2), nullable=False)
    
    status = Column(Enum(DisbursementStatus), default=DisbursementStatus.OPEN, nullable=False, index=True)
    category = Column(Enum(DisbursementCategory), default=DisbursementCategory.OTHER, nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=True)
    note = Column(Text, nullable=True)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Disbursement(id={self.id}, status='{self.status.value}', remaining={self.remaining_amount})>"
