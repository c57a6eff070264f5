"""
Advance database model.

Funds granted to an intervenant and expected to be repaid in cash.
"""

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Enum, Numeric
from sqlalchemy.sql import func
from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.db.session import Base
from treasury_backend.app.models.ledger_enums import AdvanceStatus


class Advance(Base):
    """
    Advance model.
    
    Reimbursements are INFLOW movements carrying this advance's id.
    `status` is derived and recalculated on every reimbursement.
    """
    __tablename__ = "advances"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey('tenants.id'), nullable=False, index=True)
    intervenant_id = Column(Integer, ForeignKey('intervenants.id'), nullable=False, index=True)
    
    amount = Column(Numeric(14, 2), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(Enum(AdvanceStatus), default=AdvanceStatus.ONGOING, nullable=False, index=True)
    note = Column(Text, nullable=True)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Advance(id={self.id}, status='{self.status.value}', amount={self.amount})>"
