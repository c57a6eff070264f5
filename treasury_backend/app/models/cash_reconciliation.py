"""
Cash reconciliation database model.

A physical cash count compared with the theoretical balance at that time.
"""

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Numeric
from sqlalchemy.sql import func
from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.db.session import Base


class CashReconciliation(Base):
    """gap = physical_count - theoretical_balance"""
    __tablename__ = "cash_reconciliations"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey('tenants.id'), nullable=False, index=True)
    
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    theoretical_balance = Column(Numeric(14, 2), nullable=False)
    physical_count = Column(Numeric(14, 2), nullable=False)
    gap = Column(Numeric(14, 2), nullable=False)
    note = Column(Text, nullable=True)
    
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<CashReconciliation(id={self.id}, gap={self.gap})>"
