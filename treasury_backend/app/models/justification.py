"""
Justification database model.

Records how disbursed funds were spent. Does not move cash.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, Numeric
from sqlalchemy.sql import func
from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.db.session import Base
from treasury_backend.app.models.ledger_enums import JustificationCategory


class Justification(Base):
    """
    Justification model.
    
    Optionally linked to a Document it pays down; the document's paid amount
    is the sum of its linked justifications.
    """
    __tablename__ = "justifications"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey('tenants.id'), nullable=False, index=True)
    disbursement_id = Column(Integer, ForeignKey('disbursements.id'), nullable=False, index=True)
    document_id = Column(Integer, ForeignKey('documents.id'), nullable=True, index=True)
    
    date = Column(DateTime(timezone=True), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    category = Column(Enum(JustificationCategory), nullable=False)
    reference = Column(String(255), nullable=True)
    note = Column(Text, nullable=True)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Justification(id={self.id}, disbursement={self.disbursement_id}, amount={self.amount})>"
