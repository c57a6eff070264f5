"""
Document database model.

External payment obligation (invoice, payslip, purchase order, contract).
"""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Enum, Numeric, UniqueConstraint
from sqlalchemy.sql import func
from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.db.session import Base
from treasury_backend.app.models.ledger_enums import DocumentType, DocumentStatus


class Document(Base):
    """
    Document model.
    
    Invariants:
    - reference is unique per tenant
    - remaining_amount = total_amount - paid_amount
    - paid_amount = sum of linked justification amounts (recalculated, never incremented)
    """
    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint('tenant_id', 'reference', name='uq_documents_tenant_reference'),
    )
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey('tenants.id'), nullable=False, index=True)
    intervenant_id = Column(Integer, ForeignKey('intervenants.id'), nullable=True, index=True)
    
    type = Column(Enum(DocumentType), nullable=False)
    reference = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    
    # Financials
    total_amount = Column(Numeric(14, 2), nullable=False)
    paid_amount = Column(Numeric(14, 2), default=0, nullable=False)
    remaining_amount = Column(Numeric(14, 2), nullable=False)
    
    status = Column(Enum(DocumentStatus), default=DocumentStatus.UNPAID, nullable=False, index=True)
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Document(id={self.id}, reference='{self.reference}', status='{self.status.value}')>"
