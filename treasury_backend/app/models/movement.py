"""
Movement database model.

Atomic cash-affecting event between the company and an intervenant.
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Enum, Numeric
from sqlalchemy.sql import func
from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.db.session import Base
from treasury_backend.app.models.ledger_enums import MovementKind, Modality


class Movement(Base):
    """
    Movement model.
    
    Created by manual entry, advance/disbursement grants, reimbursements and
    returns to cash. System movements (is_advance / is_disbursement, or any
    movement back-referencing an advance or disbursement) are never edited.
    
    Back-references:
    - advance_id: the grant (OUTFLOW, is_advance) or a reimbursement (INFLOW)
    - disbursement_id: the grant (OUTFLOW, is_disbursement) or a return to cash (INFLOW)
    """
    __tablename__ = "movements"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey('tenants.id'), nullable=False, index=True)
    intervenant_id = Column(Integer, ForeignKey('intervenants.id'), nullable=False, index=True)
    
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    kind = Column(Enum(MovementKind), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    modality = Column(Enum(Modality), nullable=True, index=True)
    category = Column(String(100), nullable=True)
    reference = Column(String(255), nullable=True)
    note = Column(Text, nullable=True)
    
    # System flags
    is_advance = Column(Boolean, default=False, nullable=False)
    is_disbursement = Column(Boolean, default=False, nullable=False)
    advance_id = Column(Integer, ForeignKey('advances.id'), nullable=True, index=True)
    disbursement_id = Column(Integer, ForeignKey('disbursements.id'), nullable=True, index=True)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Movement(id={self.id}, kind='{self.kind.value}', amount={self.amount})>"
