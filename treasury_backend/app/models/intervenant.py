"""
Intervenant database model.

An external party (client, supplier, partner, employee...) money moves to or from.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.db.session import Base
from treasury_backend.app.models.ledger_enums import IntervenantType


class Intervenant(Base):
    """
    Intervenant model.
    
    Inactive intervenants keep their history but are excluded from balance
    reports and cannot receive new advances or disbursements.
    """
    __tablename__ = "intervenants"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey('tenants.id'), nullable=False, index=True)
    
    name = Column(String(200), nullable=False)
    type = Column(Enum(IntervenantType), default=IntervenantType.OTHER, nullable=False, index=True)
    
    # Status (soft delete)
    active = Column(Boolean, default=True, nullable=False, index=True)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Intervenant(id={self.id}, name='{self.name}', type='{self.type.value}')>"
