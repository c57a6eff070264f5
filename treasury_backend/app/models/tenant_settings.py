"""
Tenant settings database model.

Thresholds and toggles read by the alert evaluator.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Numeric
from sqlalchemy.sql import func
from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.db.session import Base


class TenantSettings(Base):
    """
    Per-tenant settings.
    
    disbursement_outstanding_threshold may be NULL; the effective default is
    resolved once when settings are loaded.
    """
    __tablename__ = "tenant_settings"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey('tenants.id'), unique=True, nullable=False, index=True)
    
    # Thresholds
    debt_threshold = Column(Numeric(14, 2), default=10000, nullable=False)
    min_cash_balance = Column(Numeric(14, 2), default=5000, nullable=False)
    reconciliation_gap_threshold = Column(Numeric(14, 2), default=500, nullable=False)
    disbursement_outstanding_threshold = Column(Numeric(14, 2), nullable=True)
    default_advance_due_days = Column(Integer, default=30, nullable=False)
    disbursement_open_days_warning = Column(Integer, default=30, nullable=False)
    
    # Toggles and presentation
    alerts_enabled = Column(Boolean, default=True, nullable=False)
    currency = Column(String(10), default="TND", nullable=False)
    company_name = Column(String(200), nullable=True)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<TenantSettings(tenant={self.tenant_id}, alerts_enabled={self.alerts_enabled})>"
