"""
Alert database model.

Threshold breach notifications produced by the alert evaluator.
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Enum, Index
from sqlalchemy.sql import func
from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.db.session import Base
from treasury_backend.app.models.ledger_enums import AlertType, AlertSeverity


def related_key_for(related_id) -> str:
    """Dedup key component; tenant-wide alerts use the empty string."""
    return "" if related_id is None else str(related_id)


class Alert(Base):
    """
    Alert model.
    
    Identity for deduplication is (tenant_id, type, related_key) among
    undismissed alerts. Alerts are never auto-resolved; only dismissal clears them.
    """
    __tablename__ = "alerts"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey('tenants.id'), nullable=False, index=True)
    
    # Content
    type = Column(Enum(AlertType), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    severity = Column(Enum(AlertSeverity), default=AlertSeverity.WARNING, nullable=False)
    
    # Related entity (intervenant, disbursement or reconciliation id)
    related_id = Column(Integer, nullable=True)
    related_key = Column(String(64), default="", nullable=False)
    
    # State
    dismissed = Column(Boolean, default=False, nullable=False, index=True)
    dismissed_at = Column(DateTime(timezone=True), nullable=True)
    
    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Alert(id={self.id}, type='{self.type.value}', related={self.related_key!r})>"


# At most one undismissed alert per (tenant, type, related entity)
Index(
    "uq_alerts_active_identity",
    Alert.tenant_id,
    Alert.type,
    Alert.related_key,
    unique=True,
    postgresql_where=(Alert.dismissed == False),
    sqlite_where=(Alert.dismissed == False),
)
