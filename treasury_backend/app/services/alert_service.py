"""
Alert Service.

Read and dismiss alerts. Dismissal is the only way an alert leaves the
active set; once dismissed, the evaluator may raise the same alert again.
"""

from typing import List

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.domain.ledger import queries
from treasury_backend.app.models.alert import Alert


class AlertService:

    @staticmethod
    async def list_alerts(db: AsyncSession, tenant_id: int, include_dismissed: bool = False) -> List[Alert]:
        query = select(Alert).where(Alert.tenant_id == tenant_id)
        if not include_dismissed:
            query = query.where(Alert.dismissed == False)
        result = await db.execute(query.order_by(desc(Alert.created_at), desc(Alert.id)))
        return list(result.scalars().all())

    @staticmethod
    async def dismiss(db: AsyncSession, tenant_id: int, alert_id: int) -> Alert:
        """Mark an alert dismissed. Dismissing twice is a no-op."""
        alert = await queries.get_owned(db, Alert, tenant_id, alert_id, "Alert")
        if not alert.dismissed:
            alert.dismissed = True
            alert.dismissed_at = utcnow()
            await db.commit()
        return alert
