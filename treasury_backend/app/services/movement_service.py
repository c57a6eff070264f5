"""
Cash movement write paths.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.clock import as_naive_utc, utcnow
from treasury_backend.app.core.exceptions import ValidationFailedError, ValidationReason
from treasury_backend.app.domain.ledger import queries
from treasury_backend.app.domain.ledger.money import ZERO, to_money
from treasury_backend.app.models.intervenant import Intervenant
from treasury_backend.app.models.ledger_enums import IntervenantType, Modality, MovementKind
from treasury_backend.app.models.movement import Movement
from treasury_backend.app.services.cache import CashBalanceCache

logger = logging.getLogger("treasury.movements")

DEFAULT_CASH_INTERVENANT = "Cash"


class MovementService:

    @staticmethod
    async def default_cash_intervenant(db: AsyncSession, tenant_id: int) -> Intervenant:
        """The tenant's own cash box, created on first use."""
        result = await db.execute(
            select(Intervenant).where(
                Intervenant.tenant_id == tenant_id,
                Intervenant.type == IntervenantType.CASH_BANK,
                Intervenant.name == DEFAULT_CASH_INTERVENANT,
            ).limit(1)
        )
        intervenant = result.scalar_one_or_none()
        if intervenant is None:
            intervenant = Intervenant(
                tenant_id=tenant_id,
                name=DEFAULT_CASH_INTERVENANT,
                type=IntervenantType.CASH_BANK,
                active=True,
            )
            db.add(intervenant)
            await db.flush()
        return intervenant

    @staticmethod
    async def record_cash_inflow(
        db: AsyncSession,
        tenant_id: int,
        amount,
        category: str,
        date: Optional[datetime] = None,
        intervenant_id: Optional[int] = None,
        reference: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Movement:
        """
        Record money coming into the cash box.

        Without an intervenant, the movement is booked against the tenant's
        default cash intervenant.
        """
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValidationFailedError(
                ValidationReason.INVALID_AMOUNT, "Amount must be greater than zero", field="amount"
            )

        if intervenant_id is not None:
            intervenant = await queries.get_active_intervenant(db, tenant_id, intervenant_id)
        else:
            intervenant = await MovementService.default_cash_intervenant(db, tenant_id)

        movement = Movement(
            tenant_id=tenant_id,
            intervenant_id=intervenant.id,
            date=as_naive_utc(date) if date else utcnow(),
            kind=MovementKind.INFLOW,
            amount=amount,
            modality=Modality.CASH,
            category=category,
            reference=reference,
            note=note,
        )
        db.add(movement)
        await db.commit()
        await CashBalanceCache.invalidate(tenant_id)

        logger.info(
            "Cash inflow recorded",
            extra={"tenant_id": tenant_id, "movement_id": movement.id, "amount": str(amount)},
        )
        return movement
