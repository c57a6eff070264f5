"""
Advance write paths.

An advance is repaid in cash; each reimbursement is an INFLOW cash movement
back-referencing the advance, and its status is recalculated from all of them.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.clock import as_naive_utc, utcnow
from treasury_backend.app.core.exceptions import ValidationFailedError, ValidationReason
from treasury_backend.app.domain.ledger import queries
from treasury_backend.app.domain.ledger.advance_lifecycle import advance_remaining
from treasury_backend.app.domain.ledger.disbursement_lifecycle import validate_amount_within
from treasury_backend.app.domain.ledger.money import ZERO, to_money
from treasury_backend.app.domain.ledger.recalculation import recalculate_advance
from treasury_backend.app.models.advance import Advance
from treasury_backend.app.models.ledger_enums import AdvanceStatus, Modality, MovementKind
from treasury_backend.app.models.movement import Movement
from treasury_backend.app.services.cache import CashBalanceCache
from treasury_backend.app.services.settings_service import DEFAULT_ADVANCE_DUE_DAYS, SettingsService

logger = logging.getLogger("treasury.advances")


class AdvanceService:

    @staticmethod
    async def default_due_date(db: AsyncSession, tenant_id: int, granted_on: datetime) -> Optional[datetime]:
        """granted_on + default_advance_due_days, or None when the setting is 0."""
        cfg = await SettingsService.load_effective(db, tenant_id)
        due_days = cfg.default_advance_due_days if cfg is not None else DEFAULT_ADVANCE_DUE_DAYS
        if due_days <= 0:
            return None
        return granted_on + timedelta(days=due_days)

    @staticmethod
    async def grant(
        db: AsyncSession,
        tenant_id: int,
        intervenant_id: int,
        amount,
        date: Optional[datetime] = None,
        due_date: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> Advance:
        intervenant = await queries.get_active_intervenant(db, tenant_id, intervenant_id)
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValidationFailedError(
                ValidationReason.INVALID_AMOUNT, "Amount must be greater than zero", field="amount"
            )

        granted_on = as_naive_utc(date) if date else utcnow()
        if due_date is None:
            due_date = await AdvanceService.default_due_date(db, tenant_id, granted_on)

        advance = Advance(
            tenant_id=tenant_id,
            intervenant_id=intervenant.id,
            amount=amount,
            due_date=as_naive_utc(due_date) if due_date else None,
            status=AdvanceStatus.ONGOING,
            note=note,
        )
        db.add(advance)
        await db.flush()

        db.add(Movement(
            tenant_id=tenant_id,
            intervenant_id=intervenant.id,
            date=granted_on,
            kind=MovementKind.OUTFLOW,
            amount=amount,
            modality=Modality.CASH,
            category="ADVANCE",
            note=note,
            is_advance=True,
            advance_id=advance.id,
        ))
        await db.commit()
        await CashBalanceCache.invalidate(tenant_id)

        logger.info(
            "Advance granted",
            extra={"tenant_id": tenant_id, "advance_id": advance.id, "amount": str(amount)},
        )
        return advance

    @staticmethod
    async def reimburse(
        db: AsyncSession,
        tenant_id: int,
        advance_id: int,
        amount,
        date: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> Advance:
        advance = await queries.get_owned(db, Advance, tenant_id, advance_id, "Advance")
        reimbursements = await queries.list_advance_reimbursements(db, tenant_id, advance.id)
        amount = validate_amount_within(amount, advance_remaining(advance.amount, reimbursements))

        db.add(Movement(
            tenant_id=tenant_id,
            intervenant_id=advance.intervenant_id,
            date=as_naive_utc(date) if date else utcnow(),
            kind=MovementKind.INFLOW,
            amount=amount,
            modality=Modality.CASH,
            category="ADVANCE_REIMBURSEMENT",
            note=note,
            advance_id=advance.id,
        ))

        await recalculate_advance(db, advance)
        await db.commit()
        await CashBalanceCache.invalidate(tenant_id)

        logger.info(
            "Advance reimbursed",
            extra={"tenant_id": tenant_id, "advance_id": advance.id, "status": advance.status.value},
        )
        return advance
