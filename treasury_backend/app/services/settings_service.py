"""
Tenant settings service.

Resolves the per-tenant thresholds once, applying defaults for anything left
unset, so every alert rule reads the same values.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.config import settings as app_settings
from treasury_backend.app.domain.ledger.money import to_money
from treasury_backend.app.models.tenant_settings import TenantSettings

logger = logging.getLogger("treasury.settings")

DEFAULT_DEBT_THRESHOLD = Decimal("10000")
DEFAULT_MIN_CASH_BALANCE = Decimal("5000")
DEFAULT_RECONCILIATION_GAP_THRESHOLD = Decimal("500")
DEFAULT_ADVANCE_DUE_DAYS = 30
DEFAULT_OPEN_DAYS_WARNING = 30
DEFAULT_CURRENCY = "TND"


@dataclass(frozen=True)
class EffectiveSettings:
    """Immutable snapshot of a tenant's thresholds with defaults applied."""
    tenant_id: int
    debt_threshold: Decimal
    min_cash_balance: Decimal
    reconciliation_gap_threshold: Decimal
    disbursement_outstanding_threshold: Decimal
    default_advance_due_days: int
    # Stored and exposed but not read by the long-open rule, which uses
    # alert_evaluator.LONG_OPEN_DISBURSEMENT_DAYS.
    disbursement_open_days_warning: int
    alerts_enabled: bool
    currency: str


def _or_default(value, default):
    return default if value is None else value


def resolve(row: TenantSettings) -> EffectiveSettings:
    return EffectiveSettings(
        tenant_id=row.tenant_id,
        debt_threshold=to_money(_or_default(row.debt_threshold, DEFAULT_DEBT_THRESHOLD)),
        min_cash_balance=to_money(_or_default(row.min_cash_balance, DEFAULT_MIN_CASH_BALANCE)),
        reconciliation_gap_threshold=to_money(
            _or_default(row.reconciliation_gap_threshold, DEFAULT_RECONCILIATION_GAP_THRESHOLD)
        ),
        disbursement_outstanding_threshold=to_money(
            _or_default(row.disbursement_outstanding_threshold, app_settings.default_outstanding_threshold)
        ),
        default_advance_due_days=_or_default(row.default_advance_due_days, DEFAULT_ADVANCE_DUE_DAYS),
        disbursement_open_days_warning=_or_default(row.disbursement_open_days_warning, DEFAULT_OPEN_DAYS_WARNING),
        alerts_enabled=bool(_or_default(row.alerts_enabled, True)),
        currency=row.currency or DEFAULT_CURRENCY,
    )


class SettingsService:

    @staticmethod
    async def get_row(db: AsyncSession, tenant_id: int) -> Optional[TenantSettings]:
        result = await db.execute(
            select(TenantSettings).where(TenantSettings.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def load_effective(db: AsyncSession, tenant_id: int) -> Optional[EffectiveSettings]:
        """
        Effective settings for a tenant, or None when the tenant has no settings row.
        
        Callers treat None as "alerts disabled".
        """
        row = await SettingsService.get_row(db, tenant_id)
        if row is None:
            return None
        return resolve(row)

    @staticmethod
    async def get_or_create(db: AsyncSession, tenant_id: int) -> TenantSettings:
        """Settings row for the tenant, created with defaults if missing. Caller commits."""
        row = await SettingsService.get_row(db, tenant_id)
        if row is not None:
            return row

        row = TenantSettings(
            tenant_id=tenant_id,
            debt_threshold=DEFAULT_DEBT_THRESHOLD,
            min_cash_balance=DEFAULT_MIN_CASH_BALANCE,
            reconciliation_gap_threshold=DEFAULT_RECONCILIATION_GAP_THRESHOLD,
            default_advance_due_days=DEFAULT_ADVANCE_DUE_DAYS,
            disbursement_open_days_warning=DEFAULT_OPEN_DAYS_WARNING,
            alerts_enabled=True,
            currency=DEFAULT_CURRENCY,
        )
        db.add(row)
        await db.flush()
        logger.info("Created default settings", extra={"tenant_id": tenant_id})
        return row
