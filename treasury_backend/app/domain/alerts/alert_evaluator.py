"""
Alert Evaluator (Domain Logic).

Evaluates a tenant's thresholds against current ledger state and persists
new alerts, suppressing duplicates of alerts that are still active.

Rules:
1. DEBT_THRESHOLD: party balance above the debt threshold (per party)
2. LOW_CASH: theoretical cash balance below the minimum (tenant-wide)
3. OVERDUE_DISBURSEMENT: unjustified disbursement past its due date (per disbursement)
4. LONG_OPEN_DISBURSEMENT: unjustified disbursement older than 30 days (per disbursement)
5. HIGH_OUTSTANDING_DISBURSEMENTS: total outstanding above the threshold (tenant-wide)
6. RECONCILIATION_GAP: latest reconciliation gap above the threshold (per reconciliation)

An alert's identity is (tenant, type, related entity); the absence of a related
entity is part of that identity. Alerts are never resolved automatically.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.clock import as_date, utcnow
from treasury_backend.app.domain.ledger.aggregation_service import AggregationService
from treasury_backend.app.domain.ledger.disbursement_lifecycle import (
    days_outstanding, is_disbursement_overdue, is_long_open
)
from treasury_backend.app.domain.ledger.money import ZERO, to_money
from treasury_backend.app.models.alert import Alert, related_key_for
from treasury_backend.app.models.cash_reconciliation import CashReconciliation
from treasury_backend.app.models.ledger_enums import AlertSeverity, AlertType
from treasury_backend.app.services.settings_service import EffectiveSettings, SettingsService

logger = logging.getLogger("treasury.alerts")

# Fixed rule; the per-tenant disbursement_open_days_warning does not change it
LONG_OPEN_DISBURSEMENT_DAYS = 30


@dataclass
class AlertCandidate:
    type: AlertType
    title: str
    message: str
    severity: AlertSeverity
    related_id: Optional[int] = None


def _fmt(amount, currency: str) -> str:
    return f"{to_money(amount):.2f} {currency}"


class AlertEvaluator:

    # --- Rules ---

    @staticmethod
    async def debt_threshold_candidates(
        db: AsyncSession, cfg: EffectiveSettings
    ) -> List[AlertCandidate]:
        reports = await AggregationService.all_party_balances(db, cfg.tenant_id)
        return [
            AlertCandidate(
                type=AlertType.DEBT_THRESHOLD,
                title=f"High debt: {report.intervenant_name}",
                message=f"{report.intervenant_name} owes {_fmt(report.balance, cfg.currency)} to the company",
                severity=AlertSeverity.WARNING,
                related_id=report.intervenant_id,
            )
            for report in reports
            if report.balance > cfg.debt_threshold
        ]

    @staticmethod
    async def low_cash_candidates(db: AsyncSession, cfg: EffectiveSettings) -> List[AlertCandidate]:
        # Always read from storage; a cached value may predate direct writes
        balance = await AggregationService.current_cash_balance(db, cfg.tenant_id, use_cache=False)
        if balance >= cfg.min_cash_balance:
            return []
        return [AlertCandidate(
            type=AlertType.LOW_CASH,
            title="Low cash balance",
            message=(
                f"Cash balance ({_fmt(balance, cfg.currency)}) is below the minimum "
                f"({_fmt(cfg.min_cash_balance, cfg.currency)})"
            ),
            severity=AlertSeverity.ERROR,
        )]

    @staticmethod
    async def disbursement_candidates(
        db: AsyncSession, cfg: EffectiveSettings, now: datetime
    ) -> List[AlertCandidate]:
        """OVERDUE_DISBURSEMENT, LONG_OPEN_DISBURSEMENT and HIGH_OUTSTANDING_DISBURSEMENTS."""
        outstanding = await AggregationService.outstanding_disbursements(db, cfg.tenant_id)
        candidates = []

        for d in outstanding:
            if is_disbursement_overdue(d, now):
                candidates.append(AlertCandidate(
                    type=AlertType.OVERDUE_DISBURSEMENT,
                    title="Overdue disbursement",
                    message=(
                        f"Disbursement #{d.id} has {_fmt(d.remaining_amount, cfg.currency)} "
                        f"left to justify, due on {as_date(d.due_date).isoformat()}"
                    ),
                    severity=AlertSeverity.WARNING,
                    related_id=d.id,
                ))

        for d in outstanding:
            if is_long_open(d, LONG_OPEN_DISBURSEMENT_DAYS, now):
                candidates.append(AlertCandidate(
                    type=AlertType.LONG_OPEN_DISBURSEMENT,
                    title="Long-open disbursement",
                    message=(
                        f"Disbursement #{d.id} has been open for {days_outstanding(d, now)} days "
                        f"with {_fmt(d.remaining_amount, cfg.currency)} left to justify"
                    ),
                    severity=AlertSeverity.WARNING,
                    related_id=d.id,
                ))

        total_outstanding = sum((to_money(d.remaining_amount) for d in outstanding), ZERO)
        if total_outstanding > cfg.disbursement_outstanding_threshold:
            candidates.append(AlertCandidate(
                type=AlertType.HIGH_OUTSTANDING_DISBURSEMENTS,
                title="High outstanding disbursements",
                message=(
                    f"Outstanding disbursements total {_fmt(total_outstanding, cfg.currency)}, "
                    f"above the threshold of {_fmt(cfg.disbursement_outstanding_threshold, cfg.currency)}"
                ),
                severity=AlertSeverity.WARNING,
            ))

        return candidates

    @staticmethod
    async def reconciliation_gap_candidates(db: AsyncSession, cfg: EffectiveSettings) -> List[AlertCandidate]:
        result = await db.execute(
            select(CashReconciliation)
            .where(CashReconciliation.tenant_id == cfg.tenant_id)
            .order_by(desc(CashReconciliation.date), desc(CashReconciliation.id))
            .limit(1)
        )
        latest = result.scalar_one_or_none()
        if latest is None or abs(to_money(latest.gap)) <= cfg.reconciliation_gap_threshold:
            return []
        return [AlertCandidate(
            type=AlertType.RECONCILIATION_GAP,
            title="Significant cash gap",
            message=(
                f"Gap of {_fmt(abs(to_money(latest.gap)), cfg.currency)} found in the "
                f"reconciliation of {as_date(latest.date).isoformat()}"
            ),
            severity=AlertSeverity.ERROR,
            related_id=latest.id,
        )]

    # --- Persistence ---

    @staticmethod
    async def find_active(db: AsyncSession, tenant_id: int, alert_type: AlertType, related_id: Optional[int]) -> Optional[Alert]:
        """Undismissed alert with the same identity, if any."""
        result = await db.execute(
            select(Alert).where(
                Alert.tenant_id == tenant_id,
                Alert.type == alert_type,
                Alert.related_key == related_key_for(related_id),
                Alert.dismissed == False,
            ).limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def persist_candidate(db: AsyncSession, tenant_id: int, candidate: AlertCandidate) -> Optional[Alert]:
        """
        Insert the candidate unless an identical active alert exists.

        The lookup handles the common case; the partial unique index on
        (tenant_id, type, related_key) catches a concurrent evaluation that
        inserted the same alert in between. Its conflict is a skip, not an error.
        """
        existing = await AlertEvaluator.find_active(db, tenant_id, candidate.type, candidate.related_id)
        if existing is not None:
            logger.debug(
                "Alert already active",
                extra={"tenant_id": tenant_id, "type": candidate.type.value, "alert_id": existing.id},
            )
            return None

        alert = Alert(
            tenant_id=tenant_id,
            type=candidate.type,
            title=candidate.title,
            message=candidate.message,
            severity=candidate.severity,
            related_id=candidate.related_id,
            related_key=related_key_for(candidate.related_id),
            dismissed=False,
        )
        try:
            async with db.begin_nested():
                db.add(alert)
                await db.flush()
        except IntegrityError:
            logger.debug(
                "Alert inserted concurrently, skipping",
                extra={"tenant_id": tenant_id, "type": candidate.type.value},
            )
            return None
        return alert

    # --- Entry point ---

    @staticmethod
    async def evaluate_alerts(db: AsyncSession, tenant_id: int, now: Optional[datetime] = None) -> List[Alert]:
        """
        Evaluate all six rules for a tenant and persist the new alerts.

        Missing or disabled settings short-circuit before any ledger state is read.
        Storage errors propagate to the caller.

        Returns:
            Alerts created by this evaluation (empty when nothing new breached).
        """
        cfg = await SettingsService.load_effective(db, tenant_id)
        if cfg is None or not cfg.alerts_enabled:
            logger.info("Alert evaluation skipped", extra={"tenant_id": tenant_id, "reason": "disabled"})
            return []

        now = now or utcnow()

        candidates: List[AlertCandidate] = []
        candidates += await AlertEvaluator.debt_threshold_candidates(db, cfg)
        candidates += await AlertEvaluator.low_cash_candidates(db, cfg)
        candidates += await AlertEvaluator.disbursement_candidates(db, cfg, now)
        candidates += await AlertEvaluator.reconciliation_gap_candidates(db, cfg)

        created = []
        for candidate in candidates:
            alert = await AlertEvaluator.persist_candidate(db, tenant_id, candidate)
            if alert is not None:
                created.append(alert)

        await db.commit()

        logger.info(
            "Alert evaluation complete",
            extra={"tenant_id": tenant_id, "candidates": len(candidates), "created": len(created)},
        )
        return created
