"""
Aggregation Service (Domain Logic).

Runs the ledger calculators against a tenant's stored records to produce
per-party balance reports and dashboard summaries.
Focused on READ-ONLY operations.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.core.config import settings
from treasury_backend.app.domain.ledger import balance_calculator, queries
from treasury_backend.app.domain.ledger.advance_lifecycle import advance_remaining, is_advance_overdue
from treasury_backend.app.domain.ledger.money import ZERO, sum_amounts, to_money
from treasury_backend.app.models.advance import Advance
from treasury_backend.app.models.disbursement import Disbursement
from treasury_backend.app.models.document import Document
from treasury_backend.app.models.intervenant import Intervenant
from treasury_backend.app.models.justification import Justification
from treasury_backend.app.models.ledger_enums import (
    DisbursementStatus, DocumentStatus, IntervenantType, MovementKind
)
from treasury_backend.app.models.movement import Movement
from treasury_backend.app.services.cache import CashBalanceCache


@dataclass
class PartyBalanceReport:
    intervenant_id: int
    intervenant_name: str
    intervenant_type: IntervenantType
    total_entries: Decimal
    total_exits: Decimal
    adjusted_exits: Decimal
    balance: Decimal
    movement_count: int
    last_movement_date: Optional[datetime] = None


@dataclass
class CategoryBreakdown:
    total_disbursed: Decimal = ZERO
    total_justified: Decimal = ZERO
    total_outstanding: Decimal = ZERO
    count: int = 0


@dataclass
class DisbursementSummary:
    total_disbursed: Decimal
    total_justified: Decimal
    total_outstanding: Decimal
    total_count: int
    by_category: Dict[str, CategoryBreakdown] = field(default_factory=dict)


@dataclass
class AdvanceSummary:
    total_advances: Decimal
    total_reimbursed: Decimal
    total_outstanding: Decimal
    overdue_count: int = 0
    overdue_outstanding: Decimal = ZERO


@dataclass
class DocumentBucket:
    count: int
    amount: Decimal


@dataclass
class DocumentStats:
    unpaid: DocumentBucket
    overdue: DocumentBucket
    due_within_7_days: DocumentBucket
    partially_paid: DocumentBucket


def _bucket(documents: List[Document]) -> DocumentBucket:
    return DocumentBucket(
        count=len(documents),
        amount=sum((to_money(d.remaining_amount) for d in documents), ZERO),
    )


class AggregationService:

    @staticmethod
    async def _document_linked_justification_total(
        db: AsyncSession,
        tenant_id: int,
        intervenant_id: int,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> Decimal:
        """
        Justifications of the party's disbursements that settle a document.

        With a date range, only disbursements whose originating outflow falls
        inside the range count, so the subtraction never exceeds exits that
        the report itself counted. Justifications recorded after `date_to`
        had not settled anything yet within the range.
        """
        query = select(Justification).join(
            Disbursement, Disbursement.id == Justification.disbursement_id
        ).join(
            Movement,
            (Movement.disbursement_id == Disbursement.id) & (Movement.is_disbursement == True),
        ).where(
            Justification.tenant_id == tenant_id,
            Disbursement.tenant_id == tenant_id,
            Disbursement.intervenant_id == intervenant_id,
            Movement.tenant_id == tenant_id,
            Justification.document_id.isnot(None),
        )
        if date_from is not None:
            query = query.where(Movement.date >= date_from)
        if date_to is not None:
            query = query.where(Movement.date <= date_to, Justification.date <= date_to)

        result = await db.execute(query)
        return sum_amounts(result.scalars().all())

    @staticmethod
    async def build_party_report(
        db: AsyncSession,
        tenant_id: int,
        intervenant: Intervenant,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> PartyBalanceReport:
        """
        Balance report for one intervenant.

        Outflows later matched to a document through a disbursement justification
        (salary paid, invoice settled) are settlements, not debt, so they are
        removed from the exits before the balance is taken:
            adjusted_exits = total_exits - document-linked justifications
            balance = adjusted_exits - total_entries
        """
        movements = await queries.list_movements(
            db, tenant_id, intervenant_id=intervenant.id, date_from=date_from, date_to=date_to
        )

        total_entries = sum_amounts(m for m in movements if m.kind == MovementKind.INFLOW)
        total_exits = sum_amounts(m for m in movements if m.kind == MovementKind.OUTFLOW)
        settled = await AggregationService._document_linked_justification_total(
            db, tenant_id, intervenant.id, date_from, date_to
        )
        adjusted_exits = total_exits - min(settled, total_exits)

        return PartyBalanceReport(
            intervenant_id=intervenant.id,
            intervenant_name=intervenant.name,
            intervenant_type=intervenant.type,
            total_entries=total_entries,
            total_exits=total_exits,
            adjusted_exits=adjusted_exits,
            balance=adjusted_exits - total_entries,
            movement_count=len(movements),
            last_movement_date=balance_calculator.last_movement_date(movements),
        )

    @staticmethod
    async def all_party_balances(
        db: AsyncSession,
        tenant_id: int,
        party_type: Optional[IntervenantType] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> List[PartyBalanceReport]:
        """Reports for every active intervenant, highest debt first."""
        query = select(Intervenant).where(
            Intervenant.tenant_id == tenant_id,
            Intervenant.active == True,
        )
        if party_type is not None:
            query = query.where(Intervenant.type == party_type)

        intervenants = (await db.execute(query.order_by(Intervenant.id))).scalars().all()

        reports = []
        for intervenant in intervenants:
            reports.append(
                await AggregationService.build_party_report(db, tenant_id, intervenant, date_from, date_to)
            )

        reports.sort(key=lambda r: r.balance, reverse=True)
        return reports

    @staticmethod
    async def party_balance(db: AsyncSession, tenant_id: int, intervenant_id: int) -> PartyBalanceReport:
        """Report for a single intervenant (active or not) of the tenant."""
        intervenant = await queries.get_owned(db, Intervenant, tenant_id, intervenant_id, "Intervenant")
        return await AggregationService.build_party_report(db, tenant_id, intervenant)

    # --- Cash ---

    @staticmethod
    async def current_cash_balance(db: AsyncSession, tenant_id: int, use_cache: bool = True) -> Decimal:
        """Theoretical cash balance, served from the per-tenant cache when fresh."""
        if use_cache:
            cached = await CashBalanceCache.get(tenant_id)
            if cached is not None:
                return cached

        movements = await queries.list_cash_movements(db, tenant_id)
        balance = balance_calculator.theoretical_cash_balance(movements)

        if use_cache:
            await CashBalanceCache.set(tenant_id, balance)
        return balance

    @staticmethod
    async def cash_balance_trend(
        db: AsyncSession, tenant_id: int, days: int = 30, today: Optional[date] = None
    ) -> List[balance_calculator.TrendPoint]:
        today = today or utcnow().date()
        window_start = datetime.combine(today - timedelta(days=max(days, 0)), time.min)
        movements = await queries.list_cash_movements(db, tenant_id, date_from=window_start)
        return balance_calculator.cash_balance_trend(movements, days, today=today)

    @staticmethod
    async def today_cash_summary(
        db: AsyncSession, tenant_id: int, today: Optional[date] = None
    ) -> balance_calculator.CashSummary:
        today = today or utcnow().date()
        movements = await queries.list_cash_movements(
            db, tenant_id, date_from=datetime.combine(today, time.min)
        )
        return balance_calculator.today_cash_summary(movements, today=today)

    @staticmethod
    async def recent_cash_movements(db: AsyncSession, tenant_id: int, limit: int = None) -> List[Movement]:
        return await queries.list_cash_movements(
            db, tenant_id, limit=limit or settings.recent_movements_limit
        )

    # --- Advances, disbursements, documents ---

    @staticmethod
    async def advance_summary(db: AsyncSession, tenant_id: int, now: Optional[datetime] = None) -> AdvanceSummary:
        """Totals over all advances; overdue = past due date and not fully repaid."""
        advances = (await db.execute(
            select(Advance).where(Advance.tenant_id == tenant_id)
        )).scalars().all()

        total_advances = ZERO
        total_reimbursed = ZERO
        total_outstanding = ZERO
        overdue_count = 0
        overdue_outstanding = ZERO
        for advance in advances:
            reimbursements = await queries.list_advance_reimbursements(db, tenant_id, advance.id)
            total_advances += to_money(advance.amount)
            total_reimbursed += sum_amounts(reimbursements)
            remaining = advance_remaining(advance.amount, reimbursements)
            total_outstanding += remaining
            if is_advance_overdue(advance, now):
                overdue_count += 1
                overdue_outstanding += remaining

        return AdvanceSummary(
            total_advances=total_advances,
            total_reimbursed=total_reimbursed,
            total_outstanding=total_outstanding,
            overdue_count=overdue_count,
            overdue_outstanding=overdue_outstanding,
        )

    @staticmethod
    async def outstanding_disbursements(db: AsyncSession, tenant_id: int) -> List[Disbursement]:
        """Disbursements not yet fully justified, oldest first."""
        result = await db.execute(
            select(Disbursement).where(
                Disbursement.tenant_id == tenant_id,
                Disbursement.status != DisbursementStatus.JUSTIFIED,
            ).order_by(Disbursement.created_at, Disbursement.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def disbursement_summary(
        db: AsyncSession,
        tenant_id: int,
        status: Optional[DisbursementStatus] = None,
        intervenant_id: Optional[int] = None,
    ) -> DisbursementSummary:
        """Totals and per-category breakdown; 'justified' counts justifications and returns."""
        query = select(Disbursement).where(Disbursement.tenant_id == tenant_id)
        if status is not None:
            query = query.where(Disbursement.status == status)
        if intervenant_id is not None:
            query = query.where(Disbursement.intervenant_id == intervenant_id)

        disbursements = (await db.execute(query)).scalars().all()

        summary = DisbursementSummary(
            total_disbursed=ZERO, total_justified=ZERO, total_outstanding=ZERO,
            total_count=len(disbursements),
        )
        for d in disbursements:
            justifications = await queries.list_disbursement_justifications(db, tenant_id, d.id)
            returns = await queries.list_disbursement_returns(db, tenant_id, d.id)
            justified = sum_amounts(justifications) + sum_amounts(returns)
            outstanding = to_money(d.remaining_amount)

            summary.total_disbursed += to_money(d.initial_amount)
            summary.total_justified += justified
            summary.total_outstanding += outstanding

            bucket = summary.by_category.setdefault(d.category.value, CategoryBreakdown())
            bucket.total_disbursed += to_money(d.initial_amount)
            bucket.total_justified += justified
            bucket.total_outstanding += outstanding
            bucket.count += 1

        return summary

    @staticmethod
    async def document_stats(db: AsyncSession, tenant_id: int, today: Optional[date] = None) -> DocumentStats:
        today = today or utcnow().date()
        horizon = today + timedelta(days=7)

        open_docs = (await db.execute(
            select(Document).where(
                Document.tenant_id == tenant_id,
                Document.status != DocumentStatus.PAID,
            )
        )).scalars().all()

        unpaid = [d for d in open_docs if d.status == DocumentStatus.UNPAID]
        partially_paid = [d for d in open_docs if d.status == DocumentStatus.PARTIALLY_PAID]
        overdue = [d for d in open_docs if d.due_date is not None and d.due_date < today]
        due_soon = [d for d in open_docs if d.due_date is not None and today <= d.due_date <= horizon]

        return DocumentStats(
            unpaid=_bucket(unpaid),
            overdue=_bucket(overdue),
            due_within_7_days=_bucket(due_soon),
            partially_paid=_bucket(partially_paid),
        )
