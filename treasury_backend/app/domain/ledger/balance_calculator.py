"""
Balance Calculator.

Pure functions turning movements into party balances and cash figures.
No I/O; callers fetch the movements.

Sign conventions differ on purpose:
- party balance = outflows - inflows (positive: the party owes the company)
- cash balance  = inflows - outflows (cash on hand)
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional

from treasury_backend.app.core.clock import as_date, utcnow
from treasury_backend.app.core.exceptions import InvalidInputError
from treasury_backend.app.domain.ledger.money import ZERO, to_money
from treasury_backend.app.models.ledger_enums import MovementKind, Modality


@dataclass(frozen=True)
class TrendPoint:
    date: date
    balance: Decimal


@dataclass(frozen=True)
class CashSummary:
    inflows: Decimal
    outflows: Decimal
    net: Decimal
    count: int


def _totals(movements: Iterable):
    inflows = ZERO
    outflows = ZERO
    for m in movements:
        if m.kind == MovementKind.INFLOW:
            inflows += to_money(m.amount)
        elif m.kind == MovementKind.OUTFLOW:
            outflows += to_money(m.amount)
    return inflows, outflows


def is_cash(movement) -> bool:
    return movement.modality == Modality.CASH


def party_balance(movements: Iterable) -> Decimal:
    """
    Balance of an intervenant: sum(outflow) - sum(inflow).
    
    Positive means the intervenant owes the company, negative means the
    company owes the intervenant. Empty input -> 0.
    """
    inflows, outflows = _totals(movements)
    return outflows - inflows


def theoretical_cash_balance(movements: Iterable) -> Decimal:
    """Cash on hand: sum(inflow) - sum(outflow) over CASH-modality movements only."""
    inflows, outflows = _totals(m for m in movements if is_cash(m))
    return inflows - outflows


def cash_balance_trend(movements: Iterable, window_days: int, today: Optional[date] = None) -> List[TrendPoint]:
    """
    Running cash balance over the window [today - window_days, today].
    
    Returns exactly `window_days` points, one per day from
    today - window_days + 1 through today. CASH movements dated on the
    window's first day (today - window_days) open the running total; days
    without movements carry the previous total forward.
    
    Raises:
        InvalidInputError: If window_days is negative.
    """
    if window_days is None or window_days < 0:
        raise InvalidInputError(f"window_days must be >= 0, got {window_days}")
    
    today = today or utcnow().date()
    start = today - timedelta(days=window_days)
    
    net_by_day = {}
    for m in movements:
        if not is_cash(m):
            continue
        day = as_date(m.date)
        if day < start or day > today:
            continue
        amount = to_money(m.amount)
        delta = amount if m.kind == MovementKind.INFLOW else -amount
        net_by_day[day] = net_by_day.get(day, ZERO) + delta
    
    trend = []
    running = net_by_day.get(start, ZERO)
    for offset in range(1, window_days + 1):
        day = start + timedelta(days=offset)
        running += net_by_day.get(day, ZERO)
        trend.append(TrendPoint(date=day, balance=running))
    return trend


def today_cash_summary(movements: Iterable, today: Optional[date] = None) -> CashSummary:
    """Inflows, outflows, net and count of CASH movements dated today."""
    today = today or utcnow().date()
    todays = [m for m in movements if is_cash(m) and as_date(m.date) == today]
    inflows, outflows = _totals(todays)
    return CashSummary(
        inflows=inflows,
        outflows=outflows,
        net=inflows - outflows,
        count=len(todays),
    )


def last_movement_date(movements: Iterable) -> Optional[datetime]:
    """Date of the most recent movement, or None for an empty list."""
    dates = [m.date for m in movements]
    return max(dates) if dates else None
