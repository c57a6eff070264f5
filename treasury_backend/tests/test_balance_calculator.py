"""
Unit tests for the Balance Calculator.

Party balances and cash balances use opposite sign conventions; both
directions are asserted independently.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

from treasury_backend.app.core.exceptions import InvalidInputError
from treasury_backend.app.domain.ledger import balance_calculator as calc
from treasury_backend.app.models.ledger_enums import Modality, MovementKind

TODAY = date(2026, 3, 15)


def mv(kind, amount, modality=Modality.CASH, on=TODAY, hour=10):
    return SimpleNamespace(
        kind=kind,
        amount=Decimal(str(amount)),
        modality=modality,
        date=datetime(on.year, on.month, on.day, hour),
    )


def test_party_balance_is_outflow_minus_inflow():
    movements = [
        mv(MovementKind.OUTFLOW, 1000),
        mv(MovementKind.INFLOW, 300, modality=Modality.TRANSFER),
        mv(MovementKind.OUTFLOW, 50, modality=None),
    ]
    assert calc.party_balance(movements) == Decimal("750.00")


def test_party_balance_negative_when_company_owes_party():
    assert calc.party_balance([mv(MovementKind.INFLOW, 200)]) == Decimal("-200.00")


def test_party_balance_empty_is_zero():
    assert calc.party_balance([]) == Decimal("0")


def test_theoretical_cash_balance_is_inflow_minus_outflow():
    movements = [
        mv(MovementKind.INFLOW, 1000),
        mv(MovementKind.OUTFLOW, 300),
        mv(MovementKind.INFLOW, 500),
    ]
    assert calc.theoretical_cash_balance(movements) == Decimal("1200.00")
    # Same movements read as a party balance flip sign
    assert calc.party_balance(movements) == Decimal("-1200.00")


def test_theoretical_cash_balance_ignores_non_cash():
    movements = [
        mv(MovementKind.INFLOW, 1000),
        mv(MovementKind.INFLOW, 5000, modality=Modality.TRANSFER),
        mv(MovementKind.OUTFLOW, 700, modality=Modality.CHECK),
        mv(MovementKind.OUTFLOW, 100, modality=None),
    ]
    assert calc.theoretical_cash_balance(movements) == Decimal("1000.00")


def test_decimal_sums_do_not_drift():
    movements = [mv(MovementKind.INFLOW, "0.10") for _ in range(10)]
    assert calc.theoretical_cash_balance(movements) == Decimal("1.00")


@pytest.mark.parametrize("days", [0, 1, 7, 30])
def test_trend_returns_exactly_window_days_points(days):
    trend = calc.cash_balance_trend([], days, today=TODAY)
    assert len(trend) == days
    assert all(point.balance == Decimal("0") for point in trend)


def test_trend_dates_are_consecutive_and_end_today():
    trend = calc.cash_balance_trend([], 5, today=TODAY)
    assert [p.date for p in trend] == [
        date(2026, 3, 11), date(2026, 3, 12), date(2026, 3, 13), date(2026, 3, 14), TODAY,
    ]


def test_trend_is_cumulative_and_carries_forward():
    movements = [
        mv(MovementKind.INFLOW, 1000, on=date(2026, 3, 12)),
        mv(MovementKind.OUTFLOW, 200, on=date(2026, 3, 14)),
        mv(MovementKind.INFLOW, 50, on=TODAY),
        mv(MovementKind.INFLOW, 9999, modality=Modality.TRANSFER, on=date(2026, 3, 13)),
    ]
    trend = calc.cash_balance_trend(movements, 4, today=TODAY)
    assert [p.balance for p in trend] == [
        Decimal("1000.00"),  # 12th
        Decimal("1000.00"),  # 13th, carried forward
        Decimal("800.00"),   # 14th
        Decimal("850.00"),   # 15th
    ]


def test_trend_window_start_day_opens_running_total():
    movements = [
        mv(MovementKind.INFLOW, 400, on=date(2026, 3, 12)),   # today - 3: window start
        mv(MovementKind.INFLOW, 100, on=date(2026, 3, 13)),
        mv(MovementKind.INFLOW, 7777, on=date(2026, 3, 1)),   # before the window
    ]
    trend = calc.cash_balance_trend(movements, 3, today=TODAY)
    assert len(trend) == 3
    assert trend[0].date == date(2026, 3, 13)
    assert trend[0].balance == Decimal("500.00")
    assert trend[-1].balance == Decimal("500.00")


def test_trend_rejects_negative_window():
    with pytest.raises(InvalidInputError):
        calc.cash_balance_trend([], -1, today=TODAY)


def test_today_cash_summary():
    movements = [
        mv(MovementKind.INFLOW, 300),
        mv(MovementKind.OUTFLOW, 120),
        mv(MovementKind.INFLOW, 80, hour=18),
        mv(MovementKind.INFLOW, 1000, on=date(2026, 3, 14)),
        mv(MovementKind.OUTFLOW, 500, modality=Modality.TRANSFER),
    ]
    summary = calc.today_cash_summary(movements, today=TODAY)
    assert summary.inflows == Decimal("380.00")
    assert summary.outflows == Decimal("120.00")
    assert summary.net == Decimal("260.00")
    assert summary.count == 3


def test_last_movement_date():
    movements = [mv(MovementKind.INFLOW, 1, on=date(2026, 3, 1)), mv(MovementKind.INFLOW, 1, on=TODAY)]
    assert calc.last_movement_date(movements) == datetime(2026, 3, 15, 10)
    assert calc.last_movement_date([]) is None
