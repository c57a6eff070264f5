"""
Alert Evaluator tests.

Each rule must fire once against a breaching state and stay silent on a
second evaluation of the same, unchanged state.
"""

import pytest
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.domain.alerts.alert_evaluator import LONG_OPEN_DISBURSEMENT_DAYS, AlertEvaluator
from treasury_backend.app.domain.ledger.aggregation_service import AggregationService
from treasury_backend.app.models.alert import Alert
from treasury_backend.app.models.cash_reconciliation import CashReconciliation
from treasury_backend.app.models.ledger_enums import AlertSeverity, AlertType, Modality, MovementKind
from treasury_backend.app.services.alert_service import AlertService
from treasury_backend.app.services.disbursement_service import DisbursementService
from treasury_backend.app.services.settings_service import SettingsService


def of_type(alerts, alert_type):
    return [a for a in alerts if a.type == alert_type]


async def assert_fires_once(db_session, tenant_id, alert_type, now=None):
    first = await AlertEvaluator.evaluate_alerts(db_session, tenant_id, now=now)
    assert of_type(first, alert_type), f"{alert_type} not raised"

    second = await AlertEvaluator.evaluate_alerts(db_session, tenant_id, now=now)
    assert second == []
    return of_type(first, alert_type)


@pytest.mark.asyncio
async def test_debt_threshold(db_session, tenant, tenant_settings, supplier, add_movement):
    await add_movement(tenant.id, supplier.id, MovementKind.OUTFLOW, 1500, modality=Modality.TRANSFER)

    alerts = await assert_fires_once(db_session, tenant.id, AlertType.DEBT_THRESHOLD)
    assert len(alerts) == 1
    assert alerts[0].related_id == supplier.id
    assert alerts[0].severity == AlertSeverity.WARNING
    assert "1500.00 TND" in alerts[0].message


@pytest.mark.asyncio
async def test_debt_at_threshold_does_not_fire(db_session, tenant, tenant_settings, supplier, add_movement):
    await add_movement(tenant.id, supplier.id, MovementKind.OUTFLOW, 1000, modality=Modality.TRANSFER)
    created = await AlertEvaluator.evaluate_alerts(db_session, tenant.id)
    assert of_type(created, AlertType.DEBT_THRESHOLD) == []


@pytest.mark.asyncio
async def test_low_cash(db_session, tenant, tenant_settings, supplier, add_movement):
    await add_movement(tenant.id, supplier.id, MovementKind.INFLOW, 400)

    alerts = await assert_fires_once(db_session, tenant.id, AlertType.LOW_CASH)
    assert alerts[0].related_id is None
    assert alerts[0].related_key == ""
    assert alerts[0].severity == AlertSeverity.ERROR


@pytest.mark.asyncio
async def test_enough_cash_does_not_fire(db_session, tenant, tenant_settings, supplier, add_movement):
    await add_movement(tenant.id, supplier.id, MovementKind.INFLOW, 500)
    created = await AlertEvaluator.evaluate_alerts(db_session, tenant.id)
    assert of_type(created, AlertType.LOW_CASH) == []


@pytest.mark.asyncio
async def test_overdue_disbursement(db_session, tenant, tenant_settings, employee):
    disbursement = await DisbursementService.grant(
        db_session, tenant.id, employee.id, 300, due_date=utcnow() - timedelta(days=1)
    )

    alerts = await assert_fires_once(db_session, tenant.id, AlertType.OVERDUE_DISBURSEMENT)
    assert [a.related_id for a in alerts] == [disbursement.id]


@pytest.mark.asyncio
async def test_long_open_disbursement_uses_fixed_thirty_days(db_session, tenant, tenant_settings, employee):
    assert LONG_OPEN_DISBURSEMENT_DAYS == 30
    tenant_settings.disbursement_open_days_warning = 5
    await db_session.commit()
    disbursement = await DisbursementService.grant(db_session, tenant.id, employee.id, 300)

    # Ten days later: past the configured 5 days but not the fixed 30
    created = await AlertEvaluator.evaluate_alerts(db_session, tenant.id, now=utcnow() + timedelta(days=10))
    assert of_type(created, AlertType.LONG_OPEN_DISBURSEMENT) == []

    alerts = await assert_fires_once(
        db_session, tenant.id, AlertType.LONG_OPEN_DISBURSEMENT, now=utcnow() + timedelta(days=31)
    )
    assert alerts[0].related_id == disbursement.id
    assert "has been open for" in alerts[0].message


@pytest.mark.asyncio
async def test_high_outstanding_disbursements(db_session, tenant, tenant_settings, employee, supplier):
    await DisbursementService.grant(db_session, tenant.id, employee.id, 1200)
    await DisbursementService.grant(db_session, tenant.id, supplier.id, 900)

    alerts = await assert_fires_once(db_session, tenant.id, AlertType.HIGH_OUTSTANDING_DISBURSEMENTS)
    assert len(alerts) == 1
    assert alerts[0].related_id is None
    assert "2100.00 TND" in alerts[0].message


@pytest.mark.asyncio
async def test_outstanding_threshold_defaults_when_unset(db_session, tenant, tenant_settings, employee):
    tenant_settings.disbursement_outstanding_threshold = None
    await db_session.commit()

    cfg = await SettingsService.load_effective(db_session, tenant.id)
    assert cfg.disbursement_outstanding_threshold == Decimal("10000.00")

    await DisbursementService.grant(db_session, tenant.id, employee.id, 9000)
    created = await AlertEvaluator.evaluate_alerts(db_session, tenant.id)
    assert of_type(created, AlertType.HIGH_OUTSTANDING_DISBURSEMENTS) == []


@pytest.mark.asyncio
async def test_reconciliation_gap_uses_latest_record(db_session, tenant, tenant_settings):
    older = CashReconciliation(
        tenant_id=tenant.id, date=utcnow() - timedelta(days=2),
        theoretical_balance=Decimal("1000"), physical_count=Decimal("1000"), gap=Decimal("0"),
    )
    latest = CashReconciliation(
        tenant_id=tenant.id, date=utcnow() - timedelta(days=1),
        theoretical_balance=Decimal("1000"), physical_count=Decimal("920"), gap=Decimal("-80"),
    )
    db_session.add_all([older, latest])
    await db_session.commit()

    alerts = await assert_fires_once(db_session, tenant.id, AlertType.RECONCILIATION_GAP)
    assert alerts[0].related_id == latest.id
    assert alerts[0].severity == AlertSeverity.ERROR
    assert "80.00 TND" in alerts[0].message

    # A newer, clean count supersedes the gap
    db_session.add(CashReconciliation(
        tenant_id=tenant.id, date=utcnow(),
        theoretical_balance=Decimal("1000"), physical_count=Decimal("1010"), gap=Decimal("10"),
    ))
    await db_session.commit()
    created = await AlertEvaluator.evaluate_alerts(db_session, tenant.id)
    assert of_type(created, AlertType.RECONCILIATION_GAP) == []


@pytest.mark.asyncio
async def test_disabled_alerts_short_circuit(db_session, tenant, tenant_settings, supplier, add_movement, mocker):
    tenant_settings.alerts_enabled = False
    await db_session.commit()
    await add_movement(tenant.id, supplier.id, MovementKind.OUTFLOW, 50000)
    spy = mocker.spy(AggregationService, "all_party_balances")

    assert await AlertEvaluator.evaluate_alerts(db_session, tenant.id) == []
    spy.assert_not_called()


@pytest.mark.asyncio
async def test_missing_settings_means_disabled(db_session, tenant, supplier, add_movement, mocker):
    await add_movement(tenant.id, supplier.id, MovementKind.OUTFLOW, 50000)
    spy = mocker.spy(AggregationService, "all_party_balances")

    assert await AlertEvaluator.evaluate_alerts(db_session, tenant.id) == []
    spy.assert_not_called()


@pytest.mark.asyncio
async def test_dismissed_alert_can_be_raised_again(db_session, tenant, tenant_settings):
    first = await AlertEvaluator.evaluate_alerts(db_session, tenant.id)
    low_cash = of_type(first, AlertType.LOW_CASH)[0]

    await AlertService.dismiss(db_session, tenant.id, low_cash.id)
    assert await AlertService.list_alerts(db_session, tenant.id) == []

    again = await AlertEvaluator.evaluate_alerts(db_session, tenant.id)
    assert len(of_type(again, AlertType.LOW_CASH)) == 1
    assert len(await AlertService.list_alerts(db_session, tenant.id, include_dismissed=True)) == 2


@pytest.mark.asyncio
async def test_alerts_are_tenant_scoped(db_session, tenant, other_tenant, tenant_settings):
    await AlertEvaluator.evaluate_alerts(db_session, tenant.id)
    assert await AlertEvaluator.evaluate_alerts(db_session, other_tenant.id) == []
    assert await AlertService.list_alerts(db_session, other_tenant.id) == []


@pytest.mark.asyncio
async def test_unique_index_catches_concurrent_duplicate(db_session, tenant, tenant_settings, mocker):
    """A racing evaluation that missed the existing alert is skipped, not failed."""
    first = await AlertEvaluator.evaluate_alerts(db_session, tenant.id)
    assert of_type(first, AlertType.LOW_CASH)

    mocker.patch.object(AlertEvaluator, "find_active", return_value=None)
    assert await AlertEvaluator.evaluate_alerts(db_session, tenant.id) == []

    result = await db_session.execute(
        select(Alert).where(Alert.tenant_id == tenant.id, Alert.type == AlertType.LOW_CASH)
    )
    assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_storage_errors_propagate(db_session, tenant, tenant_settings, mocker):
    mocker.patch.object(
        AggregationService, "outstanding_disbursements", side_effect=SQLAlchemyError("connection lost")
    )
    with pytest.raises(SQLAlchemyError):
        await AlertEvaluator.evaluate_alerts(db_session, tenant.id)
