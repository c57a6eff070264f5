"""
Write path tests: every mutation recalculates the derived fields of the
disbursement, advance or document it touches.
"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal

from sqlalchemy import select

from treasury_backend.app.core.exceptions import ResourceNotFoundError, ValidationFailedError, ValidationReason
from treasury_backend.app.models.document import Document
from treasury_backend.app.models.intervenant import Intervenant
from treasury_backend.app.models.ledger_enums import (
    AdvanceStatus, DisbursementStatus, DocumentStatus, DocumentType,
    IntervenantType, JustificationCategory, Modality, MovementKind,
)
from treasury_backend.app.models.movement import Movement
from treasury_backend.app.services.advance_service import AdvanceService
from treasury_backend.app.services.disbursement_service import DisbursementService
from treasury_backend.app.services.document_service import DocumentService
from treasury_backend.app.services.movement_service import MovementService
from treasury_backend.app.services.settings_service import DEFAULT_MIN_CASH_BALANCE, SettingsService


async def make_document(db, tenant_id, reference="INV-100", total=1000):
    return await DocumentService.create(
        db, tenant_id, DocumentType.INVOICE, reference, total, issue_date=date(2026, 3, 1)
    )


# --- Disbursements ---

@pytest.mark.asyncio
async def test_grant_creates_cash_outflow(db_session, tenant, employee, mock_redis):
    mock_redis.store[f"cash_balance:{tenant.id}"] = "9999.00"

    disbursement = await DisbursementService.grant(db_session, tenant.id, employee.id, "750.50")

    assert disbursement.remaining_amount == Decimal("750.50")
    assert disbursement.status == DisbursementStatus.OPEN
    result = await db_session.execute(select(Movement).where(Movement.disbursement_id == disbursement.id))
    movement = result.scalar_one()
    assert movement.kind == MovementKind.OUTFLOW
    assert movement.modality == Modality.CASH
    assert movement.is_disbursement
    assert f"cash_balance:{tenant.id}" not in mock_redis.store


@pytest.mark.asyncio
async def test_grant_rejects_inactive_intervenant(db_session, tenant):
    party = Intervenant(tenant_id=tenant.id, name="Former", type=IntervenantType.EMPLOYEE, active=False)
    db_session.add(party)
    await db_session.commit()

    with pytest.raises(ValidationFailedError) as exc:
        await DisbursementService.grant(db_session, tenant.id, party.id, 100)
    assert exc.value.reason == ValidationReason.INACTIVE_INTERVENANT


@pytest.mark.asyncio
async def test_grant_rejects_non_positive_amount(db_session, tenant, employee):
    with pytest.raises(ValidationFailedError) as exc:
        await DisbursementService.grant(db_session, tenant.id, employee.id, 0)
    assert exc.value.reason == ValidationReason.INVALID_AMOUNT


@pytest.mark.asyncio
async def test_justification_cannot_exceed_remaining(db_session, tenant, employee):
    disbursement = await DisbursementService.grant(db_session, tenant.id, employee.id, 500)
    await DisbursementService.add_justification(
        db_session, tenant.id, disbursement.id, 300, JustificationCategory.GENERAL_EXPENSE
    )

    with pytest.raises(ValidationFailedError) as exc:
        await DisbursementService.add_justification(
            db_session, tenant.id, disbursement.id, 201, JustificationCategory.GENERAL_EXPENSE
        )
    assert exc.value.reason == ValidationReason.AMOUNT_EXCEEDS_REMAINING
    assert disbursement.remaining_amount == Decimal("200.00")
    assert disbursement.status == DisbursementStatus.PARTIALLY_JUSTIFIED


@pytest.mark.asyncio
async def test_linked_justification_pays_document(db_session, tenant, employee):
    disbursement = await DisbursementService.grant(db_session, tenant.id, employee.id, 2000)
    document = await make_document(db_session, tenant.id, total=1000)

    await DisbursementService.add_justification(
        db_session, tenant.id, disbursement.id, 400, JustificationCategory.SUPPLIER_PAYMENT, document_id=document.id
    )
    assert document.paid_amount == Decimal("400.00")
    assert document.remaining_amount == Decimal("600.00")
    assert document.status == DocumentStatus.PARTIALLY_PAID

    with pytest.raises(ValidationFailedError) as exc:
        await DisbursementService.add_justification(
            db_session, tenant.id, disbursement.id, 700, JustificationCategory.SUPPLIER_PAYMENT,
            document_id=document.id,
        )
    assert exc.value.reason == ValidationReason.PAYMENT_EXCEEDS_REMAINING

    await DisbursementService.add_justification(
        db_session, tenant.id, disbursement.id, 600, JustificationCategory.SUPPLIER_PAYMENT, document_id=document.id
    )
    assert document.status == DocumentStatus.PAID
    assert disbursement.remaining_amount == Decimal("1000.00")


@pytest.mark.asyncio
async def test_update_justification_excludes_itself_from_remaining(db_session, tenant, employee):
    disbursement = await DisbursementService.grant(db_session, tenant.id, employee.id, 1000)
    justification = await DisbursementService.add_justification(
        db_session, tenant.id, disbursement.id, 1000, JustificationCategory.GENERAL_EXPENSE
    )
    assert disbursement.status == DisbursementStatus.JUSTIFIED

    await DisbursementService.update_justification(
        db_session, tenant.id, disbursement.id, justification.id, {"amount": Decimal("900")}
    )
    assert disbursement.remaining_amount == Decimal("100.00")
    assert disbursement.status == DisbursementStatus.PARTIALLY_JUSTIFIED

    with pytest.raises(ValidationFailedError):
        await DisbursementService.update_justification(
            db_session, tenant.id, disbursement.id, justification.id, {"amount": Decimal("1000.01")}
        )


@pytest.mark.asyncio
async def test_moving_document_link_recalculates_both_documents(db_session, tenant, employee):
    disbursement = await DisbursementService.grant(db_session, tenant.id, employee.id, 1000)
    doc_a = await make_document(db_session, tenant.id, "INV-A", 500)
    doc_b = await make_document(db_session, tenant.id, "INV-B", 500)
    justification = await DisbursementService.add_justification(
        db_session, tenant.id, disbursement.id, 500, JustificationCategory.SUPPLIER_PAYMENT, document_id=doc_a.id
    )
    assert doc_a.status == DocumentStatus.PAID

    await DisbursementService.update_justification(
        db_session, tenant.id, disbursement.id, justification.id, {"document_id": doc_b.id, "amount": 250}
    )
    assert doc_a.paid_amount == Decimal("0.00")
    assert doc_a.status == DocumentStatus.UNPAID
    assert doc_b.paid_amount == Decimal("250.00")
    assert doc_b.status == DocumentStatus.PARTIALLY_PAID


@pytest.mark.asyncio
async def test_delete_justification_restores_state(db_session, tenant, employee):
    disbursement = await DisbursementService.grant(db_session, tenant.id, employee.id, 800)
    document = await make_document(db_session, tenant.id, total=800)
    justification = await DisbursementService.add_justification(
        db_session, tenant.id, disbursement.id, 800, JustificationCategory.SUPPLIER_PAYMENT, document_id=document.id
    )

    await DisbursementService.delete_justification(db_session, tenant.id, disbursement.id, justification.id)

    assert disbursement.status == DisbursementStatus.OPEN
    assert disbursement.remaining_amount == Decimal("800.00")
    assert document.status == DocumentStatus.UNPAID
    assert document.remaining_amount == Decimal("800.00")


@pytest.mark.asyncio
async def test_justification_must_belong_to_disbursement(db_session, tenant, employee):
    d1 = await DisbursementService.grant(db_session, tenant.id, employee.id, 100)
    d2 = await DisbursementService.grant(db_session, tenant.id, employee.id, 100)
    justification = await DisbursementService.add_justification(
        db_session, tenant.id, d1.id, 50, JustificationCategory.OTHER
    )
    with pytest.raises(ResourceNotFoundError):
        await DisbursementService.delete_justification(db_session, tenant.id, d2.id, justification.id)


@pytest.mark.asyncio
async def test_return_to_cash(db_session, tenant, employee):
    disbursement = await DisbursementService.grant(db_session, tenant.id, employee.id, 500)

    with pytest.raises(ValidationFailedError):
        await DisbursementService.return_to_cash(db_session, tenant.id, disbursement.id, 600)

    movement = await DisbursementService.return_to_cash(db_session, tenant.id, disbursement.id, 500)
    assert movement.kind == MovementKind.INFLOW
    assert movement.modality == Modality.CASH
    assert movement.disbursement_id == disbursement.id
    assert disbursement.status == DisbursementStatus.JUSTIFIED


@pytest.mark.asyncio
async def test_cross_tenant_disbursement_is_not_found(db_session, tenant, other_tenant, employee):
    disbursement = await DisbursementService.grant(db_session, tenant.id, employee.id, 500)
    with pytest.raises(ResourceNotFoundError):
        await DisbursementService.add_justification(
            db_session, other_tenant.id, disbursement.id, 100, JustificationCategory.OTHER
        )
    with pytest.raises(ResourceNotFoundError):
        await DisbursementService.grant(db_session, other_tenant.id, employee.id, 100)


# --- Advances ---

@pytest.mark.asyncio
async def test_advance_default_due_date(db_session, tenant, tenant_settings, employee):
    granted_on = datetime(2026, 3, 1, 9, 0)
    advance = await AdvanceService.grant(db_session, tenant.id, employee.id, 400, date=granted_on)
    assert advance.due_date == granted_on + timedelta(days=30)
    assert advance.status == AdvanceStatus.ONGOING


@pytest.mark.asyncio
async def test_advance_without_default_due_days(db_session, tenant, tenant_settings, employee):
    tenant_settings.default_advance_due_days = 0
    await db_session.commit()
    advance = await AdvanceService.grant(db_session, tenant.id, employee.id, 400)
    assert advance.due_date is None


@pytest.mark.asyncio
async def test_advance_reimbursement(db_session, tenant, employee):
    advance = await AdvanceService.grant(db_session, tenant.id, employee.id, 400)

    await AdvanceService.reimburse(db_session, tenant.id, advance.id, 150)
    assert advance.status == AdvanceStatus.PARTIALLY_REPAID

    with pytest.raises(ValidationFailedError) as exc:
        await AdvanceService.reimburse(db_session, tenant.id, advance.id, 251)
    assert exc.value.reason == ValidationReason.AMOUNT_EXCEEDS_REMAINING

    await AdvanceService.reimburse(db_session, tenant.id, advance.id, 250)
    assert advance.status == AdvanceStatus.FULLY_REPAID


# --- Documents ---

@pytest.mark.asyncio
async def test_document_reference_unique_per_tenant(db_session, tenant, other_tenant):
    document = await make_document(db_session, tenant.id, "  INV-7 ")
    assert document.reference == "INV-7"
    assert document.status == DocumentStatus.UNPAID
    assert document.remaining_amount == Decimal("1000.00")

    with pytest.raises(ValidationFailedError) as exc:
        await make_document(db_session, tenant.id, "INV-7")
    assert exc.value.reason == ValidationReason.REFERENCE_EXISTS

    await make_document(db_session, other_tenant.id, "INV-7")


@pytest.mark.asyncio
async def test_document_dates_must_be_ordered(db_session, tenant):
    with pytest.raises(ValidationFailedError) as exc:
        await DocumentService.create(
            db_session, tenant.id, DocumentType.CONTRACT, "C-1", 100,
            issue_date=date(2026, 3, 10), due_date=date(2026, 3, 9),
        )
    assert exc.value.field == "due_date"


@pytest.mark.asyncio
async def test_document_update_rules(db_session, tenant, employee):
    disbursement = await DisbursementService.grant(db_session, tenant.id, employee.id, 1000)
    document = await make_document(db_session, tenant.id, "INV-1", 1000)
    await make_document(db_session, tenant.id, "INV-2", 1000)
    await DisbursementService.add_justification(
        db_session, tenant.id, disbursement.id, 600, JustificationCategory.SUPPLIER_PAYMENT, document_id=document.id
    )

    with pytest.raises(ValidationFailedError) as exc:
        await DocumentService.update(db_session, tenant.id, document.id, {"total_amount": Decimal("500")})
    assert exc.value.reason == ValidationReason.AMOUNT_TOO_LOW

    with pytest.raises(ValidationFailedError) as exc:
        await DocumentService.update(db_session, tenant.id, document.id, {"reference": "INV-2"})
    assert exc.value.reason == ValidationReason.REFERENCE_EXISTS

    # Keeping its own reference is fine
    await DocumentService.update(
        db_session, tenant.id, document.id, {"reference": "INV-1", "total_amount": Decimal("600")}
    )
    assert document.status == DocumentStatus.PAID
    assert document.remaining_amount == Decimal("0.00")


@pytest.mark.asyncio
async def test_document_delete_rules(db_session, tenant, employee):
    disbursement = await DisbursementService.grant(db_session, tenant.id, employee.id, 1000)
    paid = await make_document(db_session, tenant.id, "INV-1")
    unused = await make_document(db_session, tenant.id, "INV-2")
    await DisbursementService.add_justification(
        db_session, tenant.id, disbursement.id, 10, JustificationCategory.SUPPLIER_PAYMENT, document_id=paid.id
    )

    with pytest.raises(ValidationFailedError) as exc:
        await DocumentService.delete(db_session, tenant.id, paid.id)
    assert exc.value.reason == ValidationReason.HAS_PAYMENTS

    await DocumentService.delete(db_session, tenant.id, unused.id)
    result = await db_session.execute(select(Document.id).where(Document.tenant_id == tenant.id))
    assert result.scalars().all() == [paid.id]


# --- Cash inflow ---

@pytest.mark.asyncio
async def test_cash_inflow_uses_default_cash_intervenant(db_session, tenant):
    first = await MovementService.record_cash_inflow(db_session, tenant.id, 100, "SALES")
    second = await MovementService.record_cash_inflow(db_session, tenant.id, 50, "SALES")

    assert first.intervenant_id == second.intervenant_id
    cash_box = await db_session.get(Intervenant, first.intervenant_id)
    assert cash_box.type == IntervenantType.CASH_BANK


@pytest.mark.asyncio
async def test_settings_get_or_create(db_session, tenant):
    assert await SettingsService.load_effective(db_session, tenant.id) is None

    row = await SettingsService.get_or_create(db_session, tenant.id)
    await db_session.commit()
    assert row.min_cash_balance == DEFAULT_MIN_CASH_BALANCE

    again = await SettingsService.get_or_create(db_session, tenant.id)
    assert again.id == row.id

    cfg = await SettingsService.load_effective(db_session, tenant.id)
    assert cfg.alerts_enabled is True
    assert cfg.currency == "TND"
