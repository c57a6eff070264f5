"""
Tenant-scoped read helpers.

Every lookup filters by tenant_id; an entity that exists under another
tenant is reported exactly like a missing one.
"""

from datetime import datetime
from typing import List, Optional, Type

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from treasury_backend.app.core.exceptions import ResourceNotFoundError, ValidationFailedError, ValidationReason
from treasury_backend.app.models.intervenant import Intervenant
from treasury_backend.app.models.justification import Justification
from treasury_backend.app.models.ledger_enums import MovementKind, Modality
from treasury_backend.app.models.movement import Movement


async def get_owned(db: AsyncSession, model: Type, tenant_id: int, entity_id: int, resource: str = None):
    """
    Fetch an entity by id within a tenant.
    
    Raises:
        ResourceNotFoundError: If the entity does not exist or belongs to another tenant.
    """
    result = await db.execute(
        select(model).where(model.id == entity_id, model.tenant_id == tenant_id)
    )
    entity = result.scalar_one_or_none()
    if entity is None:
        raise ResourceNotFoundError(resource or model.__name__, entity_id)
    return entity


async def list_movements(
    db: AsyncSession,
    tenant_id: int,
    intervenant_id: Optional[int] = None,
    modality: Optional[Modality] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> List[Movement]:
    """Movements of a tenant, most recent first."""
    query = select(Movement).where(Movement.tenant_id == tenant_id)
    
    if intervenant_id is not None:
        query = query.where(Movement.intervenant_id == intervenant_id)
    if modality is not None:
        query = query.where(Movement.modality == modality)
    if date_from is not None:
        query = query.where(Movement.date >= date_from)
    if date_to is not None:
        query = query.where(Movement.date <= date_to)
    
    query = query.order_by(desc(Movement.date), desc(Movement.id))
    if limit is not None:
        query = query.limit(limit)
    
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_cash_movements(db: AsyncSession, tenant_id: int, **filters) -> List[Movement]:
    return await list_movements(db, tenant_id, modality=Modality.CASH, **filters)


async def list_disbursement_justifications(db: AsyncSession, tenant_id: int, disbursement_id: int) -> List[Justification]:
    result = await db.execute(
        select(Justification).where(
            Justification.tenant_id == tenant_id,
            Justification.disbursement_id == disbursement_id,
        ).order_by(Justification.date, Justification.id)
    )
    return list(result.scalars().all())


async def list_disbursement_returns(db: AsyncSession, tenant_id: int, disbursement_id: int) -> List[Movement]:
    """Returns to cash: INFLOW movements back-referencing the disbursement."""
    result = await db.execute(
        select(Movement).where(
            Movement.tenant_id == tenant_id,
            Movement.disbursement_id == disbursement_id,
            Movement.kind == MovementKind.INFLOW,
        ).order_by(Movement.date, Movement.id)
    )
    return list(result.scalars().all())


async def list_advance_reimbursements(db: AsyncSession, tenant_id: int, advance_id: int) -> List[Movement]:
    """Reimbursements: INFLOW movements back-referencing the advance."""
    result = await db.execute(
        select(Movement).where(
            Movement.tenant_id == tenant_id,
            Movement.advance_id == advance_id,
            Movement.kind == MovementKind.INFLOW,
        ).order_by(Movement.date, Movement.id)
    )
    return list(result.scalars().all())


async def list_document_justifications(db: AsyncSession, tenant_id: int, document_id: int) -> List[Justification]:
    result = await db.execute(
        select(Justification).where(
            Justification.tenant_id == tenant_id,
            Justification.document_id == document_id,
        )
    )
    return list(result.scalars().all())


async def get_active_intervenant(db: AsyncSession, tenant_id: int, intervenant_id: int) -> Intervenant:
    """
    Fetch an intervenant that can take part in a new movement.
    
    Raises:
        ResourceNotFoundError: If missing or owned by another tenant.
        ValidationFailedError: If the intervenant is inactive.
    """
    intervenant = await get_owned(db, Intervenant, tenant_id, intervenant_id, "Intervenant")
    if not intervenant.active:
        raise ValidationFailedError(
            ValidationReason.INACTIVE_INTERVENANT,
            "Cannot create a movement for an inactive intervenant",
            field="intervenant_id",
        )
    return intervenant
