"""
Tenant dependencies for FastAPI.

Every ledger route is tenant-scoped. Authentication happens upstream; the
gateway forwards the resolved tenant in the X-Tenant-ID header.
"""

from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from treasury_backend.app.db.session import get_db
from treasury_backend.app.models.tenant import Tenant

TENANT_HEADER = "X-Tenant-ID"


async def get_current_tenant(
    x_tenant_id: Optional[str] = Header(None, alias=TENANT_HEADER),
    db: AsyncSession = Depends(get_db)
) -> Tenant:
    """
    Resolve the active tenant for the request.
    
    Raises:
        HTTPException: 400 if the header is missing or malformed,
            404 if the tenant does not exist or is inactive.
    """
    if not x_tenant_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing {TENANT_HEADER} header",
        )
    
    try:
        tenant_id = int(x_tenant_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {TENANT_HEADER} header",
        )
    
    result = await db.execute(
        select(Tenant).where(Tenant.id == tenant_id, Tenant.is_active == True)
    )
    tenant = result.scalar_one_or_none()
    if tenant is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tenant not found",
        )
    
    return tenant
