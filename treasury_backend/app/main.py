"""
FastAPI Application Entry Point.

This is the main application file for the Treasury Ledger Backend.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from treasury_backend.app.core.config import settings
from treasury_backend.app.api.v1.router import router as api_v1_router
from treasury_backend.app.core.logging import configure_logging
from treasury_backend.app.core.observability import ObservabilityMiddleware
from treasury_backend.app.core.redis_client import ping_redis
from treasury_backend.app.db.session import engine, Base
from treasury_backend.app.core.exceptions import (
    AppException,
    InvalidInputError,
    app_exception_handler,
    http_exception_handler,
    invalid_input_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from treasury_backend.app.models.tenant import Tenant
from treasury_backend.app.models.tenant_settings import TenantSettings
from treasury_backend.app.models.intervenant import Intervenant
from treasury_backend.app.models.advance import Advance
from treasury_backend.app.models.disbursement import Disbursement
from treasury_backend.app.models.movement import Movement
from treasury_backend.app.models.document import Document
from treasury_backend.app.models.justification import Justification
from treasury_backend.app.models.cash_reconciliation import CashReconciliation
from treasury_backend.app.models.alert import Alert


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.
    
    1. Configures logging.
    2. Creates database tables on startup.
    3. Disposes the engine on shutdown.
    """
    configure_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Multi-tenant treasury ledger with threshold alerting",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(InvalidInputError, invalid_input_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.
    
    Returns:
        dict: Status, application information and cache reachability
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "cache": "up" if await ping_redis() else "down",
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")
