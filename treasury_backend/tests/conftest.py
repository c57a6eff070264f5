"""
Centralized Test Configuration.
"""

import pytest

from decimal import Decimal
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from treasury_backend.app.main import app
from treasury_backend.app.core.clock import utcnow
from treasury_backend.app.db.session import get_db, Base
import treasury_backend.app.core.redis_client as redis_client_module
from treasury_backend.app.models.intervenant import Intervenant
from treasury_backend.app.models.ledger_enums import IntervenantType, Modality
from treasury_backend.app.models.movement import Movement
from treasury_backend.app.models.tenant import Tenant
from treasury_backend.app.models.tenant_settings import TenantSettings

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


# Mock Redis for the cash balance cache
class MockRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def ping(self):
        return True

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, key):
        if key in self.store:
            del self.store[key]
            self.ttls.pop(key, None)
            return 1
        return 0

    async def flushdb(self):
        self.store = {}
        self.ttls = {}


@pytest.fixture(scope="session")
def mock_redis():
    return MockRedis()


@pytest.fixture(scope="session", autouse=True)
def apply_overrides(mock_redis):
    """Apply overrides once for the session."""
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = mock_redis

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield

    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client


@pytest.fixture(autouse=True)
async def setup_database(mock_redis):
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await mock_redis.flushdb()

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


# --- Ledger fixtures ---

@pytest.fixture
async def tenant(db_session):
    tenant = Tenant(name="Acme Trading", slug="acme")
    db_session.add(tenant)
    await db_session.commit()
    return tenant


@pytest.fixture
async def other_tenant(db_session):
    tenant = Tenant(name="Other Co", slug="other")
    db_session.add(tenant)
    await db_session.commit()
    return tenant


@pytest.fixture
async def tenant_settings(db_session, tenant):
    """Settings with low thresholds so small fixtures can breach them."""
    row = TenantSettings(
        tenant_id=tenant.id,
        debt_threshold=Decimal("1000"),
        min_cash_balance=Decimal("500"),
        reconciliation_gap_threshold=Decimal("50"),
        disbursement_outstanding_threshold=Decimal("2000"),
        default_advance_due_days=30,
        disbursement_open_days_warning=30,
        alerts_enabled=True,
        currency="TND",
    )
    db_session.add(row)
    await db_session.commit()
    return row


@pytest.fixture
async def supplier(db_session, tenant):
    party = Intervenant(tenant_id=tenant.id, name="Sfax Supplies", type=IntervenantType.SUPPLIER, active=True)
    db_session.add(party)
    await db_session.commit()
    return party


@pytest.fixture
async def employee(db_session, tenant):
    party = Intervenant(tenant_id=tenant.id, name="Amine B.", type=IntervenantType.EMPLOYEE, active=True)
    db_session.add(party)
    await db_session.commit()
    return party


@pytest.fixture
def tenant_headers(tenant):
    return {"X-Tenant-ID": str(tenant.id)}


@pytest.fixture
def add_movement(db_session):
    """Factory inserting a committed movement."""
    async def _add(tenant_id, intervenant_id, kind, amount, modality=Modality.CASH, date=None, **kwargs):
        movement = Movement(
            tenant_id=tenant_id,
            intervenant_id=intervenant_id,
            kind=kind,
            amount=Decimal(str(amount)),
            modality=modality,
            date=date or utcnow(),
            **kwargs,
        )
        db_session.add(movement)
        await db_session.commit()
        return movement
    return _add
