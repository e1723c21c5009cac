"""
Fixtures for integration tests.

Provides:
- In-memory SQLite database shared by the app and the repository
- Test client for the FastAPI app
- Request bodies for spot cash and installment agreements
"""

from datetime import date
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from dateutil.relativedelta import relativedelta
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from payment_lifecycle.main import app
from payment_lifecycle.infrastructure.database import Base, get_db_session
from payment_lifecycle.infrastructure.repositories import PostgresAgreementRepository


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def repository(test_session: AsyncSession) -> PostgresAgreementRepository:
    """Agreement repository bound to the test session."""
    return PostgresAgreementRepository(test_session)


# =============================================================================
# App Client Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def client(test_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client backed by the in-memory database.

    Each request runs as a unit of work on the shared test session:
    committed on success, rolled back when the endpoint raises.
    """
    async def override_get_db_session():
        try:
            yield test_session
            await test_session.commit()
        except Exception:
            await test_session.rollback()
            raise

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Helper Fixtures
# =============================================================================

def months_ago(months: int) -> date:
    return date.today() - relativedelta(months=months)


@pytest.fixture
def installment_request() -> dict:
    """One-year installment for a single 120,000 lot, first due today."""
    return {
        "client_name": "Juan Dela Cruz",
        "contact_number": "09171234567",
        "user_id": "client_juan",
        "payment_type": "installment",
        "installment_years": 1,
        "start_date": date.today().isoformat(),
        "lots": [
            {
                "lot_id": "12",
                "property_name": "Evergreen Heights",
                "block_lot_no": "Block 3 Lot 7",
                "price": 120000,
            }
        ],
    }


@pytest.fixture
def spot_cash_request() -> dict:
    """Spot cash purchase of two lots."""
    return {
        "client_name": "Maria Santos",
        "user_id": "client_maria",
        "payment_type": "spot_cash",
        "start_date": "2024-03-10",
        "lots": [
            {
                "lot_id": "3",
                "property_name": "Evergreen Heights",
                "block_lot_no": "Block 1 Lot 3",
                "price": 30000,
            },
            {
                "lot_id": "4",
                "property_name": "Evergreen Heights",
                "block_lot_no": "Block 1 Lot 4",
                "price": 20000,
            },
        ],
    }


@pytest.fixture
def overdue_installment_request(installment_request: dict) -> dict:
    """Installment signed three months ago with only the down payment made."""
    return {**installment_request, "start_date": months_ago(3).isoformat()}


@pytest.fixture
def payment_request() -> dict:
    return {
        "amount": 10000,
        "payment_date": date.today().isoformat(),
        "payment_method": "CASH",
    }
