"""Shared fixtures: in-memory SQLite database, reference records, fixed clock."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backoffice.models import Customer, Invoice, Product, User
from backoffice.schemas import WarrantyCreate
from backoffice.services.warranties import WarrantyService
from backoffice.stores.postgres import Base

FIXED_NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)

CREATOR_ID = 1
TECHNICIAN_ID = 2
CUSTOMER_ID = 1
PRODUCT_ID = 1
INVOICE_ID = 1


class FakeClock:
    """Callable clock returning a settable time."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
async def engine():
    """Fresh in-memory database per test, with foreign keys enforced."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as s:
        yield s


@pytest.fixture
async def reference_data(session: AsyncSession) -> None:
    """Users, a customer, a product and an invoice with known ids."""
    session.add_all(
        [
            User(id=CREATOR_ID, name="Front Desk", email="frontdesk@example.com"),
            User(id=TECHNICIAN_ID, name="Technician", email="tech@example.com"),
            Customer(id=CUSTOMER_ID, code="KH000001", name="Test Customer", phone="0901000001"),
            Product(id=PRODUCT_ID, code="SP000001", name="Test Product", warranty_months=12),
        ]
    )
    await session.flush()
    session.add(Invoice(id=INVOICE_ID, code="HD000001", customer_id=CUSTOMER_ID, total_amount=100.0))
    await session.commit()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(FIXED_NOW)


@pytest.fixture
def service(session: AsyncSession, clock: FakeClock, reference_data) -> WarrantyService:
    return WarrantyService(session, clock=clock)


@pytest.fixture
def make_warranty(service: WarrantyService):
    """Create a ticket through the service with sensible defaults."""

    async def _make(**fields):
        fields.setdefault("creator_id", CREATOR_ID)
        return await service.create(WarrantyCreate(**fields))

    return _make
