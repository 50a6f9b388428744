"""
Test configuration and fixtures
In-memory SQLite database and a fake HuraPayments gateway
"""

import json
import os
from decimal import Decimal
from typing import AsyncGenerator, Callable, List
from uuid import uuid4

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["PROMETHEUS_ENABLED"] = "false"

# Import all models BEFORE creating fixtures (critical for create_all to work)
from pixstay.core.database import Base
from pixstay.models.booking import Booking, BookingPaymentStatus
from pixstay.models.payment_transaction import PaymentTransaction  # noqa: F401
from pixstay.services.hurapayments import HuraPaymentsClient, HuraPaymentsConfig
from pixstay.services.payment_store import PaymentStore

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeGateway:
    """
    Records requests sent to the gateway and answers with a canned response.
    `handler` can be replaced to raise transport errors.
    """

    def __init__(self, status_code: int = 200, body=None):
        self.status_code = status_code
        self.body = body if body is not None else {
            "data": {"id": "tx1", "status": "waiting_payment", "pix": {"qr_code": "00020126EMV"}}
        }
        self.requests: List[httpx.Request] = []
        self.handler: Callable = self._respond

    def _respond(self, request: httpx.Request) -> httpx.Response:
        if isinstance(self.body, str):
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, json=self.body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest_asyncio.fixture(scope="function")
async def test_db():
    """Create async database engine for tests"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_db) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async_session_maker = async_sessionmaker(
        test_db,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


@pytest.fixture
def payment_config() -> HuraPaymentsConfig:
    return HuraPaymentsConfig(
        public_key="pk_test",
        secret_key="sk_test",
        postback_url="http://testserver/api/v1/payments/hurapayments/postback",
        api_url="https://gateway.test",
        timeout_seconds=2.0,
    )


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def gateway_client(payment_config, fake_gateway) -> HuraPaymentsClient:
    return HuraPaymentsClient(payment_config, transport=httpx.MockTransport(fake_gateway))


@pytest.fixture
def store(db_session) -> PaymentStore:
    return PaymentStore(db_session)


@pytest_asyncio.fixture
async def client(db_session, payment_config, gateway_client):
    """Create test client with dependency override"""
    from pixstay.main import app
    from pixstay.core.database import get_session
    from pixstay.api.deps import get_payment_config, get_gateway_client

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_payment_config] = lambda: payment_config
    app.dependency_overrides[get_gateway_client] = lambda: gateway_client

    try:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


async def create_booking(db_session, **overrides) -> Booking:
    """Helper function to insert a booking"""
    values = {
        "id": str(uuid4()),
        "property_id": "prop-1",
        "guest_name": "Maria Silva",
        "guest_email": "maria@example.com",
        "guest_phone": "+5511999990000",
        "nights": 3,
        "price_per_night": Decimal("150.00"),
        "total_price": Decimal("450.00"),
        "payment_status": BookingPaymentStatus.PENDING,
    }
    values.update(overrides)
    booking = Booking(**values)
    db_session.add(booking)
    await db_session.commit()
    await db_session.refresh(booking)
    return booking


@pytest_asyncio.fixture
async def test_booking(db_session) -> Booking:
    """Create test booking"""
    return await create_booking(db_session)


@pytest.fixture
def pix_request_data(test_booking) -> dict:
    """Sample transaction request for test_booking"""
    return {
        "bookingId": test_booking.id,
        "amountCents": 45000,
        "guest": {
            "name": "Maria Silva",
            "email": "maria@example.com",
            "phone": "+5511999990000",
            "cpf": "123.456.789-00",
        },
        "items": [
            {"title": "Casa na praia (3 noites)", "quantity": 1, "unitPrice": 45000}
        ],
        "metadata": {"property_id": "prop-1", "source": "reservations"},
    }
