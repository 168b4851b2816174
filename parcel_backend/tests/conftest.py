"""
Centralized Test Configuration.
"""

import pytest
from datetime import datetime, timezone
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from parcel_backend.app.main import app
from parcel_backend.app.db.session import get_db, Base
from parcel_backend.app.core.jwt import create_access_token
from parcel_backend.app.models.enums import (
    DeliveryStatus, PaymentStatus, RiderStatus, UserRole
)
from parcel_backend.app.models.parcel import Parcel
from parcel_backend.app.models.rider import Rider
from parcel_backend.app.models.user import User
from parcel_backend.app.services.payment_gateway import PaymentGateway, get_payment_gateway
from parcel_backend.app.core.reliability import CircuitBreaker
import parcel_backend.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        return not self._closed

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


@pytest.fixture(scope="session")
def redis_client_session():
    return MockRedis()


@pytest.fixture(scope="session", autouse=True)
def apply_overrides(redis_client_session):
    """Apply overrides once for the session."""
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = redis_client_session

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield

    # Restore and clear
    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client


@pytest.fixture(autouse=True)
def gateway():
    """A fresh gateway (and circuit breaker) for every test."""
    fresh = PaymentGateway(
        api_key="sk_test_dummy",
        currency="usd",
        breaker=CircuitBreaker(failure_threshold=2, reset_timeout=60),
    )
    app.dependency_overrides[get_payment_gateway] = lambda: fresh
    yield fresh
    app.dependency_overrides.pop(get_payment_gateway, None)


@pytest.fixture(autouse=True)
async def setup_database(redis_client_session):
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await redis_client_session.flushdb()

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def auth_headers():
    """Bearer headers for a token carrying the given email identity."""
    def _auth_headers(email: str) -> dict:
        token = create_access_token({"sub": f"uid-{email}", "email": email})
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


@pytest.fixture
def make_user(db_session):
    """Insert an account with the given role."""
    async def _make_user(email: str, role: UserRole = UserRole.USER) -> User:
        user = User(email=email, role=role, created_at=datetime.now(timezone.utc))
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_rider(db_session):
    """Insert a rider directly in the given status."""
    async def _make_rider(
        email: str = "rider@test.com",
        name: str = "Rahim Uddin",
        status: RiderStatus = RiderStatus.APPROVED,
    ) -> Rider:
        rider = Rider(
            email=email,
            name=name,
            region="Dhaka",
            district="Mirpur",
            contact="01700000000",
            status=status,
        )
        db_session.add(rider)
        await db_session.commit()
        await db_session.refresh(rider)
        return rider
    return _make_rider


@pytest.fixture
def make_parcel(db_session):
    """Insert a parcel directly, bypassing the store's defaults."""
    counter = {"n": 0}

    async def _make_parcel(
        created_by: str = "user@test.com",
        cost: float = 10.0,
        payment_status: PaymentStatus = PaymentStatus.UNPAID,
        delivery_status: DeliveryStatus = DeliveryStatus.NOT_COLLECTED,
        rider: Rider = None,
        creation_date: datetime = None,
    ) -> Parcel:
        counter["n"] += 1
        now = creation_date or datetime.now(timezone.utc)
        parcel = Parcel(
            tracking_id=f"PCL-TEST-{counter['n']:04d}",
            created_by=created_by,
            title=f"Parcel {counter['n']}",
            cost=cost,
            payment_status=payment_status,
            delivery_status=delivery_status,
            creation_date=now,
            updated_at=now,
        )
        if rider is not None:
            parcel.assigned_rider_id = rider.id
            parcel.assigned_rider_name = rider.name
            parcel.assigned_rider_email = rider.email
            parcel.assigned_rider_contact = rider.contact
            parcel.assigned_rider_region = rider.region
        db_session.add(parcel)
        await db_session.commit()
        await db_session.refresh(parcel)
        return parcel
    return _make_parcel
