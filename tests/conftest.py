"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Adaptadores en memoria con reloj e ids deterministas
- Base de datos SQLite in-memory (aiosqlite) con las tablas creadas
- Cliente HTTP de prueba (FastAPI TestClient) en modo in-memory
"""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rentwear.api.dependencies import _in_memory_bundle
from rentwear.application.interfaces.clock import FakeClock
from rentwear.application.interfaces.id_generator import FakeIdGenerator
from rentwear.application.use_cases.book_listing import BookListingUseCase
from rentwear.domain.entities.listing import Listing, RentalType
from rentwear.infrastructure.circuit_breaker import (
    identity_breaker,
    object_store_breaker,
    payment_breaker,
)
from rentwear.infrastructure.db.tables import metadata
from rentwear.infrastructure.in_memory import (
    InMemoryIdempotencyRepo,
    InMemoryIdentityResolver,
    InMemoryListingRepo,
    InMemoryObjectStore,
    InMemoryRentalRepo,
    NoopTransactionManager,
    StubPaymentGateway,
)
from rentwear.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ACCOUNTS = {
    "renter@example.com": "renter-1",
    "owner@example.com": "owner-1",
    "other@example.com": "other-1",
}


def _make_listing(**overrides) -> Listing:
    fields = {
        "owner_id": "owner-1",
        "title": "Red silk dress",
        "item_type": "Dress",
        "size": "M",
        "condition": "Like new",
        "wash_instructions": "Dry clean only",
        "rental_type": RentalType.RENT,
        "price_per_day": Decimal("5.00"),
        "available_from": date(2024, 6, 1),
        "available_to": date(2024, 8, 30),
        "phone": "555-0100",
        "contact_email": "owner@example.com",
    }
    fields.update(overrides)
    return Listing(**fields)


# ============================================================================
# ADAPTADORES EN MEMORIA
# ============================================================================


@pytest.fixture
def make_listing():
    return _make_listing


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ids():
    return FakeIdGenerator()


@pytest.fixture
def listing_repo():
    return InMemoryListingRepo()


@pytest.fixture
def rental_repo(listing_repo):
    return InMemoryRentalRepo(listing_repo=listing_repo)


@pytest.fixture
def idempotency_repo():
    return InMemoryIdempotencyRepo()


@pytest.fixture
def gateway():
    return StubPaymentGateway()


@pytest.fixture
def identity():
    return InMemoryIdentityResolver(accounts=ACCOUNTS)


@pytest.fixture
def object_store():
    return InMemoryObjectStore()


@pytest.fixture
def tx():
    return NoopTransactionManager()


@pytest_asyncio.fixture
async def paid_listing(listing_repo):
    """Listing 1 @ 5.00 por día, disponible 2024-06-01..2024-08-30."""
    return await listing_repo.create(_make_listing())


@pytest_asyncio.fixture
async def free_listing(listing_repo):
    return await listing_repo.create(
        _make_listing(
            title="Wool coat",
            item_type="Coat",
            rental_type=RentalType.FREE,
            price_per_day=None,
        )
    )


@pytest.fixture
def book_listing(listing_repo, rental_repo, idempotency_repo, gateway, identity, tx, ids, clock):
    return BookListingUseCase(
        listing_repo=listing_repo,
        rental_repo=rental_repo,
        idempotency_repo=idempotency_repo,
        payment_gateway=gateway,
        identity_resolver=identity,
        transaction_manager=tx,
        id_generator=ids,
        clock=clock,
    )


# ============================================================================
# FIXTURES DE BASE DE DATOS
# ============================================================================


@pytest_asyncio.fixture
async def test_engine():
    """
    Motor async para la base de pruebas.
    StaticPool comparte una sola conexión para que la base in-memory sobreviva.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


# ============================================================================
# FIXTURES DE CLIENTE HTTP
# ============================================================================


@pytest.fixture
def memory_bundle():
    """Bundle in-memory nuevo por test; es el mismo que usan los endpoints."""
    _in_memory_bundle.cache_clear()
    yield _in_memory_bundle()
    _in_memory_bundle.cache_clear()


@pytest.fixture
def client(memory_bundle):
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """
    Reset circuit breakers antes de cada test.
    Evita que tests fallen por breakers abiertos de tests anteriores.
    """
    breakers = (payment_breaker, identity_breaker, object_store_breaker)
    for breaker in breakers:
        breaker.close()
    yield
    for breaker in breakers:
        breaker.close()
