"""Shared pytest fixtures.

Every test gets its own in-memory SQLite database; the API client shares
the test's session through a `get_db` dependency override.
"""

import os

# Configure settings before the application modules are imported
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "dev")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("AUTHORIZATION_ENABLED", "true")

from decimal import Decimal
from typing import Any, AsyncGenerator, Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.core.access_policy import Actor, Role
from app.infra.database import build_engine
from app.main import app
from app.models import Base, Product, ProductCategory
from app.services.lifecycle_service import LifecycleEngine


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with all tables created."""
    engine = build_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with factory() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async test client bound to the test database session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# =============================================================================
# ACTORS
# =============================================================================


@pytest.fixture
def admin_actor() -> Actor:
    return Actor(user_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def public_actor() -> Actor:
    return Actor(user_id="user-1", role=Role.PUBLIC)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture
def public_headers() -> dict[str, str]:
    return {"X-User-Id": "user-1", "X-User-Role": "public"}


# =============================================================================
# MODEL FIXTURES
# =============================================================================


@pytest.fixture
async def category(db_session: AsyncSession) -> ProductCategory:
    category = ProductCategory(code="beverages", name="Beverages")
    db_session.add(category)
    await db_session.flush()
    return category


@pytest.fixture
async def other_category(db_session: AsyncSession) -> ProductCategory:
    category = ProductCategory(code="snacks", name="Snacks")
    db_session.add(category)
    await db_session.flush()
    return category


@pytest.fixture
def engine(db_session: AsyncSession) -> LifecycleEngine:
    return LifecycleEngine(db_session)


@pytest.fixture
def make_product(
    engine: LifecycleEngine,
    category: ProductCategory,
    public_actor: Actor,
) -> Callable[..., Awaitable[Product]]:
    """Factory creating draft products with unique SKUs."""
    counter = {"n": 0}

    async def _make(**overrides: Any) -> Product:
        counter["n"] += 1
        attributes: dict[str, Any] = {
            "name": f"Product {counter['n']}",
            "category_id": category.id,
            "unit_price": Decimal("19.99"),
            "sku": f"SKU-{counter['n']:04d}",
        }
        attributes.update(overrides)
        return await engine.create_product(attributes, public_actor)

    return _make
