"""Pytest configuration and shared fixtures."""

import os
from collections.abc import AsyncGenerator


# Settings are read at import time; configure them before importing the app.
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from onboarding.core.auth import create_access_token
from onboarding.core.database import Base, get_db
from onboarding.main import create_app

# Import all models to ensure they're registered with Base.metadata
from onboarding.modules.audit.models import AuditLog  # noqa: F401
from onboarding.modules.users.models import User, UserRole
from tests.factories.user import UserFactory


# Defaults to an in-memory SQLite database; point at PostgreSQL with
# TEST_DATABASE_URL=postgresql+asyncpg://... to run against the real backend.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest.fixture(scope="function")
async def engine():
    """Create test database engine."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        # One shared connection keeps the in-memory database alive
        engine = create_async_engine(
            TEST_DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db(engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a transactional database session for tests.

    Each test runs in its own transaction that is rolled back
    after the test completes, ensuring test isolation.
    """
    async with engine.connect() as conn:
        await conn.begin()

        session_factory = async_sessionmaker(
            bind=conn,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        async with session_factory() as session:
            yield session

        await conn.rollback()


@pytest.fixture
async def app(db: AsyncSession):
    """Create test application instance."""
    application = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# User Fixtures
# ============================================================


@pytest.fixture
async def pm_user(db: AsyncSession) -> User:
    """A persisted, active PM."""
    user = UserFactory.build(role=UserRole.PM, name="Park PM")
    db.add(user)
    await db.flush()
    return user


@pytest.fixture
async def instructor_user(db: AsyncSession) -> User:
    """A persisted, active instructor."""
    user = UserFactory.build(role=UserRole.INSTRUCTOR, name="Lee Instructor")
    db.add(user)
    await db.flush()
    return user


def bearer_headers(user: User) -> dict[str, str]:
    """Authorization headers carrying a valid access token for ``user``."""
    token = create_access_token(user_id=user.id, role=user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def pm_headers(pm_user: User) -> dict[str, str]:
    """Authorization headers for the PM."""
    return bearer_headers(pm_user)


@pytest.fixture
def instructor_headers(instructor_user: User) -> dict[str, str]:
    """Authorization headers for the instructor."""
    return bearer_headers(instructor_user)


@pytest.fixture
async def pm_client(app, pm_headers: dict[str, str]) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client authenticated as the PM."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=pm_headers,
    ) as client:
        yield client
