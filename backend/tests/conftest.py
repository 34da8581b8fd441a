"""
Pytest configuration and fixtures.

WHY: Fixtures provide reusable test setup/teardown logic, reducing
duplication and ensuring consistent test environments.
"""

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient

from certledger.main import app
from certledger.models.base import Base
from certledger.db.session import get_db
from certledger.services.record_service import RecordService
from certledger.store.memory import InMemoryStateStore
from certledger.store.sql import SQLStateStore


# SQLite in memory keeps the SQL store tests free of external services.
# StaticPool shares the single in-memory database across connections.
TEST_ASYNC_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """
    Create a test database engine.

    Function scope gives each test a fresh world state.
    """
    engine = create_async_engine(
        TEST_ASYNC_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a test database session, rolled back after the test.

    Yields:
        AsyncSession: Database session for the test
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def memory_store() -> InMemoryStateStore:
    """Empty in-memory world state."""
    return InMemoryStateStore()


@pytest.fixture
def record_service(memory_store: InMemoryStateStore) -> RecordService:
    """Record service over the in-memory world state."""
    return RecordService(memory_store)


@pytest_asyncio.fixture
async def sql_store(db_session: AsyncSession) -> SQLStateStore:
    """World state backed by the test database session."""
    return SQLStateStore(db_session)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test HTTP client.

    The request-scoped session is replaced with the test session, so the
    routes run against the SQL store on the in-memory database.

    Yields:
        AsyncClient: HTTP client for making test requests
    """
    from httpx import ASGITransport

    async def override_get_db():
        """Override database dependency with test session."""
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def sample_certificate_args() -> list:
    """
    Arguments of the reference certificate.

    Mixed-case degree and owner exercise the lowercase normalization.
    """
    return ["as23df", "ME", "4674", "Hussein"]
