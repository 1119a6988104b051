"""
Test fixtures for the Ledger API test suite.

  - db_engine / session_factory / db_session: fresh in-memory SQLite
    database for each test
  - transfer_engine: a TransferEngine bound to that database
  - client: async HTTP test client with get_db and get_transfer_engine
    overridden to use the test database
  - make_user / make_account: factories that go through the service layer

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    The aiosqlite dialect keeps a single connection for :memory:, so every
    session in a test sees the same tables.
  - The HTTP client and the engine fixtures share one TransferEngine, so
    HTTP and service-level calls queue on the same account locks.
"""

from decimal import Decimal

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

import ledger.models  # noqa: F401
from ledger.database import Base, get_db
from ledger.dependencies import get_transfer_engine
from ledger.main import app
from ledger.services import account_service, ledger_service, user_service
from ledger.services.transfer_engine import TransferEngine


# In-memory SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Provide an async session bound to the test engine."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def transfer_engine(session_factory):
    return TransferEngine(session_factory)


@pytest_asyncio.fixture
async def client(session_factory, transfer_engine):
    """
    Async HTTP test client with the test database injected.

    get_db and get_transfer_engine are overridden so all requests hit the
    in-memory test database instead of the real one.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_transfer_engine] = lambda: transfer_engine

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_user(session_factory):
    """Factory: create and commit a user, return its id."""
    counter = 0

    async def _make_user(username: str | None = None) -> int:
        nonlocal counter
        counter += 1
        username = username or f"user{counter}"
        async with session_factory() as session:
            user = await user_service.create_user(
                session, username, f"{username}@example.com", "s3cret"
            )
            await session.commit()
            return user.id

    return _make_user


@pytest_asyncio.fixture
async def make_account(session_factory, make_user):
    """Factory: create and commit an account with the given balance, return its id."""

    async def _make_account(balance="0", user_id: int | None = None) -> int:
        if user_id is None:
            user_id = await make_user()
        async with session_factory() as session:
            account = await account_service.create_account(
                session, user_id, Decimal(str(balance))
            )
            await session.commit()
            return account.id

    return _make_account


@pytest_asyncio.fixture
async def read_balance(session_factory):
    """Read an account's committed balance in a fresh session."""

    async def _read_balance(account_id: int) -> Decimal:
        async with session_factory() as session:
            account = await account_service.get_account(session, account_id)
            return account.balance

    return _read_balance


@pytest_asyncio.fixture
async def count_transactions(session_factory):
    """Number of records currently in the ledger."""

    async def _count() -> int:
        async with session_factory() as session:
            return len(await ledger_service.list_transactions(session))

    return _count
