"""
Centralized Test Configuration.
"""

import os

# Point the application at SQLite before its settings are read
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from backend.app.main import app
from backend.app.db.session import get_db, Base
from backend.app.models.enums import UserRole
from backend.tests.factories import create_user, bearer
from backend.app.services.bootstrap import ensure_default_accounts
import backend.app.core.token_revocation as token_revocation_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def setex(self, key, seconds, value):
        return await self.set(key, value, ex=seconds)

    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0

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


@pytest.fixture
def mock_redis():
    return MockRedis()


@pytest.fixture
def patch_redis(mock_redis, monkeypatch):
    """Swap the module-level client used by token revocation and /health."""
    monkeypatch.setattr(token_revocation_module, "redis_client", mock_redis)
    yield mock_redis


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def client(session_factory, patch_redis):
    """Async client for testing."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# Shared session for fixture data creation
@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def admin_user(db_session):
    return await create_user(
        db_session, "admin", UserRole.ADMIN, ["candidates", "finance", "users"], "Office Admin",
        password="admin123"
    )


@pytest.fixture
async def staff_user(db_session):
    return await create_user(db_session, "accounts", UserRole.STAFF, ["candidates", "finance"], "Accounts Desk")


@pytest.fixture
async def trainer_user(db_session):
    """Staff without the finance module."""
    return await create_user(db_session, "trainer", UserRole.STAFF, ["candidates"], "Java Trainer")


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
def staff_headers(staff_user):
    return bearer(staff_user)


@pytest.fixture
def trainer_headers(trainer_user):
    return bearer(trainer_user)


@pytest.fixture
async def cash_account(db_session):
    """The system Office Cash account."""
    from backend.app.models.ledger_account import LedgerAccount
    from backend.app.core.config import settings

    await ensure_default_accounts(db_session)
    return await db_session.get(LedgerAccount, settings.default_cash_account_id)
