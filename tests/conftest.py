"""
Test infrastructure for the blog backend.

Strategy
--------
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- The app's get_db dependency is overridden so every test-time request uses
  the test session factory rather than the production one.
- All tables are created fresh before each test and dropped after.
- Users and sessions have no creation routes, so the ``make_user`` and
  ``make_session`` fixtures insert them directly.
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from blog_backend.database import Base, get_db
from blog_backend.main import app
from blog_backend.middleware import install_query_counter
from blog_backend.models import User, UserSession

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live AsyncSession for seeding and for direct service tests."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user():
    """Insert and commit a user in its own session; returns the user id."""
    async def _make(username: str = "author", **fields) -> int:
        async with async_session_test() as session:
            user = User(
                username=username,
                email=fields.pop("email", f"{username}@example.com"),
                **fields,
            )
            session.add(user)
            await session.commit()
            return user.id
    return _make


@pytest.fixture
def make_session():
    """Insert and commit a login session for *user_id*; returns its id."""
    async def _make(user_id: int, is_removed: bool = False) -> int:
        async with async_session_test() as session:
            row = UserSession(user_id=user_id, is_removed=is_removed)
            session.add(row)
            await session.commit()
            return row.id
    return _make


@pytest.fixture
def prune_comment_refs(monkeypatch):
    """Turn on pruning of deleted comment ids for one test."""
    from blog_backend.config import settings
    monkeypatch.setattr(settings, "PRUNE_COMMENT_REFS", True)
