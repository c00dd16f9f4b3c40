"""
Test infrastructure for the Blog API.

Strategy
--------
- SQLite in-memory via aiosqlite; StaticPool keeps every session on the
  one connection that owns the in-memory database.
- ``get_db`` is overridden with the test session factory, and the image
  storage dependency points at a per-test temporary directory.
- Tables are created before and dropped after every test.
- Redis is disabled (``cache._redis = None``); the CacheManager turns
  every call into a miss or a no-op.
- Writes need a bearer token: ``make_user`` creates a user row and
  returns it with ready-made ``Authorization`` headers.
"""
from dataclasses import dataclass

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from app.auth import create_access_token
from app.cache import cache
from app.database import Base, get_db
from app.dependencies import get_image_storage
from app.main import app
from app.middleware import install_query_counter
from app.models import User
from app.storage import ImageStorage

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


async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


@dataclass
class Actor:
    id: str
    username: str
    headers: dict


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    cache._redis = None
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def image_storage(tmp_path) -> ImageStorage:
    storage = ImageStorage(tmp_path / "uploads")
    app.dependency_overrides[get_image_storage] = lambda: storage
    yield storage
    app.dependency_overrides.pop(get_image_storage, None)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client(image_storage) -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user():
    """Factory: insert a user (committed) and return an Actor with auth headers."""

    async def _make(username: str = "alice") -> Actor:
        async with async_session_test() as session:
            user = User(username=username, email=f"{username}@example.com")
            session.add(user)
            await session.commit()
        token = create_access_token(user.id)
        return Actor(user.id, username, {"Authorization": f"Bearer {token}"})

    return _make
