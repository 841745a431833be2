"""Pytest fixtures for testing."""
import os
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

# Must be set before any app imports that trigger Settings validation.
# Tests run against in-memory SQLite in dev mode (bypasses auth).
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DEV_MODE"] = "true"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.config import get_settings  # noqa: E402
from models import Base  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture(autouse=True)
def storage_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path]:
    """Point STORAGE_PATH at a per-test directory."""
    root = tmp_path / "storage"
    root.mkdir()
    monkeypatch.setenv("STORAGE_PATH", str(root))
    get_settings.cache_clear()
    yield root
    get_settings.cache_clear()


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """
    Create an in-memory SQLite engine with the schema created.

    StaticPool keeps a single connection so every session sees the same
    database; foreign keys are switched on so ON DELETE rules apply, and
    SAVEPOINT is enabled the same way the app engine enables it.
    """
    from db.session import enable_sqlite_savepoints

    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    enable_sqlite_savepoints(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create an async session on the test database."""
    session_factory = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(
    db_session: AsyncSession,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database session override."""
    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
async def committing_client(
    db_session: AsyncSession,
) -> AsyncGenerator[AsyncClient]:
    """
    Test client whose session commits at request end and rolls back on error.

    Mirrors `get_async_session`, for tests that check what a request leaves
    behind once its unit of work finishes.
    """
    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_async_session] = override_get_async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
