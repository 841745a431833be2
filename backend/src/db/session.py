"""Async SQLAlchemy session factory."""
from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from core.config import get_settings


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    Let SQLite connections honor SAVEPOINT.

    The sqlite driver defers BEGIN until the first write, so a savepoint opened
    after a read-only query would start (and on release, commit) its own
    transaction. Autocommit is switched off at the driver and BEGIN is emitted
    by SQLAlchemy instead.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, _connection_record) -> None:  # noqa: ANN001
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn) -> None:  # noqa: ANN001
        conn.exec_driver_sql("BEGIN")


settings = get_settings()

# SQLite engines use a static/singleton pool that rejects pool sizing arguments
_pool_kwargs = (
    {}
    if settings.is_sqlite
    else {"pool_size": settings.db_pool_size, "max_overflow": settings.db_max_overflow}
)

engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
    **_pool_kwargs,
)
if settings.is_sqlite:
    enable_sqlite_savepoints(engine)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    Yield an async database session.

    Uses unit-of-work pattern: services use flush() for refreshing objects,
    commit happens once here at request end. If anything fails, all changes
    are rolled back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
