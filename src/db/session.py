"""Async SQLAlchemy session factory."""
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import Settings, get_settings


def configure_sqlite(engine: AsyncEngine) -> None:
    """
    Make SQLite behave like the production database for our purposes.

    aiosqlite's own transaction handling breaks SAVEPOINT, which the version
    store relies on for retrying version-number collisions, so BEGIN is emitted
    explicitly. Foreign keys are off by default in SQLite and are switched on so
    that ON DELETE CASCADE applies.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create the application engine; pool sizing only applies to server databases."""
    options: dict[str, Any] = {"echo": False}
    if not settings.is_sqlite:
        options.update(
            pool_pre_ping=True,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )

    engine = create_async_engine(settings.database_url, **options)
    if settings.is_sqlite:
        configure_sqlite(engine)
    return engine


engine = create_engine_from_settings(get_settings())

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    Yield an async database session.

    Uses unit-of-work pattern: services use flush() for refreshing objects,
    commit happens once here at request end. This ensures atomic transactions
    per request - if anything fails, all changes are rolled back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
