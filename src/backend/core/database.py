"""
Database configuration for read access to the record store.

Reports issue concurrent read queries, and an AsyncSession must not be shared
between concurrently running coroutines, so every query opens its own
session from AsyncSessionLocal.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import DatabaseSettings, settings


def build_engine(database: DatabaseSettings) -> AsyncEngine:
    """Create the async engine with pool settings suited to the configured backend."""
    engine_kwargs = {
        "echo": bool(database.echo),
        "pool_pre_ping": False,  # Connections are validated on use
    }
    if database.is_postgres:
        engine_kwargs.update(
            pool_size=database.pool_size,
            max_overflow=database.max_overflow,
            pool_timeout=database.pool_timeout,
            pool_recycle=database.pool_recycle,
            connect_args={
                "server_settings": {
                    "application_name": settings.api.app_name,
                    # Reports only read
                    "default_transaction_read_only": "on",
                },
                "command_timeout": 60,
                "timeout": 30,
            },
        )
    return create_async_engine(database.url, **engine_kwargs)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory for short-lived read sessions."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(settings.database)

AsyncSessionLocal = build_session_factory(engine)


async def ping_database() -> bool:
    """Run a trivial query to check that the record store answers."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(text("SELECT 1"))
        return result.scalar() == 1


async def close_db() -> None:
    """
    Close database connections.
    Should be called on application shutdown.
    """
    await engine.dispose()
