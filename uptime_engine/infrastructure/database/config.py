"""Database engine and session factory for the worker.

The worker owns one pooled asyncpg engine for its lifetime. Entities loaded
by a session stay usable after it commits (expire_on_commit=False).
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from uptime_engine.infrastructure.config.settings import get_settings


def create_async_db_engine(
    database_url: str | None = None,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    echo: bool | None = None,
) -> AsyncEngine:
    """Create async SQLAlchemy engine with connection pooling.

    Unset arguments fall back to DatabaseSettings (DATABASE_URL, DB_POOL_SIZE,
    DB_MAX_OVERFLOW, DB_ECHO).

    Args:
        database_url: PostgreSQL connection URL
        pool_size: Connection pool size
        max_overflow: Burst capacity
        echo: Enable SQL query logging

    Returns:
        AsyncEngine instance configured with connection pooling

    Raises:
        pydantic.ValidationError: If no URL is given and DATABASE_URL is not set
    """
    if database_url is None or pool_size is None or max_overflow is None or echo is None:
        db_settings = get_settings().database
        database_url = database_url or db_settings.url
        pool_size = pool_size if pool_size is not None else db_settings.pool_size
        max_overflow = max_overflow if max_overflow is not None else db_settings.max_overflow
        echo = echo if echo is not None else db_settings.echo

    return create_async_engine(
        database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=echo,
        # changed_at values are compared and returned in UTC
        connect_args={"server_settings": {"timezone": "UTC"}},
    )


def create_async_session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker:
    """Create async session factory.

    Args:
        engine: AsyncEngine instance

    Returns:
        Async session factory (sessionmaker)
    """
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


# Global engine and session factory (initialized by worker startup)
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker | None = None

REQUIRED_TABLES = ("services", "incidents", "incident_services", "service_status_logs")


class SchemaNotReadyError(RuntimeError):
    """Raised when the database is reachable but migrations have not been applied."""


async def verify_schema(engine: AsyncEngine) -> None:
    """Check the worker's tables exist.

    Raises:
        SchemaNotReadyError: If any required table is missing
    """
    async with engine.connect() as conn:
        missing = [
            table
            for table in REQUIRED_TABLES
            if (await conn.execute(text("SELECT to_regclass(:t)"), {"t": table})).scalar()
            is None
        ]
    if missing:
        raise SchemaNotReadyError(
            f"Missing tables {missing}; run 'alembic upgrade head' first"
        )


async def init_db(
    database_url: str | None = None,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    echo: bool | None = None,
    verify: bool = True,
) -> None:
    """Initialize global database engine and session factory.

    Called once at worker startup. With ``verify`` the schema is checked before
    any job runs, and the engine is disposed again if the check fails.
    """
    global _engine, _async_session_factory

    engine = create_async_db_engine(
        database_url=database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        echo=echo,
    )
    if verify:
        try:
            await verify_schema(engine)
        except Exception:
            await engine.dispose()
            raise

    _engine = engine
    _async_session_factory = create_async_session_factory(engine)


async def dispose_db() -> None:
    """Dispose database engine and close all connections."""
    global _engine, _async_session_factory

    if _engine:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None


def get_engine() -> AsyncEngine:
    """Get global database engine.

    Raises:
        RuntimeError: If database has not been initialized
    """
    if _engine is None:
        raise RuntimeError("Database engine not initialized. Call init_db() first.")
    return _engine


def get_session_factory() -> async_sessionmaker:
    if _async_session_factory is None:
        raise RuntimeError(
            "Database session factory not initialized. Call init_db() first."
        )
    return _async_session_factory
