"""Integration fixtures: a PostgreSQL testcontainer shared by the session.

Each test gets a fresh engine built by the production engine factory, with the
schema (append-only trigger included) created on first use and every table
truncated before the test runs.
"""

from collections.abc import AsyncGenerator, Iterator

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from testcontainers.postgres import PostgresContainer

from uptime_engine.infrastructure.database.config import (
    create_async_db_engine,
    create_async_session_factory,
)
from uptime_engine.infrastructure.database.models import Base


@pytest.fixture(scope="session")
def postgres_container() -> Iterator[PostgresContainer]:
    with PostgresContainer("postgres:16-alpine") as container:
        yield container


@pytest.fixture(scope="session")
def database_url(postgres_container: PostgresContainer) -> str:
    """asyncpg connection URL for the running container."""
    url = postgres_container.get_connection_url()
    url = url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    return url.replace("postgresql://", "postgresql+asyncpg://", 1)


@pytest.fixture
async def db_engine(database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_db_engine(database_url, pool_size=5, max_overflow=0, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Database session for each test (committed changes are not rolled back)."""
    session_factory = create_async_session_factory(db_engine)

    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
async def clean_db(db_session: AsyncSession) -> None:
    """Empty every table before each test.

    TRUNCATE is used because the status log rejects row-level DELETE.
    """
    await db_session.execute(
        text(
            "TRUNCATE service_status_logs, incident_services, incidents, services "
            "RESTART IDENTITY CASCADE"
        )
    )
    await db_session.commit()
