"""Database session management.

Provides the commit-or-rollback session scope the background jobs run in and
the transaction factories used by ManageServiceStatusUseCase to make a status
update and its log entry atomic.
"""

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from uptime_engine.infrastructure.database.config import get_session_factory

TransactionFactory = Callable[[], AbstractAsyncContextManager[object]]


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Open a session that commits on success and rolls back on error.

    Yields:
        AsyncSession instance

    Raises:
        RuntimeError: If database has not been initialized
    """
    session_factory = get_session_factory()

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def commit_per_change(session: AsyncSession) -> TransactionFactory:
    """Transaction factory that commits the session after every status change.

    The FOR UPDATE row lock is released as soon as the change is durable, and
    the use case notifies only after that commit. A failed change rolls the
    session back, which never discards earlier changes because those were
    already committed.
    """

    @asynccontextmanager
    async def transaction() -> AsyncIterator[AsyncSession]:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    return transaction


def savepoint_factory(session: AsyncSession) -> TransactionFactory:
    """Transaction factory that wraps each status change in a SAVEPOINT.

    For callers that own the outer transaction: a failed change rolls back only
    its own savepoint, and row locks are held until the caller commits. The
    notification is published when the savepoint is released, before that
    outer commit.

    Example:
        ```python
        async with session_scope() as session:
            use_case = ManageServiceStatusUseCase(
                ..., transaction=savepoint_factory(session)
            )
        ```
    """

    def begin() -> AbstractAsyncContextManager[object]:
        return session.begin_nested()

    return begin
