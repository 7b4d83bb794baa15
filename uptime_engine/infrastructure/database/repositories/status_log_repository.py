"""Status log repository implementation using PostgreSQL.

Entries are only ever inserted. Replay order is (changed_at, id) where ``id``
is the BIGINT identity assigned on insert.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_engine.domain.entities.status import ServiceStatus
from uptime_engine.domain.entities.status_log_entry import StatusLogEntry
from uptime_engine.domain.repositories.status_log_repository import (
    StatusLogRepositoryInterface,
)
from uptime_engine.infrastructure.database.models import ServiceStatusLogModel

_REPLAY_ORDER = (ServiceStatusLogModel.changed_at, ServiceStatusLogModel.id)
_REVERSE_REPLAY_ORDER = (
    ServiceStatusLogModel.changed_at.desc(),
    ServiceStatusLogModel.id.desc(),
)


class StatusLogRepository(StatusLogRepositoryInterface):
    """PostgreSQL implementation of StatusLogRepositoryInterface."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session
        """
        self._session = session

    async def append(self, entry: StatusLogEntry) -> StatusLogEntry:
        """Insert an entry and return it with its identity as ``sequence``."""
        model = ServiceStatusLogModel(
            entry_id=entry.id,
            service_id=entry.service_id,
            status_from=entry.status_from.value if entry.status_from else None,
            status_to=entry.status_to.value,
            changed_by=entry.changed_by,
            reason=entry.reason,
            changed_at=entry.changed_at,
        )
        self._session.add(model)
        await self._session.flush()

        return self._to_entity(model)

    async def entries_in_range(
        self, service_id: UUID, start: datetime, end: datetime
    ) -> list[StatusLogEntry]:
        stmt = (
            select(ServiceStatusLogModel)
            .where(
                ServiceStatusLogModel.service_id == service_id,
                ServiceStatusLogModel.changed_at >= start,
                ServiceStatusLogModel.changed_at < end,
            )
            .order_by(*_REPLAY_ORDER)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def last_entry_before(
        self, service_id: UUID, instant: datetime
    ) -> StatusLogEntry | None:
        stmt = (
            select(ServiceStatusLogModel)
            .where(
                ServiceStatusLogModel.service_id == service_id,
                ServiceStatusLogModel.changed_at < instant,
            )
            .order_by(*_REVERSE_REPLAY_ORDER)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    async def first_entry_after(
        self,
        service_id: UUID,
        instant: datetime,
        status_to: ServiceStatus | None = None,
        after_sequence: int | None = None,
    ) -> StatusLogEntry | None:
        later = ServiceStatusLogModel.changed_at > instant
        if after_sequence is not None:
            later = or_(
                later,
                and_(
                    ServiceStatusLogModel.changed_at == instant,
                    ServiceStatusLogModel.id > after_sequence,
                ),
            )
        stmt = select(ServiceStatusLogModel).where(
            ServiceStatusLogModel.service_id == service_id, later
        )
        if status_to is not None:
            stmt = stmt.where(
                ServiceStatusLogModel.status_to == ServiceStatus(status_to).value
            )
        stmt = stmt.order_by(*_REPLAY_ORDER).limit(1)

        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    async def has_entries(self, service_id: UUID) -> bool:
        stmt = select(
            exists().where(ServiceStatusLogModel.service_id == service_id)
        )
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def latest_entry(self, service_id: UUID) -> StatusLogEntry | None:
        stmt = (
            select(ServiceStatusLogModel)
            .where(ServiceStatusLogModel.service_id == service_id)
            .order_by(*_REVERSE_REPLAY_ORDER)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    def _to_entity(self, model: ServiceStatusLogModel) -> StatusLogEntry:
        """Convert SQLAlchemy model to domain entity."""
        return StatusLogEntry(
            id=model.entry_id,
            service_id=model.service_id,
            status_from=ServiceStatus(model.status_from) if model.status_from else None,
            status_to=ServiceStatus(model.status_to),
            changed_by=model.changed_by,
            reason=model.reason,
            changed_at=model.changed_at,
            sequence=model.id,
        )
