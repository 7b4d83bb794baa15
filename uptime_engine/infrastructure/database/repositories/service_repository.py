"""Service repository implementation using PostgreSQL.

This module implements the ServiceRepositoryInterface using SQLAlchemy
and AsyncPG for PostgreSQL database operations.
"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import distinct, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_engine.domain.entities.service import Service
from uptime_engine.domain.entities.status import ServiceStatus
from uptime_engine.domain.repositories.service_repository import (
    ServiceNotFoundError,
    ServiceRepositoryInterface,
)
from uptime_engine.infrastructure.database.models import ServiceModel


class ServiceRepository(ServiceRepositoryInterface):
    """PostgreSQL implementation of ServiceRepositoryInterface.

    This repository handles mapping between domain Service entities
    and ServiceModel SQLAlchemy models.
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session
        """
        self._session = session

    async def get_by_id(self, service_id: UUID) -> Service | None:
        stmt = select(ServiceModel).where(ServiceModel.id == service_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    async def get_for_update(self, service_id: UUID) -> Service | None:
        """Get service with SELECT ... FOR UPDATE.

        The row lock is held until the enclosing transaction ends, which
        serializes status changes of the same service across processes.
        """
        stmt = (
            select(ServiceModel)
            .where(ServiceModel.id == service_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    async def get_many(self, service_ids: list[UUID]) -> list[Service]:
        if not service_ids:
            return []

        stmt = (
            select(ServiceModel)
            .where(ServiceModel.id.in_(service_ids))
            .order_by(ServiceModel.name)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def list_by_organization(self, organization_id: UUID) -> list[Service]:
        stmt = (
            select(ServiceModel)
            .where(ServiceModel.organization_id == organization_id)
            .order_by(ServiceModel.name)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def list_all(self, skip: int = 0, limit: int = 100) -> list[Service]:
        """List all services with pagination.

        Ordered by creation time then id, so pages are stable while the
        table is being appended to.
        """
        stmt = (
            select(ServiceModel)
            .order_by(ServiceModel.created_at, ServiceModel.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    async def list_organization_ids(self) -> list[UUID]:
        stmt = select(distinct(ServiceModel.organization_id)).order_by(
            ServiceModel.organization_id
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, service: Service) -> Service:
        """Create a new service.

        Raises:
            ValueError: If service with same id already exists
        """
        existing = await self.get_by_id(service.id)
        if existing:
            raise ValueError(f"Service with id '{service.id}' already exists")

        model = self._to_model(service)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)

        return self._to_entity(model)

    async def update_status(
        self,
        service_id: UUID,
        status: ServiceStatus,
        status_message: str | None = None,
    ) -> Service:
        """Persist a new live status for a service.

        Raises:
            ServiceNotFoundError: If the service does not exist
        """
        stmt = (
            update(ServiceModel)
            .where(ServiceModel.id == service_id)
            .values(
                status=ServiceStatus(status).value,
                status_message=status_message,
                updated_at=datetime.now(timezone.utc),
            )
            .returning(ServiceModel)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            raise ServiceNotFoundError(service_id)

        return self._to_entity(model)

    def _to_entity(self, model: ServiceModel) -> Service:
        """Convert SQLAlchemy model to domain entity."""
        return Service(
            id=model.id,
            name=model.name,
            organization_id=model.organization_id,
            status=ServiceStatus(model.status),
            status_message=model.status_message,
            description=model.description,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Service) -> ServiceModel:
        """Convert domain entity to SQLAlchemy model."""
        return ServiceModel(
            id=entity.id,
            name=entity.name,
            organization_id=entity.organization_id,
            status=entity.status.value,
            status_message=entity.status_message,
            description=entity.description,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
