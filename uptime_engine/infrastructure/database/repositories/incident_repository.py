"""Incident repository implementation using PostgreSQL."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_engine.domain.entities.incident import Incident
from uptime_engine.domain.entities.status import ACTIVE_INCIDENT_STATUSES, IncidentStatus
from uptime_engine.domain.repositories.incident_repository import (
    IncidentRepositoryInterface,
)
from uptime_engine.infrastructure.database.models import (
    IncidentModel,
    ServiceModel,
    incident_services,
)


class IncidentRepository(IncidentRepositoryInterface):
    """PostgreSQL implementation of IncidentRepositoryInterface."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, incident_id: UUID) -> Incident | None:
        stmt = select(IncidentModel).where(IncidentModel.id == incident_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    async def list_active_for_service(self, service_id: UUID) -> list[Incident]:
        """Incidents affecting the service that are not resolved, oldest first."""
        stmt = (
            select(IncidentModel)
            .join(incident_services, incident_services.c.incident_id == IncidentModel.id)
            .where(
                incident_services.c.service_id == service_id,
                IncidentModel.status.in_([s.value for s in ACTIVE_INCIDENT_STATUSES]),
            )
            .order_by(IncidentModel.created_at, IncidentModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def save(self, incident: Incident) -> Incident:
        """Insert or update an incident and its affected-service links."""
        model = await self._session.get(IncidentModel, incident.id)
        if model is None:
            model = IncidentModel(id=incident.id)
            self._session.add(model)

        model.organization_id = incident.organization_id
        model.title = incident.title
        model.severity = _severity_value(incident.severity)
        model.status = IncidentStatus(incident.status).value
        model.created_by = incident.created_by
        model.resolved_at = incident.resolved_at
        model.created_at = incident.created_at

        if incident.service_ids:
            services = await self._session.execute(
                select(ServiceModel).where(ServiceModel.id.in_(incident.service_ids))
            )
            model.services = list(services.scalars().all())
        else:
            model.services = []

        await self._session.flush()
        return self._to_entity(model)

    def _to_entity(self, model: IncidentModel) -> Incident:
        """Convert SQLAlchemy model to domain entity."""
        return Incident(
            id=model.id,
            organization_id=model.organization_id,
            title=model.title,
            severity=model.severity,
            status=IncidentStatus(model.status),
            service_ids=[service.id for service in model.services],
            created_by=model.created_by,
            resolved_at=model.resolved_at,
            created_at=model.created_at,
        )


def _severity_value(severity) -> str:
    return getattr(severity, "value", severity)
