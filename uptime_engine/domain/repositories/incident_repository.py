"""Incident repository interface module.

Incidents belong to an external collaborator; the engine only needs to look
them up and find the ones currently affecting a service.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from uptime_engine.domain.entities.incident import Incident


class IncidentRepositoryInterface(ABC):
    """Repository interface for Incident lookups."""

    @abstractmethod
    async def get_by_id(self, incident_id: UUID) -> "Incident | None":
        """Get incident by internal UUID.

        Args:
            incident_id: Internal UUID of the incident

        Returns:
            Incident entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_active_for_service(self, service_id: UUID) -> list["Incident"]:
        """List incidents affecting a service whose status is not resolved.

        Args:
            service_id: Internal UUID of the service

        Returns:
            List of active Incident entities (any order)
        """
        pass

    @abstractmethod
    async def save(self, incident: "Incident") -> "Incident":
        """Insert or update an incident together with its affected services.

        Args:
            incident: Incident entity

        Returns:
            Persisted Incident entity
        """
        pass
