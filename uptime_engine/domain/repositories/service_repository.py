"""Service repository interface module.

This module defines the abstract interface for Service entity operations.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from uptime_engine.domain.entities.service import Service
    from uptime_engine.domain.entities.status import ServiceStatus


class ServiceNotFoundError(LookupError):
    """Raised when an operation targets a service that does not exist."""

    def __init__(self, service_id: UUID):
        super().__init__(f"Service with id '{service_id}' does not exist")
        self.service_id = service_id


class ServiceRepositoryInterface(ABC):
    """Repository interface for Service entity operations.

    The live ``status`` column is written exclusively through
    ``update_status``, which only the status derivation use case calls.
    """

    @abstractmethod
    async def get_by_id(self, service_id: UUID) -> "Service | None":
        """Get service by internal UUID.

        Args:
            service_id: Internal UUID of the service

        Returns:
            Service entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_for_update(self, service_id: UUID) -> "Service | None":
        """Get service and lock it for the rest of the current transaction.

        Used to serialize the read-compare-write sequence of a status change.

        Args:
            service_id: Internal UUID of the service

        Returns:
            Service entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_many(self, service_ids: list[UUID]) -> list["Service"]:
        """Get services by internal UUIDs, silently skipping unknown ids.

        Args:
            service_ids: Internal UUIDs

        Returns:
            List of Service entities found
        """
        pass

    @abstractmethod
    async def list_by_organization(self, organization_id: UUID) -> list["Service"]:
        """List all services of an organization.

        Args:
            organization_id: Owning organization

        Returns:
            List of Service entities
        """
        pass

    @abstractmethod
    async def list_all(self, skip: int = 0, limit: int = 100) -> list["Service"]:
        """List all services with pagination.

        Args:
            skip: Number of records to skip (for pagination)
            limit: Maximum number of records to return

        Returns:
            List of Service entities
        """
        pass

    @abstractmethod
    async def list_organization_ids(self) -> list[UUID]:
        """List the distinct organizations that own at least one service.

        Returns:
            List of organization UUIDs
        """
        pass

    @abstractmethod
    async def create(self, service: "Service") -> "Service":
        """Create a new service.

        Args:
            service: Service entity to create

        Returns:
            Created Service entity

        Raises:
            ValueError: If a service with the same id already exists
        """
        pass

    @abstractmethod
    async def update_status(
        self,
        service_id: UUID,
        status: "ServiceStatus",
        status_message: str | None = None,
    ) -> "Service":
        """Persist a new live status for a service.

        Args:
            service_id: Internal UUID of the service
            status: New live status
            status_message: Reason attached to the change

        Returns:
            Updated Service entity

        Raises:
            ServiceNotFoundError: If the service does not exist
        """
        pass
