"""Status notification sink interface.

Delivery of status-changed notifications (pub/sub fan-out to UI clients) is an
external collaborator. The engine calls ``publish`` once per actual status change
and must not rely on it being synchronous or reliable.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from uptime_engine.domain.entities.status import ServiceStatus


class StatusNotifierInterface(ABC):
    """Fire-and-forget sink for service status changes."""

    @abstractmethod
    async def publish(
        self,
        service_id: UUID,
        old_status: ServiceStatus,
        new_status: ServiceStatus,
    ) -> None:
        """Publish a status change.

        Args:
            service_id: Internal UUID of the service that changed
            old_status: Status before the change
            new_status: Status after the change
        """
        pass

    async def aclose(self) -> None:
        """Release connections held by the sink. No-op unless overridden."""
        return None
