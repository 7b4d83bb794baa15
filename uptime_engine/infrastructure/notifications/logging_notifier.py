"""Status change notifier that only emits a structured log event."""

from uuid import UUID

import structlog

from uptime_engine.domain.entities.status import ServiceStatus
from uptime_engine.domain.repositories.status_notifier import StatusNotifierInterface
from uptime_engine.infrastructure.observability.metrics import record_status_change

logger = structlog.get_logger(__name__)


class LoggingStatusNotifier(StatusNotifierInterface):
    """Log each status change. Default backend when no broker is configured."""

    async def publish(
        self, service_id: UUID, old_status: ServiceStatus, new_status: ServiceStatus
    ) -> None:
        record_status_change(old_status.value, new_status.value)
        logger.info(
            "service_status_changed",
            service_id=str(service_id),
            old_status=old_status.value,
            new_status=new_status.value,
        )
