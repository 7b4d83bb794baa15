"""Status change notifier publishing to Redis pub/sub.

Each change is published as JSON on the channel ``<prefix>.<service_id>``:

    {"service_id": "...", "old_status": "operational",
     "new_status": "degraded", "published_at": "2024-01-01T00:00:00+00:00"}
"""

import json
from datetime import datetime, timezone
from uuid import UUID

import redis.asyncio as aioredis
import structlog

from uptime_engine.domain.entities.status import ServiceStatus
from uptime_engine.domain.repositories.status_notifier import StatusNotifierInterface
from uptime_engine.infrastructure.config import get_settings
from uptime_engine.infrastructure.observability.metrics import (
    record_notification_failure,
    record_status_change,
)

logger = structlog.get_logger(__name__)


class RedisStatusNotifier(StatusNotifierInterface):
    """Fire-and-forget publisher: delivery errors are logged and counted,
    never raised to the caller."""

    BACKEND = "redis"

    def __init__(
        self,
        client: aioredis.Redis | None = None,
        channel_prefix: str | None = None,
    ):
        """Initialize notifier.

        Args:
            client: Redis client (created from REDIS_URL when omitted)
            channel_prefix: Channel prefix (REDIS_STATUS_CHANNEL_PREFIX when omitted)
        """
        redis_settings = get_settings().redis if client is None or channel_prefix is None else None
        self._client = client or aioredis.from_url(
            redis_settings.url,
            encoding="utf-8",
            decode_responses=True,
        )
        self._channel_prefix = channel_prefix or redis_settings.status_channel_prefix

    def channel_for(self, service_id: UUID) -> str:
        return f"{self._channel_prefix}.{service_id}"

    async def publish(
        self, service_id: UUID, old_status: ServiceStatus, new_status: ServiceStatus
    ) -> None:
        record_status_change(old_status.value, new_status.value)
        payload = json.dumps(
            {
                "service_id": str(service_id),
                "old_status": old_status.value,
                "new_status": new_status.value,
                "published_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        channel = self.channel_for(service_id)
        try:
            receivers = await self._client.publish(channel, payload)
        except Exception as e:
            record_notification_failure(self.BACKEND)
            logger.error(
                "status_notification_failed",
                service_id=str(service_id),
                channel=channel,
                error=str(e),
                exc_info=True,
            )
            return

        logger.debug(
            "status_notification_published",
            service_id=str(service_id),
            channel=channel,
            receivers=receivers,
        )

    async def aclose(self) -> None:
        """Close the underlying Redis connection pool."""
        await self._client.aclose()
