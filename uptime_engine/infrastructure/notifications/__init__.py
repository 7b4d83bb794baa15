"""Status change notification backends."""

from uptime_engine.domain.repositories.status_notifier import StatusNotifierInterface
from uptime_engine.infrastructure.config import get_settings
from uptime_engine.infrastructure.notifications.logging_notifier import (
    LoggingStatusNotifier,
)
from uptime_engine.infrastructure.notifications.redis_notifier import RedisStatusNotifier


def build_notifier() -> StatusNotifierInterface:
    """Create the notifier selected by NOTIFIER_BACKEND."""
    if get_settings().notifications.backend == "redis":
        return RedisStatusNotifier()
    return LoggingStatusNotifier()


__all__ = [
    "LoggingStatusNotifier",
    "RedisStatusNotifier",
    "build_notifier",
]
