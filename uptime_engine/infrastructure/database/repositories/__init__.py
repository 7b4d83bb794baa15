"""Repository implementations module.

This module exports all repository implementations.
"""

from uptime_engine.infrastructure.database.repositories.incident_repository import (
    IncidentRepository,
)
from uptime_engine.infrastructure.database.repositories.service_repository import (
    ServiceRepository,
)
from uptime_engine.infrastructure.database.repositories.status_log_repository import (
    StatusLogRepository,
)

__all__ = [
    "ServiceRepository",
    "IncidentRepository",
    "StatusLogRepository",
]
