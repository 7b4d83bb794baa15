"""Repository interfaces - Abstract data access contracts."""

from uptime_engine.domain.repositories.incident_repository import (
    IncidentRepositoryInterface,
)
from uptime_engine.domain.repositories.service_repository import (
    ServiceNotFoundError,
    ServiceRepositoryInterface,
)
from uptime_engine.domain.repositories.status_log_repository import (
    StatusLogRepositoryInterface,
)
from uptime_engine.domain.repositories.status_notifier import StatusNotifierInterface

__all__ = [
    "ServiceRepositoryInterface",
    "ServiceNotFoundError",
    "IncidentRepositoryInterface",
    "StatusLogRepositoryInterface",
    "StatusNotifierInterface",
]
