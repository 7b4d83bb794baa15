"""Domain entities - Core business objects."""

from uptime_engine.domain.entities.incident import Incident
from uptime_engine.domain.entities.service import Service
from uptime_engine.domain.entities.status import (
    ACTIVE_INCIDENT_STATUSES,
    IncidentSeverity,
    IncidentStatus,
    ServiceStatus,
)
from uptime_engine.domain.entities.status_log_entry import (
    StatusLogEntry,
    StatusLogImmutableError,
)
from uptime_engine.domain.entities.uptime import (
    DowntimeEpisode,
    ReportingPeriod,
    UptimeDataPoint,
    UptimeWindow,
    minutes_between,
    utc_now,
)

__all__ = [
    # Status enums
    "ServiceStatus",
    "IncidentSeverity",
    "IncidentStatus",
    "ACTIVE_INCIDENT_STATUSES",
    # Service and Incident entities
    "Service",
    "Incident",
    # Status log
    "StatusLogEntry",
    "StatusLogImmutableError",
    # Uptime value objects
    "UptimeWindow",
    "ReportingPeriod",
    "UptimeDataPoint",
    "DowntimeEpisode",
    "minutes_between",
    "utc_now",
]
