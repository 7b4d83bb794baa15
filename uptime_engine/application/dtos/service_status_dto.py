"""DTOs for service status derivation and batch recalculation."""

from dataclasses import dataclass, field
from uuid import UUID

from uptime_engine.domain.entities.status import ServiceStatus
from uptime_engine.domain.entities.status_log_entry import StatusLogEntry


@dataclass
class StatusChangeResult:
    """Outcome of a status derivation for one service.

    Attributes:
        service_id: Internal UUID of the service
        old_status: Live status before the derivation
        new_status: Live status after the derivation
        log_entry: Entry appended for the change, None on no-op
    """

    service_id: UUID
    old_status: ServiceStatus
    new_status: ServiceStatus
    log_entry: StatusLogEntry | None = None

    @property
    def changed(self) -> bool:
        return self.log_entry is not None


@dataclass
class BatchStatusRecalculationResult:
    """Summary of a bulk status recalculation."""

    total_services: int
    changed: int
    unchanged: int
    failed: int
    duration_seconds: float
    failures: list[dict[str, str]] = field(default_factory=list)


@dataclass
class PopulateInitialLogsResult:
    """Summary of a creation-entry backfill run."""

    total_services: int
    created: int
    skipped: int
    failed: int
    failures: list[dict[str, str]] = field(default_factory=list)
