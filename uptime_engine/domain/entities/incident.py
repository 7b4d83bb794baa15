"""Incident entity module.

Incidents are supplied by an external incident provider. Only the fields that
drive status derivation are modelled here.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from uptime_engine.domain.entities.status import IncidentSeverity, IncidentStatus


@dataclass
class Incident:
    """An incident affecting one or more services.

    ``severity`` is kept as received: an unrecognised raw value is allowed so
    that malformed incident data never breaks status derivation (it simply maps
    to operational).

    Attributes:
        title: Short incident title
        organization_id: Owning organization
        severity: Incident severity (IncidentSeverity or raw provider value)
        status: Lifecycle status
        service_ids: UUIDs of the affected services
        created_by: Actor who opened the incident
        resolved_at: When the incident was resolved, if it has been
        id: Internal UUID identifier
        created_at: Timestamp when the incident was opened
    """

    title: str
    organization_id: UUID
    severity: IncidentSeverity | str = IncidentSeverity.LOW
    status: IncidentStatus = IncidentStatus.INVESTIGATING
    service_ids: list[UUID] = field(default_factory=list)
    created_by: str | None = None
    resolved_at: datetime | None = None

    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        """Validate domain invariants after initialization."""
        if not self.title:
            raise ValueError("title cannot be empty")
        self.status = IncidentStatus(self.status)
        parsed = IncidentSeverity.parse(self.severity)
        if parsed is not None:
            self.severity = parsed

    @property
    def is_active(self) -> bool:
        """Active incidents (not resolved) participate in status derivation."""
        return self.status.is_active

    @property
    def known_severity(self) -> IncidentSeverity | None:
        """Severity as an enum, or None when the raw value is unrecognised."""
        return IncidentSeverity.parse(self.severity)

    def resolve(self, resolved_at: datetime | None = None) -> None:
        """Mark the incident as resolved.

        Args:
            resolved_at: Resolution instant (defaults to now, UTC)
        """
        self.status = IncidentStatus.RESOLVED
        self.resolved_at = resolved_at or datetime.now(timezone.utc)
