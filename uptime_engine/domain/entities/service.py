"""Service entity module.

This module defines the Service entity representing a monitored service whose
operational status is tracked over time.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from uptime_engine.domain.entities.status import ServiceStatus


@dataclass
class Service:
    """Represents a monitored service.

    Domain invariants:
    - name cannot be empty
    - status is a projection of the status log: it must always equal the
      status_to of the service's most recent StatusLogEntry, and is only
      written by ManageServiceStatusUseCase together with that entry

    Attributes:
        name: Display name of the service
        organization_id: Owning organization
        status: Live status (materialised projection of the status log)
        status_message: Reason attached to the last status change
        description: Free-form description
        id: Internal UUID identifier
        created_at: Timestamp when service was created
        updated_at: Timestamp when service was last updated
    """

    name: str
    organization_id: UUID
    status: ServiceStatus = ServiceStatus.OPERATIONAL
    status_message: str | None = None
    description: str = ""

    # Audit fields
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        """Validate domain invariants after initialization."""
        if not self.name:
            raise ValueError("name cannot be empty")
        self.status = ServiceStatus(self.status)

    @property
    def is_operational(self) -> bool:
        """True when the live status counts as uptime."""
        return self.status.is_up
