"""Status log entry entity.

A StatusLogEntry records a single status transition of a service. The log of
entries is append-only and is the source of truth for historical state: the
``status_to`` of an entry is the service's status for every instant from its
``changed_at`` up to the ``changed_at`` of the next entry.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from uptime_engine.domain.entities.status import ServiceStatus


class StatusLogImmutableError(RuntimeError):
    """Raised on any attempt to modify or delete a persisted status log entry."""


@dataclass(frozen=True)
class StatusLogEntry:
    """Immutable record of a service status transition.

    Domain invariants:
    - changed_at is timezone-aware (normalised to UTC)
    - status_from is None only for the creation entry of a service
    - instances are frozen; corrections are new entries, never edits

    Attributes:
        service_id: Internal UUID of the service
        status_to: Status the service moved to
        changed_at: Instant of the transition
        status_from: Previous status (None for the creation entry)
        changed_by: Actor identifier, None for system-driven changes
        reason: Human-readable reason for the change
        sequence: Insertion order assigned by the log store (tie-breaker for
            equal changed_at values); None until appended
        id: Unique identifier of the entry
    """

    service_id: UUID
    status_to: ServiceStatus
    changed_at: datetime
    status_from: ServiceStatus | None = None
    changed_by: str | None = None
    reason: str | None = None
    sequence: int | None = None
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self):
        """Validate and normalise entry fields."""
        if self.service_id is None:
            raise ValueError("service_id cannot be empty")
        if self.status_to is None:
            raise ValueError("status_to cannot be empty")
        if self.changed_at.tzinfo is None:
            raise ValueError("changed_at must be timezone-aware")

        # Frozen dataclass: coerce via object.__setattr__
        object.__setattr__(self, "status_to", ServiceStatus(self.status_to))
        if self.status_from is not None:
            object.__setattr__(self, "status_from", ServiceStatus(self.status_from))
        object.__setattr__(self, "changed_at", self.changed_at.astimezone(timezone.utc))

    @property
    def is_creation(self) -> bool:
        """True for the first entry of a service (no previous status)."""
        return self.status_from is None

    @property
    def is_downtime_start(self) -> bool:
        """True when the service moved into a non-operational status."""
        return not self.status_to.is_up

    @property
    def is_uptime_start(self) -> bool:
        """True when the service came back to operational from something else."""
        return self.status_to.is_up and self.status_from is not ServiceStatus.OPERATIONAL

    @property
    def sort_key(self) -> tuple[datetime, int]:
        """Replay ordering: changed_at, then insertion order."""
        return (self.changed_at, self.sequence if self.sequence is not None else 0)
