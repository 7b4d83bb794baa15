"""Status and severity enums.

Service status and incident severity are totally ordered. Each member carries an
integer rank so "worse than" and "highest severity" comparisons never depend on
string values.
"""

from enum import Enum


class ServiceStatus(str, Enum):
    """Operational status of a service, ordered from best to worst."""

    OPERATIONAL = "operational"
    DEGRADED = "degraded"
    PARTIAL_OUTAGE = "partial_outage"
    MAJOR_OUTAGE = "major_outage"

    @property
    def rank(self) -> int:
        """Impact rank (0 = operational, 3 = major outage)."""
        return _STATUS_RANK[self]

    @property
    def is_up(self) -> bool:
        """Only operational counts as uptime."""
        return self is ServiceStatus.OPERATIONAL

    def is_worse_than(self, other: "ServiceStatus") -> bool:
        """Return True if this status is strictly worse than ``other``."""
        return self.rank > other.rank


_STATUS_RANK = {
    ServiceStatus.OPERATIONAL: 0,
    ServiceStatus.DEGRADED: 1,
    ServiceStatus.PARTIAL_OUTAGE: 2,
    ServiceStatus.MAJOR_OUTAGE: 3,
}


class IncidentSeverity(str, Enum):
    """Incident impact level, ordered from least to most severe."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Severity rank (1 = low, 4 = critical)."""
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: "IncidentSeverity | str | None") -> "IncidentSeverity | None":
        """Coerce a raw value to a severity, or None when it is not recognised.

        Args:
            value: Enum member, raw string (case-insensitive) or None

        Returns:
            Matching IncidentSeverity, or None for unknown/missing values
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_SEVERITY_RANK = {
    IncidentSeverity.LOW: 1,
    IncidentSeverity.MEDIUM: 2,
    IncidentSeverity.HIGH: 3,
    IncidentSeverity.CRITICAL: 4,
}


class IncidentStatus(str, Enum):
    """Incident lifecycle status."""

    INVESTIGATING = "investigating"
    IDENTIFIED = "identified"
    MONITORING = "monitoring"
    RESOLVED = "resolved"

    @property
    def is_active(self) -> bool:
        """Every status except resolved participates in status derivation."""
        return self is not IncidentStatus.RESOLVED


ACTIVE_INCIDENT_STATUSES = frozenset(s for s in IncidentStatus if s.is_active)
