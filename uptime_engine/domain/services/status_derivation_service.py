"""Status derivation rules.

Pure rules for turning incident severities into a service status:
- severity -> status mapping (total, fails soft on unknown values)
- "worse than" comparison used by the monotonic-worsening rule on creation
- "worst incident wins" target status used on recompute
"""

from collections.abc import Iterable

from uptime_engine.domain.entities.incident import Incident
from uptime_engine.domain.entities.status import IncidentSeverity, ServiceStatus


class StatusDerivationService:
    """Derives service status from incident severities.

    Mapping:
    - Critical, High -> major_outage
    - Medium -> partial_outage
    - Low -> degraded
    - anything else (unknown, missing) -> operational
    """

    SEVERITY_STATUS_MAP: dict[IncidentSeverity, ServiceStatus] = {
        IncidentSeverity.CRITICAL: ServiceStatus.MAJOR_OUTAGE,
        IncidentSeverity.HIGH: ServiceStatus.MAJOR_OUTAGE,
        IncidentSeverity.MEDIUM: ServiceStatus.PARTIAL_OUTAGE,
        IncidentSeverity.LOW: ServiceStatus.DEGRADED,
    }

    ALL_RESOLVED_MESSAGE = "All incidents resolved"

    @classmethod
    def severity_to_status(cls, severity: IncidentSeverity | str | None) -> ServiceStatus:
        """Map an incident severity to the service status it implies.

        Never raises: unrecognised severities map to operational so that
        malformed incident data cannot break derivation.

        Args:
            severity: Severity enum, raw string or None

        Returns:
            The implied ServiceStatus
        """
        parsed = IncidentSeverity.parse(severity)
        if parsed is None:
            return ServiceStatus.OPERATIONAL
        return cls.SEVERITY_STATUS_MAP.get(parsed, ServiceStatus.OPERATIONAL)

    @staticmethod
    def is_status_worse(candidate: ServiceStatus, current: ServiceStatus) -> bool:
        """Return True if ``candidate`` is strictly worse than ``current``."""
        return ServiceStatus(candidate).is_worse_than(ServiceStatus(current))

    @staticmethod
    def highest_severity(incidents: Iterable[Incident]) -> IncidentSeverity | None:
        """Highest known severity among incidents.

        Incidents with unrecognised severity rank below Low. Ties are broken by
        first occurrence.

        Args:
            incidents: Incidents to inspect

        Returns:
            The highest IncidentSeverity, or None if none is recognised
        """
        highest: IncidentSeverity | None = None
        for incident in incidents:
            severity = incident.known_severity
            if severity is None:
                continue
            if highest is None or severity.rank > highest.rank:
                highest = severity
        return highest

    def determine_target_status(
        self, active_incidents: list[Incident]
    ) -> tuple[ServiceStatus, str]:
        """Status a service should have given its currently active incidents.

        Args:
            active_incidents: Incidents affecting the service that are not resolved

        Returns:
            Tuple of (target status, human-readable message)
        """
        if not active_incidents:
            return ServiceStatus.OPERATIONAL, self.ALL_RESOLVED_MESSAGE

        highest = self.highest_severity(active_incidents)
        target = self.severity_to_status(highest)
        severity_label = highest.value if highest is not None else "unknown"
        message = (
            f"Status based on {len(active_incidents)} active incident(s) "
            f"with highest severity: {severity_label}"
        )
        return target, message
