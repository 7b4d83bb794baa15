"""DTOs for uptime metrics, chart series and downtime history.

Timestamps are ISO-8601 strings, as handed to outer layers.
"""

from dataclasses import dataclass


@dataclass
class UptimeSummaryDTO:
    """Uptime of a service over one reporting period ending now."""

    period: str
    uptime_percentage: float
    start_date: str
    end_date: str


@dataclass
class UptimeChartPointDTO:
    """One bucket of an uptime trend chart."""

    timestamp: str
    uptime: float
    label: str
    bucket_end: str


@dataclass
class ServiceUptimeMetricDTO:
    """Per-service row of a bulk uptime report."""

    service_id: str
    service_name: str
    uptime_percentage: float
    status: str


@dataclass
class DowntimeEpisodeDTO:
    """A reconstructed downtime episode."""

    started_at: str
    resolved_at: str | None
    status: str
    duration_minutes: float
    is_ongoing: bool
    reason: str | None = None
