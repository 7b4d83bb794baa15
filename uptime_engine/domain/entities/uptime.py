"""Domain value objects for uptime reporting.

This module defines value objects produced by uptime reconstruction:
- UptimeWindow: a half-open time interval [start, end)
- ReportingPeriod: a named lookback period ("24h", "7d", ...) with its chart
  bucket width and label format
- UptimeDataPoint: a single bucket of a chart series
- DowntimeEpisode: a stretch of non-operational status reconstructed from the log
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from uptime_engine.domain.entities.status import ServiceStatus


def utc_now() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def minutes_between(start: datetime, end: datetime) -> float:
    """Exact number of minutes from ``start`` to ``end`` (negative if reversed)."""
    return (end - start).total_seconds() / 60.0


@dataclass(frozen=True)
class UptimeWindow:
    """Half-open interval [start, end).

    A window with start >= end is degenerate; it is valid to construct and
    yields zero uptime.
    """

    start: datetime
    end: datetime

    @property
    def is_degenerate(self) -> bool:
        return self.start >= self.end

    @property
    def total_minutes(self) -> float:
        return max(minutes_between(self.start, self.end), 0.0)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


@dataclass(frozen=True)
class ReportingPeriod:
    """A named lookback period.

    Attributes:
        key: Period identifier as requested by callers (e.g. "7d")
        lookback: Length of the window ending at "now"
        bucket_width: Width of each chart bucket
        label_format: strftime format for chart labels
    """

    key: str
    lookback: timedelta
    bucket_width: timedelta
    label_format: str

    def window_ending_at(self, now: datetime) -> UptimeWindow:
        """Window [now - lookback, now)."""
        return UptimeWindow(start=now - self.lookback, end=now)


@dataclass(frozen=True)
class UptimeDataPoint:
    """One bucket of an uptime trend series.

    Attributes:
        timestamp: Bucket start
        uptime: Uptime percentage for the bucket (0.0-100.0, 2 decimals)
        label: Display label formatted per the reporting period
        bucket_end: Bucket end (clipped to the window end)
    """

    timestamp: datetime
    uptime: float
    label: str
    bucket_end: datetime

    @property
    def duration_minutes(self) -> float:
        return minutes_between(self.timestamp, self.bucket_end)


@dataclass(frozen=True)
class DowntimeEpisode:
    """A period during which a service was not operational.

    Attributes:
        started_at: When the service entered the non-operational status
        status: The non-operational status entered
        resolved_at: First later instant the service was operational again,
            None while ongoing
        duration_minutes: Minutes until resolution (or until "now" if ongoing)
        reason: Reason recorded on the log entry that started the episode
    """

    started_at: datetime
    status: ServiceStatus
    resolved_at: datetime | None
    duration_minutes: float
    reason: str | None = None

    @property
    def is_ongoing(self) -> bool:
        return self.resolved_at is None
