"""Chart bucketizer.

Resolves reporting periods and partitions a window into consecutive buckets for
uptime trend charts.
"""

from collections.abc import Iterator
from datetime import datetime, timedelta

from uptime_engine.domain.entities.uptime import ReportingPeriod, UptimeWindow


class ChartBucketizer:
    """Partitions uptime windows into chart buckets.

    Periods:
    - 24h: 1 day window, 1 hour buckets, "HH:MM" labels
    - 7d: 7 day window, 6 hour buckets, "Mon-DD HH:MM" labels
    - 30d: 30 day window, 1 day buckets, "Mon-DD" labels
    - 90d: 90 day window, 3 day buckets, "Mon-DD" labels
    - anything else: 30 day window, 1 day buckets, "Mon-DD" labels
    """

    PERIODS: dict[str, ReportingPeriod] = {
        "24h": ReportingPeriod("24h", timedelta(days=1), timedelta(hours=1), "%H:%M"),
        "7d": ReportingPeriod("7d", timedelta(days=7), timedelta(hours=6), "%b-%d %H:%M"),
        "30d": ReportingPeriod("30d", timedelta(days=30), timedelta(days=1), "%b-%d"),
        "90d": ReportingPeriod("90d", timedelta(days=90), timedelta(days=3), "%b-%d"),
    }
    DEFAULT_LOOKBACK = timedelta(days=30)
    DEFAULT_BUCKET_WIDTH = timedelta(days=1)
    DEFAULT_LABEL_FORMAT = "%b-%d"

    def resolve_period(self, period: str) -> ReportingPeriod:
        """Resolve a period key, falling back to the 30 day default.

        Args:
            period: Period identifier (e.g. "7d")

        Returns:
            ReportingPeriod for the key; unknown keys keep their name but use
            the default lookback, bucket width and label format
        """
        resolved = self.PERIODS.get(period)
        if resolved is not None:
            return resolved
        return ReportingPeriod(
            key=period,
            lookback=self.DEFAULT_LOOKBACK,
            bucket_width=self.DEFAULT_BUCKET_WIDTH,
            label_format=self.DEFAULT_LABEL_FORMAT,
        )

    def iter_buckets(
        self, window: UptimeWindow, bucket_width: timedelta
    ) -> Iterator[UptimeWindow]:
        """Yield consecutive buckets covering ``window``.

        The final bucket is clipped to window.end and degenerate buckets are
        skipped, so the buckets exactly tile [start, end).

        Args:
            window: Window to partition
            bucket_width: Width of each bucket (must be positive)

        Yields:
            UptimeWindow per bucket, in chronological order

        Raises:
            ValueError: If bucket_width is not positive
        """
        if bucket_width <= timedelta(0):
            raise ValueError(f"bucket_width must be positive, got {bucket_width}")

        bucket_start = window.start
        while bucket_start < window.end:
            bucket_end = min(bucket_start + bucket_width, window.end)
            bucket = UptimeWindow(start=bucket_start, end=bucket_end)
            if not bucket.is_degenerate:
                yield bucket
            bucket_start = bucket_start + bucket_width

    @staticmethod
    def format_label(instant: datetime, period: ReportingPeriod) -> str:
        """Format a bucket start for display."""
        return instant.strftime(period.label_format)
