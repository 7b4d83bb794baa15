"""Uptime calculator.

Replays a service's status transitions over a window and computes the share of
time spent operational. Every non-operational status counts as downtime,
regardless of how severe the outage was.
"""

from collections.abc import Sequence

from uptime_engine.domain.entities.status import ServiceStatus
from uptime_engine.domain.entities.status_log_entry import StatusLogEntry
from uptime_engine.domain.entities.uptime import UptimeWindow, minutes_between


class UptimeCalculator:
    """Computes time-weighted uptime percentages from status transitions.

    Algorithm:
    1. Degenerate window (start >= end) -> 0.0
    2. No transitions inside the window -> binary: 100.0 if the status holding
       at window start is operational, else 0.0
    3. Otherwise walk the transitions in order, accumulating minutes spent in
       operational status between consecutive cursors, then the tail segment
       from the last transition to the window end
    4. Round uptime_minutes / total_minutes * 100 to 2 decimal places
    """

    FULL_UPTIME: float = 100.0
    NO_UPTIME: float = 0.0
    PRECISION: int = 2

    def compute_uptime(
        self,
        window: UptimeWindow,
        initial_status: ServiceStatus,
        entries: Sequence[StatusLogEntry],
    ) -> float:
        """Compute uptime percentage over ``window``.

        Args:
            window: Half-open window [start, end)
            initial_status: Status holding at window.start
            entries: Transitions with window.start <= changed_at < window.end,
                in replay order

        Returns:
            Uptime percentage in [0.0, 100.0], rounded to 2 decimals
        """
        if window.is_degenerate:
            return self.NO_UPTIME

        total_minutes = window.total_minutes
        if total_minutes <= 0:
            return self.NO_UPTIME

        if not entries:
            return self.binary_uptime(initial_status)

        uptime_minutes = self.operational_minutes(window, initial_status, entries)
        percentage = uptime_minutes / total_minutes * 100
        return round(min(max(percentage, self.NO_UPTIME), self.FULL_UPTIME), self.PRECISION)

    def operational_minutes(
        self,
        window: UptimeWindow,
        initial_status: ServiceStatus,
        entries: Sequence[StatusLogEntry],
    ) -> float:
        """Minutes spent operational inside ``window``.

        Args:
            window: Half-open window [start, end)
            initial_status: Status holding at window.start
            entries: Transitions inside the window, in replay order

        Returns:
            Operational minutes (0.0 for a degenerate window)
        """
        if window.is_degenerate:
            return 0.0

        cursor_time = window.start
        cursor_status = ServiceStatus(initial_status)
        uptime_minutes = 0.0

        for entry in entries:
            if cursor_status.is_up:
                uptime_minutes += minutes_between(cursor_time, entry.changed_at)
            cursor_status = entry.status_to
            cursor_time = entry.changed_at

        # Tail segment from the last transition to the window end
        if cursor_status.is_up:
            uptime_minutes += minutes_between(cursor_time, window.end)

        return uptime_minutes

    def binary_uptime(self, status: ServiceStatus) -> float:
        """100.0 if ``status`` is operational, else 0.0."""
        return self.FULL_UPTIME if ServiceStatus(status).is_up else self.NO_UPTIME
