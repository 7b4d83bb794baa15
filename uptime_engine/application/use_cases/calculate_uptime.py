"""Calculate Uptime Use Case.

Reconstructs a service's uptime for arbitrary windows purely from its status
log, and derives per-period summaries and downtime history from the same log.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from uptime_engine.application.dtos.uptime_dto import (
    DowntimeEpisodeDTO,
    UptimeSummaryDTO,
)
from uptime_engine.domain.entities.service import Service
from uptime_engine.domain.entities.status import ServiceStatus
from uptime_engine.domain.entities.uptime import (
    DowntimeEpisode,
    UptimeWindow,
    minutes_between,
    utc_now,
)
from uptime_engine.domain.repositories.status_log_repository import (
    StatusLogRepositoryInterface,
)
from uptime_engine.domain.services.chart_bucketizer import ChartBucketizer
from uptime_engine.domain.services.uptime_calculator import UptimeCalculator

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY_PERIODS = ("24h", "7d", "30d", "90d")


class CalculateUptimeUseCase:
    """Compute time-weighted uptime percentages from the status log.

    Initial status at window start:
    - the status_to of the last entry strictly before the window, if any
    - operational, if the service's history only begins inside or after the
      window
    - if the service has no history at all, the whole computation falls back
      to a binary answer from its current live status
    """

    def __init__(
        self,
        status_log_repo: StatusLogRepositoryInterface,
        calculator: UptimeCalculator | None = None,
        bucketizer: ChartBucketizer | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize use case with dependencies.

        Args:
            status_log_repo: Append-only status log
            calculator: Uptime replay rules
            bucketizer: Reporting period resolution
            clock: Source of "now" for period windows
        """
        self._status_log_repo = status_log_repo
        self._calculator = calculator or UptimeCalculator()
        self._bucketizer = bucketizer or ChartBucketizer()
        self._clock = clock or utc_now

    async def calculate_uptime_for_period(
        self, service: Service, start: datetime, end: datetime
    ) -> float:
        """Uptime percentage of ``service`` over [start, end).

        Args:
            service: The service (its live status is used only when it has no
                status history at all)
            start: Inclusive window start
            end: Exclusive window end

        Returns:
            Uptime percentage in [0.0, 100.0], rounded to 2 decimals; 0.0 for a
            degenerate window
        """
        window = UptimeWindow(start=start, end=end)
        if window.is_degenerate:
            return UptimeCalculator.NO_UPTIME

        prior_entry = await self._status_log_repo.last_entry_before(service.id, start)
        if prior_entry is not None:
            initial_status = prior_entry.status_to
        elif not await self._status_log_repo.has_entries(service.id):
            # No history ever recorded: answer from the live status
            logger.debug(
                f"Service {service.id} has no status history, using live status "
                f"{service.status.value}"
            )
            return self._calculator.binary_uptime(service.status)
        else:
            initial_status = ServiceStatus.OPERATIONAL

        entries = await self._status_log_repo.entries_in_range(service.id, start, end)
        return self._calculator.compute_uptime(window, initial_status, entries)

    async def calculate_uptime(
        self,
        service: Service,
        periods: Sequence[str] = DEFAULT_SUMMARY_PERIODS,
    ) -> list[UptimeSummaryDTO]:
        """Uptime of a service for several lookback periods ending now.

        Args:
            service: The service
            periods: Period keys ("24h", "7d", "30d", "90d"; others use 30 days)

        Returns:
            One UptimeSummaryDTO per requested period, in request order
        """
        now = self._clock()
        summaries = []
        for period_key in periods:
            window = self._bucketizer.resolve_period(period_key).window_ending_at(now)
            uptime = await self.calculate_uptime_for_period(service, window.start, window.end)
            summaries.append(
                UptimeSummaryDTO(
                    period=period_key,
                    uptime_percentage=uptime,
                    start_date=window.start.isoformat(),
                    end_date=window.end.isoformat(),
                )
            )
        return summaries

    async def get_recent_downtime(
        self, service: Service, period: str = "30d"
    ) -> list[DowntimeEpisodeDTO]:
        """Downtime episodes that started within the period, newest first.

        Every log entry moving to a non-operational status starts an episode;
        it ends at the first later entry moving back to operational.

        Args:
            service: The service
            period: Lookback period key

        Returns:
            List of DowntimeEpisodeDTO, newest first
        """
        now = self._clock()
        window = self._bucketizer.resolve_period(period).window_ending_at(now)
        entries = await self._status_log_repo.entries_in_range(
            service.id, window.start, window.end
        )

        episodes: list[DowntimeEpisode] = []
        for entry in reversed(entries):
            if not entry.is_downtime_start:
                continue
            recovery = await self._status_log_repo.first_entry_after(
                service.id,
                entry.changed_at,
                status_to=ServiceStatus.OPERATIONAL,
                after_sequence=entry.sequence,
            )
            resolved_at = recovery.changed_at if recovery is not None else None
            episodes.append(
                DowntimeEpisode(
                    started_at=entry.changed_at,
                    status=entry.status_to,
                    resolved_at=resolved_at,
                    duration_minutes=round(
                        minutes_between(entry.changed_at, resolved_at or now), 2
                    ),
                    reason=entry.reason,
                )
            )

        return [
            DowntimeEpisodeDTO(
                started_at=episode.started_at.isoformat(),
                resolved_at=episode.resolved_at.isoformat() if episode.resolved_at else None,
                status=episode.status.value,
                duration_minutes=episode.duration_minutes,
                is_ongoing=episode.is_ongoing,
                reason=episode.reason,
            )
            for episode in episodes
        ]
