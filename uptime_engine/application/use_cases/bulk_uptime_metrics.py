"""Bulk Uptime Metrics Use Case.

Per-service and organization-wide uptime summaries built on
CalculateUptimeUseCase.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from uptime_engine.application.dtos.uptime_dto import ServiceUptimeMetricDTO
from uptime_engine.application.use_cases.calculate_uptime import CalculateUptimeUseCase
from uptime_engine.domain.entities.service import Service
from uptime_engine.domain.entities.uptime import UptimeWindow, utc_now
from uptime_engine.domain.services.chart_bucketizer import ChartBucketizer

logger = logging.getLogger(__name__)

# Default limit on services computed concurrently. SQL repositories sharing a
# single session must use 1.
DEFAULT_MAX_CONCURRENCY = 1


class BulkUptimeMetricsUseCase:
    """Uptime metrics across many services over one shared window.

    All services in a call are measured over the same [now - period, now)
    window. Services share no mutable state, so they may be computed
    concurrently up to ``max_concurrency``.
    """

    EMPTY_ORGANIZATION_UPTIME = 100.0

    def __init__(
        self,
        calculate_uptime: CalculateUptimeUseCase,
        bucketizer: ChartBucketizer | None = None,
        clock: Callable[[], datetime] | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        """Initialize use case with dependencies.

        Args:
            calculate_uptime: Per-service uptime computation
            bucketizer: Reporting period resolution
            clock: Source of "now"
            max_concurrency: Maximum services computed at once (>= 1)
        """
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._calculate_uptime = calculate_uptime
        self._bucketizer = bucketizer or ChartBucketizer()
        self._clock = clock or utc_now
        self._max_concurrency = max_concurrency

    async def get_bulk_uptime_metrics(
        self, services: list[Service], period: str = "30d"
    ) -> list[ServiceUptimeMetricDTO]:
        """Uptime per service, sorted by uptime percentage descending.

        Args:
            services: Services to measure
            period: Lookback period key

        Returns:
            One ServiceUptimeMetricDTO per service, highest uptime first
            (ties keep input order)
        """
        window = self._window(period)
        uptimes = await self._uptimes(services, window)

        metrics = [
            ServiceUptimeMetricDTO(
                service_id=str(service.id),
                service_name=service.name,
                uptime_percentage=uptime,
                status=service.status.value,
            )
            for service, uptime in zip(services, uptimes)
        ]
        metrics.sort(key=lambda m: m.uptime_percentage, reverse=True)
        return metrics

    async def get_organization_uptime_average(
        self, services: list[Service], period: str = "30d"
    ) -> float:
        """Arithmetic mean of per-service uptime, rounded to 2 decimals.

        Args:
            services: Services of the organization
            period: Lookback period key

        Returns:
            Mean uptime percentage; 100.0 for an empty service set
        """
        if not services:
            return self.EMPTY_ORGANIZATION_UPTIME

        uptimes = await self._uptimes(services, self._window(period))
        return round(sum(uptimes) / len(uptimes), 2)

    def _window(self, period: str) -> UptimeWindow:
        return self._bucketizer.resolve_period(period).window_ending_at(self._clock())

    async def _uptimes(self, services: list[Service], window: UptimeWindow) -> list[float]:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def measure(service: Service) -> float:
            async with semaphore:
                return await self._calculate_uptime.calculate_uptime_for_period(
                    service, window.start, window.end
                )

        logger.debug(
            f"Computing uptime for {len(services)} services over "
            f"{window.start.isoformat()}..{window.end.isoformat()}"
        )
        return list(await asyncio.gather(*(measure(s) for s in services)))
