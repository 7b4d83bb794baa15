"""Get Uptime Chart Data Use Case.

Produces an uptime trend series for a service by splitting a reporting period
into buckets and computing uptime per bucket.
"""

from collections.abc import Callable
from datetime import datetime

from uptime_engine.application.dtos.uptime_dto import UptimeChartPointDTO
from uptime_engine.application.use_cases.calculate_uptime import CalculateUptimeUseCase
from uptime_engine.domain.entities.service import Service
from uptime_engine.domain.entities.uptime import UptimeDataPoint, utc_now
from uptime_engine.domain.services.chart_bucketizer import ChartBucketizer


class GetUptimeChartDataUseCase:
    """Build bucketed uptime series for display.

    The result is a pure function of the service's status log and the period
    (given a fixed clock): finite, chronological and safe to recompute.
    """

    def __init__(
        self,
        calculate_uptime: CalculateUptimeUseCase,
        bucketizer: ChartBucketizer | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._calculate_uptime = calculate_uptime
        self._bucketizer = bucketizer or ChartBucketizer()
        self._clock = clock or utc_now

    async def execute(self, service: Service, period: str = "7d") -> list[UptimeChartPointDTO]:
        """Compute the uptime chart series for a service.

        Args:
            service: The service
            period: "24h" (1h buckets), "7d" (6h), "30d" (1d), "90d" (3d);
                anything else uses 30 days with daily buckets

        Returns:
            Data points in chronological order
        """
        points = await self.data_points(service, period)
        return [
            UptimeChartPointDTO(
                timestamp=point.timestamp.isoformat(),
                uptime=point.uptime,
                label=point.label,
                bucket_end=point.bucket_end.isoformat(),
            )
            for point in points
        ]

    async def data_points(self, service: Service, period: str = "7d") -> list[UptimeDataPoint]:
        """Same series as ``execute`` as domain value objects."""
        reporting_period = self._bucketizer.resolve_period(period)
        window = reporting_period.window_ending_at(self._clock())

        points = []
        for bucket in self._bucketizer.iter_buckets(window, reporting_period.bucket_width):
            uptime = await self._calculate_uptime.calculate_uptime_for_period(
                service, bucket.start, bucket.end
            )
            points.append(
                UptimeDataPoint(
                    timestamp=bucket.start,
                    uptime=uptime,
                    label=self._bucketizer.format_label(bucket.start, reporting_period),
                    bucket_end=bucket.end,
                )
            )
        return points
