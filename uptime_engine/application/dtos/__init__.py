"""Application layer DTOs.

This package contains data transfer objects (DTOs) for the application layer.
Uses dataclasses (not Pydantic) per Clean Architecture principles.
"""

from uptime_engine.application.dtos.service_status_dto import (
    BatchStatusRecalculationResult,
    PopulateInitialLogsResult,
    StatusChangeResult,
)
from uptime_engine.application.dtos.uptime_dto import (
    DowntimeEpisodeDTO,
    ServiceUptimeMetricDTO,
    UptimeChartPointDTO,
    UptimeSummaryDTO,
)

__all__ = [
    # Status derivation
    "StatusChangeResult",
    "BatchStatusRecalculationResult",
    "PopulateInitialLogsResult",
    # Uptime
    "UptimeSummaryDTO",
    "UptimeChartPointDTO",
    "ServiceUptimeMetricDTO",
    "DowntimeEpisodeDTO",
]
