"""Use cases - Application-specific business rules.

This package contains use cases that orchestrate domain logic
and implement application-specific workflows.
"""

from uptime_engine.application.use_cases.bulk_uptime_metrics import (
    BulkUptimeMetricsUseCase,
)
from uptime_engine.application.use_cases.calculate_uptime import CalculateUptimeUseCase
from uptime_engine.application.use_cases.get_uptime_chart_data import (
    GetUptimeChartDataUseCase,
)
from uptime_engine.application.use_cases.manage_service_status import (
    ManageServiceStatusUseCase,
)
from uptime_engine.application.use_cases.populate_initial_status_logs import (
    PopulateInitialStatusLogsUseCase,
)
from uptime_engine.application.use_cases.recalculate_service_statuses import (
    RecalculateServiceStatusesUseCase,
)

__all__ = [
    "ManageServiceStatusUseCase",
    "CalculateUptimeUseCase",
    "GetUptimeChartDataUseCase",
    "BulkUptimeMetricsUseCase",
    "RecalculateServiceStatusesUseCase",
    "PopulateInitialStatusLogsUseCase",
]
