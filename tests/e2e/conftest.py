"""E2E fixtures: the full use-case graph wired over the in-memory store."""

from dataclasses import dataclass
from unittest.mock import AsyncMock

import pytest

from uptime_engine.application.use_cases import (
    BulkUptimeMetricsUseCase,
    CalculateUptimeUseCase,
    GetUptimeChartDataUseCase,
    ManageServiceStatusUseCase,
    PopulateInitialStatusLogsUseCase,
    RecalculateServiceStatusesUseCase,
)
from uptime_engine.domain.repositories.status_notifier import StatusNotifierInterface
from uptime_engine.infrastructure.stores.in_memory_status_store import (
    InMemoryStatusStore,
)


@dataclass
class Engine:
    """All use cases sharing one store, one clock and one notifier."""

    store: InMemoryStatusStore
    notifier: AsyncMock
    manage_status: ManageServiceStatusUseCase
    calculate_uptime: CalculateUptimeUseCase
    chart_data: GetUptimeChartDataUseCase
    bulk_metrics: BulkUptimeMetricsUseCase
    recalculate: RecalculateServiceStatusesUseCase
    populate_initial_logs: PopulateInitialStatusLogsUseCase


@pytest.fixture
def engine(store, clock) -> Engine:
    notifier = AsyncMock(spec=StatusNotifierInterface)
    manage_status = ManageServiceStatusUseCase(
        service_repo=store.services,
        incident_repo=store.incidents,
        status_log_repo=store.status_logs,
        notifier=notifier,
        transaction=store.transaction,
        clock=clock,
    )
    calculate_uptime = CalculateUptimeUseCase(status_log_repo=store.status_logs, clock=clock)
    return Engine(
        store=store,
        notifier=notifier,
        manage_status=manage_status,
        calculate_uptime=calculate_uptime,
        chart_data=GetUptimeChartDataUseCase(calculate_uptime=calculate_uptime, clock=clock),
        bulk_metrics=BulkUptimeMetricsUseCase(
            calculate_uptime=calculate_uptime, clock=clock, max_concurrency=4
        ),
        recalculate=RecalculateServiceStatusesUseCase(
            service_repo=store.services, manage_status=manage_status
        ),
        populate_initial_logs=PopulateInitialStatusLogsUseCase(
            service_repo=store.services, manage_status=manage_status
        ),
    )
