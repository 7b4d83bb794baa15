"""Unit tests for PopulateInitialStatusLogsUseCase."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from uptime_engine.application.use_cases.manage_service_status import (
    ManageServiceStatusUseCase,
)
from uptime_engine.application.use_cases.populate_initial_status_logs import (
    PopulateInitialStatusLogsUseCase,
)
from uptime_engine.domain.entities.status import ServiceStatus
from uptime_engine.domain.repositories.status_notifier import StatusNotifierInterface
from tests.conftest import T0


@pytest.fixture
def manage_status(store, clock):
    return ManageServiceStatusUseCase(
        service_repo=store.services,
        incident_repo=store.incidents,
        status_log_repo=store.status_logs,
        notifier=AsyncMock(spec=StatusNotifierInterface),
        transaction=store.transaction,
        clock=clock,
    )


async def test_backfills_services_without_history(store, make_service, manage_status):
    # Arrange
    legacy = await store.services.create(
        make_service(
            "legacy",
            status=ServiceStatus.DEGRADED,
            created_at=T0 - timedelta(days=200),
        )
    )
    tracked = await store.services.create(make_service("tracked"))
    await manage_status.record_service_created(tracked)
    use_case = PopulateInitialStatusLogsUseCase(
        service_repo=store.services, manage_status=manage_status
    )

    # Act
    result = await use_case.execute()

    # Assert
    assert result.total_services == 2
    assert result.created == 1
    assert result.skipped == 1
    assert result.failed == 0

    (entry,) = store.entries(legacy.id)
    assert entry.is_creation
    assert entry.status_to is ServiceStatus.DEGRADED
    assert entry.changed_at == legacy.created_at
    assert entry.reason == "Initial status (populated automatically)"
    assert len(store.entries(tracked.id)) == 1


async def test_rerun_is_a_no_op(store, make_service, manage_status):
    await store.services.create(make_service())
    use_case = PopulateInitialStatusLogsUseCase(
        service_repo=store.services, manage_status=manage_status
    )
    await use_case.execute()

    result = await use_case.execute()

    assert result.created == 0
    assert result.skipped == 1
    assert len(store.entries()) == 1


async def test_pages_through_all_services(store, make_service, manage_status):
    for index in range(7):
        await store.services.create(
            make_service(f"svc-{index}", created_at=T0 - timedelta(days=index + 1))
        )
    use_case = PopulateInitialStatusLogsUseCase(
        service_repo=store.services, manage_status=manage_status, page_size=3
    )

    result = await use_case.execute()

    assert result.total_services == 7
    assert result.created == 7


async def test_failure_is_isolated(store, make_service):
    first = await store.services.create(make_service("first"))
    second = await store.services.create(make_service("second"))
    manage_status = AsyncMock(spec=ManageServiceStatusUseCase)
    manage_status.record_service_created.side_effect = [ValueError("bad row"), MagicMock()]
    use_case = PopulateInitialStatusLogsUseCase(
        service_repo=store.services, manage_status=manage_status
    )

    result = await use_case.execute()

    assert result.failed == 1
    assert result.created == 1
    assert result.failures[0]["error"] == "bad row"
    assert result.failures[0]["service_id"] in {str(first.id), str(second.id)}
