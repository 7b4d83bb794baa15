"""Status derivation and uptime reconstruction over the PostgreSQL repositories."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from uptime_engine.application.use_cases.calculate_uptime import CalculateUptimeUseCase
from uptime_engine.application.use_cases.manage_service_status import (
    ManageServiceStatusUseCase,
)
from uptime_engine.domain.entities.incident import Incident
from uptime_engine.domain.entities.service import Service
from uptime_engine.domain.entities.status import IncidentSeverity, ServiceStatus
from uptime_engine.domain.repositories.status_notifier import StatusNotifierInterface
from uptime_engine.infrastructure.database.models import (
    ServiceModel,
    ServiceStatusLogModel,
)
from uptime_engine.infrastructure.database.repositories import (
    IncidentRepository,
    ServiceRepository,
    StatusLogRepository,
)
from uptime_engine.infrastructure.database.session import (
    commit_per_change,
    savepoint_factory,
)

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class _Clock:
    def __init__(self):
        self.now = T0

    def __call__(self):
        return self.now


@pytest.mark.integration
class TestStatusDerivationFlow:
    """ManageServiceStatusUseCase wired to the SQL repositories."""

    @pytest.fixture
    def clock(self):
        return _Clock()

    @pytest.fixture
    def notifier(self):
        return AsyncMock(spec=StatusNotifierInterface)

    @pytest.fixture
    def manage_status(self, db_session: AsyncSession, notifier, clock):
        return ManageServiceStatusUseCase(
            service_repo=ServiceRepository(db_session),
            incident_repo=IncidentRepository(db_session),
            status_log_repo=StatusLogRepository(db_session),
            notifier=notifier,
            transaction=commit_per_change(db_session),
            clock=clock,
        )

    async def test_incident_lifecycle_is_logged_and_committed(
        self, db_session: AsyncSession, db_engine, manage_status, notifier, clock
    ):
        # Arrange
        service_repo = ServiceRepository(db_session)
        service = await service_repo.create(
            Service(name="checkout-api", organization_id=uuid4())
        )
        await db_session.commit()
        await manage_status.record_service_created(service)

        incident = await IncidentRepository(db_session).save(
            Incident(
                title="Payment gateway down",
                organization_id=service.organization_id,
                severity=IncidentSeverity.CRITICAL,
                service_ids=[service.id],
            )
        )
        await db_session.commit()

        # Act
        clock.now = T0 + timedelta(hours=1)
        await manage_status.on_incident_created(incident)
        incident.resolve()
        await IncidentRepository(db_session).save(incident)
        await db_session.commit()
        clock.now = T0 + timedelta(hours=2)
        await manage_status.on_incident_resolved(incident)

        # Assert
        assert notifier.publish.await_count == 2
        async with AsyncSession(db_engine) as other_session:
            count = await other_session.scalar(
                select(func.count())
                .select_from(ServiceStatusLogModel)
                .where(ServiceStatusLogModel.service_id == service.id)
            )
            assert count == 3
            live = await ServiceRepository(other_session).get_by_id(service.id)
            assert live.status is ServiceStatus.OPERATIONAL

        uptime = await CalculateUptimeUseCase(
            StatusLogRepository(db_session)
        ).calculate_uptime_for_period(service, T0, T0 + timedelta(hours=4))
        assert uptime == 75.0

    async def test_savepoint_rolls_back_only_the_failed_change(
        self, db_session: AsyncSession, notifier, clock
    ):
        service_repo = ServiceRepository(db_session)
        service = await service_repo.create(Service(name="search", organization_id=uuid4()))
        await db_session.commit()

        failing_log = AsyncMock(spec=StatusLogRepository)
        failing_log.append.side_effect = RuntimeError("insert failed")
        use_case = ManageServiceStatusUseCase(
            service_repo=service_repo,
            incident_repo=IncidentRepository(db_session),
            status_log_repo=failing_log,
            notifier=notifier,
            transaction=savepoint_factory(db_session),
            clock=clock,
        )
        await IncidentRepository(db_session).save(
            Incident(
                title="Index lag",
                organization_id=service.organization_id,
                severity=IncidentSeverity.LOW,
                service_ids=[service.id],
            )
        )

        with pytest.raises(RuntimeError, match="insert failed"):
            await use_case.recompute_status(service)

        persisted_status = await db_session.scalar(
            select(ServiceModel.status).where(ServiceModel.id == service.id)
        )
        assert persisted_status == ServiceStatus.OPERATIONAL.value
        notifier.publish.assert_not_awaited()
        await db_session.rollback()
