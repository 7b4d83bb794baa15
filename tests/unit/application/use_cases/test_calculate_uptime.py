"""Unit tests for CalculateUptimeUseCase."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from uptime_engine.application.use_cases.calculate_uptime import CalculateUptimeUseCase
from uptime_engine.domain.entities.status import ServiceStatus
from uptime_engine.domain.entities.status_log_entry import StatusLogEntry
from uptime_engine.domain.repositories.status_log_repository import (
    StatusLogRepositoryInterface,
)
from tests.conftest import T0


@pytest.fixture
def use_case(store, clock):
    return CalculateUptimeUseCase(status_log_repo=store.status_logs, clock=clock)


@pytest.fixture
async def service(store, make_service):
    return await store.services.create(make_service())


async def _log(store, service, at, status_to, status_from=None, reason=None):
    return await store.status_logs.append(
        StatusLogEntry(
            service_id=service.id,
            status_from=status_from,
            status_to=status_to,
            changed_at=at,
            reason=reason,
        )
    )


class TestCalculateUptimeForPeriod:
    """Tests for uptime over an arbitrary window."""

    async def test_degenerate_window_returns_zero(self, use_case, service):
        assert await use_case.calculate_uptime_for_period(service, T0, T0) == 0.0
        assert (
            await use_case.calculate_uptime_for_period(service, T0, T0 - timedelta(hours=1))
            == 0.0
        )

    async def test_no_history_falls_back_to_live_status(self, use_case, make_service, store):
        up = await store.services.create(make_service("up"))
        down = await store.services.create(
            make_service("down", status=ServiceStatus.PARTIAL_OUTAGE)
        )

        assert await use_case.calculate_uptime_for_period(up, T0 - timedelta(days=1), T0) == 100.0
        assert await use_case.calculate_uptime_for_period(down, T0 - timedelta(days=1), T0) == 0.0

    async def test_single_outage_transition(self, use_case, store, service):
        """Operational until T, major outage afterwards: (T - start) / (end - start)."""
        # Arrange
        start = T0 - timedelta(hours=10)
        await _log(store, service, T0 - timedelta(days=30), ServiceStatus.OPERATIONAL)
        await _log(
            store,
            service,
            start + timedelta(hours=4),
            ServiceStatus.MAJOR_OUTAGE,
            ServiceStatus.OPERATIONAL,
        )

        # Act
        uptime = await use_case.calculate_uptime_for_period(service, start, T0)

        # Assert
        assert uptime == 40.0

    async def test_initial_status_comes_from_last_entry_before_window(
        self, use_case, store, service
    ):
        start = T0 - timedelta(hours=4)
        await _log(store, service, T0 - timedelta(days=2), ServiceStatus.OPERATIONAL)
        await _log(
            store,
            service,
            T0 - timedelta(days=1),
            ServiceStatus.DEGRADED,
            ServiceStatus.OPERATIONAL,
        )
        await _log(
            store,
            service,
            start + timedelta(hours=1),
            ServiceStatus.OPERATIONAL,
            ServiceStatus.DEGRADED,
        )

        uptime = await use_case.calculate_uptime_for_period(service, start, T0)

        assert uptime == 75.0

    async def test_history_beginning_inside_window_assumes_operational(
        self, use_case, store, service
    ):
        start = T0 - timedelta(hours=10)
        await _log(store, service, start + timedelta(hours=5), ServiceStatus.OPERATIONAL)
        await _log(
            store,
            service,
            start + timedelta(hours=8),
            ServiceStatus.MAJOR_OUTAGE,
            ServiceStatus.OPERATIONAL,
        )

        uptime = await use_case.calculate_uptime_for_period(service, start, T0)

        assert uptime == 80.0

    async def test_window_before_any_history_is_fully_up(self, use_case, store, service):
        await _log(store, service, T0, ServiceStatus.MAJOR_OUTAGE)

        uptime = await use_case.calculate_uptime_for_period(
            service, T0 - timedelta(days=2), T0 - timedelta(days=1)
        )

        assert uptime == 100.0

    async def test_live_status_ignored_when_history_exists(self, use_case, store, make_service):
        service = await store.services.create(
            make_service(status=ServiceStatus.MAJOR_OUTAGE)
        )
        await _log(store, service, T0 - timedelta(days=3), ServiceStatus.OPERATIONAL)

        uptime = await use_case.calculate_uptime_for_period(service, T0 - timedelta(days=1), T0)

        assert uptime == 100.0

    async def test_entry_at_window_end_is_excluded(self, use_case, store, service):
        await _log(store, service, T0 - timedelta(days=3), ServiceStatus.OPERATIONAL)
        await _log(store, service, T0, ServiceStatus.MAJOR_OUTAGE, ServiceStatus.OPERATIONAL)

        uptime = await use_case.calculate_uptime_for_period(service, T0 - timedelta(hours=1), T0)

        assert uptime == 100.0

    async def test_repository_not_queried_for_degenerate_window(self, service):
        repo = AsyncMock(spec=StatusLogRepositoryInterface)
        use_case = CalculateUptimeUseCase(status_log_repo=repo)

        await use_case.calculate_uptime_for_period(service, T0, T0)

        repo.last_entry_before.assert_not_awaited()
        repo.entries_in_range.assert_not_awaited()


class TestCalculateUptimeSummaries:
    """Tests for per-period summaries ending now."""

    async def test_default_periods(self, use_case, store, service):
        await _log(store, service, T0 - timedelta(days=100), ServiceStatus.OPERATIONAL)
        await _log(
            store,
            service,
            T0 - timedelta(hours=6),
            ServiceStatus.MAJOR_OUTAGE,
            ServiceStatus.OPERATIONAL,
        )
        await _log(
            store,
            service,
            T0 - timedelta(hours=3),
            ServiceStatus.OPERATIONAL,
            ServiceStatus.MAJOR_OUTAGE,
        )

        summaries = await use_case.calculate_uptime(service)

        assert [s.period for s in summaries] == ["24h", "7d", "30d", "90d"]
        by_period = {s.period: s for s in summaries}
        assert by_period["24h"].uptime_percentage == 87.5
        # 3 hours down out of 7 days
        assert by_period["7d"].uptime_percentage == round(100 * (1 - 3 / 168), 2)
        assert by_period["24h"].end_date == T0.isoformat()
        assert by_period["24h"].start_date == (T0 - timedelta(days=1)).isoformat()

    async def test_custom_periods_keep_request_order(self, use_case, service):
        summaries = await use_case.calculate_uptime(service, periods=["90d", "1y"])

        assert [s.period for s in summaries] == ["90d", "1y"]
        assert summaries[1].start_date == (T0 - timedelta(days=30)).isoformat()


class TestGetRecentDowntime:
    """Tests for downtime episode reconstruction."""

    async def test_resolved_and_ongoing_episodes_newest_first(
        self, use_case, store, service
    ):
        # Arrange
        await _log(store, service, T0 - timedelta(days=60), ServiceStatus.OPERATIONAL)
        await _log(
            store,
            service,
            T0 - timedelta(days=5),
            ServiceStatus.PARTIAL_OUTAGE,
            ServiceStatus.OPERATIONAL,
            reason="Status changed due to incident: DB failover",
        )
        await _log(
            store,
            service,
            T0 - timedelta(days=5) + timedelta(minutes=45),
            ServiceStatus.OPERATIONAL,
            ServiceStatus.PARTIAL_OUTAGE,
        )
        await _log(
            store,
            service,
            T0 - timedelta(minutes=30),
            ServiceStatus.DEGRADED,
            ServiceStatus.OPERATIONAL,
        )

        # Act
        episodes = await use_case.get_recent_downtime(service)

        # Assert
        assert len(episodes) == 2
        ongoing, resolved = episodes
        assert ongoing.is_ongoing
        assert ongoing.resolved_at is None
        assert ongoing.status == "degraded"
        assert ongoing.duration_minutes == 30.0

        assert not resolved.is_ongoing
        assert resolved.status == "partial_outage"
        assert resolved.duration_minutes == 45.0
        assert resolved.reason == "Status changed due to incident: DB failover"

    async def test_recovery_logged_at_same_instant_closes_episode(
        self, use_case, store, service
    ):
        # Arrange: outage and recovery share changed_at; insertion order decides
        flap_at = T0 - timedelta(days=1)
        await _log(store, service, T0 - timedelta(days=10), ServiceStatus.OPERATIONAL)
        await _log(
            store, service, flap_at, ServiceStatus.MAJOR_OUTAGE, ServiceStatus.OPERATIONAL
        )
        await _log(
            store, service, flap_at, ServiceStatus.OPERATIONAL, ServiceStatus.MAJOR_OUTAGE
        )

        # Act
        (episode,) = await use_case.get_recent_downtime(service)

        # Assert
        assert not episode.is_ongoing
        assert episode.resolved_at == flap_at.isoformat()
        assert episode.duration_minutes == 0.0

    async def test_recovery_inserted_before_outage_at_same_instant_is_ignored(
        self, use_case, store, service
    ):
        flap_at = T0 - timedelta(hours=1)
        await _log(store, service, flap_at, ServiceStatus.OPERATIONAL)
        await _log(
            store, service, flap_at, ServiceStatus.DEGRADED, ServiceStatus.OPERATIONAL
        )

        (episode,) = await use_case.get_recent_downtime(service, period="24h")

        assert episode.is_ongoing
        assert episode.duration_minutes == 60.0

    async def test_escalation_starts_its_own_episode(self, use_case, store, service):
        await _log(
            store,
            service,
            T0 - timedelta(hours=2),
            ServiceStatus.DEGRADED,
            ServiceStatus.OPERATIONAL,
        )
        await _log(
            store,
            service,
            T0 - timedelta(hours=1),
            ServiceStatus.MAJOR_OUTAGE,
            ServiceStatus.DEGRADED,
        )
        await _log(
            store,
            service,
            T0 - timedelta(minutes=30),
            ServiceStatus.OPERATIONAL,
            ServiceStatus.MAJOR_OUTAGE,
        )

        episodes = await use_case.get_recent_downtime(service, period="24h")

        assert [e.status for e in episodes] == ["major_outage", "degraded"]
        assert [e.duration_minutes for e in episodes] == [30.0, 90.0]
        assert all(e.resolved_at == (T0 - timedelta(minutes=30)).isoformat() for e in episodes)

    async def test_episodes_outside_period_are_excluded(self, use_case, store, service):
        await _log(
            store,
            service,
            T0 - timedelta(days=40),
            ServiceStatus.MAJOR_OUTAGE,
            ServiceStatus.OPERATIONAL,
        )
        await _log(
            store,
            service,
            T0 - timedelta(days=39),
            ServiceStatus.OPERATIONAL,
            ServiceStatus.MAJOR_OUTAGE,
        )

        assert await use_case.get_recent_downtime(service, period="30d") == []
