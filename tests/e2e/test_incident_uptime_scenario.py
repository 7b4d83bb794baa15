"""E2E tests: incident lifecycle through status derivation to uptime reports.

These tests drive the use cases the way an incident workflow does and then
read uptime back from the status log only.
"""

from datetime import timedelta

import pytest

from uptime_engine.domain.entities.incident import Incident
from uptime_engine.domain.entities.status import IncidentSeverity, ServiceStatus
from tests.conftest import T0


async def _open_incident(engine, service, severity, title="Database unavailable"):
    incident = await engine.store.incidents.save(
        Incident(
            title=title,
            organization_id=service.organization_id,
            severity=severity,
            service_ids=[service.id],
        )
    )
    await engine.manage_status.on_incident_created(incident)
    return incident


async def _resolve_incident(engine, incident):
    incident.resolve()
    await engine.store.incidents.save(incident)
    await engine.manage_status.on_incident_resolved(incident)


class TestIncidentUptimeScenario:
    """Service goes down on a High incident and recovers on resolution."""

    @pytest.fixture
    async def scenario(self, engine, make_service, clock):
        """t0: created, t1 = t0+2h: High incident, t2 = t1+1h: resolved, now = t2+5h."""
        service = await engine.store.services.create(make_service(created_at=T0))
        await engine.manage_status.record_service_created(service)

        clock.advance(hours=2)
        incident = await _open_incident(engine, service, IncidentSeverity.HIGH)

        clock.advance(hours=1)
        await _resolve_incident(engine, incident)

        clock.advance(hours=5)
        return service

    async def test_log_records_both_transitions(self, engine, scenario):
        entries = engine.store.entries(scenario.id)

        assert [(e.status_from, e.status_to) for e in entries] == [
            (None, ServiceStatus.OPERATIONAL),
            (ServiceStatus.OPERATIONAL, ServiceStatus.MAJOR_OUTAGE),
            (ServiceStatus.MAJOR_OUTAGE, ServiceStatus.OPERATIONAL),
        ]
        assert entries[1].changed_at == T0 + timedelta(hours=2)
        assert entries[2].changed_at == T0 + timedelta(hours=3)
        assert engine.notifier.publish.await_count == 2

    async def test_uptime_over_the_scenario_window(self, engine, scenario, clock):
        # ((t1 - t0) + (t3 - t2)) / (t3 - t0) * 100 = (2h + 5h) / 8h
        uptime = await engine.calculate_uptime.calculate_uptime_for_period(
            scenario, T0, clock.now
        )

        assert uptime == 87.5

    async def test_live_status_equals_latest_entry(self, engine, scenario):
        service = await engine.store.services.get_by_id(scenario.id)
        latest = await engine.store.status_logs.latest_entry(scenario.id)

        assert service.status is latest.status_to is ServiceStatus.OPERATIONAL

    async def test_chart_buckets_agree_with_window_uptime(self, engine, scenario, clock):
        points = await engine.chart_data.data_points(scenario, "24h")
        window_uptime = await engine.calculate_uptime.calculate_uptime_for_period(
            scenario, clock.now - timedelta(days=1), clock.now
        )

        mean = sum(p.uptime for p in points) / len(points)
        assert len(points) == 24
        assert [p.uptime for p in points].count(0.0) == 1
        assert mean == pytest.approx(window_uptime, abs=0.01)

    async def test_recent_downtime(self, engine, scenario):
        (episode,) = await engine.calculate_uptime.get_recent_downtime(scenario, "24h")

        assert episode.status == "major_outage"
        assert episode.duration_minutes == 60.0
        assert not episode.is_ongoing
        assert episode.reason == "Status changed due to incident: Database unavailable"

    async def test_bulk_metrics_and_organization_average(
        self, engine, scenario, make_service
    ):
        healthy = await engine.store.services.create(make_service("healthy", created_at=T0))
        await engine.manage_status.record_service_created(healthy)
        services = [scenario, healthy]

        metrics = await engine.bulk_metrics.get_bulk_uptime_metrics(services, period="24h")
        average = await engine.bulk_metrics.get_organization_uptime_average(
            services, period="24h"
        )

        assert [m.service_name for m in metrics] == ["healthy", "checkout-api"]
        assert metrics[1].uptime_percentage == round(23 / 24 * 100, 2)
        assert average == round((100.0 + metrics[1].uptime_percentage) / 2, 2)


class TestEscalationAndOverlap:
    """Overlapping incidents: creation only worsens, resolution recomputes."""

    async def test_overlapping_incidents(self, engine, make_service, clock):
        service = await engine.store.services.create(make_service(created_at=T0))
        await engine.manage_status.record_service_created(service)

        clock.advance(minutes=10)
        low = await _open_incident(engine, service, IncidentSeverity.LOW, "Slow search")
        clock.advance(minutes=10)
        critical = await _open_incident(engine, service, IncidentSeverity.CRITICAL, "Outage")
        clock.advance(minutes=10)
        await _resolve_incident(engine, critical)
        clock.advance(minutes=10)
        await _resolve_incident(engine, low)
        clock.advance(minutes=20)

        statuses = [e.status_to for e in engine.store.entries(service.id)]
        assert statuses == [
            ServiceStatus.OPERATIONAL,
            ServiceStatus.DEGRADED,
            ServiceStatus.MAJOR_OUTAGE,
            ServiceStatus.DEGRADED,
            ServiceStatus.OPERATIONAL,
        ]
        # 30 of 60 minutes were non-operational
        uptime = await engine.calculate_uptime.calculate_uptime_for_period(
            service, T0, clock.now
        )
        assert uptime == 50.0


class TestBackfillAndRepair:
    """Legacy services get a creation entry; drift is repaired by recalculation."""

    async def test_backfill_then_recalculate(self, engine, make_service, clock, organization_id):
        # Arrange: a service that predates status logging, with an incident
        # that was never applied to its live status
        legacy = await engine.store.services.create(
            make_service("legacy", created_at=T0 - timedelta(days=10))
        )
        await engine.store.incidents.save(
            Incident(
                title="Missed event",
                organization_id=organization_id,
                severity=IncidentSeverity.MEDIUM,
                service_ids=[legacy.id],
            )
        )

        # Act
        backfill = await engine.populate_initial_logs.execute()
        clock.advance(hours=6)
        repair = await engine.recalculate.recalculate_all_organizations()
        clock.advance(hours=6)

        # Assert
        assert backfill.created == 1
        assert repair.changed == 1
        service = await engine.store.services.get_by_id(legacy.id)
        assert service.status is ServiceStatus.PARTIAL_OUTAGE

        uptime = await engine.calculate_uptime.calculate_uptime_for_period(
            service, T0, clock.now
        )
        assert uptime == 50.0
