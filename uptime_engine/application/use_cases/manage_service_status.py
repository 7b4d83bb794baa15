"""Manage Service Status Use Case.

Derives the live status of services from the incidents affecting them and keeps
the status log in step with it. This is the only writer of a service's live
status: every change updates the status and appends exactly one log entry in the
same transaction, then publishes one notification.

Two update policies:
- incident created: monotonic worsening (the new incident can only make a
  service look worse, never better)
- incident resolved/updated: free recompute from all active incidents
  ("worst incident wins"), which may move status in either direction
"""

import asyncio
import logging
import weakref
from collections.abc import Awaitable, Callable, Mapping
from contextlib import AbstractAsyncContextManager, nullcontext
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from uptime_engine.application.dtos.service_status_dto import StatusChangeResult
from uptime_engine.domain.entities.incident import Incident
from uptime_engine.domain.entities.service import Service
from uptime_engine.domain.entities.status import IncidentStatus, ServiceStatus
from uptime_engine.domain.entities.status_log_entry import StatusLogEntry
from uptime_engine.domain.entities.uptime import utc_now
from uptime_engine.domain.repositories.incident_repository import (
    IncidentRepositoryInterface,
)
from uptime_engine.domain.repositories.service_repository import (
    ServiceNotFoundError,
    ServiceRepositoryInterface,
)
from uptime_engine.domain.repositories.status_log_repository import (
    StatusLogRepositoryInterface,
)
from uptime_engine.domain.repositories.status_notifier import StatusNotifierInterface
from uptime_engine.domain.services.status_derivation_service import (
    StatusDerivationService,
)

logger = logging.getLogger(__name__)

TransactionFactory = Callable[[], AbstractAsyncContextManager[Any]]
TargetResolver = Callable[[Service], Awaitable[tuple[ServiceStatus, str] | None]]

# Incident attributes whose change can affect service status
STATUS_RELEVANT_FIELDS = frozenset({"status", "severity"})


class ManageServiceStatusUseCase:
    """Derive and persist service status from incident lifecycle events.

    The read-compare-write-log sequence for one service is serialized by an
    in-process per-service lock and runs inside a transaction obtained from
    ``transaction`` (a savepoint for SQL repositories), so the status update and
    the log append succeed or fail together. Different services never contend.
    """

    SERVICE_CREATED_REASON = "Service created"

    def __init__(
        self,
        service_repo: ServiceRepositoryInterface,
        incident_repo: IncidentRepositoryInterface,
        status_log_repo: StatusLogRepositoryInterface,
        notifier: StatusNotifierInterface,
        derivation_service: StatusDerivationService | None = None,
        transaction: TransactionFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize use case with dependencies.

        Args:
            service_repo: Service store (sole writer of live status is this use case)
            incident_repo: Incident provider
            status_log_repo: Append-only status log
            notifier: Status change notification sink
            derivation_service: Severity/status rules
            transaction: Factory returning an async context manager that makes
                the status update and log append atomic (defaults to no-op)
            clock: Source of "now" for log timestamps
        """
        self._service_repo = service_repo
        self._incident_repo = incident_repo
        self._status_log_repo = status_log_repo
        self._notifier = notifier
        self._derivation = derivation_service or StatusDerivationService()
        self._transaction = transaction or nullcontext
        self._clock = clock or utc_now
        self._locks: weakref.WeakValueDictionary[UUID, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    async def on_incident_created(
        self,
        incident: Incident,
        affected_services: list[Service] | None = None,
    ) -> list[StatusChangeResult]:
        """Apply a newly created incident to each affected service.

        A service is updated only if the status implied by the incident's
        severity is strictly worse than its current status.

        Args:
            incident: The new incident
            affected_services: Services affected (looked up from
                incident.service_ids when omitted)

        Returns:
            One StatusChangeResult per affected service
        """
        candidate = self._derivation.severity_to_status(incident.severity)
        reason = f"Status changed due to incident: {incident.title}"

        async def worsen_only(service: Service) -> tuple[ServiceStatus, str] | None:
            if self._derivation.is_status_worse(candidate, service.status):
                return candidate, reason
            return None

        services = await self._affected_services(incident, affected_services)
        results = []
        for service in services:
            result = await self._transition(
                service.id,
                worsen_only,
                changed_by=incident.created_by,
                trigger="incident_created",
            )
            results.append(result)
        return results

    async def recompute_status(
        self,
        service: Service | UUID,
        changed_by: str | None = None,
    ) -> StatusChangeResult:
        """Recompute a service's status from all of its active incidents.

        No active incidents means operational; otherwise the status implied by
        the highest active severity. Idempotent: rerunning with no underlying
        change appends nothing.

        Args:
            service: Service entity or its UUID
            changed_by: Actor to record on the log entry

        Returns:
            StatusChangeResult for the service

        Raises:
            ServiceNotFoundError: If the service does not exist
        """
        service_id = service.id if isinstance(service, Service) else service

        async def worst_incident_wins(current: Service) -> tuple[ServiceStatus, str] | None:
            active_incidents = await self._incident_repo.list_active_for_service(current.id)
            target, message = self._derivation.determine_target_status(active_incidents)
            if target == current.status:
                return None
            return target, message

        return await self._transition(
            service_id,
            worst_incident_wins,
            changed_by=changed_by,
            trigger="recompute",
        )

    async def on_incident_resolved(
        self,
        incident: Incident,
        affected_services: list[Service] | None = None,
    ) -> list[StatusChangeResult]:
        """Recompute every service affected by a resolved incident."""
        return await self._recompute_affected(incident, affected_services)

    async def on_incident_updated(
        self,
        incident: Incident,
        changed_fields: Mapping[str, Any] | set[str] | None = None,
        affected_services: list[Service] | None = None,
    ) -> list[StatusChangeResult]:
        """Recompute affected services after an incident update.

        Args:
            incident: The updated incident (current state)
            changed_fields: Names of the fields that changed (or a mapping keyed by
                them). Empty/None means unknown, which always recomputes.
            affected_services: Services affected (looked up when omitted)

        Returns:
            One StatusChangeResult per recomputed service (empty if the update
            touched no status-relevant field)
        """
        if changed_fields and not STATUS_RELEVANT_FIELDS.intersection(changed_fields):
            logger.debug(
                f"Incident {incident.id} update touched no status-relevant field, "
                f"skipping recompute"
            )
            return []
        return await self._recompute_affected(incident, affected_services)

    async def on_incident_severity_changed(
        self,
        incident: Incident,
        old_severity: Any,
        new_severity: Any,
        affected_services: list[Service] | None = None,
    ) -> list[StatusChangeResult]:
        """Recompute affected services if the severity change maps to a new status.

        Args:
            incident: The updated incident
            old_severity: Previous severity value
            new_severity: Current severity value
            affected_services: Services affected (looked up when omitted)

        Returns:
            One StatusChangeResult per recomputed service, empty when both
            severities imply the same status
        """
        old_status = self._derivation.severity_to_status(old_severity)
        new_status = self._derivation.severity_to_status(new_severity)
        if old_status == new_status:
            return []
        return await self._recompute_affected(incident, affected_services)

    async def handle_incident_changes(
        self,
        incident: Incident,
        original_attributes: Mapping[str, Any],
        affected_services: list[Service] | None = None,
    ) -> list[StatusChangeResult]:
        """Detect what changed on an incident and route to the matching handler.

        - status became resolved -> on_incident_resolved
        - status changed otherwise (including reopening) -> on_incident_updated
        - only severity changed -> on_incident_severity_changed
        - nothing relevant changed -> no-op

        Args:
            incident: The incident in its current state
            original_attributes: Attribute values before the change
            affected_services: Services affected (looked up when omitted)

        Returns:
            Results of the handler that ran (empty on no-op)
        """
        current_attributes = {"status": incident.status, "severity": incident.severity}
        changes: dict[str, tuple[str | None, str | None]] = {}
        for attribute in ("status", "severity"):
            if attribute not in original_attributes:
                continue
            old = _raw_value(original_attributes[attribute])
            new = _raw_value(current_attributes[attribute])
            if old != new:
                changes[attribute] = (old, new)

        if not changes:
            return []

        if "status" in changes:
            _, new_status = changes["status"]
            if new_status == IncidentStatus.RESOLVED.value:
                return await self.on_incident_resolved(incident, affected_services)
            return await self.on_incident_updated(incident, changes, affected_services)

        old_severity, new_severity = changes["severity"]
        return await self.on_incident_severity_changed(
            incident, old_severity, new_severity, affected_services
        )

    async def record_service_created(
        self,
        service: Service,
        changed_by: str | None = None,
        changed_at: datetime | None = None,
        reason: str = SERVICE_CREATED_REASON,
    ) -> StatusLogEntry | None:
        """Append the creation entry (status_from=None) for a service.

        Args:
            service: The service
            changed_by: Actor who created the service
            changed_at: Instant to stamp (defaults to now)
            reason: Reason recorded on the entry

        Returns:
            The creation entry, or None if the service already has history

        Raises:
            ServiceNotFoundError: If the service does not exist
        """
        async with self._lock_for(service.id):
            async with self._transaction():
                current = await self._service_repo.get_for_update(service.id)
                if current is None:
                    raise ServiceNotFoundError(service.id)
                if await self._status_log_repo.has_entries(service.id):
                    logger.debug(f"Service {service.id} already has status history")
                    return None
                entry = await self._status_log_repo.append(
                    StatusLogEntry(
                        service_id=current.id,
                        status_from=None,
                        status_to=current.status,
                        changed_at=changed_at or self._clock(),
                        changed_by=changed_by,
                        reason=reason,
                    )
                )

        logger.info(
            f"Initial status logged for service {current.name} ({current.id}): "
            f"{current.status.value}"
        )
        return entry

    async def _recompute_affected(
        self,
        incident: Incident,
        affected_services: list[Service] | None,
    ) -> list[StatusChangeResult]:
        services = await self._affected_services(incident, affected_services)
        return [await self.recompute_status(service) for service in services]

    async def _affected_services(
        self,
        incident: Incident,
        affected_services: list[Service] | None,
    ) -> list[Service]:
        if affected_services is not None:
            return affected_services
        return await self._service_repo.get_many(incident.service_ids)

    def _lock_for(self, service_id: UUID) -> asyncio.Lock:
        lock = self._locks.get(service_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[service_id] = lock
        return lock

    async def _transition(
        self,
        service_id: UUID,
        resolve_target: TargetResolver,
        changed_by: str | None,
        trigger: str,
    ) -> StatusChangeResult:
        """Run one serialized read-compare-write-log sequence for a service.

        Args:
            service_id: Internal UUID of the service
            resolve_target: Given the locked service, returns (new status, reason)
                or None to leave it unchanged
            changed_by: Actor to record on the log entry
            trigger: Label for logging

        Returns:
            StatusChangeResult (log_entry is None on no-op)
        """
        async with self._lock_for(service_id):
            async with self._transaction():
                service = await self._service_repo.get_for_update(service_id)
                if service is None:
                    raise ServiceNotFoundError(service_id)

                old_status = service.status
                decision = await resolve_target(service)
                entry = None
                if decision is not None and decision[0] != old_status:
                    new_status, reason = decision
                    await self._service_repo.update_status(service_id, new_status, reason)
                    entry = await self._status_log_repo.append(
                        StatusLogEntry(
                            service_id=service_id,
                            status_from=old_status,
                            status_to=new_status,
                            changed_at=self._clock(),
                            changed_by=changed_by,
                            reason=reason,
                        )
                    )

            if entry is None:
                logger.debug(
                    f"Status unchanged for service {service_id} "
                    f"({old_status.value}, trigger={trigger})"
                )
                return StatusChangeResult(service_id, old_status, old_status)

            logger.info(
                f"Service {service.name} ({service_id}) status changed: "
                f"{old_status.value} -> {entry.status_to.value} (trigger={trigger})"
            )
            await self._publish(service_id, old_status, entry.status_to)

        return StatusChangeResult(service_id, old_status, entry.status_to, entry)

    async def _publish(
        self, service_id: UUID, old_status: ServiceStatus, new_status: ServiceStatus
    ) -> None:
        """Hand the change to the notification sink; delivery failures never
        undo a committed status change."""
        try:
            await self._notifier.publish(service_id, old_status, new_status)
        except Exception as e:
            logger.error(
                f"Failed to publish status change for {service_id}: {e}",
                exc_info=True,
            )


def _raw_value(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    return str(value).strip().lower()
