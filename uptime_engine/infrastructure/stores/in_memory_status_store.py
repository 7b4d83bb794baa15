"""In-memory store for services, incidents and the status log.

Implements the three repository interfaces over plain dictionaries, for tests,
demos and single-process embedding. Data is lost when the store is dropped.
For production, use the PostgreSQL-backed repositories.
"""

import bisect
import copy
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import replace
from datetime import datetime, timezone
from uuid import UUID

from uptime_engine.domain.entities.incident import Incident
from uptime_engine.domain.entities.service import Service
from uptime_engine.domain.entities.status import ServiceStatus
from uptime_engine.domain.entities.status_log_entry import StatusLogEntry
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

# Undo actions of the innermost open transaction in the current task
_undo_journal: ContextVar[list[Callable[[], None]] | None] = ContextVar(
    "in_memory_undo_journal", default=None
)


class InMemoryStatusStore:
    """Shared state behind the in-memory repositories.

    Status log entries are frozen and kept per service in replay order; they
    are exposed only as tuples, so the log cannot be edited through the store.
    ``transaction()`` journals every write made inside the block by the current
    asyncio task and undoes exactly those writes if the block raises. Writes of
    other tasks running concurrently are left alone, so one service's rollback
    never discards another service's change. Rolled-back appends leave a gap
    in the sequence, like a database identity.
    """

    def __init__(self):
        self._services: dict[UUID, Service] = {}
        self._incidents: dict[UUID, Incident] = {}
        self._entries: dict[UUID, list[StatusLogEntry]] = {}
        self._next_sequence = 1

        self.services = InMemoryServiceRepository(self)
        self.incidents = InMemoryIncidentRepository(self)
        self.status_logs = InMemoryStatusLogRepository(self)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["InMemoryStatusStore"]:
        """Undo the current task's writes made inside the block if it raises."""
        outer = _undo_journal.get()
        journal: list[Callable[[], None]] = []
        token = _undo_journal.set(journal)
        try:
            yield self
        except BaseException:
            for undo in reversed(journal):
                undo()
            raise
        else:
            if outer is not None:
                outer.extend(journal)
        finally:
            _undo_journal.reset(token)

    @staticmethod
    def _journal(undo: Callable[[], None]) -> None:
        journal = _undo_journal.get()
        if journal is not None:
            journal.append(undo)

    def entries(self, service_id: UUID | None = None) -> tuple[StatusLogEntry, ...]:
        """All log entries (of one service, or of every service) in replay order."""
        if service_id is not None:
            return tuple(self._entries.get(service_id, ()))
        merged = [entry for entries in self._entries.values() for entry in entries]
        return tuple(sorted(merged, key=lambda e: e.sort_key))

    def clear(self) -> None:
        """Clear all data (for testing)."""
        self._services.clear()
        self._incidents.clear()
        self._entries.clear()
        self._next_sequence = 1


class InMemoryServiceRepository(ServiceRepositoryInterface):
    """ServiceRepositoryInterface over an InMemoryStatusStore."""

    def __init__(self, store: InMemoryStatusStore):
        self._store = store

    async def get_by_id(self, service_id: UUID) -> Service | None:
        service = self._store._services.get(service_id)
        return replace(service) if service else None

    async def get_for_update(self, service_id: UUID) -> Service | None:
        # Single event loop: the caller's per-service lock is sufficient
        return await self.get_by_id(service_id)

    async def get_many(self, service_ids: list[UUID]) -> list[Service]:
        found = [self._store._services[sid] for sid in service_ids if sid in self._store._services]
        return [replace(service) for service in sorted(found, key=lambda s: s.name)]

    async def list_by_organization(self, organization_id: UUID) -> list[Service]:
        services = [
            s for s in self._store._services.values() if s.organization_id == organization_id
        ]
        return [replace(service) for service in sorted(services, key=lambda s: s.name)]

    async def list_all(self, skip: int = 0, limit: int = 100) -> list[Service]:
        services = sorted(self._store._services.values(), key=lambda s: (s.created_at, str(s.id)))
        return [replace(service) for service in services[skip : skip + limit]]

    async def list_organization_ids(self) -> list[UUID]:
        return sorted(
            {s.organization_id for s in self._store._services.values()}, key=str
        )

    async def create(self, service: Service) -> Service:
        if service.id in self._store._services:
            raise ValueError(f"Service with id '{service.id}' already exists")
        services = self._store._services
        services[service.id] = replace(service)
        self._store._journal(lambda: services.pop(service.id, None))
        return replace(service)

    async def update_status(
        self,
        service_id: UUID,
        status: ServiceStatus,
        status_message: str | None = None,
    ) -> Service:
        service = self._store._services.get(service_id)
        if service is None:
            raise ServiceNotFoundError(service_id)
        updated = replace(
            service,
            status=ServiceStatus(status),
            status_message=status_message,
            updated_at=datetime.now(timezone.utc),
        )
        services = self._store._services
        services[service_id] = updated
        self._store._journal(lambda: services.__setitem__(service_id, service))
        return replace(updated)


class InMemoryIncidentRepository(IncidentRepositoryInterface):
    """IncidentRepositoryInterface over an InMemoryStatusStore."""

    def __init__(self, store: InMemoryStatusStore):
        self._store = store

    async def get_by_id(self, incident_id: UUID) -> Incident | None:
        incident = self._store._incidents.get(incident_id)
        return copy.deepcopy(incident) if incident else None

    async def list_active_for_service(self, service_id: UUID) -> list[Incident]:
        active = [
            incident
            for incident in self._store._incidents.values()
            if incident.is_active and service_id in incident.service_ids
        ]
        active.sort(key=lambda i: i.created_at)
        return [copy.deepcopy(incident) for incident in active]

    async def save(self, incident: Incident) -> Incident:
        incidents = self._store._incidents
        previous = incidents.get(incident.id)
        incidents[incident.id] = copy.deepcopy(incident)

        def undo() -> None:
            if previous is None:
                incidents.pop(incident.id, None)
            else:
                incidents[incident.id] = previous

        self._store._journal(undo)
        return copy.deepcopy(incident)


class InMemoryStatusLogRepository(StatusLogRepositoryInterface):
    """Append-only StatusLogRepositoryInterface over an InMemoryStatusStore."""

    def __init__(self, store: InMemoryStatusStore):
        self._store = store

    async def append(self, entry: StatusLogEntry) -> StatusLogEntry:
        stored = replace(entry, sequence=self._store._next_sequence)
        self._store._next_sequence += 1

        entries = self._store._entries.setdefault(stored.service_id, [])
        bisect.insort(entries, stored, key=lambda e: e.sort_key)
        self._store._journal(lambda: entries.remove(stored))
        return stored

    async def entries_in_range(
        self, service_id: UUID, start: datetime, end: datetime
    ) -> list[StatusLogEntry]:
        return [e for e in self._for(service_id) if start <= e.changed_at < end]

    async def last_entry_before(
        self, service_id: UUID, instant: datetime
    ) -> StatusLogEntry | None:
        before = [e for e in self._for(service_id) if e.changed_at < instant]
        return before[-1] if before else None

    async def first_entry_after(
        self,
        service_id: UUID,
        instant: datetime,
        status_to: ServiceStatus | None = None,
        after_sequence: int | None = None,
    ) -> StatusLogEntry | None:
        for entry in self._for(service_id):
            if entry.changed_at < instant:
                continue
            if entry.changed_at == instant and (
                after_sequence is None or entry.sequence <= after_sequence
            ):
                continue
            if status_to is None or entry.status_to == status_to:
                return entry
        return None

    async def has_entries(self, service_id: UUID) -> bool:
        return bool(self._store._entries.get(service_id))

    async def latest_entry(self, service_id: UUID) -> StatusLogEntry | None:
        entries = self._for(service_id)
        return entries[-1] if entries else None

    def _for(self, service_id: UUID) -> tuple[StatusLogEntry, ...]:
        return self._store.entries(service_id)
