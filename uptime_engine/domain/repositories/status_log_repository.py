"""Status log repository interface module.

The status log is append-only: this contract deliberately has no update or
delete operation. Implementations must reject mutation of stored entries with
StatusLogImmutableError.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from uptime_engine.domain.entities.status import ServiceStatus
    from uptime_engine.domain.entities.status_log_entry import StatusLogEntry


class StatusLogRepositoryInterface(ABC):
    """Repository interface for the per-service status transition log.

    All reads return entries in replay order: ``changed_at`` ascending, ties
    broken by insertion order.
    """

    @abstractmethod
    async def append(self, entry: "StatusLogEntry") -> "StatusLogEntry":
        """Append a new entry.

        Args:
            entry: Entry to insert

        Returns:
            The stored entry, with its insertion ``sequence`` populated
        """
        pass

    @abstractmethod
    async def entries_in_range(
        self, service_id: UUID, start: datetime, end: datetime
    ) -> list["StatusLogEntry"]:
        """Entries with start <= changed_at < end, in replay order.

        Args:
            service_id: Internal UUID of the service
            start: Inclusive lower bound
            end: Exclusive upper bound

        Returns:
            List of entries (empty if none)
        """
        pass

    @abstractmethod
    async def last_entry_before(
        self, service_id: UUID, instant: datetime
    ) -> "StatusLogEntry | None":
        """Most recent entry with changed_at strictly before ``instant``.

        Args:
            service_id: Internal UUID of the service
            instant: Exclusive upper bound

        Returns:
            The entry, or None if the service has no earlier history
        """
        pass

    @abstractmethod
    async def first_entry_after(
        self,
        service_id: UUID,
        instant: datetime,
        status_to: "ServiceStatus | None" = None,
        after_sequence: int | None = None,
    ) -> "StatusLogEntry | None":
        """Earliest entry after a position in replay order.

        Without ``after_sequence`` the position is the end of ``instant``, so
        only entries with changed_at strictly after it match. With it, entries
        at ``instant`` inserted after that sequence match as well.

        Args:
            service_id: Internal UUID of the service
            instant: changed_at of the position
            status_to: When given, only entries moving to this status match
            after_sequence: Insertion sequence of the position at ``instant``

        Returns:
            The entry, or None
        """
        pass

    @abstractmethod
    async def has_entries(self, service_id: UUID) -> bool:
        """Return True if the service has at least one entry, ever."""
        pass

    @abstractmethod
    async def latest_entry(self, service_id: UUID) -> "StatusLogEntry | None":
        """Most recent entry of the service in replay order, or None."""
        pass
