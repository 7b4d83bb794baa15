"""Populate Initial Status Logs Use Case.

Backfills the creation entry for services that predate status logging, so that
their uptime is reconstructed from history instead of the live-status fallback.
"""

import logging

from uptime_engine.application.dtos.service_status_dto import PopulateInitialLogsResult
from uptime_engine.application.use_cases.manage_service_status import (
    ManageServiceStatusUseCase,
)
from uptime_engine.domain.repositories.service_repository import (
    ServiceRepositoryInterface,
)

logger = logging.getLogger(__name__)


class PopulateInitialStatusLogsUseCase:
    """Append a creation entry for every service without status history.

    Entries are stamped at the service's ``created_at`` with its current live
    status. Services that already have history are skipped; existing entries
    are never replaced.
    """

    BACKFILL_REASON = "Initial status (populated automatically)"

    def __init__(
        self,
        service_repo: ServiceRepositoryInterface,
        manage_status: ManageServiceStatusUseCase,
        page_size: int = 500,
    ):
        self._service_repo = service_repo
        self._manage_status = manage_status
        self._page_size = page_size

    async def execute(self) -> PopulateInitialLogsResult:
        """Backfill creation entries.

        Returns:
            PopulateInitialLogsResult with created/skipped/failed counts
        """
        logger.info("Populating initial status logs for services")

        total = created = skipped = failed = 0
        failures: list[dict[str, str]] = []
        skip = 0
        while True:
            services = await self._service_repo.list_all(skip=skip, limit=self._page_size)
            if not services:
                break
            skip += len(services)

            for service in services:
                total += 1
                try:
                    entry = await self._manage_status.record_service_created(
                        service,
                        changed_at=service.created_at,
                        reason=self.BACKFILL_REASON,
                    )
                except Exception as e:
                    failed += 1
                    failures.append({"service_id": str(service.id), "error": str(e)})
                    logger.error(
                        f"Failed to create initial status log for {service.name} "
                        f"({service.id}): {e}",
                        exc_info=True,
                    )
                    continue

                if entry is None:
                    skipped += 1
                else:
                    created += 1

            if len(services) < self._page_size:
                break

        logger.info(
            f"Initial status log population complete: created={created}, "
            f"skipped={skipped}, failed={failed}"
        )
        return PopulateInitialLogsResult(
            total_services=total,
            created=created,
            skipped=skipped,
            failed=failed,
            failures=failures,
        )
