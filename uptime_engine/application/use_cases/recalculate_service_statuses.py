"""Recalculate Service Statuses Use Case.

Recomputes the status of every service of an organization (or of every
organization) from active incidents. Typically run as a scheduled background
task or an admin command to repair drift between incidents and live status.
"""

import asyncio
import logging
import time
from uuid import UUID

from uptime_engine.application.dtos.service_status_dto import (
    BatchStatusRecalculationResult,
    StatusChangeResult,
)
from uptime_engine.application.use_cases.manage_service_status import (
    ManageServiceStatusUseCase,
)
from uptime_engine.domain.entities.service import Service
from uptime_engine.domain.repositories.service_repository import (
    ServiceRepositoryInterface,
)

logger = logging.getLogger(__name__)

# SQL repositories sharing one session must process services one at a time
DEFAULT_MAX_CONCURRENCY = 1


class RecalculateServiceStatusesUseCase:
    """Bulk status recomputation with per-service failure isolation.

    A failure recomputing one service is logged and reported in the result; it
    never prevents the remaining services from being recomputed.
    """

    def __init__(
        self,
        service_repo: ServiceRepositoryInterface,
        manage_status: ManageServiceStatusUseCase,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        """Initialize use case with dependencies.

        Args:
            service_repo: Service store used to enumerate services
            manage_status: Status derivation use case
            max_concurrency: Maximum services recomputed at once (>= 1)
        """
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._service_repo = service_repo
        self._manage_status = manage_status
        self._max_concurrency = max_concurrency

    async def recalculate_all_services_status(
        self, organization_id: UUID
    ) -> BatchStatusRecalculationResult:
        """Recompute the status of every service of an organization.

        Args:
            organization_id: Organization whose services are recomputed

        Returns:
            BatchStatusRecalculationResult with counts and failure details
        """
        logger.info(f"Recalculating service statuses for organization {organization_id}")
        start_time = time.time()

        services = await self._service_repo.list_by_organization(organization_id)
        result = await self._recalculate(services, start_time)

        logger.info(
            f"Service status recalculation complete for organization {organization_id}: "
            f"total={result.total_services}, changed={result.changed}, "
            f"unchanged={result.unchanged}, failed={result.failed}, "
            f"duration={result.duration_seconds:.2f}s"
        )
        return result

    async def recalculate_all_organizations(self) -> BatchStatusRecalculationResult:
        """Recompute the status of every service of every organization.

        Returns:
            BatchStatusRecalculationResult aggregated over all organizations
        """
        start_time = time.time()
        organization_ids = await self._service_repo.list_organization_ids()
        logger.info(f"Recalculating service statuses for {len(organization_ids)} organizations")

        total = changed = unchanged = failed = 0
        failures: list[dict[str, str]] = []
        for organization_id in organization_ids:
            result = await self.recalculate_all_services_status(organization_id)
            total += result.total_services
            changed += result.changed
            unchanged += result.unchanged
            failed += result.failed
            failures.extend(result.failures)

        return BatchStatusRecalculationResult(
            total_services=total,
            changed=changed,
            unchanged=unchanged,
            failed=failed,
            duration_seconds=round(time.time() - start_time, 2),
            failures=failures,
        )

    async def _recalculate(
        self, services: list[Service], start_time: float
    ) -> BatchStatusRecalculationResult:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def limited(service: Service):
            async with semaphore:
                return await self._recompute_one(service)

        outcomes = await asyncio.gather(*(limited(s) for s in services))

        changed = unchanged = failed = 0
        failures: list[dict[str, str]] = []
        for service, outcome, error in outcomes:
            if error is not None:
                failed += 1
                failures.append({"service_id": str(service.id), "error": str(error)})
            elif outcome.changed:
                changed += 1
            else:
                unchanged += 1

        return BatchStatusRecalculationResult(
            total_services=len(services),
            changed=changed,
            unchanged=unchanged,
            failed=failed,
            duration_seconds=round(time.time() - start_time, 2),
            failures=failures,
        )

    async def _recompute_one(
        self, service: Service
    ) -> tuple[Service, StatusChangeResult | None, Exception | None]:
        try:
            result = await self._manage_status.recompute_status(service)
            return (service, result, None)
        except Exception as e:
            logger.error(
                f"Failed to recalculate status for service {service.id}: {e}",
                exc_info=True,
            )
            return (service, None, e)
