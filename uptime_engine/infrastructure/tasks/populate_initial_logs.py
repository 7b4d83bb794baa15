"""One-off task backfilling creation entries into the status log.

Run once after enabling status logging on an existing database, so services
created earlier get a history to reconstruct uptime from.
"""

import structlog

from uptime_engine.application.dtos.service_status_dto import PopulateInitialLogsResult
from uptime_engine.application.use_cases.manage_service_status import (
    ManageServiceStatusUseCase,
)
from uptime_engine.application.use_cases.populate_initial_status_logs import (
    PopulateInitialStatusLogsUseCase,
)
from uptime_engine.infrastructure.database.repositories import (
    IncidentRepository,
    ServiceRepository,
    StatusLogRepository,
)
from uptime_engine.infrastructure.database.session import commit_per_change, session_scope
from uptime_engine.infrastructure.notifications import LoggingStatusNotifier
from uptime_engine.infrastructure.observability.tracing import get_tracer

logger = structlog.get_logger(__name__)
tracer = get_tracer(__name__)


async def populate_initial_status_logs() -> PopulateInitialLogsResult:
    """Append a creation entry for every service without status history.

    Returns:
        PopulateInitialLogsResult with created/skipped/failed counts
    """
    with tracer.start_as_current_span("job.populate_initial_status_logs") as span:
        async with session_scope() as session:
            service_repo = ServiceRepository(session)
            manage_status = ManageServiceStatusUseCase(
                service_repo=service_repo,
                incident_repo=IncidentRepository(session),
                status_log_repo=StatusLogRepository(session),
                # Backfill appends creation entries only; nothing is published
                notifier=LoggingStatusNotifier(),
                transaction=commit_per_change(session),
            )
            result = await PopulateInitialStatusLogsUseCase(
                service_repo=service_repo,
                manage_status=manage_status,
            ).execute()

        span.set_attribute("services.total", result.total_services)
        span.set_attribute("services.created", result.created)
        span.set_attribute("services.failed", result.failed)

    logger.info(
        "Initial status log backfill completed",
        total_services=result.total_services,
        created=result.created,
        skipped=result.skipped,
        failed=result.failed,
    )
    return result
