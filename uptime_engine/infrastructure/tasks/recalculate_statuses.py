"""Scheduled task for service status recalculation.

Periodically recomputes every service's status from its active incidents so
that drift between incidents and live status (missed events, manual database
edits) is repaired.
"""

import time

import structlog

from uptime_engine.application.use_cases.manage_service_status import (
    ManageServiceStatusUseCase,
)
from uptime_engine.application.use_cases.recalculate_service_statuses import (
    RecalculateServiceStatusesUseCase,
)
from uptime_engine.domain.repositories.status_notifier import StatusNotifierInterface
from uptime_engine.infrastructure.config.settings import get_settings
from uptime_engine.infrastructure.database.repositories import (
    IncidentRepository,
    ServiceRepository,
    StatusLogRepository,
)
from uptime_engine.infrastructure.database.session import commit_per_change, session_scope
from uptime_engine.infrastructure.notifications import build_notifier
from uptime_engine.infrastructure.observability.metrics import (
    record_status_recalculation_run,
)
from uptime_engine.infrastructure.observability.tracing import get_tracer

logger = structlog.get_logger(__name__)
tracer = get_tracer(__name__)


async def recalculate_service_statuses(
    notifier: StatusNotifierInterface | None = None,
) -> None:
    """Scheduled task to recompute the status of every service.

    This task:
    1. Opens a session and builds the SQL repositories
    2. Runs RecalculateServiceStatusesUseCase for every organization
    3. Logs the summary and each per-service failure
    4. Emits Prometheus metrics

    Errors are logged but not raised to prevent scheduler from stopping.
    A notifier built by the task is closed before it returns; a notifier
    passed in stays open and belongs to the caller.

    Args:
        notifier: Status change sink (NOTIFIER_BACKEND when omitted)
    """
    logger.info("Starting service status recalculation")
    start_time = time.time()
    status = "failure"
    owned_notifier: StatusNotifierInterface | None = None

    try:
        max_concurrency = get_settings().background_tasks.status_recalculation_max_concurrency
        if notifier is None:
            notifier = owned_notifier = build_notifier()

        with tracer.start_as_current_span("job.recalculate_service_statuses") as span:
            async with session_scope() as session:
                service_repo = ServiceRepository(session)
                manage_status = ManageServiceStatusUseCase(
                    service_repo=service_repo,
                    incident_repo=IncidentRepository(session),
                    status_log_repo=StatusLogRepository(session),
                    notifier=notifier,
                    transaction=commit_per_change(session),
                )
                use_case = RecalculateServiceStatusesUseCase(
                    service_repo=service_repo,
                    manage_status=manage_status,
                    max_concurrency=max_concurrency,
                )

                result = await use_case.recalculate_all_organizations()

            span.set_attribute("services.total", result.total_services)
            span.set_attribute("services.changed", result.changed)
            span.set_attribute("services.failed", result.failed)

        status = "success"
        logger.info(
            "Service status recalculation completed",
            total_services=result.total_services,
            changed=result.changed,
            unchanged=result.unchanged,
            failed=result.failed,
            duration_seconds=round(time.time() - start_time, 2),
        )

        for failure in result.failures:
            logger.warning(
                "Failed to recalculate status for service",
                service_id=failure["service_id"],
                error_message=failure["error"],
            )

    except Exception as e:
        duration = time.time() - start_time
        logger.exception(
            "Unexpected error during service status recalculation",
            error=str(e),
            error_type=type(e).__name__,
            duration_seconds=round(duration, 2),
        )

    finally:
        if owned_notifier is not None:
            await _close_notifier(owned_notifier)

        duration = time.time() - start_time
        record_status_recalculation_run(status=status, duration=duration)

        logger.info(
            "Service status recalculation task completed",
            status=status,
            duration_seconds=round(duration, 2),
        )


async def _close_notifier(notifier: StatusNotifierInterface) -> None:
    try:
        await notifier.aclose()
    except Exception as e:
        logger.warning("Failed to close status notifier", error=str(e))
