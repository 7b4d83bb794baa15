"""Worker process entry point.

Usage:
    python -m uptime_engine.infrastructure.worker                # scheduler + /metrics
    python -m uptime_engine.infrastructure.worker --once         # one recalculation
    python -m uptime_engine.infrastructure.worker --populate-initial-logs
"""

import argparse
import asyncio
import signal
from contextlib import asynccontextmanager

import structlog

from uptime_engine.infrastructure.config import get_settings
from uptime_engine.infrastructure.database.config import dispose_db, get_engine, init_db
from uptime_engine.infrastructure.observability import (
    configure_logging,
    setup_tracing,
    shutdown_tracing,
    start_metrics_server,
    stop_metrics_server,
)
from uptime_engine.infrastructure.tasks.populate_initial_logs import (
    populate_initial_status_logs,
)
from uptime_engine.infrastructure.tasks.recalculate_statuses import (
    recalculate_service_statuses,
)
from uptime_engine.infrastructure.tasks.scheduler import shutdown_scheduler, start_scheduler

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan():
    """Startup and shutdown of the worker's resources.

    Startup:
    - Configure observability (logging, tracing)
    - Initialize database connection pool

    Shutdown:
    - Shutdown background task scheduler
    - Dispose database connection pool
    - Flush pending spans
    """
    configure_logging()
    await init_db()
    provider = setup_tracing(get_engine())

    try:
        yield
    finally:
        await shutdown_scheduler()
        await dispose_db()
        shutdown_tracing(provider)


async def run_forever() -> None:
    """Run the scheduler and the metrics endpoint until SIGINT/SIGTERM."""
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    async with lifespan():
        metrics_server = _start_metrics()
        try:
            await start_scheduler()
            logger.info("Worker started")
            await stop.wait()
            logger.info("Worker stopping")
        finally:
            stop_metrics_server(metrics_server)


def _start_metrics():
    """Start the /metrics endpoint unless METRICS_PORT is 0."""
    metrics_settings = get_settings().metrics
    if metrics_settings.port == 0:
        logger.info("Metrics endpoint disabled")
        return None
    server = start_metrics_server(metrics_settings.port, addr=metrics_settings.addr)
    logger.info(
        "Metrics endpoint started",
        addr=metrics_settings.addr,
        port=metrics_settings.port,
    )
    return server


async def run_once(populate_initial_logs: bool) -> None:
    async with lifespan():
        if populate_initial_logs:
            await populate_initial_status_logs()
        else:
            await recalculate_service_statuses()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Service uptime engine worker")
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--once",
        action="store_true",
        help="Run one status recalculation for all organizations and exit",
    )
    group.add_argument(
        "--populate-initial-logs",
        action="store_true",
        help="Backfill creation entries for services without status history and exit",
    )
    args = parser.parse_args(argv)

    if args.once or args.populate_initial_logs:
        asyncio.run(run_once(populate_initial_logs=args.populate_initial_logs))
    else:
        asyncio.run(run_forever())


if __name__ == "__main__":
    main()
