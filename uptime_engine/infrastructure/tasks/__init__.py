"""Background tasks and scheduled jobs.

This package contains the APScheduler-based task scheduling infrastructure
for the periodic service status recalculation and the status log backfill.
"""

from uptime_engine.infrastructure.tasks.scheduler import (
    get_scheduler,
    shutdown_scheduler,
    start_scheduler,
)

__all__ = [
    "get_scheduler",
    "start_scheduler",
    "shutdown_scheduler",
]
