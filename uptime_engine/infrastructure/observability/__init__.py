"""Observability infrastructure module.

Provides OpenTelemetry tracing, structured logging, and Prometheus metrics.
"""

from uptime_engine.infrastructure.observability.logging import configure_logging, get_logger
from uptime_engine.infrastructure.observability.metrics import (
    record_notification_failure,
    record_status_change,
    record_status_recalculation_run,
    start_metrics_server,
    stop_metrics_server,
)
from uptime_engine.infrastructure.observability.tracing import (
    get_tracer,
    setup_tracing,
    shutdown_tracing,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Tracing
    "setup_tracing",
    "get_tracer",
    "shutdown_tracing",
    # Metrics
    "start_metrics_server",
    "stop_metrics_server",
    "record_status_change",
    "record_notification_failure",
    "record_status_recalculation_run",
]
