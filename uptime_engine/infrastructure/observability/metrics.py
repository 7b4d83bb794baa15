"""Prometheus metrics instrumentation.

Defines the engine's metrics and serves them for scraping from a background
HTTP server started by the worker. Avoids high cardinality by omitting
service_id from labels.
"""

from wsgiref.simple_server import WSGIServer

from prometheus_client import Counter, Histogram, start_http_server

# Status Change Metrics
status_changes_total = Counter(
    name="uptime_engine_status_changes_total",
    documentation="Total number of published service status changes",
    labelnames=["status_from", "status_to"],
)

notifications_failed_total = Counter(
    name="uptime_engine_notifications_failed_total",
    documentation="Total number of status change notifications that failed to publish",
    labelnames=["backend"],
)

# Status Recalculation Job Metrics
status_recalculations_total = Counter(
    name="uptime_engine_status_recalculations_total",
    documentation="Total number of scheduled status recalculation runs",
    labelnames=["status"],  # success, failure
)

status_recalculation_duration_seconds = Histogram(
    name="uptime_engine_status_recalculation_duration_seconds",
    documentation="Scheduled status recalculation run duration in seconds",
    buckets=(
        0.1,    # 100ms
        0.5,    # 500ms
        1.0,    # 1s
        5.0,    # 5s
        10.0,   # 10s
        30.0,   # 30s
        60.0,   # 1m
        300.0,  # 5m
        900.0,  # 15m
    ),
)


def start_metrics_server(port: int, addr: str = "0.0.0.0") -> WSGIServer:
    """Serve the default registry at http://<addr>:<port>/metrics.

    The server runs on a daemon thread.

    Args:
        port: TCP port (0 picks a free port)
        addr: Bind address

    Returns:
        The running server, for stop_metrics_server
    """
    server, _thread = start_http_server(port, addr=addr)
    return server


def stop_metrics_server(server: WSGIServer | None) -> None:
    """Stop a server started by start_metrics_server and release its port."""
    if server is None:
        return
    server.shutdown()
    server.server_close()


def record_status_change(status_from: str, status_to: str) -> None:
    """Record a published service status change.

    Args:
        status_from: Previous status value
        status_to: New status value
    """
    status_changes_total.labels(status_from=status_from, status_to=status_to).inc()


def record_notification_failure(backend: str) -> None:
    """Record a status change notification that could not be delivered.

    Args:
        backend: Notifier backend (log, redis)
    """
    notifications_failed_total.labels(backend=backend).inc()


def record_status_recalculation_run(
    status: str,
    duration: float,
) -> None:
    """Record status recalculation run metrics.

    Args:
        status: Run status (success or failure)
        duration: Run duration in seconds
    """
    status_recalculations_total.labels(status=status).inc()
    status_recalculation_duration_seconds.observe(duration)
