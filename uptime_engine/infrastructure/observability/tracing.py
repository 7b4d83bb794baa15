"""OpenTelemetry tracing for the uptime worker.

Spans come from two places: SQLAlchemy auto-instrumentation of the worker's
engine, and the manual ``job.*`` spans opened by the scheduled tasks.
"""

import logging

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

from uptime_engine import __version__
from uptime_engine.infrastructure.config import get_settings
from uptime_engine.infrastructure.config.settings import ObservabilitySettings

logger = logging.getLogger(__name__)


def _build_exporter(otel_config: ObservabilitySettings) -> SpanExporter | None:
    if otel_config.traces_exporter == "none":
        return None
    if otel_config.traces_exporter == "console":
        return ConsoleSpanExporter()
    return OTLPSpanExporter(
        endpoint=otel_config.exporter_otlp_endpoint,
        insecure=otel_config.exporter_otlp_insecure,
    )


def setup_tracing(engine=None) -> TracerProvider:
    """Install the global tracer provider and instrument the database engine.

    A broken exporter or instrumentation never stops the worker: the failure is
    logged and the worker runs without that part of tracing.

    Args:
        engine: AsyncEngine to instrument; all engines when omitted

    Returns:
        The installed TracerProvider
    """
    settings = get_settings()
    otel_config = settings.observability

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": otel_config.service_name,
                "service.version": __version__,
                "deployment.environment": settings.environment,
            }
        ),
        sampler=ParentBased(TraceIdRatioBased(otel_config.trace_sample_rate)),
    )

    try:
        exporter = _build_exporter(otel_config)
    except Exception as e:
        logger.warning(f"Span exporter unavailable, spans will not be exported: {e}")
        exporter = None
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    logger.info(
        f"Tracing configured: exporter={otel_config.traces_exporter}, "
        f"sample_rate={otel_config.trace_sample_rate}"
    )

    try:
        if engine is not None:
            SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)
        else:
            SQLAlchemyInstrumentor().instrument()
    except Exception as e:
        logger.warning(f"SQLAlchemy instrumentation failed: {e}")

    return provider


def shutdown_tracing(provider: TracerProvider | None) -> None:
    """Flush pending spans and stop the exporter."""
    if provider is None:
        return
    provider.shutdown()


def get_tracer(name: str):
    """Get OpenTelemetry tracer for manual instrumentation.

    Example:
        >>> tracer = get_tracer(__name__)
        >>> with tracer.start_as_current_span("job.recalculate_service_statuses") as span:
        ...     span.set_attribute("services.changed", 3)
    """
    return trace.get_tracer(name, __version__)
