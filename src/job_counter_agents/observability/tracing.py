"""OpenTelemetry tracing for counting runs."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from job_counter_core.config.settings import Settings

logger = structlog.get_logger()

# Module-level tracer, set by configure_tracing(); None while tracing is off
_tracer: Any = None


def configure_tracing(settings: Settings) -> None:
    """Install a tracer provider for the configured exporter.

    OpenTelemetry is an optional extra: its imports are deferred so runs
    with otel_exporter="none" never load it.
    """
    global _tracer

    if settings.otel_exporter == "none":
        _tracer = None
        return

    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider

    provider = TracerProvider(
        resource=Resource.create({"service.name": settings.otel_service_name})
    )
    provider.add_span_processor(_span_processor(settings))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer("job-counter")
    logger.info("tracing_configured", exporter=settings.otel_exporter)


def _span_processor(settings: Settings) -> Any:
    """Console spans are exported synchronously, OTLP spans in batches."""
    if settings.otel_exporter == "console":
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

        return SimpleSpanProcessor(ConsoleSpanExporter())

    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    return BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_endpoint))


def get_tracer() -> Any:
    """Return the active tracer, or None when tracing is disabled."""
    return _tracer


def disable_tracing() -> None:
    """Drop the active tracer."""
    global _tracer
    _tracer = None


@asynccontextmanager
async def trace_pipeline_run(run_id: str) -> AsyncGenerator[Any, None]:
    """Root span for one counting run. Yields None when tracing is disabled."""
    if _tracer is None:
        yield None
        return

    with _tracer.start_as_current_span("pipeline.run") as span:
        span.set_attribute("pipeline.run_id", run_id)
        yield span


@asynccontextmanager
async def trace_query_pair(keyword_group: str, postcode: str) -> AsyncGenerator[Any, None]:
    """Child span for one keyword group / postcode search, retries included.

    The caller records the outcome on the yielded span (None when disabled).
    """
    if _tracer is None:
        yield None
        return

    with _tracer.start_as_current_span("query.pair") as span:
        span.set_attribute("query.keyword_group", keyword_group)
        span.set_attribute("query.postcode", postcode)
        yield span
