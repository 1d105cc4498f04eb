"""Observability: structured logging and tracing."""

from job_counter_agents.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
)
from job_counter_agents.observability.tracing import (
    configure_tracing,
    disable_tracing,
    get_tracer,
    trace_pipeline_run,
    trace_query_pair,
)

__all__ = [
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
    "configure_tracing",
    "disable_tracing",
    "get_tracer",
    "trace_pipeline_run",
    "trace_query_pair",
]
