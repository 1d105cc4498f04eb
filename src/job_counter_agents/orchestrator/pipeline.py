"""Sequential async pipeline: resolve rules, count jobs, write the report."""

from __future__ import annotations

import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from job_counter_agents.agents.job_counter import ClientFactory, JobCounterAgent
from job_counter_agents.agents.report_writer import ReportWriterAgent
from job_counter_agents.agents.rules_resolver import RulesResolverAgent
from job_counter_agents.observability import (
    bind_run_context,
    clear_run_context,
    get_tracer,
    trace_pipeline_run,
)
from job_counter_core.exceptions import DocumentError, SourceUnavailable, ValidationError
from job_counter_core.models.run import RunConfig, RunResult
from job_counter_core.state import PipelineState

if TYPE_CHECKING:
    from job_counter_agents.agents.base import BaseAgent
    from job_counter_core.config.settings import Settings
    from job_counter_core.models.postings import KeywordGroup

logger = structlog.get_logger()

# Errors that stop the run; nothing after the failing step executes
FATAL_ERRORS = (ValidationError, SourceUnavailable, DocumentError)


class Pipeline:
    """Run the resolver, the job counter and the report writer in order."""

    def __init__(
        self,
        settings: Settings,
        client_factory: ClientFactory | None = None,
        keyword_groups: Sequence[KeywordGroup] | None = None,
    ) -> None:
        """Initialize with settings and optional job source / keyword overrides."""
        self.settings = settings
        self.steps: list[tuple[str, BaseAgent]] = [
            ("resolve_rules", RulesResolverAgent(settings)),
            (
                "count_jobs",
                JobCounterAgent(
                    settings,
                    client_factory=client_factory,
                    keyword_groups=keyword_groups,
                ),
            ),
            ("write_report", ReportWriterAgent(settings)),
        ]

    async def run(self, config: RunConfig) -> RunResult:
        """Execute every step; a fatal error ends the run with status 'failed'."""
        start = time.monotonic()
        state = PipelineState(config=config)
        bind_run_context(
            config.run_id,
            source=self.settings.source_name,
            window_days=self.settings.window_days,
        )

        try:
            logger.info("pipeline_start", run_id=config.run_id)

            async with trace_pipeline_run(config.run_id) as root_span:
                for step_name, agent in self.steps:
                    failed = await self._run_step(step_name, agent, state)
                    if failed:
                        self._set_root_span_attrs(root_span, "failed", state)
                        return self._finish(state, "failed", start)

                status = "partial" if state.report and state.report.failed_queries else "success"
                self._set_root_span_attrs(root_span, status, state)

            return self._finish(state, status, start)
        finally:
            clear_run_context()

    async def _run_step(self, step_name: str, agent: BaseAgent, state: PipelineState) -> bool:
        """Execute a single step, optionally wrapped in a trace span. True on fatal error."""
        tracer = get_tracer()
        span = None
        if tracer is not None:
            span = tracer.start_span(f"agent.{step_name}")
            span.set_attribute("agent.name", step_name)

        try:
            await agent.run(state)
            state.completed_steps.append(step_name)
            if span is not None:
                span.set_attribute("agent.status", "ok")
            return False

        except FATAL_ERRORS as e:
            logger.error("fatal_step_error", step=step_name, error_type=type(e).__name__)
            agent._record_error(state, e, is_fatal=True)
            if span is not None:
                span.set_attribute("agent.status", "error")
                span.set_attribute("agent.error", str(e))
            return True

        finally:
            if span is not None:
                span.end()

    @staticmethod
    def _set_root_span_attrs(
        root_span: object | None,
        status: str,
        state: PipelineState,
    ) -> None:
        """Set summary attributes on the root pipeline span."""
        if root_span is None:
            return
        root_span.set_attribute("pipeline.status", status)  # type: ignore[attr-defined]
        root_span.set_attribute("pipeline.postcodes", len(state.postcodes))  # type: ignore[attr-defined]
        root_span.set_attribute(  # type: ignore[attr-defined]
            "pipeline.total_count",
            state.report.total if state.report else 0,
        )
        root_span.set_attribute("pipeline.errors", len(state.errors))  # type: ignore[attr-defined]

    @staticmethod
    def _finish(state: PipelineState, status: str, start: float) -> RunResult:
        """Log the run summary and build the result."""
        duration = time.monotonic() - start
        logger.info(
            "pipeline_summary",
            status=status,
            postcodes=len(state.postcodes),
            total_count=state.report.total if state.report else 0,
            errors=len(state.errors),
            duration_seconds=round(duration, 2),
        )
        return state.build_result(status=status, duration_seconds=duration)
