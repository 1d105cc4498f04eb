"""Report writer agent: persists the job count report."""

from __future__ import annotations

import time

import structlog

from job_counter_agents.agents.base import BaseAgent
from job_counter_agents.orchestrator.documents import save_document
from job_counter_core.exceptions import DocumentError
from job_counter_core.state import PipelineState

logger = structlog.get_logger()


class ReportWriterAgent(BaseAgent):
    """Write the report document with one entry per postcode."""

    agent_name = "report_writer"

    async def run(self, state: PipelineState) -> PipelineState:
        """Check the report covers the universe exactly, then write it."""
        self._log_start({"report_path": str(state.config.report_path)})
        start = time.monotonic()

        report = state.report
        if report is None:
            msg = "No report to write; the counting step did not run"
            raise DocumentError(msg)

        missing = set(state.postcodes) - set(report.per_poa)
        extra = set(report.per_poa) - set(state.postcodes)
        if missing or extra:
            msg = (
                f"Report does not match the postcode universe "
                f"(missing {len(missing)}, unexpected {len(extra)})"
            )
            raise DocumentError(msg)

        save_document(report.to_document(), state.config.report_path)
        logger.info(
            "report_written",
            path=str(state.config.report_path),
            postcodes=len(report.per_poa),
            total_count=report.total,
        )

        self._log_end(time.monotonic() - start)
        return state
