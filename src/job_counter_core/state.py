"""Pipeline state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from job_counter_core.models.report import JobCountReport
from job_counter_core.models.run import RunConfig, RunResult, StepError


@dataclass
class PipelineState:
    """Mutable state passed from step to step within one run."""

    config: RunConfig

    # Step outputs
    rules_doc: dict[str, Any] | None = None
    postcodes: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    report: JobCountReport | None = None

    # Cross-cutting
    completed_steps: list[str] = field(default_factory=list)
    errors: list[StepError] = field(default_factory=list)
    pairs_attempted: int = 0

    def build_result(
        self,
        status: str,
        duration_seconds: float,
    ) -> RunResult:
        """Build a RunResult from the current state."""
        failed = len(self.report.failed_queries) if self.report else 0
        written = "write_report" in self.completed_steps
        return RunResult(
            run_id=self.config.run_id,
            status=status,  # type: ignore[arg-type]
            postcodes=len(self.postcodes),
            pairs_attempted=self.pairs_attempted,
            pairs_failed=failed,
            total_count=self.report.total if self.report else 0,
            report_path=self.config.report_path if written else None,
            warnings=self.warnings,
            errors=self.errors,
            duration_seconds=duration_seconds,
        )
