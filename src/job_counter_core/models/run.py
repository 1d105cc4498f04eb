"""Run configuration and result models."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class RunConfig(BaseModel):
    """Configuration for a single counting run."""

    run_id: str = Field(
        default_factory=lambda: f"run_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S')}",
        description="Unique run identifier",
    )
    rules_path: Path = Field(description="Eligibility rules document")
    report_path: Path = Field(description="Report output path")
    skip_resolve: bool = Field(
        default=False, description="Trust the flat sets already in the rules document"
    )


class StepError(BaseModel):
    """Record of an error that occurred during a pipeline step."""

    step_name: str = Field(description="Name of the step that errored")
    error_type: str = Field(description="Exception class name")
    error_message: str = Field(description="Error description")
    postcode: str | None = Field(default=None, description="Related postcode if applicable")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the error occurred"
    )
    is_fatal: bool = Field(default=False, description="Whether this error stopped the run")


class RunResult(BaseModel):
    """Summary of a completed run."""

    run_id: str = Field(description="Run identifier")
    status: Literal["success", "partial", "failed"] = Field(description="Overall run status")
    postcodes: int = Field(description="Size of the postcode universe")
    pairs_attempted: int = Field(description="Keyword group / postcode pairs queried")
    pairs_failed: int = Field(description="Pairs that contributed zero after failing")
    total_count: int = Field(description="Sum of per-postcode counts")
    report_path: Path | None = Field(default=None, description="Written report, if any")
    warnings: list[str] = Field(default_factory=list, description="Known gaps")
    errors: list[StepError] = Field(default_factory=list, description="Errors during the run")
    duration_seconds: float = Field(description="Total run duration in seconds")
    completed_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the run completed"
    )
