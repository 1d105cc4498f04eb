"""Application settings using pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from job_counter_core.constants import DEFAULT_SEARCH_URL, DEFAULT_SOURCE_NAME


class Settings(BaseSettings):
    """Central configuration for job-counter."""

    model_config = SettingsConfigDict(env_prefix="JC_", env_file=".env")

    # --- Documents ---
    rules_path: Path = Field(
        default=Path("rules/eligibility-462.json"),
        description="Eligibility rules document, resolved in place",
    )
    report_path: Path = Field(
        default=Path("data/jobs-last10d.json"),
        description="Where the job count report is written",
    )

    # --- Counting ---
    window_days: int = Field(
        default=10,
        description="Maximum posting age in days counted as current",
    )
    max_pages: int = Field(
        default=5,
        description="Maximum result pages read per keyword group and postcode",
    )
    count_policy: Literal["sum", "dedupe"] = Field(
        default="sum",
        description="'sum' counts a posting once per matching group, 'dedupe' once per postcode",
    )
    max_sessions: int = Field(
        default=1,
        description="Independent browser sessions; postcodes are split between them",
    )
    query_retry_max: int = Field(
        default=2,
        description="Attempts per keyword group and postcode before giving up",
    )
    query_retry_wait_min: float = Field(
        default=1.0,
        description="Minimum retry wait in seconds",
    )
    query_retry_wait_max: float = Field(
        default=10.0,
        description="Maximum retry wait in seconds",
    )

    # --- Job source ---
    source_name: str = Field(
        default=DEFAULT_SOURCE_NAME,
        description="Name recorded in the report's sources list",
    )
    search_url: str = Field(
        default=DEFAULT_SEARCH_URL,
        description="Job search entry page",
    )
    headless: bool = Field(
        default=True,
        description="Run the browser without a window",
    )
    navigation_timeout_seconds: float = Field(
        default=20.0,
        description="Timeout for page loads and load-state waits",
    )
    action_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout for clicks, fills and element reads",
    )
    page_timeout_seconds: float = Field(
        default=60.0,
        description="Upper bound on any single search or page step, settle delay included",
    )
    settle_delay_seconds: float = Field(
        default=1.5,
        description="Fixed wait after the page goes idle, before reading results",
    )
    keyword_selector: str = Field(
        default='input[aria-label="Keyword"]',
        description="Keyword search input",
    )
    location_selector: str = Field(
        default='input[aria-label="Enter location"]',
        description="Location search input",
    )
    job_card_selector: str = Field(
        default='[data-testid^="job-card"]',
        description="One element per result item",
    )

    # --- Logging ---
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log renderer",
    )
    log_file: Path | None = Field(
        default=None,
        description="Also append JSON log lines to this file",
    )

    # --- Tracing ---
    otel_exporter: Literal["none", "console", "otlp"] = Field(
        default="none",
        description="OpenTelemetry span exporter",
    )
    otel_endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP collector endpoint",
    )
    otel_service_name: str = Field(
        default="job-counter",
        description="service.name resource attribute",
    )

    @model_validator(mode="after")
    def validate_counting_bounds(self) -> Settings:
        """Reject non-positive window, page and session bounds."""
        for name in ("window_days", "max_pages", "max_sessions", "query_retry_max"):
            if getattr(self, name) < 1:
                msg = f"{name} must be at least 1"
                raise ValueError(msg)
        return self
