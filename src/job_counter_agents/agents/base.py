"""Base agent with step logging and error recording."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import structlog

from job_counter_core.models.run import StepError
from job_counter_core.state import PipelineState

if TYPE_CHECKING:
    from job_counter_core.config.settings import Settings

logger = structlog.get_logger()


class BaseAgent(ABC):
    """Abstract base class for all pipeline agents."""

    agent_name: str = "base"

    def __init__(self, settings: Settings) -> None:
        """Initialize with settings."""
        self.settings = settings

    @abstractmethod
    async def run(self, state: PipelineState) -> PipelineState:
        """Execute the agent's task. Must be implemented by subclasses."""
        ...

    def _log_start(self, context: dict[str, object] | None = None) -> None:
        """Log agent execution start."""
        logger.info(
            "agent_start",
            agent=self.agent_name,
            **(context or {}),
        )

    def _log_end(
        self, duration: float, context: dict[str, object] | None = None
    ) -> None:
        """Log agent execution end with duration."""
        logger.info(
            "agent_end",
            agent=self.agent_name,
            duration_seconds=round(duration, 2),
            **(context or {}),
        )

    def _record_error(
        self,
        state: PipelineState,
        error: Exception,
        is_fatal: bool = False,
        postcode: str | None = None,
    ) -> None:
        """Record an error in the pipeline state."""
        step_error = StepError(
            step_name=self.agent_name,
            error_type=type(error).__name__,
            error_message=str(error),
            postcode=postcode,
            is_fatal=is_fatal,
        )
        state.errors.append(step_error)
        logger.error(
            "agent_error",
            agent=self.agent_name,
            error_type=type(error).__name__,
            error=str(error),
            is_fatal=is_fatal,
        )
