"""Factory functions for creating tool instances from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from job_counter_core.interfaces.job_source import JobSourceClient

if TYPE_CHECKING:
    from job_counter_core.config.settings import Settings


def create_job_source(settings: Settings) -> JobSourceClient:
    """Create a fresh job source session (Workforce Australia via Playwright).

    Every call returns an independent session, so concurrent workers
    never share navigation state.
    """
    from job_counter_agents.tools.workforce_client import WorkforceAustraliaClient

    return WorkforceAustraliaClient(settings)
