"""Public interface re-exports for job_counter_core."""

from job_counter_core.interfaces.job_source import JobSourceClient

__all__ = [
    "JobSourceClient",
]
