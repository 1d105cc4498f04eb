"""Domain models for job-counter."""

from job_counter_core.models.postings import KeywordGroup, QueryPair, Recency, ResultItem
from job_counter_core.models.report import FailedQuery, JobCountReport, PostcodeCount
from job_counter_core.models.run import RunConfig, RunResult, StepError

__all__ = [
    "FailedQuery",
    "JobCountReport",
    "KeywordGroup",
    "PostcodeCount",
    "QueryPair",
    "Recency",
    "ResultItem",
    "RunConfig",
    "RunResult",
    "StepError",
]
