"""Custom exception hierarchy for job-counter."""

from __future__ import annotations


class JobCounterError(Exception):
    """Base exception for all job-counter errors."""


class ValidationError(JobCounterError):
    """Raised when the eligibility rules document is malformed."""


class SourceUnavailable(JobCounterError):
    """Raised when the job source cannot be reached or initialised."""


class QueryFailure(JobCounterError):
    """Raised when a single search or page fetch fails or times out."""


class DocumentError(JobCounterError):
    """Raised when a rules or report file cannot be read or written."""
