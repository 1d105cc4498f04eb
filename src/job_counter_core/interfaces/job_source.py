"""Abstract job source client interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from job_counter_core.models.postings import ResultItem


@runtime_checkable
class JobSourceClient(Protocol):
    """A single stateful search session against an external job source.

    Calls against one session must be serialised.
    """

    async def navigate_to_search(self) -> None:
        """Open the search surface. Raises SourceUnavailable if unreachable."""
        ...

    async def apply_recency_filter(self, window_days: int) -> bool:
        """Best-effort source-side recency filter. Returns False if unsupported."""
        ...

    async def search(self, keyword_query: str, location_query: str) -> None:
        """Issue a search and wait until results have settled."""
        ...

    async def list_result_items(self) -> list[ResultItem]:
        """Return the current page's result items."""
        ...

    async def has_next_page(self) -> bool:
        """Whether a further results page can be reached."""
        ...

    async def go_to_next_page(self) -> None:
        """Advance to the next results page and wait until it settles."""
        ...

    async def close(self) -> None:
        """Release the underlying session."""
        ...
