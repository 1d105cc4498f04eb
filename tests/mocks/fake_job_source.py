"""In-memory job source client for aggregator tests."""

from __future__ import annotations

from collections.abc import Callable

from job_counter_core.exceptions import QueryFailure, SourceUnavailable
from job_counter_core.models.postings import ResultItem

PageSpec = list[ResultItem | str]


class FakeJobSource:
    """Serves canned result pages keyed by postcode (and optionally keyword query).

    `pages` maps a postcode to its result pages; `pages_by_query` maps
    (keyword_query, postcode) and takes precedence. `fail` decides per
    (keyword_query, postcode) whether the search raises QueryFailure.
    """

    def __init__(
        self,
        pages: dict[str, list[PageSpec]] | None = None,
        pages_by_query: dict[tuple[str, str], list[PageSpec]] | None = None,
        fail: Callable[[str, str], bool] | None = None,
        unreachable: bool = False,
        endless_next: bool = False,
        supports_filter: bool = True,
    ) -> None:
        self.pages = pages or {}
        self.pages_by_query = pages_by_query or {}
        self.fail = fail or (lambda query, postcode: False)
        self.unreachable = unreachable
        self.endless_next = endless_next
        self.supports_filter = supports_filter

        self.searches: list[tuple[str, str]] = []
        self.pages_listed: list[tuple[str, int]] = []
        self.filter_calls: list[int] = []
        self.navigated = False
        self.closed = False
        self._current: list[PageSpec] = []
        self._postcode = ""
        self._index = 0

    async def navigate_to_search(self) -> None:
        if self.unreachable:
            msg = "search page unreachable"
            raise SourceUnavailable(msg)
        self.navigated = True

    async def apply_recency_filter(self, window_days: int) -> bool:
        self.filter_calls.append(window_days)
        return self.supports_filter

    async def search(self, keyword_query: str, location_query: str) -> None:
        self.searches.append((keyword_query, location_query))
        if self.fail(keyword_query, location_query):
            msg = f"timeout searching {location_query}"
            raise QueryFailure(msg)
        self._postcode = location_query
        self._current = self.pages_by_query.get(
            (keyword_query, location_query), self.pages.get(location_query, [])
        )
        self._index = 0

    async def list_result_items(self) -> list[ResultItem]:
        self.pages_listed.append((self._postcode, self._index))
        if self.endless_next and self._current:
            page = self._current[0]
        elif self._index < len(self._current):
            page = self._current[self._index]
        else:
            page = []
        return [ResultItem(text=p) if isinstance(p, str) else p for p in page]

    async def has_next_page(self) -> bool:
        return self.endless_next or self._index + 1 < len(self._current)

    async def go_to_next_page(self) -> None:
        self._index += 1

    async def close(self) -> None:
        self.closed = True
