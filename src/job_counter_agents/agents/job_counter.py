"""Job counter agent: counts recent postings per postcode across keyword groups."""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Mapping, Sequence
from contextlib import AsyncExitStack, asynccontextmanager
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, TypeVar

import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from job_counter_agents.agents.base import BaseAgent
from job_counter_agents.observability import trace_query_pair
from job_counter_agents.tools import factories
from job_counter_agents.tools.recency import is_within_window
from job_counter_core.constants import DEFAULT_KEYWORD_GROUPS
from job_counter_core.exceptions import JobCounterError, QueryFailure
from job_counter_core.interfaces.job_source import JobSourceClient
from job_counter_core.models.postings import KeywordGroup, QueryPair, ResultItem
from job_counter_core.models.report import FailedQuery, JobCountReport, PostcodeCount
from job_counter_core.state import PipelineState

if TYPE_CHECKING:
    from job_counter_core.config.settings import Settings

T = TypeVar("T")

logger = structlog.get_logger()

ClientFactory = Callable[["Settings"], JobSourceClient]


def keyword_groups_from_mapping(mapping: Mapping[str, Sequence[str]]) -> list[KeywordGroup]:
    """Build keyword groups from a name -> terms mapping."""
    return [KeywordGroup(name=name, terms=tuple(terms)) for name, terms in mapping.items()]


def default_keyword_groups() -> list[KeywordGroup]:
    """The five subclass 462 specified-work industries."""
    return keyword_groups_from_mapping(DEFAULT_KEYWORD_GROUPS)


def build_query_plan(
    keyword_groups: Sequence[KeywordGroup], postcodes: Sequence[str]
) -> list[QueryPair]:
    """Every keyword group crossed with every postcode, group-major."""
    return [QueryPair(group=group, postcode=pc) for group in keyword_groups for pc in postcodes]


def partition_postcodes(postcodes: Sequence[str], workers: int) -> list[list[str]]:
    """Split postcodes round-robin into at most `workers` disjoint, non-empty subsets."""
    chunks = [list(postcodes[i::workers]) for i in range(workers)]
    return [chunk for chunk in chunks if chunk]


class CountAccumulator:
    """Running per-postcode totals under a cross-group counting policy.

    "sum" adds every within-window posting of every pair, so a posting
    matched by two keyword groups counts twice. "dedupe" counts each
    posting identity once per postcode.
    """

    def __init__(self, postcodes: Iterable[str], policy: str = "sum") -> None:
        self.policy = policy
        self._counts: dict[str, int] = {}
        self._seen: dict[str, set[str]] = {}
        for postcode in postcodes:
            self._counts[postcode] = 0
            self._seen[postcode] = set()

    def commit(self, postcode: str, items: Sequence[ResultItem]) -> int:
        """Add one finished pair's within-window items. Returns how many were counted."""
        self._counts.setdefault(postcode, 0)
        seen = self._seen.setdefault(postcode, set())

        if self.policy == "dedupe":
            fresh = {item.identity for item in items} - seen
            seen |= fresh
            added = len(fresh)
        else:
            added = len(items)

        self._counts[postcode] += added
        return added

    def merge(self, other: CountAccumulator) -> None:
        """Fold in another worker's totals; workers own disjoint postcodes."""
        for postcode, count in other._counts.items():
            self._counts[postcode] = self._counts.get(postcode, 0) + count
            self._seen.setdefault(postcode, set()).update(other._seen.get(postcode, set()))

    def counts(self) -> dict[str, int]:
        """Snapshot of the totals keyed by postcode."""
        return dict(self._counts)


class JobCounterAgent(BaseAgent):
    """Query the job source for every keyword group and postcode and count recent postings."""

    agent_name = "job_counter"

    def __init__(
        self,
        settings: Settings,
        client_factory: ClientFactory | None = None,
        keyword_groups: Sequence[KeywordGroup] | None = None,
    ) -> None:
        """Initialize with settings, a session factory and the keyword groups to search."""
        super().__init__(settings)
        self._client_factory = client_factory or factories.create_job_source
        self.keyword_groups = list(keyword_groups or default_keyword_groups())

    async def run(self, state: PipelineState) -> PipelineState:
        """Count postings for the resolved postcode universe."""
        self._log_start(
            {"postcodes": len(state.postcodes), "keyword_groups": len(self.keyword_groups)}
        )
        start = time.monotonic()

        report = await self.aggregate(
            state.postcodes, self.keyword_groups, self.settings.window_days
        )
        report.warnings.extend(state.warnings)
        state.report = report
        state.pairs_attempted = len(self.keyword_groups) * len(set(state.postcodes))

        for failure in report.failed_queries:
            self._record_error(
                state,
                QueryFailure(f"{failure.keyword_group}: {failure.error}"),
                postcode=failure.postcode,
            )

        self._log_end(
            time.monotonic() - start,
            {"total_count": report.total, "failed_queries": len(report.failed_queries)},
        )
        return state

    async def aggregate(
        self,
        postcodes: Iterable[str],
        keyword_groups: Sequence[KeywordGroup],
        window_days: int,
    ) -> JobCountReport:
        """Count within-window postings per postcode.

        All sessions are opened before the first query, so an unreachable
        source raises SourceUnavailable before anything is counted. Every
        opened session is closed on every exit path.
        """
        universe = sorted(set(postcodes))
        chunks = partition_postcodes(universe, self.settings.max_sessions)
        failures: list[FailedQuery] = []

        async with AsyncExitStack() as stack:
            clients = [
                await stack.enter_async_context(self._open_session(window_days))
                for _ in chunks
            ]
            try:
                # Workers are cancelled before any session closes
                async with asyncio.TaskGroup() as group:
                    tasks = [
                        group.create_task(
                            self._run_plan(client, chunk, keyword_groups, window_days, failures)
                        )
                        for client, chunk in zip(clients, chunks, strict=True)
                    ]
            except ExceptionGroup as eg:
                raise eg.exceptions[0] from eg
            partials = [task.result() for task in tasks]

        totals = CountAccumulator(universe, self.settings.count_policy)
        for partial in partials:
            totals.merge(partial)

        return JobCountReport(
            sources=[self.settings.source_name],
            window_days=window_days,
            count_policy=self.settings.count_policy,
            per_poa={pc: PostcodeCount(count=n) for pc, n in totals.counts().items()},
            failed_queries=failures,
        )

    @asynccontextmanager
    async def _open_session(self, window_days: int) -> AsyncIterator[JobSourceClient]:
        """Acquire one navigated client session and release it on exit."""
        client = self._client_factory(self.settings)
        try:
            await client.navigate_to_search()
            await self._apply_recency_filter(client, window_days)
            yield client
        finally:
            await client.close()

    async def _apply_recency_filter(self, client: JobSourceClient, window_days: int) -> None:
        """Best-effort source-side filter; per-item classification applies regardless."""
        apply = getattr(client, "apply_recency_filter", None)
        if apply is None:
            logger.info("recency_filter_unsupported")
            return
        try:
            applied = await self._bounded(apply(window_days))
        except (JobCounterError, TimeoutError) as e:
            logger.warning(
                "recency_filter_failed", error_type=type(e).__name__, error=str(e)
            )
            return
        if not applied:
            logger.info("recency_filter_not_applied", window_days=window_days)

    async def _run_plan(
        self,
        client: JobSourceClient,
        postcodes: Sequence[str],
        keyword_groups: Sequence[KeywordGroup],
        window_days: int,
        failures: list[FailedQuery],
    ) -> CountAccumulator:
        """Work through one session's share of the query plan, pair by pair."""
        accumulator = CountAccumulator(postcodes, self.settings.count_policy)
        today = datetime.now(UTC).date()

        for pair in build_query_plan(keyword_groups, postcodes):
            async with trace_query_pair(pair.group.name, pair.postcode) as span:
                try:
                    items = await self._count_pair_with_retry(client, pair, window_days, today)
                except (QueryFailure, TimeoutError) as e:
                    error = str(e) or type(e).__name__
                    failures.append(
                        FailedQuery(
                            postcode=pair.postcode, keyword_group=pair.group.name, error=error
                        )
                    )
                    logger.warning(
                        "pair_failed",
                        keyword_group=pair.group.name,
                        postcode=pair.postcode,
                        error_type=type(e).__name__,
                        error=error,
                    )
                    if span is not None:
                        span.set_attribute("query.status", "failed")
                    continue

                added = accumulator.commit(pair.postcode, items)
                if span is not None:
                    span.set_attribute("query.status", "ok")
                    span.set_attribute("query.counted", added)

            logger.debug(
                "pair_counted",
                keyword_group=pair.group.name,
                postcode=pair.postcode,
                within_window=len(items),
                counted=added,
            )
        return accumulator

    async def _count_pair_with_retry(
        self,
        client: JobSourceClient,
        pair: QueryPair,
        window_days: int,
        today: date,
    ) -> list[ResultItem]:
        """Count one pair, retrying the whole pair on failure."""

        @retry(
            stop=stop_after_attempt(self.settings.query_retry_max),
            wait=wait_exponential(
                multiplier=1,
                min=self.settings.query_retry_wait_min,
                max=self.settings.query_retry_wait_max,
            ),
            retry=retry_if_exception_type((QueryFailure, TimeoutError)),
            reraise=True,
        )
        async def _do_count() -> list[ResultItem]:
            return await self._count_pair(client, pair, window_days, today)

        return await _do_count()

    async def _count_pair(
        self,
        client: JobSourceClient,
        pair: QueryPair,
        window_days: int,
        today: date,
    ) -> list[ResultItem]:
        """Search one pair and collect its within-window items across pages."""
        await self._bounded(client.search(pair.group.query, pair.postcode))

        within: list[ResultItem] = []
        pages_read = 0
        while True:
            items = await self._bounded(client.list_result_items())
            pages_read += 1
            within.extend(item for item in items if is_within_window(item, window_days, today))

            if not items or pages_read >= self.settings.max_pages:
                break
            if not await self._bounded(client.has_next_page()):
                break
            await self._bounded(client.go_to_next_page())

        logger.debug(
            "pair_paged",
            keyword_group=pair.group.name,
            postcode=pair.postcode,
            pages=pages_read,
        )
        return within

    async def _bounded(self, step: Awaitable[T]) -> T:
        """Bound a single source step by the page timeout."""
        return await asyncio.wait_for(step, timeout=self.settings.page_timeout_seconds)
