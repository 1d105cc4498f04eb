"""Workforce Australia job search client using Playwright."""

from __future__ import annotations

import re
from datetime import date
from types import TracebackType
from typing import Any

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from job_counter_core.config.settings import Settings
from job_counter_core.constants import JOB_AGE_OPTIONS
from job_counter_core.exceptions import QueryFailure, SourceUnavailable
from job_counter_core.models.postings import ResultItem

logger = structlog.get_logger()

_NEXT_BUTTON = re.compile(r"Next", re.IGNORECASE)


def job_age_label(window_days: int) -> str | None:
    """Narrowest Job Age filter option that still covers the window."""
    for max_days, label in JOB_AGE_OPTIONS:
        if window_days <= max_days:
            return label
    return None


class WorkforceAustraliaClient:
    """One Chromium page driving the Workforce Australia search SPA.

    The page is stateful; callers must not issue concurrent queries on
    the same client.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize with settings; the browser starts on navigate_to_search()."""
        self.settings = settings
        self._playwright: Any = None
        self._browser: Any = None
        self._page: Any = None
        self._job_age_label: str | None = None

    async def __aenter__(self) -> WorkforceAustraliaClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def _navigation_ms(self) -> float:
        return self.settings.navigation_timeout_seconds * 1000

    @property
    def _action_ms(self) -> float:
        return self.settings.action_timeout_seconds * 1000

    async def navigate_to_search(self) -> None:
        """Launch the browser and open the search page."""
        url = self.settings.search_url
        try:
            if self._page is None:
                self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self.settings.headless,
                    args=["--no-sandbox"],
                )
                self._page = await self._browser.new_page(viewport={"width": 1280, "height": 900})
                self._page.set_default_timeout(self._action_ms)
                self._page.set_default_navigation_timeout(self._navigation_ms)
            await self._page.goto(url, wait_until="load")
        except PlaywrightError as e:
            msg = f"Cannot open job search at {url}: {e}"
            raise SourceUnavailable(msg) from e
        logger.info("search_page_opened", url=url)

    async def apply_recency_filter(self, window_days: int) -> bool:
        """Select the Job Age filter; returns False when it cannot be applied."""
        label = job_age_label(window_days)
        if label is None:
            logger.info("recency_filter_unavailable", window_days=window_days)
            return False
        try:
            await self._select_job_age(label)
        except PlaywrightError as e:
            logger.warning("recency_filter_failed", label=label, error=str(e))
            return False
        self._job_age_label = label
        logger.info("recency_filter_applied", label=label)
        return True

    async def search(self, keyword_query: str, location_query: str) -> None:
        """Run a keyword + location search from a fresh search page."""
        page = self._require_page()
        try:
            await page.goto(self.settings.search_url, wait_until="load")
            await page.locator(self.settings.keyword_selector).fill(keyword_query)
            await page.locator(self.settings.location_selector).fill(location_query)
            await page.keyboard.press("Enter")
            await page.wait_for_load_state("networkidle", timeout=self._navigation_ms)
            if self._job_age_label is not None:
                await self._reapply_job_age()
            await self._settle()
        except PlaywrightError as e:
            msg = f"Search failed for {location_query!r}: {e}"
            raise QueryFailure(msg) from e

    async def list_result_items(self) -> list[ResultItem]:
        """Read every result card on the current page."""
        page = self._require_page()
        try:
            cards = await page.locator(self.settings.job_card_selector).all()
            items: list[ResultItem] = []
            for card in cards:
                items.append(
                    ResultItem(
                        text=await self._card_text(card),
                        posted_date=await self._card_posted_date(card),
                        posting_id=await self._card_link(card),
                    )
                )
            return items
        except PlaywrightError as e:
            msg = f"Reading result cards failed: {e}"
            raise QueryFailure(msg) from e

    async def has_next_page(self) -> bool:
        """True when an enabled Next button is present."""
        page = self._require_page()
        button = page.get_by_role("button", name=_NEXT_BUTTON)
        try:
            if await button.count() == 0:
                return False
            return bool(await button.first.is_enabled())
        except PlaywrightError:
            return False

    async def go_to_next_page(self) -> None:
        """Click Next and wait for the new page to settle."""
        page = self._require_page()
        try:
            await page.get_by_role("button", name=_NEXT_BUTTON).first.click()
            await page.wait_for_load_state("networkidle", timeout=self._navigation_ms)
            await self._settle()
        except PlaywrightError as e:
            msg = f"Next page failed: {e}"
            raise QueryFailure(msg) from e

    async def close(self) -> None:
        """Close the browser and stop Playwright."""
        browser, playwright = self._browser, self._playwright
        self._page = self._browser = self._playwright = None
        try:
            if browser is not None:
                await browser.close()
        finally:
            if playwright is not None:
                await playwright.stop()
                logger.debug("browser_closed")

    def _require_page(self) -> Any:
        if self._page is None:
            msg = "Search page is not open; call navigate_to_search() first"
            raise QueryFailure(msg)
        return self._page

    async def _settle(self) -> None:
        """Fixed wait for asynchronous rendering after the network goes idle."""
        await self._require_page().wait_for_timeout(self.settings.settle_delay_seconds * 1000)

    async def _select_job_age(self, label: str) -> None:
        page = self._require_page()
        await page.get_by_text("Job Age").click(timeout=self._action_ms)
        await page.get_by_role("option", name=re.compile(re.escape(label), re.IGNORECASE)).click(
            timeout=self._action_ms
        )
        await page.wait_for_load_state("networkidle", timeout=self._navigation_ms)

    async def _reapply_job_age(self) -> None:
        """Re-select the Job Age filter after a new search; items are still classified."""
        try:
            await self._select_job_age(self._job_age_label or "")
        except PlaywrightError as e:
            logger.debug("recency_filter_reapply_failed", error=str(e))

    @staticmethod
    async def _card_text(card: Any) -> str:
        try:
            return str(await card.inner_text())
        except PlaywrightError:
            return ""

    @staticmethod
    async def _card_posted_date(card: Any) -> date | None:
        """Structured date from a <time datetime=...> element, when present."""
        stamp = card.locator("time[datetime]")
        if await stamp.count() == 0:
            return None
        value = await stamp.first.get_attribute("datetime")
        if not value:
            return None
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None

    @staticmethod
    async def _card_link(card: Any) -> str | None:
        link = card.locator("a[href]")
        if await link.count() == 0:
            return None
        href = await link.first.get_attribute("href")
        return str(href) if href else None
