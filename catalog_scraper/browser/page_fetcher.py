"""
Browser Page Fetcher

Fetches rendered HTML for many URLs with one headless Chromium context.
Failures are reported per URL and never raised.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from ..common.batching import chunked
from ..common.constants import BROWSER_USER_AGENT
from ..common.deadline import Deadline

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1280, "height": 720}
DEFAULT_PAGE_TIMEOUT_MS = 30_000


@dataclass
class FetchResult:
    url: str
    html: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.html is not None


def fetch_pages(
    urls: Sequence[str],
    concurrency: int = 3,
    timeout_ms: int = DEFAULT_PAGE_TIMEOUT_MS,
    wait_for_network_idle: bool = True,
    deadline: Optional[Deadline] = None,
    on_progress: Optional[Callable[[int, int], None]] = None,
    playwright_factory=sync_playwright,
) -> List[FetchResult]:
    """
    Fetch rendered HTML for each URL.

    URLs are taken `concurrency` at a time, each group on fresh tabs that are
    closed before the next group. Once the deadline passes, remaining URLs
    are not fetched and get no result.

    Returns:
        One FetchResult per fetched URL, in input order
    """
    if not urls:
        return []

    wait_until = "networkidle" if wait_for_network_idle else "domcontentloaded"
    results: List[FetchResult] = []

    with playwright_factory() as pw:
        browser = pw.chromium.launch(headless=True)
        try:
            context = browser.new_context(user_agent=BROWSER_USER_AGENT, viewport=VIEWPORT)
            try:
                for batch in chunked(list(urls), concurrency):
                    if deadline is not None and deadline.expired():
                        logger.warning("Time budget exhausted - fetched %d/%d pages", len(results), len(urls))
                        break
                    for url in batch:
                        results.append(_fetch_one(context, url, wait_until, timeout_ms))
                    if on_progress is not None:
                        on_progress(len(results), len(urls))
            finally:
                context.close()
        finally:
            browser.close()

    fetched = sum(1 for r in results if r.ok)
    logger.info("Browser fetched %d/%d pages", fetched, len(urls))
    return results


def _fetch_one(context, url: str, wait_until: str, timeout_ms: int) -> FetchResult:
    page = context.new_page()
    try:
        page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        return FetchResult(url=url, html=page.content())
    except PlaywrightError as e:
        logger.warning("Browser fetch failed for %s: %s", url, e)
        return FetchResult(url=url, error=str(e))
    finally:
        page.close()
