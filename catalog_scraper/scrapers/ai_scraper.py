"""
AI Catalogue Scraper

Scrapes a manufacturer site with no hand-written configuration:

1. Discover product URLs (sitemaps first, AI navigation as fallback)
2. Fetch each product page (headless browser, or plain HTTP)
3. Extract one product per page through the page analyzer
4. Deduplicate

Extraction calls are paced by the configured delay and grouped in batches;
the run deadline is checked before every batch of fetches and extractions.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Sequence

import requests

from ..ai.page_analyzer import PageAnalyzer
from ..browser.page_fetcher import FetchResult, fetch_pages
from ..common.batching import chunked, run_in_batches
from ..common.constants import DEFAULT_HTML_HEADERS, MAX_RUNTIME_SECONDS
from ..common.deadline import Deadline
from ..common.http import create_session, safe_fetch
from ..common.progress import NULL_REPORTER, ProgressReporter
from ..discovery.orchestrator import DiscoveryOrchestrator
from ..discovery.sitemap_prober import SitemapProber
from ..extraction.dedup import dedup_products
from ..models import AiScraperConfig, ScrapedProduct

logger = logging.getLogger(__name__)

BROWSER_FETCH_BATCH_SIZE = 50
PAGE_TIMEOUT = 10

BrowserFetcher = Callable[..., List[FetchResult]]


class AiCatalogScraper:
    """
    Discovery + AI extraction pipeline for unconfigured manufacturer sites.

    Usage:
        analyzer = PageAnalyzer(ContentUnderstandingClient.from_env())
        with AiCatalogScraper(analyzer) as scraper:
            products = scraper.scrape(AiScraperConfig("https://maker.example", "Maker Ltd"))
    """

    def __init__(
        self,
        analyzer: PageAnalyzer,
        session: Optional[requests.Session] = None,
        reporter: ProgressReporter = NULL_REPORTER,
        deadline: Optional[Deadline] = None,
        max_runtime: float = MAX_RUNTIME_SECONDS,
        browser_fetch: BrowserFetcher = fetch_pages,
    ):
        self.analyzer = analyzer
        self._owns_session = session is None
        # Bot identity for sitemap discovery; page fetches add browser headers per request
        self.session = session or create_session()
        self.reporter = reporter
        self._run_deadline = deadline
        self.deadline = deadline
        self.max_runtime = max_runtime
        self.browser_fetch = browser_fetch

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        if self._owns_session:
            self.session.close()

    def fetch_page(self, url: str) -> Optional[str]:
        return safe_fetch(self.session, url, timeout=PAGE_TIMEOUT, headers=DEFAULT_HTML_HEADERS)

    def scrape(self, config: AiScraperConfig) -> List[ScrapedProduct]:
        self.deadline = self._run_deadline or Deadline(self.max_runtime)

        self.reporter.emit("AI: Discovering product URLs")
        orchestrator = DiscoveryOrchestrator(
            SitemapProber(self.session),
            self.analyzer,
            self.fetch_page,
            reporter=self.reporter,
            deadline=self.deadline,
        )
        discovery = orchestrator.discover(config.website_url, config.manufacturer_name)

        if not discovery.product_urls:
            self.reporter.emit("AI: No product URLs discovered")
            logger.warning("No product URLs discovered for %s", config.website_url)
            return []

        self.reporter.emit(
            f"AI: Found {len(discovery.product_urls)} product URLs ({discovery.method.value})",
            found=len(discovery.product_urls),
        )

        pages = self.fetch_product_pages(discovery.product_urls, config)
        products = self.extract_products(pages, config)
        return dedup_products(products)

    def fetch_product_pages(self, urls: Sequence[str], config: AiScraperConfig) -> List[FetchResult]:
        """Fetch every URL; only pages with HTML are returned."""
        if config.use_browser:
            results: List[FetchResult] = []
            batches = list(chunked(list(urls), BROWSER_FETCH_BATCH_SIZE))
            for index, batch in enumerate(batches, start=1):
                if self.deadline.expired():
                    logger.warning("Time budget exhausted before page batch %d/%d", index, len(batches))
                    break
                self.reporter.emit(
                    f"AI: Fetching pages (batch {index}/{len(batches)})",
                    current=len(results), total=len(urls),
                )
                results.extend(self.browser_fetch(batch, deadline=self.deadline))
        else:
            def report(processed, batch_results):
                self.reporter.emit("AI: Fetching pages", current=processed, total=len(urls))

            results = [
                FetchResult(url=r.item, html=r.value if r.ok else None, error=None if r.ok else str(r.error))
                for r in run_in_batches(
                    list(urls),
                    self.fetch_page,
                    batch_size=config.batch_size,
                    deadline=self.deadline,
                    on_batch_done=report,
                )
            ]

        pages = [r for r in results if r.ok]
        logger.info("Fetched %d/%d product pages", len(pages), len(urls))
        return pages

    def extract_products(self, pages: Sequence[FetchResult], config: AiScraperConfig) -> List[ScrapedProduct]:
        """Run AI extraction over fetched pages, one paced call at a time."""
        products: List[ScrapedProduct] = []
        delay = config.delay_ms / 1000.0
        done = 0

        for batch in chunked(list(pages), config.batch_size):
            if self.deadline.expired():
                logger.warning("Time budget exhausted - extracted %d/%d pages", done, len(pages))
                break

            for page in batch:
                self.reporter.emit(
                    f"AI: Extracting products ({done + 1}/{len(pages)})",
                    current=done, total=len(pages), found=len(products),
                )
                extraction = self.analyzer.extract_product(page.html, page.url, config.manufacturer_name)
                if extraction.product is not None:
                    products.append(extraction.product)
                done += 1

                if delay > 0 and done < len(pages):
                    time.sleep(delay)

        logger.info("AI extracted %d products from %d pages", len(products), done)
        return products
