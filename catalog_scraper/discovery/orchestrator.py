"""
Discovery Orchestrator

Finds product URLs for a manufacturer site, cheapest strategy first:
sitemaps, then AI navigation (homepage -> catalogue -> paginated listing).
"""

import logging
from typing import Callable, List, Optional

from ..ai.page_analyzer import PageAnalyzer
from ..common.constants import MAX_AI_PAGINATION_PAGES, MAX_DISCOVERED_URLS, SITEMAP_TRUST_THRESHOLD
from ..common.deadline import Deadline
from ..common.progress import NULL_REPORTER, ProgressReporter
from ..common.text_utils import unique
from ..models import DiscoveryMethod, DiscoveryResult
from .sitemap_prober import SitemapProber

logger = logging.getLogger(__name__)

HOMEPAGE_GOAL = "Find the products/catalogue section of this manufacturer website"
CATALOGUE_GOAL = "Extract all product page URLs from this product listing or catalogue page"
LISTING_PAGE_GOAL = "Extract all product page URLs from this product listing page"

PageFetcher = Callable[[str], Optional[str]]


class DiscoveryOrchestrator:
    """
    Composes the sitemap prober and the AI page classifier.

    Usage:
        orchestrator = DiscoveryOrchestrator(prober, analyzer, fetch_page)
        result = orchestrator.discover("https://maker.example", "Maker Ltd")
    """

    def __init__(
        self,
        prober: SitemapProber,
        analyzer: PageAnalyzer,
        fetch_page: PageFetcher,
        reporter: ProgressReporter = NULL_REPORTER,
        deadline: Optional[Deadline] = None,
    ):
        self.prober = prober
        self.analyzer = analyzer
        self.fetch_page = fetch_page
        self.reporter = reporter
        self.deadline = deadline or Deadline.unbounded()

    def discover(self, website_url: str, manufacturer_name: str) -> DiscoveryResult:
        """
        Discover product URLs for a site.

        Sitemap results of SITEMAP_TRUST_THRESHOLD or more URLs are returned
        as-is without invoking the AI.
        """
        self.reporter.emit("Checking sitemap", website_url)
        sitemap_urls = self.prober.discover(website_url)

        if len(sitemap_urls) >= SITEMAP_TRUST_THRESHOLD:
            self.reporter.emit("Sitemap found", f"{len(sitemap_urls)} product URLs")
            return DiscoveryResult(product_urls=sitemap_urls, method=DiscoveryMethod.SITEMAP)

        self.reporter.emit("AI navigation", "Analyzing homepage")
        found: List[str] = list(sitemap_urls)

        homepage_html = self.fetch_page(website_url)
        if not homepage_html:
            logger.warning("Could not fetch homepage %s", website_url)
            method = DiscoveryMethod.SITEMAP if sitemap_urls else DiscoveryMethod.AI_NAVIGATION
            return DiscoveryResult(product_urls=found, method=method)

        home = self.analyzer.classify(homepage_html, website_url, manufacturer_name, HOMEPAGE_GOAL)

        if home.page_type == "navigation" and home.catalogue_link:
            found.extend(self._walk_catalogue(home.catalogue_link, manufacturer_name))

        # Homepage product links count whatever the page type
        found.extend(home.product_urls)

        product_urls = unique(found)[:MAX_DISCOVERED_URLS]
        method = DiscoveryMethod.BOTH if sitemap_urls else DiscoveryMethod.AI_NAVIGATION
        logger.info("Discovered %d product URLs for %s (%s)", len(product_urls), website_url, method.value)
        return DiscoveryResult(product_urls=product_urls, method=method)

    def _walk_catalogue(self, catalogue_url: str, manufacturer_name: str) -> List[str]:
        """Classify the catalogue page and follow its next-page links."""
        self.reporter.emit("AI navigation", f"Following catalogue: {catalogue_url}")
        html = self.fetch_page(catalogue_url)
        if not html:
            return []

        analysis = self.analyzer.classify(html, catalogue_url, manufacturer_name, CATALOGUE_GOAL)
        urls = list(analysis.product_urls)

        next_url = analysis.next_page_url
        page_count = 0
        while next_url and page_count < MAX_AI_PAGINATION_PAGES:
            if self.deadline.expired():
                logger.warning("Time budget exhausted during catalogue pagination")
                break
            page_count += 1
            self.reporter.emit("AI navigation", f"Page {page_count + 1}: {next_url}")

            html = self.fetch_page(next_url)
            if not html:
                break

            analysis = self.analyzer.classify(html, next_url, manufacturer_name, LISTING_PAGE_GOAL)
            urls.extend(analysis.product_urls)
            next_url = analysis.next_page_url

        return urls
