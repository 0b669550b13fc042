"""
Generic Configurable Scraper

Runs one declarative scraper configuration end to end without a browser.
Listing pages are fetched first (with optional {page} pagination), then
products are produced by the configured detail method:

    html         - regex extraction from each product detail page
    json-ld      - <script type="application/ld+json"> from each detail page
    listing-only - names and document links read straight off listing pages
    sitemap      - products derived from sitemap XML URL paths

A config carrying an `api` block skips all of that and reads a JSON API.

Detail pages are fetched in concurrent batches with a politeness delay
between batches. The run-wide deadline is checked before each listing
page, pagination hop and batch; once it passes, whatever has been scraped
so far is returned.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from ..common.batching import run_in_batches
from ..common.constants import DEFAULT_HTML_HEADERS, MAX_RUNTIME_SECONDS
from ..common.deadline import Deadline
from ..common.http import create_session, safe_fetch, safe_fetch_json
from ..common.progress import NULL_REPORTER, ProgressReporter
from ..common.text_utils import resolve_url, strip_html, unique
from ..extraction.dedup import dedup_products
from ..extraction.parsers import StructuredDataParser
from ..extraction.patterns import all_matches, extract_spec_table, first_match
from ..extraction.sitemap_products import products_from_sitemap_urls
from ..models import DetailMethod, GenericScraperConfig, ScrapedProduct

logger = logging.getLogger(__name__)

DOCUMENT_LINK_PATTERN = re.compile(r"\.pdf|media-canonical", re.IGNORECASE)


class GenericScraper:
    """
    Scraper driven entirely by a GenericScraperConfig.

    Usage:
        config = load_scraper_config("acme.yaml")
        with GenericScraper() as scraper:
            products = scraper.scrape(config)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        deadline: Optional[Deadline] = None,
        reporter: ProgressReporter = NULL_REPORTER,
        max_runtime: float = MAX_RUNTIME_SECONDS,
    ):
        self._owns_session = session is None
        self.session = session or create_session()
        self._run_deadline = deadline
        self.deadline = deadline
        self.reporter = reporter
        self.max_runtime = max_runtime

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        if self._owns_session:
            self.session.close()

    def scrape(self, config: GenericScraperConfig) -> List[ScrapedProduct]:
        """Run the configuration; never raises for fetch failures or timeouts."""
        self.deadline = self._run_deadline or Deadline(self.max_runtime)

        if config.api is not None:
            return self.fetch_from_api(config)
        return self.discover_and_scrape(config)

    # ── Discover and scrape ──────────────────────────────────────────────────

    def discover_and_scrape(self, config: GenericScraperConfig) -> List[ScrapedProduct]:
        headers = {**DEFAULT_HTML_HEADERS, **config.request.headers}
        listing_pages = self.fetch_listing_pages(config, headers)
        logger.info("Fetched %d listing pages", len(listing_pages))
        self.reporter.emit("Listing pages fetched", current=len(listing_pages))

        handlers: Dict[DetailMethod, Callable[[GenericScraperConfig, List[str], Dict[str, str]], List[ScrapedProduct]]] = {
            DetailMethod.LISTING_ONLY: self._scrape_listing_only,
            DetailMethod.SITEMAP: self._scrape_sitemap,
            DetailMethod.HTML: self._scrape_detail_pages,
            DetailMethod.JSON_LD: self._scrape_detail_pages,
        }
        products = handlers[config.detail.method](config, listing_pages, headers)
        return dedup_products(products)

    def fetch_listing_pages(self, config: GenericScraperConfig, headers: Dict[str, str]) -> List[str]:
        """Fetch configured listing URLs, then pagination pages 2..max_pages."""
        timeout = config.request.timeout_seconds
        delay = config.request.delay_seconds
        pages: List[str] = []

        for url in config.listing.urls:
            if self.deadline.expired():
                logger.warning("Time budget exhausted before listing %s", url)
                return pages
            html = safe_fetch(self.session, url, timeout=timeout, headers=headers)
            if html:
                pages.append(html)
            if delay > 0:
                time.sleep(delay)

        template = config.listing.pagination
        if template:
            for page in range(2, config.listing.max_pages + 1):
                if self.deadline.expired():
                    logger.warning("Time budget exhausted at listing page %d", page)
                    break
                html = safe_fetch(self.session, template.replace("{page}", str(page)), timeout=timeout, headers=headers)
                if not html:
                    # first missing page ends pagination
                    break
                pages.append(html)
                if delay > 0:
                    time.sleep(delay)

        return pages

    def _scrape_listing_only(self, config, listing_pages, headers) -> List[ScrapedProduct]:
        products = []
        for html in listing_pages:
            products.extend(extract_from_listing_html(html, config))
        logger.info("Extracted %d products from listings", len(products))
        return products

    def _scrape_sitemap(self, config, listing_pages, headers) -> List[ScrapedProduct]:
        urls = []
        for xml in listing_pages:
            urls.extend(resolve_url(m, config.base_url) for m in all_matches(xml, config.listing.product_link_pattern))
        urls = unique(urls)
        logger.info("Found %d URLs from sitemap", len(urls))

        products = products_from_sitemap_urls(urls)
        logger.info("Extracted %d products from sitemap URLs", len(products))
        return products

    def _scrape_detail_pages(self, config, listing_pages, headers) -> List[ScrapedProduct]:
        urls = []
        for html in listing_pages:
            urls.extend(resolve_url(m, config.base_url) for m in all_matches(html, config.listing.product_link_pattern))
        urls = unique(urls)

        logger.info("Found %d product URLs", len(urls))
        if not urls:
            return []

        products: List[ScrapedProduct] = []

        def collect(processed, batch_results):
            products.extend(r.value for r in batch_results if r.ok and r.value is not None)
            self.reporter.emit("Scraping detail pages", current=processed, total=len(urls), found=len(products))

        run_in_batches(
            urls,
            lambda url: self.scrape_detail_page(url, config, headers),
            batch_size=config.request.batch_size,
            delay_seconds=config.request.delay_seconds,
            deadline=self.deadline,
            on_batch_done=collect,
        )

        logger.info("Scraped %d products from %d detail pages", len(products), len(urls))
        return products

    def scrape_detail_page(
        self,
        url: str,
        config: GenericScraperConfig,
        headers: Dict[str, str],
    ) -> Optional[ScrapedProduct]:
        """
        Fetch and extract one detail page.

        Returns:
            Product, or None when the fetch fails or no product name is found
        """
        html = safe_fetch(self.session, url, timeout=config.request.timeout_seconds, headers=headers)
        if not html:
            return None
        return extract_detail_page(html, url, config)

    # ── API mode ─────────────────────────────────────────────────────────────

    def fetch_from_api(self, config: GenericScraperConfig) -> List[ScrapedProduct]:
        """Read products from a JSON API in a single request."""
        api = config.api
        headers = {**DEFAULT_HTML_HEADERS, **api.headers, **config.request.headers}

        body = None
        if api.method == "POST" and api.body_template:
            body = api.body_template
            headers["Content-Type"] = "application/json"

        data = safe_fetch_json(
            self.session,
            api.url,
            timeout=config.request.timeout_seconds,
            method=api.method,
            headers=headers,
            body=body,
        )
        if data is None:
            return []

        items = navigate_path(data, api.results_path)
        if not isinstance(items, list):
            logger.warning("API results at '%s' is not a list", api.results_path or "")
            return []

        products = []
        for item in items:
            product = map_api_item(item, config)
            if product is not None:
                products.append(product)

        logger.info("Mapped %d products from %d API items", len(products), len(items))
        # Without a URL field every item shares base_url, so only dedup real URLs
        return dedup_products(products) if api.url_field else products


# ── Extraction helpers ─────────────────────────────────────────────────────────

def extract_from_listing_html(html: str, config: GenericScraperConfig) -> List[ScrapedProduct]:
    """
    Pair listing names with link/PDF matches by position.

    With no name matches, every link becomes a product named after its slug.
    """
    detail = config.detail
    names = all_matches(html, detail.name_pattern)
    links = all_matches(html, config.listing.product_link_pattern)
    pdf_links = all_matches(html, detail.pdf_pattern) if detail.pdf_pattern is not None else links

    products = []
    count = min(len(names), len(pdf_links) or len(links))
    for i in range(count):
        raw_url = pdf_links[i] if i < len(pdf_links) else links[i]
        url = resolve_url(raw_url, config.base_url)
        products.append(ScrapedProduct(
            product_name=strip_html(names[i]) or f"Document {i + 1}",
            specifications={},
            pdf_urls=[url] if DOCUMENT_LINK_PATTERN.search(raw_url) else [],
            source_url=url,
        ))

    if count == 0 and links:
        for link in links:
            url = resolve_url(link, config.base_url)
            products.append(ScrapedProduct(
                product_name=name_from_link(link),
                specifications={},
                pdf_urls=[url],
                source_url=url,
            ))

    return products


def name_from_link(link: str) -> str:
    """'/docs/fire_stop-guide.pdf' -> 'fire stop guide'."""
    slug = link.rstrip("/").split("/")[-1]
    name = re.sub(r"\.\w+$", "", re.sub(r"[-_]", " ", slug)).strip()
    return name or "Unknown"


def extract_detail_page(html: str, url: str, config: GenericScraperConfig) -> Optional[ScrapedProduct]:
    """Apply the JSON-LD and/or regex detail patterns to one page."""
    detail = config.detail

    if detail.method is DetailMethod.JSON_LD:
        parser = StructuredDataParser(detail.json_ld_type)
        data = parser.parse(html)
        product = parser.to_product(data, url) if data else None
        if product is not None:
            # structured data rarely lists documents
            product.pdf_urls = [resolve_url(u, config.base_url) for u in all_matches(html, detail.pdf_pattern)]
            return product
        # no JSON-LD: fall through to the regex patterns

    name = first_match(html, detail.name_pattern)
    if not name:
        logger.debug("No product name on %s - skipped", url)
        return None

    image_urls = [resolve_url(u, config.base_url) for u in all_matches(html, detail.image_pattern)]
    return ScrapedProduct(
        product_name=name,
        description=first_match(html, detail.description_pattern),
        specifications=extract_spec_table(html, detail.spec_table_pattern),
        pdf_urls=[resolve_url(u, config.base_url) for u in all_matches(html, detail.pdf_pattern)],
        image_urls=image_urls or None,
        source_url=url,
    )


def navigate_path(data: Any, path: Optional[str]) -> Any:
    """Follow a dot path such as 'data.results' (numeric keys index lists)."""
    if not path:
        return data
    for key in path.split("."):
        if isinstance(data, dict):
            data = data.get(key)
        elif isinstance(data, list) and key.isdigit() and int(key) < len(data):
            data = data[int(key)]
        else:
            return None
    return data


def map_api_item(item: Any, config: GenericScraperConfig) -> Optional[ScrapedProduct]:
    """Map one API result through the configured field names."""
    if not isinstance(item, dict):
        return None
    api = config.api

    name = item.get(api.name_field) if api.name_field else (item.get("name") or item.get("title"))
    if name is None or not str(name).strip():
        return None

    code = str(item.get(api.code_field) or "") if api.code_field else ""
    description = strip_html(str(item.get(api.description_field) or "")) if api.description_field else ""
    if api.url_field:
        source_url = resolve_url(str(item.get(api.url_field) or ""), config.base_url)
    else:
        source_url = config.base_url

    return ScrapedProduct(
        product_name=str(name).strip(),
        product_code=code or None,
        description=description or None,
        specifications={},
        pdf_urls=[],
        source_url=source_url,
    )
