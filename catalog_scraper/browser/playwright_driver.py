"""
Headless Browser Scraper

Selector-driven scraping for JavaScript-rendered sites:

- scrape_products: listing page -> (name, link) pairs -> detail pages
- scrape_regulation_sections: heading-delimited sections of one document

The browser is always closed, whatever happens during the run.
"""

import logging
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from ..common.deadline import Deadline
from ..common.progress import NULL_REPORTER, ProgressReporter
from ..models import BrowserScraperConfig, PaginationType, RegulationScraperConfig, ScrapedProduct, ScrapedSection

logger = logging.getLogger(__name__)

NAVIGATION_TIMEOUT_MS = 30_000

# Collects text of following siblings until the next element matching the heading selector
SECTION_TEXT_SCRIPT = """(node, headingSelector) => {
    const texts = [];
    let sibling = node.nextElementSibling;
    while (sibling && !sibling.matches(headingSelector)) {
        const text = (sibling.textContent || "").trim();
        if (text) texts.push(text);
        sibling = sibling.nextElementSibling;
    }
    return texts.join("\\n");
}"""


class BrowserScraper:
    """
    Playwright-backed scraper for sites that need JavaScript rendering.

    Usage:
        scraper = BrowserScraper()
        products = scraper.scrape_products(config)
    """

    def __init__(
        self,
        reporter: ProgressReporter = NULL_REPORTER,
        deadline: Optional[Deadline] = None,
        headless: bool = True,
        playwright_factory=sync_playwright,
    ):
        self.reporter = reporter
        self.deadline = deadline or Deadline.unbounded()
        self.headless = headless
        self._playwright_factory = playwright_factory

    def scrape_products(self, config: BrowserScraperConfig) -> List[ScrapedProduct]:
        products: List[ScrapedProduct] = []
        pagination = config.pagination
        max_pages = pagination.max_pages

        with self._playwright_factory() as pw:
            browser = pw.chromium.launch(headless=self.headless)
            try:
                listing = browser.new_page()
                detail = browser.new_page()
                try:
                    listing.goto(config.product_list_url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
                except PlaywrightError as e:
                    logger.warning("Listing page %s failed to load: %s", config.product_list_url, e)
                    return products

                current_page = 1
                while True:
                    for name, url in self._listing_entries(listing, config):
                        if self.deadline.expired():
                            logger.warning("Time budget exhausted - stopping with %d products", len(products))
                            return products
                        try:
                            products.append(self._scrape_detail(detail, url, name, config))
                        except (PlaywrightError, ValueError) as e:
                            logger.warning("Failed to scrape %s: %s", url, e)

                    self.reporter.emit(
                        "Browser: scraping listing", current=current_page, total=max_pages, found=len(products)
                    )

                    if current_page >= max_pages or not self._next_page(listing, config):
                        break
                    current_page += 1
            finally:
                browser.close()

        logger.info("Browser scrape found %d products", len(products))
        return products

    def _listing_entries(self, page, config: BrowserScraperConfig) -> List[Tuple[str, str]]:
        """(name, absolute URL) for every listing container with a link."""
        entries = []
        for container in page.query_selector_all(config.product_list_selector):
            name_el = container.query_selector(config.product_name_selector)
            link_el = container.query_selector(config.product_link_selector)
            href = link_el.get_attribute("href") if link_el else None
            if not href:
                continue
            name = (name_el.text_content() or "").strip() if name_el else ""
            entries.append((name, urljoin(page.url, href)))
        return entries

    def _next_page(self, page, config: BrowserScraperConfig) -> bool:
        pagination = config.pagination
        if pagination.type is not PaginationType.NEXT_BUTTON or not pagination.selector:
            return False
        if self.deadline.expired():
            logger.warning("Time budget exhausted before next listing page")
            return False

        next_button = page.query_selector(pagination.selector)
        if next_button is None:
            return False
        try:
            next_button.click()
            page.wait_for_load_state("networkidle", timeout=NAVIGATION_TIMEOUT_MS)
        except PlaywrightError as e:
            logger.warning("Next listing page failed to load: %s", e)
            return False
        return True

    def _scrape_detail(self, page, url: str, name: str, config: BrowserScraperConfig) -> ScrapedProduct:
        page.goto(url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
        selectors = config.detail

        specifications: Dict[str, str] = {}
        if selectors.specs:
            for row in page.query_selector_all(selectors.specs):
                cells = row.query_selector_all("td, th")
                if len(cells) < 2:
                    continue
                key = (cells[0].text_content() or "").strip()
                value = (cells[1].text_content() or "").strip()
                if key and value:
                    specifications[key] = value

        pdf_urls = []
        if selectors.pdf_link:
            for link in page.query_selector_all(selectors.pdf_link):
                href = link.get_attribute("href")
                if href:
                    pdf_urls.append(urljoin(url, href))

        return ScrapedProduct(
            product_name=name,
            description=_text_of(page, selectors.description),
            specifications=specifications,
            price_text=_text_of(page, selectors.price),
            pdf_urls=pdf_urls,
            source_url=url,
        )

    def scrape_regulation_sections(self, config: RegulationScraperConfig) -> List[ScrapedSection]:
        sections: List[ScrapedSection] = []

        with self._playwright_factory() as pw:
            browser = pw.chromium.launch(headless=self.headless)
            try:
                page = browser.new_page()
                try:
                    page.goto(config.source_url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
                except PlaywrightError as e:
                    logger.warning("Regulation page %s failed to load: %s", config.source_url, e)
                    return sections

                headings = page.query_selector_all(config.section_selector)
                for index, heading in enumerate(headings, start=1):
                    title = (heading.text_content() or "").strip()
                    ref = None
                    if config.section_ref_selector:
                        ref_el = heading.query_selector(config.section_ref_selector)
                        ref = (ref_el.text_content() or "").strip() if ref_el else None
                    try:
                        content = heading.evaluate(SECTION_TEXT_SCRIPT, config.section_selector) or ""
                    except PlaywrightError as e:
                        logger.debug("Section text unavailable for %r: %s", title, e)
                        content = ""

                    if title or content:
                        sections.append(ScrapedSection(
                            section_text=content or title,
                            section_ref=ref or None,
                            section_title=title or None,
                        ))
                    if index % 25 == 0:
                        self.reporter.emit(
                            "Browser: reading sections", current=index, total=len(headings), found=len(sections)
                        )
            finally:
                browser.close()

        logger.info("Extracted %d sections from %s", len(sections), config.source_url)
        return sections


def _text_of(page, selector: Optional[str]) -> Optional[str]:
    """Trimmed text of the first element matching selector, or None."""
    if not selector:
        return None
    element = page.query_selector(selector)
    if element is None:
        return None
    return (element.text_content() or "").strip() or None
