"""
Shopify Catalogue Scraper

Reads a Shopify store's public catalogue from /products.json and enriches
each product in three phases, each of which can fail without aborting the
next:

1. Catalogue pages (250 products per page, up to 10 pages) mapped to products
2. Each product's live page scanned for PDF document links
3. Installation / application guide pages (/pages/install{prefix},
   /pages/application{prefix}) attached as specifications, time permitting
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from typing import Any, Dict, List, Optional

import requests

from ..common.batching import run_in_batches
from ..common.constants import MAX_RUNTIME_SECONDS
from ..common.deadline import Deadline
from ..common.http import create_session, safe_fetch, safe_fetch_json
from ..common.progress import NULL_REPORTER, ProgressReporter
from ..common.text_utils import strip_html
from ..models import ScrapedProduct, ShopifyConfig
from .documents import find_document_links

logger = logging.getLogger(__name__)

QUOTE_ON_REQUEST = "Quote on request"
DEFAULT_VARIANT_TITLE = "Default Title"
ENRICHMENT_PAGES = {
    "install": "Installation Details",
    "application": "Application Guide",
}
MAX_ENRICHMENT_CHARS = 2000
MIN_PAGE_BODY_CHARS = 20

EN_STANDARD_PATTERN = re.compile(r"\b(?:BS\s+)?EN\s+\d[\d\-.:]+", re.IGNORECASE)
FIRE_RATING_PATTERN = re.compile(r"\bEI\s*\d{2,3}", re.IGNORECASE)
BS_STANDARD_PATTERN = re.compile(r"\bBS\s+\d[\d\-.:]+", re.IGNORECASE)


class ShopifyCatalogScraper:
    """
    Scraper for Shopify storefront catalogues.

    Usage:
        scraper = ShopifyCatalogScraper(reporter=ProgressReporter(callback=print))
        products = scraper.scrape(ShopifyConfig(store_url="https://shop.example"))
    """

    CATALOGUE_TIMEOUT = 15
    PAGE_TIMEOUT = 10
    ENRICHMENT_TIMEOUT = 5

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        deadline: Optional[Deadline] = None,
        reporter: ProgressReporter = NULL_REPORTER,
        max_runtime: float = MAX_RUNTIME_SECONDS,
    ):
        self._owns_session = session is None
        self.session = session or create_session({"Accept": "application/json"})
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

    def scrape(self, config: ShopifyConfig) -> List[ScrapedProduct]:
        """Run all three phases and return whatever was collected."""
        self.deadline = self._run_deadline or Deadline(self.max_runtime)

        products = self.fetch_catalogue(config)
        if not products:
            return products

        self.attach_document_links(products, config)

        remaining = self.deadline.remaining()
        if remaining >= config.min_enrichment_seconds:
            self.enrich_with_guide_pages(products, config)
        else:
            logger.info("Skipping guide page enrichment (%.1fs left)", remaining)
            self.reporter.emit("Shopify: skipped guide enrichment", f"{remaining:.1f}s left", found=len(products))

        return products

    # ── Phase 1: catalogue ───────────────────────────────────────────────────

    def fetch_catalogue(self, config: ShopifyConfig) -> List[ScrapedProduct]:
        """Page through /products.json until a short or empty page."""
        products: List[ScrapedProduct] = []

        for page in range(1, config.max_pages + 1):
            if self.deadline.expired():
                logger.warning("Time budget exhausted at catalogue page %d", page)
                break

            url = f"{config.store_url}/products.json?limit={config.page_size}&page={page}"
            data = safe_fetch_json(self.session, url, timeout=self.CATALOGUE_TIMEOUT)
            if data is None:
                logger.warning("Catalogue page %d unavailable - stopping with %d products", page, len(products))
                break

            raw_products = data.get("products") or [] if isinstance(data, dict) else []
            for raw in raw_products:
                mapped = map_shopify_product(raw, config.store_url)
                if mapped is not None:
                    products.append(mapped)

            self.reporter.emit(
                "Shopify: fetching catalogue", current=page, total=config.max_pages, found=len(products)
            )

            # A short page means the catalogue is exhausted
            if len(raw_products) < config.page_size:
                break

        logger.info("Mapped %d Shopify products from %s", len(products), config.store_url)
        return products

    # ── Phase 2: document links ──────────────────────────────────────────────

    def attach_document_links(self, products: List[ScrapedProduct], config: ShopifyConfig) -> None:
        """Scan each product page for absolute PDF links."""
        headers = {"Accept": "text/html,application/xhtml+xml"}

        def scan(product: ScrapedProduct) -> List[str]:
            html = safe_fetch(self.session, product.source_url, timeout=self.PAGE_TIMEOUT, headers=headers)
            return find_document_links(html or "")

        def collect(processed, batch_results):
            for result in batch_results:
                if result.ok and result.value:
                    result.item.pdf_urls = result.value
            with_docs = sum(1 for p in products if p.pdf_urls)
            self.reporter.emit(
                "Shopify: scanning product pages", current=processed, total=len(products), found=with_docs
            )

        results = run_in_batches(
            products,
            scan,
            batch_size=config.document_batch_size,
            deadline=self.deadline,
            on_batch_done=collect,
        )
        logger.info(
            "Scanned %d/%d product pages, %d with documents",
            len(results), len(products), sum(1 for p in products if p.pdf_urls),
        )

    # ── Phase 3: guide pages ─────────────────────────────────────────────────

    def enrich_with_guide_pages(self, products: List[ScrapedProduct], config: ShopifyConfig) -> None:
        """Attach install/application page text to every product sharing a code prefix."""
        by_prefix: Dict[str, List[ScrapedProduct]] = defaultdict(list)
        for product in products:
            if not product.product_code:
                continue
            prefix = derive_code_prefix(product.product_code)
            if len(prefix) >= 2:
                by_prefix[prefix].append(product)

        tasks = [(prefix, page_kind) for prefix in by_prefix for page_kind in ENRICHMENT_PAGES]
        if not tasks:
            return

        def fetch(task):
            prefix, page_kind = task
            return self.fetch_page_content(config.store_url, f"{page_kind}{prefix}")

        enriched = 0
        results = run_in_batches(
            tasks,
            fetch,
            batch_size=config.document_batch_size * 2,
            deadline=self.deadline,
        )
        for result in results:
            if not result.ok or not result.value:
                continue
            prefix, page_kind = result.item
            for product in by_prefix[prefix]:
                product.specifications[ENRICHMENT_PAGES[page_kind]] = result.value[:MAX_ENRICHMENT_CHARS]
                enriched += 1

        self.reporter.emit(
            "Shopify: guide enrichment", current=len(results), total=len(tasks), found=enriched
        )
        logger.info("Guide pages attached %d times across %d code prefixes", enriched, len(by_prefix))

    def fetch_page_content(self, store_url: str, page_handle: str) -> Optional[str]:
        """
        Fetch a Shopify page's body via its JSON endpoint.

        Returns:
            Plain text, or None if the page is missing or nearly empty
        """
        data = safe_fetch_json(
            self.session,
            f"{store_url}/pages/{page_handle}.json",
            timeout=self.ENRICHMENT_TIMEOUT,
            quiet=True,
        )
        if not isinstance(data, dict):
            return None
        page = data.get("page") or {}
        body = page.get("body_html") if isinstance(page, dict) else None
        if not body or len(body.strip()) < MIN_PAGE_BODY_CHARS:
            return None
        return strip_html(body)


def derive_code_prefix(sku: str) -> str:
    """
    Letters before the first digit, slash or hyphen, lower-cased.

    e.g. "QWR25/CE" -> "qwr", "PUTPAD-S" -> "putpad", "QSS310ML" -> "qss"
    """
    return re.sub(r"[\d/\-].*", "", sku, flags=re.DOTALL).lower().strip()


def extract_test_standards(html: str) -> List[str]:
    """Find test standard references (BS EN 1366-3, EN 13501-2, EI 120, BS 476) in a description."""
    if not html:
        return []
    text = strip_html(html)
    standards: List[str] = []

    for match in EN_STANDARD_PATTERN.findall(text):
        normalized = " ".join(match.split()).rstrip(".:-")
        if normalized not in standards:
            standards.append(normalized)

    for match in FIRE_RATING_PATTERN.findall(text):
        normalized = " ".join(match.split()).upper()
        if normalized not in standards:
            standards.append(normalized)

    for match in BS_STANDARD_PATTERN.findall(text):
        normalized = " ".join(match.split()).rstrip(".:-")
        # already captured as part of a BS EN reference
        if not any(normalized in s for s in standards):
            standards.append(normalized)

    return standards


def format_price(raw_price: Any) -> str:
    """'12.50' -> '£12.50'; zero or missing -> 'Quote on request'."""
    try:
        value = float(raw_price)
    except (TypeError, ValueError):
        return QUOTE_ON_REQUEST
    return f"£{raw_price}" if value > 0 else QUOTE_ON_REQUEST


def map_shopify_product(raw: Dict[str, Any], store_url: str) -> Optional[ScrapedProduct]:
    """Map one /products.json entry to a ScrapedProduct (None if untitled)."""
    if not isinstance(raw, dict):
        return None
    title = (raw.get("title") or "").strip()
    handle = raw.get("handle") or ""
    if not title:
        return None

    body_html = raw.get("body_html") or ""
    variants = [v for v in raw.get("variants") or [] if isinstance(v, dict)]
    tags = raw.get("tags") or []
    if isinstance(tags, str):
        tags = [t.strip() for t in tags.split(",") if t.strip()]

    primary_sku = next((v["sku"] for v in variants if v.get("sku")), None)

    specs: Dict[str, str] = {}
    if raw.get("product_type"):
        specs["Product Type"] = raw["product_type"]
    if tags:
        specs["Category"] = ", ".join(tags)

    standards = extract_test_standards(body_html)
    if standards:
        specs["Test Standards"] = ", ".join(standards)

    if len(variants) > 1:
        sizes = [v.get("title") for v in variants if v.get("title") and v.get("title") != DEFAULT_VARIANT_TITLE]
        if sizes:
            specs["Available Sizes"] = ", ".join(sizes)
        skus = [v["sku"] for v in variants if v.get("sku")]
        if skus:
            specs["SKUs"] = ", ".join(skus)

    specs["Variants"] = str(len(variants))
    specs["Vendor"] = raw.get("vendor") or "Unknown"

    images = [img.get("src") for img in raw.get("images") or [] if isinstance(img, dict) and img.get("src")]

    return ScrapedProduct(
        product_name=title,
        product_code=primary_sku or handle or None,
        description=strip_html(body_html),
        specifications=specs,
        price_text=format_price(variants[0].get("price") if variants else None),
        pdf_urls=[],
        image_urls=images,
        source_url=f"{store_url}/products/{handle}",
    )
