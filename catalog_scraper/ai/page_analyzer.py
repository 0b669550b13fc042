"""
AI Page Classifier & Extractor

Delegates page understanding to the content-understanding service:
classifying a page and finding its product links, or extracting one
product record from a detail page. Missing or mistyped fields in a reply
are dropped, and any failure yields an empty result, never None.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..common.text_utils import resolve_url, unique
from ..extraction.sanitizer import sanitize_html
from ..models import ScrapedProduct
from .client import ContentUnderstandingClient

logger = logging.getLogger(__name__)

PAGE_TYPES = ("product_listing", "product_detail", "navigation", "other")

CLASSIFY_PROMPT = """You are analyzing one page of a building products manufacturer's website.

PAGE URL: {page_url}
MANUFACTURER: {manufacturer_name}
GOAL: {goal}

Analyze the HTML below and determine:
1. page_type: "product_listing" (several products linking to their own pages), "product_detail" (one product with specs or description), "navigation" (homepage or category page linking to product sections), or "other".
2. product_urls: every href that links to an individual product page, as ABSOLUTE URLs (resolve relative links against the page URL).
3. next_page_url: absolute URL of the next page if this listing is paginated, otherwise null.
4. catalogue_link: for navigation pages, the absolute URL of the product catalogue or listing, otherwise null.
5. section_urls: absolute URLs of resources, documentation or downloads sections, if any.
6. pdf_urls: absolute URLs of PDF documents linked from this page, if any.
7. confidence: 0-100, how confident you are in this classification.

HTML:
{html}

Return ONLY valid JSON:
{{
  "page_type": "product_listing",
  "product_urls": ["https://..."],
  "next_page_url": null,
  "catalogue_link": null,
  "section_urls": [],
  "pdf_urls": [],
  "confidence": 85
}}"""

EXTRACT_PROMPT = """You are a construction product data specialist. Extract structured product information from this web page.

MANUFACTURER: {manufacturer_name}
PAGE URL: {page_url}

Fields:
- product_name (required): the main product name or title
- product_code: SKU, part number or product reference if visible
- description: first 500 characters of the main product description
- specifications: key-value pairs from specification tables, feature lists or technical data (e.g. {{"Fire Rating": "EI 120", "Material": "Steel"}})
- price_text: the price if displayed (e.g. "£45.99 ex VAT")
- pdf_urls: absolute URLs of PDF downloads (datasheets, installation guides, certificates)
- image_urls: absolute URLs of product images (not icons, logos or decorative images)
- extraction_confidence: 0-100 confidence in the extraction

PAGE HTML:
{html}

RULES:
1. Only extract data clearly visible on the page. Never invent or guess values.
2. Specifications come from tables, definition lists or bullet lists.
3. PDF URLs usually end in .pdf or point at document download pages.
4. Ignore navigation images, social media icons and banners.
5. If this page is NOT a product page, return {{"product_name": null}}.
6. Resolve every URL to an absolute URL using the page URL.

Return ONLY valid JSON:
{{
  "product_name": "Product Name Here",
  "product_code": "SKU-123",
  "description": "Product description...",
  "specifications": {{"Fire Rating": "EI 60"}},
  "price_text": null,
  "pdf_urls": ["https://example.com/datasheet.pdf"],
  "image_urls": ["https://example.com/product.jpg"],
  "extraction_confidence": 85
}}"""


@dataclass
class PageAnalysis:
    """Classification of one page plus the links found on it."""
    page_type: str = "other"
    product_urls: List[str] = field(default_factory=list)
    next_page_url: Optional[str] = None
    catalogue_link: Optional[str] = None
    section_urls: List[str] = field(default_factory=list)
    pdf_urls: List[str] = field(default_factory=list)
    confidence: int = 0

    @classmethod
    def empty(cls) -> "PageAnalysis":
        return cls()


@dataclass
class ProductExtraction:
    """A product (None when the page is not a product) and its confidence."""
    product: Optional[ScrapedProduct] = None
    confidence: int = 0


class PageAnalyzer:
    """
    Classifies pages and extracts products through the content-understanding service.

    Usage:
        analyzer = PageAnalyzer(ContentUnderstandingClient.from_env())
        analysis = analyzer.classify(html, url, "Acme", "Find the product catalogue")
        extraction = analyzer.extract_product(html, url, "Acme")
    """

    CLASSIFY_MAX_TOKENS = 2000
    EXTRACT_MAX_TOKENS = 1500

    def __init__(self, client: ContentUnderstandingClient, max_chars: Optional[int] = None):
        self.client = client
        self.max_chars = max_chars

    def _sanitize(self, html: str) -> str:
        if self.max_chars is None:
            return sanitize_html(html)
        return sanitize_html(html, self.max_chars)

    def classify(self, html: str, page_url: str, manufacturer_name: str, goal: str) -> PageAnalysis:
        """
        Classify a page and collect its product, pagination and catalogue links.

        Returns:
            PageAnalysis; PageAnalysis.empty() on any failure
        """
        prompt = CLASSIFY_PROMPT.format(
            page_url=page_url,
            manufacturer_name=manufacturer_name,
            goal=goal,
            html=self._sanitize(html),
        )
        data = self.client.complete_json(prompt, max_tokens=self.CLASSIFY_MAX_TOKENS)
        if not data:
            return PageAnalysis.empty()

        page_type = data.get("page_type")
        analysis = PageAnalysis(
            page_type=page_type if page_type in PAGE_TYPES else "other",
            product_urls=_url_list(data.get("product_urls"), page_url),
            next_page_url=_optional_url(data.get("next_page_url"), page_url),
            catalogue_link=_optional_url(data.get("catalogue_link"), page_url),
            section_urls=_url_list(data.get("section_urls"), page_url),
            pdf_urls=_url_list(data.get("pdf_urls"), page_url),
            confidence=_confidence(data.get("confidence")),
        )
        logger.debug(
            "Classified %s as %s (%d product links, confidence %d)",
            page_url, analysis.page_type, len(analysis.product_urls), analysis.confidence,
        )
        return analysis

    def extract_product(self, html: str, page_url: str, manufacturer_name: str) -> ProductExtraction:
        """
        Extract one product record from a detail page.

        Returns:
            ProductExtraction whose product is None for non-product pages or failures
        """
        prompt = EXTRACT_PROMPT.format(
            page_url=page_url,
            manufacturer_name=manufacturer_name,
            html=self._sanitize(html),
        )
        data = self.client.complete_json(prompt, max_tokens=self.EXTRACT_MAX_TOKENS)
        confidence = _confidence(data.get("extraction_confidence"))

        name = data.get("product_name")
        if not isinstance(name, str) or not name.strip():
            return ProductExtraction(product=None, confidence=confidence)

        image_urls = _url_list(data.get("image_urls"), page_url)
        product = ScrapedProduct(
            product_name=name.strip(),
            product_code=_optional_text(data.get("product_code")),
            description=_optional_text(data.get("description")),
            specifications=_spec_map(data.get("specifications")),
            price_text=_optional_text(data.get("price_text")),
            pdf_urls=_url_list(data.get("pdf_urls"), page_url),
            image_urls=image_urls or None,
            source_url=page_url,
        )
        return ProductExtraction(product=product, confidence=confidence)


def _url_list(value: Any, page_url: str) -> List[str]:
    if not isinstance(value, list):
        return []
    return unique(resolve_url(v, page_url) for v in value if isinstance(v, str) and v.strip())


def _optional_url(value: Any, page_url: str) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    return resolve_url(value, page_url)


def _optional_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _spec_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    specs = {}
    for key, val in value.items():
        if val is None or isinstance(val, (dict, list)):
            continue
        key, val = str(key).strip(), str(val).strip()
        if key and val:
            specs[key] = val
    return specs


def _confidence(value: Any) -> int:
    try:
        score = int(float(value))
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, score))
