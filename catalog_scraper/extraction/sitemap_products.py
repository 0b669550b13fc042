"""
Sitemap URL Product Heuristics

Derives product records from sitemap URLs alone, for sites whose pages sit
behind bot walls. Each handler recognises one site structure; the first
handler that claims a URL wins, with a generic last-segment fallback.
New site layouts are supported by adding a handler to PATH_HANDLERS.
"""

import logging
from typing import Callable, List, Optional, Sequence
from urllib.parse import urlparse

from ..common.text_utils import title_case_slug
from ..models import ScrapedProduct

logger = logging.getLogger(__name__)

# Sentinel returned by a handler that claims a URL but rejects it
SKIP = object()

PathHandler = Callable[[str, str, List[str]], object]


def _white_book_handler(url: str, path: str, segments: List[str]):
    """
    /Specification/White-Book-Specification-Selector/{category}/{system}/{code}
    """
    if "/white-book-specification-selector/" not in path.lower():
        return None

    lowered = [s.lower() for s in segments]
    idx = lowered.index("white-book-specification-selector")
    if idx + 3 > len(segments):
        return SKIP
    # Overview pages are not systems
    if lowered[idx + 1] == "white-book-overview":
        return SKIP

    category = segments[idx + 1]
    system = segments[idx + 2]
    code_raw = segments[idx + 3] if idx + 3 < len(segments) else segments[-1]
    code = code_raw[:-3] if code_raw.endswith("-en") else code_raw
    code = code.upper()

    system_name = title_case_slug(system).strip()
    category_name = title_case_slug(category).strip()
    product_name = f"{system_name} {code}".strip()
    if not product_name:
        return SKIP

    return ScrapedProduct(
        product_name=product_name,
        product_code=code,
        description=(
            f"{system_name} system specification - {category_name}. "
            f"White Book reference {code}."
        ),
        specifications={
            "Category": category_name,
            "System": system_name,
            "Reference Code": code,
            "White Book Section": category_name,
        },
        pdf_urls=[],
        source_url=url,
    )


def _products_path_handler(url: str, path: str, segments: List[str]):
    """
    /products/{category}/{product-slug}
    """
    lowered = [s.lower() for s in segments]
    if "products" not in lowered:
        return None

    idx = lowered.index("products")
    category = segments[idx + 1] if idx + 1 < len(segments) else ""
    if idx + 2 < len(segments):
        slug = segments[idx + 2]
    else:
        slug = category or segments[-1]

    product_name = title_case_slug(slug).strip()
    category_name = title_case_slug(category).strip()
    # Punctuation-only slugs such as "---"
    if not product_name:
        return SKIP

    return ScrapedProduct(
        product_name=product_name,
        product_code=slug,
        description=f"{product_name} - {category_name}.",
        specifications={"Category": category_name},
        pdf_urls=[],
        source_url=url,
    )


def _last_segment_handler(url: str, path: str, segments: List[str]):
    slug = segments[-1]
    product_name = title_case_slug(slug).strip()
    if not product_name:
        return SKIP
    return ScrapedProduct(
        product_name=product_name,
        product_code=slug,
        specifications={},
        pdf_urls=[],
        source_url=url,
    )


PATH_HANDLERS: List[PathHandler] = [
    _white_book_handler,
    _products_path_handler,
    _last_segment_handler,
]


def product_from_sitemap_url(url: str, handlers: Sequence[PathHandler] = PATH_HANDLERS) -> Optional[ScrapedProduct]:
    """Derive one product from a URL, or None if no handler accepts it."""
    try:
        path = urlparse(url).path
    except ValueError:
        return None

    segments = [s for s in path.split("/") if s]
    if len(segments) < 2:
        return None

    for handler in handlers:
        result = handler(url, path, segments)
        if result is SKIP:
            return None
        if result is not None:
            return result
    return None


def products_from_sitemap_urls(urls: Sequence[str]) -> List[ScrapedProduct]:
    """Derive products from every usable URL, preserving order."""
    products = []
    for url in urls:
        product = product_from_sitemap_url(url)
        if product is not None:
            products.append(product)
    logger.debug("Derived %d products from %d sitemap URLs", len(products), len(urls))
    return products
