"""
Scraper configuration models.

Declarative, side-effect-free descriptions of where to fetch and how to
parse. Every variant is a frozen dataclass; regex patterns are compiled
once here, so an unparseable pattern is reported at load time as a
ConfigError instead of silently yielding nothing during a run.

Config families (the "type" key of a config file):
    html        - GenericScraperConfig (generic configurable scraper)
    shopify     - ShopifyConfig (Shopify catalogue adapter)
    playwright  - BrowserScraperConfig (headless browser product scraping)
    regulation  - RegulationScraperConfig (regulation text over HTTP, or a
                  headless browser when use_browser is set)
    ai          - AiScraperConfig (sitemap + AI navigation + AI extraction)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Pattern, Tuple, Union

from ..common import constants


class ConfigError(ValueError):
    """Raised when a scraper configuration cannot be loaded."""


class DetailMethod(str, Enum):
    """How product data is extracted once listing pages are fetched."""
    HTML = "html"
    JSON_LD = "json-ld"
    LISTING_ONLY = "listing-only"
    SITEMAP = "sitemap"


class PaginationType(str, Enum):
    NEXT_BUTTON = "next_button"
    LOAD_MORE = "load_more"
    NONE = "none"


# ── Generic scraper ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RequestOptions:
    delay_ms: int = constants.DEFAULT_DELAY_MS
    timeout_ms: int = constants.DEFAULT_TIMEOUT_MS
    batch_size: int = constants.DEFAULT_BATCH_SIZE
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


@dataclass(frozen=True)
class ListingConfig:
    urls: Tuple[str, ...]
    product_link_pattern: Pattern
    pagination: Optional[str] = None   # URL template with {page} placeholder
    max_pages: int = constants.DEFAULT_MAX_LISTING_PAGES


@dataclass(frozen=True)
class HtmlDetail:
    """Regex extraction from each product detail page."""
    name_pattern: Optional[Pattern] = None
    description_pattern: Optional[Pattern] = None
    spec_table_pattern: Optional[Pattern] = None
    pdf_pattern: Optional[Pattern] = None
    image_pattern: Optional[Pattern] = None

    method = DetailMethod.HTML


@dataclass(frozen=True)
class JsonLdDetail(HtmlDetail):
    """JSON-LD extraction, falling back to the regex patterns when absent."""
    json_ld_type: str = "Product"

    method = DetailMethod.JSON_LD


@dataclass(frozen=True)
class ListingOnlyDetail:
    """Names and document links read straight off listing pages."""
    name_pattern: Optional[Pattern] = None
    pdf_pattern: Optional[Pattern] = None

    method = DetailMethod.LISTING_ONLY


@dataclass(frozen=True)
class SitemapDetail:
    """Listing URLs are sitemap XML; products are derived from URL paths."""

    method = DetailMethod.SITEMAP


DetailConfig = Union[HtmlDetail, JsonLdDetail, ListingOnlyDetail, SitemapDetail]


@dataclass(frozen=True)
class ApiSource:
    """A JSON API that returns the catalogue in one request."""
    url: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    body_template: Optional[str] = None
    results_path: Optional[str] = None
    name_field: Optional[str] = None
    description_field: Optional[str] = None
    url_field: Optional[str] = None
    code_field: Optional[str] = None


@dataclass(frozen=True)
class GenericScraperConfig:
    base_url: str
    listing: ListingConfig
    detail: DetailConfig
    api: Optional[ApiSource] = None
    request: RequestOptions = field(default_factory=RequestOptions)

    type = "html"


# ── Other scraper families ────────────────────────────────────────────────────

@dataclass(frozen=True)
class ShopifyConfig:
    store_url: str
    max_pages: int = 10
    page_size: int = 250
    document_batch_size: int = 10
    min_enrichment_seconds: float = 10.0

    type = "shopify"


@dataclass(frozen=True)
class DetailSelectors:
    description: Optional[str] = None
    specs: Optional[str] = None
    price: Optional[str] = None
    pdf_link: Optional[str] = None


@dataclass(frozen=True)
class BrowserPagination:
    type: PaginationType = PaginationType.NONE
    selector: Optional[str] = None
    max_pages: int = 50


@dataclass(frozen=True)
class BrowserScraperConfig:
    product_list_url: str
    product_list_selector: str
    product_name_selector: str
    product_link_selector: str
    detail: DetailSelectors = field(default_factory=DetailSelectors)
    pagination: BrowserPagination = field(default_factory=BrowserPagination)

    type = "playwright"


@dataclass(frozen=True)
class RegulationScraperConfig:
    source_url: str
    section_selector: str = ""
    content_selector: str = ""
    section_ref_selector: Optional[str] = None
    use_browser: bool = False
    # "legislation_gov_uk" forces provision parsing for mirrored Acts
    source_type: Optional[str] = None
    # section | regulation | article; detected from the URL when unset
    provision_type: Optional[str] = None

    type = "regulation"


@dataclass(frozen=True)
class AiScraperConfig:
    website_url: str
    manufacturer_name: str
    use_browser: bool = True
    batch_size: int = 10
    delay_ms: int = 3000

    type = "ai"


ScraperConfig = Union[
    GenericScraperConfig,
    ShopifyConfig,
    BrowserScraperConfig,
    RegulationScraperConfig,
    AiScraperConfig,
]


# ── Parsing ───────────────────────────────────────────────────────────────────

def compile_pattern(raw: Optional[str], name: str, min_groups: int = 1) -> Optional[Pattern]:
    """
    Compile a case-insensitive extraction pattern.

    Raises:
        ConfigError: If the pattern is invalid or has too few capture groups
    """
    if not raw:
        return None
    try:
        pattern = re.compile(raw, re.IGNORECASE)
    except re.error as e:
        raise ConfigError(f"Invalid regex for {name}: {e}") from e
    if pattern.groups < min_groups:
        raise ConfigError(f"Pattern {name} needs at least {min_groups} capture group(s)")
    return pattern


def _require(data: Dict[str, Any], key: str, where: str) -> Any:
    value = data.get(key)
    if not value:
        raise ConfigError(f"Missing required field '{key}' in {where}")
    return value


def _parse_request(data: Optional[Dict[str, Any]]) -> RequestOptions:
    data = data or {}
    return RequestOptions(
        delay_ms=int(data.get("delay_ms", constants.DEFAULT_DELAY_MS)),
        timeout_ms=int(data.get("timeout_ms", constants.DEFAULT_TIMEOUT_MS)),
        batch_size=max(1, int(data.get("batch_size", constants.DEFAULT_BATCH_SIZE))),
        headers=dict(data.get("headers") or {}),
    )


def _parse_detail(data: Dict[str, Any]) -> DetailConfig:
    raw_method = data.get("method", DetailMethod.HTML.value)
    try:
        method = DetailMethod(raw_method)
    except ValueError:
        valid = ", ".join(m.value for m in DetailMethod)
        raise ConfigError(f"Unknown detail method '{raw_method}'. Supported: {valid}") from None

    if method is DetailMethod.SITEMAP:
        return SitemapDetail()

    if method is DetailMethod.LISTING_ONLY:
        return ListingOnlyDetail(
            name_pattern=compile_pattern(data.get("name_pattern"), "name_pattern"),
            pdf_pattern=compile_pattern(data.get("pdf_pattern"), "pdf_pattern"),
        )

    patterns = dict(
        name_pattern=compile_pattern(data.get("name_pattern"), "name_pattern"),
        description_pattern=compile_pattern(data.get("description_pattern"), "description_pattern"),
        spec_table_pattern=compile_pattern(data.get("spec_table_pattern"), "spec_table_pattern", min_groups=2),
        pdf_pattern=compile_pattern(data.get("pdf_pattern"), "pdf_pattern"),
        image_pattern=compile_pattern(data.get("image_pattern"), "image_pattern"),
    )
    if method is DetailMethod.JSON_LD:
        return JsonLdDetail(json_ld_type=data.get("json_ld_type") or "Product", **patterns)
    return HtmlDetail(**patterns)


def _parse_api(data: Optional[Dict[str, Any]]) -> Optional[ApiSource]:
    if not data:
        return None
    method = str(data.get("method", "GET")).upper()
    if method not in ("GET", "POST"):
        raise ConfigError(f"Unsupported API method: {method}")
    return ApiSource(
        url=_require(data, "url", "api"),
        method=method,
        headers=dict(data.get("headers") or {}),
        body_template=data.get("body_template"),
        results_path=data.get("results_path"),
        name_field=data.get("name_field"),
        description_field=data.get("description_field"),
        url_field=data.get("url_field"),
        code_field=data.get("code_field"),
    )


def _parse_generic(data: Dict[str, Any]) -> GenericScraperConfig:
    api = _parse_api(data.get("api"))
    listing = data.get("listing") or {}

    # API-only configs need no listing patterns
    link_pattern = listing.get("product_link_pattern")
    if not link_pattern and api is None:
        raise ConfigError("Missing required field 'product_link_pattern' in listing")

    return GenericScraperConfig(
        base_url=_require(data, "base_url", "config"),
        listing=ListingConfig(
            urls=tuple(listing.get("urls") or ()),
            product_link_pattern=compile_pattern(link_pattern, "product_link_pattern"),
            pagination=listing.get("pagination"),
            max_pages=int(listing.get("max_pages", constants.DEFAULT_MAX_LISTING_PAGES)),
        ),
        detail=_parse_detail(data.get("detail") or {}),
        api=api,
        request=_parse_request(data.get("request")),
    )


def _parse_shopify(data: Dict[str, Any]) -> ShopifyConfig:
    return ShopifyConfig(
        store_url=str(_require(data, "store_url", "shopify config")).rstrip("/"),
        max_pages=int(data.get("max_pages", 10)),
        page_size=int(data.get("page_size", 250)),
        document_batch_size=max(1, int(data.get("document_batch_size", 10))),
        min_enrichment_seconds=float(data.get("min_enrichment_seconds", 10.0)),
    )


def _parse_browser(data: Dict[str, Any]) -> BrowserScraperConfig:
    where = "playwright config"
    selectors = data.get("product_detail_selectors") or {}
    pagination = data.get("pagination") or {}
    try:
        pagination_type = PaginationType(pagination.get("type", PaginationType.NONE.value))
    except ValueError:
        raise ConfigError(f"Unknown pagination type '{pagination.get('type')}'") from None

    return BrowserScraperConfig(
        product_list_url=_require(data, "product_list_url", where),
        product_list_selector=_require(data, "product_list_selector", where),
        product_name_selector=_require(data, "product_name_selector", where),
        product_link_selector=_require(data, "product_link_selector", where),
        detail=DetailSelectors(
            description=selectors.get("description"),
            specs=selectors.get("specs"),
            price=selectors.get("price"),
            pdf_link=selectors.get("pdf_link"),
        ),
        pagination=BrowserPagination(
            type=pagination_type,
            selector=pagination.get("selector"),
            max_pages=int(pagination.get("max_pages") or 50),
        ),
    )


def _parse_regulation(data: Dict[str, Any]) -> RegulationScraperConfig:
    where = "regulation config"
    use_browser = bool(data.get("use_browser", False))
    provision_type = data.get("provision_type")
    if provision_type is not None and provision_type not in ("section", "regulation", "article"):
        raise ConfigError(f"{where}: unknown provision_type '{provision_type}'")
    return RegulationScraperConfig(
        source_url=_require(data, "source_url", where),
        # Browser mode walks the configured headings; HTTP mode finds its own
        section_selector=_require(data, "section_selector", where) if use_browser else data.get("section_selector") or "",
        content_selector=data.get("content_selector") or "",
        section_ref_selector=data.get("section_ref_selector"),
        use_browser=use_browser,
        source_type=data.get("source_type"),
        provision_type=provision_type,
    )


def _parse_ai(data: Dict[str, Any]) -> AiScraperConfig:
    where = "ai config"
    return AiScraperConfig(
        website_url=_require(data, "website_url", where),
        manufacturer_name=_require(data, "manufacturer_name", where),
        use_browser=bool(data.get("use_browser", True)),
        batch_size=max(1, int(data.get("batch_size", 10))),
        delay_ms=int(data.get("delay_ms", 3000)),
    )


_PARSERS = {
    GenericScraperConfig.type: _parse_generic,
    ShopifyConfig.type: _parse_shopify,
    BrowserScraperConfig.type: _parse_browser,
    RegulationScraperConfig.type: _parse_regulation,
    AiScraperConfig.type: _parse_ai,
}


def parse_scraper_config(data: Dict[str, Any]) -> ScraperConfig:
    """
    Build a typed scraper configuration from a plain dict (e.g. parsed YAML).

    Raises:
        ConfigError: On unknown type, missing fields or invalid patterns
    """
    if not isinstance(data, dict):
        raise ConfigError("Scraper config must be a mapping")

    config_type = data.get("type", GenericScraperConfig.type)
    parser = _PARSERS.get(config_type)
    if parser is None:
        raise ConfigError(
            f"Unknown scraper type '{config_type}'. Supported: {', '.join(_PARSERS)}"
        )
    return parser(data)
