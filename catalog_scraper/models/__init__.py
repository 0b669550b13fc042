"""
Data models for product discovery and extraction.

This module contains pure data classes with no business logic.
"""

from .config import (
    AiScraperConfig,
    ApiSource,
    BrowserPagination,
    BrowserScraperConfig,
    ConfigError,
    DetailSelectors,
    DetailMethod,
    GenericScraperConfig,
    HtmlDetail,
    JsonLdDetail,
    ListingConfig,
    ListingOnlyDetail,
    PaginationType,
    RegulationScraperConfig,
    RequestOptions,
    ShopifyConfig,
    SitemapDetail,
    parse_scraper_config,
)
from .product import DiscoveryMethod, DiscoveryResult, ScrapedProduct, ScrapedSection

__all__ = [
    'ScrapedProduct',
    'ScrapedSection',
    'DiscoveryMethod',
    'DiscoveryResult',
    'ConfigError',
    'DetailMethod',
    'GenericScraperConfig',
    'ListingConfig',
    'HtmlDetail',
    'JsonLdDetail',
    'ListingOnlyDetail',
    'SitemapDetail',
    'ApiSource',
    'RequestOptions',
    'ShopifyConfig',
    'BrowserScraperConfig',
    'BrowserPagination',
    'DetailSelectors',
    'PaginationType',
    'RegulationScraperConfig',
    'AiScraperConfig',
    'parse_scraper_config',
]
