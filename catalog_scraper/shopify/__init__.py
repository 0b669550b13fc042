"""
Shopify catalogue adapter.

Modules:
    catalog_scraper - ShopifyCatalogScraper (products.json + enrichment)
    documents - PDF link discovery and categorisation
"""

from .catalog_scraper import (
    QUOTE_ON_REQUEST,
    ShopifyCatalogScraper,
    derive_code_prefix,
    extract_test_standards,
    format_price,
    map_shopify_product,
)
from .documents import DocumentInfo, categorize_pdf, find_document_links

__all__ = [
    'ShopifyCatalogScraper',
    'map_shopify_product',
    'derive_code_prefix',
    'extract_test_standards',
    'format_price',
    'QUOTE_ON_REQUEST',
    'DocumentInfo',
    'categorize_pdf',
    'find_document_links',
]
