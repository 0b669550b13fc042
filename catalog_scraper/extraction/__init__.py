"""
Extraction primitives shared by every scraping strategy.

Modules:
    sanitizer - HTML reduction for AI page understanding
    patterns - Regex extraction (first match, all matches, spec tables)
    sitemap_products - Product records derived from sitemap URL paths
    dedup - Final deduplication pass
    parsers - Structured data (JSON-LD) parsing
    regulation_sections - Regulation documents split into sections
"""

from .dedup import dedup_products
from .parsers import StructuredDataParser
from .patterns import all_matches, extract_spec_table, first_match
from .regulation_sections import extract_sections_from_html, parse_legislation_html, split_at_subsections
from .sanitizer import TRUNCATION_MARKER, sanitize_html
from .sitemap_products import PATH_HANDLERS, product_from_sitemap_url, products_from_sitemap_urls

__all__ = [
    'sanitize_html',
    'TRUNCATION_MARKER',
    'first_match',
    'all_matches',
    'extract_spec_table',
    'dedup_products',
    'StructuredDataParser',
    'product_from_sitemap_url',
    'products_from_sitemap_urls',
    'PATH_HANDLERS',
    'extract_sections_from_html',
    'parse_legislation_html',
    'split_at_subsections',
]
