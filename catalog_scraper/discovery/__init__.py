"""
Product URL discovery.

Modules:
    sitemap_prober - SitemapProber (sitemap.xml, sitemap_index.xml, robots.txt)
    orchestrator - DiscoveryOrchestrator (sitemap first, then AI navigation)
"""

from .orchestrator import DiscoveryOrchestrator
from .sitemap_prober import PRODUCT_PATH_PATTERN, SitemapProber, parse_sitemap_locs

__all__ = [
    'SitemapProber',
    'DiscoveryOrchestrator',
    'PRODUCT_PATH_PATTERN',
    'parse_sitemap_locs',
]
