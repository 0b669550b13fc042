"""
Headless browser support (Playwright).

Modules:
    playwright_driver - BrowserScraper for product listings and regulation documents
    page_fetcher - rendered-HTML batch fetcher
"""

from .page_fetcher import FetchResult, fetch_pages
from .playwright_driver import BrowserScraper

__all__ = ['BrowserScraper', 'FetchResult', 'fetch_pages']
