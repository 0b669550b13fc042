"""
Scraping strategies.

Modules:
    generic_scraper - declarative regex / JSON-LD / listing / sitemap / API scraper
    ai_scraper - discovery plus AI extraction for unconfigured sites
    regulation_scraper - regulation document sections over plain HTTP
"""

from .ai_scraper import AiCatalogScraper
from .generic_scraper import GenericScraper
from .regulation_scraper import RegulationScraper

__all__ = ['GenericScraper', 'AiCatalogScraper', 'RegulationScraper']
