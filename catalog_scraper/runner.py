"""
Scraper Runner

Maps a typed scraper configuration to the scraper that runs it, and shapes
results for JSON output.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Union

from .ai import ContentUnderstandingClient, PageAnalyzer
from .browser import BrowserScraper
from .common.constants import MAX_RUNTIME_SECONDS
from .common.deadline import Deadline
from .common.progress import NULL_REPORTER, ProgressReporter
from .models import (
    AiScraperConfig,
    BrowserScraperConfig,
    GenericScraperConfig,
    RegulationScraperConfig,
    ScrapedProduct,
    ScrapedSection,
    ShopifyConfig,
)
from .scrapers import AiCatalogScraper, GenericScraper, RegulationScraper
from .shopify import ShopifyCatalogScraper, categorize_pdf

logger = logging.getLogger(__name__)

ScrapeOutput = List[Union[ScrapedProduct, ScrapedSection]]


def run_scraper(
    config,
    reporter: ProgressReporter = NULL_REPORTER,
    max_runtime: float = MAX_RUNTIME_SECONDS,
    analyzer_factory: Optional[Callable[[], PageAnalyzer]] = None,
) -> ScrapeOutput:
    """
    Run one configuration with a fresh run deadline.

    Args:
        config: Any typed scraper configuration
        reporter: Progress observer
        max_runtime: Whole-run budget in seconds
        analyzer_factory: Builds the page analyzer for AI configs
            (default: OpenAI client from the environment)

    Returns:
        Products, or sections for regulation configs
    """
    deadline = Deadline(max_runtime)
    logger.info("Running %s scraper", getattr(config, "type", type(config).__name__))

    if isinstance(config, GenericScraperConfig):
        with GenericScraper(deadline=deadline, reporter=reporter) as scraper:
            return scraper.scrape(config)

    if isinstance(config, ShopifyConfig):
        with ShopifyCatalogScraper(deadline=deadline, reporter=reporter) as scraper:
            return scraper.scrape(config)

    if isinstance(config, BrowserScraperConfig):
        return BrowserScraper(reporter=reporter, deadline=deadline).scrape_products(config)

    if isinstance(config, RegulationScraperConfig):
        if config.use_browser:
            return BrowserScraper(reporter=reporter, deadline=deadline).scrape_regulation_sections(config)
        with RegulationScraper(deadline=deadline, reporter=reporter) as scraper:
            return scraper.scrape(config)

    if isinstance(config, AiScraperConfig):
        factory = analyzer_factory or (lambda: PageAnalyzer(ContentUnderstandingClient.from_env()))
        with AiCatalogScraper(factory(), deadline=deadline, reporter=reporter) as scraper:
            return scraper.scrape(config)

    raise TypeError(f"Unsupported scraper config: {type(config).__name__}")


def result_to_dict(item: Union[ScrapedProduct, ScrapedSection]) -> Dict[str, Any]:
    """JSON-ready dict; products also list their documents with type and name."""
    data = item.to_dict()
    if isinstance(item, ScrapedProduct):
        data["documents"] = [
            {"url": url, "type": info.type, "name": info.name}
            for url, info in ((url, categorize_pdf(url)) for url in item.pdf_urls)
        ]
    return data
