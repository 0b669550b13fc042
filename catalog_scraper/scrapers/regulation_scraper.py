"""
Regulation Scraper

Fetches a regulation document over plain HTTP and splits it into sections.

legislation.gov.uk documents (by host, or source_type "legislation_gov_uk")
are fetched as the whole Act and split per numbered provision; everything
else goes through heading-based extraction. Fetch failures yield an empty
list.
"""

import logging
from typing import List, Optional

import requests

from ..common.deadline import Deadline
from ..common.http import create_session, safe_fetch
from ..common.progress import NULL_REPORTER, ProgressReporter
from ..extraction.regulation_sections import (
    detect_provision_type,
    extract_sections_from_html,
    parse_legislation_html,
    whole_act_url,
)
from ..models import RegulationScraperConfig, ScrapedSection

logger = logging.getLogger(__name__)

LEGISLATION_SOURCE_TYPE = "legislation_gov_uk"
LEGISLATION_HOST = "legislation.gov.uk"

PAGE_TIMEOUT = 15
LEGISLATION_TIMEOUT = 30
# Shorter bodies are error or interstitial pages
MIN_LEGISLATION_CHARS = 1000

REGULATION_HEADERS = {"Accept": "text/html,application/xhtml+xml"}


def is_legislation_source(config: RegulationScraperConfig) -> bool:
    return config.source_type == LEGISLATION_SOURCE_TYPE or LEGISLATION_HOST in config.source_url


class RegulationScraper:
    """
    Section scraper for regulation documents that need no browser.

    Usage:
        with RegulationScraper() as scraper:
            sections = scraper.scrape(config)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        deadline: Optional[Deadline] = None,
        reporter: ProgressReporter = NULL_REPORTER,
    ):
        self._owns_session = session is None
        self.session = session or create_session(REGULATION_HEADERS)
        self.deadline = deadline or Deadline.unbounded()
        self.reporter = reporter

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        if self._owns_session:
            self.session.close()

    def scrape(self, config: RegulationScraperConfig) -> List[ScrapedSection]:
        if self.deadline.expired():
            logger.warning("Time budget exhausted before fetching %s", config.source_url)
            return []

        if is_legislation_source(config):
            sections = self.fetch_legislation_sections(config)
        else:
            html = safe_fetch(self.session, config.source_url, timeout=PAGE_TIMEOUT)
            sections = extract_sections_from_html(html) if html else []

        logger.info("Extracted %d sections from %s", len(sections), config.source_url)
        self.reporter.emit("Regulation sections extracted", detail=config.source_url, found=len(sections))
        return sections

    def fetch_legislation_sections(self, config: RegulationScraperConfig) -> List[ScrapedSection]:
        """Whole-Act page split per provision; heading extraction when no provisions parse."""
        url = whole_act_url(config.source_url)
        provision_type = config.provision_type or detect_provision_type(url)

        html = safe_fetch(self.session, url, timeout=LEGISLATION_TIMEOUT)
        if html is None:
            return []
        if len(html) < MIN_LEGISLATION_CHARS:
            logger.warning("Legislation page too short (%d chars) - %s", len(html), url)
            return []

        sections = parse_legislation_html(html, provision_type)
        if not sections:
            logger.info("No %s provisions found in %s, using heading extraction", provision_type, url)
            sections = extract_sections_from_html(html)
        return sections
