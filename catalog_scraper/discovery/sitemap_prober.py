"""
Sitemap Prober

Discovers candidate product URLs from sitemap.xml, sitemap_index.xml and
robots.txt Sitemap directives, without rendering any page. Every probe is
independent: a failed fetch is logged and skipped, and an empty list means
"try the next strategy".
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import List, Optional
from urllib.parse import urlparse

import requests

from ..common.constants import MAX_CHILD_SITEMAPS, MAX_DISCOVERED_URLS
from ..common.http import create_session, safe_fetch
from ..common.text_utils import unique

logger = logging.getLogger(__name__)

PRODUCT_PATH_PATTERN = re.compile(
    r"/(product|products|shop|item|catalogue|catalog|range|systems?|solutions?)/",
    re.IGNORECASE,
)

SITEMAP_DIRECTIVE_PATTERN = re.compile(r"^Sitemap:\s*(.+)$", re.IGNORECASE | re.MULTILINE)


class SitemapProber:
    """Discovers product URLs for a site using its sitemaps."""

    ROBOTS_TIMEOUT = 8
    SITEMAP_TIMEOUT = 10

    def __init__(self, session: Optional[requests.Session] = None):
        self._owns_session = session is None
        self.session = session or create_session()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        if self._owns_session:
            self.session.close()

    def discover(self, website_url: str) -> List[str]:
        """
        Probe the site's sitemaps for product-shaped URLs.

        Args:
            website_url: Any URL on the site; only its origin is used

        Returns:
            Deduplicated product URLs (at most 500), possibly empty
        """
        origin = self._origin(website_url)
        if not origin:
            logger.debug("Not a valid site URL: %s", website_url)
            return []

        candidates = [f"{origin}/sitemap.xml", f"{origin}/sitemap_index.xml"]
        for url in self._robots_sitemaps(origin):
            if url not in candidates:
                candidates.append(url)

        page_urls: List[str] = []
        child_sitemaps: List[str] = []

        for sitemap_url in candidates:
            for loc in self._fetch_locs(sitemap_url):
                if self._is_sitemap(loc):
                    child_sitemaps.append(loc)
                else:
                    page_urls.append(loc)

        for child in child_sitemaps[:MAX_CHILD_SITEMAPS]:
            page_urls.extend(self._fetch_locs(child))

        product_urls = unique(u for u in page_urls if PRODUCT_PATH_PATTERN.search(u))
        product_urls = product_urls[:MAX_DISCOVERED_URLS]

        logger.info("Sitemap probe for %s: %d product URLs", origin, len(product_urls))
        return product_urls

    @staticmethod
    def _origin(website_url: str) -> Optional[str]:
        try:
            parsed = urlparse(website_url)
        except ValueError:
            return None
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            return None
        return f"{parsed.scheme}://{parsed.netloc}"

    @staticmethod
    def _is_sitemap(url: str) -> bool:
        return "sitemap" in url and url.endswith(".xml")

    def _robots_sitemaps(self, origin: str) -> List[str]:
        """Read Sitemap: directives from robots.txt."""
        text = safe_fetch(self.session, f"{origin}/robots.txt", timeout=self.ROBOTS_TIMEOUT, quiet=True)
        if not text:
            return []
        return [m.strip() for m in SITEMAP_DIRECTIVE_PATTERN.findall(text) if m.strip()]

    def _fetch_locs(self, sitemap_url: str) -> List[str]:
        """Fetch one sitemap and return every <loc> it lists."""
        xml = safe_fetch(self.session, sitemap_url, timeout=self.SITEMAP_TIMEOUT, quiet=True)
        if not xml:
            return []
        return parse_sitemap_locs(xml)


def parse_sitemap_locs(xml: str) -> List[str]:
    """
    Extract <loc> values from urlset or sitemapindex XML.

    Malformed XML yields an empty list.
    """
    try:
        root = ET.fromstring(xml.encode("utf-8") if isinstance(xml, str) else xml)
    except ET.ParseError as e:
        logger.debug("Unparseable sitemap XML: %s", e)
        return []

    # Namespaces vary between generators, so match on the local name
    locs = []
    for elem in root.iter():
        if isinstance(elem.tag, str) and elem.tag.rsplit("}", 1)[-1] == "loc" and elem.text:
            locs.append(elem.text.strip())
    return locs
