#!/usr/bin/env python3
"""
URL Discovery Script

Discovers product URLs for a manufacturer site: sitemaps first, then AI
navigation when the sitemap yields too few (requires OPENAI_API_KEY).

Usage:
    python3 scripts/discover_urls.py --site https://maker.example --output data/maker/urls.txt
    python3 scripts/discover_urls.py --site https://maker.example --sitemap-only
"""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

# Add project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from catalog_scraper.ai import ContentUnderstandingClient, PageAnalyzer
from catalog_scraper.common import Deadline, create_session, safe_fetch, setup_logging
from catalog_scraper.common.constants import DEFAULT_HTML_HEADERS
from catalog_scraper.discovery import DiscoveryOrchestrator, SitemapProber

logger = logging.getLogger(__name__)


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Discover product URLs for a manufacturer website")
    parser.add_argument(
        "--site", "-s",
        required=True,
        help="Website root URL (e.g. https://maker.example)"
    )
    parser.add_argument(
        "--manufacturer", "-m",
        help="Manufacturer name given to the AI (default: site host)"
    )
    parser.add_argument(
        "--output", "-o",
        help="Output file for product URLs (default: stdout)"
    )
    parser.add_argument(
        "--sitemap-only",
        action="store_true",
        help="Only probe sitemaps, never call the AI"
    )
    parser.add_argument(
        "--max-runtime",
        type=float,
        default=None,
        help="Run budget in seconds (default: unbounded)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress info messages, show only warnings and errors"
    )

    args = parser.parse_args()
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    site = args.site.rstrip("/")
    manufacturer = args.manufacturer or site.split("//")[-1]

    print("=" * 60, file=sys.stderr)
    print(f"{manufacturer} URL Discovery", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    print(f"  Site:   {site}", file=sys.stderr)
    print(f"  Method: {'Sitemap' if args.sitemap_only else 'Sitemap + AI navigation'}", file=sys.stderr)

    with SitemapProber() as prober:
        if args.sitemap_only:
            urls = prober.discover(site)
            method = "sitemap"
        else:
            session = create_session(DEFAULT_HTML_HEADERS)
            try:
                orchestrator = DiscoveryOrchestrator(
                    prober,
                    PageAnalyzer(ContentUnderstandingClient.from_env()),
                    lambda url: safe_fetch(session, url, timeout=10),
                    deadline=Deadline(args.max_runtime),
                )
                result = orchestrator.discover(site, manufacturer)
            finally:
                session.close()
            urls, method = result.product_urls, result.method.value

    if args.output:
        os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write("\n".join(urls) + ("\n" if urls else ""))
    else:
        print("\n".join(urls))

    print("\n" + "=" * 60, file=sys.stderr)
    print("Summary", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    print(f"  Products found: {len(urls)}", file=sys.stderr)
    print(f"  Method:         {method}", file=sys.stderr)
    print(f"  Output file:    {args.output or 'stdout'}", file=sys.stderr)
    print("=" * 60, file=sys.stderr)


if __name__ == "__main__":
    main()
