#!/usr/bin/env python3
"""
Scraper Runner Script

Runs one scraper configuration (generic, shopify, playwright, regulation
or ai) and writes the results as JSON.

Usage:
    python3 scripts/run_scraper.py example_html.yaml
    python3 scripts/run_scraper.py config/scrapers/example_shopify.yaml --output data/shop.json
    python3 scripts/run_scraper.py example_ai.yaml --progress --max-runtime 120
"""

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

# Add project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from catalog_scraper.common import (
    ProgressReporter,
    load_max_runtime,
    load_request_defaults,
    load_scraper_config,
    setup_logging,
)
from catalog_scraper.common.constants import MAX_RUNTIME_SECONDS
from catalog_scraper.models import ConfigError
from catalog_scraper.runner import result_to_dict, run_scraper

logger = logging.getLogger(__name__)


def print_progress(event):
    counters = f" [{event.current}/{event.total}, found {event.found}]" if event.total else ""
    detail = f" - {event.detail}" if event.detail else ""
    print(f"  > {event.stage}{detail}{counters}", file=sys.stderr)


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Run a manufacturer scraper configuration")
    parser.add_argument(
        "config",
        help="Scraper config file (bare names are looked up in config/scrapers/)"
    )
    parser.add_argument(
        "--output", "-o",
        help="Output JSON file (default: stdout)"
    )
    parser.add_argument(
        "--max-runtime",
        type=float,
        default=None,
        help="Run budget in seconds (default: from config/defaults.yaml)"
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Print progress events to stderr"
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

    try:
        config = load_scraper_config(args.config, request_defaults=load_request_defaults())
    except (FileNotFoundError, ConfigError) as e:
        logger.error("Cannot load %s: %s", args.config, e)
        sys.exit(1)

    max_runtime = args.max_runtime or load_max_runtime(MAX_RUNTIME_SECONDS)
    reporter = ProgressReporter(callback=print_progress) if args.progress else ProgressReporter()

    results = run_scraper(config, reporter=reporter, max_runtime=max_runtime)
    payload = json.dumps([result_to_dict(r) for r in results], indent=2, ensure_ascii=False)

    if args.output:
        os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(payload + "\n")
    else:
        print(payload)

    print("\n" + "=" * 60, file=sys.stderr)
    print("Summary", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    print(f"  Config:      {args.config} ({config.type})", file=sys.stderr)
    print(f"  Results:     {len(results)}", file=sys.stderr)
    print(f"  Output file: {args.output or 'stdout'}", file=sys.stderr)
    print("=" * 60, file=sys.stderr)


if __name__ == "__main__":
    main()
