"""
Logging Configuration

All scraper output goes to stderr so the JSON results on stdout stay
machine-readable. HTTP client libraries are held at WARNING unless
verbose, otherwise every OpenAI request shows up as an INFO line.
"""

import logging
import sys

LOG_FORMAT = "%(levelname)-8s %(name)s: %(message)s"
CHATTY_LIBRARIES = ("urllib3", "httpx", "openai")


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Install the stderr handler on the catalog_scraper logger.

    Args:
        verbose: DEBUG for the scraper and its HTTP libraries
        quiet: WARNING only
    """
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger("catalog_scraper")
    logger.setLevel(level)
    # Repeated calls (tests, notebooks) must not stack handlers
    logger.handlers.clear()
    logger.addHandler(handler)

    for name in CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)
