"""
HTTP Fetch Helpers

Single-request boundary for every outbound page fetch. Transient failures
(network error, non-2xx, timeout) are logged and returned as None so that
callers treat them as "no data from this source".
"""

import logging
from typing import Any, Dict, Optional

import requests

from .constants import BOT_USER_AGENT

logger = logging.getLogger(__name__)


def create_session(headers: Optional[Dict[str, str]] = None) -> requests.Session:
    """Create a session carrying the scraper's user agent plus extra headers."""
    session = requests.Session()
    session.headers.update({"User-Agent": BOT_USER_AGENT})
    if headers:
        session.headers.update(headers)
    return session


def safe_fetch(
    session: requests.Session,
    url: str,
    timeout: float,
    headers: Optional[Dict[str, str]] = None,
    quiet: bool = False,
) -> Optional[str]:
    """
    GET a URL and return its body text.

    Args:
        session: Session used for the request
        url: URL to fetch
        timeout: Per-request timeout in seconds
        headers: Extra headers for this request
        quiet: Log failures at debug instead of warning (for speculative probes)

    Returns:
        Response text, or None on any transient failure
    """
    log = logger.debug if quiet else logger.warning
    try:
        response = session.get(url, headers=headers, timeout=timeout, allow_redirects=True)
    except requests.RequestException as e:
        log("Fetch failed - %s: %s", url, e)
        return None

    if not response.ok:
        log("%s %s - %s", response.status_code, response.reason, url)
        return None

    return response.text


def safe_fetch_json(
    session: requests.Session,
    url: str,
    timeout: float,
    method: str = "GET",
    headers: Optional[Dict[str, str]] = None,
    body: Optional[str] = None,
    quiet: bool = False,
) -> Optional[Any]:
    """
    Request a URL and decode its JSON body.

    Returns:
        Decoded JSON, or None on network error, non-2xx or malformed JSON
    """
    log = logger.debug if quiet else logger.warning
    method = method.upper()
    try:
        if method == "POST":
            response = session.post(url, data=body, headers=headers, timeout=timeout)
        else:
            response = session.get(url, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        log("%s failed - %s: %s", method, url, e)
        return None

    if not response.ok:
        log("%s %s - %s", response.status_code, response.reason, url)
        return None

    try:
        return response.json()
    except ValueError as e:
        log("Invalid JSON from %s: %s", url, e)
        return None
