"""
Pattern Extractor

Regex extraction primitives for raw listing and detail page HTML.
Patterns arrive precompiled from the scraper configuration; a pattern
that is None simply yields nothing.
"""

from typing import Dict, List, Optional, Pattern

from ..common.text_utils import strip_html


def first_match(html: str, pattern: Optional[Pattern]) -> Optional[str]:
    """Return the first capture group of the first match, as plain text."""
    if pattern is None or not html:
        return None
    match = pattern.search(html)
    if not match or match.group(1) is None:
        return None
    return strip_html(match.group(1)) or None


def all_matches(html: str, pattern: Optional[Pattern]) -> List[str]:
    """Return every distinct, non-empty first capture group in page order."""
    if pattern is None or not html:
        return []

    results: List[str] = []
    for match in pattern.finditer(html):
        value = (match.group(1) or "").strip()
        if value and value not in results:
            results.append(value)
    return results


def extract_spec_table(html: str, pattern: Optional[Pattern]) -> Dict[str, str]:
    """
    Build a specification map from a two-group row pattern.

    Group 1 is the key and group 2 the value; later rows with the same key
    overwrite earlier ones.
    """
    if pattern is None or not html:
        return {}

    specs: Dict[str, str] = {}
    for match in pattern.finditer(html):
        key = strip_html(match.group(1) or "")
        value = strip_html(match.group(2) or "")
        if key and value:
            specs[key] = value
    return specs
